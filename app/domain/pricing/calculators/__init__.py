"""One pricing calculator per service card"""
