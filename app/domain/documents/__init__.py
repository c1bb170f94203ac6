"""Documents domain - saved agreements held by the external document backend"""

from .router import router

__all__ = ["router"]
