import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# External pricing backend (serves /api/service-configs/active)
# Leave unset to price everything from the built-in defaults
PRICING_API_BASE_URL = os.getenv("PRICING_API_BASE_URL", "").rstrip("/")

# External document backend (saved agreements, PDFs, approval status)
DOCUMENT_API_BASE_URL = os.getenv("DOCUMENT_API_BASE_URL", "").rstrip("/")

# Outbound HTTP timeout in seconds
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

# Contract length used when neither the service nor the agreement sets one
DEFAULT_CONTRACT_MONTHS = int(os.getenv("DEFAULT_CONTRACT_MONTHS", "12"))

# Rounding for visit counts of visit-based frequencies: round, floor or ceil
VISIT_ROUNDING = os.getenv("VISIT_ROUNDING", "round").lower()

# Redis cache for fetched pricing configs (optional, cache fails open)
REDIS_URL = os.getenv("REDIS_URL")
PRICING_CONFIG_CACHE_TTL = int(os.getenv("PRICING_CONFIG_CACHE_TTL", "300"))

# CORS
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
