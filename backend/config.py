# config.py
# env-driven settings (webhook endpoint, device position, geolocation options)

import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() not in ["0", "false", "no"]


def _env_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return float(raw)


# search webhook (n8n flow behind it)
WEBHOOK_URL = os.getenv("CC_WEBHOOK_URL", "https://cultura-cerca.duckdns.org/webhook/cc-search")

# device position. unset -> geolocation reported as unsupported
DEVICE_LAT = _env_float("CC_DEVICE_LAT")
DEVICE_LNG = _env_float("CC_DEVICE_LNG")
# or a place name geocoded through nominatim
DEVICE_PLACE = os.getenv("CC_DEVICE_PLACE", "").strip()

# geolocation options (seconds)
GEO_TIMEOUT_S = float(os.getenv("GEO_TIMEOUT_S", "10"))
GEO_MAX_AGE_S = float(os.getenv("GEO_MAX_AGE_S", "300"))
GEO_HIGH_ACCURACY = _env_bool("GEO_HIGH_ACCURACY", "1")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS origins
FRONTEND_LOCAL = "http://localhost:5173"
FRONTEND_PROD = os.getenv("FRONTEND_PROD", "")

APP_HOST = os.getenv("APP_HOST", "127.0.0.1")
APP_PORT = int(os.getenv("APP_PORT", "8000"))
