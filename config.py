import os

# -----------------------------
# Logging
# -----------------------------
LOG_LEVEL = os.getenv("FORECAST_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("FORECAST_LOG_FILE")  # None logs to stderr
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

# -----------------------------
# Forecast service
# -----------------------------
CACHE_TTL_SECONDS = int(os.getenv("FORECAST_CACHE_TTL_SECONDS", "300"))
CACHE_MAX_ENTRIES = int(os.getenv("FORECAST_CACHE_MAX_ENTRIES", "256"))
HISTORY_WINDOW_DAYS = int(os.getenv("FORECAST_HISTORY_WINDOW_DAYS", "90"))
MAX_FORECAST_DAYS = int(os.getenv("FORECAST_MAX_DAYS", "366"))

# Used when the caller supplies no settings of its own
DEFAULT_MINIMUM_SAFE_BALANCE = float(os.getenv("FORECAST_DEFAULT_MINIMUM_SAFE_BALANCE", "1000"))
DEFAULT_SAFETY_BUFFER_DAYS = int(os.getenv("FORECAST_DEFAULT_SAFETY_BUFFER_DAYS", "7"))

CURRENCY_SYMBOL = os.getenv("FORECAST_CURRENCY_SYMBOL", "₴")
