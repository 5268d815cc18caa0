import logging

from fastapi import FastAPI

from config import LOG_FILE, LOG_FORMAT, LOG_LEVEL
from routes.forecast import router as forecast_router
from routes.trends import router as trends_router

# -----------------------------
# Logging
# -----------------------------
logging.basicConfig(
    filename=LOG_FILE,
    level=LOG_LEVEL,
    format=LOG_FORMAT
)

app = FastAPI(title="Family Finance Forecast")
app.include_router(forecast_router)
app.include_router(trends_router)


@app.get("/health")
def health():
    return {"status": "ok"}
