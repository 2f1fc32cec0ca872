import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from routers import okr as okr_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="OKR Insights")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(okr_router.router, prefix="/api")

logger.info("OKR Insights started (timezone=%s)", config.TIMEZONE)


# --- API Endpoints ---
@app.get("/")
def read_root():
    return {"status": "OKR Insights is running!"}
