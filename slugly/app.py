import logging
import os
from logging.handlers import TimedRotatingFileHandler

import asyncpg
from fastapi import FastAPI

from slugly.controller import router

DATABASE_URL = os.getenv("DATABASE_URL")
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 5))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 20))
LOG_FILE = os.getenv("LOG_FILE", "/app/logs/app.log")

# Logging
os.makedirs(os.path.dirname(LOG_FILE) or ".", exist_ok=True)
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s - %(asctime)s - %(message)s",
    handlers=[
        logging.StreamHandler(),
        TimedRotatingFileHandler(
            filename=LOG_FILE,
            when="W0",
            interval=1,
            backupCount=4,
            encoding="utf-8",
        ),
    ],
)
logger = logging.getLogger(__name__)

# Set up app
app = FastAPI(title="Slugly - URL Shortener")
app.include_router(router)


# App lifecycle
@app.on_event("startup")
async def startup_event():
    app.state.db_pool = await asyncpg.create_pool(
        DATABASE_URL, min_size=DB_POOL_MIN_SIZE, max_size=DB_POOL_MAX_SIZE
    )
    logger.info("Application started, postgres database pool initialized")


@app.on_event("shutdown")
async def shutdown_event():
    await app.state.db_pool.close()
    logger.info("Application shut down, postgres database pool closed")
