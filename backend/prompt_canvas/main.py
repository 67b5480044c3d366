from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import time
from sqlalchemy.exc import OperationalError

from prompt_canvas.api.routes import router
from prompt_canvas.config import CORS_ORIGINS, LOG_LEVEL
from prompt_canvas.db.session import engine
from prompt_canvas.db.models import Base

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Prompt Canvas",
    version="0.1.0",
)

# Middleware before routes
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.on_event("startup")
def startup():
    retries = 5
    delay = 2

    for attempt in range(retries):
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("Snapshot database ready")
            return
        except OperationalError:
            logger.info("Waiting for database... (%d/%d)", attempt + 1, retries)
            time.sleep(delay)

    # keep serving; snapshots fall back to the default workspace
    logger.warning("Database not ready, running without persistence")
