from fastapi import FastAPI
import uvicorn
import logging
from contextlib import asynccontextmanager

from app.api.errors import setup_exception_handlers
from app.api.router import router
from app.config import settings
from app.core.database import db_manager
from app.core.logging import setup_logging


setup_logging(settings.LOG_LEVEL, log_file=settings.LOG_FILE)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Démarrage de l'application...")
    if settings.AUTO_CREATE_TABLES:
        db_manager.create_tables()
        logger.info("Tables créées")

    yield

    logger.info("Application arrêtée proprement")


app = FastAPI(
    title=settings.APP_NAME,
    description="Réconciliation et publication multi-clusters des templates de déploiement",
    version="1.0.0",
    lifespan=lifespan
)

setup_exception_handlers(app)
app.include_router(router)


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
