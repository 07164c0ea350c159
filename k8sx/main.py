from fastapi import FastAPI
import uvicorn
import logging
from contextlib import asynccontextmanager

from k8sx import __version__
from k8sx.api.router import router
from k8sx.config import get_settings
from k8sx.core.logging import setup_logging

logger = logging.getLogger(__name__)

settings = get_settings()
setup_logging(settings.LOG_LEVEL)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Démarrage de l'application...")
    logger.info(f"Kubeconfig: {settings.KUBECONFIG}")
    logger.info(
        f"Budget de recherche: {settings.K8S_SEARCH_TIMEOUT}s, "
        f"{settings.K8S_SEARCH_MAX_WORKERS} worker(s)"
    )
    app.state.settings = settings

    yield

    logger.info("Application arrêtée proprement")

app = FastAPI(
    title="k8sx API",
    description="Recherche de pods et services par IP ou par nom dans tous les contextes Kubernetes",
    version=__version__,
    lifespan=lifespan
)

app.include_router(router)


def run(host: str = None, port: int = None, reload: bool = False) -> None:
    uvicorn.run(
        "k8sx.main:app",
        host=host or settings.API_HOST,
        port=port or settings.API_PORT,
        reload=reload,
    )


if __name__ == "__main__":
    logger.info(f"Documentation : http://localhost:{settings.API_PORT}/docs")
    run(reload=settings.DEBUG)
