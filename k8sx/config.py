from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
import logging

from k8sx.models.search import SearchOptions

logger = logging.getLogger(__name__)

root_dir = Path(__file__).parent.parent
env_path = root_dir / ".env"
load_dotenv(env_path)


def default_kubeconfig() -> str:
    try:
        return str(Path.home() / ".kube" / "config")
    except RuntimeError:
        # Pas de HOME dans certains conteneurs
        return "/root/.kube/config"


def split_list(value: Optional[str]) -> List[str]:
    """'a, b,,c' -> ['a', 'b', 'c']"""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    # Kubernetes
    KUBECONFIG: str = default_kubeconfig()
    K8S_SEARCH_NAMESPACES: str = ""
    K8S_SEARCH_CONTEXTS: str = ""
    K8S_SEARCH_CONTEXT: str = ""

    # Recherche
    K8S_SEARCH_TIMEOUT: float = 120.0
    K8S_SEARCH_MAX_WORKERS: int = 8
    K8S_SEARCH_RESOLVE_DEPLOYMENTS: bool = True

    # Application
    APP_NAME: str = "k8sx"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    @property
    def search_namespaces(self) -> List[str]:
        return split_list(self.K8S_SEARCH_NAMESPACES)

    @property
    def search_contexts(self) -> List[str]:
        return split_list(self.K8S_SEARCH_CONTEXTS)

    def search_options(self, **overrides) -> SearchOptions:
        """Options explicites passées au moteur de recherche"""
        values = {
            "kubeconfig": self.KUBECONFIG,
            "contexts": self.search_contexts,
            "namespaces": self.search_namespaces,
            "timeout": self.K8S_SEARCH_TIMEOUT,
            "max_workers": self.K8S_SEARCH_MAX_WORKERS,
            "resolve_deployments": self.K8S_SEARCH_RESOLVE_DEPLOYMENTS,
            "context": self.K8S_SEARCH_CONTEXT or None,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return SearchOptions(**values)

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    logger.debug(f"Kubeconfig: {settings.KUBECONFIG}")
    return settings
