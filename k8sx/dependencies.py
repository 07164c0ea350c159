from fastapi import Depends

from k8sx.config import Settings, get_settings
from k8sx.models.search import SearchOptions
from k8sx.services.k8s_service import K8sService


# === OPTIONS ===
def get_search_options(settings: Settings = Depends(get_settings)) -> SearchOptions:
    """Options de recherche par défaut, issues des variables d'environnement"""
    return settings.search_options()


# === SERVICES ===
def get_k8s_service(options: SearchOptions = Depends(get_search_options)) -> K8sService:
    """Factory pour le service de recherche; une instance par requête, aucun état partagé"""
    return K8sService(options)
