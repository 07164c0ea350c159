from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional

from k8sx.api.schemas.k8s import (
    ContextResponse,
    DeploymentOwnerResponse,
    IpSearchResponse,
    NameSearchResponse,
    NamespaceAccessResponse,
    SearchResponse,
)
from k8sx.config import split_list
from k8sx.core.exceptions import (
    ClientConstructionError,
    InvalidQueryError,
    KubeconfigError,
    OwnerResolutionError,
    ScopeSearchError,
)
from k8sx.dependencies import get_k8s_service
from k8sx.services.k8s_service import K8sService

router = APIRouter(prefix="/k8s", tags=["kubernetes"])


def _run_search(call, *args):
    try:
        return call(*args)
    except InvalidQueryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except KubeconfigError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("/search", response_model=SearchResponse)
def search(
    q: str = Query(..., description="Adresse IP ou nom (partiel) de pod"),
    namespaces: Optional[str] = Query(None, description="Namespaces séparés par des virgules"),
    contexts: Optional[str] = Query(None, description="Contextes séparés par des virgules"),
    timeout: Optional[float] = Query(None, gt=0),
    k8s_service: K8sService = Depends(get_k8s_service)
):
    """Recherche par IP ou par nom, détectée automatiquement"""
    k8s_service.override_timeout(timeout)
    return _run_search(k8s_service.search, q, split_list(contexts) or None, split_list(namespaces) or None)


@router.get("/search/ip", response_model=IpSearchResponse)
def search_by_ip(
    ip: str,
    namespaces: Optional[str] = None,
    contexts: Optional[str] = None,
    timeout: Optional[float] = Query(None, gt=0),
    k8s_service: K8sService = Depends(get_k8s_service)
):
    """Recherche des pods et services par IP dans tous les contextes"""
    k8s_service.override_timeout(timeout)
    return _run_search(k8s_service.search_by_ip, ip, split_list(contexts) or None, split_list(namespaces) or None)


@router.get("/search/name", response_model=NameSearchResponse)
def search_by_name(
    name: str,
    namespaces: Optional[str] = None,
    contexts: Optional[str] = None,
    timeout: Optional[float] = Query(None, gt=0),
    k8s_service: K8sService = Depends(get_k8s_service)
):
    """Recherche des pods par nom partiel dans tous les contextes"""
    k8s_service.override_timeout(timeout)
    return _run_search(k8s_service.search_by_name, name, split_list(contexts) or None, split_list(namespaces) or None)


@router.get("/contexts", response_model=List[ContextResponse])
def get_contexts(k8s_service: K8sService = Depends(get_k8s_service)):
    """Récupère la liste des contextes du kubeconfig"""
    return _run_search(k8s_service.get_contexts)


@router.get("/namespaces", response_model=NamespaceAccessResponse)
def get_namespaces(
    context: Optional[str] = None,
    k8s_service: K8sService = Depends(get_k8s_service)
):
    """Namespaces d'un contexte et droits de listing des pods"""
    try:
        return _run_search(k8s_service.get_namespace_access, context)
    except (ClientConstructionError, ScopeSearchError) as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("/owners/deployment", response_model=DeploymentOwnerResponse)
def get_deployment_owner(
    context: str,
    namespace: str,
    replicaset: str,
    k8s_service: K8sService = Depends(get_k8s_service)
):
    """Retrouve le Deployment propriétaire d'un ReplicaSet"""
    try:
        return k8s_service.get_deployment_for_replicaset(context, namespace, replicaset)
    except OwnerResolutionError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ClientConstructionError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
