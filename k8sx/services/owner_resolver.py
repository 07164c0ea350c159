from typing import Optional
from kubernetes.client import ApiException
import logging

from k8sx.core.exceptions import (
    NoDeploymentError,
    NoOwnerError,
    OwnerResolutionError,
    ReplicaSetNotFoundError,
)
from k8sx.external.k8s_client import K8sClient
from k8sx.models.resources import PodInfo

logger = logging.getLogger(__name__)

REPLICASET_KIND = "ReplicaSet"
DEPLOYMENT_KIND = "Deployment"


def resolve_deployment(k8s_client: K8sClient, namespace: str, replicaset_name: str) -> str:
    """Retrouve le Deployment propriétaire d'un ReplicaSet.

    Raises:
        ReplicaSetNotFoundError: le ReplicaSet n'existe pas
        NoOwnerError: le ReplicaSet n'a aucune owner reference
        NoDeploymentError: aucune owner reference de kind Deployment
        OwnerResolutionError: toute autre erreur d'API
    """
    try:
        rs = k8s_client.get_replicaset(namespace, replicaset_name)
    except ApiException as e:
        if e.status == 404:
            raise ReplicaSetNotFoundError(
                f"ReplicaSet {namespace}/{replicaset_name} introuvable"
            ) from e
        raise OwnerResolutionError(
            f"Impossible de lire le ReplicaSet {namespace}/{replicaset_name}: {e.status} {e.reason}"
        ) from e
    except Exception as e:
        raise OwnerResolutionError(
            f"Impossible de lire le ReplicaSet {namespace}/{replicaset_name}: {e}"
        ) from e

    owners = getattr(rs.metadata, "owner_references", None) or []
    if not owners:
        raise NoOwnerError(f"Le ReplicaSet {namespace}/{replicaset_name} n'a pas de propriétaire")

    for owner in owners:
        if owner.kind == DEPLOYMENT_KIND:
            return owner.name

    raise NoDeploymentError(f"Aucun Deployment trouvé pour le ReplicaSet {namespace}/{replicaset_name}")


def try_resolve_deployment(k8s_client: K8sClient, namespace: str, replicaset_name: str) -> Optional[str]:
    """Version best-effort: None si la résolution échoue"""
    try:
        return resolve_deployment(k8s_client, namespace, replicaset_name)
    except OwnerResolutionError as e:
        logger.debug(f"[{k8s_client.context}] {e}")
        return None


def enrich_pod(k8s_client: K8sClient, pod: PodInfo) -> PodInfo:
    """Renseigne pod.deployment quand le pod appartient à un ReplicaSet"""
    if pod.owner_kind != REPLICASET_KIND or not pod.owner_name:
        return pod
    pod.deployment = try_resolve_deployment(k8s_client, pod.namespace, pod.owner_name)
    return pod
