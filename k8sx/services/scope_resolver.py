from typing import Callable, Iterable, List, Optional
import logging

from k8sx.core.exceptions import ClientConstructionError, ScopeSearchError
from k8sx.external.k8s_client import K8sClient
from k8sx.models.resources import Scope

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], K8sClient]


def normalize_names(names: Optional[Iterable[str]]) -> List[str]:
    """Supprime les entrées vides et les doublons en gardant l'ordre"""
    cleaned = [name.strip() for name in (names or []) if name and name.strip()]
    return list(dict.fromkeys(cleaned))


def accessible_namespaces(k8s_client: K8sClient, namespaces: Iterable[str]) -> List[str]:
    """Namespaces dans lesquels la sonde `list pods limit=1` réussit"""
    accessible = []
    for namespace in namespaces:
        probe = k8s_client.can_list_pods(namespace)
        if probe.ok:
            accessible.append(namespace)
        else:
            logger.debug(f"[{k8s_client.context}/{namespace}] Namespace ignoré: {probe.status.value}")
    return accessible


class ScopeResolver:
    """Construit la liste ordonnée des couples (contexte, namespace) à parcourir"""

    def __init__(self, client_factory: ClientFactory):
        self.client_factory = client_factory

    def resolve_context(self, k8s_client: K8sClient, explicit_namespaces: Optional[List[str]] = None) -> List[Scope]:
        """Scopes d'un seul contexte, avec découverte des namespaces accessibles si aucune liste n'est fournie"""
        context = k8s_client.context
        namespaces = normalize_names(explicit_namespaces)
        if namespaces:
            return [Scope(context=context, namespace=ns) for ns in namespaces]

        try:
            all_namespaces = k8s_client.namespace_names()
        except ScopeSearchError as e:
            logger.warning(f"Contexte {context} ignoré: {e}")
            return []

        accessible = accessible_namespaces(k8s_client, all_namespaces)
        logger.info(
            f"[{context}] {len(accessible)}/{len(all_namespaces)} namespace(s) accessible(s)"
        )
        return [Scope(context=context, namespace=ns) for ns in accessible]

    def resolve(self, contexts: List[str], explicit_namespaces: Optional[List[str]] = None) -> List[Scope]:
        """Version séquentielle: contextes dans l'ordre donné, namespaces dans l'ordre de l'API"""
        scopes = []
        for context in contexts:
            try:
                k8s_client = self.client_factory(context)
            except ClientConstructionError as e:
                logger.warning(f"Contexte {context} ignoré: {e}")
                continue
            try:
                scopes.extend(self.resolve_context(k8s_client, explicit_namespaces))
            finally:
                k8s_client.close()
        return scopes
