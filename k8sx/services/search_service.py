from typing import List, Tuple
import logging

from k8sx.core.exceptions import ScopeSearchError
from k8sx.external.k8s_client import K8sClient, ListResult, to_pod_info, to_service_info
from k8sx.models.resources import PodInfo, ServiceInfo
from k8sx.services.matcher import matches_ip, matches_name

logger = logging.getLogger(__name__)


class ScopeSearcher:
    """Recherche dans un seul namespace d'un contexte (lecture seule)"""

    def __init__(self, k8s_client: K8sClient):
        self.k8s_client = k8s_client

    @property
    def context(self) -> str:
        return self.k8s_client.context

    def _items(self, result: ListResult, kind: str, namespace: str) -> List:
        if result.ok:
            return result.items
        if result.is_forbidden:
            logger.debug(f"[{self.context}/{namespace}] {kind} ignorés: permission refusée")
            return []
        raise ScopeSearchError(
            self.context, namespace, f"Impossible de lister les {kind}: {result.error}"
        )

    def search_ip(self, namespace: str, ip: str) -> Tuple[List[PodInfo], List[ServiceInfo]]:
        """Pods (pod IP / host IP) et services (cluster IP, external IPs, LB) correspondant à l'IP"""
        pods = []
        for pod in self._items(self.k8s_client.list_pods(namespace), "pods", namespace):
            info = to_pod_info(pod)
            if matches_ip(info, ip):
                pods.append(info)

        services = []
        for svc in self._items(self.k8s_client.list_services(namespace), "services", namespace):
            info = to_service_info(svc)
            if matches_ip(info, ip):
                services.append(info)

        return pods, services

    def search_name(self, namespace: str, name: str) -> List[PodInfo]:
        """Pods dont le nom contient `name` (sensible à la casse)"""
        pods = []
        for pod in self._items(self.k8s_client.list_pods(namespace), "pods", namespace):
            info = to_pod_info(pod)
            if matches_name(info, name):
                pods.append(info)
        return pods
