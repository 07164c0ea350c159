from typing import Any, Callable, Dict, List, Optional, Sequence
import logging

from k8sx.core.exceptions import ClientConstructionError
from k8sx.external.k8s_client import K8sClient, load_contexts
from k8sx.models.search import SearchOptions
from k8sx.services.aggregator import SearchAggregator
from k8sx.services.matcher import is_ip_query
from k8sx.services.namespace_service import NamespaceService
from k8sx.services.owner_resolver import resolve_deployment

logger = logging.getLogger(__name__)

MODE_IP = "ip"
MODE_NAME = "name"


class K8sService:
    def __init__(self, options: SearchOptions, aggregator: Optional[SearchAggregator] = None,
                 namespace_service: Optional[NamespaceService] = None,
                 client_factory: Optional[Callable[[str], K8sClient]] = None):
        self.options = options
        self.client_factory = client_factory or (lambda ctx: K8sClient.from_kubeconfig(options.kubeconfig, ctx))
        self.aggregator = aggregator or SearchAggregator(options)
        self.namespace_service = namespace_service or NamespaceService(options.kubeconfig, self.client_factory)

    def override_timeout(self, timeout: Optional[float]) -> "K8sService":
        """Budget de temps propre à une requête"""
        if timeout is not None:
            self.options = self.options.model_copy(update={"timeout": timeout})
            self.aggregator.options = self.aggregator.options.model_copy(update={"timeout": timeout})
        return self

    @staticmethod
    def detect_mode(query: str) -> str:
        """IP si la requête est une adresse valide, nom sinon"""
        return MODE_IP if is_ip_query(query) else MODE_NAME

    def search(self, query: str, contexts: Optional[Sequence[str]] = None,
               namespaces: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """Recherche automatique par IP ou par nom"""
        if self.detect_mode(query) == MODE_IP:
            logger.info(f"Adresse IP détectée, recherche par IP: {query}")
            return self.search_by_ip(query, contexts, namespaces)
        logger.info(f"Motif de nom détecté, recherche par nom: {query}")
        return self.search_by_name(query, contexts, namespaces)

    def search_by_ip(self, ip: str, contexts: Optional[Sequence[str]] = None,
                     namespaces: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """Recherche des pods et services par IP dans tous les contextes"""
        results = self.aggregator.search_all_ip(ip, contexts, namespaces)
        total_pods = sum(len(r.pods) for r in results)
        total_services = sum(len(r.services) for r in results)
        logger.info(f"IP {ip}: {total_pods} pod(s), {total_services} service(s) trouvés")
        return {
            "query": ip,
            "mode": MODE_IP,
            "results": [r.model_dump() for r in results],
            "total_pods": total_pods,
            "total_services": total_services,
            "scopes_with_results": len(results),
        }

    def search_by_name(self, name: str, contexts: Optional[Sequence[str]] = None,
                       namespaces: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """Recherche des pods par nom partiel dans tous les contextes"""
        results = self.aggregator.search_all_name(name, contexts, namespaces)
        total_pods = sum(len(r.pods) for r in results)
        logger.info(f"Nom '{name}': {total_pods} pod(s) trouvés")
        return {
            "query": name,
            "mode": MODE_NAME,
            "results": [r.model_dump() for r in results],
            "total_pods": total_pods,
            "total_services": 0,
            "scopes_with_results": len(results),
        }

    def get_contexts(self) -> List[Dict[str, Any]]:
        """Récupère la liste des contextes du kubeconfig"""
        contexts = load_contexts(self.options.kubeconfig)
        logger.info(f"Récupération de {len(contexts)} contextes")
        return [ctx.model_dump() for ctx in contexts]

    def get_namespace_access(self, context: Optional[str] = None) -> Dict[str, Any]:
        """Namespaces d'un contexte avec leur statut d'accès"""
        context = self.namespace_service.resolve_context(context or self.options.context)
        report = self.namespace_service.list_namespace_access(context)
        accessible = [ns.name for ns in report if ns.has_access]
        return {
            "context": context,
            "namespaces": [ns.model_dump() for ns in report],
            "total_count": len(report),
            "accessible_count": len(accessible),
            "denied_count": len(report) - len(accessible),
            "accessible": accessible,
        }

    def get_deployment_for_replicaset(self, context: str, namespace: str, replicaset: str) -> Dict[str, Any]:
        """Deployment propriétaire d'un ReplicaSet; lève OwnerResolutionError sinon"""
        try:
            k8s_client = self.client_factory(context)
        except ClientConstructionError:
            logger.error(f"Client indisponible pour le contexte {context}")
            raise
        try:
            deployment = resolve_deployment(k8s_client, namespace, replicaset)
        finally:
            k8s_client.close()
        return {
            "context": context,
            "namespace": namespace,
            "replicaset": replicaset,
            "deployment": deployment,
        }
