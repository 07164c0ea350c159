from typing import Callable, List, Optional
import logging

from k8sx.core.exceptions import KubeconfigError, ScopeSearchError
from k8sx.external.k8s_client import K8sClient, get_current_context
from k8sx.models.resources import NamespaceAccess

logger = logging.getLogger(__name__)

PERMISSION_DENIED = "Permission Denied"


class NamespaceService:
    """Rapport d'accès aux namespaces d'un contexte"""

    def __init__(self, kubeconfig: str, client_factory: Optional[Callable[[str], K8sClient]] = None):
        self.kubeconfig = kubeconfig
        self.client_factory = client_factory or (lambda ctx: K8sClient.from_kubeconfig(kubeconfig, ctx))

    def resolve_context(self, context: Optional[str] = None) -> str:
        if context:
            return context
        current = get_current_context(self.kubeconfig)
        if not current:
            raise KubeconfigError("Aucun contexte courant défini dans le kubeconfig")
        return current

    def list_namespace_access(self, context: Optional[str] = None) -> List[NamespaceAccess]:
        """Liste les namespaces et indique ceux où l'on peut lister les pods"""
        context = self.resolve_context(context)
        k8s_client = self.client_factory(context)
        try:
            result = k8s_client.list_namespaces()
            if not result.ok:
                reason = PERMISSION_DENIED if result.is_forbidden else str(result.error)
                raise ScopeSearchError(context, None, f"Impossible de lister les namespaces: {reason}")

            report = []
            for ns in result.items:
                name = ns.metadata.name
                probe = k8s_client.can_list_pods(name)
                if probe.ok:
                    error = None
                elif probe.is_forbidden:
                    error = PERMISSION_DENIED
                else:
                    error = str(probe.error)
                report.append(
                    NamespaceAccess(
                        name=name,
                        status=getattr(ns.status, "phase", None),
                        has_access=probe.ok,
                        error=error,
                    )
                )
        finally:
            k8s_client.close()

        logger.info(
            f"[{context}] {sum(1 for ns in report if ns.has_access)}/{len(report)} namespace(s) accessible(s)"
        )
        return report
