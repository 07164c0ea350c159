from kubernetes import client, config
from kubernetes.client import ApiException
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any, Dict, List, Optional, Tuple

from k8sx.core.deadline import Deadline
from k8sx.core.exceptions import ClientConstructionError, KubeconfigError, ScopeSearchError
from k8sx.models.resources import ContextInfo, PodInfo, ServiceInfo, ServicePortInfo

logger = logging.getLogger(__name__)

PERMISSION_STATUSES = (401, 403)


class ResultStatus(str, Enum):
    OK = "ok"
    FORBIDDEN = "forbidden"
    ERROR = "error"


@dataclass
class ListResult:
    """Résultat d'un appel list: OK(items) | FORBIDDEN | ERROR(exc)"""
    status: ResultStatus
    items: List[Any] = field(default_factory=list)
    error: Optional[Exception] = None

    @classmethod
    def success(cls, items: List[Any]) -> "ListResult":
        return cls(ResultStatus.OK, list(items or []))

    @classmethod
    def forbidden(cls, error: Optional[Exception] = None) -> "ListResult":
        return cls(ResultStatus.FORBIDDEN, error=error)

    @classmethod
    def failed(cls, error: Exception) -> "ListResult":
        return cls(ResultStatus.ERROR, error=error)

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.OK

    @property
    def is_forbidden(self) -> bool:
        return self.status == ResultStatus.FORBIDDEN


def is_permission_error(error: Exception) -> bool:
    """Vrai pour une réponse 401 Unauthorized ou 403 Forbidden"""
    return isinstance(error, ApiException) and error.status in PERMISSION_STATUSES


def load_contexts(kubeconfig: str) -> List[ContextInfo]:
    """Liste les contextes du kubeconfig, dans l'ordre du fichier"""
    try:
        contexts, active = config.list_kube_config_contexts(config_file=kubeconfig)
    except Exception as e:
        raise KubeconfigError(f"Impossible de charger le kubeconfig {kubeconfig}: {e}") from e

    current = (active or {}).get("name")
    result = []
    for ctx in contexts or []:
        details = ctx.get("context") or {}
        result.append(
            ContextInfo(
                name=ctx["name"],
                is_current=ctx["name"] == current,
                cluster=details.get("cluster"),
                user=details.get("user"),
                namespace=details.get("namespace"),
            )
        )
    return result


def get_current_context(kubeconfig: str) -> Optional[str]:
    for ctx in load_contexts(kubeconfig):
        if ctx.is_current:
            return ctx.name
    return None


class K8sClient:
    """Client lecture seule lié à un seul contexte du kubeconfig.

    Un client ne doit jamais être partagé entre deux threads: chaque worker
    construit le sien via `from_kubeconfig`.
    """

    def __init__(self, context: str, api_client: Any = None, deadline: Optional[Deadline] = None):
        self.context = context
        self.api_client = api_client
        self.deadline = deadline
        self.v1 = client.CoreV1Api(api_client)
        self.apps_v1 = client.AppsV1Api(api_client)

    @classmethod
    def from_kubeconfig(cls, kubeconfig: str, context: str, deadline: Optional[Deadline] = None) -> "K8sClient":
        try:
            api_client = config.new_client_from_config(
                config_file=kubeconfig,
                context=context,
                persist_config=False,
            )
        except Exception as e:
            raise ClientConstructionError(context, e) from e
        return cls(context, api_client, deadline)

    def _call_kwargs(self) -> Dict[str, Any]:
        if self.deadline is None:
            return {}
        if self.deadline.expired():
            raise TimeoutError("budget de temps de la recherche épuisé")
        timeout = self.deadline.request_timeout()
        return {"_request_timeout": timeout} if timeout is not None else {}

    def _list(self, what: str, call, **kwargs) -> ListResult:
        try:
            response = call(**kwargs, **self._call_kwargs())
        except ApiException as e:
            if is_permission_error(e):
                logger.debug(f"[{self.context}] Accès refusé pour {what}: {e.status} {e.reason}")
                return ListResult.forbidden(e)
            return ListResult.failed(e)
        except Exception as e:
            return ListResult.failed(e)
        return ListResult.success(response.items)

    def list_namespaces(self) -> ListResult:
        """Récupère la liste des namespaces"""
        return self._list("namespaces", self.v1.list_namespace)

    def list_pods(self, namespace: str, limit: Optional[int] = None) -> ListResult:
        """Récupère la liste des pods d'un namespace"""
        kwargs: Dict[str, Any] = {"namespace": namespace}
        if limit is not None:
            kwargs["limit"] = limit
        return self._list(f"pods/{namespace}", self.v1.list_namespaced_pod, **kwargs)

    def list_services(self, namespace: str) -> ListResult:
        """Récupère la liste des services d'un namespace"""
        return self._list(f"services/{namespace}", self.v1.list_namespaced_service, namespace=namespace)

    def get_replicaset(self, namespace: str, name: str) -> Any:
        """Lit un ReplicaSet; lève ApiException (404 si absent)"""
        return self.apps_v1.read_namespaced_replica_set(name=name, namespace=namespace, **self._call_kwargs())

    def namespace_names(self) -> List[str]:
        """Noms des namespaces dans l'ordre de l'API; lève ScopeSearchError en cas d'échec"""
        result = self.list_namespaces()
        if not result.ok:
            reason = "accès refusé" if result.is_forbidden else str(result.error)
            raise ScopeSearchError(self.context, None, f"Impossible de lister les namespaces: {reason}")
        return [ns.metadata.name for ns in result.items]

    def can_list_pods(self, namespace: str) -> ListResult:
        """Sonde d'accès: liste un seul pod"""
        return self.list_pods(namespace, limit=1)

    def close(self) -> None:
        if self.api_client is not None:
            try:
                self.api_client.close()
            except Exception as e:
                logger.debug(f"[{self.context}] Fermeture du client: {e}")


def get_owner_info(obj: Any) -> Tuple[str, str]:
    """Kind et nom de la première owner reference, chaînes vides sinon"""
    owners = getattr(obj.metadata, "owner_references", None) or []
    if not owners:
        return "", ""
    return owners[0].kind or "", owners[0].name or ""


def format_target_port(target_port: Any) -> str:
    """Port cible numérique ou nommé, rendu en texte"""
    if target_port is None:
        return ""
    return str(target_port)


def to_pod_info(pod: Any) -> PodInfo:
    status = pod.status
    owner_kind, owner_name = get_owner_info(pod)
    return PodInfo(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace or "",
        pod_ip=getattr(status, "pod_ip", None) or "",
        host_ip=getattr(status, "host_ip", None) or "",
        owner_kind=owner_kind,
        owner_name=owner_name,
        labels=pod.metadata.labels or {},
        annotations=pod.metadata.annotations or {},
    )


def external_ips(spec: Any) -> List[str]:
    # Le champ s'appelle external_i_ps dans les anciennes versions du client
    return getattr(spec, "external_ips", None) or getattr(spec, "external_i_ps", None) or []


def to_service_info(svc: Any) -> ServiceInfo:
    spec = svc.spec
    load_balancer = getattr(getattr(svc, "status", None), "load_balancer", None)
    ingress = getattr(load_balancer, "ingress", None) or []
    return ServiceInfo(
        name=svc.metadata.name,
        namespace=svc.metadata.namespace or "",
        cluster_ip=getattr(spec, "cluster_ip", None) or "",
        external_ips=list(external_ips(spec)),
        load_balancer_ips=[i.ip for i in ingress if getattr(i, "ip", None)],
        type=getattr(spec, "type", None) or "ClusterIP",
        ports=[
            ServicePortInfo(
                port=port.port,
                target_port=format_target_port(port.target_port),
                protocol=port.protocol or "TCP",
                name=port.name,
            )
            for port in (getattr(spec, "ports", None) or [])
        ],
        selector=getattr(spec, "selector", None) or {},
    )
