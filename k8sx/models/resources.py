from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ServiceType(str, Enum):
    CLUSTER_IP = "ClusterIP"
    NODE_PORT = "NodePort"
    LOAD_BALANCER = "LoadBalancer"
    EXTERNAL_NAME = "ExternalName"


class ContextInfo(BaseModel):
    name: str
    is_current: bool = False
    cluster: Optional[str] = None
    user: Optional[str] = None
    namespace: Optional[str] = None


class Scope(BaseModel):
    """Couple (contexte, namespace) dans lequel on cherche"""
    context: str
    namespace: str

    def __str__(self) -> str:
        return f"{self.context}/{self.namespace}"


class PodInfo(BaseModel):
    name: str
    namespace: str
    pod_ip: str = ""
    host_ip: str = ""
    owner_kind: str = ""
    owner_name: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    # Renseigné par l'enrichissement ReplicaSet -> Deployment, None sinon
    deployment: Optional[str] = None


class ServicePortInfo(BaseModel):
    port: int
    target_port: str = ""
    protocol: str = "TCP"
    name: Optional[str] = None


class ServiceInfo(BaseModel):
    name: str
    namespace: str
    cluster_ip: str = ""
    external_ips: List[str] = Field(default_factory=list)
    load_balancer_ips: List[str] = Field(default_factory=list)
    # Valeur de ServiceType; gardée en str pour les types inconnus
    type: str = ServiceType.CLUSTER_IP.value
    ports: List[ServicePortInfo] = Field(default_factory=list)
    selector: Dict[str, str] = Field(default_factory=dict)


class ScopedResult(BaseModel):
    """Pods et services trouvés dans un seul couple (contexte, namespace)"""
    context: str
    namespace: str
    pods: List[PodInfo] = Field(default_factory=list)
    services: List[ServiceInfo] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.pods and not self.services


class PodScopedResult(BaseModel):
    context: str
    namespace: str
    pods: List[PodInfo] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.pods


class NamespaceAccess(BaseModel):
    name: str
    status: Optional[str] = None
    has_access: bool = False
    error: Optional[str] = None
