from pydantic import BaseModel
from typing import List, Literal, Optional, Union

from k8sx.models.resources import ContextInfo, NamespaceAccess, PodScopedResult, ScopedResult

class ContextResponse(ContextInfo):
    pass

class IpSearchResponse(BaseModel):
    query: str
    mode: Literal["ip"]
    results: List[ScopedResult]
    total_pods: int
    total_services: int
    scopes_with_results: int

class NameSearchResponse(BaseModel):
    query: str
    mode: Literal["name"]
    results: List[PodScopedResult]
    total_pods: int
    total_services: int = 0
    scopes_with_results: int

# Le champ mode désigne le modèle: les résultats par nom n'ont pas de services
SearchResponse = Union[IpSearchResponse, NameSearchResponse]

class NamespaceAccessResponse(BaseModel):
    context: str
    namespaces: List[NamespaceAccess]
    total_count: int
    accessible_count: int
    denied_count: int
    accessible: List[str]

class DeploymentOwnerResponse(BaseModel):
    context: str
    namespace: str
    replicaset: str
    deployment: Optional[str]
