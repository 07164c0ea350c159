from .resources import (
    ContextInfo,
    NamespaceAccess,
    PodInfo,
    PodScopedResult,
    Scope,
    ScopedResult,
    ServiceInfo,
    ServicePortInfo,
    ServiceType,
)
from .search import SearchOptions

__all__ = [
    "ContextInfo",
    "NamespaceAccess",
    "PodInfo",
    "PodScopedResult",
    "Scope",
    "ScopedResult",
    "SearchOptions",
    "ServiceInfo",
    "ServicePortInfo",
    "ServiceType",
]
