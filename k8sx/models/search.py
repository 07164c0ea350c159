from typing import List, Optional

from pydantic import BaseModel, Field


class SearchOptions(BaseModel):
    """Configuration explicite d'une recherche, construite par l'appelant (API ou CLI)"""
    kubeconfig: str
    contexts: List[str] = Field(default_factory=list)
    namespaces: List[str] = Field(default_factory=list)
    timeout: float = 120.0
    max_workers: int = 8
    resolve_deployments: bool = True
    # Contexte utilisé par le rapport d'accès aux namespaces (vide = contexte courant)
    context: Optional[str] = None
