from typing import Optional


class K8sxError(Exception):
    """Erreur de base de k8sx"""


class InvalidQueryError(K8sxError):
    """Requête de recherche invalide (IP mal formée, nom vide)"""


class KubeconfigError(K8sxError):
    """Kubeconfig illisible, invalide ou contexte inconnu"""


class ClientConstructionError(K8sxError):
    """Impossible de construire un client pour un contexte"""

    def __init__(self, context: str, cause: Exception):
        super().__init__(f"Impossible de créer le client pour le contexte {context}: {cause}")
        self.context = context
        self.cause = cause


class ScopeSearchError(K8sxError):
    """Erreur non liée aux permissions lors de la recherche dans un scope"""

    def __init__(self, context: str, namespace: Optional[str], message: str):
        location = f"{context}/{namespace}" if namespace else context
        super().__init__(f"[{location}] {message}")
        self.context = context
        self.namespace = namespace


class OwnerResolutionError(K8sxError):
    """Résolution du propriétaire impossible"""


class ReplicaSetNotFoundError(OwnerResolutionError):
    pass


class NoOwnerError(OwnerResolutionError):
    pass


class NoDeploymentError(OwnerResolutionError):
    pass
