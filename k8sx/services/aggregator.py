"""Recherche multi-contextes / multi-namespaces.

Le parcours se fait en deux phases sur un pool de threads borné:

1. résolution des scopes, un contexte par tâche;
2. recherche, un scope (contexte, namespace) par tâche.

Chaque thread possède ses propres clients (cache thread-local par contexte).
Une erreur dans un contexte ou un scope est journalisée puis ignorée; seule une
erreur de précondition (requête invalide, kubeconfig illisible) fait échouer la
recherche. À l'échéance du budget de temps, les résultats déjà obtenus sont
renvoyés et les tâches en attente annulées.
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, List, Optional, Sequence, Union

from k8sx.core.deadline import Deadline
from k8sx.core.exceptions import (
    ClientConstructionError,
    InvalidQueryError,
    ScopeSearchError,
)
from k8sx.external.k8s_client import K8sClient, load_contexts
from k8sx.models.resources import PodScopedResult, Scope, ScopedResult
from k8sx.models.search import SearchOptions
from k8sx.services.matcher import is_ip_query
from k8sx.services.owner_resolver import enrich_pod
from k8sx.services.scope_resolver import ScopeResolver, normalize_names
from k8sx.services.search_service import ScopeSearcher

logger = logging.getLogger(__name__)

ClientBuilder = Callable[[str, Deadline], K8sClient]
AnyScopedResult = Union[ScopedResult, PodScopedResult]
ScopeSearch = Callable[[ScopeSearcher, Scope], AnyScopedResult]


class ThreadLocalClients:
    """Cache de clients par thread et par contexte"""

    def __init__(self, builder: ClientBuilder, deadline: Deadline):
        self._builder = builder
        self._deadline = deadline
        self._local = threading.local()
        self._lock = threading.Lock()
        self._created: List[K8sClient] = []

    def get(self, context: str) -> K8sClient:
        cache = getattr(self._local, "clients", None)
        if cache is None:
            cache = self._local.clients = {}
        if context not in cache:
            k8s_client = self._builder(context, self._deadline)
            cache[context] = k8s_client
            with self._lock:
                self._created.append(k8s_client)
        return cache[context]

    def close_all(self) -> None:
        with self._lock:
            created, self._created = self._created, []
        for k8s_client in created:
            k8s_client.close()


class SearchAggregator:
    def __init__(self, options: SearchOptions, client_builder: Optional[ClientBuilder] = None):
        self.options = options
        self.client_builder = client_builder or self._default_builder

    def _default_builder(self, context: str, deadline: Deadline) -> K8sClient:
        return K8sClient.from_kubeconfig(self.options.kubeconfig, context, deadline)

    def resolve_context_names(self, contexts: Optional[Sequence[str]] = None) -> List[str]:
        """Contextes à parcourir: ceux demandés et présents dans le kubeconfig, ou tous.

        Seul un kubeconfig illisible lève KubeconfigError; un contexte inconnu
        est ignoré comme un contexte injoignable.
        """
        available = [ctx.name for ctx in load_contexts(self.options.kubeconfig)]
        requested = normalize_names(contexts if contexts is not None else self.options.contexts)
        if not requested:
            return available
        known = []
        for context in requested:
            if context in available:
                known.append(context)
            else:
                logger.warning(f"Contexte {context} ignoré: introuvable dans le kubeconfig")
        return known

    def search_all_ip(
        self,
        ip: str,
        contexts: Optional[Sequence[str]] = None,
        namespaces: Optional[Sequence[str]] = None,
    ) -> List[ScopedResult]:
        """Pods et services correspondant à une IP dans tous les scopes accessibles"""
        if not is_ip_query(ip):
            raise InvalidQueryError(f"Adresse IP invalide: {ip}")

        def search(searcher: ScopeSearcher, scope: Scope) -> ScopedResult:
            pods, services = searcher.search_ip(scope.namespace, ip)
            return ScopedResult(context=scope.context, namespace=scope.namespace, pods=pods, services=services)

        return self._run(search, contexts, namespaces, f"IP {ip}")

    def search_all_name(
        self,
        name: str,
        contexts: Optional[Sequence[str]] = None,
        namespaces: Optional[Sequence[str]] = None,
    ) -> List[PodScopedResult]:
        """Pods dont le nom contient `name` dans tous les scopes accessibles"""
        if not name:
            raise InvalidQueryError("Le nom ne peut pas être vide")

        def search(searcher: ScopeSearcher, scope: Scope) -> PodScopedResult:
            pods = searcher.search_name(scope.namespace, name)
            return PodScopedResult(context=scope.context, namespace=scope.namespace, pods=pods)

        return self._run(search, contexts, namespaces, f"nom '{name}'")

    def _run(
        self,
        search: ScopeSearch,
        contexts: Optional[Sequence[str]],
        namespaces: Optional[Sequence[str]],
        label: str,
    ) -> List[Any]:
        context_names = self.resolve_context_names(contexts)
        explicit = normalize_names(namespaces if namespaces is not None else self.options.namespaces)
        deadline = Deadline(self.options.timeout)
        clients = ThreadLocalClients(self.client_builder, deadline)
        executor = ThreadPoolExecutor(
            max_workers=max(1, self.options.max_workers),
            thread_name_prefix="k8sx-search",
        )
        interrupted = False

        try:
            resolution = [
                executor.submit(self._resolve_context, clients, context, explicit)
                for context in context_names
            ]
            scope_lists, pending = self._collect(resolution, deadline)
            scopes = [scope for scope_list in scope_lists if scope_list for scope in scope_list]
            interrupted = pending > 0

            searches = [executor.submit(self._search_scope, clients, deadline, scope, search) for scope in scopes]
            results, pending = self._collect(searches, deadline)
            interrupted = interrupted or pending > 0
        finally:
            deadline.cancel()
            executor.shutdown(wait=not interrupted, cancel_futures=True)
            if not interrupted:
                clients.close_all()

        included = [result for result in results if result is not None]
        if interrupted:
            logger.warning(f"Budget de {self.options.timeout}s épuisé, résultats partiels pour {label}")
        logger.info(
            f"Recherche {label}: {len(context_names)} contexte(s), {len(scopes)} scope(s), "
            f"{len(included)} avec résultats"
        )
        return included

    def _collect(self, futures: List[Future], deadline: Deadline):
        """Résultats dans l'ordre de soumission; None pour les tâches échouées ou non terminées"""
        if not futures:
            return [], 0
        done, not_done = wait(futures, timeout=deadline.remaining())
        for future in not_done:
            future.cancel()

        results = []
        for future in futures:
            if future not in done:
                results.append(None)
                continue
            error = future.exception()
            if error is not None:
                logger.warning(f"Tâche de recherche en échec: {error}")
                results.append(None)
            else:
                results.append(future.result())
        return results, len(not_done)

    def _resolve_context(self, clients: ThreadLocalClients, context: str, explicit: List[str]) -> List[Scope]:
        try:
            k8s_client = clients.get(context)
        except ClientConstructionError as e:
            logger.warning(f"Contexte {context} ignoré: {e}")
            return []
        return ScopeResolver(clients.get).resolve_context(k8s_client, explicit)

    def _search_scope(
        self,
        clients: ThreadLocalClients,
        deadline: Deadline,
        scope: Scope,
        search: ScopeSearch,
    ) -> Optional[AnyScopedResult]:
        if deadline.expired():
            return None
        try:
            k8s_client = clients.get(scope.context)
            result = search(ScopeSearcher(k8s_client), scope)
        except (ClientConstructionError, ScopeSearchError) as e:
            logger.warning(f"Scope {scope} ignoré: {e}")
            return None

        if result.is_empty():
            return None
        if self.options.resolve_deployments:
            for pod in result.pods:
                enrich_pod(k8s_client, pod)
        return result
