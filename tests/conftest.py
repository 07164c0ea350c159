"""Faux cluster Kubernetes et fixtures communes."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest
from kubernetes.client import (
    ApiException,
    V1LoadBalancerIngress,
    V1LoadBalancerStatus,
    V1Namespace,
    V1NamespaceList,
    V1NamespaceStatus,
    V1ObjectMeta,
    V1OwnerReference,
    V1Pod,
    V1PodList,
    V1PodStatus,
    V1ReplicaSet,
    V1Service,
    V1ServiceList,
    V1ServicePort,
    V1ServiceSpec,
    V1ServiceStatus,
)

from k8sx.core.deadline import Deadline
from k8sx.core.exceptions import ClientConstructionError
from k8sx.external.k8s_client import K8sClient
from k8sx.models.search import SearchOptions

KUBECONFIG_TEMPLATE = """\
apiVersion: v1
kind: Config
current-context: alpha
clusters:
- name: alpha-cluster
  cluster:
    server: https://alpha.example.invalid:6443
- name: beta-cluster
  cluster:
    server: https://beta.example.invalid:6443
- name: gamma-cluster
  cluster:
    server: https://gamma.example.invalid:6443
users:
- name: alpha-user
  user:
    token: alpha-token
- name: beta-user
  user:
    token: beta-token
- name: gamma-user
  user:
    token: gamma-token
contexts:
- name: alpha
  context:
    cluster: alpha-cluster
    user: alpha-user
    namespace: default
- name: beta
  context:
    cluster: beta-cluster
    user: beta-user
- name: gamma
  context:
    cluster: gamma-cluster
    user: gamma-user
"""


# Nom du champ selon la version installée du client kubernetes
EXTERNAL_IPS_FIELD = "external_ips" if "external_ips" in V1ServiceSpec.attribute_map else "external_i_ps"


def owner(kind: str, name: str) -> V1OwnerReference:
    return V1OwnerReference(api_version="apps/v1", kind=kind, name=name, uid=f"uid-{name}")


def make_pod(name: str, namespace: str, pod_ip: Optional[str] = None, host_ip: Optional[str] = None,
             owner_kind: Optional[str] = None, owner_name: Optional[str] = None,
             labels: Optional[Dict[str, str]] = None) -> V1Pod:
    owners = [owner(owner_kind, owner_name)] if owner_kind else None
    return V1Pod(
        metadata=V1ObjectMeta(name=name, namespace=namespace, labels=labels, owner_references=owners),
        status=V1PodStatus(pod_ip=pod_ip, host_ip=host_ip),
    )


def make_service(name: str, namespace: str, cluster_ip: Optional[str] = None,
                 external_ips: Optional[List[str]] = None, lb_ips: Optional[List[str]] = None,
                 type: str = "ClusterIP", ports: Optional[List[Tuple[int, Any]]] = None) -> V1Service:
    ingress = [V1LoadBalancerIngress(ip=ip) for ip in lb_ips] if lb_ips else None
    return V1Service(
        metadata=V1ObjectMeta(name=name, namespace=namespace),
        spec=V1ServiceSpec(
            cluster_ip=cluster_ip,
            **{EXTERNAL_IPS_FIELD: external_ips},
            type=type,
            ports=[V1ServicePort(port=p, target_port=t, protocol="TCP") for p, t in (ports or [])],
            selector={"app": name},
        ),
        status=V1ServiceStatus(load_balancer=V1LoadBalancerStatus(ingress=ingress)),
    )


def make_replicaset(name: str, namespace: str, owners: Optional[List[V1OwnerReference]] = None) -> V1ReplicaSet:
    return V1ReplicaSet(metadata=V1ObjectMeta(name=name, namespace=namespace, owner_references=owners))


def forbidden() -> ApiException:
    return ApiException(status=403, reason="Forbidden")


def server_error() -> ApiException:
    return ApiException(status=500, reason="Internal Server Error")


@dataclass
class FakeCluster:
    """Contenu d'un cluster: namespaces ordonnés, objets et erreurs injectées"""
    namespaces: List[str] = field(default_factory=list)
    pods: Dict[str, List[V1Pod]] = field(default_factory=dict)
    services: Dict[str, List[V1Service]] = field(default_factory=dict)
    replicasets: Dict[Tuple[str, str], V1ReplicaSet] = field(default_factory=dict)
    # (kind, namespace) -> exception; kind parmi namespaces, pods, services, probe
    errors: Dict[Tuple[str, Optional[str]], Exception] = field(default_factory=dict)
    # namespace -> secondes de blocage lors du listing des pods
    delays: Dict[str, float] = field(default_factory=dict)
    release: threading.Event = field(default_factory=threading.Event)
    calls: List[Tuple[str, Optional[str]]] = field(default_factory=list)

    def _fail(self, kind: str, namespace: Optional[str]) -> None:
        self.calls.append((kind, namespace))
        error = self.errors.get((kind, namespace))
        if error is not None:
            raise error


class FakeCoreV1:
    def __init__(self, cluster: FakeCluster):
        self.cluster = cluster

    def list_namespace(self, **kwargs):
        self.cluster._fail("namespaces", None)
        return V1NamespaceList(
            items=[
                V1Namespace(metadata=V1ObjectMeta(name=ns), status=V1NamespaceStatus(phase="Active"))
                for ns in self.cluster.namespaces
            ]
        )

    def list_namespaced_pod(self, namespace, limit=None, **kwargs):
        if limit is not None:
            self.cluster._fail("probe", namespace)
        self.cluster._fail("pods", namespace)
        delay = self.cluster.delays.get(namespace)
        if delay and limit is None:
            self.cluster.release.wait(delay)
        items = self.cluster.pods.get(namespace, [])
        return V1PodList(items=items[:limit] if limit is not None else items)

    def list_namespaced_service(self, namespace, **kwargs):
        self.cluster._fail("services", namespace)
        return V1ServiceList(items=self.cluster.services.get(namespace, []))


class FakeAppsV1:
    def __init__(self, cluster: FakeCluster):
        self.cluster = cluster

    def read_namespaced_replica_set(self, name, namespace, **kwargs):
        self.cluster._fail("replicasets", namespace)
        rs = self.cluster.replicasets.get((namespace, name))
        if rs is None:
            raise ApiException(status=404, reason="Not Found")
        return rs


def make_client(context: str, cluster: FakeCluster, deadline: Optional[Deadline] = None) -> K8sClient:
    k8s_client = K8sClient(context, api_client=MagicMock(), deadline=deadline)
    k8s_client.v1 = FakeCoreV1(cluster)
    k8s_client.apps_v1 = FakeAppsV1(cluster)
    return k8s_client


class FakeClientBuilder:
    """Construit des clients sur les faux clusters; contexte absent = échec de construction"""

    def __init__(self, clusters: Dict[str, FakeCluster]):
        self.clusters = clusters
        self.built: List[K8sClient] = []
        self.lock = threading.Lock()

    def __call__(self, context: str, deadline: Optional[Deadline] = None) -> K8sClient:
        if context not in self.clusters:
            raise ClientConstructionError(context, RuntimeError("identifiants expirés"))
        k8s_client = make_client(context, self.clusters[context], deadline)
        with self.lock:
            self.built.append(k8s_client)
        return k8s_client


@pytest.fixture
def kubeconfig(tmp_path) -> str:
    path = tmp_path / "config"
    path.write_text(KUBECONFIG_TEMPLATE)
    return str(path)


@pytest.fixture
def alpha_cluster() -> FakeCluster:
    """default: un pod web (RS -> Deployment) et un service LB; kube-system interdit"""
    return FakeCluster(
        namespaces=["default", "kube-system", "payments"],
        pods={
            "default": [
                make_pod("web-7d9f-abcde", "default", "10.0.0.5", "192.168.1.10", "ReplicaSet", "web-7d9f"),
                make_pod("worker-0", "default", "10.0.0.6", "192.168.1.10", "StatefulSet", "worker"),
            ],
            "payments": [
                make_pod("payments-api-1", "payments", "10.0.1.7", "192.168.1.11"),
            ],
        },
        services={
            "default": [
                make_service("web", "default", "10.96.0.10", external_ips=["203.0.113.5"],
                             lb_ips=["198.51.100.7"], type="LoadBalancer", ports=[(80, 8080)]),
                make_service("internal", "default", "10.96.0.11", lb_ips=["198.51.100.8"], ports=[(443, "https")]),
            ],
        },
        replicasets={
            ("default", "web-7d9f"): make_replicaset("web-7d9f", "default", [owner("Deployment", "web")]),
        },
        errors={
            ("probe", "kube-system"): forbidden(),
            ("pods", "kube-system"): forbidden(),
            ("services", "kube-system"): forbidden(),
        },
    )


@pytest.fixture
def beta_cluster() -> FakeCluster:
    return FakeCluster(
        namespaces=["default", "web-team"],
        pods={
            "default": [make_pod("web-canary", "default", "10.1.0.5", "192.168.2.10")],
            "web-team": [make_pod("frontend", "web-team", "10.0.0.5", "192.168.2.11")],
        },
    )


@pytest.fixture
def clusters(alpha_cluster, beta_cluster) -> Dict[str, FakeCluster]:
    # gamma absent: la construction du client échoue
    return {"alpha": alpha_cluster, "beta": beta_cluster}


@pytest.fixture
def client_builder(clusters) -> FakeClientBuilder:
    return FakeClientBuilder(clusters)


@pytest.fixture
def options(kubeconfig) -> SearchOptions:
    return SearchOptions(kubeconfig=kubeconfig, timeout=10.0, max_workers=4)
