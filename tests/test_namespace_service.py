"""Tests du rapport d'accès aux namespaces."""

from __future__ import annotations

import pytest

from conftest import server_error
from k8sx.core.exceptions import KubeconfigError, ScopeSearchError
from k8sx.services.namespace_service import PERMISSION_DENIED, NamespaceService


@pytest.fixture
def service(kubeconfig, client_builder) -> NamespaceService:
    return NamespaceService(kubeconfig, client_builder)


def test_defaults_to_current_context(service) -> None:
    assert service.resolve_context() == "alpha"
    assert service.resolve_context("beta") == "beta"


def test_no_current_context(tmp_path, client_builder) -> None:
    path = tmp_path / "config"
    path.write_text(
        "apiVersion: v1\nkind: Config\ncurrent-context: ''\nclusters: []\nusers: []\ncontexts: []\n"
    )
    with pytest.raises(KubeconfigError):
        NamespaceService(str(path), client_builder).resolve_context()


def test_access_report(service) -> None:
    report = service.list_namespace_access()
    assert [(ns.name, ns.has_access, ns.error) for ns in report] == [
        ("default", True, None),
        ("kube-system", False, PERMISSION_DENIED),
        ("payments", True, None),
    ]
    assert all(ns.status == "Active" for ns in report)


def test_probe_error_text(service, clusters) -> None:
    clusters["beta"].errors[("probe", "web-team")] = server_error()
    report = service.list_namespace_access("beta")
    denied = [ns for ns in report if not ns.has_access]
    assert [ns.name for ns in denied] == ["web-team"]
    assert "Internal Server Error" in denied[0].error


def test_namespace_listing_failure(service, clusters) -> None:
    clusters["alpha"].errors[("namespaces", None)] = server_error()
    with pytest.raises(ScopeSearchError):
        service.list_namespace_access("alpha")
