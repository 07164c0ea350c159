"""Tests de la détection IP/nom et des correspondances."""

from __future__ import annotations

import pytest

from k8sx.models.resources import PodInfo, ServiceInfo
from k8sx.services.matcher import is_ip_query, matches_ip, matches_name


class TestIsIpQuery:
    @pytest.mark.parametrize(
        "query",
        ["10.0.0.5", "0.0.0.0", "255.255.255.255", "::1", "fd00::10", "2001:db8::1", "::ffff:10.0.0.1"],
    )
    def test_ip_literals(self, query: str) -> None:
        assert is_ip_query(query) is True

    @pytest.mark.parametrize(
        "query",
        ["", "nginx", "10.0.0", "10.0.0.256", "10.0.0.5/24", " 10.0.0.5", "10.0.0.5 ", "fe80::1%eth0", "web-10.0.0.5"],
    )
    def test_non_ip(self, query: str) -> None:
        assert is_ip_query(query) is False


class TestMatchesIp:
    def test_pod_ip_and_host_ip(self) -> None:
        pod = PodInfo(name="web", namespace="default", pod_ip="10.0.0.5", host_ip="192.168.1.10")
        assert matches_ip(pod, "10.0.0.5")
        assert matches_ip(pod, "192.168.1.10")
        assert not matches_ip(pod, "10.0.0.50")

    def test_pod_without_ip_never_matches_empty_query(self) -> None:
        pod = PodInfo(name="pending", namespace="default")
        assert not matches_ip(pod, "")

    def test_service_cluster_and_external_ips(self) -> None:
        svc = ServiceInfo(name="web", namespace="default", cluster_ip="10.96.0.10", external_ips=["203.0.113.5"])
        assert matches_ip(svc, "10.96.0.10")
        assert matches_ip(svc, "203.0.113.5")
        assert not matches_ip(svc, "10.96.0.1")

    def test_load_balancer_ip_only_for_load_balancer_services(self) -> None:
        lb = ServiceInfo(name="web", namespace="default", type="LoadBalancer", load_balancer_ips=["198.51.100.7"])
        cluster_ip = ServiceInfo(name="web", namespace="default", type="ClusterIP", load_balancer_ips=["198.51.100.7"])
        assert matches_ip(lb, "198.51.100.7")
        assert not matches_ip(cluster_ip, "198.51.100.7")

    def test_exact_match_only(self) -> None:
        pod = PodInfo(name="web", namespace="default", pod_ip="10.0.0.5")
        assert not matches_ip(pod, "10.0.0.0/24")
        assert not matches_ip(pod, "10.0.0")


class TestMatchesName:
    def test_substring(self) -> None:
        pod = PodInfo(name="payments-api-7d9f", namespace="default")
        assert matches_name(pod, "api")
        assert matches_name(pod, "payments-api-7d9f")
        assert not matches_name(pod, "web")

    def test_case_sensitive(self) -> None:
        pod = PodInfo(name="web-1", namespace="default")
        assert not matches_name(pod, "WEB")

    def test_empty_substring_matches_everything(self) -> None:
        assert matches_name(PodInfo(name="anything", namespace="default"), "")
