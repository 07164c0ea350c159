import ipaddress
from typing import Union

from k8sx.models.resources import PodInfo, ServiceInfo, ServiceType


def is_ip_query(query: str) -> bool:
    """Vrai si la requête est une adresse IPv4 ou IPv6 littérale"""
    if not query or query != query.strip() or "%" in query:
        return False
    try:
        ipaddress.ip_address(query)
    except ValueError:
        return False
    return True


def matches_ip(resource: Union[PodInfo, ServiceInfo], ip: str) -> bool:
    """Égalité stricte sur les IPs d'un pod ou d'un service, sans notion de sous-réseau"""
    if not ip:
        return False
    if isinstance(resource, PodInfo):
        return ip in (resource.pod_ip, resource.host_ip)
    if resource.cluster_ip == ip or ip in resource.external_ips:
        return True
    if resource.type == ServiceType.LOAD_BALANCER.value:
        return ip in resource.load_balancer_ips
    return False


def matches_name(resource: Union[PodInfo, ServiceInfo], substring: str) -> bool:
    return substring in resource.name
