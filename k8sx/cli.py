"""
Recherche de pods et de services Kubernetes par IP ou par nom, dans tous les
contextes du kubeconfig et tous les namespaces accessibles.

Codes de sortie:
    0 - Succès (y compris aucun résultat)
    1 - Erreur de configuration ou d'exécution
    2 - Requête invalide
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from k8sx import __version__
from k8sx.config import Settings, get_settings, split_list
from k8sx.core.exceptions import InvalidQueryError, K8sxError
from k8sx.core.logging import setup_logging
from k8sx.services.k8s_service import MODE_IP, K8sService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_QUERY = 2

COMMANDS = ("search", "s", "ctx", "ns", "serve")
# Options globales suivies d'une valeur
VALUE_OPTIONS = ("--kubeconfig", "--namespaces", "-n", "--contexts", "--context", "--timeout", "--format", "-f", "--log-level")


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def format_pod(pod: Dict[str, Any]) -> str:
    line = f"  pod/{pod['name']}  ip={pod['pod_ip'] or '-'}  host={pod['host_ip'] or '-'}"
    if pod.get("deployment"):
        line += f"  deployment={pod['deployment']}"
    elif pod.get("owner_kind"):
        line += f"  owner={pod['owner_kind']}/{pod['owner_name']}"
    return line


def format_service(svc: Dict[str, Any]) -> str:
    ports = ",".join(
        f"{p['port']}->{p['target_port']}/{p['protocol']}" if p["target_port"] else f"{p['port']}/{p['protocol']}"
        for p in svc["ports"]
    )
    line = f"  svc/{svc['name']}  type={svc['type']}  cluster-ip={svc['cluster_ip'] or '-'}"
    external = svc["external_ips"] + svc["load_balancer_ips"]
    if external:
        line += f"  external={','.join(external)}"
    if ports:
        line += f"  ports={ports}"
    return line


def print_search(report: Dict[str, Any], output_format: str) -> None:
    if output_format == "json":
        print_json(report)
        return

    if not report["results"]:
        print(f"Aucun résultat pour '{report['query']}'")
        return

    for scoped in report["results"]:
        print(f"{scoped['context']}/{scoped['namespace']}")
        for pod in scoped["pods"]:
            print(format_pod(pod))
        for svc in scoped.get("services", []):
            print(format_service(svc))

    summary = f"{report['total_pods']} pod(s)"
    if report["mode"] == MODE_IP:
        summary += f", {report['total_services']} service(s)"
    print(f"\n{summary} dans {report['scopes_with_results']} scope(s)")


def print_contexts(contexts: List[Dict[str, Any]], output_format: str) -> None:
    if output_format == "json":
        print_json(contexts)
        return
    for ctx in contexts:
        marker = "*" if ctx["is_current"] else " "
        print(f"{marker} {ctx['name']}")


def print_namespaces(report: Dict[str, Any], output_format: str) -> None:
    if output_format == "json":
        print_json(report)
        return
    print(f"Contexte: {report['context']}")
    for ns in report["namespaces"]:
        access = "Allowed" if ns["has_access"] else "Denied"
        print(f"  {ns['name']:<40} {access}")
    print(
        f"\n{report['accessible_count']}/{report['total_count']} namespace(s) accessible(s)"
    )
    if report["accessible"]:
        print(f"--namespaces {','.join(report['accessible'])}")


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="k8sx",
        description="Recherche de pods et services par IP ou par nom dans tous les contextes Kubernetes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemples:
  %(prog)s 10.0.0.12                        # Pods et services avec cette IP
  %(prog)s search 10.0.0.12                 # Idem, commande explicite
  %(prog)s s nginx                          # Pods dont le nom contient 'nginx'
  %(prog)s --namespaces default,prod s api  # Limite aux namespaces donnés
  %(prog)s ctx                              # Contextes du kubeconfig
  %(prog)s ns --context prod                # Namespaces accessibles
  %(prog)s serve                            # Lance l'API HTTP

Codes de sortie:
  0 - Succès (y compris aucun résultat)
  1 - Erreur de configuration ou d'exécution
  2 - Requête invalide
        """
    )

    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")

    parser.add_argument(
        '--kubeconfig',
        default=settings.KUBECONFIG,
        help=f'Chemin du kubeconfig (défaut: {settings.KUBECONFIG})'
    )

    parser.add_argument(
        '--namespaces', '-n',
        default=settings.K8S_SEARCH_NAMESPACES,
        help='Namespaces à parcourir, séparés par des virgules (défaut: tous les accessibles)'
    )

    parser.add_argument(
        '--contexts',
        default=settings.K8S_SEARCH_CONTEXTS,
        help='Contextes à parcourir, séparés par des virgules (défaut: tous)'
    )

    parser.add_argument(
        '--context',
        default=settings.K8S_SEARCH_CONTEXT or None,
        help='Contexte utilisé par la commande ns (défaut: contexte courant)'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        default=settings.K8S_SEARCH_TIMEOUT,
        help=f'Budget de temps de la recherche en secondes (défaut: {settings.K8S_SEARCH_TIMEOUT})'
    )

    parser.add_argument(
        '--format', '-f',
        choices=['plain', 'json'],
        default='plain',
        help='Format de sortie (défaut: plain)'
    )

    parser.add_argument(
        '--log-level',
        default=settings.LOG_LEVEL,
        help=f'Niveau de log (défaut: {settings.LOG_LEVEL})'
    )

    subparsers = parser.add_subparsers(dest='command')

    search = subparsers.add_parser('search', aliases=['s'], help='Recherche par IP ou par nom')
    search.add_argument('query', help='Adresse IP ou nom (partiel) de pod')

    subparsers.add_parser('ctx', help='Liste les contextes du kubeconfig')

    ns = subparsers.add_parser('ns', help="Liste les namespaces et l'accès aux pods")
    ns.add_argument('--context', dest='ns_context', help='Contexte à inspecter')

    serve = subparsers.add_parser('serve', help="Lance l'API HTTP")
    serve.add_argument('--host', default=settings.API_HOST)
    serve.add_argument('--port', type=int, default=settings.API_PORT)
    serve.add_argument('--reload', action='store_true')

    return parser


def build_service(settings: Settings, args: argparse.Namespace) -> K8sService:
    options = settings.search_options(
        kubeconfig=args.kubeconfig,
        contexts=split_list(args.contexts),
        namespaces=split_list(args.namespaces),
        timeout=args.timeout,
        context=args.context,
    )
    return K8sService(options)


def with_default_command(argv: List[str]) -> List[str]:
    """`k8sx <requête>` équivaut à `k8sx search <requête>`"""
    argv = list(argv)
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg.startswith("-"):
            i += 2 if arg in VALUE_OPTIONS else 1
            continue
        if arg not in COMMANDS:
            argv.insert(i, "search")
        break
    return argv


def print_mode(query: str) -> None:
    if K8sService.detect_mode(query) == MODE_IP:
        print("Adresse IP détectée, recherche par IP...")
    else:
        print("Motif de nom détecté, recherche par nom...")


def run(args: argparse.Namespace, k8s_service: K8sService) -> int:
    if args.command in ('search', 's'):
        if args.format == 'plain':
            print_mode(args.query)
        report = k8s_service.search(args.query)
        print_search(report, args.format)
    elif args.command == 'ctx':
        print_contexts(k8s_service.get_contexts(), args.format)
    elif args.command == 'ns':
        print_namespaces(k8s_service.get_namespace_access(getattr(args, 'ns_context', None)), args.format)
    return EXIT_OK


def main(argv: Optional[List[str]] = None, k8s_service: Optional[K8sService] = None) -> int:
    settings = get_settings()
    parser = build_parser(settings)
    args = parser.parse_args(with_default_command(sys.argv[1:] if argv is None else argv))

    if args.command is None:
        parser.print_help()
        return EXIT_INVALID_QUERY

    setup_logging(args.log_level)

    if args.command == 'serve':
        from k8sx.main import run as run_server
        run_server(host=args.host, port=args.port, reload=args.reload)
        return EXIT_OK

    try:
        k8s_service = k8s_service or build_service(settings, args)
        return run(args, k8s_service)
    except InvalidQueryError as e:
        print(f"Erreur: {e}", file=sys.stderr)
        return EXIT_INVALID_QUERY
    except K8sxError as e:
        print(f"Erreur: {e}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("Interrompu", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
