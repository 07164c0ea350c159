import logging
import sys
from typing import List, Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Niveaux imposés aux bibliothèques tierces
THIRD_PARTY_LEVELS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.INFO,
    "fastapi": logging.INFO,
    "kubernetes": logging.WARNING,
    "urllib3": logging.WARNING,
}


def setup_logging(level: str = "INFO", format_string: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Installe les handlers du logger racine (stderr, plus un fichier si demandé).

    Les handlers existants sont remplacés: la CLI et l'API peuvent appeler
    cette fonction plusieurs fois sans dupliquer les messages.
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    # stdout reste réservé à la sortie de la CLI
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name, lib_level in THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(lib_level)
