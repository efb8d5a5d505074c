"""Utilitaires d'exécution pour l'hôte qui embarque le core.

Centralise la configuration de Loguru pour le processus hôte.
"""

from __future__ import annotations

import sys

from loguru import logger

DEBUG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
DEFAULT_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> <level>{level: <8}</level> <level>{message}</level>"


def configure_logging(*, debug: bool, verbose: bool = False) -> None:
    """Configure Loguru pour tout le processus.

    Politique:
    - Sans flag: aucun handler -> pas de logs.
    - --verbose: INFO.
    - --debug: DEBUG (+ backtrace/diagnose).
    """
    logger.remove()

    if not debug and not verbose:
        return

    # Pas d'enqueue: les callbacks arrivent sur la boucle GLib, un seul thread.
    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "INFO",
        backtrace=debug,
        diagnose=debug,
        enqueue=False,
        format=DEBUG_FORMAT if debug else DEFAULT_FORMAT,
    )
    logger.info(f"[Logging] Configuration appliquée: debug={debug}, verbose={verbose}")
