"""Paramètres des options de redémarrage.

Valeurs par défaut surchargeables par variables d'environnement, pour que
l'hôte (extension du shell) ou les tests puissent ajuster la durée du
compte à rebours et les politiques sans fichier de configuration.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Final

from loguru import logger

from ..core_exceptions import RebootOptionsConfigError
from .core_dbus_paths import DEFAULT_IPC_TIMEOUT_MS

DEFAULT_COUNTDOWN_SECONDS: Final[int] = 60

ENV_COUNTDOWN: Final[str] = "REBOOT_OPTIONS_COUNTDOWN"
ENV_DEFAULT_POLICY: Final[str] = "REBOOT_OPTIONS_DEFAULT_POLICY"
ENV_INTERACTIVE: Final[str] = "REBOOT_OPTIONS_INTERACTIVE"
ENV_BACKEND: Final[str] = "REBOOT_OPTIONS_BACKEND"
ENV_IPC_TIMEOUT_MS: Final[str] = "REBOOT_OPTIONS_IPC_TIMEOUT_MS"

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


class DefaultTargetPolicy(Enum):
    """Traitement de la cible "par défaut" au moment de l'application."""

    SKIP = "skip"
    CLEAR = "clear"


class RebootBackend(Enum):
    """Service qui reçoit la demande de redémarrage."""

    LOGIN1 = "login1"
    SESSION = "session"


@dataclass(frozen=True)
class RebootOptionsSettings:
    """Paramètres d'une session de redémarrage.

    countdown_seconds: durée du compte à rebours (0 = exécution immédiate)
    default_policy: SKIP n'émet aucun appel pour la cible par défaut,
        CLEAR efface explicitement les deux drapeaux
    interactive: valeur transmise à `Reboot(interactive)`
    reboot_backend: login1 (par défaut) ou gestionnaire de session du bureau
    ipc_timeout_ms: timeout des appels Gio (-1 = défaut du bus)
    """

    countdown_seconds: int = DEFAULT_COUNTDOWN_SECONDS
    default_policy: DefaultTargetPolicy = DefaultTargetPolicy.SKIP
    interactive: bool = False
    reboot_backend: RebootBackend = RebootBackend.LOGIN1
    ipc_timeout_ms: int = DEFAULT_IPC_TIMEOUT_MS

    def __post_init__(self) -> None:
        if self.countdown_seconds < 0:
            raise RebootOptionsConfigError(f"Le compte à rebours doit être >= 0 (reçu {self.countdown_seconds})")
        if self.ipc_timeout_ms < -1:
            raise RebootOptionsConfigError(f"Timeout IPC invalide: {self.ipc_timeout_ms}")


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[load_settings] {name}={raw!r} n'est pas un entier, défaut utilisé ({default})")
        return default


def _env_enum(environ: Mapping[str, str], name: str, enum_cls, default):
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise RebootOptionsConfigError(f"{name}={raw!r} invalide (valeurs: {allowed})") from e


def load_settings(environ: Mapping[str, str] | None = None) -> RebootOptionsSettings:
    """Construit les paramètres depuis l'environnement.

    Args:
        environ: Variables à lire (os.environ par défaut)

    Returns:
        Paramètres validés

    Raises:
        RebootOptionsConfigError: Valeur d'énumération inconnue ou durée négative
    """
    if environ is None:
        environ = os.environ

    settings = RebootOptionsSettings(
        countdown_seconds=_env_int(environ, ENV_COUNTDOWN, DEFAULT_COUNTDOWN_SECONDS),
        default_policy=_env_enum(environ, ENV_DEFAULT_POLICY, DefaultTargetPolicy, DefaultTargetPolicy.SKIP),
        interactive=environ.get(ENV_INTERACTIVE, "").strip().lower() in _TRUE_VALUES,
        reboot_backend=_env_enum(environ, ENV_BACKEND, RebootBackend, RebootBackend.LOGIN1),
        ipc_timeout_ms=_env_int(environ, ENV_IPC_TIMEOUT_MS, DEFAULT_IPC_TIMEOUT_MS),
    )
    logger.debug(f"[load_settings] {settings}")
    return settings
