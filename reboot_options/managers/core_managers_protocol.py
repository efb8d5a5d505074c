"""Protocols (interfaces) des managers core.

Objectif: découpler la machine à états de ses collaborateurs concrets
(proxy D-Bus, boucle GLib, UI de l'hôte) via DIP, pour que les tests
pilotent les ticks et les réponses IPC de façon déterministe.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, auto
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from reboot_options.services.core_boot_target_catalog import BootTargetCatalog


class SessionEndReason(Enum):
    """Motif de fin d'une session de redémarrage, transmis à l'hôte."""

    COMPLETED = auto()
    CANCELLED = auto()
    FAILED = auto()


@runtime_checkable
class IRebootBackend(Protocol):
    """Service capable d'émettre la demande de redémarrage."""

    # pylint: disable=too-few-public-methods

    def request_reboot(self, interactive: bool, on_done: Callable[[Exception | None], None]) -> None:
        """Émet la demande; le résultat arrive via `on_done`."""
        raise NotImplementedError


@runtime_checkable
class ILoginManagerClient(IRebootBackend, Protocol):
    """Interface du client login1 consommée par le catalogue et la session."""

    def set_firmware_setup_flag(self, enable: bool) -> None:
        """Arme ou efface le drapeau firmware."""
        raise NotImplementedError

    def set_boot_loader_entry_flag(self, entry_id: str) -> None:
        """Désigne l'entrée du prochain démarrage ("" efface)."""
        raise NotImplementedError


class ITickSource(Protocol):
    """Planificateur de callbacks récurrents (une seconde par tick).

    Le callback retourne True pour rester planifié, False pour s'arrêter.
    """

    def schedule(self, interval_seconds: int, callback: Callable[[], bool]) -> int:
        """Planifie `callback` et retourne un identifiant d'annulation."""

    def cancel(self, handle: int) -> None:
        """Annule une planification encore active."""


class IHostIntegration(Protocol):
    """Contrat appelé par le core vers l'UI de l'hôte (dialogues, menus)."""

    def on_targets_available(self, catalog: BootTargetCatalog) -> None:
        """Nouveau catalogue disponible."""

    def on_countdown_tick(self, remaining: int) -> None:
        """Secondes restantes avant exécution."""

    def on_session_ended(self, reason: SessionEndReason) -> None:
        """Fin de la session (terminée, annulée, échouée)."""


class NullHostIntegration:
    """Hôte muet, utilisé quand aucune UI n'est branchée."""

    def on_targets_available(self, catalog: BootTargetCatalog) -> None:
        del catalog

    def on_countdown_tick(self, remaining: int) -> None:
        del remaining

    def on_session_ended(self, reason: SessionEndReason) -> None:
        del reason
