"""Source de ticks adossée à la boucle principale GLib."""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from .core_gi_imports import GLib


class GLibTickSource:
    """Planifie un callback récurrent via `GLib.timeout_add_seconds`.

    Le callback retourne True pour continuer, False pour arrêter (convention
    GLib.SOURCE_CONTINUE / GLib.SOURCE_REMOVE).
    """

    def schedule(self, interval_seconds: int, callback: Callable[[], bool]) -> int:
        source_id = GLib.timeout_add_seconds(interval_seconds, callback)
        logger.debug(f"[GLibTickSource] Source {source_id} planifiée ({interval_seconds}s)")
        return source_id

    def cancel(self, handle: int) -> None:
        logger.debug(f"[GLibTickSource] Suppression de la source {handle}")
        GLib.source_remove(handle)
