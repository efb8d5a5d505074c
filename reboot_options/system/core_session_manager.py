"""Backend de redémarrage via le gestionnaire de session du bureau.

`org.gnome.SessionManager.Reboot()` déroule le flux de fin de session
habituel (fermeture des applications, inhibiteurs) avant de confier le
redémarrage à login1.
"""

from __future__ import annotations

from loguru import logger

from ..config.core_dbus_paths import (
    SESSION_MANAGER_BUS_NAME,
    SESSION_MANAGER_INTERFACE,
    SESSION_MANAGER_OBJECT_PATH,
)
from .core_dbus_proxy import AsyncDone, DBusProxyClient
from .core_gi_imports import Gio


class SessionManagerClient(DBusProxyClient):
    """Demande de redémarrage au gestionnaire de session (bus de session)."""

    BUS_TYPE = Gio.BusType.SESSION
    BUS_NAME = SESSION_MANAGER_BUS_NAME
    OBJECT_PATH = SESSION_MANAGER_OBJECT_PATH
    INTERFACE_NAME = SESSION_MANAGER_INTERFACE

    def request_reboot(self, interactive: bool, on_done: AsyncDone) -> None:
        """Demande le redémarrage.

        `interactive` est ignoré: le gestionnaire de session gère lui-même
        les confirmations.
        """
        logger.info(f"[SessionManagerClient] Reboot() (interactive={interactive} ignoré)")
        self._call_async("Reboot", None, on_done)
