"""Client typé de l'interface org.freedesktop.login1.Manager.

Tous les appels sont bloquants (IPC locale, quelques millisecondes) sauf
`request_reboot`, dont le résultat arrive de façon asynchrone: le processus
peut être tué par le redémarrage avant que la complétion ne soit livrée.
"""

from __future__ import annotations

from loguru import logger

from ..config.core_dbus_paths import (
    LOGIN1_BUS_NAME,
    LOGIN1_MANAGER_INTERFACE,
    LOGIN1_MANAGER_XML,
    LOGIN1_OBJECT_PATH,
)
from ..core_exceptions import IpcFailure
from ..models.core_models_boot_target import FirmwareSetupCapability
from .core_dbus_proxy import AsyncDone, DBusProxyClient
from .core_gi_imports import Gio, GLib

_PROPERTIES_GET = "org.freedesktop.DBus.Properties.Get"


class LoginManagerClient(DBusProxyClient):
    """Accès aux drapeaux de prochain démarrage et au redémarrage via login1."""

    BUS_TYPE = Gio.BusType.SYSTEM
    BUS_NAME = LOGIN1_BUS_NAME
    OBJECT_PATH = LOGIN1_OBJECT_PATH
    INTERFACE_NAME = LOGIN1_MANAGER_INTERFACE
    INTROSPECTION_XML = LOGIN1_MANAGER_XML

    def query_firmware_setup_capability(self) -> FirmwareSetupCapability:
        """Indique si le firmware expose un drapeau de redémarrage vers son setup."""
        result = self._call_sync("CanRebootToFirmwareSetup")
        value = result[0] if result else None
        capability = FirmwareSetupCapability.from_wire(value)
        logger.debug(f"[LoginManagerClient] CanRebootToFirmwareSetup -> {capability.value}")
        return capability

    def list_boot_loader_entries(self) -> list[str]:
        """Lit la propriété BootLoaderEntries (liste éventuellement vide).

        La propriété est relue sur le bus à chaque appel (Properties.Get) plutôt
        que depuis le cache du proxy.
        """
        result = self._call_sync(
            _PROPERTIES_GET,
            GLib.Variant("(ss)", (LOGIN1_MANAGER_INTERFACE, "BootLoaderEntries")),
        )
        value = result[0] if result else None
        if value is None:
            return []
        if not isinstance(value, (list, tuple)) or not all(isinstance(entry, str) for entry in value):
            raise IpcFailure(f"BootLoaderEntries malformé: {value!r}", method="BootLoaderEntries")
        logger.debug(f"[LoginManagerClient] BootLoaderEntries -> {len(value)} entrées")
        return list(value)

    def set_firmware_setup_flag(self, enable: bool) -> None:
        """Arme (True) ou efface (False) le drapeau firmware pour le prochain démarrage."""
        logger.info(f"[LoginManagerClient] SetRebootToFirmwareSetup({enable})")
        self._call_sync("SetRebootToFirmwareSetup", GLib.Variant("(b)", (enable,)))

    def set_boot_loader_entry_flag(self, entry_id: str) -> None:
        """Désigne l'entrée à démarrer ensuite ("" efface le choix)."""
        logger.info(f"[LoginManagerClient] SetRebootToBootLoaderEntry({entry_id!r})")
        self._call_sync("SetRebootToBootLoaderEntry", GLib.Variant("(s)", (entry_id,)))

    def request_reboot(self, interactive: bool, on_done: AsyncDone) -> None:
        """Demande le redémarrage; l'échec n'est connu que via `on_done`."""
        logger.info(f"[LoginManagerClient] Reboot(interactive={interactive})")
        self._call_async("Reboot", GLib.Variant("(b)", (interactive,)), on_done)
