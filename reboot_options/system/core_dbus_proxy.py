"""Base commune des clients D-Bus (Gio.DBusProxy).

Seul endroit où le proxy peut être absent: `connect()` retourne un client
utilisable ou lève IpcFailure; `reconnect()` remplace explicitement le proxy.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from loguru import logger

from ..config.core_dbus_paths import DEFAULT_IPC_TIMEOUT_MS
from ..core_exceptions import IpcFailure, RebootRejected
from .core_gi_imports import Gio, GLib

AsyncDone = Callable[[Exception | None], None]


class DBusProxyClient:
    """Client D-Bus typé, adossé à un Gio.DBusProxy synchrone."""

    BUS_TYPE: ClassVar[Gio.BusType] = Gio.BusType.SYSTEM
    BUS_NAME: ClassVar[str] = ""
    OBJECT_PATH: ClassVar[str] = ""
    INTERFACE_NAME: ClassVar[str] = ""
    INTROSPECTION_XML: ClassVar[str | None] = None

    def __init__(self, proxy: Gio.DBusProxy, *, timeout_ms: int = DEFAULT_IPC_TIMEOUT_MS):
        """Initialise le client autour d'un proxy déjà connecté.

        Args:
            proxy: Proxy Gio vers l'interface distante
            timeout_ms: Timeout des appels (-1 = défaut du bus)
        """
        self._proxy = proxy
        self.timeout_ms = timeout_ms

    @classmethod
    def _interface_info(cls) -> Gio.DBusInterfaceInfo | None:
        if not cls.INTROSPECTION_XML:
            return None
        node = Gio.DBusNodeInfo.new_for_xml(cls.INTROSPECTION_XML)
        return node.lookup_interface(cls.INTERFACE_NAME)

    @classmethod
    def _new_proxy(cls) -> Gio.DBusProxy:
        tag = f"[{cls.__name__}.connect]"
        logger.debug(f"{tag} Connexion à {cls.BUS_NAME} ({cls.OBJECT_PATH})")
        try:
            proxy = Gio.DBusProxy.new_for_bus_sync(
                cls.BUS_TYPE,
                Gio.DBusProxyFlags.NONE,
                cls._interface_info(),
                cls.BUS_NAME,
                cls.OBJECT_PATH,
                cls.INTERFACE_NAME,
                None,
            )
        except GLib.Error as e:
            logger.error(f"{tag} ERREUR: connexion impossible - {e.message}")
            raise IpcFailure(f"Connexion à {cls.BUS_NAME} impossible: {e.message}") from e
        if proxy is None:
            raise IpcFailure(f"Connexion à {cls.BUS_NAME} impossible: proxy absent")
        logger.success(f"{tag} Connecté à {cls.BUS_NAME}")
        return proxy

    @classmethod
    def connect(cls, *, timeout_ms: int = DEFAULT_IPC_TIMEOUT_MS):
        """Ouvre la connexion au service bien connu.

        Raises:
            IpcFailure: Bus ou service injoignable
        """
        return cls(cls._new_proxy(), timeout_ms=timeout_ms)

    def reconnect(self) -> None:
        """Reconstruit le proxy (après perte de connexion du service).

        Raises:
            IpcFailure: Bus ou service toujours injoignable; l'ancien proxy est conservé
        """
        self._proxy = self._new_proxy()

    def _call_sync(self, method: str, parameters: GLib.Variant | None = None) -> tuple:
        """Appel bloquant; retourne le tuple des valeurs de sortie.

        Raises:
            IpcFailure: Erreur D-Bus (permission, service absent, timeout)
        """
        try:
            result = self._proxy.call_sync(method, parameters, Gio.DBusCallFlags.NONE, self.timeout_ms, None)
        except GLib.Error as e:
            logger.error(f"[{type(self).__name__}] ERREUR: {method} - {e.message}")
            raise IpcFailure(e.message, method=method) from e
        if result is None:
            return ()
        return tuple(result.unpack())

    def _call_async(self, method: str, parameters: GLib.Variant | None, on_done: AsyncDone) -> None:
        """Émet l'appel sans attendre; `on_done(erreur | None)` est appelé depuis la boucle GLib.

        Raises:
            IpcFailure: L'appel n'a pas pu être émis
        """

        def _finished(proxy: Gio.DBusProxy, result: Gio.AsyncResult, _user_data=None) -> None:
            try:
                proxy.call_finish(result)
            except GLib.Error as e:
                logger.warning(f"[{type(self).__name__}] {method} refusé: {e.message}")
                on_done(RebootRejected(e.message))
                return
            logger.debug(f"[{type(self).__name__}] {method} accepté")
            on_done(None)

        try:
            self._proxy.call(method, parameters, Gio.DBusCallFlags.NONE, self.timeout_ms, None, _finished, None)
        except (GLib.Error, TypeError) as e:
            raise IpcFailure(str(e), method=method) from e
