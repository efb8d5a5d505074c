"""Façade publique consommée par l'extension hôte.

Regroupe le client login1, le catalogue courant et l'unique session de
redémarrage, et expose `refresh_catalog()`, `arm_target(id)`,
`start_countdown()`, `cancel()` et `teardown()`.
"""

from __future__ import annotations

from loguru import logger

from ..config.core_config_settings import RebootBackend, RebootOptionsSettings, load_settings
from ..core_exceptions import IpcFailure, UnknownBootTarget
from ..models.core_models_boot_target import BootTarget
from ..services.core_boot_target_catalog import BootTargetCatalog
from ..system.core_glib_tick_source import GLibTickSource
from ..system.core_login_manager import LoginManagerClient
from ..system.core_session_manager import SessionManagerClient
from .core_managers_protocol import (
    IHostIntegration,
    IRebootBackend,
    ITickSource,
    NullHostIntegration,
)
from .core_reboot_session import RebootSession


class RebootOptionsManager:
    """Point d'entrée du core: catalogue des cibles + session de redémarrage."""

    def __init__(
        self,
        client: LoginManagerClient,
        tick_source: ITickSource,
        *,
        host: IHostIntegration | None = None,
        settings: RebootOptionsSettings | None = None,
        reboot_backend: IRebootBackend | None = None,
    ):
        self._client = client
        self._host: IHostIntegration = host or NullHostIntegration()
        self.settings = settings or RebootOptionsSettings()
        self._catalog = BootTargetCatalog()
        self.session = RebootSession(
            client,
            tick_source,
            host=self._host,
            settings=self.settings,
            reboot_backend=reboot_backend,
        )

    @classmethod
    def create(
        cls,
        host: IHostIntegration | None = None,
        settings: RebootOptionsSettings | None = None,
    ) -> RebootOptionsManager:
        """Connecte les services D-Bus selon les paramètres et branche la boucle GLib.

        Raises:
            IpcFailure: login1 (ou le gestionnaire de session) injoignable
        """
        settings = settings or load_settings()
        client = LoginManagerClient.connect(timeout_ms=settings.ipc_timeout_ms)
        backend: IRebootBackend = client
        if settings.reboot_backend is RebootBackend.SESSION:
            backend = SessionManagerClient.connect(timeout_ms=settings.ipc_timeout_ms)
        logger.info(f"[RebootOptionsManager.create] Backend de redémarrage: {settings.reboot_backend.value}")
        return cls(client, GLibTickSource(), host=host, settings=settings, reboot_backend=backend)

    @property
    def catalog(self) -> BootTargetCatalog:
        return self._catalog

    def refresh_catalog(self) -> BootTargetCatalog:
        """Reconstruit le catalogue et le transmet à l'hôte.

        Raises:
            IpcFailure: Le catalogue précédent est conservé tel quel
        """
        try:
            catalog = BootTargetCatalog.refresh(self._client)
        except IpcFailure as e:
            logger.error(f"[RebootOptionsManager.refresh_catalog] Catalogue conservé ({len(self._catalog)}): {e}")
            raise
        self._catalog = catalog
        self._host.on_targets_available(catalog)
        return catalog

    def arm_target(self, target_id: str) -> BootTarget:
        """Arme la cible désignée par son identifiant ("" = par défaut).

        Raises:
            UnknownBootTarget: Identifiant absent du catalogue courant
            InvalidTransition: Une session est déjà en cours
        """
        target = self._catalog.find(target_id)
        if target is None:
            raise UnknownBootTarget(target_id)
        self.session.arm(target)
        return target

    def start_countdown(self) -> None:
        self.session.start()

    def cancel(self) -> None:
        self.session.cancel()

    def reconnect(self) -> None:
        """Reconnecte le client login1 (le catalogue n'est pas rafraîchi)."""
        self._client.reconnect()

    def teardown(self) -> None:
        """Désactivation de l'extension: timer libéré, catalogue vidé."""
        logger.debug("[RebootOptionsManager.teardown] Démontage")
        self.session.dispose()
        self._catalog = BootTargetCatalog()
