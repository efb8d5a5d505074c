"""Machine à états d'une demande de redémarrage vers une cible choisie.

login1 n'offre pas d'appel atomique « redémarrer vers X »: uniquement
« armer le drapeau du prochain démarrage » puis « redémarrer ». La session
applique donc le drapeau juste avant le redémarrage et le révoque si la
demande échoue, pour ne jamais laisser le système armé vers une cible que
l'utilisateur n'a pas atteinte.

Transitions:
    IDLE -> ARMED -> COUNTING -> EXECUTING (terminal, en attente du redémarrage)
                                  EXECUTING -> REVERTING -> IDLE (échec)
    ARMED/COUNTING -> IDLE (annulation)
"""

from __future__ import annotations

from enum import Enum, auto

from loguru import logger

from ..config.core_config_settings import DefaultTargetPolicy, RebootOptionsSettings
from ..core_exceptions import IpcFailure, InvalidTransition
from ..models.core_models_boot_target import BootTarget, BootTargetKind
from .core_managers_protocol import (
    IHostIntegration,
    ILoginManagerClient,
    IRebootBackend,
    ITickSource,
    NullHostIntegration,
    SessionEndReason,
)

TICK_INTERVAL_SECONDS = 1


class SessionState(Enum):
    """États possibles d'une session de redémarrage."""

    IDLE = auto()
    ARMED = auto()
    COUNTING = auto()
    EXECUTING = auto()
    REVERTING = auto()


class RebootSession:
    """Gère le cycle de vie d'une demande de redémarrage (une seule à la fois)."""

    def __init__(
        self,
        client: ILoginManagerClient,
        tick_source: ITickSource,
        *,
        host: IHostIntegration | None = None,
        settings: RebootOptionsSettings | None = None,
        reboot_backend: IRebootBackend | None = None,
    ):
        """Initialise une session inactive.

        Args:
            client: Client login1 (drapeaux de prochain démarrage)
            tick_source: Planificateur des ticks du compte à rebours
            host: Observateur UI (progression, fin de session)
            settings: Durée du compte à rebours et politiques
            reboot_backend: Service recevant la demande de redémarrage (login1 par défaut)
        """
        self._client = client
        self._tick_source = tick_source
        self._host: IHostIntegration = host or NullHostIntegration()
        self.settings = settings or RebootOptionsSettings()
        self._reboot_backend: IRebootBackend = reboot_backend or client

        self._state = SessionState.IDLE
        self._target: BootTarget | None = None
        self._remaining: int | None = None
        self._timer: int | None = None
        # Incrémenté à chaque fin de session: invalide les complétions tardives.
        self._generation = 0
        # Cible appliquée d'une session démontée pendant la demande de redémarrage.
        self._pending_revert: tuple[int, BootTarget] | None = None
        self.last_error: Exception | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def target(self) -> BootTarget | None:
        return self._target

    @property
    def remaining(self) -> int | None:
        return self._remaining

    @property
    def total_seconds(self) -> int:
        return self.settings.countdown_seconds

    def _transition_to(self, new_state: SessionState) -> None:
        logger.debug(f"[RebootSession] Transition: {self._state.name} -> {new_state.name}")
        self._state = new_state

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._tick_source.cancel(self._timer)
            self._timer = None

    def _reset(self) -> None:
        self._generation += 1
        self._target = None
        self._remaining = None
        self._transition_to(SessionState.IDLE)

    # === Opérations publiques ===

    def arm(self, target: BootTarget) -> None:
        """Sélectionne la cible, sans aucun appel IPC.

        Raises:
            InvalidTransition: Une session est déjà en cours (annuler d'abord)
        """
        if self._state is not SessionState.IDLE:
            raise InvalidTransition("arm", self._state.name)
        self.last_error = None
        self._target = target
        self._transition_to(SessionState.ARMED)
        logger.info(f"[RebootSession.arm] Cible armée: {target.display_label!r} ({target.kind.name})")

    def start(self) -> None:
        """Lance le compte à rebours (un tick par seconde).

        Raises:
            InvalidTransition: Aucune cible armée
        """
        if self._state is not SessionState.ARMED:
            raise InvalidTransition("start", self._state.name)
        self._remaining = self.total_seconds
        self._transition_to(SessionState.COUNTING)
        logger.info(f"[RebootSession.start] Compte à rebours: {self._remaining}s")

        if self._remaining == 0:
            self._execute()
            return
        self._timer = self._tick_source.schedule(TICK_INTERVAL_SECONDS, self._on_tick)

    def cancel(self) -> None:
        """Annule la session avant toute application (no-op si inactive).

        Raises:
            InvalidTransition: Application ou révocation déjà en cours
        """
        if self._state is SessionState.IDLE:
            logger.debug("[RebootSession.cancel] Session inactive, rien à annuler")
            return
        if self._state not in (SessionState.ARMED, SessionState.COUNTING):
            raise InvalidTransition("cancel", self._state.name)

        self._stop_timer()
        self._reset()
        logger.info("[RebootSession.cancel] Redémarrage annulé")
        self._host.on_session_ended(SessionEndReason.CANCELLED)

    def dispose(self) -> None:
        """Démontage demandé par l'hôte: libère le timer et revient à IDLE.

        Si une demande de redémarrage est en attente, la cible appliquée est
        conservée: un refus ultérieur révoque encore les drapeaux, sans
        notifier l'hôte.
        """
        self._stop_timer()
        if self._state is not SessionState.IDLE:
            logger.debug(f"[RebootSession.dispose] Démontage depuis {self._state.name}")
            if self._state is SessionState.EXECUTING and self._target is not None:
                self._pending_revert = (self._generation, self._target)
            self._reset()

    # === Compte à rebours ===

    def _on_tick(self) -> bool:
        if self._state is not SessionState.COUNTING or self._remaining is None:
            self._timer = None
            return False

        self._remaining -= 1
        if self._remaining <= 0:
            # La source se retire d'elle-même en retournant False.
            self._timer = None
            self._remaining = 0
            self._execute()
            return False

        self._host.on_countdown_tick(self._remaining)
        return True

    # === Application / révocation ===

    def _apply(self, target: BootTarget) -> None:
        if target.kind is BootTargetKind.FIRMWARE_SETUP:
            self._client.set_firmware_setup_flag(True)
        elif target.kind is BootTargetKind.BOOT_LOADER_ENTRY:
            self._client.set_boot_loader_entry_flag(target.raw_entry_id or "")
        elif self.settings.default_policy is DefaultTargetPolicy.CLEAR:
            self._client.set_firmware_setup_flag(False)
            self._client.set_boot_loader_entry_flag("")

    def _revert(self, target: BootTarget) -> None:
        self._transition_to(SessionState.REVERTING)
        self._revert_flags(target)

    def _revert_flags(self, target: BootTarget) -> None:
        logger.warning(f"[RebootSession._revert] Révocation de la cible {target.display_label!r}")
        try:
            if target.kind is BootTargetKind.FIRMWARE_SETUP:
                self._client.set_firmware_setup_flag(False)
            elif target.kind is BootTargetKind.BOOT_LOADER_ENTRY:
                self._client.set_boot_loader_entry_flag("")
        except IpcFailure as e:
            # Pas de nouvelle tentative: l'état du firmware reste à vérifier manuellement.
            logger.error(f"[RebootSession._revert] ÉCHEC DE LA RÉVOCATION: {e}")

    def _fail(self, target: BootTarget, error: Exception) -> None:
        logger.error(f"[RebootSession] Redémarrage échoué: {error}")
        self.last_error = error
        self._revert(target)
        self._reset()
        self._host.on_session_ended(SessionEndReason.FAILED)

    def _execute(self) -> None:
        target = self._target
        if target is None:
            raise InvalidTransition("execute", self._state.name)

        self._transition_to(SessionState.EXECUTING)
        generation = self._generation
        logger.info(f"[RebootSession._execute] Application de {target.display_label!r} puis redémarrage")

        try:
            self._apply(target)
            self._reboot_backend.request_reboot(
                self.settings.interactive,
                lambda error: self._on_reboot_done(generation, error),
            )
        except IpcFailure as e:
            # La complétion asynchrone a pu déjà conclure la session.
            if generation == self._generation and self._state is SessionState.EXECUTING:
                self._fail(target, e)

    def _on_reboot_done(self, generation: int, error: Exception | None) -> None:
        pending = self._pending_revert
        if pending is not None and pending[0] == generation:
            self._pending_revert = None
            if error is not None:
                logger.error(f"[RebootSession] Redémarrage refusé après démontage: {error}")
                self._revert_flags(pending[1])
            return
        if generation != self._generation or self._state is not SessionState.EXECUTING:
            logger.debug("[RebootSession] Complétion tardive ignorée")
            return
        target = self._target
        if error is None:
            logger.success("[RebootSession] Redémarrage accepté")
            self._host.on_session_ended(SessionEndReason.COMPLETED)
            return
        if target is not None:
            self._fail(target, error)
