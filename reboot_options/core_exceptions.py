"""Module d'exceptions personnalisées pour les options de redémarrage.

Fournit une hiérarchie d'exceptions spécifiques pour distinguer les pannes
IPC, les erreurs d'intégration (transitions invalides) et les refus de
redémarrage signalés après coup par le gestionnaire de session.
"""

from __future__ import annotations


class RebootOptionsError(Exception):
    """Exception de base pour toutes les erreurs des options de redémarrage.

    Permet de capturer toutes les erreurs métier avec `except RebootOptionsError`.

    Example:
        try:
            manager.refresh_catalog()
        except RebootOptionsError as e:
            logger.error(f"Options de redémarrage indisponibles: {e}")
    """


class IpcFailure(RebootOptionsError):
    """Échec d'un appel vers le gestionnaire de connexion (login1).

    Levée lorsque le bus est injoignable, que l'appel est refusé
    (permissions) ou que la réponse est malformée.

    Attributes:
        reason: Description de la panne
        method: Méthode ou propriété D-Bus concernée (optionnel)

    Example:
        try:
            proxy.call_sync("CanRebootToFirmwareSetup", None, flags, -1, None)
        except GLib.Error as e:
            raise IpcFailure(e.message, method="CanRebootToFirmwareSetup") from e
    """

    def __init__(self, reason: str, method: str | None = None):
        """Initialise IpcFailure avec le contexte de l'appel.

        Args:
            reason: Description de la panne
            method: Méthode ou propriété D-Bus concernée (optionnel)
        """
        super().__init__(reason)
        self.reason = reason
        self.method = method

    def __str__(self) -> str:
        """Représentation textuelle enrichie de l'erreur."""
        if self.method:
            return f"{self.reason} | Méthode: {self.method}"
        return self.reason


class InvalidTransition(RebootOptionsError):
    """Opération invalide dans l'état courant de la session de redémarrage.

    Erreur de programmation/intégration: jamais ignorée silencieusement.

    Attributes:
        operation: Opération demandée (ex: "arm")
        state: Nom de l'état courant de la session

    Example:
        if self._state is not SessionState.IDLE:
            raise InvalidTransition("arm", self._state.name)
    """

    def __init__(self, operation: str, state: str):
        super().__init__(f"Opération '{operation}' interdite dans l'état {state}")
        self.operation = operation
        self.state = state


class RebootRejected(RebootOptionsError):
    """Le redémarrage a été refusé de façon asynchrone.

    Signalé par la complétion de l'appel `Reboot` (inhibition par un autre
    processus, permission refusée, etc.). Traité comme un échec d'application.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class UnknownBootTarget(RebootOptionsError):
    """Identifiant de cible absent du catalogue courant."""

    def __init__(self, target_id: str):
        super().__init__(f"Cible de démarrage inconnue: {target_id!r}")
        self.target_id = target_id


class RebootOptionsConfigError(RebootOptionsError):
    """Paramétrage invalide (durée négative, politique ou backend inconnus).

    Example:
        if countdown_seconds < 0:
            raise RebootOptionsConfigError("Le compte à rebours doit être >= 0")
    """
