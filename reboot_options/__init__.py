"""Options de redémarrage étendues: cible du prochain démarrage + compte à rebours."""

from reboot_options.core_exceptions import (
    InvalidTransition,
    IpcFailure,
    RebootOptionsConfigError,
    RebootOptionsError,
    RebootRejected,
    UnknownBootTarget,
)
from reboot_options.managers.core_managers_protocol import IHostIntegration, SessionEndReason
from reboot_options.managers.core_reboot_options_manager import RebootOptionsManager
from reboot_options.managers.core_reboot_session import RebootSession, SessionState
from reboot_options.models.core_models_boot_target import BootTarget, BootTargetKind, FirmwareSetupCapability
from reboot_options.services.core_boot_target_catalog import BootTargetCatalog

__all__ = [
    "BootTarget",
    "BootTargetCatalog",
    "BootTargetKind",
    "FirmwareSetupCapability",
    "IHostIntegration",
    "InvalidTransition",
    "IpcFailure",
    "RebootOptionsConfigError",
    "RebootOptionsError",
    "RebootOptionsManager",
    "RebootRejected",
    "RebootSession",
    "SessionEndReason",
    "SessionState",
    "UnknownBootTarget",
]
