"""Modèles de données des cibles de démarrage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Final

from ..core_exceptions import IpcFailure

FIRMWARE_SETUP_TARGET_ID: Final[str] = "firmware-setup"
BOOT_LOADER_ENTRY_PREFIX: Final[str] = "entry:"
DEFAULT_TARGET_ID: Final[str] = ""

# Libellé partagé par la capacité firmware et l'entrée `reboot-to-firmware-setup`.
FIRMWARE_SETUP_LABEL: Final[str] = "UEFI Firmware"
DEFAULT_TARGET_LABEL: Final[str] = "Default"


class BootTargetKind(Enum):
    """Nature d'une cible de démarrage."""

    DEFAULT = auto()
    FIRMWARE_SETUP = auto()
    BOOT_LOADER_ENTRY = auto()


class FirmwareSetupCapability(Enum):
    """Réponse de `CanRebootToFirmwareSetup`."""

    YES = "yes"
    CHALLENGE = "challenge"
    NO = "no"
    NOT_APPLICABLE = "na"

    @classmethod
    def from_wire(cls, value: object) -> FirmwareSetupCapability:
        """Convertit la chaîne reçue du bus.

        Raises:
            IpcFailure: Valeur hors contrat (réponse malformée)
        """
        try:
            return cls(value)
        except ValueError as e:
            raise IpcFailure(f"Réponse inattendue: {value!r}", method="CanRebootToFirmwareSetup") from e


@dataclass(frozen=True)
class BootTarget:
    """Cible sélectionnable pour le prochain démarrage.

    id: identifiant opaque stable ("" = défaut, "firmware-setup", "entry:<brut>")
    kind: nature de la cible
    display_label: libellé affichable
    raw_entry_id: identifiant brut de login1 (entrées du chargeur uniquement)
    """

    id: str
    kind: BootTargetKind
    display_label: str
    raw_entry_id: str | None = None

    @classmethod
    def default(cls) -> BootTarget:
        return cls(id=DEFAULT_TARGET_ID, kind=BootTargetKind.DEFAULT, display_label=DEFAULT_TARGET_LABEL)

    @classmethod
    def firmware_setup(cls) -> BootTarget:
        return cls(
            id=FIRMWARE_SETUP_TARGET_ID,
            kind=BootTargetKind.FIRMWARE_SETUP,
            display_label=FIRMWARE_SETUP_LABEL,
        )

    @classmethod
    def boot_loader_entry(cls, raw_entry_id: str, display_label: str) -> BootTarget:
        return cls(
            id=f"{BOOT_LOADER_ENTRY_PREFIX}{raw_entry_id}",
            kind=BootTargetKind.BOOT_LOADER_ENTRY,
            display_label=display_label,
            raw_entry_id=raw_entry_id,
        )
