"""Catalogue des cibles de démarrage sélectionnables.

Construit, à partir des réponses brutes de login1, une liste ordonnée,
dédoublonnée et libellée de `BootTarget`. Le calcul est pur vis-à-vis de
ses entrées IPC: deux rafraîchissements avec les mêmes réponses donnent
la même séquence de cibles.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Final, Protocol

from loguru import logger

from ..models.core_models_boot_target import (
    DEFAULT_TARGET_ID,
    FIRMWARE_SETUP_LABEL,
    BootTarget,
    BootTargetKind,
    FirmwareSetupCapability,
)


class BootTargetSource(Protocol):
    """Sous-ensemble de LoginManagerClient nécessaire au catalogue."""

    def query_firmware_setup_capability(self) -> FirmwareSetupCapability:
        """Capacité de redémarrage vers le setup firmware."""

    def list_boot_loader_entries(self) -> list[str]:
        """Identifiants bruts annoncés par le chargeur de démarrage."""


@dataclass(frozen=True)
class LabelRule:
    """Règle de libellé: motif (groupe 1 optionnel = suffixe) + gabarit.

    Le gabarit peut contenir `{suffix}`, remplacé par le groupe capturé
    (chaîne vide si absent).
    """

    pattern: re.Pattern[str]
    template: str

    def apply(self, raw_entry_id: str) -> str | None:
        """Retourne le libellé si la règle s'applique, sinon None."""
        match = self.pattern.search(raw_entry_id)
        if match is None:
            return None
        suffix = match.group(1) if match.re.groups >= 1 else ""
        return self.template.format(suffix=suffix or "")


# https://systemd.io/BOOT_LOADER_INTERFACE/#boot-loader-entry-identifiers
# L'ordre compte: la première règle qui correspond gagne.
KNOWN_ENTRY_RULES: Final[tuple[LabelRule, ...]] = (
    LabelRule(re.compile(r"(?:auto-)?windows-?(.*)"), "Windows {suffix}"),
    LabelRule(re.compile(r"(?:auto-)?osx-?(.*)"), "OSX {suffix}"),
    LabelRule(re.compile(r"(?:auto-)?efi-shell"), "EFI Shell"),
    LabelRule(re.compile(r"(?:auto-)?reboot-to-firmware-setup"), FIRMWARE_SETUP_LABEL),
)


def label_for_entry(raw_entry_id: str, rules: Sequence[LabelRule] = KNOWN_ENTRY_RULES) -> str:
    """Calcule le libellé affichable d'une entrée brute.

    Les entrées inconnues gardent leur identifiant, sans espaces superflus.
    """
    for rule in rules:
        label = rule.apply(raw_entry_id)
        if label is not None:
            return label
    return raw_entry_id.strip()


def _disambiguate(targets: list[BootTarget]) -> list[BootTarget]:
    """Suffixe par l'identifiant brut les entrées distinctes de même libellé."""
    counts = Counter(t.display_label for t in targets if t.kind is BootTargetKind.BOOT_LOADER_ENTRY)
    result: list[BootTarget] = []
    for target in targets:
        if target.kind is BootTargetKind.BOOT_LOADER_ENTRY and counts[target.display_label] > 1:
            label = f"{target.display_label.strip()} ({target.raw_entry_id})"
            target = BootTarget.boot_loader_entry(target.raw_entry_id or "", label)
        result.append(target)
    return result


@dataclass(frozen=True)
class BootTargetCatalog:
    """Séquence ordonnée et immuable de cibles (firmware d'abord, puis entrées)."""

    targets: tuple[BootTarget, ...] = ()

    def __iter__(self) -> Iterator[BootTarget]:
        return iter(self.targets)

    def __len__(self) -> int:
        return len(self.targets)

    @property
    def is_empty(self) -> bool:
        return not self.targets

    def labels(self) -> list[str]:
        return [t.display_label for t in self.targets]

    def find(self, target_id: str) -> BootTarget | None:
        """Retrouve une cible par identifiant ("" = cible par défaut)."""
        if target_id == DEFAULT_TARGET_ID:
            return BootTarget.default()
        for target in self.targets:
            if target.id == target_id:
                return target
        return None

    @classmethod
    def build(
        cls,
        capability: FirmwareSetupCapability,
        raw_entries: Sequence[str],
        rules: Sequence[LabelRule] = KNOWN_ENTRY_RULES,
    ) -> BootTargetCatalog:
        """Normalise les données brutes en catalogue.

        Args:
            capability: Réponse de CanRebootToFirmwareSetup
            raw_entries: BootLoaderEntries, dans l'ordre annoncé
            rules: Règles de libellé (première correspondance gagnante)

        Returns:
            Nouveau catalogue
        """
        targets: list[BootTarget] = []
        supports_firmware = capability is FirmwareSetupCapability.YES
        if supports_firmware:
            targets.append(BootTarget.firmware_setup())

        seen_raw: set[str] = set()
        for raw in raw_entries:
            if raw in seen_raw:
                logger.debug(f"[BootTargetCatalog] Entrée dupliquée ignorée: {raw!r}")
                continue
            seen_raw.add(raw)

            label = label_for_entry(raw, rules)
            # La capacité firmware couvre déjà cette action.
            if supports_firmware and label == FIRMWARE_SETUP_LABEL:
                logger.debug(f"[BootTargetCatalog] Entrée firmware redondante ignorée: {raw!r}")
                continue
            targets.append(BootTarget.boot_loader_entry(raw, label))

        return cls(targets=tuple(_disambiguate(targets)))

    @classmethod
    def refresh(cls, source: BootTargetSource, rules: Sequence[LabelRule] = KNOWN_ENTRY_RULES) -> BootTargetCatalog:
        """Interroge login1 (une requête de capacité, une lecture d'entrées) et construit le catalogue.

        Raises:
            IpcFailure: Propagée telle quelle; aucun catalogue partiel n'est produit
        """
        capability = source.query_firmware_setup_capability()
        raw_entries = source.list_boot_loader_entries()
        catalog = cls.build(capability, raw_entries, rules)
        logger.info(
            f"[BootTargetCatalog.refresh] {len(catalog)} cibles "
            f"(firmware={capability.value}, entrées brutes={len(raw_entries)})"
        )
        return catalog
