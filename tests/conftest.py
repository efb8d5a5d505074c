"""Configuration pytest: harnais de tests du core des options de redémarrage.

Active:
- Mocks GLib timers (aucun timer réel)
- Faulthandler pour diagnostiquer les hangs
- Fakes déterministes: client login1, source de ticks manuelle, hôte enregistreur
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

# Ajouter le dossier racine du projet au PYTHONPATH
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pytest
from loguru import logger

from reboot_options.core_exceptions import IpcFailure
from reboot_options.models.core_models_boot_target import FirmwareSetupCapability
from reboot_options.system.core_gi_imports import GLib


def _enable_faulthandler() -> None:
    """Active les dumps de stack en cas de hang/timeout pour garder du contrôle."""
    try:
        import faulthandler

        faulthandler.enable(all_threads=True)
    except Exception:
        pass


def pytest_configure(config):
    """Configuration globale de pytest."""
    del config
    _enable_faulthandler()

    # Stabiliser Loguru pendant les tests: pas d'enqueue (thread/queue).
    try:
        logger.remove()
        logger.add(sys.stderr, enqueue=False)
    except Exception:
        pass

    # Aucun timer GLib réel: les sessions sont pilotées par ManualTickSource.
    GLib.timeout_add_seconds = MagicMock(return_value=1)
    GLib.source_remove = MagicMock(return_value=True)


def pytest_sessionfinish(session, exitstatus):
    """Arrête proprement les handlers Loguru en fin de session."""
    del session, exitstatus
    try:
        logger.complete()
    except Exception:
        pass
    try:
        logger.remove()
    except Exception:
        pass


class FakeLoginManagerClient:
    """Client login1 en mémoire qui enregistre chaque appel.

    `fail_on` contient les noms de méthodes qui lèvent IpcFailure.
    Les demandes de redémarrage restent en attente jusqu'à `complete_reboot()`.
    """

    def __init__(self, capability=FirmwareSetupCapability.NO, entries=None):
        self.capability = capability
        self.entries = list(entries or [])
        self.fail_on: set[str] = set()
        self.calls: list[tuple] = []
        self.pending_reboots: list = []
        self.reconnects = 0

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise IpcFailure(f"{name} indisponible", method=name)

    def query_firmware_setup_capability(self):
        self._record("query_firmware_setup_capability")
        return self.capability

    def list_boot_loader_entries(self):
        self._record("list_boot_loader_entries")
        return list(self.entries)

    def set_firmware_setup_flag(self, enable):
        self._record("set_firmware_setup_flag", enable)

    def set_boot_loader_entry_flag(self, entry_id):
        self._record("set_boot_loader_entry_flag", entry_id)

    def request_reboot(self, interactive, on_done):
        self._record("request_reboot", interactive)
        self.pending_reboots.append(on_done)

    def complete_reboot(self, error=None):
        on_done = self.pending_reboots.pop(0)
        on_done(error)

    def reconnect(self):
        self.reconnects += 1

    def mutating_calls(self) -> list[tuple]:
        """Appels ayant un effet (drapeaux ou redémarrage)."""
        return [c for c in self.calls if c[0] in {"set_firmware_setup_flag", "set_boot_loader_entry_flag", "request_reboot"}]


class ManualTickSource:
    """Source de ticks pilotée à la main par les tests."""

    def __init__(self):
        self._next_id = 1
        self.active: dict[int, object] = {}
        self.cancelled: list[int] = []
        self.intervals: list[int] = []

    def schedule(self, interval_seconds, callback):
        handle = self._next_id
        self._next_id += 1
        self.active[handle] = callback
        self.intervals.append(interval_seconds)
        return handle

    def cancel(self, handle):
        self.cancelled.append(handle)
        self.active.pop(handle, None)

    def tick(self, count: int = 1) -> None:
        for _ in range(count):
            for handle, callback in list(self.active.items()):
                if not callback():
                    self.active.pop(handle, None)


class RecordingHost:
    """Hôte qui enregistre les notifications du core."""

    def __init__(self):
        self.catalogs: list = []
        self.ticks: list[int] = []
        self.ended: list = []

    def on_targets_available(self, catalog):
        self.catalogs.append(catalog)

    def on_countdown_tick(self, remaining):
        self.ticks.append(remaining)

    def on_session_ended(self, reason):
        self.ended.append(reason)


@pytest.fixture
def fake_client():
    return FakeLoginManagerClient()


@pytest.fixture
def tick_source():
    return ManualTickSource()


@pytest.fixture
def host():
    return RecordingHost()
