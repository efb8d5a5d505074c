"""Tests pour la machine à états de la session de redémarrage."""

from unittest.mock import MagicMock

import pytest

from reboot_options.config.core_config_settings import DefaultTargetPolicy, RebootOptionsSettings
from reboot_options.core_exceptions import InvalidTransition, RebootRejected
from reboot_options.managers.core_managers_protocol import SessionEndReason
from reboot_options.managers.core_reboot_session import RebootSession, SessionState
from reboot_options.models.core_models_boot_target import BootTarget

WINDOWS = BootTarget.boot_loader_entry("auto-windows", "Windows ")
FIRMWARE = BootTarget.firmware_setup()
DEFAULT = BootTarget.default()


@pytest.fixture
def session(fake_client, tick_source, host):
    return RebootSession(fake_client, tick_source, host=host)


def _run_to_execution(session, tick_source, target=WINDOWS):
    session.arm(target)
    session.start()
    tick_source.tick(session.total_seconds)


class TestArmAndStart:
    """Tests des transitions IDLE -> ARMED -> COUNTING."""

    def test_initial_state(self, session):
        assert session.state is SessionState.IDLE
        assert session.target is None
        assert session.remaining is None
        assert session.total_seconds == 60

    def test_arm_sets_target_without_ipc(self, session, fake_client):
        session.arm(WINDOWS)

        assert session.state is SessionState.ARMED
        assert session.target == WINDOWS
        assert fake_client.calls == []

    def test_double_arm_rejected(self, session):
        session.arm(WINDOWS)

        with pytest.raises(InvalidTransition) as exc_info:
            session.arm(FIRMWARE)

        assert exc_info.value.operation == "arm"
        assert exc_info.value.state == "ARMED"
        assert session.target == WINDOWS

    def test_arm_while_counting_rejected(self, session):
        session.arm(WINDOWS)
        session.start()

        with pytest.raises(InvalidTransition):
            session.arm(FIRMWARE)
        assert session.state is SessionState.COUNTING

    def test_start_requires_armed(self, session):
        with pytest.raises(InvalidTransition, match="start"):
            session.start()

    def test_start_schedules_one_second_ticks(self, session, tick_source):
        session.arm(WINDOWS)
        session.start()

        assert session.state is SessionState.COUNTING
        assert session.remaining == 60
        assert tick_source.intervals == [1]
        assert len(tick_source.active) == 1


class TestCountdown:
    """Tests du compte à rebours."""

    def test_ticks_notify_host(self, session, tick_source, host):
        session.arm(WINDOWS)
        session.start()
        tick_source.tick(3)

        assert session.remaining == 57
        assert host.ticks == [59, 58, 57]

    def test_executes_exactly_once_after_total_ticks(self, session, tick_source, fake_client, host):
        session.arm(WINDOWS)
        session.start()

        tick_source.tick(59)
        assert session.state is SessionState.COUNTING
        assert fake_client.mutating_calls() == []

        tick_source.tick(1)
        assert session.state is SessionState.EXECUTING
        assert fake_client.mutating_calls() == [
            ("set_boot_loader_entry_flag", "auto-windows"),
            ("request_reboot", False),
        ]
        assert tick_source.active == {}

        tick_source.tick(5)
        assert len(fake_client.mutating_calls()) == 2
        assert 0 not in host.ticks

    def test_zero_countdown_executes_immediately(self, fake_client, tick_source, host):
        session = RebootSession(
            fake_client, tick_source, host=host, settings=RebootOptionsSettings(countdown_seconds=0)
        )
        session.arm(FIRMWARE)
        session.start()

        assert session.state is SessionState.EXECUTING
        assert tick_source.intervals == []
        assert fake_client.mutating_calls()[0] == ("set_firmware_setup_flag", True)

    def test_custom_duration(self, fake_client, tick_source):
        session = RebootSession(fake_client, tick_source, settings=RebootOptionsSettings(countdown_seconds=5))
        _run_to_execution(session, tick_source)
        assert session.state is SessionState.EXECUTING


class TestCancel:
    """Tests de l'annulation."""

    def test_cancel_from_idle_is_noop(self, session, host):
        session.cancel()

        assert session.state is SessionState.IDLE
        assert host.ended == []

    def test_cancel_from_armed(self, session, host, fake_client):
        session.arm(WINDOWS)
        session.cancel()

        assert session.state is SessionState.IDLE
        assert session.target is None
        assert host.ended == [SessionEndReason.CANCELLED]
        assert fake_client.calls == []

    def test_cancel_at_tick_30(self, session, tick_source, fake_client, host):
        session.arm(WINDOWS)
        session.start()
        tick_source.tick(30)

        session.cancel()

        assert session.state is SessionState.IDLE
        assert session.remaining is None
        assert session.target is None
        assert fake_client.mutating_calls() == []
        assert tick_source.cancelled == [1]
        assert tick_source.active == {}
        assert host.ended == [SessionEndReason.CANCELLED]

        tick_source.tick(60)
        assert fake_client.mutating_calls() == []

    def test_rearm_after_cancel(self, session):
        session.arm(WINDOWS)
        session.cancel()
        session.arm(FIRMWARE)
        assert session.target == FIRMWARE

    def test_cancel_while_executing_rejected(self, session, tick_source):
        _run_to_execution(session, tick_source)

        with pytest.raises(InvalidTransition, match="cancel"):
            session.cancel()


class TestApply:
    """Tests de l'application de la cible."""

    def test_firmware_target(self, session, tick_source, fake_client):
        _run_to_execution(session, tick_source, FIRMWARE)
        assert fake_client.mutating_calls() == [
            ("set_firmware_setup_flag", True),
            ("request_reboot", False),
        ]

    def test_default_target_skip_policy(self, session, tick_source, fake_client):
        _run_to_execution(session, tick_source, DEFAULT)
        assert fake_client.mutating_calls() == [("request_reboot", False)]

    def test_default_target_clear_policy(self, fake_client, tick_source):
        settings = RebootOptionsSettings(countdown_seconds=1, default_policy=DefaultTargetPolicy.CLEAR)
        session = RebootSession(fake_client, tick_source, settings=settings)
        _run_to_execution(session, tick_source, DEFAULT)

        assert fake_client.mutating_calls() == [
            ("set_firmware_setup_flag", False),
            ("set_boot_loader_entry_flag", ""),
            ("request_reboot", False),
        ]

    def test_interactive_setting_forwarded(self, fake_client, tick_source):
        settings = RebootOptionsSettings(countdown_seconds=1, interactive=True)
        session = RebootSession(fake_client, tick_source, settings=settings)
        _run_to_execution(session, tick_source)
        assert ("request_reboot", True) in fake_client.calls

    def test_separate_reboot_backend(self, fake_client, tick_source):
        backend = MagicMock()
        session = RebootSession(
            fake_client, tick_source, settings=RebootOptionsSettings(countdown_seconds=1), reboot_backend=backend
        )
        _run_to_execution(session, tick_source)

        assert fake_client.mutating_calls() == [("set_boot_loader_entry_flag", "auto-windows")]
        backend.request_reboot.assert_called_once()
        assert backend.request_reboot.call_args.args[0] is False


class TestRebootOutcome:
    """Tests de la complétion asynchrone et de la révocation."""

    def test_success_reports_completed(self, session, tick_source, fake_client, host):
        _run_to_execution(session, tick_source)

        fake_client.complete_reboot(None)

        assert host.ended == [SessionEndReason.COMPLETED]
        assert session.state is SessionState.EXECUTING
        assert ("set_boot_loader_entry_flag", "") not in fake_client.calls

    def test_rejected_reboot_reverts_entry(self, session, tick_source, fake_client, host):
        _run_to_execution(session, tick_source)

        fake_client.complete_reboot(RebootRejected("inhibé"))

        assert fake_client.mutating_calls() == [
            ("set_boot_loader_entry_flag", "auto-windows"),
            ("request_reboot", False),
            ("set_boot_loader_entry_flag", ""),
        ]
        assert host.ended == [SessionEndReason.FAILED]
        assert session.state is SessionState.IDLE
        assert isinstance(session.last_error, RebootRejected)

    def test_rejected_reboot_reverts_firmware(self, session, tick_source, fake_client, host):
        _run_to_execution(session, tick_source, FIRMWARE)

        fake_client.complete_reboot(RebootRejected("permission refusée"))

        assert fake_client.mutating_calls()[-1] == ("set_firmware_setup_flag", False)
        assert host.ended == [SessionEndReason.FAILED]

    def test_rejected_default_target_no_revert_call(self, session, tick_source, fake_client, host):
        _run_to_execution(session, tick_source, DEFAULT)

        fake_client.complete_reboot(RebootRejected("inhibé"))

        assert fake_client.mutating_calls() == [("request_reboot", False)]
        assert host.ended == [SessionEndReason.FAILED]

    def test_apply_failure_reverts_without_reboot(self, session, tick_source, fake_client, host):
        fake_client.fail_on.add("set_boot_loader_entry_flag")

        _run_to_execution(session, tick_source)

        names = [c[0] for c in fake_client.calls]
        assert "request_reboot" not in names
        # Application puis révocation, toutes deux en échec
        assert names.count("set_boot_loader_entry_flag") == 2
        assert session.state is SessionState.IDLE
        assert host.ended == [SessionEndReason.FAILED]

    def test_sync_reboot_failure_reverts(self, session, tick_source, fake_client, host):
        fake_client.fail_on.add("request_reboot")

        _run_to_execution(session, tick_source, FIRMWARE)

        assert fake_client.mutating_calls() == [
            ("set_firmware_setup_flag", True),
            ("request_reboot", False),
            ("set_firmware_setup_flag", False),
        ]
        assert host.ended == [SessionEndReason.FAILED]
        assert session.state is SessionState.IDLE

    def test_revert_failure_is_not_retried(self, session, tick_source, fake_client, host):
        _run_to_execution(session, tick_source)
        fake_client.fail_on.add("set_boot_loader_entry_flag")

        fake_client.complete_reboot(RebootRejected("inhibé"))

        reverts = [c for c in fake_client.calls if c == ("set_boot_loader_entry_flag", "")]
        assert len(reverts) == 1
        assert session.state is SessionState.IDLE
        assert host.ended == [SessionEndReason.FAILED]

    def test_session_reusable_after_failure(self, session, tick_source, fake_client):
        _run_to_execution(session, tick_source)
        fake_client.complete_reboot(RebootRejected("inhibé"))

        session.arm(FIRMWARE)
        assert session.state is SessionState.ARMED
        assert session.last_error is None


class TestDispose:
    """Tests du démontage par l'hôte."""

    def test_dispose_while_counting_stops_timer(self, session, tick_source, fake_client, host):
        session.arm(WINDOWS)
        session.start()
        tick_source.tick(10)

        session.dispose()

        assert session.state is SessionState.IDLE
        assert tick_source.active == {}
        assert host.ended == []
        tick_source.tick(60)
        assert fake_client.mutating_calls() == []

    def test_rejection_after_dispose_still_reverts(self, session, tick_source, fake_client, host):
        _run_to_execution(session, tick_source)
        session.dispose()

        fake_client.complete_reboot(RebootRejected("inhibé"))

        assert fake_client.mutating_calls() == [
            ("set_boot_loader_entry_flag", "auto-windows"),
            ("request_reboot", False),
            ("set_boot_loader_entry_flag", ""),
        ]
        assert host.ended == []
        assert session.state is SessionState.IDLE

    def test_rejection_after_dispose_reverts_firmware(self, session, tick_source, fake_client, host):
        _run_to_execution(session, tick_source, FIRMWARE)
        session.dispose()

        fake_client.complete_reboot(RebootRejected("permission refusée"))

        assert fake_client.mutating_calls()[-1] == ("set_firmware_setup_flag", False)
        assert host.ended == []

    def test_success_after_dispose_no_revert(self, session, tick_source, fake_client, host):
        _run_to_execution(session, tick_source)
        session.dispose()

        fake_client.complete_reboot(None)

        assert ("set_boot_loader_entry_flag", "") not in fake_client.calls
        assert host.ended == []

    def test_dispose_from_idle(self, session, tick_source):
        session.dispose()
        assert session.state is SessionState.IDLE
        assert tick_source.cancelled == []
