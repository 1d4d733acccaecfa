from __future__ import annotations

import asyncio

import pytest

from wakebot.channels.base import Notifier
from wakebot.core import remarks
from wakebot.core.orchestrator import WakeOrchestrator
from wakebot.core.session import WakePhase, WakeSession
from wakebot.errors import ControlPlaneError, DecodeError, TransportError
from wakebot.machines.models import MachineDescription, MachineTarget

TARGET = MachineTarget(app="mc", machine_id="m1")
CHECKS = {"services": [{"checks": [{"type": "tcp"}]}]}

STOPPED = MachineDescription.model_validate({"id": "m1", "state": "stopped"})
STARTING = MachineDescription.model_validate({"id": "m1", "state": "starting"})
NO_RESULTS = MachineDescription.model_validate({"id": "m1", "state": "started", "config": CHECKS})
CRITICAL = MachineDescription.model_validate({
    "id": "m1",
    "state": "started",
    "config": CHECKS,
    "checks": [{"name": "tcp", "status": "critical"}],
})
READY = MachineDescription.model_validate({
    "id": "m1",
    "state": "started",
    "config": CHECKS,
    "checks": [{"name": "tcp", "status": "passing"}],
})


class FakeClient:
    def __init__(self, results: list[MachineDescription | Exception], *, start_error: Exception | None = None) -> None:
        self.results = results
        self.start_error = start_error
        self.log: list[str] = []

    @property
    def describe_calls(self) -> int:
        return self.log.count("describe")

    async def start(self, target: MachineTarget) -> None:
        assert target == TARGET
        self.log.append("start")
        if self.start_error is not None:
            raise self.start_error

    async def describe(self, target: MachineTarget) -> MachineDescription:
        assert target == TARGET
        index = min(self.describe_calls, len(self.results) - 1)
        self.log.append("describe")
        result = self.results[index]
        if isinstance(result, Exception):
            raise result
        return result


class RecordingNotifier(Notifier):
    name = "recording"

    def __init__(self, log: list[str] | None = None, *, fail: bool = False) -> None:
        self.log = log if log is not None else []
        self.fail = fail
        self.updates: list[str] = []
        self.followups: list[tuple[str, str | None]] = []

    async def post_initial_ack(self, text: str) -> None:
        self.updates.append(text)

    async def update_message(self, text: str) -> None:
        self.log.append(f"update:{text}")
        self.updates.append(text)
        if self.fail:
            raise RuntimeError("discord is down")

    async def post_followup(self, text: str, mention: str | None = None) -> None:
        self.log.append(f"followup:{text}")
        self.followups.append((text, mention))
        if self.fail:
            raise RuntimeError("discord is down")


class SleepRecorder:
    def __init__(self, session: WakeSession | None = None, *, advance: float = 0) -> None:
        self.calls: list[float] = []
        self.session = session
        self.advance = advance

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.session is not None:
            self.session.started_at -= self.advance


def _orchestrator(client: FakeClient, sleep: SleepRecorder, **kwargs) -> WakeOrchestrator:
    return WakeOrchestrator(client, sleep=sleep, remark=lambda: "patience!", **kwargs)


@pytest.mark.asyncio
async def test_start_failure_reports_error_and_never_polls() -> None:
    client = FakeClient([READY], start_error=ControlPlaneError("start machine", 500, "internal boom", target=TARGET))
    notifier = RecordingNotifier()
    sleep = SleepRecorder()
    session = WakeSession(target=TARGET)

    phase = await _orchestrator(client, sleep).run(session, notifier)

    assert phase is WakePhase.FAILED
    assert client.log == ["start"]
    assert sleep.calls == []
    assert len(notifier.updates) == 1
    assert "status 500" in notifier.updates[0]
    assert "internal boom" in notifier.updates[0]
    assert session.error is not None and "internal boom" in session.error
    assert notifier.followups == []


@pytest.mark.asyncio
async def test_transport_failure_on_start_fails_session() -> None:
    client = FakeClient([READY], start_error=TransportError("failed to start machine: connection refused"))
    notifier = RecordingNotifier()

    phase = await _orchestrator(client, SleepRecorder()).run(WakeSession(target=TARGET), notifier)

    assert phase is WakePhase.FAILED
    assert client.describe_calls == 0
    assert "connection refused" in notifier.updates[-1]


@pytest.mark.asyncio
async def test_warm_machine_succeeds_without_sleeping() -> None:
    client = FakeClient([READY])
    notifier = RecordingNotifier()
    sleep = SleepRecorder()
    session = WakeSession(target=TARGET, mention="<@42>")

    phase = await _orchestrator(client, sleep).run(session, notifier)

    assert phase is WakePhase.SUCCEEDED
    assert sleep.calls == []
    assert session.poll_count == 1
    assert notifier.updates == [remarks.CHECKING_HEALTH, remarks.READY]
    assert notifier.followups == []


@pytest.mark.asyncio
async def test_ready_while_polling_posts_followup_with_mention() -> None:
    client = FakeClient([STOPPED, STARTING, READY])
    notifier = RecordingNotifier()
    sleep = SleepRecorder()
    session = WakeSession(target=TARGET, mention="<@42>")

    phase = await _orchestrator(client, sleep, poll_interval=30).run(session, notifier)

    assert phase is WakePhase.SUCCEEDED
    assert sleep.calls == [30, 30]
    assert client.describe_calls == 3
    assert notifier.followups == [(remarks.READY, "<@42>")]
    assert notifier.updates == [remarks.CHECKING_HEALTH]


@pytest.mark.asyncio
async def test_patience_remark_is_emitted_once_on_sixth_poll() -> None:
    log: list[str] = []
    client = FakeClient([NO_RESULTS] * 9 + [READY])
    client.log = log
    notifier = RecordingNotifier(log)
    sleep = SleepRecorder()

    phase = await _orchestrator(client, sleep).run(WakeSession(target=TARGET), notifier)

    assert phase is WakePhase.SUCCEEDED
    assert client.describe_calls == 10
    assert notifier.updates.count("patience!") == 1
    remark_at = log.index("update:patience!")
    assert log[:remark_at].count("describe") == 5
    assert log[remark_at + 1] == "describe"


@pytest.mark.asyncio
async def test_no_patience_remark_before_sixth_poll() -> None:
    client = FakeClient([CRITICAL] * 4 + [READY])
    notifier = RecordingNotifier()

    await _orchestrator(client, SleepRecorder()).run(WakeSession(target=TARGET), notifier)

    assert client.describe_calls == 5
    assert "patience!" not in notifier.updates


@pytest.mark.asyncio
async def test_patience_remark_does_not_depend_on_verdict() -> None:
    client = FakeClient([CRITICAL] * 5 + [READY])
    notifier = RecordingNotifier()

    phase = await _orchestrator(client, SleepRecorder()).run(WakeSession(target=TARGET), notifier)

    assert phase is WakePhase.SUCCEEDED
    assert notifier.updates[-1] == "patience!"
    assert notifier.followups == [(remarks.READY, "")]


@pytest.mark.asyncio
async def test_describe_failures_are_treated_as_waiting() -> None:
    client = FakeClient([
        TransportError("failed to get machine: timed out"),
        DecodeError("failed to decode machine response"),
        ControlPlaneError("get machine", 503, "unavailable"),
        READY,
    ])
    notifier = RecordingNotifier()
    sleep = SleepRecorder()

    phase = await _orchestrator(client, sleep).run(WakeSession(target=TARGET), notifier)

    assert phase is WakePhase.SUCCEEDED
    assert client.log == ["start", "describe", "describe", "describe", "describe"]
    assert len(sleep.calls) == 3


@pytest.mark.asyncio
async def test_max_wait_abandons_and_reports() -> None:
    client = FakeClient([STARTING])
    notifier = RecordingNotifier()
    session = WakeSession(target=TARGET, mention="<@7>")
    sleep = SleepRecorder(session, advance=30)

    phase = await _orchestrator(client, sleep, max_wait=60).run(session, notifier)

    assert phase is WakePhase.ABANDONED
    assert client.describe_calls == 3
    assert sleep.calls == [30.0, 30.0]
    assert notifier.followups == [(remarks.gave_up(60), "<@7>")]


@pytest.mark.asyncio
async def test_cancellation_abandons_session() -> None:
    client = FakeClient([STARTING])
    notifier = RecordingNotifier()
    session = WakeSession(target=TARGET)
    blocked = asyncio.Event()

    async def blocking_sleep(_seconds: float) -> None:
        blocked.set()
        await asyncio.Event().wait()

    orchestrator = WakeOrchestrator(client, sleep=blocking_sleep)
    task = asyncio.create_task(orchestrator.run(session, notifier))
    await asyncio.wait_for(blocked.wait(), timeout=1.0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert session.phase is WakePhase.ABANDONED
    assert client.describe_calls == 1
    assert notifier.followups == []


@pytest.mark.asyncio
async def test_notifier_failures_do_not_abort_session() -> None:
    client = FakeClient([STOPPED, READY])
    notifier = RecordingNotifier(fail=True)

    phase = await _orchestrator(client, SleepRecorder()).run(WakeSession(target=TARGET), notifier)

    assert phase is WakePhase.SUCCEEDED
    assert notifier.followups == [(remarks.READY, "")]


def test_patience_remark_comes_from_fixed_set() -> None:
    for _ in range(20):
        assert remarks.patience_remark() in remarks.PATIENCE_REMARKS


def test_with_mention() -> None:
    assert remarks.with_mention("ready", "<@1>") == "<@1> ready"
    assert remarks.with_mention("ready", None) == "ready"


@pytest.mark.asyncio
async def test_patience_remark_on_first_poll_is_sent_before_first_describe() -> None:
    log: list[str] = []
    client = FakeClient([NO_RESULTS] * 5 + [READY])
    client.log = log
    notifier = RecordingNotifier(log)

    phase = await _orchestrator(client, SleepRecorder(), patience_poll=1).run(WakeSession(target=TARGET), notifier)

    assert phase is WakePhase.SUCCEEDED
    assert notifier.updates.count("patience!") == 1
    remark_at = log.index("update:patience!")
    assert log[:remark_at].count("describe") == 0
    assert log[remark_at + 1] == "describe"
