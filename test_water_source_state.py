import asyncio

import pytest

from app.core.exceptions import ReportSubmitError, ReportValidationError, SourceFetchError
from app.models.database_models import Report, WaterSource
from app.models.results import OperationResult
from app.services.water_source_state import (
    LOAD_ERROR_MESSAGE,
    SUBMIT_ERROR_MESSAGE,
    SUBMIT_SUCCESS_MESSAGE,
    WaterSourceStateHolder,
)

# Async tests
pytestmark = pytest.mark.asyncio


class FakeRepository:
    """Returns queued results; each call waits on its own gate when gated."""

    def __init__(self, fetch_results=None, submit_results=None, gated=False):
        self.fetch_results = list(fetch_results or [])
        self.submit_results = list(submit_results or [])
        self.gated = gated
        self.gates = []
        self.fetch_calls = 0
        self.submitted = []

    async def _wait_gate(self):
        if self.gated:
            gate = asyncio.Event()
            self.gates.append(gate)
            await gate.wait()

    async def get_water_sources(self):
        self.fetch_calls += 1
        result = self.fetch_results.pop(0) if self.fetch_results else OperationResult.ok([])
        await self._wait_gate()
        return result

    async def submit_report(self, report):
        self.submitted.append(report)
        result = self.submit_results.pop(0) if self.submit_results else OperationResult.ok()
        await self._wait_gate()
        return result


def sources(*names):
    return [WaterSource(id=f"id-{n}", name=n, status="Available") for n in names]


def fetch_failure():
    return OperationResult.fail(SourceFetchError("Error loading water sources: UNAVAILABLE"))


async def make_holder(repo):
    holder = WaterSourceStateHolder(repo)
    await holder.initial_load
    return holder


async def test_initial_state_and_load_on_creation():
    repo = FakeRepository(fetch_results=[OperationResult.ok(sources("Athi", "Kalundu"))])

    holder = WaterSourceStateHolder(repo)
    assert holder.is_loading is True
    assert holder.sources == []
    assert holder.is_submitting is False
    assert holder.error_message == ""
    assert holder.success_message == ""

    await holder.initial_load

    assert repo.fetch_calls == 1
    assert holder.is_loading is False
    assert [s.name for s in holder.sources] == ["Athi", "Kalundu"]


async def test_load_replaces_sources():
    repo = FakeRepository(fetch_results=[
        OperationResult.ok(sources("Athi", "Kalundu")),
        OperationResult.ok(sources("Mutomo")),
    ])
    holder = await make_holder(repo)

    await holder.load()

    assert [s.name for s in holder.sources] == ["Mutomo"]


async def test_load_failure_keeps_previous_sources():
    repo = FakeRepository(fetch_results=[OperationResult.ok(sources("Athi", "Kalundu")), fetch_failure()])
    holder = await make_holder(repo)
    before = holder.sources

    await holder.load()

    assert holder.sources == before
    assert holder.error_message == LOAD_ERROR_MESSAGE
    assert holder.is_loading is False


async def test_load_clears_previous_error():
    repo = FakeRepository(fetch_results=[fetch_failure(), OperationResult.ok(sources("Athi"))])
    holder = await make_holder(repo)
    assert holder.error_message == LOAD_ERROR_MESSAGE

    task = holder.refresh()
    assert holder.error_message == ""
    assert holder.is_loading is True
    await task

    assert holder.error_message == ""
    assert repo.fetch_calls == 2


async def test_load_returns_before_fetch_completes():
    repo = FakeRepository(fetch_results=[OperationResult.ok(sources("Athi"))], gated=True)
    holder = WaterSourceStateHolder(repo)
    await asyncio.sleep(0)

    assert holder.is_loading is True
    assert not holder.initial_load.done()

    repo.gates[0].set()
    await holder.initial_load
    assert holder.is_loading is False


async def test_concurrent_loads_last_to_complete_wins():
    repo = FakeRepository(
        fetch_results=[OperationResult.ok(sources("Initial")), OperationResult.ok(sources("First")), OperationResult.ok(sources("Second"))],
        gated=True,
    )
    holder = WaterSourceStateHolder(repo)
    await asyncio.sleep(0)
    repo.gates[0].set()
    await holder.initial_load

    first = holder.load()
    second = holder.load()
    await asyncio.sleep(0)
    assert len(repo.gates) == 3

    # Second request finishes first, then the first one overwrites it
    repo.gates[2].set()
    await second
    assert [s.name for s in holder.sources] == ["Second"]
    assert holder.is_loading is False

    repo.gates[1].set()
    await first
    assert [s.name for s in holder.sources] == ["First"]
    assert repo.fetch_calls == 3


async def test_submit_report_success():
    repo = FakeRepository(gated=True)
    holder = WaterSourceStateHolder(repo)
    await asyncio.sleep(0)
    repo.gates[0].set()
    await holder.initial_load

    completions = []
    report = Report(source_name="Athi Kiosk", issue="Tap leaking")

    task = holder.submit_report(report, on_complete=lambda: completions.append(True))
    assert holder.is_submitting is True
    assert holder.error_message == ""
    assert holder.success_message == ""

    await asyncio.sleep(0)
    repo.gates[1].set()
    await task

    assert holder.is_submitting is False
    assert holder.error_message == ""
    assert holder.success_message == SUBMIT_SUCCESS_MESSAGE
    assert completions == [True]
    assert repo.submitted == [report]


async def test_submit_report_failure_does_not_complete():
    repo = FakeRepository(submit_results=[OperationResult.fail(ReportSubmitError("Error submitting report: denied"))])
    holder = await make_holder(repo)
    completions = []

    await holder.submit_report(Report(source_name="Dam", issue="Dry"), on_complete=lambda: completions.append(True))

    assert completions == []
    assert holder.is_submitting is False
    assert holder.error_message == SUBMIT_ERROR_MESSAGE
    assert holder.success_message == ""


@pytest.mark.parametrize("issue", ["", "   ", "\n\t"])
async def test_blank_issue_never_reaches_repository(issue):
    repo = FakeRepository()
    holder = await make_holder(repo)

    with pytest.raises(ReportValidationError):
        holder.submit_report(Report(source_name="Dam", issue=issue), on_complete=lambda: None)

    assert repo.submitted == []
    assert holder.is_submitting is False


async def test_can_submit():
    repo = FakeRepository(gated=True)
    holder = WaterSourceStateHolder(repo)
    await asyncio.sleep(0)
    repo.gates[0].set()
    await holder.initial_load

    assert holder.can_submit("No water") is True
    assert holder.can_submit("  ") is False
    assert holder.can_submit("") is False

    task = holder.submit_report(Report(source_name="Dam", issue="Dry"), on_complete=lambda: None)
    assert holder.can_submit("No water") is False

    await asyncio.sleep(0)
    repo.gates[1].set()
    await task
    assert holder.can_submit("No water") is True


async def test_lookup():
    holder = await make_holder(FakeRepository(fetch_results=[OperationResult.ok(sources("Athi", "Kalundu"))]))

    assert holder.lookup("id-Kalundu").name == "Kalundu"
    assert holder.lookup("missing") is None


async def test_lookup_before_first_load():
    repo = FakeRepository(gated=True)
    holder = WaterSourceStateHolder(repo)

    assert holder.lookup("id-Athi") is None

    await asyncio.sleep(0)
    repo.gates[0].set()
    await holder.drain()


async def test_clear_messages():
    repo = FakeRepository(fetch_results=[fetch_failure()])
    holder = await make_holder(repo)
    await holder.submit_report(Report(source_name="Dam", issue="Dry"), on_complete=lambda: None)

    holder.clear_error()
    assert holder.error_message == ""
    assert holder.success_message == SUBMIT_SUCCESS_MESSAGE

    holder.clear_success()
    assert holder.success_message == ""
    assert repo.fetch_calls == 1


async def test_subscribers_receive_each_transition():
    repo = FakeRepository(fetch_results=[OperationResult.ok(sources("Athi"))])
    holder = WaterSourceStateHolder(repo)
    seen = []
    unsubscribe = holder.subscribe(seen.append)

    await holder.initial_load
    holder.clear_error()
    unsubscribe()
    holder.clear_success()

    assert [s.is_loading for s in seen] == [False, False]
    assert [s.name for s in seen[0].sources] == ["Athi"]
    assert len(seen) == 2


async def test_failing_listener_does_not_break_transitions():
    repo = FakeRepository(fetch_results=[OperationResult.ok(sources("Athi"))])
    holder = WaterSourceStateHolder(repo)

    def broken(_):
        raise RuntimeError("listener bug")

    holder.subscribe(broken)
    await holder.initial_load

    assert holder.is_loading is False
    assert len(holder.sources) == 1


async def test_loading_and_submitting_are_independent():
    repo = FakeRepository(gated=True)
    holder = WaterSourceStateHolder(repo)
    holder.submit_report(Report(source_name="Dam", issue="Dry"), on_complete=lambda: None)

    assert holder.is_loading is True
    assert holder.is_submitting is True

    await asyncio.sleep(0)
    for gate in repo.gates:
        gate.set()
    await holder.drain()

    assert holder.is_loading is False
    assert holder.is_submitting is False


async def test_sources_property_is_a_copy():
    holder = await make_holder(FakeRepository(fetch_results=[OperationResult.ok(sources("Athi"))]))

    holder.sources.clear()

    assert len(holder.sources) == 1


async def test_failing_completion_callback_is_logged(caplog):
    holder = await make_holder(FakeRepository())

    def navigate_back():
        raise RuntimeError("screen already closed")

    task = holder.submit_report(Report(source_name="Dam", issue="Dry"), on_complete=navigate_back)
    await task

    assert task.exception() is None
    assert holder.is_submitting is False
    assert holder.success_message == SUBMIT_SUCCESS_MESSAGE
    assert "Report completion callback failed" in caplog.text
