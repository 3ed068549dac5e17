"""
Water Source State - the single writer of everything the clients display.

Holds the current list of water sources plus loading/submitting flags and the
error/success messages. Every transition replaces an immutable
WaterSourceState snapshot and notifies subscribers with it. Remote calls are
scheduled on the running event loop and never cancelled; when two loads
overlap, whichever finishes last decides the list.
"""

from typing import Awaitable, Callable, List, Optional, Set
import asyncio
import logging

from ..core.exceptions import ReportValidationError
from ..models.database_models import Report, WaterSource, WaterSourceState
from .firebase_repository import FirebaseRepository

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load water sources. Please check your internet connection."
SUBMIT_ERROR_MESSAGE = "Failed to submit report. Please try again."
SUBMIT_SUCCESS_MESSAGE = "Report submitted successfully!"

StateListener = Callable[[WaterSourceState], None]


class WaterSourceStateHolder:
    def __init__(self, repository: FirebaseRepository):
        self.repository = repository
        self._state = WaterSourceState()
        self._listeners: List[StateListener] = []
        self._pending: Set[asyncio.Task] = set()

        logger.info("Water source state initialized")
        self.initial_load = self.load()

    # ===== Read-only state =====

    @property
    def state(self) -> WaterSourceState:
        return self._state

    @property
    def sources(self) -> List[WaterSource]:
        return list(self._state.sources)

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_submitting(self) -> bool:
        return self._state.is_submitting

    @property
    def error_message(self) -> str:
        return self._state.error_message

    @property
    def success_message(self) -> str:
        return self._state.success_message

    # ===== Observation =====

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for new snapshots; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener failed")

    def _schedule(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight load and submission to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ===== Operations =====

    def load(self) -> asyncio.Task:
        """Start fetching water sources. Returns the in-flight task immediately."""
        logger.info("Loading water sources...")
        self._update(error_message="", is_loading=True)
        return self._schedule(self._finish_load())

    async def _finish_load(self) -> None:
        success, sources, error = await self.repository.get_water_sources()
        if success:
            logger.info(f"Loaded {len(sources)} water sources")
            self._update(sources=sources, is_loading=False)
        else:
            # Keep the previous list visible
            logger.error(f"Failed to load water sources: {error.message}")
            self._update(error_message=LOAD_ERROR_MESSAGE, is_loading=False)

    def refresh(self) -> asyncio.Task:
        logger.info("Refreshing water sources")
        return self.load()

    def can_submit(self, issue_text: str) -> bool:
        return bool(issue_text and issue_text.strip()) and not self.is_submitting

    def submit_report(self, report: Report, on_complete: Callable[[], None]) -> asyncio.Task:
        """
        Start submitting a report. on_complete runs once, only on success.

        Raises:
            ReportValidationError: the issue text is empty or whitespace
        """
        if not report.issue or not report.issue.strip():
            raise ReportValidationError("Issue description must not be empty")

        logger.info(f"Submitting report for {report.source_name}")
        self._update(error_message="", success_message="", is_submitting=True)
        return self._schedule(self._finish_submit(report, on_complete))

    async def _finish_submit(self, report: Report, on_complete: Callable[[], None]) -> None:
        success, _, error = await self.repository.submit_report(report)
        if success:
            logger.info("Report submitted successfully")
            self._update(is_submitting=False, success_message=SUBMIT_SUCCESS_MESSAGE)
            try:
                on_complete()
            except Exception:
                logger.exception("Report completion callback failed")
        else:
            logger.error(f"Failed to submit report: {error.message}")
            self._update(is_submitting=False, error_message=SUBMIT_ERROR_MESSAGE)

    def lookup(self, source_id: str) -> Optional[WaterSource]:
        for source in self._state.sources:
            if source.id == source_id:
                return source
        return None

    def clear_error(self) -> None:
        self._update(error_message="")

    def clear_success(self) -> None:
        self._update(success_message="")
