"""
Firebase Repository - Firestore access for water sources and reports.

The Firestore client is synchronous, so every call runs in a worker thread and
the coroutine resumes on the caller's event loop with the result.
"""

from typing import Any, Callable, List, Optional
import asyncio
import logging

from google.cloud.firestore_v1 import Query

from ..core.config import request_timeout
from ..core.exceptions import ReportSubmitError, SourceFetchError
from ..database.collections import COLLECTIONS
from ..database.firestore_client import get_firestore_client
from ..models.database_models import Report, WaterSource
from ..models.results import OperationResult
from .record_normalizer import normalize_documents

logger = logging.getLogger(__name__)


class FirebaseRepository:
    """Reads water sources from and appends reports to Firestore"""

    def __init__(self, db=None, timeout: Optional[float] = None):
        self._db = db
        self.timeout = timeout if timeout is not None else request_timeout()

    @property
    def db(self):
        if self._db is None:
            self._db = get_firestore_client()
        return self._db

    async def _run(self, func: Callable[..., Any], *args) -> Any:
        call = asyncio.to_thread(func, *args)
        if self.timeout:
            try:
                return await asyncio.wait_for(call, self.timeout)
            except asyncio.TimeoutError:
                raise TimeoutError(f"Firestore did not respond within {self.timeout}s")
        return await call

    async def get_water_sources(self) -> OperationResult[List[WaterSource]]:
        """Fetch every water source ordered by name; malformed documents are skipped."""
        try:
            query = self.db.collection(COLLECTIONS['water_sources']).order_by(
                'name', direction=Query.ASCENDING
            )
            documents = await self._run(query.get)
        except Exception as e:
            error_message = f"Error loading water sources: {e}"
            logger.error(error_message)
            return OperationResult.fail(SourceFetchError(error_message))

        water_sources = normalize_documents(documents)
        logger.info(f"Successfully loaded {len(water_sources)} water sources")
        return OperationResult.ok(water_sources)

    async def submit_report(self, report: Report) -> OperationResult[None]:
        """Append a report document. Not idempotent: every call creates a new document."""
        try:
            collection = self.db.collection(COLLECTIONS['reports'])
            _, doc_ref = await self._run(collection.add, report.to_document())
        except Exception as e:
            error_message = f"Error submitting report: {e}"
            logger.error(error_message)
            return OperationResult.fail(ReportSubmitError(error_message))

        # The generated id is only logged; callers never re-read reports
        logger.info(f"Report submitted with ID: {doc_ref.id}")
        return OperationResult.ok()
