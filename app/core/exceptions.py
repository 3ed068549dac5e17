"""
Error types for the water source service.

Transport failures are returned inside an OperationResult rather than raised;
only ReportValidationError is raised to callers, since a blank issue is a
precondition violation and never reaches Firestore.
"""

from typing import Optional


class WaterFinderError(Exception):
    """Base error carrying a human-readable message"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RecordDecodeError(WaterFinderError):
    """A single Firestore document could not be turned into a WaterSource"""

    def __init__(self, document_id: str, field: str, message: str):
        super().__init__(message)
        self.document_id = document_id
        self.field = field


class SourceFetchError(WaterFinderError):
    pass


class ReportSubmitError(WaterFinderError):
    pass


class ReportValidationError(WaterFinderError):
    pass


class FirebaseUnavailableError(WaterFinderError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Firebase is not initialized")
