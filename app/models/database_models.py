from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
import time


def current_millis() -> int:
    return int(time.time() * 1000)


# Water Source Model
class WaterSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str = ""
    type: str = ""  # Borehole, Kiosk, Dam (not enforced)
    location: str = ""
    status: str = ""  # "Available" is the only value treated specially
    last_updated: int = 0  # epoch milliseconds, 0 when unknown


# Report Model
class Report(BaseModel):
    id: Optional[str] = None  # assigned by Firestore on insert
    source_name: str = ""  # display name of the water source, not its id
    issue: str = ""
    timestamp: int = Field(default_factory=current_millis)

    def to_document(self) -> Dict[str, Any]:
        """Fields written to the reports collection."""
        return {
            'sourceName': self.source_name,
            'issue': self.issue,
            'timestamp': self.timestamp,
        }


# Snapshot of everything the state holder exposes
class WaterSourceState(BaseModel):
    model_config = ConfigDict(frozen=True)

    sources: List[WaterSource] = Field(default_factory=list)
    is_loading: bool = False
    is_submitting: bool = False
    error_message: str = ""  # empty means no error
    success_message: str = ""
