from typing import Optional

from pydantic import Field

from boomerang.schemas.common import CamelModel
from boomerang.schemas.task import TaskOut


class CaptureRequest(CamelModel):
    transcription: str = ""
    duration: Optional[float] = Field(default=None, ge=0)
    business_context: Optional[str] = None


class SkippedActionOut(CamelModel):
    function: str
    error: str
    reason: str


class CaptureResponse(CamelModel):
    success: bool = True
    capture_id: str
    tasks_generated: list[TaskOut]
    skipped: list[SkippedActionOut] = Field(default_factory=list)
    message: str
