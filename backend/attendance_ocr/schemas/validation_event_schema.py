from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from attendance_ocr.constants.statuses import ValidationSeverity
from attendance_ocr.schemas.base import CamelModel


class ValidationEvent(CamelModel):
    """Shape consumed by the notification subsystem. Do not rename fields."""
    model_config = ConfigDict(frozen=True)

    id: str
    severity: ValidationSeverity
    document_id: str
    document_type: str
    confidence: float
    issues: List[str] = Field(default_factory=list)
    timestamp: datetime
    user_id: str
    user_role: str
    action_url: Optional[str] = None
