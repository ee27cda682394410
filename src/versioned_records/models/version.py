"""Record version models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RecordVersion(BaseModel):
    """An immutable snapshot of a record's versioned attributes."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    record_type: str
    original_record_id: int
    version: int = Field(ge=1)
    data: dict[str, Any] = Field(default_factory=dict)
    version_comment: str | None = None
    created_at: datetime | None = None
