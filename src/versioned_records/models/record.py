"""Base model for records whose history is versioned."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class VersionedRecord(BaseModel):
    """The live record. Subclasses declare the domain attributes."""

    model_config = ConfigDict(validate_assignment=True)

    id: int | None = None
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def validate_for_save(self) -> None:
        """Record-level integrity rules. Raise ValueError to reject a save."""
