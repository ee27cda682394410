"""Save-time orchestration: change detection, snapshotting and side effects."""

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TypeVar

from versioned_records.db.backend import Database
from versioned_records.db.queries import (
    get_version,
    insert_record,
    insert_version,
    list_versions,
    load_prior_state,
    update_record,
)
from versioned_records.errors import (
    ConstraintViolation,
    SequencingInconsistency,
    ValidationFailure,
)
from versioned_records.models.record import VersionedRecord
from versioned_records.models.version import RecordVersion
from versioned_records.registry import VersioningConfig, get_config
from versioned_records.versioning import (
    build_version,
    changed_attributes,
    check_sequence,
    next_version_number,
    snapshot_attributes,
    snapshot_mapping,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=VersionedRecord)

SideEffect = Callable[[VersionedRecord], Awaitable[None]]


class SaveOutcome(StrEnum):
    """How a save was classified."""

    UNCHANGED = "unchanged"
    CHANGED_NEW = "changed_new"
    CHANGED_UPDATE = "changed_update"


@dataclass
class SaveResult:
    """What a save did."""

    record: VersionedRecord
    outcome: SaveOutcome
    version: RecordVersion | None = None
    changed: list[str] = field(default_factory=list)

    @property
    def skipped_side_effects(self) -> bool:
        """True when the save was a no-op and post-save side effects did not run."""
        return self.outcome is SaveOutcome.UNCHANGED


class RecordStore:
    """Saves versioned records, snapshotting every real change.

    Each save runs in one transaction: the prior state is read, and the
    version insert and record write commit together or not at all. Side
    effects run after the commit, once per real change.
    """

    def __init__(self, db: Database, *, side_effects: Iterable[SideEffect] = ()):
        """Initialize with a database connection and optional side effects."""
        self.db = db
        self._side_effects: list[SideEffect] = list(side_effects)

    def add_side_effect(self, effect: SideEffect) -> None:
        """Register an async callable run after every save that changes a record."""
        self._side_effects.append(effect)

    async def save(self, record: R, *, comment: str | None = None) -> SaveResult:
        """Persist a record, creating a version if anything versioned changed.

        The caller's record gets its id, version and timestamps updated only
        after the transaction commits.
        """
        return await self._save(record, record, comment)

    async def _save(self, record: R, state: R, comment: str | None) -> SaveResult:
        """Persist ``state`` as the next state of ``record``.

        ``record`` is only updated once the transaction has committed.
        """
        config = get_config(type(record))
        _validate(state)
        now = datetime.now(UTC)
        current = snapshot_attributes(state, config.non_versioned_columns)

        async with self.db.transaction() as tx:
            prior = None
            if state.id is not None:
                prior = await load_prior_state(tx, config, state.id)

            if prior is None:
                outcome = SaveOutcome.CHANGED_NEW
                changed = changed_attributes(None, current)
                pending = state.model_copy(
                    update={"version": 1, "created_at": state.created_at or now, "updated_at": now}
                )
                record_id = await insert_record(tx, config, pending)
                pending = pending.model_copy(update={"id": record_id})
                version = build_version(pending, 1, config, comment=comment, now=now)
                version = await self._insert_version(tx, config, version)
            else:
                before = snapshot_mapping(prior.attributes, config.non_versioned_columns)
                changed = changed_attributes(before, current)
                if changed:
                    outcome = SaveOutcome.CHANGED_UPDATE
                    existing = await list_versions(tx, config, prior.id)
                    number = next_version_number(existing)
                    check_sequence(existing, number)
                    pending = state.model_copy(
                        update={
                            "version": number,
                            "created_at": prior.created_at,
                            "updated_at": now,
                        }
                    )
                    version = build_version(pending, number, config, comment=comment, now=now)
                    version = await self._insert_version(tx, config, version)
                    await update_record(tx, config, pending)
                else:
                    outcome = SaveOutcome.UNCHANGED
                    version = None
                    pending = state.model_copy(
                        update={
                            "version": prior.version,
                            "created_at": prior.created_at,
                            "updated_at": now,
                        }
                    )
                    await update_record(tx, config, pending)

        for name in type(record).model_fields:
            setattr(record, name, getattr(pending, name))

        if outcome is SaveOutcome.UNCHANGED:
            logger.debug("%s %s unchanged, side effects skipped", config.record_type, record.id)
        else:
            logger.info(
                "Saved %s %s as v%d (%s)",
                config.record_type,
                record.id,
                record.version,
                ", ".join(changed) or "no attributes",
            )
            for effect in self._side_effects:
                await effect(record)

        return SaveResult(record=record, outcome=outcome, version=version, changed=changed)

    async def build_new_version(
        self, record: VersionedRecord, *, comment: str | None = None
    ) -> RecordVersion:
        """Build the record's next version from stored history without saving it."""
        config = get_config(type(record))
        if record.id is None:
            raise ValueError(f"{config.record_type} must be saved before building a version")
        existing = await list_versions(self.db, config, record.id)
        return build_version(record, next_version_number(existing), config, comment=comment)

    async def revert_to(
        self, record: R, number: int, *, comment: str | None = None
    ) -> SaveResult:
        """Restore the attributes of version ``number`` and save them as a new version."""
        config = get_config(type(record))
        if record.id is None:
            raise ValueError(f"{config.record_type} must be saved before it can be reverted")
        snapshot = await get_version(self.db, config, record.id, number)
        if snapshot is None:
            raise ValueError(f"{config.record_type} {record.id} has no version {number}")

        fields = type(record).model_fields
        restored_data = {k: v for k, v in snapshot.data.items() if k in fields}
        try:
            restored = type(record).model_validate({**record.model_dump(), **restored_data})
        except ValueError as e:
            raise ValidationFailure(
                f"Version {number} of {config.record_type} {record.id} no longer validates: {e}"
            ) from e
        return await self._save(record, restored, comment or f"Reverted to version {number}")

    async def get(self, record_type: type[R], record_id: int) -> R | None:
        """Load the current state of a record, or None if it does not exist."""
        stored = await load_prior_state(self.db, get_config(record_type), record_id)
        if stored is None:
            return None
        return record_type.model_validate(
            {
                **stored.data,
                "id": stored.id,
                "version": stored.version,
                "created_at": stored.created_at,
                "updated_at": stored.updated_at,
            }
        )

    async def _insert_version(
        self, tx: Database, config: VersioningConfig, version: RecordVersion
    ) -> RecordVersion:
        try:
            version_id = await insert_version(tx, config, version)
        except ConstraintViolation as e:
            raise SequencingInconsistency(
                f"Version {version.version} of {config.record_type}"
                f" {version.original_record_id} already exists"
            ) from e
        return version.model_copy(update={"id": version_id})


def _validate(record: VersionedRecord) -> None:
    """Run pydantic and record-level rules; raise ValidationFailure on any failure."""
    try:
        type(record).model_validate(record.model_dump())
        record.validate_for_save()
    except ValueError as e:
        raise ValidationFailure(f"{type(record).__name__} failed validation: {e}") from e
