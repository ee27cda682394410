"""Change detection between persisted and pending attribute snapshots."""

from collections.abc import Mapping
from typing import Any

_MISSING = object()


def changed_attributes(
    before: Mapping[str, Any] | None, after: Mapping[str, Any]
) -> list[str]:
    """Names of versioned attributes whose values differ.

    ``before`` is the persisted baseline; ``None`` means the record was never
    stored, so every attribute counts as changed. An attribute present on
    only one side is a change.
    """
    if before is None:
        return list(after)
    changed = [name for name, value in after.items() if before.get(name, _MISSING) != value]
    changed.extend(name for name in before if name not in after)
    return changed


def has_changes(before: Mapping[str, Any] | None, after: Mapping[str, Any]) -> bool:
    """Whether a save from ``before`` to ``after`` warrants a new version."""
    if before is None:
        return True
    return bool(changed_attributes(before, after))
