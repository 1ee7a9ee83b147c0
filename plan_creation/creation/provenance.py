"""Provenance tracking for configuration field groups.

A provenance record explains why a field group holds its value. Sources are
ordered by authority: default < suggested < user. Suggestion merges only move
a source forward; any explicit user edit forces source = user.
"""

from datetime import datetime, timezone

from loguru import logger

from plan_creation.creation.types import Provenance, ValueSource

SOURCE_AUTHORITY: dict[ValueSource, int] = {
    ValueSource.DEFAULT: 0,
    ValueSource.SUGGESTED: 1,
    ValueSource.USER: 2,
}


def source_authority(source: ValueSource | str) -> int:
    return SOURCE_AUTHORITY[ValueSource(source)]


def create_provenance(
    source: ValueSource | str,
    rationale: tuple[str, ...] | list[str] = (),
    *,
    updated_at: datetime | None = None,
) -> Provenance:
    """Create a provenance record.

    User-authored values carry no confidence; default and suggested values
    start at 0 until a suggestion source reports its own.
    """
    value_source = ValueSource(source)
    return Provenance(
        source=value_source,
        confidence=None if value_source == ValueSource.USER else 0.0,
        rationale=tuple(rationale),
        references=(),
        updated_at=updated_at or datetime.now(timezone.utc),
    )


def mark_user(
    previous: Provenance,
    rationale: tuple[str, ...] = ("user_edit",),
    *,
    updated_at: datetime | None = None,
) -> Provenance:
    """Stamp a user edit on a field group. References of the previous record are kept."""
    return Provenance(
        source=ValueSource.USER,
        confidence=None,
        rationale=rationale,
        references=previous.references,
        updated_at=updated_at or datetime.now(timezone.utc),
    )


def resolve_provenance(current: Provenance, incoming: Provenance, *, force: bool = False) -> Provenance:
    """Choose the provenance that survives a suggestion merge.

    Args:
        current: Provenance currently attached to the field group
        incoming: Provenance reported by the suggestion source
        force: Apply incoming regardless of authority (seed mode)

    Returns:
        incoming when it does not lower authority (or when forced), else current
    """
    if force or source_authority(incoming.source) >= source_authority(current.source):
        return incoming
    logger.debug(
        f"[PROVENANCE] Kept {current.source.value} provenance over lower-authority {incoming.source.value}"
    )
    return current
