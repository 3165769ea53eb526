"""
Holder-state reconciliation for inventory movements.

An item is held by a location, a person (organizer), both, or neither.
Recording a movement:

- fills any source (from_*) field the caller omitted from the item's current holder;
- rejects an explicit source field that disagrees with the current holder (stale read);
- requires at least one destination;
- hands the item over to exactly the destination and moves its status along with the reason.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple
from uuid import UUID


# Reasons that imply a status change. Other reasons keep the item's status.
REASON_STATUS: Dict[str, str] = {
    "checkout": "checked_out",
    "return": "active",
    "lost": "lost",
    "disposed": "disposed",
}

IMMOVABLE_STATUSES = frozenset({"archived"})

SOURCE_FIELDS = ("from_location_id", "from_organizer_id")


class MovementError(Exception):
    """A movement that cannot be recorded against the item's current state."""


class HolderConflict(MovementError):
    """The caller's view of the current holder is out of date."""


@dataclass(frozen=True)
class Holder:
    location_id: Optional[int] = None
    organizer_id: Optional[UUID] = None

    @property
    def is_unassigned(self) -> bool:
        return self.location_id is None and self.organizer_id is None

    @classmethod
    def of(cls, item) -> "Holder":
        return cls(
            location_id=getattr(item, "holder_location_id", None),
            organizer_id=getattr(item, "holder_organizer_id", None),
        )


@dataclass(frozen=True)
class ResolvedMovement:
    source: Holder
    destination: Holder
    status: str


def status_after(current: str, reason: str) -> str:
    return REASON_STATUS.get(reason, current)


def resolve_movement(
    item,
    *,
    reason: str,
    destination: Holder,
    claimed_source: Optional[Mapping[str, object]] = None,
) -> ResolvedMovement:
    """
    Reconcile a requested movement with the item's current holder.

    `claimed_source` holds only the from_* fields the caller set explicitly
    (an explicit None means "the caller believes this side is empty").
    """
    if destination.is_unassigned:
        raise MovementError("Either a destination location or a destination person must be specified")
    if item.status in IMMOVABLE_STATUSES:
        raise MovementError(f"Item is {item.status} and cannot be moved")

    current = Holder.of(item)
    claimed = dict(claimed_source or {})

    if "from_location_id" in claimed and claimed["from_location_id"] != current.location_id:
        raise HolderConflict(
            f"Item is held by location {current.location_id}, not {claimed['from_location_id']}"
        )
    if "from_organizer_id" in claimed and claimed["from_organizer_id"] != current.organizer_id:
        raise HolderConflict(
            f"Item is held by person {current.organizer_id}, not {claimed['from_organizer_id']}"
        )

    return ResolvedMovement(
        source=current,
        destination=destination,
        status=status_after(item.status, reason),
    )


def apply_movement(item, resolved: ResolvedMovement) -> None:
    """Transfer ownership: the destination becomes the item's only holder."""
    item.holder_location_id = resolved.destination.location_id
    item.holder_organizer_id = resolved.destination.organizer_id
    item.status = resolved.status


def parse_holder_filter(value: Optional[str]) -> Tuple[str, Optional[object]]:
    """
    Parse an item-table holder filter.

    'all' / '' -> ('all', None), 'unassigned' -> ('unassigned', None),
    'loc:<int>' -> ('loc', int), 'org:<uuid>' -> ('org', UUID).
    """
    v = (value or "").strip()
    if not v or v == "all":
        return ("all", None)
    if v == "unassigned":
        return ("unassigned", None)
    kind, sep, raw = v.partition(":")
    if not sep or not raw:
        raise ValueError(f"Invalid holder filter: {value!r}")
    if kind == "loc":
        try:
            return ("loc", int(raw))
        except ValueError:
            raise ValueError(f"Invalid location id in holder filter: {raw!r}")
    if kind == "org":
        try:
            return ("org", UUID(raw))
        except ValueError:
            raise ValueError(f"Invalid person id in holder filter: {raw!r}")
    raise ValueError(f"Invalid holder filter: {value!r}")


def describe_holder(
    holder: Holder,
    location_names: Mapping[int, str],
    organizer_names: Mapping[UUID, str],
) -> str:
    parts = []
    if holder.location_id is not None:
        parts.append(f"Location: {location_names.get(holder.location_id, 'Unknown Location')}")
    if holder.organizer_id is not None:
        parts.append(f"Person: {organizer_names.get(holder.organizer_id, 'Unknown Person')}")
    return " / ".join(parts) if parts else "Unassigned"
