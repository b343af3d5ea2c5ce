"""Pure state transitions over immutable scenario snapshots.

Every edit to a scenario is expressed as one action applied by
``reduce_state``, which returns a new ``FeasibilityState`` and never
mutates its input. Replaying the same actions from the same starting state
always yields the same result.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Union

from .scenario import (
    DebtFacility,
    DebtLoan,
    EquityPartner,
    FeasibilityState,
    LandLot,
    LineItem,
    SalesUnit,
)


class Collection(Enum):
    """Child collections of a scenario, keyed by their state attribute."""

    LAND_LOTS = "land_lots"
    LINE_ITEMS = "line_items"
    SALES_UNITS = "sales_units"
    DEBT_FACILITIES = "debt_facilities"
    DEBT_LOANS = "debt_loans"
    EQUITY_PARTNERS = "equity_partners"


RECORD_TYPES = {
    Collection.LAND_LOTS: LandLot,
    Collection.LINE_ITEMS: LineItem,
    Collection.SALES_UNITS: SalesUnit,
    Collection.DEBT_FACILITIES: DebtFacility,
    Collection.DEBT_LOANS: DebtLoan,
    Collection.EQUITY_PARTNERS: EquityPartner,
}


@dataclass(frozen=True)
class LoadAll:
    """Replace the whole state (e.g. after loading from storage)."""
    state: FeasibilityState


@dataclass(frozen=True)
class UpdateScenario:
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AddChild:
    collection: Collection
    record: Any


@dataclass(frozen=True)
class UpdateChild:
    collection: Collection
    id: str
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RemoveChild:
    collection: Collection
    id: str


Action = Union[LoadAll, UpdateScenario, AddChild, UpdateChild, RemoveChild]


def _rebuild(record, changes: Dict[str, Any]):
    """Re-run a record through its row constructor with ``changes`` applied.

    Edits arrive as partially entered values (enum strings, blanks, text
    numbers), so they get the same defaults as rows loaded from storage.
    """
    names = {f.name for f in fields(record)}
    unknown = set(changes) - names
    if unknown:
        raise TypeError(
            f"{type(record).__name__} has no field(s) {', '.join(sorted(unknown))}"
        )
    row = {name: getattr(record, name) for name in names}
    row.update(changes)
    return type(record).from_row(row)


def reduce_state(state: FeasibilityState, action: Action) -> FeasibilityState:
    """Apply one action to a state snapshot.

    Updates and removals that name an unknown id leave the state unchanged.

    Args:
        state: Current snapshot.
        action: The transition to apply.

    Returns:
        New FeasibilityState (``state`` itself when nothing changed).

    Raises:
        TypeError: If the action or an added record is of the wrong type, or
            an update names a field the record does not have.
    """
    if isinstance(action, LoadAll):
        return action.state

    if isinstance(action, UpdateScenario):
        return replace(state, scenario=_rebuild(state.scenario, action.changes))

    if isinstance(action, AddChild):
        expected = RECORD_TYPES[action.collection]
        if not isinstance(action.record, expected):
            raise TypeError(
                f"{action.collection.value} expects {expected.__name__}, "
                f"got {type(action.record).__name__}"
            )
        records = getattr(state, action.collection.value)
        record = _rebuild(action.record, {})
        return replace(state, **{action.collection.value: records + (record,)})

    if isinstance(action, UpdateChild):
        records = getattr(state, action.collection.value)
        if not any(r.id == action.id for r in records):
            return state
        updated = tuple(
            _rebuild(r, action.changes) if r.id == action.id else r for r in records
        )
        return replace(state, **{action.collection.value: updated})

    if isinstance(action, RemoveChild):
        records = getattr(state, action.collection.value)
        kept = tuple(r for r in records if r.id != action.id)
        if len(kept) == len(records):
            return state
        return replace(state, **{action.collection.value: kept})

    raise TypeError(f"Unknown action {type(action).__name__}")
