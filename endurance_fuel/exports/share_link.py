"""Encode and decode the shareable calculator state as a query string.

The field set and order are fixed:

    sex, age, weightKg, heightCm, weeklyKm, weeklyBike, weeklySwim,
    weeklyStrength, doubleSessionDays, activityFactor, dayType, goal,
    carbLow, carbHigh, protein, fat, dark

Decoding never fails. A missing or empty field takes its default; a field
that cannot be parsed also takes its default and is reported as a
``FieldIssue`` so the caller can tell the user.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Union
from urllib.parse import parse_qs, urlencode, urlparse

from ..config import config
from ..models import STATE_FIELD_NAMES, DayType, Goal, InputSnapshot, Sex, parse_flag

logger = logging.getLogger(__name__)

ENUM_FIELDS = {
    "sex": Sex,
    "dayType": DayType,
    "goal": Goal,
}
BOOL_FIELDS = ("dark",)


@dataclass(frozen=True)
class FieldIssue:
    """A share field that was malformed and replaced by its default."""
    field: str
    raw_value: str
    reason: str


@dataclass
class DecodedState:
    state: Dict[str, Any]
    issues: List[FieldIssue] = field(default_factory=list)

    def to_snapshot(self, **extra) -> InputSnapshot:
        return InputSnapshot.from_state(self.state, **extra)


def format_value(value: Any) -> str:
    """Text form of one field: integral floats lose their '.0', bools are lowercase."""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_state(state: Union[Mapping[str, Any], InputSnapshot]) -> str:
    """Query string for the 17 shareable fields, always in the canonical order."""
    if isinstance(state, InputSnapshot):
        state = state.to_state()
    defaults = config.get_default_state()
    params = [
        (name, format_value(state.get(name, defaults[name])))
        for name in STATE_FIELD_NAMES
    ]
    return urlencode(params)


def _parse_number(raw: str) -> float:
    number = float(raw)
    if not math.isfinite(number):
        raise ValueError(f"non-finite number {raw!r}")
    return int(number) if number.is_integer() else number


def _query_part(query: str) -> str:
    query = query.strip()
    if "://" in query:
        return urlparse(query).query
    return query.lstrip("?")


def decode_state(query: str) -> DecodedState:
    """Parse a query string (or full URL) into the 17-field state."""
    params = parse_qs(_query_part(query or ""), keep_blank_values=True)
    defaults = config.get_default_state()
    decoded = DecodedState(state=dict(defaults))

    for name in STATE_FIELD_NAMES:
        values = params.get(name)
        if not values or values[0] == "":
            continue
        raw = values[0]

        if name in BOOL_FIELDS:
            decoded.state[name] = parse_flag(raw)
        elif name in ENUM_FIELDS:
            enum_cls = ENUM_FIELDS[name]
            if raw in {member.value for member in enum_cls}:
                decoded.state[name] = raw
            else:
                decoded.issues.append(FieldIssue(name, raw, f"unknown {enum_cls.kind()}"))
        else:
            try:
                decoded.state[name] = _parse_number(raw)
            except ValueError:
                decoded.issues.append(FieldIssue(name, raw, "not a number"))

    for issue in decoded.issues:
        logger.warning(
            f"Share field {issue.field}={issue.raw_value!r} ignored ({issue.reason}); "
            f"using default {defaults[issue.field]!r}"
        )
    return decoded
