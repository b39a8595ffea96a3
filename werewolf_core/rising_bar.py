"""Rising-bar lifting order.

Decides which lift/attempt phase the room is in and who takes the bar next:
- Phase: the current attempt's (lift, attempt number) when one is on the platform,
  otherwise the earliest pending phase (Squat < Bench < Deadlift, then attempt 1..3).
- Queue: pending attempts of that phase with a declared weight, lightest first;
  equal weights go by lot number, then by competitor name.

The queue is recomputed from the full attempt list on every call; nothing is
patched incrementally.
"""
from __future__ import annotations

import math
import unicodedata
from dataclasses import dataclass
from functools import cmp_to_key
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from .fallback import Resolved, is_finite_number, is_non_empty_text, resolve_first
from .types import Attempt, CurrentAttempt, Registration

FLOAT_EPSILON = 1e-6
DEFAULT_QUEUE_LIMIT = 12
UNKNOWN_COMPETITOR = "Unknown competitor"

LIFT_PRIORITY: Mapping[str, int] = MappingProxyType({"Squat": 0, "Bench": 1, "Deadlift": 2})


@dataclass(frozen=True)
class QueuePhase:
    lift_type: str
    attempt_number: int


DEFAULT_PHASE = QueuePhase(lift_type="Squat", attempt_number=1)


@dataclass(frozen=True)
class RisingBarQueueResult:
    phase: QueuePhase
    attempts: tuple[Attempt, ...]


def _has_declared_weight(attempt: Attempt) -> bool:
    weight = attempt.get("weight")
    return is_finite_number(weight) and weight > 0


def _phase_key(attempt: Attempt) -> tuple[float, float]:
    # Unknown lifts / attempt numbers sort after every known phase.
    priority = LIFT_PRIORITY.get(attempt.get("liftType"), len(LIFT_PRIORITY))
    number = attempt.get("attemptNumber")
    return float(priority), float(number) if is_finite_number(number) else math.inf


def _determine_phase(
    candidates: Sequence[Attempt], current: CurrentAttempt | None
) -> QueuePhase:
    if current:
        return QueuePhase(
            lift_type=current.get("liftType"),
            attempt_number=current.get("attemptNumber"),
        )
    if not candidates:
        return DEFAULT_PHASE

    best = candidates[0]
    best_key = _phase_key(best)
    for attempt in candidates[1:]:
        key = _phase_key(attempt)
        if key < best_key:
            best, best_key = attempt, key
    return QueuePhase(lift_type=best.get("liftType"), attempt_number=best.get("attemptNumber"))


def _registration_for(
    attempt: Attempt, registrations_by_id: Mapping[str, Registration] | None
) -> Registration | None:
    if not registrations_by_id:
        return None
    return registrations_by_id.get(attempt.get("registrationId"))


def resolve_competition_order(
    attempt: Attempt,
    registrations_by_id: Mapping[str, Registration] | None = None,
) -> Resolved[float]:
    """Lot number: attempt row, then registration, else +inf (sorts last)."""
    registration = _registration_for(attempt, registrations_by_id)
    return resolve_first(
        [
            ("attempt", attempt.get("competitionOrder")),
            ("registration", registration.get("competitionOrder") if registration else None),
        ],
        default=math.inf,
        accept=is_finite_number,
    )


def resolve_competitor_name(
    attempt: Attempt,
    registrations_by_id: Mapping[str, Registration] | None = None,
) -> Resolved[str]:
    """Name: attempt's denormalized name, then "first last" from the registration."""
    registration = _registration_for(attempt, registrations_by_id)
    registration_name = None
    if registration is not None:
        first = registration.get("firstName") or ""
        last = registration.get("lastName") or ""
        registration_name = f"{first} {last}".strip()
    return resolve_first(
        [
            ("attempt", attempt.get("competitorName")),
            ("registration", registration_name),
        ],
        default=UNKNOWN_COMPETITOR,
        accept=is_non_empty_text,
    )


# Letters NFKD leaves intact (stroke/ligature forms), folded to their base letter.
_BASE_LETTER_FOLDS = str.maketrans(
    {
        "ø": "o",
        "ł": "l",
        "đ": "d",
        "ħ": "h",
        "ŧ": "t",
        "ı": "i",
        "æ": "ae",
        "œ": "oe",
        "þ": "th",
        "ð": "d",
    }
)


def _name_sort_key(name: str) -> str:
    # Case- and accent-insensitive ("Ștefan" == "stefan", "Øyvind" == "oyvind").
    decomposed = unicodedata.normalize("NFKD", name.casefold())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.translate(_BASE_LETTER_FOLDS)


def _compare_attempts(
    a: Attempt,
    b: Attempt,
    registrations_by_id: Mapping[str, Registration] | None,
) -> int:
    weight_diff = a["weight"] - b["weight"]
    if abs(weight_diff) > FLOAT_EPSILON:
        return -1 if weight_diff < 0 else 1

    order_a = resolve_competition_order(a, registrations_by_id).value
    order_b = resolve_competition_order(b, registrations_by_id).value
    if order_a != order_b:
        return -1 if order_a < order_b else 1

    name_a = _name_sort_key(resolve_competitor_name(a, registrations_by_id).value)
    name_b = _name_sort_key(resolve_competitor_name(b, registrations_by_id).value)
    return (name_a > name_b) - (name_a < name_b)


def build_rising_bar_queue(
    attempts: Sequence[Attempt],
    *,
    current_attempt: CurrentAttempt | None = None,
    registrations: Sequence[Registration] | None = None,
    limit: int | None = DEFAULT_QUEUE_LIMIT,
) -> RisingBarQueueResult:
    """
    Compute the active phase and the next ``limit`` attempts in lifting order.

    Args:
      attempts: every attempt of the contest (any status).
      current_attempt: attempt on the platform; its phase always wins.
      registrations: used for lot number / name when attempt rows lack them.
      limit: queue size; None for the full queue, <= 0 for an empty one.
    """
    registrations_by_id: dict[Any, Registration] = {
        reg.get("id"): reg for reg in (registrations or []) if isinstance(reg, dict)
    }

    pending = [a for a in attempts if a.get("status") == "Pending"]
    weighted = [a for a in pending if _has_declared_weight(a)]

    # Unweighted attempts only help pick the phase; they never enter the queue.
    phase = _determine_phase(weighted if weighted else pending, current_attempt)

    in_phase = [
        a
        for a in weighted
        if a.get("liftType") == phase.lift_type
        and a.get("attemptNumber") == phase.attempt_number
    ]
    ordered = sorted(
        in_phase,
        key=cmp_to_key(lambda a, b: _compare_attempts(a, b, registrations_by_id)),
    )
    if limit is not None:
        ordered = ordered[: max(0, int(limit))]

    return RisingBarQueueResult(phase=phase, attempts=tuple(ordered))
