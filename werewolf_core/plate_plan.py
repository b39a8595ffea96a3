"""Bar/plate loadability checks for declared attempt weights.

A weight is loadable when it can be built exactly from the bar plus plates
loaded symmetrically (same plates on both sleeves) out of a fixed inventory.

- Plates are consumed greedily in inventory order, as many pairs as fit.
- Weights arrive as decimal input, so a request within LOAD_TOLERANCE of a
  buildable total is accepted and normalized to that total.
- Requests below the bar (or non-numeric / non-positive) short-circuit with
  reason "below_bar"; no plate search is attempted.

Pure functions: no I/O, never raise for malformed weights.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal, Mapping

from .fallback import is_finite_number

logger = logging.getLogger(__name__)

FLOAT_EPSILON = 1e-6
LOAD_TOLERANCE = 0.01
# Each sleeve carries half of the total, so half of the total tolerance.
SIDE_TOLERANCE = LOAD_TOLERANCE / 2
FALLBACK_INCREMENT = 2.5
DEFAULT_BAR_WEIGHT = 20.0

# Wider than a bare FLOAT_EPSILON exactness check on purpose: a request within
# LOAD_TOLERANCE of a buildable total (e.g. 142.51 -> 142.5) must count as
# loadable, which an epsilon-only remainder check rejects.
_SIDE_SLACK = SIDE_TOLERANCE + FLOAT_EPSILON

DEFAULT_PLATE_COLOR = "#374151"

# Standard competition colour coding by plate weight.
PLATE_COLORS: Mapping[float, str] = MappingProxyType(
    {
        25.0: "#DC2626",
        2.5: "#DC2626",
        20.0: "#2563EB",
        2.0: "#2563EB",
        15.0: "#EAB308",
        1.5: "#EAB308",
        10.0: "#16A34A",
        1.25: "#16A34A",
        1.0: "#16A34A",
        5.0: "#F8FAFC",
        0.5: "#6B7280",
    }
)

LoadReason = Literal["unloadable", "below_bar"]


@dataclass(frozen=True)
class PlateSpec:
    weight: float
    pairs: int
    color: str | None = None


def plate_color(weight: float, color: str | None = None) -> str:
    """Configured colour if set, else the standard colour for the weight."""
    if isinstance(color, str) and color.strip():
        return color
    return PLATE_COLORS.get(float(weight), DEFAULT_PLATE_COLOR)


@dataclass(frozen=True)
class PlateLoad:
    """Plates of one weight on a single sleeve."""

    weight: float
    count: int
    color: str


@dataclass(frozen=True)
class PlateInventory:
    # Order matters: plates are tried in this order, not sorted by weight.
    plates: tuple[PlateSpec, ...]
    bar_weights: Mapping[str, float]
    primary_gender: str = "Male"

    def bar_weight_for(self, gender: Any) -> float:
        """Bar for the gender; unknown genders get the primary gender's bar."""
        if isinstance(gender, str) and gender in self.bar_weights:
            return float(self.bar_weights[gender])
        return float(self.bar_weights.get(self.primary_gender, DEFAULT_BAR_WEIGHT))


DEFAULT_PLATE_SET: tuple[PlateSpec, ...] = (
    PlateSpec(weight=25.0, pairs=4),
    PlateSpec(weight=20.0, pairs=4),
    PlateSpec(weight=15.0, pairs=4),
    PlateSpec(weight=10.0, pairs=6),
    PlateSpec(weight=5.0, pairs=6),
    PlateSpec(weight=2.5, pairs=6),
    PlateSpec(weight=1.25, pairs=4),
    PlateSpec(weight=0.5, pairs=4),
)

DEFAULT_BAR_WEIGHTS: Mapping[str, float] = MappingProxyType({"Male": 20.0, "Female": 15.0})

DEFAULT_INVENTORY = PlateInventory(plates=DEFAULT_PLATE_SET, bar_weights=DEFAULT_BAR_WEIGHTS)


@dataclass(frozen=True)
class PlatePlanSummary:
    exact: bool
    total: float
    increment: float
    bar_weight: float
    # Per-side loading order (inventory order)
    plates: tuple[PlateLoad, ...] = ()


@dataclass(frozen=True)
class LoadCheckResult:
    loadable: bool
    normalized: float
    increment: float
    bar_weight: float
    reason: LoadReason | None


def compute_increment(inventory: PlateInventory = DEFAULT_INVENTORY) -> float:
    """Smallest available plate, doubled (one per sleeve)."""
    smallest = 0.0
    for plate in inventory.plates:
        if plate.pairs <= 0 or plate.weight <= 0:
            continue
        if smallest == 0.0 or plate.weight < smallest:
            smallest = plate.weight
    return smallest * 2 if smallest > 0 else FALLBACK_INCREMENT


def build_plate_plan(
    target_weight: float,
    gender: Any,
    inventory: PlateInventory = DEFAULT_INVENTORY,
) -> PlatePlanSummary:
    """
    Greedy per-side plate plan for ``target_weight``.

    ``total`` is what actually ends up on the bar; ``exact`` tells whether the
    per-side remainder was fully consumed.
    """
    bar_weight = inventory.bar_weight_for(gender)
    increment = compute_increment(inventory)
    required_per_side = max(0.0, target_weight - bar_weight) / 2
    remaining = required_per_side
    loaded: list[PlateLoad] = []

    for plate in inventory.plates:
        if remaining <= _SIDE_SLACK:
            break
        if plate.weight <= 0 or plate.pairs <= 0:
            continue
        if plate.weight - remaining > _SIDE_SLACK:
            continue
        count = min(int(math.floor((remaining + _SIDE_SLACK) / plate.weight)), plate.pairs)
        if count > 0:
            remaining -= count * plate.weight
            loaded.append(
                PlateLoad(
                    weight=float(plate.weight),
                    count=count,
                    color=plate_color(plate.weight, plate.color),
                )
            )

    side_load = max(0.0, required_per_side - remaining)
    return PlatePlanSummary(
        exact=abs(remaining) <= _SIDE_SLACK,
        total=bar_weight + side_load * 2,
        increment=increment,
        bar_weight=bar_weight,
        plates=tuple(loaded),
    )


def evaluate_attempt_weight(
    weight: Any,
    gender: Any,
    inventory: PlateInventory = DEFAULT_INVENTORY,
) -> LoadCheckResult:
    """
    Check whether ``weight`` can be loaded for a lifter of ``gender``.

    Returns:
      LoadCheckResult with:
      - loadable: True when an exact plan lands within LOAD_TOLERANCE of the request
      - normalized: achieved total rounded to 2 decimals (bar weight for below_bar)
      - reason: None | "below_bar" | "unloadable"
    """
    bar_weight = inventory.bar_weight_for(gender)
    increment = compute_increment(inventory)

    if not is_finite_number(weight) or weight <= 0 or weight < bar_weight - LOAD_TOLERANCE:
        return LoadCheckResult(
            loadable=False,
            normalized=bar_weight,
            increment=increment,
            bar_weight=bar_weight,
            reason="below_bar",
        )

    plan = build_plate_plan(float(weight), gender, inventory)
    loadable = plan.exact and abs(plan.total - weight) <= LOAD_TOLERANCE + FLOAT_EPSILON
    normalized = round(plan.total, 2)
    if not loadable:
        logger.debug(f"Weight {weight} not loadable on {bar_weight} kg bar, nearest {normalized}")

    return LoadCheckResult(
        loadable=loadable,
        normalized=normalized,
        increment=plan.increment,
        bar_weight=plan.bar_weight,
        reason=None if loadable else "unloadable",
    )


def normalize_attempt_weight(
    weight: Any,
    gender: Any,
    inventory: PlateInventory = DEFAULT_INVENTORY,
) -> float:
    return round(evaluate_attempt_weight(weight, gender, inventory).normalized, 2)


def is_attempt_weight_loadable(
    weight: Any,
    gender: Any,
    inventory: PlateInventory = DEFAULT_INVENTORY,
) -> bool:
    return evaluate_attempt_weight(weight, gender, inventory).loadable
