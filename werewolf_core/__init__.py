from .current_attempt import bundle_to_current_attempt, resolve_display_order
from .fallback import Default, Found, resolve_first
from .live_desk import (
    BestEffortSink,
    DeskOutcome,
    DeskRejection,
    DeskSnapshot,
    DeskState,
    LiveDesk,
    apply_event,
    build_snapshot,
)
from .plate_plan import (
    DEFAULT_INVENTORY,
    LoadCheckResult,
    PlateInventory,
    PlateLoad,
    PlatePlanSummary,
    PlateSpec,
    build_plate_plan,
    compute_increment,
    evaluate_attempt_weight,
    is_attempt_weight_loadable,
    normalize_attempt_weight,
    plate_color,
)
from .rising_bar import (
    DEFAULT_PHASE,
    QueuePhase,
    RisingBarQueueResult,
    build_rising_bar_queue,
    resolve_competition_order,
    resolve_competitor_name,
)
from .types import Attempt, CurrentAttempt, CurrentAttemptBundle, DeskEvent, Registration
from .validation import InputSanitizer, InventoryConfig, PlateSetEntry, ValidatedEvent

__all__ = [
    "Attempt",
    "CurrentAttempt",
    "CurrentAttemptBundle",
    "DeskEvent",
    "Registration",
    "Found",
    "Default",
    "resolve_first",
    "DEFAULT_INVENTORY",
    "LoadCheckResult",
    "PlateInventory",
    "PlateLoad",
    "PlatePlanSummary",
    "PlateSpec",
    "build_plate_plan",
    "compute_increment",
    "plate_color",
    "evaluate_attempt_weight",
    "is_attempt_weight_loadable",
    "normalize_attempt_weight",
    "DEFAULT_PHASE",
    "QueuePhase",
    "RisingBarQueueResult",
    "build_rising_bar_queue",
    "resolve_competition_order",
    "resolve_competitor_name",
    "bundle_to_current_attempt",
    "resolve_display_order",
    "BestEffortSink",
    "DeskOutcome",
    "DeskRejection",
    "DeskSnapshot",
    "DeskState",
    "LiveDesk",
    "apply_event",
    "build_snapshot",
    "ValidatedEvent",
    "PlateSetEntry",
    "InventoryConfig",
    "InputSanitizer",
]
