"""Live judging desk state (pure transitions + caller-owned holder).

Architecture:
- DeskState holds the contest snapshot: attempts and registrations keyed by id,
  the attempt on the platform, and a monotonic version counter.
- apply_event() takes (state, event) and returns a DeskOutcome; it works on a
  deepcopy so the same input always yields the same output.
- Every accepted event recomputes the rising-bar queue from scratch.
- WEIGHT_CHANGE is gated by the plate-load check; rejected changes leave the
  state untouched and come back as a DeskRejection.

LiveDesk wraps one DeskState per contest. There is no module-level instance:
callers create one, subscribe listeners, and attach best-effort sinks
(cache, broadcast). Sink failures are logged and swallowed.
"""
from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

from .current_attempt import bundle_to_current_attempt
from .plate_plan import DEFAULT_INVENTORY, PlateInventory, evaluate_attempt_weight
from .rising_bar import DEFAULT_QUEUE_LIMIT, QueuePhase, build_rising_bar_queue
from .types import Attempt, CurrentAttempt, DeskEvent, Registration
from .validation import InputSanitizer

logger = logging.getLogger(__name__)


@dataclass
class DeskState:
    attempts: Dict[str, Attempt] = field(default_factory=dict)
    registrations: Dict[str, Registration] = field(default_factory=dict)
    current_attempt: Optional[CurrentAttempt] = None
    version: int = 0


@dataclass(frozen=True)
class DeskSnapshot:
    """What displays and broadcasters receive after each accepted event."""

    version: int
    phase: QueuePhase
    queue: tuple[Attempt, ...]
    current_attempt: Optional[CurrentAttempt]


@dataclass(frozen=True)
class DeskRejection:
    """A domain-level refusal (not a malformed event)."""

    kind: str  # 'below_bar' | 'unloadable' | 'unknown_attempt' | 'attempt_closed'
    attempt_id: str
    requested: float | None = None
    normalized: float | None = None
    message: str | None = None


@dataclass
class DeskOutcome:
    state: DeskState
    snapshot: Optional[DeskSnapshot]
    rejection: Optional[DeskRejection] = None


class BestEffortSink(Protocol):
    def publish(self, snapshot: DeskSnapshot) -> None:
        ...


SnapshotListener = Callable[[DeskSnapshot], None]


def build_snapshot(state: DeskState, limit: int | None = DEFAULT_QUEUE_LIMIT) -> DeskSnapshot:
    queue = build_rising_bar_queue(
        list(state.attempts.values()),
        current_attempt=state.current_attempt,
        registrations=list(state.registrations.values()),
        limit=limit,
    )
    return DeskSnapshot(
        version=state.version,
        phase=queue.phase,
        queue=queue.attempts,
        current_attempt=state.current_attempt,
    )


def _sanitized_attempt(raw: Dict[str, Any]) -> Attempt:
    attempt: Dict[str, Any] = dict(raw)
    attempt.setdefault("status", "Pending")
    if isinstance(attempt.get("competitorName"), str):
        attempt["competitorName"] = InputSanitizer.sanitize_competitor_name(
            attempt["competitorName"]
        )
    return attempt


def _sanitized_registration(raw: Dict[str, Any]) -> Registration:
    registration: Dict[str, Any] = dict(raw)
    for key in ("firstName", "lastName"):
        if isinstance(registration.get(key), str):
            registration[key] = InputSanitizer.sanitize_competitor_name(registration[key])
    return registration


def _sync_current(state: DeskState, attempt: Attempt) -> None:
    # Keep the platform view in step with judging/weight edits of the same attempt.
    current = state.current_attempt
    if current and current.get("id") == attempt.get("id"):
        current["weight"] = attempt.get("weight")
        current["status"] = attempt.get("status")
        current["updatedAt"] = attempt.get("updatedAt", current.get("updatedAt"))


def _check_weight_change(
    state: DeskState, event: DeskEvent, inventory: PlateInventory
) -> tuple[Optional[float], Optional[DeskRejection]]:
    attempt_id = event.get("attemptId")
    requested = event.get("weight")
    attempt = state.attempts.get(attempt_id)
    if attempt is None:
        return None, DeskRejection(
            kind="unknown_attempt",
            attempt_id=attempt_id,
            requested=requested,
            message=f"attempt {attempt_id} not loaded",
        )
    if attempt.get("status") != "Pending":
        return None, DeskRejection(
            kind="attempt_closed",
            attempt_id=attempt_id,
            requested=requested,
            message=f"attempt {attempt_id} already judged ({attempt.get('status')})",
        )

    registration = state.registrations.get(attempt.get("registrationId")) or {}
    verdict = evaluate_attempt_weight(requested, registration.get("gender"), inventory)
    if not verdict.loadable:
        return None, DeskRejection(
            kind=verdict.reason or "unloadable",
            attempt_id=attempt_id,
            requested=requested,
            normalized=verdict.normalized,
            message=f"{requested} kg cannot be loaded, nearest is {verdict.normalized} kg",
        )
    return verdict.normalized, None


def apply_event(
    state: DeskState,
    event: DeskEvent,
    *,
    inventory: PlateInventory = DEFAULT_INVENTORY,
    queue_limit: int | None = DEFAULT_QUEUE_LIMIT,
) -> DeskOutcome:
    """Apply one desk event to a copy of ``state``.

    Event types:
        - ATTEMPT_UPSERTED: insert/replace an attempt row
        - ATTEMPT_DELETED: drop an attempt (clears the platform if it was on it)
        - REGISTRATIONS_LOADED: replace the registrations list
        - CURRENT_ATTEMPT_SET: project a bundle onto the platform
        - CURRENT_ATTEMPT_CLEARED: empty platform
        - WEIGHT_CHANGE: new requested weight, stored normalized if loadable

    Raises:
        ValueError: unknown event type
    """
    new_state = deepcopy(state)
    etype = event.get("type")

    if etype == "ATTEMPT_UPSERTED":
        attempt = _sanitized_attempt(event["attempt"])
        new_state.attempts[attempt["id"]] = attempt
        _sync_current(new_state, attempt)

    elif etype == "ATTEMPT_DELETED":
        attempt_id = event.get("attemptId")
        new_state.attempts.pop(attempt_id, None)
        current = new_state.current_attempt
        if current and current.get("id") == attempt_id:
            new_state.current_attempt = None

    elif etype == "REGISTRATIONS_LOADED":
        new_state.registrations = {
            reg["id"]: _sanitized_registration(reg) for reg in event.get("registrations") or []
        }

    elif etype == "CURRENT_ATTEMPT_SET":
        bundle = event["bundle"]
        new_state.current_attempt = bundle_to_current_attempt(bundle)
        attempt = bundle.get("attempt") or {}
        if attempt.get("id"):
            new_state.attempts[attempt["id"]] = _sanitized_attempt(attempt)

    elif etype == "CURRENT_ATTEMPT_CLEARED":
        new_state.current_attempt = None

    elif etype == "WEIGHT_CHANGE":
        normalized, rejection = _check_weight_change(new_state, event, inventory)
        if rejection is not None:
            return DeskOutcome(state=deepcopy(state), snapshot=None, rejection=rejection)
        attempt = new_state.attempts[event["attemptId"]]
        attempt["weight"] = normalized
        _sync_current(new_state, attempt)

    else:
        raise ValueError(f"unknown desk event type: {etype}")

    new_state.version += 1
    return DeskOutcome(state=new_state, snapshot=build_snapshot(new_state, queue_limit))


class LiveDesk:
    """Caller-owned live desk for one contest.

    Usage:
        desk = LiveDesk(sinks=[broadcaster])
        unsubscribe = desk.subscribe(render)
        desk.dispatch({"type": "WEIGHT_CHANGE", "attemptId": "a1", "weight": 142.5})
    """

    def __init__(
        self,
        state: DeskState | None = None,
        *,
        inventory: PlateInventory = DEFAULT_INVENTORY,
        queue_limit: int | None = DEFAULT_QUEUE_LIMIT,
        sinks: List[BestEffortSink] | None = None,
    ) -> None:
        self._state = state or DeskState()
        self._inventory = inventory
        self._queue_limit = queue_limit
        self._sinks: List[BestEffortSink] = list(sinks or [])
        self._listeners: List[SnapshotListener] = []
        self._snapshot = build_snapshot(self._state, queue_limit)

    @property
    def state(self) -> DeskState:
        return self._state

    @property
    def snapshot(self) -> DeskSnapshot:
        return self._snapshot

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener; it is called with the current snapshot immediately."""
        self._listeners.append(listener)
        listener(self._snapshot)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def add_sink(self, sink: BestEffortSink) -> None:
        self._sinks.append(sink)

    def dispatch(self, event: DeskEvent) -> DeskOutcome:
        """Validate and apply an event, then publish to sinks and notify listeners.

        Sink failures are logged and swallowed. Listener exceptions propagate
        after the new state is committed; later listeners are skipped.

        Raises:
            ValueError: malformed event (see ValidatedEvent)
        """
        validated = InputSanitizer.validate_and_sanitize_event(dict(event))
        if validated.weight is not None:
            event = {**event, "weight": validated.weight}
        outcome = apply_event(
            self._state, event, inventory=self._inventory, queue_limit=self._queue_limit
        )
        if outcome.rejection is not None:
            logger.info(
                f"Rejected {event.get('type')} for {outcome.rejection.attempt_id}: "
                f"{outcome.rejection.kind}"
            )
            return outcome

        self._state = outcome.state
        self._snapshot = outcome.snapshot
        # Sinks first: a raising listener must not starve cache/broadcast.
        self._publish(outcome.snapshot)
        for listener in list(self._listeners):
            listener(outcome.snapshot)
        return outcome

    def _publish(self, snapshot: DeskSnapshot) -> None:
        for sink in self._sinks:
            try:
                sink.publish(snapshot)
            except Exception as e:
                logger.warning(f"Sink {type(sink).__name__} failed for v{snapshot.version}: {e}")
