"""Projection of an {attempt, competitor, registration} bundle for live displays."""
from __future__ import annotations

from .fallback import Resolved, resolve_first
from .types import Competitor, CurrentAttempt, CurrentAttemptBundle, Registration


def resolve_display_order(
    registration: Registration, competitor: Competitor
) -> Resolved[int | None]:
    """Lot number for displays: registration first, then competitor, else None."""
    return resolve_first(
        [
            ("registration", registration.get("competitionOrder")),
            ("competitor", competitor.get("competitionOrder")),
        ],
        default=None,
    )


def bundle_to_current_attempt(bundle: CurrentAttemptBundle) -> CurrentAttempt:
    # Projection only: the attempt/registration pairing is not checked here.
    attempt = bundle.get("attempt") or {}
    competitor = bundle.get("competitor") or {}
    registration = bundle.get("registration") or {}

    # Displays show "Last First" (the queue's fallback name is "First Last").
    name = f"{competitor.get('lastName') or ''} {competitor.get('firstName') or ''}".strip()

    return {
        "id": attempt.get("id"),
        "registrationId": attempt.get("registrationId"),
        "competitorName": name,
        "liftType": attempt.get("liftType"),
        "attemptNumber": attempt.get("attemptNumber"),
        "weight": attempt.get("weight"),
        "status": attempt.get("status"),
        "competitionOrder": resolve_display_order(registration, competitor).value,
        "updatedAt": attempt.get("updatedAt"),
    }
