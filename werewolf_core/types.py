"""Type definitions for attempts, registrations and live display records."""
from __future__ import annotations

from typing import List, Literal, Optional, TypedDict

LiftType = Literal["Squat", "Bench", "Deadlift"]
AttemptStatus = Literal["Pending", "Successful", "Failed"]
Gender = Literal["Male", "Female"]


class Attempt(TypedDict, total=False):
    """An attempt row as delivered by the storage/API layer."""
    id: str
    registrationId: str
    liftType: LiftType
    attemptNumber: int  # 1..3
    weight: Optional[float]  # kg, None until declared
    status: AttemptStatus
    updatedAt: Optional[str]

    # Denormalized convenience fields (may be missing)
    competitorName: Optional[str]
    competitionOrder: Optional[int]


class Registration(TypedDict, total=False):
    """A competitor's entry in a contest."""
    id: str
    competitorId: str
    firstName: str
    lastName: str
    gender: Gender
    competitionOrder: Optional[int]  # lot number
    lifts: List[LiftType]


class Competitor(TypedDict, total=False):
    firstName: str
    lastName: str
    gender: Gender
    club: Optional[str]
    competitionOrder: Optional[int]


class CurrentAttempt(TypedDict, total=False):
    """
    Flattened view of the attempt on the platform.

    This is the only shape displays ever receive.
    """
    id: str
    registrationId: str
    competitorName: str
    liftType: LiftType
    attemptNumber: int
    weight: Optional[float]
    status: AttemptStatus
    competitionOrder: Optional[int]
    updatedAt: Optional[str]


class CurrentAttemptBundle(TypedDict, total=False):
    attempt: Attempt
    competitor: Competitor
    registration: Registration


class DeskEvent(TypedDict, total=False):
    """
    Event payload accepted by the live desk.

    Fields vary by event type.
    """
    type: str

    # ATTEMPT_UPSERTED
    attempt: Attempt

    # ATTEMPT_DELETED / WEIGHT_CHANGE
    attemptId: str

    # WEIGHT_CHANGE
    weight: float

    # REGISTRATIONS_LOADED
    registrations: List[Registration]

    # CURRENT_ATTEMPT_SET
    bundle: CurrentAttemptBundle
