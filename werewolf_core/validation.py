"""
Input validation schemas using Pydantic v2
Validates live desk events and per-contest plate/bar configuration
"""

import logging
import re
from typing import Dict, List, Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .plate_plan import PlateInventory, PlateSpec
from .rising_bar import LIFT_PRIORITY

logger = logging.getLogger(__name__)

EVENT_TYPES = {
    "ATTEMPT_UPSERTED",
    "ATTEMPT_DELETED",
    "REGISTRATIONS_LOADED",
    "CURRENT_ATTEMPT_SET",
    "CURRENT_ATTEMPT_CLEARED",
    "WEIGHT_CHANGE",
}

ATTEMPT_STATUSES = {"Pending", "Successful", "Failed"}

# ==================== EVENTS ====================


class ValidatedEvent(BaseModel):
    """Live desk event with per-type field requirements"""

    type: str = Field(..., min_length=1, max_length=50, description="Event type")

    attemptId: Optional[str] = Field(
        None, min_length=1, max_length=64, description="Attempt ID"
    )
    weight: Optional[float] = Field(
        None, ge=0.0, le=1000.0, description="Requested weight in kg (0-1000)"
    )
    attempt: Optional[Dict] = Field(None, description="Attempt row")
    registrations: Optional[List[Dict]] = Field(None, description="Registrations list")
    bundle: Optional[Dict] = Field(
        None, description="{attempt, competitor, registration} bundle"
    )

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Validate event type is one of allowed types"""
        if v not in EVENT_TYPES:
            raise ValueError(f"type must be one of {sorted(EVENT_TYPES)}, got {v}")
        return v

    @field_validator("attempt")
    @classmethod
    def validate_attempt(cls, v: Optional[Dict]) -> Optional[Dict]:
        """Validate the attempt row carries identity, lift and attempt number"""
        if v is None:
            return v

        attempt_id = v.get("id")
        if not isinstance(attempt_id, str) or not attempt_id.strip():
            raise ValueError('attempt "id" must be a non-empty string')

        if v.get("liftType") not in LIFT_PRIORITY:
            raise ValueError(f"attempt liftType must be one of {list(LIFT_PRIORITY)}")

        number = v.get("attemptNumber")
        if isinstance(number, bool) or not isinstance(number, int) or not 1 <= number <= 3:
            raise ValueError("attempt attemptNumber must be 1, 2 or 3")

        status = v.get("status", "Pending")
        if status not in ATTEMPT_STATUSES:
            raise ValueError(f"attempt status must be one of {sorted(ATTEMPT_STATUSES)}")

        weight = v.get("weight")
        if weight is not None:
            if isinstance(weight, bool) or not isinstance(weight, (int, float)):
                raise ValueError("attempt weight must be a number")
            if weight < 0:
                raise ValueError("attempt weight cannot be negative")

        return v

    @field_validator("registrations")
    @classmethod
    def validate_registrations(cls, v: Optional[List[Dict]]) -> Optional[List[Dict]]:
        """Validate registrations list format"""
        if v is None:
            return v

        if len(v) > 1000:
            raise ValueError("registrations cannot exceed 1000 entries")

        for i, registration in enumerate(v):
            reg_id = registration.get("id")
            if not isinstance(reg_id, str) or not reg_id.strip():
                raise ValueError(f'registration {i} "id" must be a non-empty string')

        return v

    @field_validator("bundle")
    @classmethod
    def validate_bundle(cls, v: Optional[Dict]) -> Optional[Dict]:
        if v is None:
            return v
        for key in ("attempt", "competitor", "registration"):
            if not isinstance(v.get(key), dict):
                raise ValueError(f'bundle "{key}" must be an object')
        return v

    @model_validator(mode="after")
    def validate_event_fields(self) -> Self:
        """Validate required fields based on event type"""
        event_type = self.type

        if event_type == "ATTEMPT_UPSERTED":
            if self.attempt is None:
                raise ValueError("ATTEMPT_UPSERTED requires attempt")

        elif event_type == "ATTEMPT_DELETED":
            if self.attemptId is None:
                raise ValueError("ATTEMPT_DELETED requires attemptId")

        elif event_type == "REGISTRATIONS_LOADED":
            if self.registrations is None:
                raise ValueError("REGISTRATIONS_LOADED requires registrations")

        elif event_type == "CURRENT_ATTEMPT_SET":
            if self.bundle is None:
                raise ValueError("CURRENT_ATTEMPT_SET requires bundle")

        elif event_type == "WEIGHT_CHANGE":
            if self.attemptId is None:
                raise ValueError("WEIGHT_CHANGE requires attemptId")
            if self.weight is None:
                raise ValueError("WEIGHT_CHANGE requires weight")

        return self

    model_config = ConfigDict(populate_by_name=True, extra="allow")


# ==================== CONFIGURATION ====================


class PlateSetEntry(BaseModel):
    """One plate type of a contest's inventory"""

    plateWeight: float = Field(..., gt=0.0, le=50.0, description="Plate weight in kg")
    # Stored as "quantity" by the plate set endpoints
    pairs: int = Field(..., ge=0, le=50, alias="quantity", description="Pairs available")
    color: Optional[str] = Field(None, description="Hex color, e.g. '#DC2626'")

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not re.fullmatch(r"#[0-9A-Fa-f]{6}", v):
            raise ValueError("color must be a #RRGGBB hex code")
        return v.upper()

    model_config = ConfigDict(populate_by_name=True)


class InventoryConfig(BaseModel):
    """Per-contest plate set and bar weights"""

    plates: List[PlateSetEntry] = Field(default_factory=list)
    barWeights: Dict[str, float] = Field(
        default_factory=lambda: {"Male": 20.0, "Female": 15.0}
    )
    primaryGender: str = Field("Male", min_length=1, max_length=20)

    @field_validator("barWeights")
    @classmethod
    def validate_bar_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        for gender, bar in v.items():
            if bar <= 0:
                raise ValueError(f"bar weight for {gender} must be positive")
        return v

    @model_validator(mode="after")
    def validate_primary_gender(self) -> Self:
        if self.primaryGender not in self.barWeights:
            raise ValueError(f"barWeights missing primary gender {self.primaryGender}")
        return self

    def to_inventory(self) -> PlateInventory:
        """Build the calculator inventory, keeping the configured plate order"""
        return PlateInventory(
            plates=tuple(
                PlateSpec(weight=entry.plateWeight, pairs=entry.pairs, color=entry.color)
                for entry in self.plates
            ),
            bar_weights=dict(self.barWeights),
            primary_gender=self.primaryGender,
        )


class InputSanitizer:
    """Utility class for input sanitization"""

    @staticmethod
    def sanitize_string(value: str, max_length: int = 255) -> str:
        """Sanitize string input"""
        if not isinstance(value, str):
            return str(value)[:max_length]

        value = value.strip()
        value = value[:max_length]
        value = value.replace("\0", "")

        return value

    @staticmethod
    def sanitize_competitor_name(name: str) -> str:
        """Sanitize competitor name for display - preserve diacritics"""
        name = InputSanitizer.sanitize_string(name, 255)

        # Keep Unicode letters, digits, spaces, dashes, apostrophes, dots
        dangerous_chars = r'[<>{}[\]\\|;()&$`"\*\x00-\x1f\x7f]'
        name = re.sub(dangerous_chars, "", name)

        return name.strip()

    @staticmethod
    def validate_and_sanitize_event(event_dict: dict) -> ValidatedEvent:
        """
        Validate live desk event dictionary

        Returns:
            ValidatedEvent: Validated event object

        Raises:
            ValueError: If validation fails
        """
        try:
            return ValidatedEvent(**event_dict)
        except Exception as e:
            logger.warning(f"Event validation failed: {e}")
            raise ValueError(f"Invalid event: {str(e)}")

    @staticmethod
    def load_inventory(config: dict) -> PlateInventory:
        """
        Validate a plate/bar configuration dict and build the inventory

        Raises:
            ValueError: If validation fails
        """
        try:
            return InventoryConfig(**config).to_inventory()
        except Exception as e:
            logger.warning(f"Inventory config rejected: {e}")
            raise ValueError(f"Invalid inventory config: {str(e)}")


# ==================== EXPORT ====================

__all__ = [
    "ValidatedEvent",
    "PlateSetEntry",
    "InventoryConfig",
    "InputSanitizer",
]
