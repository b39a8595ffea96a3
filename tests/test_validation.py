import pytest
from pydantic import ValidationError

from werewolf_core import (
    InputSanitizer,
    InventoryConfig,
    PlateLoad,
    PlateSpec,
    ValidatedEvent,
    build_plate_plan,
)


def test_weight_change_requires_attempt_and_weight():
    event = ValidatedEvent(type="WEIGHT_CHANGE", attemptId="a1", weight=142.5)
    assert event.weight == 142.5

    with pytest.raises(ValidationError):
        ValidatedEvent(type="WEIGHT_CHANGE", attemptId="a1")
    with pytest.raises(ValidationError):
        ValidatedEvent(type="WEIGHT_CHANGE", weight=100)


def test_unknown_event_type_is_rejected():
    with pytest.raises(ValidationError):
        ValidatedEvent(type="DROP_TABLES")


def test_weight_bounds():
    with pytest.raises(ValidationError):
        ValidatedEvent(type="WEIGHT_CHANGE", attemptId="a1", weight=-1)
    with pytest.raises(ValidationError):
        ValidatedEvent(type="WEIGHT_CHANGE", attemptId="a1", weight=1500)


def test_attempt_row_checks():
    good = {"id": "a1", "liftType": "Squat", "attemptNumber": 1, "weight": 100, "status": "Pending"}
    assert ValidatedEvent(type="ATTEMPT_UPSERTED", attempt=good).attempt["id"] == "a1"

    for broken in (
        {**good, "id": ""},
        {**good, "liftType": "Snatch"},
        {**good, "attemptNumber": 4},
        {**good, "attemptNumber": True},
        {**good, "status": "Skipped"},
        {**good, "weight": -2.5},
    ):
        with pytest.raises(ValidationError):
            ValidatedEvent(type="ATTEMPT_UPSERTED", attempt=broken)

    with pytest.raises(ValidationError):
        ValidatedEvent(type="ATTEMPT_UPSERTED")


def test_registrations_and_bundle_shapes():
    ValidatedEvent(type="REGISTRATIONS_LOADED", registrations=[{"id": "r1"}])
    with pytest.raises(ValidationError):
        ValidatedEvent(type="REGISTRATIONS_LOADED", registrations=[{"firstName": "Ana"}])
    with pytest.raises(ValidationError):
        ValidatedEvent(type="CURRENT_ATTEMPT_SET", bundle={"attempt": {}, "competitor": {}})


def test_validate_and_sanitize_event_raises_value_error():
    with pytest.raises(ValueError, match="Invalid event"):
        InputSanitizer.validate_and_sanitize_event({"type": "WEIGHT_CHANGE"})


def test_inventory_config_keeps_plate_order_and_accepts_quantity_alias():
    config = InventoryConfig(
        plates=[
            {"plateWeight": 10, "quantity": 6},
            {"plateWeight": 25, "pairs": 4, "color": "#dc2626"},
        ],
        barWeights={"Male": 20, "Female": 15},
    )
    assert config.plates[1].color == "#DC2626"
    inventory = config.to_inventory()
    assert inventory.plates == (
        PlateSpec(weight=10.0, pairs=6),
        PlateSpec(weight=25.0, pairs=4, color="#DC2626"),
    )
    assert inventory.bar_weight_for("Female") == 15.0
    assert inventory.bar_weight_for("Unknown") == 20.0


def test_inventory_config_rejects_bad_values():
    with pytest.raises(ValidationError):
        InventoryConfig(plates=[{"plateWeight": 0, "quantity": 2}])
    with pytest.raises(ValidationError):
        InventoryConfig(plates=[{"plateWeight": 5, "quantity": -1}])
    with pytest.raises(ValidationError):
        InventoryConfig(barWeights={"Female": 15})
    with pytest.raises(ValidationError):
        InventoryConfig(barWeights={"Male": 0})
    with pytest.raises(ValueError, match="Invalid inventory config"):
        InputSanitizer.load_inventory({"plates": [{"plateWeight": 5, "quantity": 1, "color": "red"}]})


def test_sanitize_competitor_name_keeps_diacritics():
    assert InputSanitizer.sanitize_competitor_name("  Ștefan <b>Ionescu</b>  ") == "Ștefan bIonescu/b"
    assert InputSanitizer.sanitize_competitor_name("O'Connor-Smith") == "O'Connor-Smith"


def test_configured_color_reaches_the_plate_plan():
    inventory = InventoryConfig(
        plates=[{"plateWeight": 25, "quantity": 4, "color": "#7c3aed"}],
    ).to_inventory()
    assert inventory.plates == (PlateSpec(weight=25.0, pairs=4, color="#7C3AED"),)
    plan = build_plate_plan(70, "Male", inventory)
    assert plan.plates == (PlateLoad(weight=25.0, count=1, color="#7C3AED"),)
