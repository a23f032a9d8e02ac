"""
Contract tests for the schedule document and WebSocket frames.

Validates that the example documents match the schema contracts and that
malformed variants are rejected. These tests run independently (no server
required).
"""

import json
import pytest
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from contracts.validation import (
    validate_scheduled_flight,
    validate_schedule_response,
    validate_frame_message,
)
from contracts.constants import WS_MESSAGE_TYPE_FRAME


def load_example(filename: str) -> dict:
    """Load example JSON file."""
    example_path = Path(__file__).parent.parent.parent / "contracts" / "examples" / filename
    with open(example_path) as f:
        return json.load(f)


class TestScheduleContract:
    """Test that schedule documents match the ScheduledFlightsResponse schema."""

    def test_schedule_example_validates(self):
        """Test that example schedule validates."""
        example = load_example("flight_schedule.json")
        is_valid, document, error = validate_schedule_response(example)

        assert is_valid, f"Example should validate: {error}"
        assert len(document.flights) == 2
        assert document.metadata.total_flights == 2

    def test_camel_case_fields_map_to_attributes(self):
        """Test that JSON aliases populate snake_case attributes."""
        example = load_example("flight_schedule.json")
        _, document, _ = validate_schedule_response(example)

        flight = document.flights[0]
        assert flight.flight_number == "AA100"
        assert flight.departure_time == 360
        assert flight.arrival_time == 660
        assert flight.aircraft_type == "A321"
        assert flight.origin.code == "LAX"

    def test_overnight_flight_accepted(self):
        """Test that arrival before departure is a valid overnight flight."""
        example = load_example("flight_schedule.json")
        _, document, _ = validate_schedule_response(example)
        assert document.flights[1].is_overnight

    def test_optional_fields(self):
        """Test that airline and aircraftType are optional."""
        example = load_example("flight_schedule.json")["flights"][1]
        is_valid, flight, error = validate_scheduled_flight(example)
        assert is_valid, f"Should validate without optional fields: {error}"
        assert flight.airline is None
        assert flight.aircraft_type is None

    def test_metadata_optional(self):
        """Test that metadata block may be omitted."""
        example = load_example("flight_schedule.json")
        del example["metadata"]
        is_valid, document, error = validate_schedule_response(example)
        assert is_valid, f"Should validate without metadata: {error}"
        assert document.metadata is None

    def test_missing_required_field(self):
        """Test that missing required fields fail validation."""
        example = load_example("flight_schedule.json")["flights"][0]
        del example["flightNumber"]
        is_valid, _, error = validate_scheduled_flight(example)
        assert not is_valid, "Should fail without flightNumber"

    @pytest.mark.parametrize("field,value", [
        ("departureTime", -1),
        ("departureTime", 1440),
        ("arrivalTime", 2000),
        ("arrivalTime", 120.5),
    ])
    def test_invalid_times(self, field, value):
        """Test that times outside whole minutes of [0, 1440) fail validation."""
        example = load_example("flight_schedule.json")["flights"][0]
        example[field] = value
        is_valid, _, error = validate_scheduled_flight(example)
        assert not is_valid, f"Should fail with {field}={value}"

    def test_invalid_coordinates(self):
        """Test that invalid coordinates fail validation."""
        example = load_example("flight_schedule.json")["flights"][0]
        example["origin"]["latitude"] = 91.0
        is_valid, _, _ = validate_scheduled_flight(example)
        assert not is_valid, "Should fail with invalid latitude"

        example = load_example("flight_schedule.json")["flights"][0]
        example["destination"]["longitude"] = -181.0
        is_valid, _, _ = validate_scheduled_flight(example)
        assert not is_valid, "Should fail with invalid longitude"

    def test_same_origin_and_destination(self):
        """Test that a flight must connect two different airports."""
        example = load_example("flight_schedule.json")["flights"][0]
        example["destination"] = example["origin"]
        is_valid, _, error = validate_scheduled_flight(example)
        assert not is_valid
        assert "LAX" in error

    def test_zero_duration(self):
        """Test that departure and arrival at the same minute is rejected."""
        example = load_example("flight_schedule.json")["flights"][0]
        example["arrivalTime"] = example["departureTime"]
        is_valid, _, _ = validate_scheduled_flight(example)
        assert not is_valid

    def test_airport_code_normalized(self):
        """Test that airport codes are uppercased."""
        example = load_example("flight_schedule.json")["flights"][0]
        example["origin"]["code"] = "lax"
        is_valid, flight, _ = validate_scheduled_flight(example)
        assert is_valid
        assert flight.origin.code == "LAX"

    def test_flights_are_immutable(self):
        """Test that validated flights cannot be modified."""
        example = load_example("flight_schedule.json")["flights"][0]
        _, flight, _ = validate_scheduled_flight(example)
        with pytest.raises(Exception):
            flight.departure_time = 0

    def test_fixture_schedule_validates(self):
        """Test that the bundled demo schedule validates as a whole."""
        fixture_path = Path(__file__).parent.parent.parent / "fixtures" / "flight_schedules.json"
        with open(fixture_path) as f:
            is_valid, document, error = validate_schedule_response(json.load(f))
        assert is_valid, f"Fixture should validate: {error}"
        assert len(document.flights) == document.metadata.total_flights


class TestFrameContract:
    """Test that WebSocket frames match the FrameMessage schema."""

    def test_frame_example_validates(self):
        """Test that example frame validates."""
        example = load_example("websocket_frame.json")
        is_valid, message, error = validate_frame_message(example)

        assert is_valid, f"Example should validate: {error}"
        assert message.type == WS_MESSAGE_TYPE_FRAME
        assert len(message.positions) == 1
        assert message.positions[0].altitude == 35000

    def test_frame_time_out_of_range(self):
        """Test that current_time must be within the day."""
        example = load_example("websocket_frame.json")
        example["current_time"] = 1440
        is_valid, _, _ = validate_frame_message(example)
        assert not is_valid, "Should fail with current_time=1440"

    def test_frame_invalid_bearing(self):
        """Test that bearing must be in [0, 360)."""
        example = load_example("websocket_frame.json")
        example["positions"][0]["bearing"] = 360
        is_valid, _, _ = validate_frame_message(example)
        assert not is_valid, "Should fail with bearing=360"

    def test_frame_invalid_progress(self):
        """Test that progress must be in [0, 1]."""
        example = load_example("websocket_frame.json")
        example["positions"][0]["progress"] = 1.5
        is_valid, _, _ = validate_frame_message(example)
        assert not is_valid, "Should fail with progress=1.5"

    def test_frame_empty_positions(self):
        """Test that a frame may carry no aircraft."""
        example = load_example("websocket_frame.json")
        example["positions"] = []
        is_valid, message, error = validate_frame_message(example)
        assert is_valid, f"Should allow empty positions: {error}"
        assert message.positions == []

    def test_frame_non_positive_speed(self):
        """Test that playback speed must be positive."""
        example = load_example("websocket_frame.json")
        example["playback_speed"] = 0
        is_valid, _, _ = validate_frame_message(example)
        assert not is_valid, "Should fail with playback_speed=0"


class TestPackageExports:
    """Test that every advertised contract name exists."""

    def test_contracts_all_resolves(self):
        import contracts
        missing = [name for name in contracts.__all__ if not hasattr(contracts, name)]
        assert missing == [], f"Stale exports: {missing}"

    def test_simulation_all_resolves(self):
        import simulation
        missing = [name for name in simulation.__all__ if not hasattr(simulation, name)]
        assert missing == [], f"Stale exports: {missing}"
