"""Tests for vesting-type definition files."""

import orjson
import pytest
import yaml

from token_vesting.config.schedule_file import (
    load_vesting_types,
    parse_vesting_schedule,
    validate_definition,
)
from token_vesting.errors import ConfigurationError
from token_vesting.schedule import LinearVesting
from token_vesting.utils.time import MONTH

LISTING = 1_646_092_800  # 2022-03-01T00:00:00Z


@pytest.fixture
def seed_definition():
    return {
        "name": "seed",
        "amount": 1_000_000,
        "schedule": [
            {"type": "onetime", "time": "2022-03-01T00:00:00Z", "part": 60_000},
            {"type": "onetime", "time": LISTING + 6 * MONTH, "part": 90_000},
            {"type": "offseted", "offset": "P6M", "period": "P2M", "count": 6, "part": None},
        ],
    }


class TestParseVestingSchedule:
    """Test suite for building schedules from definitions."""

    def test_parse_seed_schedule(self, seed_definition):
        """Test cliffs followed by an offset linear tranche."""
        schedule = parse_vesting_schedule(seed_definition)

        assert schedule.vestings == (
            (60_000, LinearVesting.cliff(LISTING)),
            (90_000, LinearVesting.cliff(LISTING + 6 * MONTH)),
            (850_000, LinearVesting(LISTING + 12 * MONTH, 2 * MONTH, 6)),
        )

    def test_fixed_item(self):
        """Test a linear tranche at an absolute time."""
        schedule = parse_vesting_schedule({
            "name": "team",
            "amount": 300,
            "schedule": [{"type": "fixed", "time": 1_000, "period": "P1D", "count": 3, "part": None}],
        })

        assert schedule.vestings == ((300, LinearVesting(1_000, 86_400, 3)),)

    def test_offseted_without_period(self):
        """Test that an offset item defaults to a single unlock."""
        schedule = parse_vesting_schedule({
            "name": "advisors",
            "amount": 200,
            "schedule": [
                {"type": "onetime", "time": 0, "part": 100},
                {"type": "offseted", "offset": "PT1H"},
            ],
        })

        assert schedule.vestings[1] == (100, LinearVesting.cliff(3_600))

    def test_malformed_definition(self):
        """Test that validation errors are collected per field."""
        errors = validate_definition({
            "name": "",
            "amount": 0,
            "schedule": [
                {"type": "weekly"},
                {"type": "onetime", "time": "yesterday", "part": -1},
                {"type": "offseted", "offset": "6 months", "count": 300},
            ],
        })

        assert {error.field for error in errors} == {
            "name",
            "amount",
            "schedule[0].type",
            "schedule[1].time",
            "schedule[1].part",
            "schedule[2].offset",
            "schedule[2].count",
        }

    def test_several_unlocks_without_period(self):
        """Test that items with more than one unlock need a non-empty period."""
        errors = validate_definition({
            "name": "advisors",
            "amount": 200,
            "schedule": [
                {"type": "onetime", "time": 0, "part": 100},
                {"type": "offseted", "offset": "PT1H", "count": 4},
                {"type": "fixed", "time": 10_000, "period": "P", "count": 2},
            ],
        })

        assert {error.field for error in errors} == {"schedule[1].period", "schedule[2].period"}

        with pytest.raises(ConfigurationError):
            parse_vesting_schedule({
                "name": "advisors",
                "amount": 200,
                "schedule": [{"type": "offseted", "offset": "PT1H", "count": 4}],
            })

    def test_invalid_definition_raises(self):
        """Test that building a malformed definition fails."""
        with pytest.raises(ConfigurationError):
            parse_vesting_schedule({"name": "x", "amount": 1, "schedule": []})


class TestLoadVestingTypes:
    """Test suite for definition files on disk."""

    def test_load_yaml(self, tmp_path, seed_definition):
        """Test loading a YAML definition file."""
        path = tmp_path / "vesting_types.yaml"
        path.write_text(yaml.safe_dump([seed_definition]))

        definitions = load_vesting_types(path)

        assert [d.name for d in definitions] == ["seed"]
        assert definitions[0].amount == 1_000_000
        assert definitions[0].schedule.available(LISTING) == 60_000

    def test_load_json(self, tmp_path, seed_definition):
        """Test loading a JSON definition file."""
        path = tmp_path / "vesting_types.json"
        path.write_bytes(orjson.dumps([seed_definition, dict(seed_definition, name="private")]))

        definitions = load_vesting_types(path)

        assert [d.name for d in definitions] == ["seed", "private"]

    def test_duplicate_names(self, tmp_path, seed_definition):
        """Test that vesting type names must be unique."""
        path = tmp_path / "vesting_types.json"
        path.write_bytes(orjson.dumps([seed_definition, seed_definition]))

        with pytest.raises(ConfigurationError):
            load_vesting_types(path)

    def test_schedule_error_wrapped(self, tmp_path):
        """Test that schedule composition errors are reported as configuration errors."""
        path = tmp_path / "vesting_types.yaml"
        path.write_text(yaml.safe_dump([{
            "name": "short",
            "amount": 1_000,
            "schedule": [{"type": "onetime", "time": 0, "part": 10}],
        }]))

        with pytest.raises(ConfigurationError) as exc_info:
            load_vesting_types(path)

        assert "short" in str(exc_info.value)

    def test_unparseable_file(self, tmp_path):
        """Test that syntax errors are reported as configuration errors."""
        path = tmp_path / "vesting_types.json"
        path.write_bytes(b"[{")

        with pytest.raises(ConfigurationError):
            load_vesting_types(path)

    def test_top_level_must_be_list(self, tmp_path):
        """Test that a definition file holds a list."""
        path = tmp_path / "vesting_types.yaml"
        path.write_text("name: seed\n")

        with pytest.raises(ConfigurationError):
            load_vesting_types(path)
