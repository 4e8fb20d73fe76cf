"""
Vesting-type definition files.

A definition file lists vesting types, each with a name, a token amount and
the schedule items that build its schedule::

    - name: seed
      amount: 1000000
      schedule:
        - {type: onetime, time: 2022-03-01T00:00:00Z, part: 60000}
        - {type: onetime, time: 2022-09-01T00:00:00Z, part: 90000}
        - {type: offseted, offset: P6M, period: P2M, count: 6, part: null}

Item types:

- ``fixed``: linear vesting at an absolute ``time`` with ``count`` unlocks
  every ``period``
- ``onetime``: a single unlock at an absolute ``time``
- ``offseted``: linear vesting starting ``offset`` after the previous item
  ends; ``period`` defaults to the empty duration, which allows a single
  unlock only

``part`` is the item's token amount; null takes all remaining tokens.
Times are unix seconds or ISO-8601 datetimes, durations are ISO-8601.
YAML (.yaml/.yml) and JSON files are accepted.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import orjson
import yaml

from ..errors import ConfigurationError, ScheduleBuilderError
from ..schedule.builder import ScheduleBuilder
from ..schedule.models import MAX_UNLOCK_COUNT, LinearVesting, RelativeVesting, VestingSchedule
from ..utils.time import parse_iso_duration, to_unix_timestamp
from .validation import ValidationError

ITEM_TYPES = ("fixed", "onetime", "offseted")


@dataclass(frozen=True)
class VestingTypeDefinition:
    """Named schedule read from a definition file."""
    name: str
    amount: int
    schedule: VestingSchedule


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _check_duration(errors: list[ValidationError], field: str, value: Any) -> None:
    try:
        parse_iso_duration(value)
    except (TypeError, ValueError):
        errors.append(ValidationError(field=field, message="Must be an ISO-8601 duration", value=value))


def _check_time(errors: list[ValidationError], field: str, value: Any) -> None:
    try:
        timestamp = to_unix_timestamp(value)
    except (TypeError, ValueError):
        errors.append(ValidationError(field=field, message="Must be a timestamp or ISO datetime",
                                      value=value))
        return
    if timestamp < 0:
        errors.append(ValidationError(field=field, message="Must not precede the unix epoch",
                                      value=value))


def validate_definition(definition: Any) -> list[ValidationError]:
    """Validate one vesting-type definition without building it."""
    errors: list[ValidationError] = []

    if not isinstance(definition, dict):
        return [ValidationError(field="definition", message="Must be a mapping", value=definition)]

    name = definition.get("name")
    if not isinstance(name, str) or not name:
        errors.append(ValidationError(field="name", message="Must be a non-empty string", value=name))

    amount = definition.get("amount")
    if not _is_positive_int(amount):
        errors.append(ValidationError(field="amount", message="Must be a positive integer", value=amount))

    items = definition.get("schedule")
    if not isinstance(items, list) or not items:
        errors.append(ValidationError(field="schedule", message="Must be a non-empty list", value=items))
        return errors

    for index, item in enumerate(items):
        prefix = f"schedule[{index}]"
        if not isinstance(item, dict):
            errors.append(ValidationError(field=prefix, message="Must be a mapping", value=item))
            continue

        item_type = item.get("type")
        if item_type not in ITEM_TYPES:
            errors.append(ValidationError(field=f"{prefix}.type",
                                          message=f"Must be one of {list(ITEM_TYPES)}",
                                          value=item_type))
            continue

        part = item.get("part")
        if part is not None and not _is_positive_int(part):
            errors.append(ValidationError(field=f"{prefix}.part",
                                          message="Must be null or a positive integer", value=part))

        count = item.get("count", 1)
        if not _is_positive_int(count) or count > MAX_UNLOCK_COUNT:
            errors.append(ValidationError(field=f"{prefix}.count",
                                          message=f"Must be an integer from 1 to {MAX_UNLOCK_COUNT}",
                                          value=count))

        if item_type in ("fixed", "onetime"):
            _check_time(errors, f"{prefix}.time", item.get("time"))
        if item_type == "fixed":
            _check_duration(errors, f"{prefix}.period", item.get("period"))
        if item_type == "offseted":
            _check_duration(errors, f"{prefix}.offset", item.get("offset"))
            if item.get("period") is not None:
                _check_duration(errors, f"{prefix}.period", item.get("period"))

        if _is_positive_int(count) and 1 < count <= MAX_UNLOCK_COUNT:
            period = item.get("period")
            if item_type == "offseted" and period is None:
                period = "P"
            if item_type != "onetime":
                _check_step_period(errors, f"{prefix}.period", period)

    return errors


def _check_step_period(errors: list[ValidationError], field: str, value: Any) -> None:
    try:
        period = parse_iso_duration(value)
    except (TypeError, ValueError):
        return
    if period <= 0:
        errors.append(ValidationError(field=field,
                                      message="Must be a non-empty duration when count is above 1",
                                      value=value))


def parse_vesting_schedule(definition: dict[str, Any]) -> VestingSchedule:
    """
    Build the schedule described by a vesting-type definition.

    Raises:
        ConfigurationError: If the definition is malformed
        ScheduleBuilderError: If the items do not form a valid schedule
    """
    errors = validate_definition(definition)
    if errors:
        raise ConfigurationError(
            "; ".join(f"{error.field}: {error.message}" for error in errors),
            errors=errors,
            source=str(definition.get("name")) if isinstance(definition, dict) else None,
        )

    builder = ScheduleBuilder.with_tokens(definition["amount"])
    for item in definition["schedule"]:
        tokens = item.get("part")
        count = item.get("count", 1)

        if item["type"] == "fixed":
            builder.add(
                LinearVesting(to_unix_timestamp(item["time"]), parse_iso_duration(item["period"]), count),
                tokens,
            )
        elif item["type"] == "onetime":
            builder.cliff(to_unix_timestamp(item["time"]), tokens)
        else:
            period = parse_iso_duration(item.get("period") or "P")
            builder.offseted_by(
                parse_iso_duration(item["offset"]),
                RelativeVesting(period, count),
                tokens,
            )

    return builder.build()


def _read_definitions(path: Path) -> Any:
    if path.suffix.lower() in (".yaml", ".yml"):
        with open(path) as f:
            return yaml.safe_load(f)
    return orjson.loads(path.read_bytes())


def load_vesting_types(path: Union[str, Path]) -> list[VestingTypeDefinition]:
    """
    Load and build every vesting type in a definition file.

    Args:
        path: YAML or JSON definition file

    Returns:
        Definitions in file order

    Raises:
        ConfigurationError: If the file or any definition is invalid
    """
    path = Path(path)
    try:
        raw = _read_definitions(path)
    except (yaml.YAMLError, orjson.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot parse {path.name}: {exc}", source=str(path)) from exc

    if not isinstance(raw, list):
        raise ConfigurationError("Definition file must contain a list of vesting types",
                                 source=str(path))

    definitions = []
    names = set()
    for definition in raw:
        try:
            schedule = parse_vesting_schedule(definition)
        except ScheduleBuilderError as exc:
            raise ConfigurationError(
                f"Vesting type {definition.get('name')!r}: {exc}", source=str(path)
            ) from exc

        if definition["name"] in names:
            raise ConfigurationError(f"Duplicate vesting type {definition['name']!r}",
                                     source=str(path))
        names.add(definition["name"])
        definitions.append(VestingTypeDefinition(
            name=definition["name"],
            amount=definition["amount"],
            schedule=schedule,
        ))

    return definitions
