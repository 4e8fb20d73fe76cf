"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from typing import Any

from .defaults import LoggingParams, ProcessorParams, RentParams

_SECTIONS = {
    "rent": RentParams,
    "processor": ProcessorParams,
    "logging": LoggingParams,
}

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_rent_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate rent parameters."""
        errors = []

        if "lamports_per_byte_year" in params:
            value = params["lamports_per_byte_year"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="rent.lamports_per_byte_year",
                    message="Must be a non-negative integer",
                    value=value
                ))

        if "exemption_threshold" in params:
            value = params["exemption_threshold"]
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="rent.exemption_threshold",
                    message="Must be a non-negative number",
                    value=value
                ))

        if "account_storage_overhead" in params:
            value = params["account_storage_overhead"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="rent.account_storage_overhead",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_processor_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate processor parameters."""
        errors = []

        if "program_id" in params:
            value = params["program_id"]
            valid = isinstance(value, str) and len(value) == 64
            if valid:
                try:
                    bytes.fromhex(value)
                except ValueError:
                    valid = False
            if not valid:
                errors.append(ValidationError(
                    field="processor.program_id",
                    message="Must be a 32-byte hex identifier",
                    value=value
                ))

        if "allow_schedule_change" in params:
            value = params["allow_schedule_change"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="processor.allow_schedule_change",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in _LOG_LEVELS:
                errors.append(ValidationError(
                    field="logging.level",
                    message=f"Must be one of {sorted(_LOG_LEVELS)}",
                    value=value
                ))

        for name in ("format_json", "include_timestamp"):
            if name in params and not isinstance(params[name], bool):
                errors.append(ValidationError(
                    field=f"logging.{name}",
                    message="Must be a boolean",
                    value=params[name]
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        for section, value in config.items():
            if section not in _SECTIONS:
                errors.append(ValidationError(field=section, message="Unknown section", value=value))
            elif not isinstance(value, dict):
                errors.append(ValidationError(field=section, message="Must be a mapping", value=value))
            else:
                known = {f.name for f in fields(_SECTIONS[section])}
                for name in value:
                    if name not in known:
                        errors.append(ValidationError(
                            field=f"{section}.{name}",
                            message="Unknown parameter",
                            value=value[name]
                        ))

        if isinstance(config.get("rent"), dict):
            errors.extend(ConfigValidator.validate_rent_params(config["rent"]))

        if isinstance(config.get("processor"), dict):
            errors.extend(ConfigValidator.validate_processor_params(config["processor"]))

        if isinstance(config.get("logging"), dict):
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        return errors
