#!/usr/bin/env python3
"""Configuration and vesting-type definition validation script."""

import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from token_vesting.config.loader import ConfigLoader
from token_vesting.config.schedule_file import load_vesting_types
from token_vesting.config.validation import ConfigValidator
from token_vesting.errors import ConfigurationError
from token_vesting.utils.time import format_timestamp


def validate_settings(loader: ConfigLoader) -> bool:
    """Validate settings.yaml merged over the defaults."""
    print(f"🔍 Validating settings in {loader.config_dir}...")

    try:
        errors = ConfigValidator.validate_config(loader.merge_config())
    except ConfigurationError as e:
        print(f"❌ Cannot read settings: {e}")
        return False

    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        return False

    print("✅ Settings are valid")
    return True


def validate_definitions(path: Path) -> bool:
    """Build every vesting type in a definition file."""
    print(f"\n📋 Validating vesting types in {path}...")

    try:
        definitions = load_vesting_types(path)
    except ConfigurationError as e:
        print(f"❌ {e}")
        for error in e.errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        return False

    for definition in definitions:
        schedule = definition.schedule
        print(f"✅ {definition.name}: {definition.amount} tokens in {len(schedule)} vestings, "
              f"{format_timestamp(schedule.start_time())} to {format_timestamp(schedule.last())}")
    return True


def main():
    """Main validation function."""
    loader = ConfigLoader.create()
    all_valid = validate_settings(loader)

    for name in sys.argv[1:] or [str(loader.config_dir / "vesting_types.yaml")]:
        all_valid = validate_definitions(Path(name)) and all_valid

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
