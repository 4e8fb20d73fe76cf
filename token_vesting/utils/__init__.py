"""
Utility functions module.

Time helpers (unix timestamps, ISO-8601 durations, injected clocks) and
record identifier helpers shared across the system.

Time Semantics:
- All vesting times are unsigned unix timestamps in seconds
- "Now" is read once per instruction from an injected clock
- Wall-clock time is only the default clock, never read inside core logic
"""
