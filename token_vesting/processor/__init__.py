"""
Instruction processing module.

Validates the facts and records an instruction receives, computes the new
record states, and commits them together with any token movement.
"""

from .context import Authenticator, StaticAuthenticator
from .processor import VestingProcessor

__all__ = ["Authenticator", "StaticAuthenticator", "VestingProcessor"]
