"""
Token custody module.

Balances, mints and ownership of token holding accounts, and transfers
between them. The vesting processor only decides how much to move; the
custody backend performs the movement.
"""

from .base import TokenAccount, TokenCustody
from .memory import InMemoryTokenCustody

__all__ = ["TokenAccount", "TokenCustody", "InMemoryTokenCustody"]
