"""
Record identifier helpers.

Identifiers are opaque 32-byte values. The all-zero identifier marks an
unused slot in fixed-capacity identifier arrays.
"""

import hashlib
import secrets

KEY_LENGTH = 32
ZERO_KEY = bytes(KEY_LENGTH)

Pubkey = bytes


def new_key() -> Pubkey:
    """Random identifier, used for fresh records."""
    return secrets.token_bytes(KEY_LENGTH)


def key_from_hex(value: str) -> Pubkey:
    key = bytes.fromhex(value)
    if len(key) != KEY_LENGTH:
        raise ValueError(f"Identifier must be {KEY_LENGTH} bytes, got {len(key)}")
    return key


def key_to_hex(key: Pubkey) -> str:
    return key.hex()


def short_key(key: Pubkey) -> str:
    """Abbreviated identifier for log output."""
    return key.hex()[:8]


def derive_key(program_id: Pubkey, *seeds: bytes) -> Pubkey:
    """Deterministic identifier owned by ``program_id`` for the given seeds."""
    digest = hashlib.sha256()
    for seed in seeds:
        digest.update(seed)
    digest.update(program_id)
    digest.update(b"ProgramDerivedAddress")
    return digest.digest()
