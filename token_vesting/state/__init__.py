"""
Vesting state module.

Persistent record types, their fixed-width binary encoding, and the
quorum-gated devesting state machine that closes a grant once enough
approvers have signed.
"""
