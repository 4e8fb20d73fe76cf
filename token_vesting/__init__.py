"""
Token Vesting - time-released token ownership engine

Locks a fixed pool of fungible tokens behind piecewise-linear vesting
schedules, lets beneficiaries withdraw what has unlocked, and lets a quorum
of approvers jointly terminate ("devest") a beneficiary's grant.
"""

__version__ = "0.1.0"
__author__ = "Token Vesting Team"
