"""
Fixed-width binary encoding of vesting records.

Layouts are little-endian with fixed-size integers, 32-byte identifiers and
booleans stored as a single 0/1 byte. Field order and widths match the
records already held in storage, so they must not change:

====================  =====  ==============================================
Record                Bytes  Fields
====================  =====  ==============================================
LinearVesting            17  start_time u64, unlock_period u64, count u8
VestingSchedule         409  token_count u64, vesting_count u8,
                             16 x (amount u64, LinearVesting)
VestingTypeAccount      482  initialized, schedule, locked u64, admin, pool
VestingAccount           81  initialized, total u64, withdrawn u64,
                             token_account, vesting_type_account
MultisigConfig          355  m u8, n u8, initialized, 11 x signer
RequiredSigners         387  initialized, 11 x signer, m u8, n u8,
                             vesting_type_account
CurrentSigners           44  initialized, 11 x signed flag, vesting_account
====================  =====  ==============================================
"""

import struct
from typing import Any, Callable, TypeVar

from ..errors import RecordCodecError
from ..schedule.models import LinearVesting, VestingSchedule
from ..utils.keys import KEY_LENGTH
from .records import (
    MAX_SIGNERS,
    CurrentSigners,
    MultisigConfig,
    RequiredSigners,
    VestingAccount,
    VestingTypeAccount,
)

U8 = struct.Struct("<B")
U64 = struct.Struct("<Q")
TRANCHE = struct.Struct("<QQB")

TRANCHE_SIZE = TRANCHE.size                          # 17
PAIR_SIZE = U64.size + TRANCHE_SIZE                  # 25
SCHEDULE_SIZE = U64.size + U8.size + VestingSchedule.MAX_VESTINGS * PAIR_SIZE

_PADDING_PAIR = (0, LinearVesting(0, 0, 1))

R = TypeVar("R")


class _Reader:
    """Sequential reader over a record buffer."""

    def __init__(self, data: bytes, record_type: str):
        self.data = data
        self.offset = 0
        self.record_type = record_type

    def _take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise RecordCodecError(
                f"Record truncated at byte {self.offset}", record_type=self.record_type
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def u8(self) -> int:
        return U8.unpack(self._take(U8.size))[0]

    def u64(self) -> int:
        return U64.unpack(self._take(U64.size))[0]

    def boolean(self) -> bool:
        value = self.u8()
        if value > 1:
            raise RecordCodecError(
                f"Invalid boolean byte {value} at {self.offset - 1}", record_type=self.record_type
            )
        return value == 1

    def key(self) -> bytes:
        return bytes(self._take(KEY_LENGTH))

    def tranche(self) -> LinearVesting:
        start_time, unlock_period, unlock_count = TRANCHE.unpack(self._take(TRANCHE_SIZE))
        try:
            return LinearVesting(start_time, unlock_period, unlock_count)
        except ValueError as exc:
            raise RecordCodecError(f"Invalid vesting: {exc}", record_type=self.record_type) from exc

    def skip_tranche(self) -> None:
        self._take(TRANCHE_SIZE)

    def finish(self) -> None:
        if self.offset != len(self.data):
            raise RecordCodecError(
                f"Record has {len(self.data) - self.offset} trailing bytes",
                record_type=self.record_type,
            )


def _pack(fmt: struct.Struct, *values: Any, record_type: str) -> bytes:
    try:
        return fmt.pack(*values)
    except struct.error as exc:
        raise RecordCodecError(f"Value out of range: {exc}", record_type=record_type) from exc


def _key(value: bytes, record_type: str) -> bytes:
    if len(value) != KEY_LENGTH:
        raise RecordCodecError(
            f"Identifier must be {KEY_LENGTH} bytes, got {len(value)}", record_type=record_type
        )
    return bytes(value)


def _boolean(value: bool) -> bytes:
    return b"\x01" if value else b"\x00"


def encode_schedule(schedule: VestingSchedule) -> bytes:
    name = "VestingSchedule"
    parts = [
        _pack(U64, schedule.token_count, record_type=name),
        _pack(U8, schedule.vesting_count, record_type=name),
    ]
    padding = [_PADDING_PAIR] * (VestingSchedule.MAX_VESTINGS - schedule.vesting_count)
    for amount, vesting in list(schedule.vestings) + padding:
        parts.append(_pack(U64, amount, record_type=name))
        parts.append(_pack(TRANCHE, vesting.start_time, vesting.unlock_period,
                           vesting.unlock_count, record_type=name))
    return b"".join(parts)


def _read_schedule(reader: _Reader) -> VestingSchedule:
    token_count = reader.u64()
    vesting_count = reader.u8()
    if vesting_count > VestingSchedule.MAX_VESTINGS:
        raise RecordCodecError(
            f"Schedule holds {vesting_count} vestings, maximum is {VestingSchedule.MAX_VESTINGS}",
            record_type=reader.record_type,
        )
    vestings = []
    for index in range(VestingSchedule.MAX_VESTINGS):
        amount = reader.u64()
        if index < vesting_count:
            vestings.append((amount, reader.tranche()))
        else:
            reader.skip_tranche()
    return VestingSchedule(token_count, tuple(vestings))


def decode_schedule(data: bytes) -> VestingSchedule:
    reader = _Reader(bytes(data), "VestingSchedule")
    schedule = _read_schedule(reader)
    reader.finish()
    return schedule


def _encode_vesting_type(record: VestingTypeAccount) -> bytes:
    name = "VestingTypeAccount"
    return b"".join([
        _boolean(record.is_initialized),
        encode_schedule(record.vesting_schedule),
        _pack(U64, record.locked_tokens_amount, record_type=name),
        _key(record.administrator, name),
        _key(record.token_pool, name),
    ])


def _decode_vesting_type(reader: _Reader) -> VestingTypeAccount:
    return VestingTypeAccount(
        is_initialized=reader.boolean(),
        vesting_schedule=_read_schedule(reader),
        locked_tokens_amount=reader.u64(),
        administrator=reader.key(),
        token_pool=reader.key(),
    )


def _encode_vesting(record: VestingAccount) -> bytes:
    name = "VestingAccount"
    return b"".join([
        _boolean(record.is_initialized),
        _pack(U64, record.total_tokens, record_type=name),
        _pack(U64, record.withdrawn_tokens, record_type=name),
        _key(record.token_account, name),
        _key(record.vesting_type_account, name),
    ])


def _decode_vesting(reader: _Reader) -> VestingAccount:
    return VestingAccount(
        is_initialized=reader.boolean(),
        total_tokens=reader.u64(),
        withdrawn_tokens=reader.u64(),
        token_account=reader.key(),
        vesting_type_account=reader.key(),
    )


def _signer_keys(signers: tuple[bytes, ...], name: str) -> list[bytes]:
    if len(signers) != MAX_SIGNERS:
        raise RecordCodecError(
            f"Expected {MAX_SIGNERS} signer slots, got {len(signers)}", record_type=name
        )
    return [_key(signer, name) for signer in signers]


def _encode_multisig(record: MultisigConfig) -> bytes:
    name = "MultisigConfig"
    return b"".join([
        _pack(U8, record.m, record_type=name),
        _pack(U8, record.n, record_type=name),
        _boolean(record.is_initialized),
        *_signer_keys(record.signers, name),
    ])


def _decode_multisig(reader: _Reader) -> MultisigConfig:
    return MultisigConfig(
        m=reader.u8(),
        n=reader.u8(),
        is_initialized=reader.boolean(),
        signers=tuple(reader.key() for _ in range(MAX_SIGNERS)),
    )


def _encode_required_signers(record: RequiredSigners) -> bytes:
    name = "RequiredSigners"
    return b"".join([
        _boolean(record.is_initialized),
        *_signer_keys(record.require_signers, name),
        _pack(U8, record.require_number, record_type=name),
        _pack(U8, record.all_number, record_type=name),
        _key(record.vesting_type_account, name),
    ])


def _decode_required_signers(reader: _Reader) -> RequiredSigners:
    return RequiredSigners(
        is_initialized=reader.boolean(),
        require_signers=tuple(reader.key() for _ in range(MAX_SIGNERS)),
        require_number=reader.u8(),
        all_number=reader.u8(),
        vesting_type_account=reader.key(),
    )


def _encode_current_signers(record: CurrentSigners) -> bytes:
    name = "CurrentSigners"
    if len(record.current_signers) != MAX_SIGNERS:
        raise RecordCodecError(
            f"Expected {MAX_SIGNERS} signer flags, got {len(record.current_signers)}",
            record_type=name,
        )
    return b"".join([
        _boolean(record.is_initialized),
        *(_boolean(signed) for signed in record.current_signers),
        _key(record.vesting_account, name),
    ])


def _decode_current_signers(reader: _Reader) -> CurrentSigners:
    return CurrentSigners(
        is_initialized=reader.boolean(),
        current_signers=tuple(reader.boolean() for _ in range(MAX_SIGNERS)),
        vesting_account=reader.key(),
    )


_CODECS: dict[type, tuple[Callable[[Any], bytes], Callable[[_Reader], Any]]] = {
    VestingTypeAccount: (_encode_vesting_type, _decode_vesting_type),
    VestingAccount: (_encode_vesting, _decode_vesting),
    MultisigConfig: (_encode_multisig, _decode_multisig),
    RequiredSigners: (_encode_required_signers, _decode_required_signers),
    CurrentSigners: (_encode_current_signers, _decode_current_signers),
}


def encode(record: Any) -> bytes:
    """Encode a record into its fixed-width byte layout."""
    try:
        encoder, _ = _CODECS[type(record)]
    except KeyError:
        raise TypeError(f"No binary layout for {type(record).__name__}") from None
    data = encoder(record)
    if len(data) != record.SIZE:
        raise RecordCodecError(
            f"Encoded {len(data)} bytes, layout requires {record.SIZE}",
            record_type=type(record).__name__,
        )
    return data


def decode(record_type: type[R], data: bytes) -> R:
    """Decode ``data`` into a ``record_type`` instance."""
    try:
        _, decoder = _CODECS[record_type]
    except KeyError:
        raise TypeError(f"No binary layout for {record_type.__name__}") from None
    if len(data) != record_type.SIZE:
        raise RecordCodecError(
            f"Expected {record_type.SIZE} bytes, got {len(data)}",
            record_type=record_type.__name__,
        )
    reader = _Reader(bytes(data), record_type.__name__)
    record = decoder(reader)
    reader.finish()
    return record


def record_size(record_type: type) -> int:
    return record_type.SIZE
