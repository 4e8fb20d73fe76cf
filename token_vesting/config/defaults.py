"""Default configuration parameters for the vesting processor."""

from dataclasses import dataclass, field

DEFAULT_PROGRAM_ID = "56657374696e6750726f6772616d000000000000000000000000000000000001"


@dataclass(frozen=True)
class RentParams:
    """Storage deposit rules for record buffers."""
    lamports_per_byte_year: int = 3480
    exemption_threshold: float = 2.0                 # Years of rent a deposit must cover
    account_storage_overhead: int = 128              # Bytes charged on top of the buffer

    def minimum_balance(self, data_len: int) -> int:
        """Deposit that makes a ``data_len`` byte record exempt from rent."""
        return int(
            (self.account_storage_overhead + data_len)
            * self.lamports_per_byte_year
            * self.exemption_threshold
        )


@dataclass(frozen=True)
class ProcessorParams:
    """Instruction processing parameters."""
    program_id: str = DEFAULT_PROGRAM_ID             # Hex identifier owning vesting records
    allow_schedule_change: bool = False              # Schedule replacement is disabled by default


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False
    include_timestamp: bool = True


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    rent: RentParams = field(default_factory=RentParams)
    processor: ProcessorParams = field(default_factory=ProcessorParams)
    logging: LoggingParams = field(default_factory=LoggingParams)

    @property
    def program_id(self) -> bytes:
        return bytes.fromhex(self.processor.program_id)


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        rent=RentParams(),
        processor=ProcessorParams(),
        logging=LoggingParams(),
    )
