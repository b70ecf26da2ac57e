"""Machine configuration."""

from flax.struct import dataclass, field

from chor.constants import INSTRUCTION_FREQUENCY, TIMER_FREQUENCY
from chor.errors import ConfigError

DECODE_ERROR_POLICIES = ("halt", "skip")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class MachineConfig:
    """Host-selectable machine behavior.

    Attributes:
        decode_error_policy: ``"halt"`` stops the machine on an unknown
            instruction word, ``"skip"`` logs it and moves on to the next word.
        seed: Seed for the random key used by CXNN.
        instructions_per_tick: Instructions :meth:`Machine.run` executes per
            60 Hz timer tick.
        trace: Log every executed instruction at DEBUG level.
        log_level: Minimum level printed by the machine logger.
    """
    decode_error_policy: str = field(pytree_node=False, default="halt")
    seed: int = field(pytree_node=False, default=0)
    instructions_per_tick: int = field(
        pytree_node=False, default=round(INSTRUCTION_FREQUENCY / TIMER_FREQUENCY)
    )
    trace: bool = field(pytree_node=False, default=False)
    log_level: str = field(pytree_node=False, default="INFO")

    def __post_init__(self):
        if self.decode_error_policy not in DECODE_ERROR_POLICIES:
            raise ConfigError(
                f"Unknown decode error policy '{self.decode_error_policy}'. "
                f"Available: {list(DECODE_ERROR_POLICIES)}"
            )
        if self.instructions_per_tick < 1:
            raise ConfigError(
                f"instructions_per_tick must be at least 1, got {self.instructions_per_tick}"
            )
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level '{self.log_level}'. Available: {list(LOG_LEVELS)}")
