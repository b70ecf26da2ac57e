"""Console logging utilities for the CHIP-8 machine.

Provides a small leveled console logger used by :class:`chor.machine.Machine`
and a tqdm progress bar helper for long batched runs.
"""

import sys
import time
from typing import Callable, Optional, Tuple

from tqdm import tqdm


class ConsoleLogger:
    """Leveled console logger with optional colors and timestamps.

    :class:`~chor.machine.Machine` reports through it: halts on a decode error
    or stack fault at ERROR, unknown instructions skipped under the ``"skip"``
    policy at WARNING, program loads and resets at INFO, and per-instruction
    traces at DEBUG when ``MachineConfig.trace`` is set.
    """

    def __init__(
        self,
        name: str = "chor",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def is_enabled_for(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self.is_enabled_for(level):
            formatted = self._format_message(level, message)
            print(formatted, flush=True)

    def debug(self, message: str):
        """Log debug message."""
        self.log("DEBUG", message)

    def info(self, message: str):
        """Log info message."""
        self.log("INFO", message)

    def warning(self, message: str):
        """Log warning message."""
        self.log("WARNING", message)

    def error(self, message: str):
        """Log error message."""
        self.log("ERROR", message)

    def critical(self, message: str):
        """Log critical message."""
        self.log("CRITICAL", message)


def build_progress_bar(
    n: int,
    desc: Optional[str] = None,
    **kwargs,
) -> Tuple[Callable[[int], None], Callable[[], None]]:
    """Build a tqdm progress bar for ``n`` instructions.

    Returns:
        ``(update, close)`` where ``update(steps)`` advances the bar and
        ``close()`` finalizes it.
    """
    if desc is None:
        desc = f"Running ({n:,} instructions)"

    for kwarg in ("total", "unit"):
        kwargs.pop(kwarg, None)

    bar = tqdm(total=n, desc=desc, unit="instr", **kwargs)

    def _update(steps: int):
        bar.update(int(steps))

    def _close():
        bar.close()

    return _update, _close
