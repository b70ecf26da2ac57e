"""Host-facing CHIP-8 machine.

:class:`Machine` owns a single :class:`~chor.state.MachineState` and exposes
the small surface a host loop drives: load a program, step instructions,
tick the 60 Hz timers, feed key presses and read the framebuffer.
"""

from typing import Optional

import jax
import jax.numpy as jnp
import numpy as np

from chor import emulator
from chor.config import MachineConfig
from chor.decode import Opcode, decode
from chor.errors import DecodeError, FatalMachineError, MachineHaltedError
from chor.logging import ConsoleLogger, build_progress_bar
from chor.state import MachineState, create_state


class Machine:
    """Mutable CHIP-8 machine driven by a host loop.

    Every :meth:`step` is atomic: if the instruction raises, the machine keeps
    the state it had before the step.
    """

    def __init__(self, config: Optional[MachineConfig] = None, logger: Optional[ConsoleLogger] = None):
        self.config = config or MachineConfig()
        self.logger = logger or ConsoleLogger(log_level=self.config.log_level)
        self._program = b""
        self.reset()

    def reset(self):
        """Restore power-on state and reload the last program, if any."""
        self._state = create_state(jax.random.PRNGKey(self.config.seed))
        self._halt_reason = None
        self.decode_failures = 0
        if self._program:
            self._state = emulator.load_program(self._state, self._program)
            self.logger.info(f"Machine reset, reloaded {len(self._program)} byte program")

    @property
    def state(self) -> MachineState:
        return self._state

    @property
    def halted(self) -> bool:
        return self._halt_reason is not None

    @property
    def halt_reason(self):
        """Exception that halted the machine, or ``None`` while running."""
        return self._halt_reason

    @property
    def pc(self) -> int:
        return int(self._state.pc)

    @property
    def index(self) -> int:
        return int(self._state.I)

    @property
    def registers(self) -> list[int]:
        return [int(v) for v in self._state.V]

    @property
    def stack_depth(self) -> int:
        return int(self._state.stack.pointer)

    @property
    def delay_timer(self) -> int:
        return int(self._state.delay_timer)

    @property
    def sound_timer(self) -> int:
        return int(self._state.sound_timer)

    @property
    def sound_active(self) -> bool:
        """Whether a host should currently be playing the buzzer tone."""
        return self.sound_timer > 0

    def load(self, program: bytes):
        """Copy program image into memory at 0x200, replacing any earlier program."""
        self._state = emulator.load_program(self._state, program)
        self._program = bytes(program)
        self.logger.info(f"Loaded {len(self._program)} byte program")

    def load_rom(self, filename: str):
        """Read program image from a file and load it."""
        with open(filename, "rb") as f:
            self.load(f.read())

    def step(self) -> Optional[Opcode]:
        """Execute exactly one instruction.

        Returns:
            The executed opcode, or ``None`` when an unknown instruction was
            skipped under the ``"skip"`` decode error policy.

        Raises:
            MachineHaltedError: if the machine already halted.
            DecodeError: on an unknown instruction under the ``"halt"`` policy.
            FatalMachineError: on stack overflow or underflow.
        """
        if self._halt_reason is not None:
            raise MachineHaltedError(f"Machine halted: {self._halt_reason}")

        address = self.pc
        fetched, instruction = emulator.fetch(self._state)
        try:
            opcode = decode(instruction)
        except DecodeError as e:
            if self.config.decode_error_policy == "skip":
                self.decode_failures += 1
                self.logger.warning(f"0x{address:03X}: skipping {e}")
                self._state = fetched
                return None
            self._halt(e)
            raise

        try:
            new_state = emulator.execute_opcode(fetched, opcode)
        except FatalMachineError as e:
            self._halt(e)
            raise

        if self.config.trace and self.logger.is_enabled_for("DEBUG"):
            self.logger.debug(f"0x{address:03X}: {instruction:04X} {opcode!r}")
        self._state = new_state
        return opcode

    def _halt(self, reason):
        self._halt_reason = reason
        self.logger.error(f"Machine halted at 0x{self.pc:03X}: {reason}")

    def run(self, n: int, progress: bool = False) -> int:
        """Execute ``n`` instructions, ticking timers every ``instructions_per_tick``.

        Returns:
            Number of instructions executed.
        """
        update, close = build_progress_bar(n, disable=not progress)
        executed = 0
        try:
            for executed in range(1, n + 1):
                self.step()
                if executed % self.config.instructions_per_tick == 0:
                    self.tick_timers()
                update(1)
        finally:
            close()
        return executed

    def tick_timers(self):
        """Decrement delay and sound timers; call at 60 Hz."""
        self._state = emulator.tick_timers(self._state)

    def press(self, key: int):
        """Hold down key ``0x0``-``0xF``."""
        self._state = emulator.press_key(self._state, key)

    def release(self, key: int):
        """Release key ``0x0``-``0xF``."""
        self._state = emulator.release_key(self._state, key)

    def framebuffer(self) -> np.ndarray:
        """Read-only row-major view of the 64x32 display, flattened to 2048 cells."""
        pixels = np.array(self._state.display, dtype=np.bool_).reshape(-1)
        pixels.setflags(write=False)
        return pixels

    def consume_redraw_flag(self) -> bool:
        """Return whether the display changed since the last call, and clear it."""
        redraw = bool(self._state.redraw)
        if redraw:
            self._state = self._state.replace(redraw=jnp.zeros((), dtype=jnp.bool_))
        return redraw
