"""CHIP-8 virtual machine core."""

from chor.state import MachineState, StackState, create_state
from chor.emulator import (
    execute, execute_opcode, fetch, step, load_program, load_rom, tick_timers,
    press_key, release_key,
)
from chor.decode import Opcode, decode
from chor.config import MachineConfig
from chor.machine import Machine
from chor.errors import (
    ChorError, ConfigError, DecodeError, ProgramTooLargeError, InvalidKeyError,
    FatalMachineError, StackOverflowError, StackUnderflowError, MachineHaltedError,
)
from chor.constants import *
from chor.rendering import framebuffer_to_rgb, framebuffer_to_text, create_color_scheme

__all__ = [
    "MachineState",
    "StackState",
    "create_state",
    "execute",
    "execute_opcode",
    "fetch",
    "step",
    "load_program",
    "load_rom",
    "tick_timers",
    "press_key",
    "release_key",
    "Opcode",
    "decode",
    "MachineConfig",
    "Machine",
    "ChorError",
    "ConfigError",
    "DecodeError",
    "ProgramTooLargeError",
    "InvalidKeyError",
    "FatalMachineError",
    "StackOverflowError",
    "StackUnderflowError",
    "MachineHaltedError",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "QWERTY_KEYMAP",
    "framebuffer_to_rgb",
    "framebuffer_to_text",
    "create_color_scheme",
]
