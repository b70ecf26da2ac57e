"""Main CHIP-8 emulator execution engine.

All functions here are pure: they take a :class:`MachineState` and return a
new one. Errors are raised before any state is produced, so a caller holding
the previous state can always fall back to it.
"""

import jax.numpy as jnp
from chor.state import MachineState
from chor import decode as ops
from chor.decode import Opcode, decode
from chor.constants import ADDRESS_MASK, PROGRAM_START, PROGRAM_CAPACITY, NUM_KEYS
from chor.errors import InvalidKeyError, ProgramTooLargeError
from chor.instructions.system import execute_clear_screen, execute_return, execute_legacy_call
from chor.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed,
)
from chor.instructions.alu import execute_alu_operation
from chor.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chor.instructions.display import execute_display
from chor.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
)


EXECUTORS = {
    ops.ClearScreen: execute_clear_screen,
    ops.Return: execute_return,
    ops.LegacyCall: execute_legacy_call,
    ops.Jump: execute_jump,
    ops.Call: execute_call,
    ops.SkipIfEqualImmediate: execute_skip_if_equal_immediate,
    ops.SkipIfNotEqualImmediate: execute_skip_if_not_equal_immediate,
    ops.SkipIfEqualRegisters: execute_skip_if_equal_register,
    ops.SetImmediate: execute_set,
    ops.AddImmediate: execute_add,
    ops.Move: execute_alu_operation,
    ops.Or: execute_alu_operation,
    ops.And: execute_alu_operation,
    ops.Xor: execute_alu_operation,
    ops.AddWithCarry: execute_alu_operation,
    ops.SubtractWithBorrow: execute_alu_operation,
    ops.ShiftRight: execute_alu_operation,
    ops.SubtractWithBorrowReversed: execute_alu_operation,
    ops.ShiftLeft: execute_alu_operation,
    ops.SkipIfNotEqualRegisters: execute_skip_if_not_equal_register,
    ops.SetIndex: execute_set_index,
    ops.JumpAddOffset: execute_jump_with_offset,
    ops.SetRandomMasked: execute_random,
    ops.DrawSprite: execute_display,
    ops.SkipIfKeyPressed: execute_skip_if_key_pressed,
    ops.SkipIfKeyNotPressed: execute_skip_if_key_not_pressed,
    ops.ReadDelayTimer: execute_get_delay_timer,
    ops.WaitForKey: execute_wait_for_key,
    ops.SetDelayTimer: execute_set_delay_timer,
    ops.SetSoundTimer: execute_set_sound_timer,
    ops.AddRegisterToIndex: execute_add_to_index,
    ops.SetIndexToGlyph: execute_font_character,
    ops.StoreBCD: execute_bcd_conversion,
    ops.DumpRegisters: execute_store_registers,
    ops.LoadRegisters: execute_load_registers,
}


def execute_opcode(state: MachineState, opcode: Opcode) -> MachineState:
    """Execute an already decoded opcode."""
    return EXECUTORS[type(opcode)](state, opcode)


def execute(state: MachineState, instruction: int) -> MachineState:
    """Decode and execute single CHIP-8 instruction word.

    The PC is expected to already point past the instruction, as left by
    :func:`fetch`.
    """
    return execute_opcode(state, decode(instruction))


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> int:
    """Pack two bytes into a big-endian 16-bit word."""
    return (int(high) << 8) | int(low)


def fetch(state: MachineState) -> tuple[MachineState, int]:
    """Fetch next instruction from memory and advance the PC by 2."""
    pc = int(state.pc) & ADDRESS_MASK
    instruction = _pack_u16(state.memory[pc], state.memory[(pc + 1) & ADDRESS_MASK])
    return state.replace(pc=jnp.astype((pc + 2) & ADDRESS_MASK, jnp.uint16)), instruction


def step(state: MachineState) -> tuple[MachineState, Opcode]:
    """Fetch, decode and execute one instruction.

    Raises:
        DecodeError: if the fetched word is not a valid instruction.
        FatalMachineError: on stack overflow or underflow.
    """
    state, instruction = fetch(state)
    opcode = decode(instruction)
    return execute_opcode(state, opcode), opcode


def load_program(state: MachineState, program: bytes) -> MachineState:
    """Copy a program image into memory starting at 0x200.

    The whole program region is cleared first, so bytes from a previously
    loaded, longer image do not survive.

    Raises:
        ProgramTooLargeError: if the image does not fit; memory is left untouched.
    """
    program = bytes(program)
    if len(program) > PROGRAM_CAPACITY:
        raise ProgramTooLargeError(len(program), PROGRAM_CAPACITY)
    new_memory = state.memory.at[PROGRAM_START:].set(0)
    if program:
        rom_array = jnp.array(list(program), dtype=jnp.uint8)
        new_memory = new_memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: MachineState, filename: str) -> MachineState:
    """Load ROM file into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)


def tick_timers(state: MachineState) -> MachineState:
    """Decrement delay and sound timers by one, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def _check_key(key: int) -> int:
    if not 0 <= key < NUM_KEYS:
        raise InvalidKeyError(key)
    return key


def press_key(state: MachineState, key: int) -> MachineState:
    """Mark key as held down."""
    return state.replace(keypad=state.keypad.at[_check_key(key)].set(True))


def release_key(state: MachineState, key: int) -> MachineState:
    """Mark key as released."""
    return state.replace(keypad=state.keypad.at[_check_key(key)].set(False))
