"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
from chor.state import MachineState
from chor.decode import (
    ReadDelayTimer, WaitForKey, SetDelayTimer, SetSoundTimer, AddRegisterToIndex,
    SetIndexToGlyph, StoreBCD, DumpRegisters, LoadRegisters,
)
from chor.constants import ADDRESS_MASK, FONT_START, GLYPH_SIZE
from chor.instructions.memory import read_memory, write_memory


def execute_get_delay_timer(state: MachineState, instruction: ReadDelayTimer) -> MachineState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: MachineState, instruction: SetDelayTimer) -> MachineState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: MachineState, instruction: SetSoundTimer) -> MachineState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: MachineState, instruction: AddRegisterToIndex) -> MachineState:
    """FX1E - Add VX to I, wrapping at the end of memory. VF is untouched."""
    new_i = (jnp.astype(state.I, jnp.int32) + state.V[instruction.x]) & ADDRESS_MASK
    return state.replace(I=jnp.astype(new_i, jnp.uint16))


def execute_wait_for_key(state: MachineState, instruction: WaitForKey) -> MachineState:
    """FX0A - Wait for key press.

    Stores the lowest-numbered pressed key. With no key down the PC is moved
    back onto this instruction so the next step runs it again.
    """
    if not jnp.any(state.keypad):
        return state.replace(pc=jnp.astype((state.pc - 2) & ADDRESS_MASK, jnp.uint16))
    pressed_key = jnp.argmax(state.keypad)
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(pressed_key, jnp.uint8)))


def execute_font_character(state: MachineState, instruction: SetIndexToGlyph) -> MachineState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = jnp.astype(state.V[instruction.x], jnp.int32) & 0xF
    return state.replace(I=jnp.astype(FONT_START + digit * GLYPH_SIZE, jnp.uint16))


def execute_bcd_conversion(state: MachineState, instruction: StoreBCD) -> MachineState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + state.I
    return state.replace(memory=write_memory(state.memory, indices, digits))


def execute_store_registers(state: MachineState, instruction: DumpRegisters) -> MachineState:
    """FX55 - Store V0 through VX in memory starting at I, then I += X + 1."""
    count = instruction.x + 1
    indices = jnp.arange(count) + state.I
    new_memory = write_memory(state.memory, indices, state.V[:count])
    return state.replace(memory=new_memory, I=_advance_index(state, count))


def execute_load_registers(state: MachineState, instruction: LoadRegisters) -> MachineState:
    """FX65 - Load V0 through VX from memory starting at I, then I += X + 1."""
    count = instruction.x + 1
    indices = jnp.arange(count) + state.I
    new_V = state.V.at[:count].set(read_memory(state.memory, indices))
    return state.replace(V=new_V, I=_advance_index(state, count))


def _advance_index(state: MachineState, count: int) -> jnp.ndarray:
    return jnp.astype((jnp.astype(state.I, jnp.int32) + count) & ADDRESS_MASK, jnp.uint16)
