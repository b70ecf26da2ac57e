"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chor.state import MachineState
from chor.decode import ClearScreen, Return, LegacyCall
from chor.constants import ADDRESS_MASK
from chor.stack import pop


def execute_clear_screen(state: MachineState, instruction: ClearScreen) -> MachineState:
    """00E0 - Clear display."""
    return state.replace(
        display=jnp.zeros_like(state.display),
        redraw=state.redraw | jnp.any(state.display),
    )


def execute_return(state: MachineState, instruction: Return) -> MachineState:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack, state.pc - 2)
    return state.replace(stack=stack, pc=address)


def execute_legacy_call(state: MachineState, instruction: LegacyCall) -> MachineState:
    """0NNN - Machine-code routine call, treated as a jump to NNN."""
    return state.replace(pc=jnp.astype(instruction.address & ADDRESS_MASK, jnp.uint16))
