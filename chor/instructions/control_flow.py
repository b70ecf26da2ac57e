"""CHIP-8 control flow instructions."""

import jax.numpy as jnp
from chor.state import MachineState
from chor.decode import Jump, Call, JumpAddOffset
from chor.constants import ADDRESS_MASK
from chor.stack import push


def execute_jump(state: MachineState, instruction: Jump) -> MachineState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.address, jnp.uint16))


def execute_call(state: MachineState, instruction: Call) -> MachineState:
    """2NNN - Call subroutine at NNN."""
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: MachineState, instruction) -> MachineState:
        condition = condition_fn(state, instruction)
        skipped_pc = jnp.astype((state.pc + 2) & ADDRESS_MASK, jnp.uint16)
        return state.replace(pc=jnp.where(condition, skipped_pc, state.pc))
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

execute_skip_if_key_pressed = make_skip_instruction(
    lambda state, inst: state.keypad[state.V[inst.x] & 0xF]
)

execute_skip_if_key_not_pressed = make_skip_instruction(
    lambda state, inst: ~state.keypad[state.V[inst.x] & 0xF]
)


def execute_jump_with_offset(state: MachineState, instruction: JumpAddOffset) -> MachineState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = (instruction.address + jnp.astype(state.V[0], jnp.uint16)) & ADDRESS_MASK
    return state.replace(pc=jnp.astype(jump_address, jnp.uint16))
