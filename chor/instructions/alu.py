"""CHIP-8 ALU operations (8xxx).

Each ``alu_*`` helper maps the source values ``(vx, vy)`` to
``(result, flag)``, where ``flag`` is ``None`` for operations that leave VF
untouched. All arithmetic is done in int32 and reduced modulo 256.
"""

from typing import Optional

import jax.numpy as jnp
from chor.state import MachineState
from chor.decode import (
    Move, Or, And, Xor, AddWithCarry, SubtractWithBorrow, ShiftRight,
    SubtractWithBorrowReversed, ShiftLeft,
)
from chor.constants import FLAG_REGISTER


def alu_set(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx: int, vy: int) -> tuple[int, Optional[int]]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, set carry flag."""
    result = vx + vy
    carry = result > 0xFF
    return result & 0xFF, carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = 1 when no borrow."""
    not_borrow = vx >= vy
    return (vx - vy) & 0xFF, not_borrow


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX = VY >> 1."""
    return vy >> 1, vy & 1


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when no borrow."""
    not_borrow = vy >= vx
    return (vy - vx) & 0xFF, not_borrow


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX = VY << 1."""
    return (vy << 1) & 0xFF, (vy & 0x80) >> 7


ALU_OPERATIONS = {
    Move: alu_set,
    Or: alu_or,
    And: alu_and,
    Xor: alu_xor,
    AddWithCarry: alu_add,
    SubtractWithBorrow: alu_sub_xy,
    ShiftRight: alu_shift_right,
    SubtractWithBorrowReversed: alu_sub_yx,
    ShiftLeft: alu_shift_left,
}


def execute_alu_operation(state: MachineState, instruction) -> MachineState:
    """8XYN - ALU operations dispatcher."""
    vx = jnp.astype(state.V[instruction.x], jnp.int32)
    vy = jnp.astype(state.V[instruction.y], jnp.int32)

    result, vf = ALU_OPERATIONS[type(instruction)](vx, vy)
    result = jnp.astype(result, jnp.uint8)

    new_V = state.V.at[instruction.x].set(result)
    if isinstance(instruction, ShiftLeft):
        # Shift left writes the shifted value back to VY as well.
        new_V = new_V.at[instruction.y].set(result)
    if vf is not None:
        new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(vf, jnp.uint8))
    return state.replace(V=new_V)
