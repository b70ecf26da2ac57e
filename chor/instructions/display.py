"""CHIP-8 display operations."""

import jax.numpy as jnp
from chor.state import MachineState
from chor.decode import DrawSprite
from chor.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, FLAG_REGISTER
from chor.instructions.memory import read_memory

# Pre-computed coordinate grids for display operations
yy, xx = jnp.meshgrid(jnp.arange(SCREEN_HEIGHT), jnp.arange(SCREEN_WIDTH), indexing='ij')


def execute_display(state: MachineState, instruction: DrawSprite) -> MachineState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Sprite pixels that fall outside the 64x32 grid are clipped. VF is set
    when a lit pixel is turned off; the redraw flag is raised when a dark
    pixel is turned on.
    """
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32)
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32)

    row_offset = yy - sprite_y
    col_offset = xx - sprite_x
    in_sprite = (
        (col_offset >= 0) & (col_offset < SPRITE_WIDTH)
        & (row_offset >= 0) & (row_offset < instruction.height)
    )

    row_bytes = read_memory(state.memory, state.I + jnp.clip(row_offset, 0, 15))
    bits = (jnp.astype(row_bytes, jnp.int32) >> (7 - jnp.clip(col_offset, 0, 7))) & 1
    sprite = (bits == 1) & in_sprite

    collision = jnp.any(state.display & sprite)
    lit = jnp.any(~state.display & sprite)

    return state.replace(
        display=state.display ^ sprite,
        redraw=state.redraw | lit,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
    )
