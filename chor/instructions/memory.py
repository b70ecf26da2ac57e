"""CHIP-8 memory and register operations."""

import jax
import jax.numpy as jnp
from chor.state import MachineState
from chor.decode import SetImmediate, AddImmediate, SetIndex, SetRandomMasked
from chor.constants import ADDRESS_MASK, FONT_END


def write_memory(memory: jnp.ndarray, addresses: jnp.ndarray, values: jnp.ndarray) -> jnp.ndarray:
    """Store ``values`` at ``addresses`` (wrapped to 12 bits), leaving the font intact."""
    addresses = addresses & ADDRESS_MASK
    values = jnp.where(addresses < FONT_END, memory[addresses], values)
    return memory.at[addresses].set(jnp.astype(values, jnp.uint8))


def read_memory(memory: jnp.ndarray, addresses: jnp.ndarray) -> jnp.ndarray:
    """Load bytes at ``addresses`` (wrapped to 12 bits)."""
    return memory[addresses & ADDRESS_MASK]


def execute_set(state: MachineState, instruction: SetImmediate) -> MachineState:
    """6XNN - Set VX = NN."""
    return state.replace(V=state.V.at[instruction.x].set(instruction.nn))


def execute_add(state: MachineState, instruction: AddImmediate) -> MachineState:
    """7XNN - Add NN to VX, modulo 256, VF untouched."""
    total = (jnp.astype(state.V[instruction.x], jnp.int32) + instruction.nn) & 0xFF
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(total, jnp.uint8)))


def execute_set_index(state: MachineState, instruction: SetIndex) -> MachineState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.address, jnp.uint16))


def execute_random(state: MachineState, instruction: SetRandomMasked) -> MachineState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.int32)
    masked = jnp.astype(random_value & instruction.mask, jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(masked), rng=key)
