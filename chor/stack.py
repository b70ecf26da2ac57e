"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chor.constants import ADDRESS_MASK, STACK_SIZE
from chor.errors import StackOverflowError, StackUnderflowError
from chor.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push return address onto stack.

    Raises:
        StackOverflowError: if all slots are already in use.
    """
    if stack.pointer >= STACK_SIZE:
        raise StackOverflowError(int(address))
    masked_address = address & ADDRESS_MASK
    new_data = stack.data.at[stack.pointer].set(masked_address)
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState, address: int = 0) -> tuple[StackState, jnp.ndarray]:
    """Pop return address from stack.

    ``address`` only feeds the error message when the stack is empty.

    Raises:
        StackUnderflowError: if there is no active call frame.
    """
    if stack.pointer <= 0:
        raise StackUnderflowError(int(address))
    new_pointer = stack.pointer - 1
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
