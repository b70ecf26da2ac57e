"""Tests for system instructions (0xxx)."""

import jax.numpy as jnp
from chor import execute


def test_execute_clear_screen(fresh_state):
    """00E0 - Clear display and request a redraw."""
    state = fresh_state.replace(display=fresh_state.display.at[0, 0].set(True))

    state = execute(state, 0x00E0)

    assert jnp.sum(state.display) == 0
    assert state.redraw


def test_clear_blank_screen_needs_no_redraw(fresh_state):
    """00E0 on an empty display changes nothing."""
    state = execute(fresh_state, 0x00E0)

    assert not state.redraw


def test_legacy_call_jumps(fresh_state):
    """0NNN - Treated as a jump without touching the stack."""
    state = execute(fresh_state, 0x0456)

    assert state.pc == 0x456
    assert state.stack.pointer == 0


def test_execute_return_after_call(fresh_state):
    """Return restores the address saved by the call."""
    state = fresh_state.replace(pc=0x40A)
    state = execute(state, 0x2600)
    state = execute(state, 0x00EE)

    assert state.pc == 0x40A
