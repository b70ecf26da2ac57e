"""Test configuration and fixtures for CHIP-8 machine tests."""

import pytest
import jax.numpy as jnp
from chor import create_state, Machine, MachineConfig
from chor.logging import ConsoleLogger


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


@pytest.fixture
def quiet_logger():
    """Logger that only prints critical messages."""
    return ConsoleLogger(log_level="CRITICAL", use_colors=False)


@pytest.fixture
def machine(quiet_logger):
    """Provide a fresh machine with the default halt-on-decode-error policy."""
    return Machine(logger=quiet_logger)


@pytest.fixture
def skipping_machine(quiet_logger):
    """Provide a machine that skips unknown instructions."""
    return Machine(MachineConfig(decode_error_policy="skip"), logger=quiet_logger)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def assemble(*words):
    """Helper to turn instruction words into a big-endian program image."""
    return b"".join(word.to_bytes(2, "big") for word in words)
