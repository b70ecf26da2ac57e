"""Tests for the host-facing Machine."""

import jax.numpy as jnp
import numpy as np
import pytest
from chor import (
    Machine, MachineConfig, DecodeError, StackOverflowError, StackUnderflowError,
    MachineHaltedError, ProgramTooLargeError, InvalidKeyError, PROGRAM_START,
)
from chor.constants import PROGRAM_CAPACITY, SCREEN_WIDTH, SCREEN_HEIGHT
from chor.decode import SetImmediate, Jump
from conftest import assemble


class TestConstruction:
    """Power-on state."""

    def test_initial_state(self, machine):
        assert machine.pc == PROGRAM_START
        assert machine.index == 0
        assert machine.registers == [0] * 16
        assert machine.stack_depth == 0
        assert machine.delay_timer == 0
        assert machine.sound_timer == 0
        assert not machine.halted
        assert not machine.consume_redraw_flag()

    def test_font_preloaded(self, machine):
        assert int(machine.state.memory[0]) == 0xF0
        assert int(machine.state.memory[0x4F]) == 0x80
        assert int(machine.state.memory[0x50]) == 0


class TestLoad:
    """Program loading."""

    def test_load_places_program_at_0x200(self, machine):
        machine.load(b"\x12\x34\x56")
        memory = machine.state.memory
        assert [int(b) for b in memory[0x200:0x203]] == [0x12, 0x34, 0x56]

    def test_load_full_capacity(self, machine):
        machine.load(bytes([0xAA]) * PROGRAM_CAPACITY)
        assert int(machine.state.memory[0xFFF]) == 0xAA

    def test_load_too_large(self, machine):
        with pytest.raises(ProgramTooLargeError) as excinfo:
            machine.load(bytes(PROGRAM_CAPACITY + 1))
        assert excinfo.value.capacity == PROGRAM_CAPACITY
        assert int(machine.state.memory[0x200]) == 0

    def test_load_rom_file(self, machine, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(assemble(0x6A05))
        machine.load_rom(str(rom))
        machine.step()
        assert machine.registers[0xA] == 5

    def test_shorter_program_replaces_longer(self, machine):
        machine.load(assemble(0x6001, 0x6102))
        machine.load(assemble(0x6005))
        machine.run(2)  # cleared word at 0x202 runs as a legacy call
        assert machine.registers[:2] == [5, 0]
        assert int(machine.state.memory[0x202]) == 0


class TestStep:
    """Fetch-decode-execute through the machine."""

    def test_step_returns_opcode(self, machine):
        machine.load(assemble(0x6A05, 0x1200))
        assert machine.step() == SetImmediate(x=0xA, nn=0x05)
        assert machine.pc == 0x202
        assert machine.step() == Jump(address=0x200)
        assert machine.pc == 0x200

    def test_skip_advances_four_bytes(self, machine):
        machine.load(assemble(0x6005, 0x3005, 0x6101, 0x6202))
        machine.step()
        machine.step()
        assert machine.pc == 0x206

    def test_no_skip_advances_two_bytes(self, machine):
        machine.load(assemble(0x6004, 0x3005, 0x6101))
        machine.step()
        machine.step()
        assert machine.pc == 0x204

    def test_call_return_round_trip(self, machine):
        program = bytearray(assemble(0x2300, 0x6001))
        program.extend(bytes(0x300 - 0x200 - len(program)))
        program.extend(assemble(0x00EE))
        machine.load(bytes(program))

        machine.step()
        assert machine.pc == 0x300
        assert machine.stack_depth == 1
        machine.step()
        assert machine.pc == 0x202
        assert machine.stack_depth == 0

    def test_wait_for_key_spins_until_pressed(self, machine):
        machine.load(assemble(0xF50A, 0x6101))
        for _ in range(3):
            machine.step()
            assert machine.pc == 0x200
        machine.press(0xB)
        machine.step()
        assert machine.pc == 0x202
        assert machine.registers[5] == 0xB

    def test_pc_wraps_at_end_of_memory(self, machine):
        machine.load(bytes(PROGRAM_CAPACITY - 2) + assemble(0x6A01))
        machine._state = machine.state.replace(pc=jnp.uint16(0xFFE))
        machine.step()
        assert machine.pc == 0x000
        assert machine.registers[0xA] == 1


class TestFatalErrors:
    """Stack errors halt the machine."""

    def test_stack_overflow_halts(self, machine):
        machine.load(assemble(0x2200))  # calls itself forever
        for _ in range(16):
            machine.step()
        assert machine.stack_depth == 16

        with pytest.raises(StackOverflowError):
            machine.step()
        assert machine.halted
        assert isinstance(machine.halt_reason, StackOverflowError)
        assert machine.stack_depth == 16
        assert machine.pc == 0x200

        with pytest.raises(MachineHaltedError):
            machine.step()

    def test_stack_underflow_halts(self, machine):
        machine.load(assemble(0x00EE))
        with pytest.raises(StackUnderflowError):
            machine.step()
        assert machine.halted
        assert machine.pc == 0x200

    def test_reset_clears_halt_and_reloads(self, machine):
        machine.load(assemble(0x00EE))
        with pytest.raises(StackUnderflowError):
            machine.step()

        machine.reset()

        assert not machine.halted
        assert machine.pc == PROGRAM_START
        assert int(machine.state.memory[0x200]) == 0x00
        assert int(machine.state.memory[0x201]) == 0xEE


class TestDecodeErrorPolicy:
    """Unknown instructions either halt or are skipped, never silent."""

    def test_halt_policy(self, machine):
        machine.load(assemble(0x8128, 0x6101))
        with pytest.raises(DecodeError) as excinfo:
            machine.step()
        assert excinfo.value.word == 0x8128
        assert machine.halted
        assert machine.pc == 0x200
        with pytest.raises(MachineHaltedError):
            machine.step()

    def test_skip_policy(self, skipping_machine):
        skipping_machine.load(assemble(0xE1FF, 0x6101))
        assert skipping_machine.step() is None
        assert skipping_machine.pc == 0x202
        assert skipping_machine.decode_failures == 1
        assert not skipping_machine.halted

        skipping_machine.step()
        assert skipping_machine.registers[1] == 1

    def test_skip_policy_logs_warning(self, capsys):
        from chor.logging import ConsoleLogger
        logger = ConsoleLogger(log_level="WARNING", use_colors=False, show_timestamps=False)
        m = Machine(MachineConfig(decode_error_policy="skip"), logger=logger)
        m.load(assemble(0xF0FF))
        m.step()
        out = capsys.readouterr().out
        assert "[ WARNING][chor] 0x200: skipping Unknown instruction 0xF0FF" in out


class TestTimers:
    """60 Hz timer entry point."""

    def test_tick_decrements(self, machine):
        machine.load(assemble(0x6003, 0xF015, 0xF018))
        machine.run(3)
        assert machine.delay_timer == 3
        assert machine.sound_active

        machine.tick_timers()
        assert machine.delay_timer == 2
        assert machine.sound_timer == 2

    def test_timer_floor(self, machine):
        machine.load(assemble(0x6002, 0xF015))
        machine.run(2)
        for _ in range(10):
            machine.tick_timers()
        assert machine.delay_timer == 0
        assert machine.sound_timer == 0
        assert not machine.sound_active


class TestRun:
    """Batched execution."""

    def test_run_ticks_timers(self, quiet_logger):
        m = Machine(MachineConfig(instructions_per_tick=2), logger=quiet_logger)
        m.load(assemble(0x600A, 0xF015, 0x1204, 0x1204))
        executed = m.run(6)
        assert executed == 6
        # Delay set to 10 on the 2nd instruction; ticks after instructions 2, 4 and 6
        assert m.delay_timer == 7

    def test_run_zero(self, machine):
        assert machine.run(0) == 0
        assert machine.pc == PROGRAM_START

    def test_run_stops_on_fatal_error(self, machine):
        machine.load(assemble(0x6001, 0x00EE))
        with pytest.raises(StackUnderflowError):
            machine.run(10)
        assert machine.registers[0] == 1


class TestKeys:
    """Key press entry points."""

    def test_press_and_release(self, machine):
        machine.press(0x4)
        assert bool(machine.state.keypad[0x4])
        machine.release(0x4)
        assert not bool(machine.state.keypad[0x4])

    @pytest.mark.parametrize("key", [-1, 16, 255])
    def test_out_of_range_key(self, machine, key):
        with pytest.raises(InvalidKeyError):
            machine.press(key)
        with pytest.raises(InvalidKeyError):
            machine.release(key)


class TestFramebuffer:
    """Framebuffer and redraw flag."""

    def test_framebuffer_shape_and_readonly(self, machine):
        fb = machine.framebuffer()
        assert fb.shape == (SCREEN_WIDTH * SCREEN_HEIGHT,)
        assert fb.dtype == np.bool_
        assert not fb.any()
        with pytest.raises(ValueError):
            fb[0] = True

    def test_draw_sets_redraw_once(self, machine):
        # V0 = 2, V1 = 1, I = glyph 0, draw 5 rows
        machine.load(assemble(0x6002, 0x6101, 0xA000, 0xD015))
        machine.run(4)

        fb = machine.framebuffer()
        assert fb[1 * SCREEN_WIDTH + 2]
        assert fb[1 * SCREEN_WIDTH + 5]
        assert not fb[1 * SCREEN_WIDTH + 6]
        assert machine.consume_redraw_flag()
        assert not machine.consume_redraw_flag()

    def test_redraw_survives_until_consumed(self, machine):
        # Draw then erase; the lit pixels still request a redraw
        machine.load(assemble(0xA000, 0xD015, 0xD015))
        machine.run(3)
        assert not machine.framebuffer().any()
        assert machine.registers[15] == 1
        assert machine.consume_redraw_flag()
