"""Run a ROM without a window and print the final screen as text."""

import argparse

from chor import Machine, MachineConfig, ChorError
from chor.constants import QWERTY_KEYMAP
from chor.rendering import framebuffer_to_text

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("rom", help="Path to a CHIP-8 program image")
    parser.add_argument("--steps", type=int, default=2000, help="Instructions to execute")
    parser.add_argument("--skip-unknown", action="store_true", help="Skip unknown instructions")
    parser.add_argument("--trace", action="store_true", help="Log every instruction")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--keys", default="", help="QWERTY keys held down for the whole run, e.g. \"qw\"")
    args = parser.parse_args()

    config = MachineConfig(
        decode_error_policy="skip" if args.skip_unknown else "halt",
        trace=args.trace,
        log_level="DEBUG" if args.trace else "INFO",
    )
    machine = Machine(config)
    machine.load_rom(args.rom)
    for key in args.keys.lower():
        machine.press(QWERTY_KEYMAP[key])

    try:
        machine.run(args.steps, progress=args.progress)
    except ChorError as e:
        print(f"Stopped: {e}")

    print(framebuffer_to_text(machine.framebuffer()))
