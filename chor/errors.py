"""Exceptions raised by the CHIP-8 core."""


class ChorError(Exception):
    """Base class for all emulator errors."""


class ConfigError(ChorError, ValueError):
    """Invalid machine configuration."""


class DecodeError(ChorError):
    """Instruction word that matches no known opcode."""

    def __init__(self, word: int):
        self.word = word
        super().__init__(f"Unknown instruction 0x{word:04X}")


class ProgramTooLargeError(ChorError):
    """Program image does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(f"Program is {size} bytes, only {capacity} bytes available")


class InvalidKeyError(ChorError, IndexError):
    """Key index outside 0-15."""

    def __init__(self, key: int):
        self.key = key
        super().__init__(f"Key index {key} out of range 0-15")


class FatalMachineError(ChorError):
    """Program-logic violation after which the machine cannot continue."""


class StackOverflowError(FatalMachineError):
    """Call with all 16 stack slots in use."""

    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Stack overflow, return address 0x{address:03X}")


class StackUnderflowError(FatalMachineError):
    """Return with no active call frame."""

    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Return from base routine at 0x{address:03X}")


class MachineHaltedError(FatalMachineError):
    """Step requested on a machine that already halted."""
