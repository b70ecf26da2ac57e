"""CHIP-8 instruction decoding.

Every 16-bit instruction word decodes to exactly one opcode variant below, or
raises :class:`~chor.errors.DecodeError`. Variants carry only the operands
they use:

* ``x``, ``y`` - register indices (bits 8-11 and 4-7)
* ``nn`` / ``mask`` - 8-bit immediate (low byte)
* ``height`` - 4-bit sprite height (low nibble)
* ``address`` - 12-bit address (low 12 bits)

Opcode dataclasses are mappable ``chex`` dataclasses, so they must be built
with keyword arguments.
"""

from typing import Union

from chex import dataclass

from chor.errors import DecodeError


# 0x0 family

@dataclass(frozen=True)
class ClearScreen:
    """00E0 - Clear the display."""


@dataclass(frozen=True)
class Return:
    """00EE - Return from subroutine."""


@dataclass(frozen=True)
class LegacyCall:
    """0NNN - Call machine-code routine at NNN (executed as a jump)."""
    address: int


# Control flow

@dataclass(frozen=True)
class Jump:
    """1NNN - Jump to NNN."""
    address: int


@dataclass(frozen=True)
class Call:
    """2NNN - Call subroutine at NNN."""
    address: int


@dataclass(frozen=True)
class SkipIfEqualImmediate:
    """3XNN - Skip next instruction if VX == NN."""
    x: int
    nn: int


@dataclass(frozen=True)
class SkipIfNotEqualImmediate:
    """4XNN - Skip next instruction if VX != NN."""
    x: int
    nn: int


@dataclass(frozen=True)
class SkipIfEqualRegisters:
    """5XY0 - Skip next instruction if VX == VY."""
    x: int
    y: int


@dataclass(frozen=True)
class SetImmediate:
    """6XNN - VX = NN."""
    x: int
    nn: int


@dataclass(frozen=True)
class AddImmediate:
    """7XNN - VX += NN, no carry."""
    x: int
    nn: int


# 0x8 ALU family

@dataclass(frozen=True)
class Move:
    """8XY0 - VX = VY."""
    x: int
    y: int


@dataclass(frozen=True)
class Or:
    """8XY1 - VX |= VY."""
    x: int
    y: int


@dataclass(frozen=True)
class And:
    """8XY2 - VX &= VY."""
    x: int
    y: int


@dataclass(frozen=True)
class Xor:
    """8XY3 - VX ^= VY."""
    x: int
    y: int


@dataclass(frozen=True)
class AddWithCarry:
    """8XY4 - VX += VY, VF = carry."""
    x: int
    y: int


@dataclass(frozen=True)
class SubtractWithBorrow:
    """8XY5 - VX -= VY, VF = not borrow."""
    x: int
    y: int


@dataclass(frozen=True)
class ShiftRight:
    """8XY6 - VX = VY >> 1, VF = bit shifted out."""
    x: int
    y: int


@dataclass(frozen=True)
class SubtractWithBorrowReversed:
    """8XY7 - VX = VY - VX, VF = not borrow."""
    x: int
    y: int


@dataclass(frozen=True)
class ShiftLeft:
    """8XYE - VX = VY = VY << 1, VF = bit shifted out."""
    x: int
    y: int


@dataclass(frozen=True)
class SkipIfNotEqualRegisters:
    """9XY0 - Skip next instruction if VX != VY."""
    x: int
    y: int


# Index, random, display

@dataclass(frozen=True)
class SetIndex:
    """ANNN - I = NNN."""
    address: int


@dataclass(frozen=True)
class JumpAddOffset:
    """BNNN - Jump to NNN + V0."""
    address: int


@dataclass(frozen=True)
class SetRandomMasked:
    """CXNN - VX = random byte & NN."""
    x: int
    mask: int


@dataclass(frozen=True)
class DrawSprite:
    """DXYN - Draw an N-row sprite from I at (VX, VY)."""
    x: int
    y: int
    height: int


# 0xE keypad family

@dataclass(frozen=True)
class SkipIfKeyPressed:
    """EX9E - Skip next instruction if key VX is pressed."""
    x: int


@dataclass(frozen=True)
class SkipIfKeyNotPressed:
    """EXA1 - Skip next instruction if key VX is not pressed."""
    x: int


# 0xF misc family

@dataclass(frozen=True)
class ReadDelayTimer:
    """FX07 - VX = delay timer."""
    x: int


@dataclass(frozen=True)
class WaitForKey:
    """FX0A - Wait until a key is pressed, store it in VX."""
    x: int


@dataclass(frozen=True)
class SetDelayTimer:
    """FX15 - delay timer = VX."""
    x: int


@dataclass(frozen=True)
class SetSoundTimer:
    """FX18 - sound timer = VX."""
    x: int


@dataclass(frozen=True)
class AddRegisterToIndex:
    """FX1E - I += VX."""
    x: int


@dataclass(frozen=True)
class SetIndexToGlyph:
    """FX29 - I = address of font glyph for digit VX."""
    x: int


@dataclass(frozen=True)
class StoreBCD:
    """FX33 - Store decimal digits of VX at I, I+1, I+2."""
    x: int


@dataclass(frozen=True)
class DumpRegisters:
    """FX55 - Store V0..VX at I, advancing I."""
    x: int


@dataclass(frozen=True)
class LoadRegisters:
    """FX65 - Load V0..VX from I, advancing I."""
    x: int


Opcode = Union[
    ClearScreen, Return, LegacyCall, Jump, Call,
    SkipIfEqualImmediate, SkipIfNotEqualImmediate, SkipIfEqualRegisters,
    SetImmediate, AddImmediate,
    Move, Or, And, Xor, AddWithCarry, SubtractWithBorrow, ShiftRight,
    SubtractWithBorrowReversed, ShiftLeft,
    SkipIfNotEqualRegisters, SetIndex, JumpAddOffset, SetRandomMasked, DrawSprite,
    SkipIfKeyPressed, SkipIfKeyNotPressed,
    ReadDelayTimer, WaitForKey, SetDelayTimer, SetSoundTimer, AddRegisterToIndex,
    SetIndexToGlyph, StoreBCD, DumpRegisters, LoadRegisters,
]

OPCODE_TYPES = Opcode.__args__

# Families whose variant is picked by the low nibble / low byte.
ALU_OPCODES = {
    0x0: Move,
    0x1: Or,
    0x2: And,
    0x3: Xor,
    0x4: AddWithCarry,
    0x5: SubtractWithBorrow,
    0x6: ShiftRight,
    0x7: SubtractWithBorrowReversed,
    0xE: ShiftLeft,
}

KEY_OPCODES = {
    0x9E: SkipIfKeyPressed,
    0xA1: SkipIfKeyNotPressed,
}

MISC_OPCODES = {
    0x07: ReadDelayTimer,
    0x0A: WaitForKey,
    0x15: SetDelayTimer,
    0x18: SetSoundTimer,
    0x1E: AddRegisterToIndex,
    0x29: SetIndexToGlyph,
    0x33: StoreBCD,
    0x55: DumpRegisters,
    0x65: LoadRegisters,
}


def decode(instruction: int) -> Opcode:
    """Decode 16-bit instruction into its opcode variant.

    Raises:
        DecodeError: if the word matches no known pattern.
    """
    instruction = int(instruction) & 0xFFFF
    family = (instruction & 0xF000) >> 12
    x = (instruction & 0x0F00) >> 8
    y = (instruction & 0x00F0) >> 4
    n = instruction & 0x000F
    nn = instruction & 0x00FF
    nnn = instruction & 0x0FFF

    if family == 0x0:
        if nnn == 0x0E0:
            return ClearScreen()
        if nnn == 0x0EE:
            return Return()
        return LegacyCall(address=nnn)
    if family == 0x1:
        return Jump(address=nnn)
    if family == 0x2:
        return Call(address=nnn)
    if family == 0x3:
        return SkipIfEqualImmediate(x=x, nn=nn)
    if family == 0x4:
        return SkipIfNotEqualImmediate(x=x, nn=nn)
    if family == 0x5:
        return SkipIfEqualRegisters(x=x, y=y)
    if family == 0x6:
        return SetImmediate(x=x, nn=nn)
    if family == 0x7:
        return AddImmediate(x=x, nn=nn)
    if family == 0x8:
        if n not in ALU_OPCODES:
            raise DecodeError(instruction)
        return ALU_OPCODES[n](x=x, y=y)
    if family == 0x9:
        return SkipIfNotEqualRegisters(x=x, y=y)
    if family == 0xA:
        return SetIndex(address=nnn)
    if family == 0xB:
        return JumpAddOffset(address=nnn)
    if family == 0xC:
        return SetRandomMasked(x=x, mask=nn)
    if family == 0xD:
        return DrawSprite(x=x, y=y, height=n)
    if family == 0xE:
        if nn not in KEY_OPCODES:
            raise DecodeError(instruction)
        return KEY_OPCODES[nn](x=x)
    if nn not in MISC_OPCODES:
        raise DecodeError(instruction)
    return MISC_OPCODES[nn](x=x)
