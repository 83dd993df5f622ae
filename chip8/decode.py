"""Instruction decoding for the classic CHIP-8 instruction set.

Each entry of :data:`OPCODES` is ``(mask, pattern, handler_name)``; an
instruction word belongs to the entry where ``opcode & mask == pattern``.
The table is grouped by high nibble once at import so ``decode`` only
scans the handful of candidates for the instruction's family.
"""

from collections import namedtuple

from .errors import InvalidOpcode

Instruction = namedtuple("Instruction", ["opcode", "x", "y", "n", "kk", "nnn"])

# dispatch table
OPCODES = [
    (0xFFFF, 0x00E0, "op_CLS"),         # 00E0 - Clear the display
    (0xFFFF, 0x00EE, "op_RET"),         # 00EE - Return from a subroutine

    (0xF000, 0x1000, "op_JP"),          # 1nnn - Jump to address nnn
    (0xF000, 0x2000, "op_CALL"),        # 2nnn - Call subroutine at nnn
    (0xF000, 0x3000, "op_SE_Vx_kk"),    # 3xkk - Skip next instruction if Vx == kk
    (0xF000, 0x4000, "op_SNE_Vx_kk"),   # 4xkk - Skip next instruction if Vx != kk
    (0xF00F, 0x5000, "op_SE_Vx_Vy"),    # 5xy0 - Skip next instruction if Vx == Vy
    (0xF000, 0x6000, "op_LD_Vx_kk"),    # 6xkk - Vx = kk
    (0xF000, 0x7000, "op_ADD_Vx_kk"),   # 7xkk - Vx += kk, no carry

    (0xF00F, 0x8000, "op_LD_Vx_Vy"),    # 8xy0 - Vx = Vy
    (0xF00F, 0x8001, "op_OR"),          # 8xy1 - Vx |= Vy
    (0xF00F, 0x8002, "op_AND"),         # 8xy2 - Vx &= Vy
    (0xF00F, 0x8003, "op_XOR"),         # 8xy3 - Vx ^= Vy
    (0xF00F, 0x8004, "op_ADD"),         # 8xy4 - Vx += Vy, VF = carry
    (0xF00F, 0x8005, "op_SUB"),         # 8xy5 - Vx -= Vy, VF = NOT borrow
    (0xF00F, 0x8006, "op_SHR"),         # 8xy6 - Vx >>= 1, VF = bit shifted out
    (0xF00F, 0x8007, "op_SUBN"),        # 8xy7 - Vx = Vy - Vx, VF = NOT borrow
    (0xF00F, 0x800E, "op_SHL"),         # 8xyE - Vx <<= 1, VF = bit shifted out

    (0xF00F, 0x9000, "op_SNE_Vx_Vy"),   # 9xy0 - Skip next instruction if Vx != Vy
    (0xF000, 0xA000, "op_LD_I"),        # Annn - I = nnn
    (0xF000, 0xB000, "op_JP_V0"),       # Bnnn - Jump to nnn + V0
    (0xF000, 0xC000, "op_RND"),         # Cxkk - Vx = random byte & kk
    (0xF000, 0xD000, "op_DRW"),         # Dxyn - Draw n-row sprite at (Vx, Vy)

    (0xF0FF, 0xE09E, "op_SKP"),         # Ex9E - Skip if key Vx is pressed
    (0xF0FF, 0xE0A1, "op_SKNP"),        # ExA1 - Skip if key Vx is not pressed

    (0xF0FF, 0xF007, "op_LD_Vx_DT"),    # Fx07 - Vx = delay timer
    (0xF0FF, 0xF00A, "op_WAITKEY"),     # Fx0A - Wait for a key press, store it in Vx
    (0xF0FF, 0xF015, "op_LD_DT_Vx"),    # Fx15 - delay timer = Vx
    (0xF0FF, 0xF018, "op_LD_ST_Vx"),    # Fx18 - sound timer = Vx
    (0xF0FF, 0xF01E, "op_ADD_I_Vx"),    # Fx1E - I += Vx
    (0xF0FF, 0xF029, "op_FONT"),        # Fx29 - I = glyph address of digit Vx
    (0xF0FF, 0xF033, "op_BCD"),         # Fx33 - BCD of Vx at I, I+1, I+2
    (0xF0FF, 0xF055, "op_STORE"),       # Fx55 - memory[I..I+x] = V0..Vx
    (0xF0FF, 0xF065, "op_LOAD"),        # Fx65 - V0..Vx = memory[I..I+x]
]

_FAMILIES = {}
for _mask, _pattern, _name in OPCODES:
    _FAMILIES.setdefault(_pattern >> 12, []).append((_mask, _pattern, _name))


def split(opcode):
    """Extract the operand fields of a 16-bit instruction word."""
    return Instruction(
        opcode=opcode,
        x=(opcode >> 8) & 0xF,
        y=(opcode >> 4) & 0xF,
        n=opcode & 0xF,
        kk=opcode & 0xFF,
        nnn=opcode & 0x0FFF,
    )


def decode(opcode, address=None):
    """Return the handler name for ``opcode``.

    Raises :class:`InvalidOpcode` when no table entry matches; ``address``
    is only used to make the error message point at the offending word.
    """
    for mask, pattern, name in _FAMILIES.get(opcode >> 12, ()):
        if opcode & mask == pattern:
            return name
    raise InvalidOpcode(opcode, address)
