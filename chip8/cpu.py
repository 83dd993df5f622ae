# CHIP8 Virtual Machine:
# Input - 16 key states set by the caller between cycles, checked by the key opcodes.
# Output - 64x32 display (array of pixels either on or off) plus the two countdown timers.
# Memory - 4096 bytes: font glyphs at 0x050 and the ROM at 0x200.
#----------------------------------------------------------------------------------------------
# Registers are 16 bytes, the stack is 16 return addresses plus a depth counter,
# and both timers are decremented once per cycle. The engine never touches a window,
# a file or a clock: whoever owns it decides how often to call step().

import logging
import random

import numpy as np

from .constants import (
    FLAG_REGISTER,
    FONTSET,
    FONTSET_START_ADDRESS,
    GLYPH_SIZE,
    HEIGHT,
    KEY_COUNT,
    MAX_PROGRAM_SIZE,
    MEMORY_SIZE,
    PROGRAM_START_ADDRESS,
    REGISTER_COUNT,
    STACK_DEPTH,
    WIDTH,
)
from .decode import OPCODES, decode, split
from .errors import Chip8Error, OutOfRange, ProgramTooLarge, StackOverflow, StackUnderflow

logger = logging.getLogger(__name__)


class Chip8:
    """Fetch-decode-execute engine for the classic CHIP-8 instruction set.

    Built once from the ROM bytes; afterwards state only changes through
    :meth:`step` and :meth:`set_key`.
    """

    WIDTH = WIDTH
    HEIGHT = HEIGHT

    def __init__(self, rom, rng=None):
        rom = bytes(rom)
        if len(rom) > MAX_PROGRAM_SIZE:
            logger.error("ROM of %d bytes does not fit in %d bytes", len(rom), MAX_PROGRAM_SIZE)
            raise ProgramTooLarge(len(rom), MAX_PROGRAM_SIZE)

        # ---- CPU state ----
        self.memory = bytearray(MEMORY_SIZE)
        self.V = bytearray(REGISTER_COUNT)
        self.I = 0
        self.pc = PROGRAM_START_ADDRESS
        self.stack = [0] * STACK_DEPTH
        self.sp = 0
        self.delay = 0
        self.sound = 0
        self.keys = [False] * KEY_COUNT
        self.vram = np.zeros((HEIGHT, WIDTH), dtype=np.uint8)

        # random source for Cxkk, anything with getrandbits() will do
        self.rng = rng if rng is not None else random.Random()

        # set by CLS/DRW so a renderer only redraws when needed
        self.draw_flag = True
        self.waiting_for_key = False
        self.cycle_count = 0

        # Load fontset and ROM into memory
        self.memory[FONTSET_START_ADDRESS:FONTSET_START_ADDRESS + len(FONTSET)] = bytes(FONTSET)
        self.memory[PROGRAM_START_ADDRESS:PROGRAM_START_ADDRESS + len(rom)] = rom
        logger.info("Loaded ROM: %d bytes at 0x%03X", len(rom), PROGRAM_START_ADDRESS)

        self.funcmap = {name: getattr(self, name) for _, _, name in OPCODES}

    # ---- Cycle ----
    def step(self):
        """Execute one instruction, then tick both timers.

        Any :class:`Chip8Error` raised by the instruction leaves the program
        counter on the faulting word and skips the timer tick.
        """
        address = self.pc
        opcode = (self.memory[address % MEMORY_SIZE] << 8) | self.memory[(address + 1) % MEMORY_SIZE]
        try:
            name = decode(opcode, address)
        except Chip8Error as e:
            logger.error("%s", e)
            raise

        self.pc = (address + 2) & 0xFFFF
        self.waiting_for_key = False
        logger.debug("%03X: %04X %s", address, opcode, name)
        try:
            self.funcmap[name](split(opcode))
        except Chip8Error as e:
            self.pc = address
            logger.error("%s", e)
            raise

        self._timer_tick()
        self.cycle_count += 1

    def run(self, cycles):
        """Run the engine for a number of cycles."""
        for _ in range(cycles):
            self.step()

    # ---- timers ----
    def _timer_tick(self):
        if self.delay > 0:
            self.delay -= 1
        if self.sound > 0:
            self.sound -= 1

    # ---- Input ----
    def set_key(self, index, pressed):
        if not 0 <= index < KEY_COUNT:
            raise OutOfRange("key", index, KEY_COUNT)
        self.keys[index] = bool(pressed)

    def is_key_pressed(self, index):
        if not 0 <= index < KEY_COUNT:
            raise OutOfRange("key", index, KEY_COUNT)
        return self.keys[index]

    # ---- Read-only views for renderers and debuggers ----
    def read_pixel(self, x, y):
        if not 0 <= x < WIDTH:
            raise OutOfRange("x", x, WIDTH)
        if not 0 <= y < HEIGHT:
            raise OutOfRange("y", y, HEIGHT)
        return bool(self.vram[y, x])

    @property
    def framebuffer(self):
        """Read-only (HEIGHT, WIDTH) uint8 view of the display, 1 = on."""
        view = self.vram.view()
        view.flags.writeable = False
        return view

    def consume_draw_flag(self):
        """Return whether the display changed since the last call, and reset."""
        changed = self.draw_flag
        self.draw_flag = False
        return changed

    def read_delay_timer(self):
        return self.delay

    def read_sound_timer(self):
        return self.sound

    def register(self, index):
        if not 0 <= index < REGISTER_COUNT:
            raise OutOfRange("register", index, REGISTER_COUNT)
        return self.V[index]

    def read_memory(self, address):
        if not 0 <= address < MEMORY_SIZE:
            raise OutOfRange("address", address, MEMORY_SIZE)
        return self.memory[address]

    @property
    def call_stack(self):
        return tuple(self.stack[:self.sp])

    # ---- Opcode Handlers ----

    # 00E0 - CLS
    def op_CLS(self, ins):
        self.vram[:] = 0
        self.draw_flag = True

    # 00EE - RET
    def op_RET(self, ins):
        if self.sp == 0:
            raise StackUnderflow((self.pc - 2) & 0xFFFF)
        self.sp -= 1
        self.pc = self.stack[self.sp]
        logger.debug("Return to 0x%03X", self.pc)

    # 1nnn - JP addr
    def op_JP(self, ins):
        self.pc = ins.nnn

    # 2nnn - CALL addr
    def op_CALL(self, ins):
        if self.sp >= STACK_DEPTH:
            raise StackOverflow((self.pc - 2) & 0xFFFF, self.sp)
        self.stack[self.sp] = self.pc
        self.sp += 1
        self.pc = ins.nnn

    def _skip_if(self, condition):
        if condition:
            self.pc = (self.pc + 2) & 0xFFFF
            logger.debug("Skip next instruction")

    # 3xkk - SE Vx, byte
    def op_SE_Vx_kk(self, ins):
        self._skip_if(self.V[ins.x] == ins.kk)

    # 4xkk - SNE Vx, byte
    def op_SNE_Vx_kk(self, ins):
        self._skip_if(self.V[ins.x] != ins.kk)

    # 5xy0 - SE Vx, Vy
    def op_SE_Vx_Vy(self, ins):
        self._skip_if(self.V[ins.x] == self.V[ins.y])

    # 9xy0 - SNE Vx, Vy
    def op_SNE_Vx_Vy(self, ins):
        self._skip_if(self.V[ins.x] != self.V[ins.y])

    # 6xkk - LD Vx, byte
    def op_LD_Vx_kk(self, ins):
        self.V[ins.x] = ins.kk

    # 7xkk - ADD Vx, byte (VF untouched)
    def op_ADD_Vx_kk(self, ins):
        self.V[ins.x] = (self.V[ins.x] + ins.kk) & 0xFF

    # 8xy0..8xyE
    def op_LD_Vx_Vy(self, ins):
        self.V[ins.x] = self.V[ins.y]

    def op_OR(self, ins):
        self.V[ins.x] |= self.V[ins.y]

    def op_AND(self, ins):
        self.V[ins.x] &= self.V[ins.y]

    def op_XOR(self, ins):
        self.V[ins.x] ^= self.V[ins.y]

    # VF is written from the operands read beforehand, then Vx, so x == F ends up holding the result
    def op_ADD(self, ins):
        total = self.V[ins.x] + self.V[ins.y]
        self.V[FLAG_REGISTER] = 1 if total > 0xFF else 0
        self.V[ins.x] = total & 0xFF

    def op_SUB(self, ins):
        vx, vy = self.V[ins.x], self.V[ins.y]
        self.V[FLAG_REGISTER] = 1 if vx >= vy else 0
        self.V[ins.x] = (vx - vy) & 0xFF

    def op_SUBN(self, ins):
        vx, vy = self.V[ins.x], self.V[ins.y]
        self.V[FLAG_REGISTER] = 1 if vy >= vx else 0
        self.V[ins.x] = (vy - vx) & 0xFF

    def op_SHR(self, ins):
        vx = self.V[ins.x]
        self.V[FLAG_REGISTER] = vx & 1
        self.V[ins.x] = vx >> 1

    def op_SHL(self, ins):
        vx = self.V[ins.x]
        self.V[FLAG_REGISTER] = (vx >> 7) & 1
        self.V[ins.x] = (vx << 1) & 0xFF

    # Annn - LD I, addr
    def op_LD_I(self, ins):
        self.I = ins.nnn

    # Bnnn - JP V0, addr
    def op_JP_V0(self, ins):
        self.pc = (ins.nnn + self.V[0]) & 0xFFFF

    # Cxkk - RND Vx, byte
    def op_RND(self, ins):
        self.V[ins.x] = self.rng.getrandbits(8) & ins.kk

    # Dxyn - DRW Vx, Vy, nibble
    def op_DRW(self, ins):
        px = self.V[ins.x] % WIDTH
        py = self.V[ins.y] % HEIGHT
        rows = bytes(self.memory[(self.I + row) % MEMORY_SIZE] for row in range(ins.n))
        sprite = np.unpackbits(np.frombuffer(rows, dtype=np.uint8)).reshape(ins.n, 8)

        # pixels running off the right or bottom edge wrap around to the other side
        cells = np.ix_((py + np.arange(ins.n)) % HEIGHT, (px + np.arange(8)) % WIDTH)
        region = self.vram[cells]
        collision = bool(np.any(region & sprite))
        self.vram[cells] = region ^ sprite

        self.V[FLAG_REGISTER] = 1 if collision else 0
        self.draw_flag = True
        logger.debug("Drew %d-row sprite at (%d, %d), collision=%d", ins.n, px, py, collision)

    # Ex9E / ExA1 - SKP / SKNP
    def op_SKP(self, ins):
        self._skip_if(self.keys[self.V[ins.x] & 0xF])

    def op_SKNP(self, ins):
        self._skip_if(not self.keys[self.V[ins.x] & 0xF])

    # Fx07..Fx65 - timers, memory, I, and key input
    def op_LD_Vx_DT(self, ins):
        self.V[ins.x] = self.delay

    def op_WAITKEY(self, ins):
        for i, pressed in enumerate(self.keys):
            if pressed:
                self.V[ins.x] = i
                logger.debug("Key %X pressed, stored in V%X", i, ins.x)
                return
        # stall: the same instruction is fetched again on the next step
        self.pc = (self.pc - 2) & 0xFFFF
        self.waiting_for_key = True

    def op_LD_DT_Vx(self, ins):
        self.delay = self.V[ins.x]

    def op_LD_ST_Vx(self, ins):
        self.sound = self.V[ins.x]

    def op_ADD_I_Vx(self, ins):
        self.I = (self.I + self.V[ins.x]) & 0xFFFF

    def op_FONT(self, ins):
        self.I = FONTSET_START_ADDRESS + GLYPH_SIZE * (self.V[ins.x] & 0xF)

    def op_BCD(self, ins):
        v = self.V[ins.x]
        self.memory[self.I % MEMORY_SIZE] = v // 100
        self.memory[(self.I + 1) % MEMORY_SIZE] = (v // 10) % 10
        self.memory[(self.I + 2) % MEMORY_SIZE] = v % 10

    def op_STORE(self, ins):
        for i in range(ins.x + 1):
            self.memory[(self.I + i) % MEMORY_SIZE] = self.V[i]

    def op_LOAD(self, ins):
        for i in range(ins.x + 1):
            self.V[i] = self.memory[(self.I + i) % MEMORY_SIZE]
