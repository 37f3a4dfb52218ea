# CHIP8 Virtual Machine:
# Memory - 4096 bytes. The font sits at 0x050, programs are loaded at 0x200.
# CPU - 16 8-bit registers (V0..VF, VF doubles as the carry/borrow/collision
#       flag), a 16-bit index register I, a program counter and a 16 slot
#       call stack. Cowgod's CHIP8 Technical reference:
#       http://devernay.free.fr/hacks/chip8/C8TECH10.HTM#0.0
# Timers - delay and sound, both count down once per advance_timers() call.
# Output - 64x32 framebuffer, one uint32 per pixel that is either 0 or all ones
#          so drawing is a plain XOR.
# Input - 16 key states written by whoever owns the keyboard.
#----------------------------------------------------------------------------------------------
# The interpreter never paces itself: the host calls advance_instruction() at
# the CPU rate and advance_timers() at the timer rate.

import logging
import random

import numpy as np

from .errors import (Chip8Error, MemoryBoundsError, RomTooLargeError,
                     StackOverflowError, StackUnderflowError)

log = logging.getLogger(__name__)

MEMORY_SIZE = 4096
PROGRAM_START = 0x200
FONT_ADDRESS = 0x050
STACK_DEPTH = 16
NUM_REGISTERS = 16
NUM_KEYS = 16
VIDEO_WIDTH, VIDEO_HEIGHT = 64, 32
PIXEL_ON = 0xFFFFFFFF

# Standard CHIP-8 fontset (binary pixel patterns)
FONTSET = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
] #notice 80 bytes


class Chip8:
    """One emulated CHIP-8 machine.

    Host-facing operations are load_rom(), advance_instruction() and
    advance_timers(). The framebuffer and keypad are plain numpy arrays the
    host reads and writes between steps.

    Any Chip8Error raised by advance_instruction() leaves the machine as it
    was before the call, with pc pointing at the faulting instruction.
    """

    def __init__(self, rng=None):
        # ---- CPU state ----
        self.memory = bytearray(MEMORY_SIZE)
        self.V = [0] * NUM_REGISTERS
        self.I = 0
        self.pc = PROGRAM_START
        self.stack = np.zeros(STACK_DEPTH, dtype=np.uint16)
        self.sp = 0
        self.delay_timer = 0
        self.sound_timer = 0
        self.vram = np.zeros(VIDEO_WIDTH * VIDEO_HEIGHT, dtype=np.uint32)
        self.keys = np.zeros(NUM_KEYS, dtype=bool)
        self.rng = rng if rng is not None else random.Random()
        self.should_draw = True

        # current opcode and its decoded fields, only meaningful during a step
        self.opcode = 0
        self.x = self.y = self.n = self.nn = self.nnn = 0

        self.memory[FONT_ADDRESS:FONT_ADDRESS + len(FONTSET)] = bytes(FONTSET)

        self.setup_funcmap()

    # ---- Host surface ----
    @property
    def framebuffer(self):
        return self.vram

    @property
    def keypad(self):
        return self.keys

    @property
    def sound_active(self):
        return self.sound_timer > 0

    def press_key(self, key):
        self.keys[key] = True

    def release_key(self, key):
        self.keys[key] = False

    # ---- Load ROM ----
    def load_rom(self, data):
        """Copy a raw program image to 0x200.

        Raises RomTooLargeError, without touching memory, when the image
        does not fit.
        """
        data = bytes(data)
        capacity = MEMORY_SIZE - PROGRAM_START
        if len(data) > capacity:
            raise RomTooLargeError(len(data), capacity)
        self.memory[PROGRAM_START:PROGRAM_START + len(data)] = data
        log.info("Loaded %d byte ROM at 0x%03X", len(data), PROGRAM_START)

    # ---- Timers ----
    def advance_timers(self):
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    # ---- Cycle ----
    def advance_instruction(self):
        address = self.pc
        if address < 0 or address + 1 >= MEMORY_SIZE:
            raise MemoryBoundsError(address, 2)

        # Fetch
        self.opcode = (self.memory[address] << 8) | self.memory[address + 1]
        self.pc = (address + 2) & 0xFFFF

        # Decode
        self.x = (self.opcode >> 8) & 0xF
        self.y = (self.opcode >> 4) & 0xF
        self.n = self.opcode & 0xF
        self.nn = self.opcode & 0xFF
        self.nnn = self.opcode & 0x0FFF

        # Dispatch
        try:
            self.funcmap[self.opcode >> 12]()
        except Chip8Error:
            self.pc = address
            raise

    # ---- Opcode function map ----
    def setup_funcmap(self):
        self.funcmap = {
            0x0: self._0xxx,  # 00E0 / 00EE - clear screen / return
            0x1: self._1nnn,  # 1nnn - jump
            0x2: self._2nnn,  # 2nnn - call subroutine
            0x3: self._3xnn,  # 3xnn - skip if Vx == nn
            0x4: self._4xnn,  # 4xnn - skip if Vx != nn
            0x5: self._5xy0,  # 5xy0 - skip if Vx == Vy
            0x6: self._6xnn,  # 6xnn - Vx = nn
            0x7: self._7xnn,  # 7xnn - Vx += nn
            0x8: self._8xxx,  # 8xy0..8xyE - register arithmetic and logic
            0x9: self._9xy0,  # 9xy0 - skip if Vx != Vy
            0xA: self._Annn,  # Annn - I = nnn
            0xB: self._Bnnn,  # Bnnn - jump to nnn + V0
            0xC: self._Cxnn,  # Cxnn - Vx = random byte & nn
            0xD: self._Dxyn,  # Dxyn - draw sprite
            0xE: self._Exxx,  # Ex9E / ExA1 - key skips
            0xF: self._Fxxx,  # Fx07..Fx65 - timers, keys, I and memory transfers
        }

    def _unknown(self):
        log.debug("Unknown opcode ignored: %04X", self.opcode)

    def _check_range(self, address, length):
        if address < 0 or address + length > MEMORY_SIZE:
            raise MemoryBoundsError(address, length)

    # ---- Opcode Handlers ----

    # 00E0 / 00EE, every other 0nnn (SYS) is ignored
    def _0xxx(self):
        if self.opcode == 0x00E0:
            self.vram[:] = 0
            self.should_draw = True
            log.debug("Clear the display")
        elif self.opcode == 0x00EE:
            if self.sp == 0:
                raise StackUnderflowError(self.pc - 2)
            self.sp -= 1
            self.pc = int(self.stack[self.sp])
            log.debug("Return to 0x%03X", self.pc)
        else:
            self._unknown()

    # 1nnn - Jump to address nnn
    def _1nnn(self):
        self.pc = self.nnn
        log.debug("Jump to 0x%03X", self.nnn)

    # 2nnn - Call subroutine at nnn
    def _2nnn(self):
        if self.sp >= STACK_DEPTH:
            raise StackOverflowError(self.pc - 2)
        self.stack[self.sp] = self.pc
        self.sp += 1
        self.pc = self.nnn
        log.debug("Call subroutine at 0x%03X", self.nnn)

    def _skip(self):
        self.pc = (self.pc + 2) & 0xFFFF
        log.debug("Skip next instruction, pc = 0x%03X", self.pc)

    # 3xnn - Skip next instruction if Vx == nn
    def _3xnn(self):
        if self.V[self.x] == self.nn:
            self._skip()
        else:
            log.debug("No skip: V%X != %d", self.x, self.nn)

    # 4xnn - Skip next instruction if Vx != nn
    def _4xnn(self):
        if self.V[self.x] != self.nn:
            self._skip()
        else:
            log.debug("No skip: V%X == %d", self.x, self.nn)

    # 5xy0 - Skip next instruction if Vx == Vy
    def _5xy0(self):
        if self.n != 0:
            self._unknown()
            return
        if self.V[self.x] == self.V[self.y]:
            self._skip()
        else:
            log.debug("No skip: V%X != V%X", self.x, self.y)

    # 6xnn - Set Vx = nn
    def _6xnn(self):
        self.V[self.x] = self.nn
        log.debug("Set V%X = %d", self.x, self.nn)

    # 7xnn - Add immediate, no carry
    def _7xnn(self):
        self.V[self.x] = (self.V[self.x] + self.nn) & 0xFF
        log.debug("Add %d to V%X: %d", self.nn, self.x, self.V[self.x])

    # 8xy0..8xyE
    def _8xxx(self):
        x, y, sub = self.x, self.y, self.n
        V = self.V

        if sub == 0x0:
            V[x] = V[y]
        elif sub == 0x1:
            V[x] |= V[y]
        elif sub == 0x2:
            V[x] &= V[y]
        elif sub == 0x3:
            V[x] ^= V[y]
        elif sub == 0x4:
            total = V[x] + V[y]
            V[x] = total & 0xFF
            V[0xF] = 1 if total > 0xFF else 0
        elif sub == 0x5:
            flag = 1 if V[x] >= V[y] else 0
            V[x] = (V[x] - V[y]) & 0xFF
            V[0xF] = flag
        elif sub == 0x6:
            flag = V[x] & 1
            V[x] >>= 1
            V[0xF] = flag
        elif sub == 0x7:
            flag = 1 if V[y] >= V[x] else 0
            V[x] = (V[y] - V[x]) & 0xFF
            V[0xF] = flag
        elif sub == 0xE:
            flag = (V[x] >> 7) & 1
            V[x] = (V[x] << 1) & 0xFF
            V[0xF] = flag
        else:
            self._unknown()
            return
        log.debug("8xy%X: V%X = %d, VF = %d", sub, x, V[x], V[0xF])

    # 9xy0 - Skip next instruction if Vx != Vy
    def _9xy0(self):
        if self.n != 0:
            self._unknown()
            return
        if self.V[self.x] != self.V[self.y]:
            self._skip()
        else:
            log.debug("No skip: V%X == V%X", self.x, self.y)

    # Annn - Set I = nnn
    def _Annn(self):
        self.I = self.nnn
        log.debug("Set I = %03X", self.I)

    # Bnnn - Jump to address nnn + V0
    def _Bnnn(self):
        self.pc = self.nnn + self.V[0]
        log.debug("Jump to V0 + %03X = %03X", self.nnn, self.pc)

    # Cxnn - Vx = random byte AND nn
    def _Cxnn(self):
        self.V[self.x] = self.rng.getrandbits(8) & self.nn
        log.debug("Set V%X = random_byte & %d -> %d", self.x, self.nn, self.V[self.x])

    # Dxyn - Draw an 8 x n sprite from memory[I] at (Vx, Vy), wrapping at the edges
    def _Dxyn(self):
        height = self.n
        self._check_range(self.I, height)
        px = self.V[self.x]
        py = self.V[self.y]
        vram = self.vram
        collision = 0
        for row in range(height):
            sprite = self.memory[self.I + row]
            if sprite == 0:
                continue
            base = ((py + row) % VIDEO_HEIGHT) * VIDEO_WIDTH
            for col in range(8):
                if sprite & (0x80 >> col):
                    idx = base + (px + col) % VIDEO_WIDTH
                    if vram[idx] == PIXEL_ON:
                        collision = 1
                    vram[idx] ^= PIXEL_ON
        self.V[0xF] = collision
        self.should_draw = True
        log.debug("Drew sprite at (%d, %d), collision=%d", px, py, collision)

    # Ex9E / ExA1 - Skip if key Vx is / is not pressed
    def _Exxx(self):
        key = self.V[self.x] & 0xF
        if self.nn == 0x9E:
            if self.keys[key]:
                self._skip()
        elif self.nn == 0xA1:
            if not self.keys[key]:
                self._skip()
        else:
            self._unknown()
            return
        log.debug("Key %X is %s", key, "down" if self.keys[key] else "up")

    # Fx07..Fx65
    def _Fxxx(self):
        x, kk = self.x, self.nn

        if kk == 0x07:
            self.V[x] = self.delay_timer
            log.debug("Set V%X = delay timer (%d)", x, self.delay_timer)
        elif kk == 0x0A:
            # wait for a key press: re-run this instruction until one is down
            for key in range(NUM_KEYS):
                if self.keys[key]:
                    self.V[x] = key
                    log.debug("Key %X pressed, stored in V%X", key, x)
                    break
            else:
                self.pc -= 2
                log.debug("Waiting for a key press into V%X", x)
        elif kk == 0x15:
            self.delay_timer = self.V[x]
            log.debug("Set delay timer = V%X (%d)", x, self.delay_timer)
        elif kk == 0x18:
            self.sound_timer = self.V[x]
            log.debug("Set sound timer = V%X (%d)", x, self.sound_timer)
        elif kk == 0x1E:
            self.I = (self.I + self.V[x]) & 0xFFFF
            log.debug("Add V%X to I: %03X", x, self.I)
        elif kk == 0x29:
            self.I = FONT_ADDRESS + (self.V[x] & 0xF) * 5
            log.debug("Set I = glyph %X at %03X", self.V[x] & 0xF, self.I)
        elif kk == 0x33:
            self._check_range(self.I, 3)
            value = self.V[x]
            self.memory[self.I] = value // 100
            self.memory[self.I + 1] = (value // 10) % 10
            self.memory[self.I + 2] = value % 10
            log.debug("Stored BCD of V%X (%d) at %03X", x, value, self.I)
        elif kk == 0x55:
            self._check_range(self.I, x + 1)
            self.memory[self.I:self.I + x + 1] = bytes(self.V[:x + 1])
            log.debug("Stored V0..V%X at %03X", x, self.I)
        elif kk == 0x65:
            self._check_range(self.I, x + 1)
            self.V[:x + 1] = self.memory[self.I:self.I + x + 1]
            log.debug("Loaded V0..V%X from %03X", x, self.I)
        else:
            self._unknown()
