# Memory, register file and call stack of the CHIP8 virtual machine.
# We store the 16 V registers as zeros, I/PC/SP as plain ints and the
# 16-slot return stack as a numpy array addressed by SP (0 = empty).
import logging
import random

import numpy as np

from .constants import (
    FONTSET, FONT_START, MAX_PROGRAM_SIZE, MEMORY_END, MEMORY_SIZE,
    PROGRAM_START, REGISTER_COUNT, STACK_DEPTH,
)
from .display import Display
from .errors import AddressError, EmptyProgram, ProgramTooLarge, StackOverflow, StackUnderflow
from .keypad import Keypad

logger = logging.getLogger(__name__)


class Memory:
    """Flat 4K byte store. The hex font sits at 0x000-0x04F and survives reset()."""

    def __init__(self):
        self.data = bytearray(MEMORY_SIZE)
        self.data[FONT_START:FONT_START + len(FONTSET)] = bytes(FONTSET)

    def __len__(self):
        return len(self.data)

    def __getitem__(self, index):
        return self.data[index]

    def load(self, program):
        if not program:
            raise EmptyProgram()
        if len(program) > MAX_PROGRAM_SIZE:
            raise ProgramTooLarge(len(program), MAX_PROGRAM_SIZE)
        self.data[PROGRAM_START:PROGRAM_START + len(program)] = bytes(program)
        logger.debug("Loaded %d bytes at 0x%03X", len(program), PROGRAM_START)

    def reset(self):
        self.data[PROGRAM_START:] = bytes(MEMORY_SIZE - PROGRAM_START)

    def _check(self, address, count=1):
        if address < 0 or address + count - 1 > MEMORY_END:
            raise AddressError(address + count - 1 if address >= 0 else address)

    def read(self, address):
        self._check(address)
        return self.data[address]

    def write(self, address, value):
        self._check(address)
        self.data[address] = value & 0xFF

    def read_block(self, address, count):
        self._check(address, count)
        return bytes(self.data[address:address + count])

    def write_block(self, address, values):
        self._check(address, len(values))
        self.data[address:address + len(values)] = bytes(values)


class Machine:
    """All state of one VM: memory, registers, stack, timers, display and keypad.

    The dispatcher (chip8.cpu) is the only writer of registers, memory and the
    stack; the timer tick (chip8.timers) is the only code that counts DT/ST down.
    """

    def __init__(self, keypad=None, rng=None):
        self.memory = Memory()
        self.display = Display()
        self.keypad = keypad if keypad is not None else Keypad()
        self.rng = rng if rng is not None else random.Random()
        self.V = [0] * REGISTER_COUNT
        self.stack = np.zeros(STACK_DEPTH, dtype=np.uint16)
        self._clear_registers()

    def _clear_registers(self):
        self.V[:] = [0] * REGISTER_COUNT
        self.I = 0
        self.pc = PROGRAM_START
        self.sp = 0
        self.stack[:] = 0
        self.dt = 0
        self.st = 0
        self.waiting_register = None   # set while Fx0A is waiting for a key

    # ---- Lifecycle ----
    def init(self, program):
        # copy program into memory and point PC at it; nothing else is touched
        self.memory.load(program)
        self.pc = PROGRAM_START

    def reset(self):
        self.memory.reset()
        self._clear_registers()
        self.display.clear()

    # ---- Stack ----
    def push(self, address):
        if self.sp >= STACK_DEPTH:
            raise StackOverflow(self.pc - 2)
        self.stack[self.sp] = address
        self.sp += 1

    def pop(self):
        if self.sp == 0:
            raise StackUnderflow(self.pc - 2)
        self.sp -= 1
        return int(self.stack[self.sp])

    @property
    def waiting_for_key(self):
        return self.waiting_register is not None

    def dump(self):
        return {
            "pc": self.pc,
            "I": self.I,
            "sp": self.sp,
            "dt": self.dt,
            "st": self.st,
            "V": list(self.V),
            "stack": [int(a) for a in self.stack[:self.sp]],
        }
