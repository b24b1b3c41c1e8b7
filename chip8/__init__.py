# CHIP8 virtual machine: interpreter core, display buffer, timers and engine.
# The pyglet window lives in chip8.window and is not imported here.
from .constants import HEIGHT, PROGRAM_START, WIDTH
from .display import Display
from .disasm import disassemble
from .engine import Engine
from .errors import (
    AddressError, Chip8Error, EmptyProgram, ProgramTooLarge, ROMLoadError,
    StackOverflow, StackUnderflow,
)
from .keypad import Keypad
from .logs import set_logs
from .machine import Machine, Memory
from .rom import load_rom

__version__ = "0.1.0"
