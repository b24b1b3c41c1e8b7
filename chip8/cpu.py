# CHIP8 instruction dispatcher.
# CPU - Cowgod's CHIP8 Technical reference http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
#----------------------------------------------------------------------------------------------
# Every instruction is two bytes, most significant byte first. fetch() advances
# PC by 2 *before* the handler runs, so jumps and calls work against the
# address of the next instruction. Handlers are plain functions taking the
# machine and the decoded instruction; the dispatch table maps (mask, pattern)
# pairs onto them.
import collections
import logging

from .constants import FONT_GLYPH_SIZE, FONT_START, MEMORY_END
from .disasm import disassemble
from .errors import AddressError

logger = logging.getLogger(__name__)

Instruction = collections.namedtuple("Instruction", "opcode x y n kk nnn")


# ---- Fetch / decode ----
def fetch(vm):
    pc = vm.pc
    if pc < 0 or pc + 1 > MEMORY_END:
        raise AddressError(pc, "PC")
    opcode = (vm.memory.data[pc] << 8) | vm.memory.data[pc + 1]
    vm.pc = pc + 2
    return opcode


def decode(opcode):
    return Instruction(
        opcode,
        (opcode & 0x0F00) >> 8,   # x
        (opcode & 0x00F0) >> 4,   # y
        opcode & 0x000F,          # n
        opcode & 0x00FF,          # kk
        opcode & 0x0FFF,          # nnn
    )


def _skip(vm):
    vm.pc += 2


# ---- Opcode Handlers ----

# 0nnn - SYS call, ignored on modern interpreters
def op_SYS(vm, ins):
    logger.debug("SYS call ignored (0%03X)", ins.nnn)


# 00E0 - Clear the display
def op_CLS(vm, ins):
    vm.display.clear()


# 00EE - Return from subroutine
def op_RET(vm, ins):
    vm.pc = vm.pop()


# 1nnn - Jump to address nnn
def op_JP(vm, ins):
    vm.pc = ins.nnn


# 2nnn - Call subroutine at nnn
def op_CALL(vm, ins):
    vm.push(vm.pc)
    vm.pc = ins.nnn


# 3xkk - Skip next instruction if Vx == kk
def op_SE_Vx_kk(vm, ins):
    if vm.V[ins.x] == ins.kk:
        _skip(vm)


# 4xkk - Skip next instruction if Vx != kk
def op_SNE_Vx_kk(vm, ins):
    if vm.V[ins.x] != ins.kk:
        _skip(vm)


# 5xy0 - Skip next instruction if Vx == Vy
def op_SE_Vx_Vy(vm, ins):
    if vm.V[ins.x] == vm.V[ins.y]:
        _skip(vm)


# 6xkk - Vx = kk
def op_LD_Vx_kk(vm, ins):
    vm.V[ins.x] = ins.kk


# 7xkk - Vx = Vx + kk, no carry flag
def op_ADD_Vx_kk(vm, ins):
    vm.V[ins.x] = (vm.V[ins.x] + ins.kk) & 0xFF


# 8xy0..8xyE - register/register ALU
def op_LD_Vx_Vy(vm, ins):
    vm.V[ins.x] = vm.V[ins.y]


def op_OR(vm, ins):
    vm.V[ins.x] |= vm.V[ins.y]


def op_AND(vm, ins):
    vm.V[ins.x] &= vm.V[ins.y]


def op_XOR(vm, ins):
    vm.V[ins.x] ^= vm.V[ins.y]


def op_ADD(vm, ins):
    total = vm.V[ins.x] + vm.V[ins.y]
    vm.V[0xF] = 1 if total > 0xFF else 0
    vm.V[ins.x] = total & 0xFF


def op_SUB(vm, ins):
    # NOT borrow: strictly greater, Vx == Vy gives VF = 0
    vx, vy = vm.V[ins.x], vm.V[ins.y]
    vm.V[0xF] = 1 if vx > vy else 0
    vm.V[ins.x] = (vx - vy) & 0xFF


def op_SHR(vm, ins):
    vx = vm.V[ins.x]
    vm.V[0xF] = vx & 1
    vm.V[ins.x] = vx >> 1


def op_SUBN(vm, ins):
    vx, vy = vm.V[ins.x], vm.V[ins.y]
    vm.V[0xF] = 1 if vy >= vx else 0
    vm.V[ins.x] = (vy - vx) & 0xFF


def op_SHL(vm, ins):
    vx = vm.V[ins.x]
    vm.V[0xF] = (vx >> 7) & 1
    vm.V[ins.x] = (vx << 1) & 0xFF


# 9xy0 - Skip next instruction if Vx != Vy
def op_SNE_Vx_Vy(vm, ins):
    if vm.V[ins.x] != vm.V[ins.y]:
        _skip(vm)


# Annn - I = nnn
def op_LD_I(vm, ins):
    vm.I = ins.nnn


# Bnnn - Jump to nnn + V0 (no wrap, fetch faults past 0xFFF)
def op_JP_V0(vm, ins):
    vm.pc = ins.nnn + vm.V[0]


# Cxkk - Vx = random byte AND kk
def op_RND(vm, ins):
    vm.V[ins.x] = vm.rng.getrandbits(8) & ins.kk


# Dxyn - Draw n-byte sprite from I at (Vx, Vy), VF = collision
def op_DRW(vm, ins):
    vm.V[0xF] = vm.display.draw(vm.memory, ins.n, vm.I, vm.V[ins.x], vm.V[ins.y])


# Ex9E - Skip next instruction if key Vx is down
def op_SKP(vm, ins):
    if vm.keypad.is_pressed(vm.V[ins.x]):
        _skip(vm)


# ExA1 - Skip next instruction if key Vx is up
def op_SKNP(vm, ins):
    if not vm.keypad.is_pressed(vm.V[ins.x]):
        _skip(vm)


# Fx07 - Vx = DT
def op_LD_Vx_DT(vm, ins):
    vm.V[ins.x] = vm.dt


# Fx0A - Wait for the next key press, store it in Vx.
# Only the dispatcher stalls; step() polls the keypad until a key arrives.
def op_LD_Vx_K(vm, ins):
    vm.keypad.flush()
    vm.waiting_register = ins.x
    logger.debug("Waiting for key -> V%X", ins.x)


# Fx15 - DT = Vx
def op_LD_DT_Vx(vm, ins):
    vm.dt = vm.V[ins.x]


# Fx18 - ST = Vx
def op_LD_ST_Vx(vm, ins):
    vm.st = vm.V[ins.x]


# Fx1E - I = I + Vx, VF = 1 when I passes 0xFFF
def op_ADD_I_Vx(vm, ins):
    total = vm.I + vm.V[ins.x]
    vm.V[0xF] = 1 if total > MEMORY_END else 0
    vm.I = total & 0xFFFF


# Fx29 - I = address of the font glyph for digit Vx
def op_LD_F_Vx(vm, ins):
    vm.I = FONT_START + (vm.V[ins.x] & 0xF) * FONT_GLYPH_SIZE


# Fx33 - BCD of Vx at I, I+1, I+2
def op_LD_B_Vx(vm, ins):
    v = vm.V[ins.x]
    vm.memory.write_block(vm.I, (v // 100, (v // 10) % 10, v % 10))


# Fx55 - store V0..Vx at I, then I += x + 1
def op_LD_I_Vx(vm, ins):
    vm.memory.write_block(vm.I, vm.V[:ins.x + 1])
    vm.I += ins.x + 1


# Fx65 - load V0..Vx from I, then I += x + 1
def op_LD_Vx_I(vm, ins):
    vm.V[:ins.x + 1] = list(vm.memory.read_block(vm.I, ins.x + 1))
    vm.I += ins.x + 1


# ---- Dispatch table ----
OPCODES = [
    (0xFFFF, 0x00E0, op_CLS),
    (0xFFFF, 0x00EE, op_RET),
    (0xF000, 0x0000, op_SYS),

    (0xF000, 0x1000, op_JP),
    (0xF000, 0x2000, op_CALL),
    (0xF000, 0x3000, op_SE_Vx_kk),
    (0xF000, 0x4000, op_SNE_Vx_kk),
    (0xF00F, 0x5000, op_SE_Vx_Vy),
    (0xF000, 0x6000, op_LD_Vx_kk),
    (0xF000, 0x7000, op_ADD_Vx_kk),

    (0xF00F, 0x8000, op_LD_Vx_Vy),
    (0xF00F, 0x8001, op_OR),
    (0xF00F, 0x8002, op_AND),
    (0xF00F, 0x8003, op_XOR),
    (0xF00F, 0x8004, op_ADD),
    (0xF00F, 0x8005, op_SUB),
    (0xF00F, 0x8006, op_SHR),
    (0xF00F, 0x8007, op_SUBN),
    (0xF00F, 0x800E, op_SHL),

    (0xF00F, 0x9000, op_SNE_Vx_Vy),
    (0xF000, 0xA000, op_LD_I),
    (0xF000, 0xB000, op_JP_V0),
    (0xF000, 0xC000, op_RND),
    (0xF000, 0xD000, op_DRW),

    (0xF0FF, 0xE09E, op_SKP),
    (0xF0FF, 0xE0A1, op_SKNP),

    (0xF0FF, 0xF007, op_LD_Vx_DT),
    (0xF0FF, 0xF00A, op_LD_Vx_K),
    (0xF0FF, 0xF015, op_LD_DT_Vx),
    (0xF0FF, 0xF018, op_LD_ST_Vx),
    (0xF0FF, 0xF01E, op_ADD_I_Vx),
    (0xF0FF, 0xF029, op_LD_F_Vx),
    (0xF0FF, 0xF033, op_LD_B_Vx),
    (0xF0FF, 0xF055, op_LD_I_Vx),
    (0xF0FF, 0xF065, op_LD_Vx_I),
]

_lookup_cache = {}


def lookup(opcode):
    # first matching row wins; None for unknown opcodes
    try:
        return _lookup_cache[opcode]
    except KeyError:
        pass
    handler = None
    for mask, pattern, func in OPCODES:
        if opcode & mask == pattern:
            handler = func
            break
    _lookup_cache[opcode] = handler
    return handler


# ---- Cycle ----
def step(vm):
    """Execute one instruction and return it.

    While an Fx0A key wait is pending the keypad is polled instead and None is
    returned until a key arrives. Faults (AddressError, StackOverflow,
    StackUnderflow) propagate to the caller.
    """
    if vm.waiting_register is not None:
        key = vm.keypad.await_key(timeout=0)
        if key is None:
            return None
        vm.V[vm.waiting_register] = key
        logger.debug("Key %X -> V%X", key, vm.waiting_register)
        vm.waiting_register = None

    address = vm.pc
    ins = decode(fetch(vm))
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("%03X: [%04X] %s", address, ins.opcode, disassemble(ins.opcode))

    handler = lookup(ins.opcode)
    if handler is None:
        logger.warning("Unknown opcode %04X at 0x%03X", ins.opcode, address)
    else:
        handler(vm, ins)
    return ins

