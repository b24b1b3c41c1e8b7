# Cowgod-style mnemonics for CHIP8 opcodes, used by the instruction trace.
from .constants import PROGRAM_START


def disassemble(opcode):
    x = (opcode & 0x0F00) >> 8
    y = (opcode & 0x00F0) >> 4
    n = opcode & 0x000F
    kk = opcode & 0x00FF
    nnn = opcode & 0x0FFF
    family = opcode >> 12

    if opcode == 0x00E0:
        return "CLS"
    if opcode == 0x00EE:
        return "RET"
    if family == 0x0:
        return "SYS %03X" % nnn
    if family == 0x1:
        return "JP %03X" % nnn
    if family == 0x2:
        return "CALL %03X" % nnn
    if family == 0x3:
        return "SE V%X, %02X" % (x, kk)
    if family == 0x4:
        return "SNE V%X, %02X" % (x, kk)
    if family == 0x5 and n == 0:
        return "SE V%X, V%X" % (x, y)
    if family == 0x6:
        return "LD V%X, %02X" % (x, kk)
    if family == 0x7:
        return "ADD V%X, %02X" % (x, kk)
    if family == 0x8:
        alu = {
            0x0: "LD V%X, V%X", 0x1: "OR V%X, V%X", 0x2: "AND V%X, V%X",
            0x3: "XOR V%X, V%X", 0x4: "ADD V%X, V%X", 0x5: "SUB V%X, V%X",
            0x7: "SUBN V%X, V%X",
        }
        if n in alu:
            return alu[n] % (x, y)
        if n == 0x6:
            return "SHR V%X" % x
        if n == 0xE:
            return "SHL V%X" % x
    if family == 0x9 and n == 0:
        return "SNE V%X, V%X" % (x, y)
    if family == 0xA:
        return "LD I, %03X" % nnn
    if family == 0xB:
        return "JP V0, %03X" % nnn
    if family == 0xC:
        return "RND V%X, %02X" % (x, kk)
    if family == 0xD:
        return "DRW V%X, V%X, %d" % (x, y, n)
    if family == 0xE:
        if kk == 0x9E:
            return "SKP V%X" % x
        if kk == 0xA1:
            return "SKNP V%X" % x
    if family == 0xF:
        fx = {
            0x07: "LD V%X, DT", 0x0A: "LD V%X, K", 0x15: "LD DT, V%X",
            0x18: "LD ST, V%X", 0x1E: "ADD I, V%X", 0x29: "LD F, V%X",
            0x33: "LD B, V%X", 0x55: "LD [I], V%X", 0x65: "LD V%X, [I]",
        }
        if kk in fx:
            return fx[kk] % x
    return "??? %04X" % opcode


def listing(program, origin=PROGRAM_START):
    # (address, opcode, text) for each whole word; a trailing odd byte is skipped
    for offset in range(0, len(program) - 1, 2):
        opcode = (program[offset] << 8) | program[offset + 1]
        yield origin + offset, opcode, disassemble(opcode)
