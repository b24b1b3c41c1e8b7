"""Fetch / decode / execute. Hand-assembled programs, one behaviour per test."""
import logging
import random

import pytest

from chip8 import cpu
from chip8.cpu import Instruction, decode, step
from chip8.errors import AddressError, StackOverflow, StackUnderflow
from conftest import program


def run(vm, count):
    for _ in range(count):
        step(vm)


class TestFetchDecode:
    def test_fetch_is_big_endian_and_advances_pc(self, load):
        vm = load(0xA2F0)
        assert cpu.fetch(vm) == 0xA2F0
        assert vm.pc == 0x202

    def test_decode_fields(self):
        ins = decode(0xD3A5)
        assert ins == Instruction(0xD3A5, 0x3, 0xA, 0x5, 0xA5, 0x3A5)

    def test_fetch_last_word_of_memory(self, vm):
        vm.memory.write_block(0xFFE, b"\x12\x34")
        vm.pc = 0xFFE
        assert cpu.fetch(vm) == 0x1234
        assert vm.pc == 0x1000

    def test_fetch_past_memory_faults(self, vm):
        vm.pc = 0xFFF
        with pytest.raises(AddressError):
            cpu.fetch(vm)

    def test_lookup_table(self):
        assert cpu.lookup(0x00E0) is cpu.op_CLS
        assert cpu.lookup(0x00EE) is cpu.op_RET
        assert cpu.lookup(0x0123) is cpu.op_SYS
        assert cpu.lookup(0x8AB6) is cpu.op_SHR
        assert cpu.lookup(0xF265) is cpu.op_LD_Vx_I
        assert cpu.lookup(0x5121) is None
        assert cpu.lookup(0x8008) is None
        assert cpu.lookup(0xE0FF) is None
        assert cpu.lookup(0xF0FF) is None


class TestFlow:
    def test_cls(self, load):
        vm = load(0x00E0)
        vm.display.pixels[0, 0] = 1
        step(vm)
        assert not vm.display.pixels.any()

    def test_jump(self, load):
        vm = load(0x1345)
        step(vm)
        assert vm.pc == 0x345

    def test_call_and_return(self, load):
        vm = load(0x2300)
        vm.memory.write_block(0x300, program(0x00EE))
        step(vm)
        assert vm.pc == 0x300
        assert vm.sp == 1
        assert int(vm.stack[0]) == 0x202
        step(vm)
        assert vm.pc == 0x202
        assert vm.sp == 0

    def test_jump_plus_v0(self, load):
        vm = load(0x6010, 0xB300)
        run(vm, 2)
        assert vm.pc == 0x310

    def test_jump_plus_v0_past_memory_faults_on_fetch(self, load):
        vm = load(0x60FF, 0xBFFF)
        run(vm, 2)
        assert vm.pc == 0x10FE
        with pytest.raises(AddressError):
            step(vm)

    def test_sys_is_ignored(self, load):
        vm = load(0x0123)
        step(vm)
        assert vm.pc == 0x202

    def test_nested_calls_overflow(self, load):
        # 2200 calls itself forever
        vm = load(0x2200)
        run(vm, 16)
        assert vm.sp == 16
        with pytest.raises(StackOverflow):
            step(vm)
        assert vm.sp == 16

    def test_return_with_empty_stack(self, load):
        vm = load(0x00EE)
        with pytest.raises(StackUnderflow):
            step(vm)

    def test_unknown_opcode_is_skipped(self, load, caplog):
        vm = load(0x5121, 0x6A07)
        with caplog.at_level(logging.WARNING, logger="chip8"):
            step(vm)
        assert vm.pc == 0x202
        assert "5121" in caplog.text
        step(vm)
        assert vm.V[0xA] == 0x07


class TestSkips:
    @pytest.mark.parametrize("word, value, skipped", [
        (0x3A12, 0x12, True),
        (0x3A12, 0x13, False),
        (0x4A12, 0x12, False),
        (0x4A12, 0x13, True),
    ])
    def test_register_vs_byte(self, load, word, value, skipped):
        vm = load(word)
        vm.V[0xA] = value
        step(vm)
        assert vm.pc == (0x204 if skipped else 0x202)

    @pytest.mark.parametrize("word, vy, skipped", [
        (0x5120, 5, True),
        (0x5120, 6, False),
        (0x9120, 5, False),
        (0x9120, 6, True),
    ])
    def test_register_vs_register(self, load, word, vy, skipped):
        vm = load(word)
        vm.V[1], vm.V[2] = 5, vy
        step(vm)
        assert vm.pc == (0x204 if skipped else 0x202)


class TestLoadsAndALU:
    def test_ld_and_add_immediate(self, load):
        vm = load(0x6AF0, 0x7A20)
        vm.V[0xF] = 0x5
        run(vm, 2)
        assert vm.V[0xA] == 0x10
        # 7xkk leaves VF alone
        assert vm.V[0xF] == 0x5

    @pytest.mark.parametrize("sub, vx, vy, result", [
        (0x0, 0x12, 0x34, 0x34),
        (0x1, 0xF0, 0x0F, 0xFF),
        (0x2, 0xF3, 0x3F, 0x33),
        (0x3, 0xFF, 0x0F, 0xF0),
    ])
    def test_bitwise(self, load, sub, vx, vy, result):
        vm = load(0x8120 | sub)
        vm.V[1], vm.V[2] = vx, vy
        step(vm)
        assert vm.V[1] == result
        assert vm.V[2] == vy

    def test_add_carry_for_all_values(self, vm):
        ins = decode(0x8124)
        for vx in range(256):
            for vy in range(256):
                vm.V[1], vm.V[2] = vx, vy
                cpu.op_ADD(vm, ins)
                assert vm.V[0xF] == (1 if vx + vy > 255 else 0)
                assert vm.V[1] == (vx + vy) % 256

    def test_sub_not_borrow_for_all_values(self, vm):
        ins = decode(0x8125)
        for vx in range(256):
            for vy in range(256):
                vm.V[1], vm.V[2] = vx, vy
                cpu.op_SUB(vm, ins)
                assert vm.V[0xF] == (1 if vx > vy else 0)
                assert vm.V[1] == (vx - vy) % 256

    def test_sub_equal_operands_clears_vf(self, load):
        vm = load(0x8125)
        vm.V[1] = vm.V[2] = 0x42
        step(vm)
        assert vm.V[1] == 0
        assert vm.V[0xF] == 0

    def test_subn(self, load):
        vm = load(0x8127, 0x8347)
        vm.V[1], vm.V[2] = 0x10, 0x30
        vm.V[3], vm.V[4] = 0x30, 0x10
        step(vm)
        assert vm.V[1] == 0x20
        assert vm.V[0xF] == 1
        step(vm)
        assert vm.V[3] == 0xE0
        assert vm.V[0xF] == 0

    def test_subn_equal_operands_sets_vf(self, load):
        vm = load(0x8127)
        vm.V[1] = vm.V[2] = 0x42
        step(vm)
        assert vm.V[1] == 0
        assert vm.V[0xF] == 1

    def test_shr(self, load):
        vm = load(0x8106, 0x8106)
        vm.V[1] = 0x05
        step(vm)
        assert (vm.V[1], vm.V[0xF]) == (0x02, 1)
        step(vm)
        assert (vm.V[1], vm.V[0xF]) == (0x01, 0)

    def test_shl(self, load):
        vm = load(0x810E, 0x810E)
        vm.V[1] = 0x81
        step(vm)
        assert (vm.V[1], vm.V[0xF]) == (0x02, 1)
        step(vm)
        assert (vm.V[1], vm.V[0xF]) == (0x04, 0)

    def test_result_wins_when_vx_is_vf(self, load):
        vm = load(0x8FE4)
        vm.V[0xF], vm.V[0xE] = 0x01, 0x02
        step(vm)
        assert vm.V[0xF] == 0x03

    def test_rnd_masks_random_byte(self, load):
        vm = load(0xC30F, 0xC400)
        vm.rng = random.Random(7)
        expected = random.Random(7).getrandbits(8) & 0x0F
        run(vm, 2)
        assert vm.V[3] == expected
        assert vm.V[4] == 0


class TestIndexAndMemory:
    def test_ld_i(self, load):
        vm = load(0xA228)
        step(vm)
        assert vm.I == 0x228

    def test_add_i(self, load):
        vm = load(0xF31E)
        vm.I, vm.V[3] = 0x100, 0x20
        step(vm)
        assert vm.I == 0x120
        assert vm.V[0xF] == 0

    def test_add_i_past_0xfff_sets_vf(self, load):
        vm = load(0xF31E)
        vm.I, vm.V[3] = 0xFFF, 0x01
        step(vm)
        assert vm.I == 0x1000
        assert vm.V[0xF] == 1

    def test_font_address(self, load):
        vm = load(0x600A, 0xF029, 0x6000, 0xF029)
        run(vm, 2)
        assert vm.I == 0x0A * 5
        run(vm, 2)
        assert vm.I == 0x000

    def test_font_address_uses_low_nibble(self, load):
        vm = load(0xF029)
        vm.V[0] = 0x1F
        step(vm)
        assert vm.I == 0xF * 5

    def test_bcd(self, load):
        vm = load(0xF533)
        vm.V[5], vm.I = 254, 0x300
        step(vm)
        assert vm.memory.read_block(0x300, 3) == bytes([2, 5, 4])
        assert vm.I == 0x300

    def test_bcd_past_memory_faults(self, load):
        vm = load(0xF533)
        vm.I = 0xFFE
        with pytest.raises(AddressError):
            step(vm)

    def test_store_then_load_round_trip(self, load):
        vm = load(0xF455, 0xA300, 0xF465)
        values = [0x11, 0x22, 0x33, 0x44, 0x55]
        vm.V[:5] = values
        vm.V[5] = 0x99
        vm.I = 0x300

        step(vm)
        assert vm.memory.read_block(0x300, 5) == bytes(values)
        assert vm.I == 0x305
        assert vm.memory.read(0x305) == 0

        vm.V[:5] = [0] * 5
        run(vm, 2)
        assert vm.V[:5] == values
        assert vm.V[5] == 0x99
        assert vm.I == 0x305

    def test_store_past_memory_faults_without_writing(self, load):
        vm = load(0xF355)
        vm.I = 0xFFE
        vm.V[:4] = [1, 2, 3, 4]
        with pytest.raises(AddressError):
            step(vm)
        assert vm.memory.read_block(0xFFE, 2) == b"\x00\x00"
        assert vm.I == 0xFFE


class TestTimersAndKeys:
    def test_timer_registers(self, load):
        vm = load(0x6A20, 0xFA15, 0xFA18, 0xFB07)
        run(vm, 4)
        assert vm.dt == 0x20
        assert vm.st == 0x20
        assert vm.V[0xB] == 0x20

    def test_skp_sknp(self, load):
        vm = load(0xE19E, 0x0000, 0xE1A1)
        vm.V[1] = 0x7
        vm.keypad.press(0x7)
        step(vm)
        assert vm.pc == 0x204
        step(vm)
        assert vm.pc == 0x206
        vm.keypad.release(0x7)
        vm.pc = 0x200
        step(vm)
        assert vm.pc == 0x202

    def test_keys_default_released(self, load):
        vm = load(0xE2A1)
        step(vm)
        assert vm.pc == 0x204

    def test_wait_for_key(self, load):
        vm = load(0xF30A, 0x6401)
        assert step(vm) is not None
        assert vm.waiting_for_key
        assert step(vm) is None
        assert step(vm) is None
        assert vm.pc == 0x202

        vm.keypad.press(0xB)
        ins = step(vm)
        assert vm.V[3] == 0xB
        assert not vm.waiting_for_key
        assert ins.opcode == 0x6401
        assert vm.V[4] == 1

    def test_wait_ignores_keys_already_held(self, load):
        vm = load(0xF30A)
        vm.keypad.press(0x2)
        step(vm)
        assert step(vm) is None
        vm.keypad.release(0x2)
        vm.keypad.press(0x2)
        step(vm)
        assert vm.V[3] == 0x2


class TestDraw:
    def test_font_digit_on_clear_screen(self, load):
        vm = load(0x600A, 0x6100, 0xF029, 0xD015)
        run(vm, 4)
        assert vm.V[0xF] == 0
        # digit A: F0 90 F0 90 90 drawn at x=10
        assert list(vm.display.pixels[0, 10:18]) == [1, 1, 1, 1, 0, 0, 0, 0]
        assert list(vm.display.pixels[1, 10:18]) == [1, 0, 0, 1, 0, 0, 0, 0]

    def test_second_draw_collides_and_erases(self, load):
        vm = load(0xA000, 0xD015, 0xD015)
        run(vm, 2)
        assert vm.V[0xF] == 0
        assert vm.display.pixels.any()
        step(vm)
        assert vm.V[0xF] == 1
        assert not vm.display.pixels.any()

    def test_zero_height_draw(self, load):
        vm = load(0xD010)
        vm.V[0xF] = 1
        step(vm)
        assert vm.V[0xF] == 0
