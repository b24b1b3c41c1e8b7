import threading

import pytest

from chip8.keypad import Keypad


class TestKeypad:
    def test_press_release(self):
        pad = Keypad()
        assert pad.state() == [False] * 16
        pad.press(0xA)
        assert pad.is_pressed(0xA)
        assert not pad.is_pressed(0xB)
        pad.release(0xA)
        assert not pad.is_pressed(0xA)

    def test_out_of_range(self):
        pad = Keypad()
        assert not pad.is_pressed(0x10)
        assert not pad.is_pressed(-1)
        with pytest.raises(ValueError):
            pad.press(16)

    def test_await_key_poll(self):
        pad = Keypad()
        assert pad.await_key(timeout=0) is None
        pad.press(3)
        pad.press(3)   # held, not a new press
        pad.press(5)
        assert pad.await_key(timeout=0) == 3
        assert pad.await_key(timeout=0) == 5
        assert pad.await_key(timeout=0) is None

    def test_flush(self):
        pad = Keypad()
        pad.press(1)
        pad.flush()
        assert pad.await_key(timeout=0) is None
        assert pad.is_pressed(1)

    def test_release_all(self):
        pad = Keypad()
        pad.press(1)
        pad.press(2)
        pad.release_all()
        assert pad.state() == [False] * 16
        assert pad.await_key(timeout=0) is None

    def test_await_key_blocks_until_press(self):
        pad = Keypad()
        timer = threading.Timer(0.05, pad.press, args=(0xE,))
        timer.start()
        try:
            assert pad.await_key(timeout=5) == 0xE
        finally:
            timer.cancel()

    def test_await_key_timeout(self):
        assert Keypad().await_key(timeout=0.01) is None
