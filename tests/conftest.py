import random

import pyglet
import pytest

# no hidden GL context at import time, so headless machines can import pyglet.window
pyglet.options["shadow_window"] = False

from chip8.machine import Machine  # noqa: E402


def program(*words):
    """Assemble 16-bit opcode words into big-endian program bytes."""
    out = bytearray()
    for word in words:
        out += bytes(((word >> 8) & 0xFF, word & 0xFF))
    return bytes(out)


@pytest.fixture
def vm():
    return Machine(rng=random.Random(1234))


@pytest.fixture
def load(vm):
    def _load(*words):
        vm.init(program(*words))
        return vm
    return _load
