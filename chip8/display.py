# 64x32 monochrome display buffer.
# Sprites are XORed onto the grid; coordinates wrap around both edges.
# The grid is written by the dispatcher (draw/clear) and read by the renderer
# from another thread, so every access goes through one lock.
import threading

import numpy as np

from .constants import HEIGHT, MEMORY_END, WIDTH
from .errors import AddressError

SPRITE_WIDTH = 8


class Display:
    def __init__(self, width=WIDTH, height=HEIGHT):
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width), dtype=np.uint8)
        self.dirty = True   # renderer should redraw
        self._lock = threading.Lock()

    def clear(self):
        with self._lock:
            self.pixels[:] = 0
            self.dirty = True

    def draw(self, memory, n, addr, x0, y0):
        """Draw the n-byte sprite at memory[addr] with its top-left corner at (x0, y0).

        Returns 1 if any set sprite bit landed on an already-set pixel, else 0.
        """
        if n == 0:
            return 0
        if addr < 0 or addr + n - 1 > MEMORY_END:
            raise AddressError(addr + n - 1, "sprite read")

        sprite = np.frombuffer(bytes(memory[addr:addr + n]), dtype=np.uint8)
        bits = np.unpackbits(sprite).reshape(n, SPRITE_WIDTH)   # bit 7 first
        rows = (y0 + np.arange(n)) % self.height
        cols = (x0 + np.arange(SPRITE_WIDTH)) % self.width
        region = np.ix_(rows, cols)

        with self._lock:
            current = self.pixels[region]
            collision = bool(np.any(current & bits))
            self.pixels[region] = current ^ bits
            self.dirty = True
        return 1 if collision else 0

    def pixel(self, x, y):
        with self._lock:
            return int(self.pixels[y % self.height, x % self.width])

    def snapshot(self):
        with self._lock:
            return self.pixels.copy()

    def take_frame(self):
        # snapshot + clear the dirty flag, None when nothing changed
        with self._lock:
            if not self.dirty:
                return None
            self.dirty = False
            return self.pixels.copy()
