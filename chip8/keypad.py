# 16-key hex keypad.
#   1 2 3 C
#   4 5 6 D
#   7 8 9 E
#   A 0 B F
# Key state is written by the front end (key press/release events) and read
# by the dispatcher. Presses are also queued so Fx0A can wait for the *next*
# key press instead of whatever happens to be held down.
import collections
import logging
import threading

import numpy as np

from .constants import KEY_COUNT

logger = logging.getLogger(__name__)


class Keypad:
    def __init__(self):
        self.keys = np.zeros(KEY_COUNT, dtype=np.uint8)
        self._presses = collections.deque()
        self._cond = threading.Condition()

    def _check(self, key):
        if not 0 <= key < KEY_COUNT:
            raise ValueError("no such key: %r" % (key,))

    def press(self, key):
        self._check(key)
        with self._cond:
            if not self.keys[key]:
                self._presses.append(key)
                self._cond.notify_all()
            self.keys[key] = 1
        logger.debug("Key %X down", key)

    def release(self, key):
        self._check(key)
        with self._cond:
            self.keys[key] = 0
        logger.debug("Key %X up", key)

    def release_all(self):
        with self._cond:
            self.keys[:] = 0
            self._presses.clear()

    def is_pressed(self, key):
        # keys outside 0-F (Vx > 0xF) are never pressed
        if not 0 <= key < KEY_COUNT:
            return False
        with self._cond:
            return bool(self.keys[key])

    def state(self):
        with self._cond:
            return [bool(k) for k in self.keys]

    def flush(self):
        # forget presses that happened before now
        with self._cond:
            self._presses.clear()

    def await_key(self, timeout=None):
        """Block until a key is pressed and return it.

        timeout=0 polls, timeout=None waits forever. Returns None on timeout.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: self._presses, timeout):
                return None
            return self._presses.popleft()
