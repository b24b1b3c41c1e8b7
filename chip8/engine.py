# Emulation engine: owns one Machine and drives it from a background thread.
#----------------------------------------------------------------------------------------------
# The thread runs a private pyglet clock with two interval callbacks at TIMER_HZ:
#   _timer_tick - counts DT/ST down, switches the buzzer, signals a refresh
#   _cpu_tick   - executes dt * ips instructions (fraction carried to the next slice)
# Both callbacks run on the same thread under the engine lock, so an instruction
# or a timer decrement is never interleaved with anything else. Between clock
# ticks the thread sleeps on the stop event, which also makes stop() immediate.
import logging
import threading

import pyglet

from . import cpu, timers
from .constants import CPU_HZ, MAX_FRAME_SLICES, TIMER_HZ
from .errors import Chip8Error
from .machine import Machine
from .rom import load_rom

logger = logging.getLogger(__name__)


class Engine:
    def __init__(self, ips=CPU_HZ, timer_hz=TIMER_HZ, keypad=None, rng=None,
                 on_refresh=None, on_sound=None, on_fault=None):
        if ips <= 0 or timer_hz <= 0:
            raise ValueError("ips and timer_hz must be positive")
        self.machine = Machine(keypad=keypad, rng=rng)
        self.ips = ips
        self.timer_hz = timer_hz
        self.on_refresh = on_refresh
        self.on_sound = on_sound
        self.on_fault = on_fault

        self.cycles = 0        # instructions executed since construction
        self.fault = None      # last Chip8Error that stopped a run
        self.sound_on = False

        self._budget = 0.0
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread = None

    @property
    def keypad(self):
        return self.machine.keypad

    # ---- Program lifecycle ----
    def init(self, program):
        with self._lock:
            self.machine.init(program)
            self.fault = None
        logger.info("Program loaded: %d bytes", len(program))

    def reset(self):
        with self._lock:
            self.machine.reset()
            self._budget = 0.0
            self.fault = None
            self._set_sound(False)

    def load_file(self, path):
        self.init(load_rom(path))

    def run_file(self, path):
        # what the shell does on "Load ROM": stop and wipe a running program first
        program = load_rom(path)
        if self.is_running():
            self.stop()
            self.reset()
        self.init(program)
        self.start()

    def destroy(self):
        self.stop()
        self.machine = None

    # ---- Run control ----
    def start(self):
        previous = self._thread
        if previous is not None and previous is not threading.current_thread():
            self.stop()
            previous = None
        elif previous is not None:
            # restarted from inside the engine thread (an on_fault handler):
            # the new scheduler waits for this one to unwind before ticking
            self._stop_event.set()
        self._stop_event = threading.Event()
        self._budget = 0.0
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_event, previous), name="chip8-engine", daemon=True,
        )
        self._thread.start()
        logger.info("Emulation started (%d instructions/s, timers at %d Hz)", self.ips, self.timer_hz)

    def stop(self):
        self._stop_event.set()
        thread = self._thread
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join()
            self._thread = None
        logger.info("Emulation stopped after %d instructions", self.cycles)

    def is_running(self):
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    def get_display_snapshot(self):
        return self.machine.display.snapshot()

    # ---- Scheduler ----
    def _run(self, stop_event, previous):
        # every run owns its stop event, so a superseded thread never sees a
        # cleared one and never ticks again
        if previous is not None:
            previous.join()
        period = 1.0 / self.timer_hz
        clock = pyglet.clock.Clock()

        def timer_tick(dt):
            if not stop_event.is_set():
                self._timer_tick(dt)

        def cpu_tick(dt):
            if not stop_event.is_set():
                self._cpu_tick(dt)

        clock.schedule_interval(timer_tick, period)
        clock.schedule_interval(cpu_tick, period)
        try:
            while not stop_event.is_set():
                clock.tick()
                sleep = clock.get_sleep_time(True)
                stop_event.wait(period if sleep is None else sleep)
        finally:
            clock.unschedule(timer_tick)
            clock.unschedule(cpu_tick)
            with self._lock:
                self._set_sound(False)

    def _timer_tick(self, dt):
        self.tick_timers()

    def _cpu_tick(self, dt):
        with self._lock:
            self._budget += dt * self.ips
            ceiling = self.ips / self.timer_hz * MAX_FRAME_SLICES
            if self._budget > ceiling:
                self._budget = ceiling
            count = int(self._budget)
            self._budget -= count
            executed = self.run_cycles(count)
            if executed < count:
                # waiting on a key (or stopped): don't bank the unused slice
                self._budget = 0.0

    # ---- Synchronous driving ----
    def tick_timers(self):
        """One 60 Hz tick: timers down by one, buzzer update, refresh signal."""
        with self._lock:
            active = timers.tick(self.machine)
            self._set_sound(active)
        if self.on_refresh is not None:
            self.on_refresh()

    def run_cycles(self, count):
        """Execute up to count instructions. Returns how many ran.

        Stops early on a key wait, a stop request or a fault. A fault is logged,
        stored in self.fault, reported to on_fault and ends the current run.
        """
        executed = 0
        with self._lock:
            vm = self.machine
            while executed < count and not self._stopping():
                try:
                    ins = cpu.step(vm)
                except Chip8Error as e:
                    self._fault(e)
                    break
                if ins is None:
                    break
                executed += 1
            self.cycles += executed
            # ST can be set by Fx18 between timer ticks
            self._set_sound(vm.st > 0)
        return executed

    def _stopping(self):
        thread = self._thread
        return self._stop_event.is_set() and thread is not None and thread.is_alive()

    def _fault(self, error):
        self.fault = error
        logger.error("Emulation error: %s (state %s)", error, self.machine.dump())
        self._stop_event.set()
        if self.on_fault is not None:
            self.on_fault(error)

    def _set_sound(self, active):
        if active == self.sound_on:
            return
        self.sound_on = active
        logger.debug("Sound %s", "on" if active else "off")
        if self.on_sound is not None:
            self.on_sound(active)
