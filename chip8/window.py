# pyglet front end: shows the display, feeds the keypad and plays the buzzer.
# The engine runs on its own thread; this window only reads snapshots of the
# display and flags set by the engine callbacks, on pyglet's main-loop clock.
import random
import sys

import pyglet
from pyglet.media import synthesis
from pyglet.window import key

from .constants import (
    BEEP_DURATION, BEEP_FREQUENCY, CPU_HZ, HEIGHT, SAMPLE_RATE, SCALE, TIMER_HZ, WIDTH,
)
from .disasm import listing
from .engine import Engine
from .errors import ROMLoadError
from .logs import logs_on, set_logs
from .render import to_rgba
from .rom import load_rom

# Key mapping - physical keyboard -> CHIP-8 keypad
#   1 2 3 4      1 2 3 C
#   Q W E R  ->  4 5 6 D
#   A S D F      7 8 9 E
#   Z X C V      A 0 B F
keymap = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}


class Chip8Window(pyglet.window.Window):
    def __init__(self, engine, scale=SCALE, caption="CHIP-8 Emulator"):
        super().__init__(WIDTH * scale, HEIGHT * scale, caption=caption, resizable=False, vsync=False)
        self.engine = engine
        self.scale = scale
        self.base_caption = caption

        self.image = pyglet.image.ImageData(
            self.width, self.height, 'RGBA',
            to_rgba(engine.get_display_snapshot(), scale).tobytes(),
        )
        self.cps_label = pyglet.text.Label(
            "Cycles/s: 0",
            font_size=12,
            x=5,
            y=self.height - 15,
            anchor_x='left',
            anchor_y='center',
            color=(255, 0, 0, 255)
        )
        self._last_cycles = engine.cycles

        self.sound_wanted = False
        self.sound_playing = False
        engine.on_sound = self._on_sound

        pyglet.clock.schedule_interval(self._refresh, 1.0 / TIMER_HZ)
        pyglet.clock.schedule_interval(self._update_cps, 1.0)

    # ---- engine callbacks (engine thread) ----
    def _on_sound(self, active):
        self.sound_wanted = active

    # ---- main loop ----
    def _refresh(self, dt):
        frame = self.engine.machine.display.take_frame()
        if frame is not None:
            self.image.set_data('RGBA', self.width * 4, to_rgba(frame, self.scale).tobytes())

        if self.sound_wanted and not self.sound_playing:
            self._play_beep()

        if self.engine.fault is not None:
            caption = "%s - %s" % (self.base_caption, self.engine.fault)
            if self.caption != caption:
                self.set_caption(caption)

    def _update_cps(self, dt):
        cycles = self.engine.cycles
        self.cps_label.text = "Cycles/s: %d" % ((cycles - self._last_cycles) / dt)
        self._last_cycles = cycles

    def _play_beep(self, pitch_variation=15):
        freq = BEEP_FREQUENCY + random.randint(-pitch_variation, pitch_variation)
        wave = synthesis.Sine(duration=BEEP_DURATION, frequency=freq, sample_rate=SAMPLE_RATE)

        player = pyglet.media.Player()
        player.queue(wave)
        player.play()
        self.sound_playing = True

        def on_eos():
            self.sound_playing = False
            player.delete()

        player.on_eos = on_eos

    # ---- Drawing ----
    def on_draw(self):
        self.clear()
        self.image.blit(0, 0)
        self.cps_label.draw()

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.close()
        elif symbol == key.F1:
            set_logs(not logs_on())
        elif symbol in keymap:
            self.engine.keypad.press(keymap[symbol])

    def on_key_release(self, symbol, modifiers):
        if symbol in keymap:
            self.engine.keypad.release(keymap[symbol])

    def on_deactivate(self):
        # key-up events are lost while unfocused; don't leave keys held
        self.engine.keypad.release_all()

    def on_close(self):
        pyglet.clock.unschedule(self._refresh)
        pyglet.clock.unschedule(self._update_cps)
        self.engine.stop()
        super().on_close()


# ---- Entry point ----
USAGE = "Usage: python -m chip8 [--disasm] <rom-file> [instructions-per-second]"


def print_listing(program):
    for address, opcode, text in listing(program):
        print("%03X: %04X  %s" % (address, opcode, text))


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    disasm = "--disasm" in argv
    if disasm:
        argv.remove("--disasm")
    if not argv or len(argv) > 2:
        print(USAGE)
        return 1

    ips = CPU_HZ
    if len(argv) > 1:
        try:
            ips = int(argv[1])
        except ValueError:
            ips = 0
        if ips <= 0:
            print("Error: instructions-per-second must be a positive integer")
            print(USAGE)
            return 1

    try:
        program = load_rom(argv[0])
    except ROMLoadError as e:
        print("Error:", e)
        return 1

    if disasm:
        print_listing(program)
        return 0

    engine = Engine(ips=ips)
    engine.init(program)
    Chip8Window(engine)
    engine.start()
    try:
        pyglet.app.run()
    finally:
        engine.destroy()
    return 0
