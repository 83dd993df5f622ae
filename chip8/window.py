# pyglet frontend: owns the window, the keyboard and the pacing, and drives a Chip8 engine.
# We're subclassing pyglet.window.Window (that'll handle graphics and keyboard handling)
# and overriding whatever def we need from there.

import logging

import numpy as np
import pyglet
from pyglet.window import key

from .constants import CPU_HZ, PIXEL_OFF, PIXEL_ON, SCALE
from .errors import Chip8Error

logger = logging.getLogger(__name__)

#map binding keys
# Keypad       Keyboard
# 1 2 3 C      1 2 3 4
# 4 5 6 D      Q W E R
# 7 8 9 E      A S D F
# A 0 B F      Z X C V
KEYMAP = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}

LABEL_COLOR = (255, 0, 0, 255)


class Chip8Window(pyglet.window.Window):

    def __init__(self, engine, scale=SCALE, hz=CPU_HZ, caption="CHIP-8 Emulator"):
        self.engine = engine
        self.pixel_scale = scale
        window_width, window_height = engine.WIDTH * scale, engine.HEIGHT * scale
        super().__init__(width=window_width, height=window_height, caption=caption, resizable=False)

        self.halted = False
        self.error = None

        # palette indexed by pixel value, RGBA
        self._palette = np.array([PIXEL_OFF + (255,), PIXEL_ON + (255,)], dtype=np.uint8)
        self.image = pyglet.image.ImageData(
            window_width,
            window_height,
            'RGBA',
            bytes(window_width * window_height * 4),
        )
        self._refresh_image()

        # Performance tracking counters
        self._fps_counter = 0
        self._last_cycle_count = engine.cycle_count
        self.fps_label = pyglet.text.Label(
            "FPS: 0",
            font_size=12,
            x=5,
            y=window_height - 15,
            anchor_x='left',
            anchor_y='center',
            color=LABEL_COLOR,
        )
        self.cps_label = pyglet.text.Label(
            "Cycles/s: 0",
            font_size=12,
            x=5,
            y=window_height - 30,
            anchor_x='left',
            anchor_y='center',
            color=LABEL_COLOR,
        )

        # Schedule the loops
        pyglet.clock.schedule_interval(self.tick, 1.0 / hz)
        pyglet.clock.schedule_interval(self._update_bench, 1.0)

    # ---- CPU cycle ----
    def tick(self, dt):
        if self.halted:
            return
        try:
            self.engine.step()
        except Chip8Error as e:
            logger.error("Emulation error: %s", e)
            self.error = e
            self.halted = True
            # close() does not dispatch on_close, so stop the loops here
            pyglet.clock.unschedule(self.tick)
            pyglet.clock.unschedule(self._update_bench)
            self.close()

    # FPS / CPS
    def _update_bench(self, dt):
        cycles = self.engine.cycle_count
        self.fps_label.text = f"FPS: {self._fps_counter / dt:.1f}"
        self.cps_label.text = f"Cycles/s: {(cycles - self._last_cycle_count) / dt:.0f}"
        self._fps_counter = 0
        self._last_cycle_count = cycles

    # ---- Drawing ----
    def _refresh_image(self):
        # flip rows: pyglet's origin is bottom-left, the framebuffer's is top-left
        small = self._palette[np.flipud(self.engine.framebuffer)]
        scaled = np.repeat(np.repeat(small, self.pixel_scale, axis=0), self.pixel_scale, axis=1)
        self.image.set_data('RGBA', self.image.width * 4, scaled.tobytes())

    def on_draw(self):
        if self.engine.consume_draw_flag():
            self._refresh_image()

        self.clear()
        self.image.blit(0, 0)
        self.fps_label.draw()
        self.cps_label.draw()
        self._fps_counter += 1

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.close()
            return
        if symbol == key.F1:
            package_logger = logging.getLogger("chip8")
            debug = package_logger.getEffectiveLevel() > logging.DEBUG
            package_logger.setLevel(logging.DEBUG if debug else logging.INFO)
            logger.info("Debug logging %s", "on" if debug else "off")
            return
        if symbol in KEYMAP:
            self.engine.set_key(KEYMAP[symbol], True)

    def on_key_release(self, symbol, modifiers):
        if symbol in KEYMAP:
            self.engine.set_key(KEYMAP[symbol], False)

    def on_close(self):
        pyglet.clock.unschedule(self.tick)
        pyglet.clock.unschedule(self._update_bench)
        super().on_close()
