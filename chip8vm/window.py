# pyglet front end: handles graphics, sound output and keyboard handling
# around a Chip8 and the Scheduler that paces it.

import logging
import random

import pyglet
from pyglet.media import synthesis
from pyglet.window import key

from . import config
from .interpreter import VIDEO_HEIGHT, VIDEO_WIDTH
from .render import framebuffer_to_rgba

log = logging.getLogger(__name__)

# Key mapping - physical keyboard to the CHIP-8 hex keypad
#   1 2 3 4      1 2 3 C
#   Q W E R  ->  4 5 6 D
#   A S D F      7 8 9 E
#   Z X C V      A 0 B F
KEYMAP = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}


class Chip8Window(pyglet.window.Window):

    def __init__(self, machine, scheduler, scale=config.SCALE):
        self.pixel_scale = scale
        self.machine = machine
        self.scheduler = scheduler
        self.sound_playing = False
        super().__init__(
            width=VIDEO_WIDTH * scale,
            height=VIDEO_HEIGHT * scale,
            caption="CHIP-8 Emulator",
            resizable=False,
            vsync=False
        )

        # creating ImageData once, updated in place on every redraw
        self.image = pyglet.image.ImageData(
            self.width,
            self.height,
            'RGBA',
            framebuffer_to_rgba(machine.framebuffer, scale).tobytes()
        )
        self.cps_label = pyglet.text.Label(
            "Cycles/s: 0",
            font_size=12,
            x=5,
            y=self.height - 15,
            anchor_x='left',
            anchor_y='center',
            color=(255, 255, 255, 255)
        )

        self.scheduler.clock.schedule_interval(self._sound_tick, 1.0 / scheduler.timer_hz)

    # ---- Sound ----
    def _play_beep(self):
        freq = config.BEEP_FREQUENCY + random.randint(
            -config.BEEP_PITCH_VARIATION, config.BEEP_PITCH_VARIATION)
        wave = synthesis.Sine(duration=config.BEEP_DURATION, frequency=freq,
                              sample_rate=44100)
        player = pyglet.media.Player()
        player.queue(wave)
        player.play()
        self.sound_playing = True

        def on_eos():
            self.sound_playing = False
            player.delete()

        player.on_eos = on_eos

    def _sound_tick(self, dt):
        if self.machine.sound_active and not self.sound_playing:
            self._play_beep()

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.close()
        elif symbol == key.F1:
            package_log = logging.getLogger("chip8vm")
            debug = package_log.getEffectiveLevel() > logging.DEBUG
            package_log.setLevel(logging.DEBUG if debug else logging.INFO)
            log.info("Debug logging %s", "on" if debug else "off")
        elif symbol in KEYMAP:
            self.machine.press_key(KEYMAP[symbol])

    def on_key_release(self, symbol, modifiers):
        if symbol in KEYMAP:
            self.machine.release_key(KEYMAP[symbol])

    # ---- Drawing ----
    def on_draw(self):
        self.clear()
        if self.machine.should_draw:
            scaled = framebuffer_to_rgba(self.machine.framebuffer, self.pixel_scale)
            self.image.set_data('RGBA', self.width * 4, scaled.tobytes())
            self.machine.should_draw = False
        self.image.blit(0, 0)

        self.cps_label.text = f"Cycles/s: {self.scheduler.cycles_per_second}"
        self.cps_label.draw()

    def on_close(self):
        self.scheduler.stop()
        self.scheduler.clock.unschedule(self._sound_tick)
        super().on_close()
