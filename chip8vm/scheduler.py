import logging

import pyglet

from .config import CPU_HZ, TIMER_HZ
from .errors import Chip8Error

log = logging.getLogger(__name__)


class Scheduler:
    """Runs a Chip8 at fixed instruction and timer rates on a pyglet clock.

    Both rates are independent. A Chip8Error from a step halts the
    scheduler; the error is kept on ``error`` and handed to ``on_halt``.
    """

    def __init__(self, machine, cpu_hz=CPU_HZ, timer_hz=TIMER_HZ,
                 clock=None, on_halt=None):
        if cpu_hz <= 0 or timer_hz <= 0:
            raise ValueError("cpu_hz and timer_hz must be positive, got %r and %r"
                             % (cpu_hz, timer_hz))
        self.machine = machine
        self.cpu_hz = cpu_hz
        self.timer_hz = timer_hz
        self.clock = clock if clock is not None else pyglet.clock.get_default()
        self.on_halt = on_halt
        self.running = False
        self.error = None

        # Performance counters
        self.cycle_count = 0
        self.cycles_per_second = 0

    def start(self):
        if self.running:
            return
        self.clock.schedule_interval(self._cpu_tick, 1.0 / self.cpu_hz)
        self.clock.schedule_interval(self._timer_tick, 1.0 / self.timer_hz)
        self.clock.schedule_interval(self._update_cps, 1.0)
        self.running = True
        log.info("Running at %d instructions/s, timers at %d Hz",
                 self.cpu_hz, self.timer_hz)

    def stop(self):
        if not self.running:
            return
        self.clock.unschedule(self._cpu_tick)
        self.clock.unschedule(self._timer_tick)
        self.clock.unschedule(self._update_cps)
        self.running = False

    # ---- CPU cycle ----
    def _cpu_tick(self, dt):
        try:
            self.machine.advance_instruction()
        except Chip8Error as e:
            log.error("Emulation error: %s", e)
            self.error = e
            self.stop()
            if self.on_halt is not None:
                self.on_halt(e)
            return
        self.cycle_count += 1

    # ---- timers ----
    def _timer_tick(self, dt):
        self.machine.advance_timers()

    def _update_cps(self, dt):
        self.cycles_per_second = self.cycle_count
        self.cycle_count = 0
