"""Tests for pacing the interpreter on a pyglet clock."""

import pyglet
import pytest

from chip8vm import Chip8, StackUnderflowError
from chip8vm.scheduler import Scheduler


class FakeTime:

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def clock(fake_time):
    return pyglet.clock.Clock(time_function=fake_time)


def make_machine(rom):
    machine = Chip8()
    machine.load_rom(rom)
    return machine


class TestScheduler:

    def test_steps_cpu_and_timers(self, clock, fake_time):
        machine = make_machine(b"\x00\xE0" * 8)
        machine.delay_timer = 5
        machine.sound_timer = 5
        scheduler = Scheduler(machine, cpu_hz=500, timer_hz=60, clock=clock)
        scheduler.start()

        fake_time.now = 0.02
        clock.tick()

        assert machine.pc > 0x200
        assert machine.delay_timer == 4
        assert machine.sound_timer == 4
        assert scheduler.cycle_count >= 1

    def test_nothing_runs_before_start(self, clock, fake_time):
        machine = make_machine(b"\x00\xE0" * 8)
        Scheduler(machine, clock=clock)
        fake_time.now = 0.5
        clock.tick()
        assert machine.pc == 0x200

    def test_stop_unschedules(self, clock, fake_time):
        machine = make_machine(b"\x00\xE0" * 8)
        scheduler = Scheduler(machine, clock=clock)
        scheduler.start()
        scheduler.stop()
        assert not scheduler.running
        fake_time.now = 0.5
        clock.tick()
        assert machine.pc == 0x200

    def test_error_halts(self, clock, fake_time):
        machine = make_machine(b"\x00\xEE")
        halted = []
        scheduler = Scheduler(machine, clock=clock, on_halt=halted.append)
        scheduler.start()

        fake_time.now = 0.02
        clock.tick()

        assert isinstance(scheduler.error, StackUnderflowError)
        assert halted == [scheduler.error]
        assert not scheduler.running
        assert machine.pc == 0x200

    @pytest.mark.parametrize("cpu_hz,timer_hz", [(0, 60), (500, 0), (-1, 60)])
    def test_rejects_non_positive_rates(self, clock, cpu_hz, timer_hz):
        with pytest.raises(ValueError):
            Scheduler(Chip8(), cpu_hz=cpu_hz, timer_hz=timer_hz, clock=clock)

    def test_cycles_per_second(self, clock, fake_time):
        machine = make_machine(b"\x12\x00")
        scheduler = Scheduler(machine, clock=clock)
        scheduler.cycle_count = 42
        scheduler._update_cps(1.0)
        assert scheduler.cycles_per_second == 42
        assert scheduler.cycle_count == 0
