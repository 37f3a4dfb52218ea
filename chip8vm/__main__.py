# ---- Entry point ----
import argparse
import logging
import sys

from . import config
from .errors import RomTooLargeError
from .interpreter import Chip8

log = logging.getLogger("chip8vm")


def read_rom(path):
    """The whole file is the program: no header, loaded verbatim."""
    with open(path, "rb") as f:
        return f.read()


def positive_int(text):
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer, got %s" % text)
    return value


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="chip8vm", description="CHIP-8 Emulator")
    parser.add_argument("rom", help="ROM file to run")
    parser.add_argument("--cpu-hz", type=positive_int, default=config.CPU_HZ,
                        help="Instructions per second (default %(default)s)")
    parser.add_argument("--timer-hz", type=positive_int, default=config.TIMER_HZ,
                        help="Delay/sound timer rate (default %(default)s)")
    parser.add_argument("--scale", type=positive_int, default=config.SCALE,
                        help="Window pixels per CHIP-8 pixel (default %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log every executed instruction")
    return parser.parse_args(argv)


def load_machine(path):
    machine = Chip8()
    machine.load_rom(read_rom(path))
    return machine


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(name)s: %(message)s"
    )

    log.info("Loading ROM: %s", args.rom)
    try:
        machine = load_machine(args.rom)
    except (OSError, RomTooLargeError) as e:
        print(f"Cannot load {args.rom}: {e}", file=sys.stderr)
        return 1

    # pyglet only needs a display from here on
    import pyglet
    from .scheduler import Scheduler
    from .window import Chip8Window

    scheduler = Scheduler(machine, cpu_hz=args.cpu_hz, timer_hz=args.timer_hz)
    window = Chip8Window(machine, scheduler, scale=args.scale)
    scheduler.on_halt = lambda error: window.close()
    scheduler.start()
    pyglet.app.run()
    return 1 if scheduler.error is not None else 0


if __name__ == "__main__":
    sys.exit(main())
