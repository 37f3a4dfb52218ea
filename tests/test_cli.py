"""Tests for the command line entry point up to the point a window opens."""

import pytest

from chip8vm import config
from chip8vm.__main__ import load_machine, main, parse_args, read_rom


class TestParseArgs:

    def test_defaults(self):
        args = parse_args(["game.ch8"])
        assert args.rom == "game.ch8"
        assert args.cpu_hz == config.CPU_HZ
        assert args.timer_hz == config.TIMER_HZ
        assert args.scale == config.SCALE
        assert not args.verbose

    @pytest.mark.parametrize("option", ["--cpu-hz", "--timer-hz", "--scale"])
    @pytest.mark.parametrize("value", ["0", "-5", "fast"])
    def test_rejects_non_positive_rates_and_scale(self, option, value, capsys):
        with pytest.raises(SystemExit):
            parse_args(["game.ch8", option, value])
        assert option in capsys.readouterr().err

    def test_overrides(self):
        args = parse_args(["game.ch8", "--cpu-hz", "1000", "--timer-hz", "30",
                           "--scale", "4", "-v"])
        assert (args.cpu_hz, args.timer_hz, args.scale) == (1000, 30, 4)
        assert args.verbose


class TestLoading:

    def test_read_rom(self, tmp_path):
        rom = tmp_path / "pong.ch8"
        rom.write_bytes(b"\x00\xE0\x12\x00")
        assert read_rom(str(rom)) == b"\x00\xE0\x12\x00"

    def test_load_machine(self, tmp_path):
        rom = tmp_path / "pong.ch8"
        rom.write_bytes(b"\x6A\x01")
        machine = load_machine(str(rom))
        assert machine.memory[0x200:0x202] == b"\x6A\x01"
        machine.advance_instruction()
        assert machine.V[0xA] == 1

    def test_missing_rom(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.ch8")]) == 1
        assert "Cannot load" in capsys.readouterr().err

    def test_rom_too_large(self, tmp_path, capsys):
        rom = tmp_path / "huge.ch8"
        rom.write_bytes(bytes(4096))
        assert main([str(rom)]) == 1
        assert "only 3584 fit" in capsys.readouterr().err
