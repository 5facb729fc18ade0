#!/usr/bin/env python3
"""
Golden trace comparison: CPU registers before each instruction must match
a reference log line for line.

The nestest conformance ROM is compared when nestest.nes and nestest.log
sit next to this file; the short hand-built trace always runs.
"""

import os
import re

import pytest

import headless_run
import utils
from nes import NES

HERE = os.path.dirname(os.path.abspath(__file__))
NESTEST_ROM = os.path.join(HERE, "nestest.nes")
NESTEST_LOG = os.path.join(HERE, "nestest.log")

REGISTERS = re.compile(r"A:([0-9A-F]{2}) X:([0-9A-F]{2}) Y:([0-9A-F]{2}) P:([0-9A-F]{2}) SP:([0-9A-F]{2})")

PROGRAM_TRACE = """\
8000  A9 10     A:00 X:00 Y:00 P:24 SP:FD
8002  85 00     A:10 X:00 Y:00 P:24 SP:FD
8004  A6 00     A:10 X:00 Y:00 P:24 SP:FD
8006  E8        A:10 X:10 Y:00 P:24 SP:FD
8007  86 01     A:10 X:11 Y:00 P:24 SP:FD
8009  00        A:10 X:11 Y:00 P:24 SP:FD
"""


def parse_line(line):
    """(pc, a, x, y, p, sp) from a trace or nestest log line"""
    match = REGISTERS.search(line)
    if match is None:
        raise ValueError(f"Not a trace line: {line!r}")
    return (int(line[0:4], 16),) + tuple(int(value, 16) for value in match.groups())


def compare_trace(nes, expected_lines):
    for number, expected in enumerate(expected_lines, 1):
        actual = nes.cpu.trace_line()
        assert parse_line(actual) == parse_line(expected), (
            f"trace diverged at line {number}\n  expected: {expected}\n  actual:   {actual}"
        )
        result = nes.step()
        assert result.ok, f"unknown opcode ${result.opcode:02X} at line {number}"


def test_program_trace():
    nes = NES()
    nes.load_program(bytes([0xA9, 0x10, 0x85, 0x00, 0xA6, 0x00, 0xE8, 0x86, 0x01, 0x00]))
    nes.cpu.PC = 0x8000
    lines = PROGRAM_TRACE.splitlines()
    compare_trace(nes, lines)


def test_trace_text_matches_exactly():
    nes = NES()
    nes.load_program(bytes([0xA9, 0x10, 0x85, 0x00, 0xA6, 0x00, 0xE8, 0x86, 0x01, 0x00]))
    nes.cpu.PC = 0x8000
    for expected in PROGRAM_TRACE.splitlines():
        assert nes.cpu.trace_line() == expected
        nes.step()


def write_program_rom(tmp_path):
    prg = bytearray(0x4000)
    prg[:10] = bytes([0xA9, 0x10, 0x85, 0x00, 0xA6, 0x00, 0xE8, 0x86, 0x01, 0x00])
    prg[0x3FFC] = 0x00
    prg[0x3FFD] = 0x80
    rom = tmp_path / "program.nes"
    rom.write_bytes(b"NES\x1a\x01\x00" + bytes(10) + bytes(prg))
    return rom


def test_headless_trace_file(tmp_path):
    rom = write_program_rom(tmp_path)
    trace = tmp_path / "trace.log"

    assert headless_run.main([str(rom), "--steps", "6", "--trace", str(trace)]) == 0
    assert trace.read_text() == PROGRAM_TRACE


def test_headless_interrupt_closes_log(tmp_path, monkeypatch):
    rom = write_program_rom(tmp_path)
    log = tmp_path / "debug.log"

    def interrupted(nes, frames, trace_fp=None):
        raise KeyboardInterrupt

    monkeypatch.setattr(headless_run, "run_frames", interrupted)
    assert headless_run.main([str(rom), "--log", str(log)]) == 0
    assert utils.DEBUG_STREAM is None
    assert not utils.DEBUG_MODE
    assert "loaded" in log.read_text()


@pytest.mark.skipif(
    not (os.path.exists(NESTEST_ROM) and os.path.exists(NESTEST_LOG)),
    reason="nestest.nes / nestest.log not present",
)
def test_nestest_golden_trace():
    nes = NES()
    assert nes.load_rom(NESTEST_ROM)
    # Automated mode entry point
    nes.cpu.PC = 0xC000
    with open(NESTEST_LOG) as f:
        lines = [line.rstrip("\n") for line in f if line.strip()]
    compare_trace(nes, lines)
    # Official and unofficial opcode result bytes
    assert nes.memory.read(0x0002) == 0x00
    assert nes.memory.read(0x0003) == 0x00


if __name__ == "__main__":
    test_program_trace()
    print("Trace tests passed")
