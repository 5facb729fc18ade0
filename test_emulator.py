#!/usr/bin/env python3
"""
Test the NES driver: wiring, loaders, CPU/PPU cadence and frame stepping
"""

import pytest

from memory import Cartridge
from nes import NES

SMALL_PROGRAM = bytes([0xA9, 0x10, 0x85, 0x00, 0xA6, 0x00, 0xE8, 0x86, 0x01, 0x00])


def make_ines(prg, chr_data=b"", flags6=0, flags7=0):
    prg_banks = len(prg) // 0x4000
    chr_banks = len(chr_data) // 0x2000
    header = bytes([0x4E, 0x45, 0x53, 0x1A, prg_banks, chr_banks, flags6, flags7]) + bytes(8)
    return header + prg + chr_data


def prg_with_reset(code, size=0x4000, entry=0x8000):
    """PRG bank with code at the start and the reset vector pointing at entry"""
    prg = bytearray(size)
    prg[:len(code)] = code
    prg[size - 4] = entry & 0xFF
    prg[size - 3] = entry >> 8
    return bytes(prg)


def test_basic_functionality():
    """Power-on state and RAM access through the system bus"""
    nes = NES()
    nes.reset()
    assert nes.cpu.S == 0xFD
    assert nes.cpu.get_status_byte() == 0x24

    nes.memory.write(0x0300, 0xA5)
    assert nes.memory.read(0x0300) == 0xA5
    assert nes.memory.read(0x0B00) == 0xA5


def test_small_program_end_to_end():
    nes = NES()
    nes.load_program(SMALL_PROGRAM)
    nes.cpu.PC = 0x8000
    for _ in range(5):
        assert nes.step().ok
    assert nes.cpu.X == 0x11
    assert nes.memory.read(0x0001) == 0x11


def test_ppu_runs_three_dots_per_cpu_cycle():
    nes = NES()
    nes.load_program(SMALL_PROGRAM)
    nes.cpu.PC = 0x8000
    total = 0
    for _ in range(6):
        total += nes.step().cycles
    # 2 + 3 + 3 + 2 + 3 + 7
    assert total == 20
    assert nes.cpu_cycles == 20
    assert nes.ppu_cycles == 60
    assert (nes.ppu.scanline, nes.ppu.cycle) == (0, 60)


def test_unknown_opcode_does_not_stop_driver():
    nes = NES()
    nes.load_program(bytes([0x02, 0xE8]))
    nes.cpu.PC = 0x8000
    result = nes.step()
    assert not result.ok
    assert nes.unknown_opcodes == 1
    assert nes.step().ok
    assert nes.cpu.X == 1


def test_cpu_sees_ppu_registers():
    nes = NES()
    # LDA #$20; STA $2006; LDA #$00; STA $2006; LDA #$3C; STA $2007
    nes.load_program(bytes([0xA9, 0x20, 0x8D, 0x06, 0x20, 0xA9, 0x00, 0x8D, 0x06, 0x20, 0xA9, 0x3C, 0x8D, 0x07, 0x20]))
    nes.cpu.PC = 0x8000
    for _ in range(6):
        nes.step()
    assert nes.ppu.vram.read(0x2000) == 0x3C


def test_load_pattern_tables():
    nes = NES()
    nes.load_pattern_tables(bytes([0x11, 0x22]))
    assert nes.ppu.vram.read(0x0000) == 0x11
    assert nes.ppu.vram.read(0x0001) == 0x22
    with pytest.raises(ValueError):
        nes.load_pattern_tables(bytes(0x2001))


def test_load_program_into_mirrored_ram():
    """Bytes loaded at a RAM mirror are readable at every alias"""
    nes = NES()
    nes.load_program(bytes([0x42, 0x43]), origin=0x0800)
    for addr in (0x0000, 0x0800, 0x1000, 0x1800):
        assert nes.memory.read(addr) == 0x42
        assert nes.memory.read(addr + 1) == 0x43

    # Runs from the mirror it was loaded into
    nes.load_program(bytes([0xA9, 0x5A]), origin=0x1F00)
    nes.cpu.PC = 0x0700
    assert nes.step().ok
    assert nes.cpu.A == 0x5A


def test_load_program_overflow():
    nes = NES()
    with pytest.raises(ValueError):
        nes.load_program(bytes(16), origin=0xFFF8)


def test_load_cartridge_mirrors_16k_prg():
    nes = NES()
    cart = Cartridge.from_bytes(make_ines(prg_with_reset(SMALL_PROGRAM), b"\x7E" * 0x2000, flags6=0x01))
    nes.load_cartridge(cart)
    nes.reset()
    assert nes.cpu.PC == 0x8000
    assert nes.memory.read(0x8000) == 0xA9
    assert nes.memory.read(0xC000) == 0xA9
    assert nes.ppu.vram.read(0x1FFF) == 0x7E
    assert nes.ppu.mirroring == 1


def test_load_cartridge_rejects_other_mappers():
    nes = NES()
    cart = Cartridge.from_bytes(make_ines(prg_with_reset(b""), flags6=0x10))
    with pytest.raises(ValueError):
        nes.load_cartridge(cart)


def test_load_rom(tmp_path):
    rom = tmp_path / "program.nes"
    rom.write_bytes(make_ines(prg_with_reset(SMALL_PROGRAM)))
    nes = NES()
    assert nes.load_rom(str(rom))
    for _ in range(5):
        nes.step()
    assert nes.memory.read(0x0001) == 0x11


def test_load_rom_failure_returns_false(tmp_path):
    nes = NES()
    assert not nes.load_rom(str(tmp_path / "missing.nes"))
    bad = tmp_path / "bad.nes"
    bad.write_bytes(b"not a rom")
    assert not nes.load_rom(str(bad))


def test_step_frame_completes_a_frame():
    nes = NES()
    # Tight loop: JMP $8000
    nes.load_program(bytes([0x4C, 0x00, 0x80]))
    nes.cpu.PC = 0x8000
    frame = nes.step_frame()
    assert nes.ppu.frame == 1
    assert len(frame) == 240
    assert all(len(row) == 256 for row in frame)
    assert frame is nes.get_frame_buffer()


def test_program_waits_for_vblank():
    """A BIT $2002 / BPL loop leaves once vblank starts"""
    nes = NES()
    # 8000: BIT $2002 ; BPL $8000 ; INX ; JMP $8006
    nes.load_program(bytes([0x2C, 0x02, 0x20, 0x10, 0xFB, 0xE8, 0x4C, 0x06, 0x80]))
    nes.cpu.PC = 0x8000
    nes.run_for_cycles(30000)
    assert nes.cpu.X > 0
    assert nes.ppu.scanline >= 241 or nes.ppu.frame >= 1


def test_state_snapshots():
    nes = NES()
    cpu_state = nes.get_cpu_state()
    ppu_state = nes.get_ppu_state()
    assert cpu_state["S"] == 0xFD
    assert cpu_state["P"] == 0x24
    assert ppu_state["scanline"] == 0


if __name__ == "__main__":
    test_basic_functionality()
    test_small_program_end_to_end()
    test_ppu_runs_three_dots_per_cpu_cycle()
    print("Emulator tests passed")
