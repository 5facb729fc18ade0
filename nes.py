"""
Main NES Emulator Class
Wires the CPU and PPU onto the system bus and drives them in lockstep
"""

from config import LOADER, TIMING, TRACE
from cpu import CPU
from memory import Bus, Cartridge
from ppu import PPU
from utils import debug_print


class NES:
    def __init__(self):
        # CPU address space: 2KB RAM mirrored to 0x1FFF, PPU registers to 0x3FFF
        self.memory = Bus(0x10000)
        self.memory.bind_mirror(0x0000, 0x1FFF, 0x0800)
        self.memory.bind_mirror(0x2000, 0x3FFF, 0x0008)

        # Initialize components
        self.ppu = PPU(self.memory)
        self.cpu = CPU(self.memory)
        self.cpu.trace = TRACE["enabled"]
        self.cartridge = None

        # Timing
        self.cpu_cycles = 0
        self.ppu_cycles = 0
        self.ppu_ratio = TIMING["ppu_cycles_per_cpu_cycle"]
        self.unknown_opcodes = 0

    def load_program(self, data, origin=None):
        """Copy a raw program image into CPU memory (default origin 0x8000)"""
        if origin is None:
            origin = LOADER["prg_origin"]
        self.memory.load(origin, data)
        debug_print(f"NES: Loaded {len(data)} program bytes at 0x{origin:04X}")

    def load_pattern_tables(self, data):
        """Copy CHR data into PPU memory at 0x0000"""
        if len(data) > LOADER["pattern_table_size"]:
            raise ValueError(
                f"Pattern data is {len(data)} bytes; at most "
                f"{LOADER['pattern_table_size']} fit in the pattern tables"
            )
        self.ppu.vram.load(0x0000, data)

    def load_cartridge(self, cartridge):
        """Place a mapper 0 cartridge into CPU and PPU memory"""
        if cartridge.mapper != 0:
            raise ValueError(f"Unsupported mapper: {cartridge.mapper}")
        if cartridge.prg_rom_size not in (1, 2):
            raise ValueError(
                f"Mapper 0 expects 16KB or 32KB of PRG ROM, got {cartridge.prg_rom_size * 16}KB"
            )

        self.memory.load(0x8000, cartridge.prg_rom)
        if cartridge.prg_rom_size == 1:
            # 16KB boards repeat the bank at 0xC000
            self.memory.load(0xC000, cartridge.prg_rom)
        if cartridge.chr_rom:
            self.load_pattern_tables(cartridge.chr_rom)
        self.ppu.set_mirroring(cartridge.mirroring)
        self.cartridge = cartridge

    def load_rom(self, rom_path):
        """Load a ROM file and reset into it.
        Returns True on success, False on failure.
        """
        try:
            cart = Cartridge(rom_path)
            self.load_cartridge(cart)
        except (OSError, ValueError) as e:
            debug_print(f"NES: Failed to load ROM '{rom_path}': {e}")
            return False

        self.reset()
        debug_print(f"NES: ROM '{rom_path}' loaded (mapper={cart.mapper})")
        return True

    def reset(self):
        """Reset CPU and PPU state (power-on like)."""
        self.cpu.reset()
        self.ppu.reset()
        self.cpu_cycles = 0
        self.ppu_cycles = 0
        debug_print(f"NES: Reset complete, PC=0x{self.cpu.PC:04X}")

    def step(self):
        """Execute one CPU instruction, then three PPU dots per CPU cycle"""
        result = self.cpu.step()
        if not result.ok:
            self.unknown_opcodes += 1
        self.cpu_cycles += result.cycles

        dots = result.cycles * self.ppu_ratio
        for _ in range(dots):
            self.ppu.step()
        self.ppu_cycles += dots
        return result

    def step_frame(self):
        """Run until the PPU finishes a frame and return the frame buffer"""
        self.ppu.frame_complete = False
        for _ in range(TIMING["max_steps_per_frame"]):
            self.step()
            if self.ppu.frame_complete:
                break
        return self.get_frame_buffer()

    def run_for_cycles(self, cycles):
        """Run emulator for specified number of CPU cycles"""
        target = self.cpu_cycles + cycles
        while self.cpu_cycles < target:
            self.step()

    def get_frame_buffer(self):
        """240 rows of 256 palette indices"""
        return self.ppu.frame_buffer

    def get_cpu_state(self):
        """Get CPU state for debugging"""
        return {
            "A": self.cpu.A,
            "X": self.cpu.X,
            "Y": self.cpu.Y,
            "PC": self.cpu.PC,
            "S": self.cpu.S,
            "P": self.cpu.P,
            "cycles": self.cpu_cycles,
        }

    def get_ppu_state(self):
        """Get PPU state for debugging"""
        return {
            "ctrl": self.ppu.ctrl,
            "mask": self.ppu.mask,
            "status": self.ppu.status,
            "scanline": self.ppu.scanline,
            "cycle": self.ppu.cycle,
            "frame": self.ppu.frame,
            "v": self.ppu.v,
            "w": self.ppu.w,
        }
