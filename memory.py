"""
NES Memory Bus
Flat byte-addressable memory with address mirroring and I/O callbacks,
plus the iNES cartridge image reader that feeds it
"""

from utils import debug_print


class Bus:
    """Byte-addressable memory region shared by the CPU and its devices.

    Every address resolves through a mirror table to exactly one canonical
    backing cell. Devices hook canonical addresses with read/write callbacks:
    a read callback replaces the backing cell's value, a write callback runs
    after the value has been stored in the backing cell.
    """

    def __init__(self, size=0x10000):
        self.size = size
        self.mask = size - 1
        self.ram = bytearray(size)
        self.mirrors = list(range(size))
        self.read_callbacks = {}
        self.write_callbacks = {}

    def read(self, addr):
        """Read a byte, giving a bound read callback precedence"""
        addr = self.mirrors[addr & self.mask]
        callback = self.read_callbacks.get(addr)
        if callback is not None:
            return callback() & 0xFF
        return self.ram[addr]

    def write(self, addr, value):
        """Store a byte, then notify the write callback bound at that cell"""
        addr = self.mirrors[addr & self.mask]
        value &= 0xFF
        self.ram[addr] = value
        callback = self.write_callbacks.get(addr)
        if callback is not None:
            callback(value)

    def peek(self, addr):
        """Read the backing cell without triggering any callback"""
        return self.ram[self.mirrors[addr & self.mask]]

    def canonical(self, addr):
        return self.mirrors[addr & self.mask]

    def bind_mirror(self, start, end, period, base=None):
        """Fold [start, end] onto a window of `period` bytes.

        The window begins at `base` (default: `start`). Targets resolve through
        the current mirror table, so aliases bound earlier are kept.
        """
        if base is None:
            base = start
        for addr in range(start, end + 1):
            self.mirrors[addr] = self.mirrors[base + (addr - start) % period]

    def clear_mirror(self, start, end):
        """Restore identity mapping for [start, end]"""
        for addr in range(start, end + 1):
            self.mirrors[addr] = addr

    def bind_read_callback(self, addr, callback):
        self.read_callbacks[self.canonical(addr)] = callback

    def bind_write_callback(self, addr, callback):
        self.write_callbacks[self.canonical(addr)] = callback

    def load(self, start, data):
        """Deposit raw bytes starting at `start`.

        Each byte lands in the canonical cell of its address, so a block loaded
        into a mirrored range is visible at every alias. Callbacks do not run.
        Raises ValueError when the block does not fit inside the address space.
        """
        if start < 0 or start + len(data) > self.size:
            raise ValueError(
                f"Cannot load {len(data)} bytes at 0x{start:04X}: "
                f"bus is only 0x{self.size:X} bytes"
            )
        for offset, value in enumerate(bytes(data)):
            self.ram[self.mirrors[start + offset]] = value


class Cartridge:
    """iNES cartridge image (header, PRG ROM, CHR ROM)"""

    HEADER_SIZE = 16
    TRAINER_SIZE = 512
    PRG_BANK_SIZE = 0x4000
    CHR_BANK_SIZE = 0x2000

    def __init__(self, rom_path=None, data=None):
        self.rom_path = rom_path
        self.prg_rom = b""  # Program ROM
        self.chr_rom = b""  # Character ROM (empty when the board uses CHR RAM)

        # Header info
        self.prg_rom_size = 0  # Size in 16KB units
        self.chr_rom_size = 0  # Size in 8KB units
        self.mapper = 0
        self.mirroring = 0  # 0=horizontal, 1=vertical
        self.has_battery = False
        self.has_trainer = False
        self.four_screen = False

        if data is None:
            with open(rom_path, "rb") as f:
                data = f.read()
        self.parse(bytes(data))

    @classmethod
    def from_bytes(cls, data):
        return cls(data=data)

    def parse(self, data):
        """Split an iNES image into its header fields and ROM banks"""
        header = data[:self.HEADER_SIZE]
        if len(header) < self.HEADER_SIZE or header[:4] != b"NES\x1a":
            raise ValueError("Invalid NES ROM file")

        self.prg_rom_size = header[4]
        self.chr_rom_size = header[5]

        flags6 = header[6]
        flags7 = header[7]

        self.mirroring = flags6 & 1
        self.has_battery = bool((flags6 >> 1) & 1)
        self.has_trainer = bool((flags6 >> 2) & 1)
        self.four_screen = bool((flags6 >> 3) & 1)
        self.mapper = (flags6 >> 4) | (flags7 & 0xF0)

        offset = self.HEADER_SIZE
        if self.has_trainer:
            offset += self.TRAINER_SIZE

        prg_size = self.prg_rom_size * self.PRG_BANK_SIZE
        chr_size = self.chr_rom_size * self.CHR_BANK_SIZE
        if len(data) < offset + prg_size + chr_size:
            raise ValueError(
                f"Truncated NES ROM: expected {offset + prg_size + chr_size} bytes, got {len(data)}"
            )

        self.prg_rom = data[offset:offset + prg_size]
        offset += prg_size
        self.chr_rom = data[offset:offset + chr_size]

        debug_print(
            f"Cartridge: PRG ROM {self.prg_rom_size * 16}KB, CHR ROM {self.chr_rom_size * 8}KB, "
            f"mapper {self.mapper}, {'vertical' if self.mirroring else 'horizontal'} mirroring"
        )
