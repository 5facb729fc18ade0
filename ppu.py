"""
NES PPU (Picture Processing Unit) Emulator
Cycle-driven background renderer with the CPU-visible register interface
"""

from memory import Bus
from utils import debug_print

HORIZONTAL = 0
VERTICAL = 1


class PPU:
    def __init__(self, memory=None):
        self.memory = memory  # CPU bus the registers are exposed on

        # PPU address space: pattern tables, nametables, palette
        self.vram = Bus(0x4000)
        self.oam = bytearray(0x100)  # Object Attribute Memory (sprites)
        self.secondary_oam = bytearray([0xFF] * 32)
        self.mirroring = HORIZONTAL

        # Output: one palette index (0x00-0x3F) per pixel
        self.frame_buffer = [bytearray(256) for _ in range(240)]

        # PPU timing constants
        self.VISIBLE_SCANLINES = 240
        self.VISIBLE_DOTS = 256
        self.DOTS_PER_SCANLINE = 341
        self.END_DOT = 340
        self.VBLANK_SCANLINE = 241
        self.PRERENDER_SCANLINE = 261

        # PPU control flags
        self.NAMETABLE_X = 1 << 0
        self.NAMETABLE_Y = 1 << 1
        self.INCREMENT_32 = 1 << 2
        self.SPRITE_TABLE = 1 << 3
        self.BG_TABLE = 1 << 4
        self.LONG_SPRITE = 1 << 5
        self.GENERATE_NMI = 1 << 7

        # PPU status flags
        self.SPRITE_OVERFLOW = 1 << 5
        self.SPRITE_0_HIT = 1 << 6
        self.V_BLANK = 1 << 7

        self._bind_vram_mirrors()
        self.reset()

        if memory is not None:
            self.attach(memory)

    def reset(self):
        """Reset registers, counters and the render pipeline"""
        self.ctrl = 0  # $2000 - PPUCTRL
        self.mask = 0  # $2001 - PPUMASK (stored, does not gate output)
        self.status = 0  # $2002 - PPUSTATUS
        self.oam_addr = 0  # $2003 - OAMADDR
        self.scroll_x = 0  # $2005 first write
        self.scroll_y = 0  # $2005 second write
        self.v = 0  # $2006 data port address
        self.w = 0  # Shared $2005/$2006 write toggle

        # Rendering state
        self.scanline = 0
        self.cycle = 0
        self.frame = 0
        self.odd_frame = False
        self.frame_complete = False
        self.nmi_occurred = False
        self.sprite_count = 0

        # Background rendering data - latches for the tile being fetched
        self.nt_byte = 0  # Name table byte
        self.at_byte = 0  # Attribute palette (2 bits)
        self.bg_low_byte = 0  # Background pattern low byte
        self.bg_high_byte = 0  # Background pattern high byte
        self._attr_addr = 0
        self._attr_shift = 0
        self._fine_y = 0

        # Background shift registers, bit 15 is the next pixel out
        self.bg_shift_pattern_low = 0
        self.bg_shift_pattern_high = 0
        self.bg_shift_attrib_low = 0
        self.bg_shift_attrib_high = 0

    def attach(self, memory):
        """Expose the eight registers at 0x2000-0x2007 of a CPU bus"""
        self.memory = memory
        memory.bind_write_callback(0x2000, self.write_ctrl)
        memory.bind_write_callback(0x2001, self.write_mask)
        memory.bind_read_callback(0x2002, self.read_status)
        memory.bind_write_callback(0x2003, self.write_oam_addr)
        memory.bind_read_callback(0x2004, self.read_oam_data)
        memory.bind_write_callback(0x2004, self.write_oam_data)
        memory.bind_write_callback(0x2005, self.write_scroll)
        memory.bind_write_callback(0x2006, self.write_addr)
        memory.bind_read_callback(0x2007, self.read_data)
        memory.bind_write_callback(0x2007, self.write_data)

    def _bind_vram_mirrors(self):
        # Palette backdrop entries of the sprite palettes alias the background ones
        for addr in (0x3F10, 0x3F14, 0x3F18, 0x3F1C):
            self.vram.bind_mirror(addr, addr, 1, base=addr - 0x10)
        self.vram.bind_mirror(0x3F00, 0x3FFF, 0x20)
        self.set_mirroring(self.mirroring)

    def set_mirroring(self, mirroring):
        """Arrange the four logical nametables over two physical ones"""
        self.mirroring = mirroring
        self.vram.clear_mirror(0x2000, 0x3EFF)
        if mirroring == VERTICAL:
            self.vram.bind_mirror(0x2800, 0x2FFF, 0x800, base=0x2000)
        else:
            self.vram.bind_mirror(0x2400, 0x27FF, 0x400, base=0x2000)
            self.vram.bind_mirror(0x2C00, 0x2FFF, 0x400, base=0x2800)
        self.vram.bind_mirror(0x3000, 0x3EFF, 0x1000, base=0x2000)
        debug_print(f"PPU: {'vertical' if mirroring == VERTICAL else 'horizontal'} nametable mirroring")

    # Register interface
    def write_ctrl(self, value):
        self.ctrl = value

    def write_mask(self, value):
        self.mask = value

    def read_status(self):
        """Return status, then clear vblank and the write toggle"""
        result = self.status
        self.status &= ~self.V_BLANK
        self.w = 0
        return result

    def write_oam_addr(self, value):
        self.oam_addr = value

    def read_oam_data(self):
        return self.oam[self.oam_addr]

    def write_oam_data(self, value):
        self.oam[self.oam_addr] = value
        self.oam_addr = (self.oam_addr + 1) & 0xFF

    def write_scroll(self, value):
        if self.w == 0:
            self.scroll_x = value
        else:
            self.scroll_y = value
        self.w ^= 1

    def write_addr(self, value):
        if self.w == 0:
            self.v = ((value & 0x3F) << 8) | (self.v & 0x00FF)
        else:
            self.v = (self.v & 0xFF00) | value
        self.w ^= 1

    def _increment_v(self):
        step = 32 if self.ctrl & self.INCREMENT_32 else 1
        self.v = (self.v + step) & 0x3FFF

    def read_data(self):
        result = self.vram.read(self.v)
        self._increment_v()
        return result

    def write_data(self, value):
        self.vram.write(self.v, value)
        self._increment_v()

    def step(self):
        """Execute one PPU cycle"""
        scanline = self.scanline
        cycle = self.cycle

        if scanline < self.VISIBLE_SCANLINES:
            self._background_cycle(scanline, cycle)
            if 1 <= cycle <= self.VISIBLE_DOTS:
                self.render_pixel(scanline, cycle - 1)
            elif cycle == 257:
                self._evaluate_sprites(scanline + 1)
        elif scanline == self.VBLANK_SCANLINE and cycle == 0:
            self._enter_vblank()
        elif scanline == self.PRERENDER_SCANLINE:
            if cycle == 0:
                self.status &= ~(self.V_BLANK | self.SPRITE_0_HIT | self.SPRITE_OVERFLOW)
            elif cycle >= 321:
                self._background_cycle(scanline, cycle)

        self.cycle += 1
        if self.cycle > self.END_DOT:
            self.cycle = 0
            self.scanline += 1
            if self.scanline > self.PRERENDER_SCANLINE:
                self.scanline = 0
                self.odd_frame = not self.odd_frame
                self.frame += 1
                self.frame_complete = True

    def _enter_vblank(self):
        self.status |= self.V_BLANK
        if self.ctrl & self.GENERATE_NMI:
            # TODO: service the NMI through the $FFFA vector in NES.step
            self.nmi_occurred = True

    def _background_cycle(self, scanline, cycle):
        """Shift, reload and fetch for dots 1-257 and the 321-337 prefetch"""
        if not (1 <= cycle <= 257 or 321 <= cycle <= 337):
            return

        if cycle != 1 and cycle != 321:
            self._shift_background()

        phase = cycle & 7
        if phase == 1:
            self._load_background_shifters()
        if cycle == 257 or cycle == 337:
            return

        if cycle >= 321:
            line = 0 if scanline == self.PRERENDER_SCANLINE else scanline + 1
            column = (cycle - 321) >> 3
        else:
            line = scanline
            column = ((cycle - 1) >> 3) + 2

        if phase == 1:
            self.fetch_nametable(line, column)
        elif phase == 3:
            self.fetch_attribute()
        elif phase == 5:
            self.fetch_pattern(0)
        elif phase == 7:
            self.fetch_pattern(8)

    def fetch_nametable(self, line, column):
        """Latch the tile index for a screen tile column on a screen line"""
        x = ((self.ctrl & self.NAMETABLE_X) << 8) + (self.scroll_x & 0xF8) + column * 8
        y = ((self.ctrl >> 1) & 1) * 240 + self.scroll_y + line
        x &= 0x1FF
        y %= 480

        table = ((y // 240) << 1) | (x >> 8)
        row = y % 240
        coarse_x = (x & 0xFF) >> 3
        coarse_y = row >> 3
        base = 0x2000 + table * 0x400

        self.nt_byte = self.vram.read(base + coarse_y * 32 + coarse_x)
        self._fine_y = row & 7
        self._attr_addr = base + 0x3C0 + (coarse_y >> 2) * 8 + (coarse_x >> 2)
        self._attr_shift = ((coarse_y & 2) << 1) | (coarse_x & 2)

    def fetch_attribute(self):
        self.at_byte = (self.vram.read(self._attr_addr) >> self._attr_shift) & 0x3

    def fetch_pattern(self, plane):
        pattern_addr = self.nt_byte * 16 + self._fine_y + plane
        if self.ctrl & self.BG_TABLE:
            pattern_addr += 0x1000
        if plane:
            self.bg_high_byte = self.vram.read(pattern_addr)
        else:
            self.bg_low_byte = self.vram.read(pattern_addr)

    def _shift_background(self):
        self.bg_shift_pattern_low = (self.bg_shift_pattern_low << 1) & 0xFFFF
        self.bg_shift_pattern_high = (self.bg_shift_pattern_high << 1) & 0xFFFF
        self.bg_shift_attrib_low = (self.bg_shift_attrib_low << 1) & 0xFFFF
        self.bg_shift_attrib_high = (self.bg_shift_attrib_high << 1) & 0xFFFF

    def _load_background_shifters(self):
        """Move the latched tile into the low byte of each shift register"""
        self.bg_shift_pattern_low = (self.bg_shift_pattern_low & 0xFF00) | self.bg_low_byte
        self.bg_shift_pattern_high = (self.bg_shift_pattern_high & 0xFF00) | self.bg_high_byte
        attr_low = 0xFF if self.at_byte & 1 else 0
        attr_high = 0xFF if self.at_byte & 2 else 0
        self.bg_shift_attrib_low = (self.bg_shift_attrib_low & 0xFF00) | attr_low
        self.bg_shift_attrib_high = (self.bg_shift_attrib_high & 0xFF00) | attr_high

    def render_pixel(self, y, x):
        """Compose one background pixel from the shift registers"""
        bit = 0x8000 >> (self.scroll_x & 7)
        pixel = (1 if self.bg_shift_pattern_low & bit else 0) | (
            2 if self.bg_shift_pattern_high & bit else 0
        )
        if pixel == 0:
            color = self.vram.read(0x3F00)
        else:
            palette = (1 if self.bg_shift_attrib_low & bit else 0) | (
                2 if self.bg_shift_attrib_high & bit else 0
            )
            color = self.vram.read(0x3F00 + palette * 4 + pixel)
        self.frame_buffer[y][x] = color & 0x3F

    def _evaluate_sprites(self, target_scanline):
        """Select up to eight sprites for the next line into secondary OAM.

        Only the selection and the overflow flag are modelled; sprites are
        not drawn.
        """
        sprite_height = 16 if self.ctrl & self.LONG_SPRITE else 8
        self.secondary_oam[:] = b"\xff" * 32
        count = 0
        for i in range(64):
            base = i * 4
            start = self.oam[base] + 1
            if not start <= target_scanline < start + sprite_height:
                continue
            if count == 8:
                self.status |= self.SPRITE_OVERFLOW
                break
            self.secondary_oam[count * 4:count * 4 + 4] = self.oam[base:base + 4]
            count += 1
        self.sprite_count = count
