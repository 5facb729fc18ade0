"""
NES 6502 CPU Emulator
Implements the MOS Technology 6502 instruction set used by the NES
One whole instruction per step(); all memory traffic goes through the bus
"""

from collections import namedtuple

from utils import debug_print, signed_byte

StepResult = namedtuple("StepResult", ["ok", "opcode", "cycles"])

STACK_BASE = 0x0100
RESET_VECTOR = 0xFFFC
IRQ_VECTOR = 0xFFFE
UNKNOWN_OPCODE_CYCLES = 2

# Instructions that take an extra cycle when indexing crosses a page
PAGE_PENALTY_INSTRUCTIONS = frozenset(
    ["ADC", "AND", "CMP", "EOR", "LDA", "LDX", "LDY", "ORA", "SBC", "LAX", "SKW"]
)


class CPU:
    def __init__(self, memory):
        self.memory = memory

        # Registers
        self.A = 0  # Accumulator
        self.X = 0  # X Register
        self.Y = 0  # Y Register
        self.PC = 0  # Program Counter
        self.S = 0xFD  # Stack Pointer

        # Status flags (P register)
        self.C = 0  # Carry flag
        self.Z = 0  # Zero flag
        self.I = 1  # Interrupt disable
        self.D = 0  # Decimal mode (stored, never used for arithmetic)
        self.B = 0  # Break flag
        self.V = 0  # Overflow flag
        self.N = 0  # Negative flag

        self.total_cycles = 0
        self.trace = False

        # opcode: (mnemonic, addressing mode, length, base cycles)
        self.instructions = {
            # Load/Store
            0xA9: ("LDA", "immediate", 2, 2),
            0xA5: ("LDA", "zero_page", 2, 3),
            0xB5: ("LDA", "zero_page_x", 2, 4),
            0xAD: ("LDA", "absolute", 3, 4),
            0xBD: ("LDA", "absolute_x", 3, 4),
            0xB9: ("LDA", "absolute_y", 3, 4),
            0xA1: ("LDA", "indexed_indirect", 2, 6),
            0xB1: ("LDA", "indirect_indexed", 2, 5),
            0xA2: ("LDX", "immediate", 2, 2),
            0xA6: ("LDX", "zero_page", 2, 3),
            0xB6: ("LDX", "zero_page_y", 2, 4),
            0xAE: ("LDX", "absolute", 3, 4),
            0xBE: ("LDX", "absolute_y", 3, 4),
            0xA0: ("LDY", "immediate", 2, 2),
            0xA4: ("LDY", "zero_page", 2, 3),
            0xB4: ("LDY", "zero_page_x", 2, 4),
            0xAC: ("LDY", "absolute", 3, 4),
            0xBC: ("LDY", "absolute_x", 3, 4),
            0x85: ("STA", "zero_page", 2, 3),
            0x95: ("STA", "zero_page_x", 2, 4),
            0x8D: ("STA", "absolute", 3, 4),
            0x9D: ("STA", "absolute_x", 3, 5),
            0x99: ("STA", "absolute_y", 3, 5),
            0x81: ("STA", "indexed_indirect", 2, 6),
            0x91: ("STA", "indirect_indexed", 2, 6),
            0x86: ("STX", "zero_page", 2, 3),
            0x96: ("STX", "zero_page_y", 2, 4),
            0x8E: ("STX", "absolute", 3, 4),
            0x84: ("STY", "zero_page", 2, 3),
            0x94: ("STY", "zero_page_x", 2, 4),
            0x8C: ("STY", "absolute", 3, 4),
            # Register transfers
            0xAA: ("TAX", "implied", 1, 2),
            0xA8: ("TAY", "implied", 1, 2),
            0xBA: ("TSX", "implied", 1, 2),
            0x8A: ("TXA", "implied", 1, 2),
            0x9A: ("TXS", "implied", 1, 2),
            0x98: ("TYA", "implied", 1, 2),
            # Stack
            0x48: ("PHA", "implied", 1, 3),
            0x68: ("PLA", "implied", 1, 4),
            0x08: ("PHP", "implied", 1, 3),
            0x28: ("PLP", "implied", 1, 4),
            # Arithmetic
            0x69: ("ADC", "immediate", 2, 2),
            0x65: ("ADC", "zero_page", 2, 3),
            0x75: ("ADC", "zero_page_x", 2, 4),
            0x6D: ("ADC", "absolute", 3, 4),
            0x7D: ("ADC", "absolute_x", 3, 4),
            0x79: ("ADC", "absolute_y", 3, 4),
            0x61: ("ADC", "indexed_indirect", 2, 6),
            0x71: ("ADC", "indirect_indexed", 2, 5),
            0xE9: ("SBC", "immediate", 2, 2),
            0xE5: ("SBC", "zero_page", 2, 3),
            0xF5: ("SBC", "zero_page_x", 2, 4),
            0xED: ("SBC", "absolute", 3, 4),
            0xFD: ("SBC", "absolute_x", 3, 4),
            0xF9: ("SBC", "absolute_y", 3, 4),
            0xE1: ("SBC", "indexed_indirect", 2, 6),
            0xF1: ("SBC", "indirect_indexed", 2, 5),
            # Logical
            0x29: ("AND", "immediate", 2, 2),
            0x25: ("AND", "zero_page", 2, 3),
            0x35: ("AND", "zero_page_x", 2, 4),
            0x2D: ("AND", "absolute", 3, 4),
            0x3D: ("AND", "absolute_x", 3, 4),
            0x39: ("AND", "absolute_y", 3, 4),
            0x21: ("AND", "indexed_indirect", 2, 6),
            0x31: ("AND", "indirect_indexed", 2, 5),
            0x49: ("EOR", "immediate", 2, 2),
            0x45: ("EOR", "zero_page", 2, 3),
            0x55: ("EOR", "zero_page_x", 2, 4),
            0x4D: ("EOR", "absolute", 3, 4),
            0x5D: ("EOR", "absolute_x", 3, 4),
            0x59: ("EOR", "absolute_y", 3, 4),
            0x41: ("EOR", "indexed_indirect", 2, 6),
            0x51: ("EOR", "indirect_indexed", 2, 5),
            0x09: ("ORA", "immediate", 2, 2),
            0x05: ("ORA", "zero_page", 2, 3),
            0x15: ("ORA", "zero_page_x", 2, 4),
            0x0D: ("ORA", "absolute", 3, 4),
            0x1D: ("ORA", "absolute_x", 3, 4),
            0x19: ("ORA", "absolute_y", 3, 4),
            0x01: ("ORA", "indexed_indirect", 2, 6),
            0x11: ("ORA", "indirect_indexed", 2, 5),
            0x24: ("BIT", "zero_page", 2, 3),
            0x2C: ("BIT", "absolute", 3, 4),
            # Shifts and rotates
            0x0A: ("ASL", "accumulator", 1, 2),
            0x06: ("ASL", "zero_page", 2, 5),
            0x16: ("ASL", "zero_page_x", 2, 6),
            0x0E: ("ASL", "absolute", 3, 6),
            0x1E: ("ASL", "absolute_x", 3, 7),
            0x4A: ("LSR", "accumulator", 1, 2),
            0x46: ("LSR", "zero_page", 2, 5),
            0x56: ("LSR", "zero_page_x", 2, 6),
            0x4E: ("LSR", "absolute", 3, 6),
            0x5E: ("LSR", "absolute_x", 3, 7),
            0x2A: ("ROL", "accumulator", 1, 2),
            0x26: ("ROL", "zero_page", 2, 5),
            0x36: ("ROL", "zero_page_x", 2, 6),
            0x2E: ("ROL", "absolute", 3, 6),
            0x3E: ("ROL", "absolute_x", 3, 7),
            0x6A: ("ROR", "accumulator", 1, 2),
            0x66: ("ROR", "zero_page", 2, 5),
            0x76: ("ROR", "zero_page_x", 2, 6),
            0x6E: ("ROR", "absolute", 3, 6),
            0x7E: ("ROR", "absolute_x", 3, 7),
            # Compares
            0xC9: ("CMP", "immediate", 2, 2),
            0xC5: ("CMP", "zero_page", 2, 3),
            0xD5: ("CMP", "zero_page_x", 2, 4),
            0xCD: ("CMP", "absolute", 3, 4),
            0xDD: ("CMP", "absolute_x", 3, 4),
            0xD9: ("CMP", "absolute_y", 3, 4),
            0xC1: ("CMP", "indexed_indirect", 2, 6),
            0xD1: ("CMP", "indirect_indexed", 2, 5),
            0xE0: ("CPX", "immediate", 2, 2),
            0xE4: ("CPX", "zero_page", 2, 3),
            0xEC: ("CPX", "absolute", 3, 4),
            0xC0: ("CPY", "immediate", 2, 2),
            0xC4: ("CPY", "zero_page", 2, 3),
            0xCC: ("CPY", "absolute", 3, 4),
            # Increments and decrements
            0xE6: ("INC", "zero_page", 2, 5),
            0xF6: ("INC", "zero_page_x", 2, 6),
            0xEE: ("INC", "absolute", 3, 6),
            0xFE: ("INC", "absolute_x", 3, 7),
            0xE8: ("INX", "implied", 1, 2),
            0xC8: ("INY", "implied", 1, 2),
            0xC6: ("DEC", "zero_page", 2, 5),
            0xD6: ("DEC", "zero_page_x", 2, 6),
            0xCE: ("DEC", "absolute", 3, 6),
            0xDE: ("DEC", "absolute_x", 3, 7),
            0xCA: ("DEX", "implied", 1, 2),
            0x88: ("DEY", "implied", 1, 2),
            # Jumps and calls
            0x4C: ("JMP", "absolute", 3, 3),
            0x6C: ("JMP", "indirect", 3, 5),
            0x20: ("JSR", "absolute", 3, 6),
            0x60: ("RTS", "implied", 1, 6),
            0x00: ("BRK", "implied", 1, 7),
            0x40: ("RTI", "implied", 1, 6),
            # Branches
            0x10: ("BPL", "relative", 2, 2),
            0x30: ("BMI", "relative", 2, 2),
            0x50: ("BVC", "relative", 2, 2),
            0x70: ("BVS", "relative", 2, 2),
            0x90: ("BCC", "relative", 2, 2),
            0xB0: ("BCS", "relative", 2, 2),
            0xD0: ("BNE", "relative", 2, 2),
            0xF0: ("BEQ", "relative", 2, 2),
            # Flag changes
            0x18: ("CLC", "implied", 1, 2),
            0x38: ("SEC", "implied", 1, 2),
            0x58: ("CLI", "implied", 1, 2),
            0x78: ("SEI", "implied", 1, 2),
            0xB8: ("CLV", "implied", 1, 2),
            0xD8: ("CLD", "implied", 1, 2),
            0xF8: ("SED", "implied", 1, 2),
            # NOPs
            0xEA: ("NOP", "implied", 1, 2),
            0x1A: ("NOP", "implied", 1, 2),
            0x3A: ("NOP", "implied", 1, 2),
            0x5A: ("NOP", "implied", 1, 2),
            0x7A: ("NOP", "implied", 1, 2),
            0xDA: ("NOP", "implied", 1, 2),
            0xFA: ("NOP", "implied", 1, 2),
            # Skip byte: the addressing mode consumes one operand byte
            0x80: ("SKB", "immediate", 2, 2),
            0x82: ("SKB", "immediate", 2, 2),
            0x89: ("SKB", "immediate", 2, 2),
            0xC2: ("SKB", "immediate", 2, 2),
            0xE2: ("SKB", "immediate", 2, 2),
            0x04: ("SKB", "zero_page", 2, 3),
            0x44: ("SKB", "zero_page", 2, 3),
            0x64: ("SKB", "zero_page", 2, 3),
            0x14: ("SKB", "zero_page_x", 2, 4),
            0x34: ("SKB", "zero_page_x", 2, 4),
            0x54: ("SKB", "zero_page_x", 2, 4),
            0x74: ("SKB", "zero_page_x", 2, 4),
            0xD4: ("SKB", "zero_page_x", 2, 4),
            0xF4: ("SKB", "zero_page_x", 2, 4),
            # Skip word: the addressing mode consumes two operand bytes
            0x0C: ("SKW", "absolute", 3, 4),
            0x1C: ("SKW", "absolute_x", 3, 4),
            0x3C: ("SKW", "absolute_x", 3, 4),
            0x5C: ("SKW", "absolute_x", 3, 4),
            0x7C: ("SKW", "absolute_x", 3, 4),
            0xDC: ("SKW", "absolute_x", 3, 4),
            0xFC: ("SKW", "absolute_x", 3, 4),
            # Unofficial combined operations
            0xA7: ("LAX", "zero_page", 2, 3),
            0xB7: ("LAX", "zero_page_y", 2, 4),
            0xAF: ("LAX", "absolute", 3, 4),
            0xBF: ("LAX", "absolute_y", 3, 4),
            0xA3: ("LAX", "indexed_indirect", 2, 6),
            0xB3: ("LAX", "indirect_indexed", 2, 5),
            0x87: ("SAX", "zero_page", 2, 3),
            0x97: ("SAX", "zero_page_y", 2, 4),
            0x8F: ("SAX", "absolute", 3, 4),
            0x83: ("SAX", "indexed_indirect", 2, 6),
            0xEB: ("SBC", "immediate", 2, 2),
            0xC7: ("DCP", "zero_page", 2, 5),
            0xD7: ("DCP", "zero_page_x", 2, 6),
            0xCF: ("DCP", "absolute", 3, 6),
            0xDF: ("DCP", "absolute_x", 3, 7),
            0xDB: ("DCP", "absolute_y", 3, 7),
            0xC3: ("DCP", "indexed_indirect", 2, 8),
            0xD3: ("DCP", "indirect_indexed", 2, 8),
            0xE7: ("ISB", "zero_page", 2, 5),
            0xF7: ("ISB", "zero_page_x", 2, 6),
            0xEF: ("ISB", "absolute", 3, 6),
            0xFF: ("ISB", "absolute_x", 3, 7),
            0xFB: ("ISB", "absolute_y", 3, 7),
            0xE3: ("ISB", "indexed_indirect", 2, 8),
            0xF3: ("ISB", "indirect_indexed", 2, 8),
            0x07: ("SLO", "zero_page", 2, 5),
            0x17: ("SLO", "zero_page_x", 2, 6),
            0x0F: ("SLO", "absolute", 3, 6),
            0x1F: ("SLO", "absolute_x", 3, 7),
            0x1B: ("SLO", "absolute_y", 3, 7),
            0x03: ("SLO", "indexed_indirect", 2, 8),
            0x13: ("SLO", "indirect_indexed", 2, 8),
            0x27: ("RLA", "zero_page", 2, 5),
            0x37: ("RLA", "zero_page_x", 2, 6),
            0x2F: ("RLA", "absolute", 3, 6),
            0x3F: ("RLA", "absolute_x", 3, 7),
            0x3B: ("RLA", "absolute_y", 3, 7),
            0x23: ("RLA", "indexed_indirect", 2, 8),
            0x33: ("RLA", "indirect_indexed", 2, 8),
            0x47: ("SRE", "zero_page", 2, 5),
            0x57: ("SRE", "zero_page_x", 2, 6),
            0x4F: ("SRE", "absolute", 3, 6),
            0x5F: ("SRE", "absolute_x", 3, 7),
            0x5B: ("SRE", "absolute_y", 3, 7),
            0x43: ("SRE", "indexed_indirect", 2, 8),
            0x53: ("SRE", "indirect_indexed", 2, 8),
            0x67: ("RRA", "zero_page", 2, 5),
            0x77: ("RRA", "zero_page_x", 2, 6),
            0x6F: ("RRA", "absolute", 3, 6),
            0x7F: ("RRA", "absolute_x", 3, 7),
            0x7B: ("RRA", "absolute_y", 3, 7),
            0x63: ("RRA", "indexed_indirect", 2, 8),
            0x73: ("RRA", "indirect_indexed", 2, 8),
        }

        # Base cycle count per opcode; unassigned opcodes cost the minimum
        self.cycle_lookup = [UNKNOWN_OPCODE_CYCLES] * 256
        for opcode, (_, _, _, cycles) in self.instructions.items():
            self.cycle_lookup[opcode] = cycles

        self.dispatch = {
            opcode: getattr(self, "execute_" + name.lower())
            for opcode, (name, _, _, _) in self.instructions.items()
        }

        self.reset()

    def reset(self):
        """Reset the CPU to its power-on state"""
        self.A = 0
        self.X = 0
        self.Y = 0
        self.S = 0xFD
        self.C = 0
        self.Z = 0
        self.I = 1
        self.D = 0
        self.B = 0
        self.V = 0
        self.N = 0

        self.PC = self.read_word(RESET_VECTOR)
        self.total_cycles = 0

    def step(self):
        """Execute one complete instruction and report what happened"""
        if self.trace:
            debug_print(self.trace_line())

        pc = self.PC
        opcode = self.memory.read(pc)
        self.PC = (pc + 1) & 0xFFFF

        handler = self.dispatch.get(opcode)
        if handler is None:
            debug_print(f"CPU: Unknown opcode ${opcode:02X} at ${pc:04X}")
            self.total_cycles += UNKNOWN_OPCODE_CYCLES
            return StepResult(False, opcode, UNKNOWN_OPCODE_CYCLES)

        name, mode, _, _ = self.instructions[opcode]
        address, page_crossed = self._resolve_address(mode)

        cycles = self.cycle_lookup[opcode]
        if page_crossed and name in PAGE_PENALTY_INSTRUCTIONS:
            cycles += 1
        cycles += handler(address) or 0

        self.total_cycles += cycles
        return StepResult(True, opcode, cycles)

    def trace_line(self):
        """Describe the next instruction and current registers, nestest style"""
        pc = self.PC
        opcode = self.memory.peek(pc)
        entry = self.instructions.get(opcode)
        length = entry[2] if entry else 1
        raw = " ".join(
            f"{self.memory.peek((pc + i) & 0xFFFF):02X}" for i in range(length)
        )
        return (
            f"{pc:04X}  {raw:<8}  A:{self.A:02X} X:{self.X:02X} Y:{self.Y:02X} "
            f"P:{self.P:02X} SP:{self.S:02X}"
        )

    @property
    def P(self):
        return self.get_status_byte()

    @P.setter
    def P(self, value):
        self.set_status_byte(value)

    def _page_crossed(self, addr1, addr2):
        """Check if two addresses are on different pages"""
        return (addr1 & 0xFF00) != (addr2 & 0xFF00)

    def _fetch_byte(self):
        value = self.memory.read(self.PC)
        self.PC = (self.PC + 1) & 0xFFFF
        return value

    def _fetch_word(self):
        low = self._fetch_byte()
        high = self._fetch_byte()
        return (high << 8) | low

    def _read_zero_page_word(self, pointer):
        """Read a pointer from page zero; the high byte wraps within the page"""
        low = self.memory.read(pointer & 0xFF)
        high = self.memory.read((pointer + 1) & 0xFF)
        return (high << 8) | low

    def _resolve_address(self, addressing_mode):
        """Get the effective address for a mode and whether indexing crossed a page.

        Consumes the operand bytes following the opcode. Implied and
        accumulator modes have no address and return None.
        """
        if addressing_mode == "implied" or addressing_mode == "accumulator":
            return None, False
        elif addressing_mode == "immediate" or addressing_mode == "relative":
            addr = self.PC
            self.PC = (self.PC + 1) & 0xFFFF
            return addr, False
        elif addressing_mode == "zero_page":
            return self._fetch_byte(), False
        elif addressing_mode == "zero_page_x":
            return (self._fetch_byte() + self.X) & 0xFF, False
        elif addressing_mode == "zero_page_y":
            return (self._fetch_byte() + self.Y) & 0xFF, False
        elif addressing_mode == "absolute":
            return self._fetch_word(), False
        elif addressing_mode == "absolute_x":
            base_addr = self._fetch_word()
            addr = (base_addr + self.X) & 0xFFFF
            return addr, self._page_crossed(base_addr, addr)
        elif addressing_mode == "absolute_y":
            base_addr = self._fetch_word()
            addr = (base_addr + self.Y) & 0xFFFF
            return addr, self._page_crossed(base_addr, addr)
        elif addressing_mode == "indirect":
            pointer = self._fetch_word()
            # Hardware bug: the high byte is fetched without carrying into the page
            low = self.memory.read(pointer)
            high = self.memory.read((pointer & 0xFF00) | ((pointer + 1) & 0xFF))
            return (high << 8) | low, False
        elif addressing_mode == "indexed_indirect":
            pointer = (self._fetch_byte() + self.X) & 0xFF
            return self._read_zero_page_word(pointer), False
        elif addressing_mode == "indirect_indexed":
            base_addr = self._read_zero_page_word(self._fetch_byte())
            addr = (base_addr + self.Y) & 0xFFFF
            return addr, self._page_crossed(base_addr, addr)

        raise ValueError(f"Unknown addressing mode: {addressing_mode}")

    def read_word(self, addr):
        low = self.memory.read(addr)
        high = self.memory.read((addr + 1) & 0xFFFF)
        return (high << 8) | low

    def get_status_byte(self):
        """Get the status register as a byte; bit 5 always reads as set"""
        return (
            (self.N << 7)
            | (self.V << 6)
            | (1 << 5)
            | (self.B << 4)
            | (self.D << 3)
            | (self.I << 2)
            | (self.Z << 1)
            | self.C
        )

    def set_status_byte(self, value):
        """Set the status register from a byte"""
        self.N = (value >> 7) & 1
        self.V = (value >> 6) & 1
        self.B = (value >> 4) & 1
        self.D = (value >> 3) & 1
        self.I = (value >> 2) & 1
        self.Z = (value >> 1) & 1
        self.C = value & 1

    def set_zero_negative(self, value):
        """Set zero and negative flags based on value"""
        self.Z = 1 if value == 0 else 0
        self.N = 1 if value & 0x80 else 0

    def push_stack(self, value):
        """Push a byte onto the stack"""
        self.memory.write(STACK_BASE + self.S, value)
        self.S = (self.S - 1) & 0xFF

    def pop_stack(self):
        """Pop a byte from the stack"""
        self.S = (self.S + 1) & 0xFF
        return self.memory.read(STACK_BASE + self.S)

    def push_word(self, value):
        """Push a 16-bit value, high byte first"""
        self.push_stack((value >> 8) & 0xFF)
        self.push_stack(value & 0xFF)

    def pop_word(self):
        low = self.pop_stack()
        high = self.pop_stack()
        return (high << 8) | low

    def _read_operand(self, address):
        return self.A if address is None else self.memory.read(address)

    def _write_result(self, address, value):
        if address is None:
            self.A = value
        else:
            self.memory.write(address, value)

    def _add_with_carry(self, value):
        """Binary add with carry; the only arithmetic path for ADC and SBC"""
        a = self.A
        result = (a + value + self.C) & 0xFF
        j = (value >> 7) & 1
        k = (a >> 7) & 1
        c6 = j ^ k ^ ((result >> 7) & 1)  # carry into bit 7
        c7 = (j & k) | (j & c6) | (k & c6)  # carry out of bit 7
        self.C = c7
        self.V = c6 ^ c7
        self.Z = 1 if result == 0 else 0
        self.N = j ^ k ^ c6
        self.A = result

    def _compare(self, register, value):
        self.C = 1 if register >= value else 0
        self.set_zero_negative((register - value) & 0xFF)

    def _branch(self, condition, address):
        """Take a relative branch; returns the extra cycles it cost"""
        offset = signed_byte(self.memory.read(address))
        if not condition:
            return 0
        target = (self.PC + offset) & 0xFFFF
        extra = 2 if self._page_crossed(self.PC, target) else 1
        self.PC = target
        return extra

    def _shift_left(self, value):
        self.C = (value >> 7) & 1
        result = (value << 1) & 0xFF
        self.set_zero_negative(result)
        return result

    def _shift_right(self, value):
        self.C = value & 1
        result = value >> 1
        self.set_zero_negative(result)
        return result

    def _rotate_left(self, value):
        result = ((value << 1) | self.C) & 0xFF
        self.C = (value >> 7) & 1
        self.set_zero_negative(result)
        return result

    def _rotate_right(self, value):
        result = (value >> 1) | (self.C << 7)
        self.C = value & 1
        self.set_zero_negative(result)
        return result

    # Load/Store
    def execute_lda(self, address):
        self.A = self.memory.read(address)
        self.set_zero_negative(self.A)

    def execute_ldx(self, address):
        self.X = self.memory.read(address)
        self.set_zero_negative(self.X)

    def execute_ldy(self, address):
        self.Y = self.memory.read(address)
        self.set_zero_negative(self.Y)

    def execute_sta(self, address):
        self.memory.write(address, self.A)

    def execute_stx(self, address):
        self.memory.write(address, self.X)

    def execute_sty(self, address):
        self.memory.write(address, self.Y)

    # Register transfers
    def execute_tax(self, address):
        self.X = self.A
        self.set_zero_negative(self.X)

    def execute_tay(self, address):
        self.Y = self.A
        self.set_zero_negative(self.Y)

    def execute_tsx(self, address):
        self.X = self.S
        self.set_zero_negative(self.X)

    def execute_txa(self, address):
        self.A = self.X
        self.set_zero_negative(self.A)

    def execute_txs(self, address):
        self.S = self.X

    def execute_tya(self, address):
        self.A = self.Y
        self.set_zero_negative(self.A)

    # Stack
    def execute_pha(self, address):
        self.push_stack(self.A)

    def execute_pla(self, address):
        self.A = self.pop_stack()
        self.set_zero_negative(self.A)

    def execute_php(self, address):
        self.push_stack(self.get_status_byte() | 0x10)

    def execute_plp(self, address):
        self.set_status_byte(self.pop_stack() & ~0x10)

    # Arithmetic
    def execute_adc(self, address):
        self._add_with_carry(self.memory.read(address))

    def execute_sbc(self, address):
        self._add_with_carry(self.memory.read(address) ^ 0xFF)

    # Logical
    def execute_and(self, address):
        self.A &= self.memory.read(address)
        self.set_zero_negative(self.A)

    def execute_eor(self, address):
        self.A ^= self.memory.read(address)
        self.set_zero_negative(self.A)

    def execute_ora(self, address):
        self.A |= self.memory.read(address)
        self.set_zero_negative(self.A)

    def execute_bit(self, address):
        value = self.memory.read(address)
        self.Z = 1 if (self.A & value) == 0 else 0
        self.V = (value >> 6) & 1
        self.N = (value >> 7) & 1

    # Shifts and rotates
    def execute_asl(self, address):
        self._write_result(address, self._shift_left(self._read_operand(address)))

    def execute_lsr(self, address):
        self._write_result(address, self._shift_right(self._read_operand(address)))

    def execute_rol(self, address):
        self._write_result(address, self._rotate_left(self._read_operand(address)))

    def execute_ror(self, address):
        self._write_result(address, self._rotate_right(self._read_operand(address)))

    # Compares
    def execute_cmp(self, address):
        self._compare(self.A, self.memory.read(address))

    def execute_cpx(self, address):
        self._compare(self.X, self.memory.read(address))

    def execute_cpy(self, address):
        self._compare(self.Y, self.memory.read(address))

    # Increments and decrements
    def execute_inc(self, address):
        value = (self.memory.read(address) + 1) & 0xFF
        self.memory.write(address, value)
        self.set_zero_negative(value)

    def execute_inx(self, address):
        self.X = (self.X + 1) & 0xFF
        self.set_zero_negative(self.X)

    def execute_iny(self, address):
        self.Y = (self.Y + 1) & 0xFF
        self.set_zero_negative(self.Y)

    def execute_dec(self, address):
        value = (self.memory.read(address) - 1) & 0xFF
        self.memory.write(address, value)
        self.set_zero_negative(value)

    def execute_dex(self, address):
        self.X = (self.X - 1) & 0xFF
        self.set_zero_negative(self.X)

    def execute_dey(self, address):
        self.Y = (self.Y - 1) & 0xFF
        self.set_zero_negative(self.Y)

    # Branches
    def execute_bpl(self, address):
        return self._branch(self.N == 0, address)

    def execute_bmi(self, address):
        return self._branch(self.N == 1, address)

    def execute_bvc(self, address):
        return self._branch(self.V == 0, address)

    def execute_bvs(self, address):
        return self._branch(self.V == 1, address)

    def execute_bcc(self, address):
        return self._branch(self.C == 0, address)

    def execute_bcs(self, address):
        return self._branch(self.C == 1, address)

    def execute_bne(self, address):
        return self._branch(self.Z == 0, address)

    def execute_beq(self, address):
        return self._branch(self.Z == 1, address)

    # Jumps and calls
    def execute_jmp(self, address):
        self.PC = address

    def execute_jsr(self, address):
        # Return address is the last byte of the JSR instruction
        self.push_word((self.PC - 1) & 0xFFFF)
        self.PC = address

    def execute_rts(self, address):
        self.PC = (self.pop_word() + 1) & 0xFFFF

    def execute_brk(self, address):
        """Software interrupt through the IRQ/BRK vector"""
        self.push_word(self.PC)
        self.push_stack(self.get_status_byte() | 0x10)
        self.B = 1
        self.I = 1
        self.PC = self.read_word(IRQ_VECTOR)

    def execute_rti(self, address):
        self.set_status_byte(self.pop_stack() & ~0x10)
        self.PC = self.pop_word()

    # Flag changes
    def execute_clc(self, address):
        self.C = 0

    def execute_sec(self, address):
        self.C = 1

    def execute_cli(self, address):
        self.I = 0

    def execute_sei(self, address):
        self.I = 1

    def execute_clv(self, address):
        self.V = 0

    def execute_cld(self, address):
        self.D = 0

    def execute_sed(self, address):
        self.D = 1

    def execute_nop(self, address):
        pass

    def execute_skb(self, address):
        """Skip byte: operand already consumed by the addressing mode"""

    def execute_skw(self, address):
        """Skip word: operand already consumed by the addressing mode"""

    # Unofficial opcode implementations
    def execute_lax(self, address):
        """Load the same value into both A and X"""
        self.A = self.X = self.memory.read(address)
        self.set_zero_negative(self.A)

    def execute_sax(self, address):
        """Store A & X to memory"""
        self.memory.write(address, self.A & self.X)

    def execute_dcp(self, address):
        """Decrement memory then compare with A"""
        value = (self.memory.read(address) - 1) & 0xFF
        self.memory.write(address, value)
        self._compare(self.A, value)

    def execute_isb(self, address):
        """Increment memory then subtract it from A"""
        value = (self.memory.read(address) + 1) & 0xFF
        self.memory.write(address, value)
        self._add_with_carry(value ^ 0xFF)

    def execute_slo(self, address):
        """Shift memory left then OR it into A"""
        value = self._shift_left(self.memory.read(address))
        self.memory.write(address, value)
        self.A |= value
        self.set_zero_negative(self.A)

    def execute_rla(self, address):
        """Rotate memory left then AND it into A"""
        value = self._rotate_left(self.memory.read(address))
        self.memory.write(address, value)
        self.A &= value
        self.set_zero_negative(self.A)

    def execute_sre(self, address):
        """Shift memory right then EOR it into A"""
        value = self._shift_right(self.memory.read(address))
        self.memory.write(address, value)
        self.A ^= value
        self.set_zero_negative(self.A)

    def execute_rra(self, address):
        """Rotate memory right then add it to A"""
        value = self._rotate_right(self.memory.read(address))
        self.memory.write(address, value)
        self._add_with_carry(value)
