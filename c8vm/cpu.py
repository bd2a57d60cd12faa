#!/usr/bin/env python3

"""
CPU Emulator (CHIP-8 and Super-CHIP)

Like a real computer, this is where most of the processing happens.  Each call
to cycle() fetches one instruction, decodes it, executes it against the
machine state, and then counts the timers down by one.

Timers are deliberately tied to executed cycles rather than to real time, so
the speed at which the host calls the CPU decides how fast they expire.

Unrecognised opcodes are reported and skipped.  They never halt the CPU.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import logging
from random import randint
from .constants import ADDRESS_MASK, FONT_SMALL_LOC, FONT_BIG_LOC
from .framebuffer import GraphicsMode
from .machine import NUM_KEYS, NUM_RPL_FLAGS

CPU_ENDIAN = "big"  # CHIP-8 is big-endian

logger = logging.getLogger(__name__)


class CPU:
    def __init__(self, machine, debugger):
        self.machine = machine
        self.debugger = debugger
        self.live_debug = self.debugger.is_live()
        self.debug_pc = machine.pc

        # Define instruction pointers.
        # n = Nibble
        # kk = Byte
        # nnn = address
        # x/y = register (0-15)
        self.instructions = {
            # Initial lookup for instructions' first nibble
            0x0: self._0nnn,  # Alias for bitmask 0xFFFF
            0x1: self._1nnn,
            0x2: self._2nnn,
            0x3: self._3xkk,
            0x4: self._4xkk,
            0x5: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x6: self._6xkk,
            0x7: self._7xkk,
            0x8: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x9: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0xA: self._Annn,
            0xB: self._Bnnn,
            0xC: self._Cxkk,
            0xD: self._Dxyn,
            0xE: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            0xF: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            # Instructions beginning with nibble 0x0, bitmask 0xFFFF (i.e., exact match)
            0x00E0: self._00E0,
            0x00EE: self._00EE,
            0x00FB: self._00FB,
            0x00FC: self._00FC,
            0x00FD: self._00FD,
            0x00FE: self._00FE,
            0x00FF: self._00FF,
            # Instructions beginning with nibble 0x5/0x8/0x9, bitmask 0xF00F
            0x5000: self._5xy0,
            0x8000: self._8xy0,
            0x8001: self._8xy1,
            0x8002: self._8xy2,
            0x8003: self._8xy3,
            0x8004: self._8xy4,
            0x8005: self._8xy5,
            0x8006: self._8xy6,
            0x8007: self._8xy7,
            0x800E: self._8xyE,
            0x9000: self._9xy0,
            # Instructions beginning with nibble 0xE/0xF, bitmask 0xF0FF
            0xE09E: self._Ex9E,
            0xE0A1: self._ExA1,
            0xF007: self._Fx07,
            0xF00A: self._Fx0A,
            0xF015: self._Fx15,
            0xF018: self._Fx18,
            0xF01E: self._Fx1E,
            0xF029: self._Fx29,
            0xF030: self._Fx30,
            0xF033: self._Fx33,
            0xF055: self._Fx55,
            0xF065: self._Fx65,
            0xF075: self._Fx75,
            0xF085: self._Fx85
        }

        # Not worth having a separate way of accessing these, as there are only 16
        for n in range(0x10):  # Add scroll down functions
            self.instructions[0x00C0 | n] = self._00Cn

    def set_live_debug(self, enabled):
        self.debugger.set_live(enabled)
        self.live_debug = enabled

    def cycle(self):
        machine = self.machine

        # Keep track of the program counter before altering it in any way for debugging purposes
        self.debug_pc = machine.pc
        machine.opcode = self.fetch()
        self.inc_pc()  # Program counter updates after fetch, but before execute
        self.decode_exec()

        if machine.dt > 0:
            machine.dt -= 1

        if machine.ds > 0:
            machine.ds -= 1

            if machine.ds == 0:
                # Sound timer just reached zero.  There is no buzzer, just a notification.
                self.debugger.event("BEEP!")

    def fetch(self):
        ram = self.machine.ram
        pc = self.machine.pc
        return int.from_bytes(
            bytes((ram.read(pc), ram.read((pc + 1) & ADDRESS_MASK))), CPU_ENDIAN, signed=False
        )

    def _call_masked_instruction(self, masked_opcode):
        instruction = self.instructions.get(masked_opcode)

        if instruction is None:
            self._opcode_unsupported()
            return

        instruction()

    def decode_exec(self):
        self._call_masked_instruction((0xF000 & self.machine.opcode) >> 12)

    def inc_pc(self):
        self.machine.pc = (self.machine.pc + 2) & ADDRESS_MASK

    def dec_pc(self):
        # Only used to re-run instructions (e.g. keypress wait).
        self.machine.pc = (self.machine.pc - 2) & ADDRESS_MASK

    # References to Vx, Vy, byte and addr are always in the same opcode position throughout all instructions, so avoid
    # excessive code duplication (ever so slight slowdown).  Don't reference these more than necessary as they are
    # recalculated each time.
    @property
    def vx(self):
        return (self.machine.opcode & 0xF00) >> 8

    @property
    def vy(self):
        return (self.machine.opcode & 0xF0) >> 4

    @property
    def addr(self):
        return self.machine.opcode & 0xFFF

    @property
    def byte(self):
        return self.machine.opcode & 0xFF

    @property
    def nibble(self):
        return self.machine.opcode & 0xF

    def _opcode_unsupported(self):
        message = "Opcode 0x{:04x} at address 0x{:04x} is not supported, skipping".format(
            self.machine.opcode, self.debug_pc
        )

        if self.live_debug:
            self.debugger.output(self.machine, "???", self.debug_pc)

        logger.warning(message)

    def debug(self, instruction):
        self.debugger.output(self.machine, instruction, self.debug_pc)

    def _0nnn(self):
        opcode = self.machine.opcode

        if opcode < 0x10:
            # Opcodes 0x0 - 0xF are used internally for indexing the first nibble, and mean nothing on their own
            self._opcode_unsupported()
            return

        self._call_masked_instruction(opcode)

    def _5nnn_8nnn_9nnn(self):
        self._call_masked_instruction(self.machine.opcode & 0xF00F)

    def _Ennn_Fnnn(self):
        self._call_masked_instruction(self.machine.opcode & 0xF0FF)

    def _00E0(self):  # CLS
        if self.live_debug:
            self.debug("CLS")

        self.machine.framebuffer.clear()
        self.machine.redraw = True

    def _00EE(self):  # RET
        if self.live_debug:
            self.debug("RET")

        self.machine.pc = self.machine.stack.pop()

    def _1nnn(self):  # JP addr
        if self.live_debug:
            self.debug("JP 0x{:03x}".format(self.addr))

        self.machine.pc = self.addr

    def _2nnn(self):  # CALL addr
        if self.live_debug:
            self.debug("CALL 0x{:03x}".format(self.addr))

        self.machine.stack.push(self.machine.pc)
        self.machine.pc = self.addr

    def _post_skip(self):
        self.inc_pc()

    def _3xkk(self):  # SE Vx, byte
        if self.live_debug:
            self.debug("SE V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        if self.machine.v[self.vx] == self.byte:
            self._post_skip()

    def _4xkk(self):  # SNE Vx, byte
        if self.live_debug:
            self.debug("SNE V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        if self.machine.v[self.vx] != self.byte:
            self._post_skip()

    def _5xy0(self):  # SE Vx, Vy
        if self.live_debug:
            self.debug("SE V{:01x}, V{:01x}".format(self.vx, self.vy))

        if self.machine.v[self.vx] == self.machine.v[self.vy]:
            self._post_skip()

    def _6xkk(self):  # LD Vx, byte
        if self.live_debug:
            self.debug("LD V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        self.machine.v[self.vx] = self.byte

    def _7xkk(self):  # ADD Vx, byte
        vx = self.vx
        byte = self.byte

        if self.live_debug:
            self.debug("ADD V{:01x}, 0x{:02x}".format(vx, byte))

        # Vf is untouched, even on overflow
        byte += self.machine.v[vx]
        self.machine.v[vx] = byte & 0xFF

    def _8xy0(self):  # LD Vx, Vy
        if self.live_debug:
            self.debug("LD V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.machine.v[self.vx] = self.machine.v[self.vy]

    def _8xy1(self):  # OR Vx, Vy
        if self.live_debug:
            self.debug("OR V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.machine.v[self.vx] |= self.machine.v[self.vy]

    def _8xy2(self):  # AND Vx, Vy
        if self.live_debug:
            self.debug("AND V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.machine.v[self.vx] &= self.machine.v[self.vy]

    def _8xy3(self):  # XOR Vx, Vy
        if self.live_debug:
            self.debug("XOR V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.machine.v[self.vx] ^= self.machine.v[self.vy]

    def _8xy4(self):  # ADD Vx, Vy
        vx = self.vx
        vy = self.vy
        v = self.machine.v

        if self.live_debug:
            self.debug("ADD V{:01x}, V{:01x}".format(vx, vy))

        val = v[vx] + v[vy]
        v[vx] = val & 0xFF
        v[0xF] = int(val > 0xFF)  # Vf is set when carrying

    def _post_8xy5_8xy7(self, val):  # Post-SUB/SUBN
        self.machine.v[self.vx] = val & 0xFF
        # Vf is set when NOT borrowing, and this should happen AFTER Vx is set, as sometimes VF is specified in the
        # parameters.
        self.machine.v[0xF] = int(val >= 0)

    def _8xy5(self):  # SUB Vx, Vy
        if self.live_debug:
            self.debug("SUB V{:01x}, V{:01x}".format(self.vx, self.vy))

        self._post_8xy5_8xy7(self.machine.v[self.vx] - self.machine.v[self.vy])

    def _debug_8xy6_8xyE(self, direction):
        self.debug(
            "{} V{:01x}, V{:01x}".format(direction, self.vx, self.vy) if self.machine.quirks.shift_quirks else
            "{} V{:01x}".format(direction, self.vx)
        )

    def _shift_source(self):
        # With shift quirks, Vy is copied into Vx before shifting
        v = self.machine.v
        return v[self.vy if self.machine.quirks.shift_quirks else self.vx]

    def _8xy6(self):  # SHR Vx {, Vy}
        if self.live_debug:
            self._debug_8xy6_8xyE("SHR")

        val = self._shift_source()
        self.machine.v[self.vx] = val >> 1
        self.machine.v[0xF] = val & 1

    def _8xy7(self):  # SUBN Vx, Vy
        if self.live_debug:
            self.debug("SUBN V{:01x}, V{:01x}".format(self.vx, self.vy))

        self._post_8xy5_8xy7(self.machine.v[self.vy] - self.machine.v[self.vx])

    def _8xyE(self):  # SHL Vx {, Vy}
        if self.live_debug:
            self._debug_8xy6_8xyE("SHL")

        val = self._shift_source()
        self.machine.v[self.vx] = (val << 1) & 0xFF
        self.machine.v[0xF] = val >> 7

    def _9xy0(self):  # SNE Vx, Vy
        if self.live_debug:
            self.debug("SNE V{:01x}, V{:01x}".format(self.vx, self.vy))

        if self.machine.v[self.vx] != self.machine.v[self.vy]:
            self._post_skip()

    def _Annn(self):  # LD I, addr
        if self.live_debug:
            self.debug("LD I, 0x{:03x}".format(self.addr))

        self.machine.i = self.addr

    def _Bnnn(self):  # JP V0, addr
        # This is a nasty quirk which breaks lots of games if set incorrectly.  With jump quirks, the register is
        # taken from the top nibble of the address.
        vr = self.vx if self.machine.quirks.jump_quirks else 0

        if self.live_debug:
            self.debug("JP V{:01x}, 0x{:03x}".format(vr, self.addr))

        self.machine.pc = (self.machine.v[vr] + self.addr) & ADDRESS_MASK

    def _Cxkk(self):  # RND Vx, byte
        if self.live_debug:
            self.debug("RND V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        # The ANDing here is intentional.  This is not a random number between 0 and 'byte' inclusive.
        self.machine.v[self.vx] = randint(0, 0xFF) & self.byte

    def _Dxyn(self):  # DRW Vx, Vy, nibble
        # Main sprite drawing routine.  If nibble == 0 in high resolution mode, then draw a 16x16 sprite
        machine = self.machine
        height = self.nibble

        if self.live_debug:
            self.debug("DRW V{:01x}, V{:01x}, 0x{:01x}".format(self.vx, self.vy, height))

        if height == 0 and machine.framebuffer.mode == GraphicsMode.HIGH:
            height = 16
            width = 16
        else:
            # A zero height in low resolution simply draws nothing
            width = 8

        # Sprites are clipped at the right and bottom edges, and their start position is not wrapped
        framebuffer = machine.framebuffer
        ram = machine.ram
        vx_pos = machine.v[self.vx]
        vy_pos = machine.v[self.vy]
        big_sprite = width > 8
        top_bit = 0x8000 if big_sprite else 0x80
        collided = False
        i = machine.i

        for y in range(height):
            if big_sprite:
                spr_data = (ram.read((i + y * 2) & ADDRESS_MASK) << 8) | ram.read((i + y * 2 + 1) & ADDRESS_MASK)
            else:
                spr_data = ram.read((i + y) & ADDRESS_MASK)

            scr_y = y + vy_pos

            for x in range(width):
                if spr_data & (top_bit >> x):
                    # Don't stop drawing.  Set the flag, and never unset it for this sprite.
                    if framebuffer.xor_pixel(x + vx_pos, scr_y):
                        collided = True

        machine.v[0xF] = int(collided)
        machine.redraw = True

    def _key_down(self, key):
        # Only the low nibble selects one of the 16 keys
        return self.machine.keys[key & 0xF]

    def _Ex9E(self):  # SKP Vx
        if self.live_debug:
            self.debug("SKP V{:01x}".format(self.vx))

        if self._key_down(self.machine.v[self.vx]):
            self._post_skip()

    def _ExA1(self):  # SKNP Vx
        if self.live_debug:
            self.debug("SKNP V{:01x}".format(self.vx))

        if not self._key_down(self.machine.v[self.vx]):
            self._post_skip()

    def _Fx07(self):  # LD Vx, DT
        if self.live_debug:
            self.debug("LD V{:01x}, DT".format(self.vx))

        self.machine.v[self.vx] = self.machine.dt

    def _Fx0A(self):  # LD Vx, K
        if self.live_debug:
            self.debug("LD V{:01x}, K".format(self.vx))

        # This opcode waits for a keypress, but since the timers still need to expire, and the host still needs
        # control, we'll simply decrement the incremented program counter and run this again on the next cycle.
        keys = self.machine.keys

        for key in range(NUM_KEYS):
            if keys[key]:
                self.machine.v[self.vx] = key
                return

        self.dec_pc()

    def _Fx15(self):  # LD DT, Vx
        if self.live_debug:
            self.debug("LD DT, V{:01x}".format(self.vx))

        self.machine.dt = self.machine.v[self.vx]

    def _Fx18(self):  # LD ST, Vx
        if self.live_debug:
            self.debug("LD ST, V{:01x}".format(self.vx))

        self.machine.ds = self.machine.v[self.vx]

    def _Fx1E(self):  # ADD I, Vx
        if self.live_debug:
            self.debug("ADD I, V{:01x}".format(self.vx))

        val = self.machine.i + self.machine.v[self.vx]
        self.machine.i = val & ADDRESS_MASK

        # Allow for Amiga CHIP-8 emulator behaviour
        if self.machine.quirks.index_overflow_quirks:
            self.machine.v[0xF] = int(val > ADDRESS_MASK)

    def _Fx29(self):  # LD F, Vx
        if self.live_debug:
            self.debug("LD F, V{:01x}".format(self.vx))

        self.machine.i = (FONT_SMALL_LOC + 5 * self.machine.v[self.vx]) & ADDRESS_MASK

    def _Fx30(self):  # LD HF, Vx
        if self.live_debug:
            self.debug("LD HF, V{:01x}".format(self.vx))

        self.machine.i = (FONT_BIG_LOC + 10 * self.machine.v[self.vx]) & ADDRESS_MASK

    def _Fx33(self):  # LD B, Vx
        if self.live_debug:
            self.debug("LD B, V{:01x}".format(self.vx))

        ram = self.machine.ram
        val = self.machine.v[self.vx]
        i = self.machine.i
        ram.write(i, val // 100)                              # Most-significant digit
        ram.write((i + 1) & ADDRESS_MASK, (val // 10) % 10)   # Middle digit
        ram.write((i + 2) & ADDRESS_MASK, val % 10)           # Least-significant digit

    def _post_Fx55_Fx65(self):
        if self.machine.quirks.index_increment_quirks:
            self.machine.i = (self.machine.i + self.vx + 1) & ADDRESS_MASK

    def _Fx55(self):  # LD [I], Vx
        if self.live_debug:
            self.debug("LD [I], V{:01x}".format(self.vx))

        ram = self.machine.ram
        v = self.machine.v
        i = self.machine.i

        for reg in range(self.vx + 1):
            ram.write((i + reg) & ADDRESS_MASK, v[reg])

        self._post_Fx55_Fx65()

    def _Fx65(self):  # LD Vx, [I]
        if self.live_debug:
            self.debug("LD V{:01x}, [I]".format(self.vx))

        ram = self.machine.ram
        v = self.machine.v
        i = self.machine.i

        for reg in range(self.vx + 1):
            v[reg] = ram.read((i + reg) & ADDRESS_MASK)

        self._post_Fx55_Fx65()

    # Instructions for Super-CHIP

    def _00FD(self):  # EXIT
        if self.live_debug:
            self.debug("EXIT")

        # Reset everything and drop the ROM, leaving the driver idle
        self.machine.init()
        self.machine.rom_path = None

    def _00FE(self):  # LOW
        if self.live_debug:
            self.debug("LOW")

        if self.machine.framebuffer.set_mode(GraphicsMode.LOW):
            self.machine.redraw = True

    def _00FF(self):  # HIGH
        if self.live_debug:
            self.debug("HIGH")

        if self.machine.framebuffer.set_mode(GraphicsMode.HIGH):
            self.machine.redraw = True

    def _Fx75(self):  # LD R, Vx
        if self.live_debug:
            self.debug("LD R, V{:01x}".format(self.vx))

        # There are only 8 flag registers, so anything past V7 is not copied.
        # Ensure with +1s that the final register is copied.
        count = min(self.vx + 1, NUM_RPL_FLAGS)
        self.machine.rpl[:count] = self.machine.v[:count]

    def _Fx85(self):  # LD Vx, R
        if self.live_debug:
            self.debug("LD V{:01x}, R".format(self.vx))

        count = min(self.vx + 1, NUM_RPL_FLAGS)
        self.machine.v[:count] = self.machine.rpl[:count]

    # Scrolling is accepted, but has no effect on the display

    def _00FB(self):  # SCR
        if self.live_debug:
            self.debug("SCR")

    def _00FC(self):  # SCL
        if self.live_debug:
            self.debug("SCL")

    def _00Cn(self):  # SCD n
        if self.live_debug:
            self.debug("SCD {:01x}".format(self.nibble))
