#!/usr/bin/env python3

"""
Machine State

Holds everything the CPU mutates: RAM, the V and RPL registers, the index
register, program counter, stack, timers, keys and the framebuffer.  Calling
init() puts all of that back into its power-on state, with the system fonts
reinstalled.

Some values are session settings rather than machine state: the quirk flags,
the speed modifier and the display colours.  These are never touched by
init(), a ROM load or a save state.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_SMALL_LOC, FONT_BIG_LOC, DEFAULT_DRAWN_COLOUR, DEFAULT_UNDRAWN_COLOUR
)
from .fonts import SMALL_FONT, BIG_FONT
from .framebuffer import Framebuffer, GraphicsMode
from .ram import RAM
from .stack import Stack

NUM_REGISTERS = 16
NUM_RPL_FLAGS = 8
NUM_KEYS = 16


class MachineError(Exception):
    pass


class Quirks:
    """
    Quirks
    ------

    - Shift quirks          : 8xy6/8xyE shift Vy (copied into Vx) rather than Vx.
    - Jump quirks           : Bnnn jumps to nnn + Vx rather than nnn + V0.
    - Index increment quirks: Fx55/Fx65 leave I pointing after the last register copied.
    - Index overflow quirks : Fx1E sets Vf when I passes the top of memory (Amiga behaviour).
    """

    def __init__(self, shift_quirks=False, jump_quirks=False, index_increment_quirks=False,
                 index_overflow_quirks=False):
        self.shift_quirks = shift_quirks
        self.jump_quirks = jump_quirks
        self.index_increment_quirks = index_increment_quirks
        self.index_overflow_quirks = index_overflow_quirks

    def __repr__(self):
        return "Quirks(shift={}, jump={}, index_increment={}, index_overflow={})".format(
            self.shift_quirks, self.jump_quirks, self.index_increment_quirks, self.index_overflow_quirks
        )


class Machine:
    def __init__(self, quirks=None, speed_modifier=1, drawn_colour=DEFAULT_DRAWN_COLOUR,
                 undrawn_colour=DEFAULT_UNDRAWN_COLOUR):
        # Session settings, outside of the reset scope
        self.quirks = Quirks() if quirks is None else quirks
        self.speed_modifier = speed_modifier
        self.drawn_colour = drawn_colour
        self.undrawn_colour = undrawn_colour

        self.ram = RAM()
        self.ram.resize(MEMORY_SIZE)
        self.stack = Stack()
        self.framebuffer = Framebuffer()
        self.rom_path = None
        self.init()

    def init(self):
        # Full reset, as happens when loading a ROM, or when a program exits
        self.ram.clear()
        self.ram.write_block(FONT_SMALL_LOC, SMALL_FONT)
        self.ram.write_block(FONT_BIG_LOC, BIG_FONT)

        self.v = memoryview(bytearray(NUM_REGISTERS))
        self.rpl = memoryview(bytearray(NUM_RPL_FLAGS))
        self.stack.reset()
        self.keys = [False] * NUM_KEYS

        # Drop back to low resolution, and make sure the screen is blank either way
        self.framebuffer.set_mode(GraphicsMode.LOW)
        self.framebuffer.clear()

        self.opcode = 0
        self.i = 0
        self.pc = PROGRAM_START
        self.dt = 0  # Delay timer
        self.ds = 0  # Sound timer
        self.redraw = True

    # Session settings

    @property
    def speed_modifier(self):
        return self._speed_modifier

    @speed_modifier.setter
    def speed_modifier(self, value):
        if not isinstance(value, int) or value < 1:
            raise MachineError("Speed modifier must be a whole number of at least 1")

        self._speed_modifier = value

    @property
    def drawn_colour(self):
        return self._drawn_colour

    @drawn_colour.setter
    def drawn_colour(self, value):
        self._drawn_colour = self._check_colour(value)

    @property
    def undrawn_colour(self):
        return self._undrawn_colour

    @undrawn_colour.setter
    def undrawn_colour(self, value):
        self._undrawn_colour = self._check_colour(value)

    @staticmethod
    def _check_colour(value):
        if not 0 <= value <= 0xFFFFFFFF:
            raise MachineError("Colours must be packed 32-bit values")

        return value

    # Read-only views for inspection tools

    @property
    def sp(self):
        return self.stack.sp

    @property
    def graphics_mode(self):
        return self.framebuffer.mode

    @property
    def screen_width(self):
        return self.framebuffer.vid_width

    @property
    def screen_height(self):
        return self.framebuffer.vid_height

    def is_loaded(self):
        return bool(self.rom_path)

    def get_memory(self):
        return self.ram.mem.toreadonly()

    def get_vram(self):
        return self.framebuffer.vram.mem.toreadonly()

    def get_registers(self):
        return self.v.toreadonly()

    def get_stack(self):
        return tuple(self.stack.items)

    def get_vram_image(self):
        return self.framebuffer.get_image(self.drawn_colour, self.undrawn_colour)
