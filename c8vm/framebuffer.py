#!/usr/bin/env python3

"""
Framebuffer Emulator

Pixels are written here by the sprite drawing instruction, and are only handed
to the host (as an image of packed colours) when a redraw is pending.  Each
pixel is stored as a single byte, either 0 or 1.

Programs cannot write directly into video RAM.  Instead, sprites are drawn to
the screen using an XOR method.  Collisions (where any pixel was set, but was
unset by an XOR), are reported back to the caller.

Two graphics modes are supported: the CHIP-8 64x32 mode, and the Super-CHIP
128x64 high resolution mode.  Switching between the two reallocates the
buffer, which also clears it.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from enum import IntEnum
from .ram import RAM


class FramebufferError(Exception):
    pass


class GraphicsMode(IntEnum):
    LOW = 0   # 64x32
    HIGH = 1  # 128x64


MODE_SIZES = {
    GraphicsMode.LOW: (64, 32),
    GraphicsMode.HIGH: (128, 64)
}


class Framebuffer:
    def __init__(self, mode=GraphicsMode.LOW):
        self.vram = RAM()
        self.mode = None
        self.vid_width = 0
        self.vid_height = 0
        self.vid_size = 0
        self.set_mode(mode)

    def set_mode(self, mode):
        # Returns True if the mode actually changed (and the buffer was reallocated)
        if mode == self.mode:
            return False

        try:
            vid_width, vid_height = MODE_SIZES[mode]
        except KeyError:
            raise FramebufferError("Unknown graphics mode {}".format(mode)) from None

        self.mode = GraphicsMode(mode)
        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = vid_width * vid_height
        self.vram.resize(self.vid_size)  # A fresh allocation is already zeroed
        return True

    def clear(self):
        self.vram.clear()

    def xor_pixel(self, x, y):
        # Returns flagging any collision, or None if the pixel is off-screen.  Off-screen pixels are clipped, never
        # wrapped around to the opposite edge.
        if x >= self.vid_width or y >= self.vid_height:
            return None

        vram_loc = y * self.vid_width + x
        pixel = self.vram.read(vram_loc)
        self.vram.write(vram_loc, pixel ^ 1)
        return pixel != 0

    def get_pixel(self, x, y):
        return self.vram.read(y * self.vid_width + x)

    def get_vid_size(self):
        return self.vid_width, self.vid_height

    def get_image(self, drawn_colour, undrawn_colour):
        # Convert pixel bits into packed colours for the host renderer
        return [drawn_colour if pixel else undrawn_colour for pixel in self.vram.mem]

    def get_bytes(self):
        return self.vram.get_bytes()

    def restore(self, mode, pixels):
        # Mode must be applied first, since the buffer length depends on it
        self.set_mode(mode)

        if len(pixels) != self.vid_size:
            raise FramebufferError("Framebuffer contents do not match the graphics mode")

        self.vram.write_block(0, pixels)
