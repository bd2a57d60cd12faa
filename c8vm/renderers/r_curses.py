#!/usr/bin/env python3

"""
Curses Renderer Plugin

Draws the screen in a standard Linux-style TTY Terminal, the Windows Command
Prompt, or PowerShell, using inverted spaces to represent each lit pixel.

Terminals can't show arbitrary colours, so each packed colour is judged by its
brightness: bright colours are drawn inverted, dark colours are left blank.

If the screen mode is changed, Curses will use a different sized pad to draw
the characters.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import curses
import _curses
from .r_null import Renderer as RendererBase


def is_bright(colour):
    red = (colour >> 16) & 0xFF
    green = (colour >> 8) & 0xFF
    blue = colour & 0xFF
    return (red * 299 + green * 587 + blue * 114) // 1000 >= 0x80


class Renderer(RendererBase):
    def __init__(self, scale=None, curses_cursor_mode=0, **kwargs):
        if scale is None:
            scale = 2  # Default horizontal stretch if not supplied, or set to default

        self.pixel_char = " " * scale
        self.pad = None
        self.last_screen_height = -1
        self.last_screen_width = -1
        self.title = None
        self.refresh_needed = False
        self.cursor_mode = curses_cursor_mode
        self.screen = curses.initscr()
        curses.curs_set(self.cursor_mode)
        curses.noecho()
        curses.cbreak()
        super().__init__(scale)

    def set_resolution(self, width, height):
        # We have to allow one extra character, presumably for the cursor, otherwise we can't write the furthest
        # bottom-right pixel.  The top line is kept for the title.
        self.pad = curses.newpad(height + 2, width * self.scale + 1)
        self.last_screen_height = -1  # Force a full redraw
        super().set_resolution(width, height)

        if self.title:
            self.set_title(self.title)

    def draw_image(self, image):
        super().draw_image(image)
        width = self.width
        pixel_char = self.pixel_char

        for location, colour in enumerate(image):
            y, x = divmod(location, width)
            attribute = curses.A_REVERSE if is_bright(colour) else curses.A_NORMAL
            self.pad.addstr(y + 1, x * self.scale, pixel_char, attribute)

        self.refresh_needed = True

    def refresh_display(self):
        if self.pad is None:
            return

        screen_height, screen_width = self.screen.getmaxyx()

        if screen_height != self.last_screen_height or screen_width != self.last_screen_width:
            # Screen resolution changed, redraw everything
            self.screen.clear()

            if hasattr(curses, "resizeterm"):
                # This doesn't work on Windows
                curses.resizeterm(screen_height, screen_width)

            self.screen.refresh()
            self.last_screen_height = screen_height
            self.last_screen_width = screen_width
            self.refresh_needed = True

        if self.refresh_needed:
            self.pad.refresh(0, 0, 0, 0, screen_height - 1, screen_width - 1)
            self.refresh_needed = False

    def set_title(self, title):
        self.title = title  # Kept so it can be redrawn onto a new pad

        if self.pad:
            title_len = len(title)

            if self.width * self.scale > title_len:
                self.pad.addstr(0, 0, title + " " * (self.width * self.scale - title_len), curses.A_REVERSE)
                self.refresh_needed = True

    def shutdown(self):
        curses.nocbreak()
        curses.echo()

        if self.cursor_mode != 1:
            try:
                curses.curs_set(1)
            except _curses.error:
                pass

        curses.endwin()
        super().shutdown()

    # No Superclass for these Curses-specific methods

    def get_curses_screen(self):
        return self.screen
