#!/usr/bin/env python3

"""
PyGame Renderer Plugin

Draws the machine's screen image onto an SDL window surface via PyGame.  Note
that the surface is allocated at the size which matches the current screen
mode, and then the contents are stretched (in the correct aspect ratio using
'Nearest Neighbour' translation) to fit the window itself.  This means we
don't have to draw the same pixel multiple times.

Images arrive as packed 0xAARRGGBB colours.  The alpha channel is ignored.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .r_null import Renderer as RendererBase
from ..constants import APP_NAME


class Renderer(RendererBase):
    def __init__(self, scale=None, smoothing=0, **kwargs):
        if scale is None:
            scale = 512  # Default window width if not supplied, or set to default

        pygame.display.init()
        self.set_title(APP_NAME)
        self.rgb_buffer = None
        self.rgb_cache = {}
        self.content_changed = False
        self.scaled_size = (scale, scale // 2)
        self.display_surface = pygame.display.set_mode(self.scaled_size)
        self.smoothing = smoothing
        super().__init__(scale)

    def set_resolution(self, width, height):
        # Call superclass method so display size is known on the next refresh
        super().set_resolution(width, height)
        self.rgb_buffer = bytearray(width * height * 3)  # 24-bit
        self.content_changed = True

    def _to_rgb(self, colour):
        # Only a couple of colours are ever used, so keep their byte strings around
        rgb = self.rgb_cache.get(colour)

        if rgb is None:
            rgb = bytes(((colour >> 16) & 0xFF, (colour >> 8) & 0xFF, colour & 0xFF))
            self.rgb_cache[colour] = rgb

        return rgb

    def draw_image(self, image):
        super().draw_image(image)
        self.rgb_buffer[:] = b"".join(map(self._to_rgb, image))
        self.content_changed = True

    def refresh_display(self):
        if self.content_changed and self.width and self.height:
            # Blit the bytearray straight to the surface
            render_surface = pygame.image.frombuffer(self.rgb_buffer, (self.width, self.height), "RGB")

            # Apply Scale2x rendering passes if requested
            for _ in range(self.smoothing):
                render_surface = pygame.transform.scale2x(render_surface)

            scaled_win = pygame.transform.scale(render_surface, self.scaled_size)
            self.display_surface.blit(scaled_win, (0, 0))
            pygame.display.flip()
            self.content_changed = False

    def set_title(self, title):
        pygame.display.set_caption(title)

    def shutdown(self):
        # PyGame currently segfaults if display.quit is called via __del__
        pygame.display.quit()
        super().shutdown()
