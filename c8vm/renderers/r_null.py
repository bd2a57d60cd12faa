#!/usr/bin/env python3

"""
Null Renderer Plugin

This serves as a base class for other rendering plugins.

This module can be used on its own as a Renderer plugin if you only want to see
debug output, or to run the emulator headless.  The last image received is kept,
so it can be inspected.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class RendererError(Exception):
    pass


class Renderer:
    def __init__(self, scale=None, **kwargs):  # pylint: disable=unused-argument
        self.scale = 1 if scale is None else scale
        self.image = None
        self.set_resolution(0, 0)

    def set_resolution(self, width, height):
        self.width = width
        self.height = height

    def draw_image(self, image):
        # Image is a list of packed 0xAARRGGBB colours, one per pixel, row by row
        if len(image) != self.width * self.height:
            raise RendererError("Image does not match the renderer resolution")

        self.image = image

    def refresh_display(self):
        pass

    def set_title(self, title):
        pass

    def shutdown(self):
        pass
