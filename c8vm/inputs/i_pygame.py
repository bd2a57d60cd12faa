#!/usr/bin/env python3

"""
PyGame Input Plugin

Unlike the Curses plugin, this scans the keyboard and properly detects key
'press' and 'release' events.  Note that the event queue should not be checked
more often than 60Hz, as constantly checking the queue is time consuming.  Key
states are remembered between checks, so sampling them is cheap.

F5 saves the current state slot and F9 loads it back.  ESC quits.

If the application is quit, then this will control shutting PyGame down too, so
any linked Renderer must be able to handle that.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .i_null import Inputs as InputsBase, COMMAND_SAVE_STATE, COMMAND_LOAD_STATE


class Inputs(InputsBase):
    def __init__(self, keymap, renderer):
        self.key_down = [False] * 0x10

        self.pygame_methods = {
            pygame.QUIT:    self._pygame_quit,
            pygame.KEYDOWN: self._pygame_keydown,
            pygame.KEYUP:   self._pygame_keyup
        }

        self.pygame_commands = {
            pygame.K_F5: COMMAND_SAVE_STATE,
            pygame.K_F9: COMMAND_LOAD_STATE
        }

        super().__init__(keymap, renderer)

    def process_messages(self):
        # Call PyGame method based on fast dictionary lookup of event
        quit_program = False

        for event in pygame.event.get():
            pygame_method = self.pygame_methods.get(event.type)

            if pygame_method and pygame_method(event):  # Check via short circuit that we don't have 'None'
                quit_program = True  # Process more events, even if planning to quit

        return quit_program

    def _pygame_quit(self, _):
        return True

    def _pygame_keydown(self, event):
        hex_key = self.keymap_dict.get(event.key)

        if hex_key is not None:
            self.key_down[hex_key] = True

        return False

    def _pygame_keyup(self, event):
        if event.key == pygame.K_ESCAPE:
            return True

        command = self.pygame_commands.get(event.key)

        if command is not None:
            self.commands.append(command)
            return False

        hex_key = self.keymap_dict.get(event.key)

        if hex_key is not None:
            self.key_down[hex_key] = False

        return False

    def is_key_down(self, key):
        return self.key_down[key]
