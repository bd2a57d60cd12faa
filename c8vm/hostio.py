#!/usr/bin/env python3

"""
Host I/O Functionality

Handles loading ROM binaries into a machine.  A ROM must have a recognised
extension, and must fit in RAM above the reserved font area.  Everything is
checked before the machine is reset, so a failed load leaves any previously
loaded program untouched.

Save states are handled separately, in the snapshot module.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import logging
from os import path
from .constants import MEMORY_SIZE, PROGRAM_START, ROM_EXTENSIONS

MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START

logger = logging.getLogger(__name__)


class RomError(Exception):
    pass


class InvalidRomExtension(RomError):
    pass


class RomTooLarge(RomError):
    pass


class RomIoError(RomError):
    pass


class Loader:
    def load_binary(self, filename):
        try:
            with open(filename, "rb") as f:
                return f.read()
        except OSError as err:
            logger.error("Unable to open ROM: %s", filename)
            raise RomIoError("Unable to open ROM {}: {}".format(filename, err)) from err

    def check_rom(self, filename):
        extension = path.splitext(filename)[1].lower()

        if extension not in ROM_EXTENSIONS:
            logger.error("%s isn't a %s file", filename, " or ".join(ROM_EXTENSIONS))
            raise InvalidRomExtension("{} isn't a {} file".format(filename, " or ".join(ROM_EXTENSIONS)))

    def load_game(self, machine, filename):
        self.check_rom(filename)
        data = self.load_binary(filename)

        if len(data) > MAX_ROM_SIZE:
            logger.error("ROM %s is too large to fit in memory (%d bytes)", filename, len(data))
            raise RomTooLarge("ROM {} is too large to fit in memory".format(filename))

        machine.init()
        machine.ram.write_block(PROGRAM_START, data)
        machine.rom_path = filename
        logger.info("Loaded ROM %s (%d bytes)", filename, len(data))
