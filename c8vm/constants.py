#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

# App identification
APP_NAME = "c8vm CHIP-8 Emulator"
APP_VERSION = "1.0.0"
APP_COPYRIGHT = "Copyright (C) 2022 Gregory Maynard-Hoare, licensed under GNU Affero General Public License v3.0"
APP_INTRO = "{} V{} -- ".format(APP_NAME, APP_VERSION)

# Memory layout
MEMORY_SIZE = 0x10000
ADDRESS_MASK = MEMORY_SIZE - 1
PROGRAM_START = 0x200
FONT_SMALL_LOC = 0
FONT_BIG_LOC = 80

# The host refreshes at ~60Hz, and CHIP-8 ran at roughly 500-600Hz
CYCLES_PER_TICK = 9
HOST_FRAME_RATE = 60.0

# ROM files
ROM_EXTENSIONS = (".c8", ".ch8")

# Save states
STATE_EXTENSION = ".c8state"
DEFAULT_STATE_DIR = "SaveStates"

# Display colours, packed as 0xAARRGGBB
DEFAULT_DRAWN_COLOUR = 0xFFDDDDDD
DEFAULT_UNDRAWN_COLOUR = 0xFF222222

# Default mappings for keys 0-F, later populated into a dictionary.  Note that the keyscans (on a UK QWERTY keyboard)
# and ASCII characters for these are the same code
DEFAULT_KEYMAP = "120,49,50,51,113,119,101,97,115,100,122,99,52,114,102,118"

# CPU quirks, toggled from the command line as --<name>_quirks
CPU_QUIRKS = ["shift", "jump", "index_increment", "index_overflow"]
