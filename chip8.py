#!/usr/bin/env python3

__author__ = "Gregory Maynard-Hoare"
__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"
__version__ = "1.0.0"

from argparse import ArgumentParser
from c8vm import main
from c8vm.constants import DEFAULT_KEYMAP, DEFAULT_STATE_DIR, CPU_QUIRKS


def parse_args(argv=None):
    parser = ArgumentParser()
    parser.add_argument("filename", help="ROM to execute (must end in .ch8 or .c8)")
    parser.add_argument(
        "-r", "--renderer", choices=["pygame", "curses", "null"],
        help="set the rendering and input systems (pygame by default if available, otherwise curses)"
    )
    parser.add_argument(
        "-s", "--scale", type=int,
        help="set the window width in PyGame mode (default 512), and scale in Curses mode (default 2)"
    )
    parser.add_argument(
        "-f", "--smoothing", type=int, default=0,
        help="define the number of smoothing filter passes for higher quality rendering (default 0)"
    )
    parser.add_argument(
        "-x", "--speed", type=int,
        help="multiply the number of instructions run per frame (default 1, i.e. 9 instructions per frame)"
    )
    parser.add_argument(
        "-k", "--keymap", default=DEFAULT_KEYMAP,
        help="redefine the 16 keyscan codes (PyGame) or character numbers (Curses).  Separate each decimal with a comma"
    )
    parser.add_argument("--drawn_colour", help="colour of lit pixels in 6 hex digits, e.g. DDDDDD")
    parser.add_argument("--undrawn_colour", help="colour of unlit pixels in 6 hex digits, e.g. 222222")
    parser.add_argument(
        "--state_dir", default=DEFAULT_STATE_DIR,
        help="directory holding save states (default {})".format(DEFAULT_STATE_DIR)
    )
    parser.add_argument(
        "--slot", type=int, default=0,
        help="save state slot used by the save (F5 or '[') and load (F9 or ']') keys"
    )

    for cpu_quirk in CPU_QUIRKS:
        parser.add_argument(
            "--{}_quirks".format(cpu_quirk), type=int, choices=[0, 1], default=0,
            help="disable or enable {} quirks".format(cpu_quirk.replace("_", " "))
        )

    parser.add_argument(
        "-d", "--debug", action="store_true", default=False,
        help="enable live debug output of every instruction.  Slows CPU execution"
    )
    return parser.parse_args(argv)  # Can call sys.exit(2) if args are incorrect


if __name__ == "__main__":
    args = vars(parse_args())
    # It is possible to start the emulator from a GUI by calling this with a dictionary
    main(args)
