#!/usr/bin/env python3

"""
Main Startup Module

Simply call main(args) to start the emulator, replacing args with a dictionary
of options.  This can be done via the Terminal or GUI.

All options must be supplied.  Defaults can be specified with a 'None'.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import logging
from time import perf_counter, sleep
from .constants import (
    APP_INTRO, APP_COPYRIGHT, APP_NAME, CPU_QUIRKS, DEFAULT_DRAWN_COLOUR, DEFAULT_UNDRAWN_COLOUR, DEFAULT_STATE_DIR,
    HOST_FRAME_RATE
)
from .cpu import CPU
from .debugger import Debugger
from .driver import Driver
from .hostio import Loader
from .machine import Machine, Quirks
from .snapshot import Snapshots
from .stack import StackError
from .inputs.i_null import COMMAND_SAVE_STATE, COMMAND_LOAD_STATE

FRAME_INTERVAL = 1.0 / HOST_FRAME_RATE

logger = logging.getLogger(__name__)


class StartupError(Exception):
    pass


def _parse_colour(colour, default):
    if colour is None:
        return default

    if len(colour) != 6:
        raise StartupError("Colours must all be 6 hex digits long.")

    try:
        return 0xFF000000 | int(colour, 16)
    except ValueError:
        raise StartupError("Invalid colour defined.") from None


def _select_plugins(opt_renderer):
    auto_select_renderer = opt_renderer is None  # If necessary, try PyGame first, then Curses.

    # flake8: noqa: F401
    if auto_select_renderer or opt_renderer == "pygame":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import pygame
        except ImportError:
            if auto_select_renderer:
                opt_renderer = "curses"
            else:
                raise StartupError("PyGame does not appear to be installed.")
        else:
            from .inputs.i_pygame import Inputs
            from .renderers.r_pygame import Renderer
            return Inputs, Renderer

    if opt_renderer == "curses":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import curses
        except ImportError:
            if auto_select_renderer:
                raise StartupError("Neither PyGame nor Curses (or Windows-Curses) appear to be installed.")

            raise StartupError("Curses (or Windows-Curses) does not appear to be installed.")
        else:
            from .inputs.i_curses import Inputs
            from .renderers.r_curses import Renderer
            return Inputs, Renderer

    # pylint: disable=import-outside-toplevel
    from .inputs.i_null import Inputs
    from .renderers.r_null import Renderer
    return Inputs, Renderer


def make_frame_sink(machine, renderer):
    # Resize the host display whenever the graphics mode has changed under it
    def frame_sink(image):
        if renderer.width != machine.screen_width or renderer.height != machine.screen_height:
            renderer.set_resolution(machine.screen_width, machine.screen_height)

        renderer.draw_image(image)

    return frame_sink


def run_host(machine, driver, renderer, inputs, snapshots, slot=0):
    # Call the driver at the host frame rate until the user quits or the program exits
    next_frame_time = perf_counter()

    while machine.is_loaded():
        if inputs.process_messages():
            return

        for command in inputs.get_commands():
            if command == COMMAND_SAVE_STATE:
                snapshots.save_state(slot)
            elif command == COMMAND_LOAD_STATE and snapshots.load_state(slot):
                machine.redraw = True  # Show the restored screen straight away

        try:
            driver.tick()
        except StackError as err:
            # Report where the fault happened, then stop
            logger.error("%s at address 0x%04x (opcode 0x%04x)", err, machine.pc, machine.opcode)
            raise

        renderer.refresh_display()

        next_frame_time += FRAME_INTERVAL
        delay = next_frame_time - perf_counter()

        if delay > 0:
            sleep(delay)
        else:
            # Running behind, so don't try to catch up
            next_frame_time = perf_counter()

    logger.info("Program exited")


def main(args):
    print("".join((APP_INTRO, APP_COPYRIGHT)))
    logging.basicConfig(level=logging.INFO if args["debug"] else logging.WARNING, format="%(levelname)s: %(message)s")

    quirk_settings = {}

    if args["slot"] < 0:
        raise StartupError("Save state slots cannot be negative.")

    for cpu_quirk in CPU_QUIRKS:
        quirk_label = "{}_quirks".format(cpu_quirk)
        quirk_settings[quirk_label] = bool(args[quirk_label])

    machine = Machine(
        quirks=Quirks(**quirk_settings),
        speed_modifier=1 if args["speed"] is None else args["speed"],
        drawn_colour=_parse_colour(args["drawn_colour"], DEFAULT_DRAWN_COLOUR),
        undrawn_colour=_parse_colour(args["undrawn_colour"], DEFAULT_UNDRAWN_COLOUR)
    )

    # Validate and read the ROM before opening any windows
    Loader().load_game(machine, args["filename"])

    Inputs, Renderer = _select_plugins(args["renderer"])
    renderer = Renderer(scale=args["scale"], smoothing=args["smoothing"])
    renderer.set_title(APP_NAME)

    # Set up host inputs, and link to the chosen rendering module in case it provides inputs too
    inputs = Inputs(args["keymap"], renderer)

    # Set up debugger and live output if necessary
    debugger = Debugger(sink=print if args["debug"] else None)
    debugger.set_live(args["debug"])

    cpu = CPU(machine, debugger)
    driver = Driver(machine, cpu, input_sampler=inputs.sample_keys, frame_sink=make_frame_sink(machine, renderer))
    snapshots = Snapshots(machine, args["state_dir"] or DEFAULT_STATE_DIR)

    try:
        run_host(machine, driver, renderer, inputs, snapshots, slot=args["slot"])
    finally:
        # The host has quit, so shut down the rendering framework.  __del__ cannot be relied upon when using PyPy
        inputs.shutdown()
        renderer.shutdown()
