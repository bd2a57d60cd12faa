#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import os
import tempfile
import unittest
from chip8 import parse_args
from c8vm import main, run_host, StartupError, _parse_colour
from c8vm.constants import DEFAULT_KEYMAP, DEFAULT_STATE_DIR
from c8vm.cpu import CPU
from c8vm.debugger import Debugger
from c8vm.driver import Driver
from c8vm.hostio import InvalidRomExtension
from c8vm.inputs.i_null import Inputs, COMMAND_SAVE_STATE, COMMAND_LOAD_STATE
from c8vm.machine import Machine
from c8vm.renderers.r_null import Renderer
from c8vm.snapshot import Snapshots
from c8vm.stack import StackUnderflowError


class ScriptedInputs(Inputs):
    # Feeds one list of commands per frame, then quits
    def __init__(self, renderer, script):
        super().__init__(DEFAULT_KEYMAP, renderer)
        self.script = list(script)

    def process_messages(self):
        if not self.script:
            return True

        self.commands.extend(self.script.pop(0))
        return False


class TestMain(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def _write_rom(self, name, program):
        filename = os.path.join(self.temp_dir.name, name)

        with open(filename, "wb") as f:
            f.write(program)

        return filename

    def test_parse_args_defaults(self):
        args = vars(parse_args(["game.ch8"]))
        self.assertEqual("game.ch8", args["filename"])
        self.assertIsNone(args["renderer"])
        self.assertIsNone(args["speed"])
        self.assertEqual(DEFAULT_KEYMAP, args["keymap"])
        self.assertEqual(DEFAULT_STATE_DIR, args["state_dir"])
        self.assertEqual(0, args["slot"])
        self.assertEqual(0, args["shift_quirks"])
        self.assertEqual(0, args["index_overflow_quirks"])
        self.assertFalse(args["debug"])

    def test_parse_args_options(self):
        args = vars(parse_args([
            "game.c8", "-r", "null", "-x", "3", "--slot", "2", "--jump_quirks", "1", "--drawn_colour", "00FF00", "-d"
        ]))
        self.assertEqual("null", args["renderer"])
        self.assertEqual(3, args["speed"])
        self.assertEqual(2, args["slot"])
        self.assertEqual(1, args["jump_quirks"])
        self.assertEqual("00FF00", args["drawn_colour"])
        self.assertTrue(args["debug"])

    def test_parse_colour(self):
        self.assertEqual(0xFF123456, _parse_colour("123456", 0))
        self.assertEqual(0xFFDDDDDD, _parse_colour(None, 0xFFDDDDDD))
        self.assertRaises(StartupError, _parse_colour, "1234", 0)
        self.assertRaises(StartupError, _parse_colour, "GGGGGG", 0)

    def test_run_host_save_load(self):
        machine = Machine()
        machine.rom_path = os.path.join(self.temp_dir.name, "COUNT.ch8")
        machine.ram.write_block(0x200, bytearray(b"\x70\x01\x12\x00"))  # ADD V0, 1 / JP 0x200
        renderer = Renderer()
        driver = Driver(machine, CPU(machine, Debugger()))
        snapshots = Snapshots(machine, os.path.join(self.temp_dir.name, "states"))
        inputs = ScriptedInputs(renderer, ([], [COMMAND_SAVE_STATE], [], [COMMAND_LOAD_STATE]))

        run_host(machine, driver, renderer, inputs, snapshots, slot=2)

        self.assertTrue(os.path.isfile(snapshots.get_path(2)))
        # Saved with V0 at 5 after the first tick, then restored and run for one more tick (4 ADDs)
        self.assertEqual(9, machine.v[0])

    def test_run_host_stack_fault(self):
        machine = Machine()
        machine.rom_path = "RET.ch8"
        machine.ram.write_block(0x200, bytearray(b"\x00\xEE"))  # RET with nothing to return to
        renderer = Renderer()
        driver = Driver(machine, CPU(machine, Debugger()))
        inputs = ScriptedInputs(renderer, ([],))

        with self.assertLogs("c8vm", level="ERROR"):
            self.assertRaises(StackUnderflowError, run_host, machine, driver, renderer, inputs, Snapshots(machine))

    def _main_args(self, filename, **overrides):
        args = vars(parse_args([filename, "-r", "null", "--state_dir", os.path.join(self.temp_dir.name, "states")]))
        args.update(overrides)
        return args

    def test_main_runs_until_exit(self):
        filename = self._write_rom("EXIT.ch8", b"\x60\x01\x00\xFD")  # LD V0, 1 / EXIT

        with self.assertLogs("c8vm", level="INFO") as logs:
            main(self._main_args(filename))

        self.assertIn("INFO:c8vm:Program exited", logs.output)

    def test_main_bad_rom(self):
        filename = self._write_rom("EXIT.bin", b"\x00\xFD")
        self.assertRaises(InvalidRomExtension, main, self._main_args(filename))

    def test_main_bad_slot(self):
        filename = self._write_rom("EXIT.ch8", b"\x00\xFD")
        self.assertRaises(StartupError, main, self._main_args(filename, slot=-1))
