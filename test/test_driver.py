#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from c8vm.cpu import CPU
from c8vm.debugger import Debugger
from c8vm.driver import Driver
from c8vm.machine import Machine


class TestDriver(unittest.TestCase):
    def setUp(self):
        self.machine = Machine()
        self.machine.rom_path = "test.ch8"
        self.cpu = CPU(self.machine, Debugger())
        self.samples = []
        self.frames = []
        self.driver = Driver(self.machine, self.cpu, input_sampler=self._sample, frame_sink=self.frames.append)

    def _sample(self, keys):
        self.samples.append(len(keys))

    def _load_program(self, program):
        self.machine.ram.write_block(0x200, bytearray(program))
        self.machine.redraw = False

    def test_driver_cycles_per_tick(self):
        self.assertEqual(9, self.driver.get_cycles_per_tick())
        self.machine.speed_modifier = 4
        self.assertEqual(36, self.driver.get_cycles_per_tick())

    def test_driver_tick(self):
        self._load_program(b"\x70\x01\x12\x00")  # ADD V0, 1 / JP 0x200
        self.driver.tick()
        self.assertEqual(9, len(self.samples))
        self.assertEqual(5, self.machine.v[0])
        self.assertEqual(0x202, self.machine.pc)

    def test_driver_tick_speed(self):
        self._load_program(b"\x70\x01\x12\x00")
        self.machine.speed_modifier = 2
        self.driver.tick()
        self.assertEqual(18, len(self.samples))
        self.assertEqual(9, self.machine.v[0])
        self.assertEqual(0x200, self.machine.pc)

    def test_driver_timers(self):
        self._load_program(b"\x12\x00")
        self.machine.dt = 20
        self.driver.tick()
        self.assertEqual(11, self.machine.dt)
        self.driver.tick()
        self.driver.tick()
        self.assertEqual(0, self.machine.dt)

    def test_driver_samples_keys(self):
        # Keys pressed by the host are seen by the very next cycle
        def press_key(keys):
            keys[0x7] = True

        self._load_program(b"\xF3\x0A\x12\x02")  # LD V3, K / JP 0x202
        self.driver.set_input_sampler(press_key)
        self.driver.tick()
        self.assertEqual(0x7, self.machine.v[3])
        self.assertEqual(0x202, self.machine.pc)

    def test_driver_frame_sink(self):
        self._load_program(b"\x00\xE0\x12\x02")  # CLS / JP 0x202
        self.driver.tick()
        self.assertEqual(1, len(self.frames))
        self.assertEqual(64 * 32, len(self.frames[0]))
        self.assertEqual([self.machine.undrawn_colour] * (64 * 32), self.frames[0])
        self.assertFalse(self.machine.redraw)
        self.driver.tick()
        self.assertEqual(1, len(self.frames))

    def test_driver_frame_sink_per_draw(self):
        # Each drawing instruction hands a frame over straight away
        self._load_program(b"\xD0\x15\xD0\x15\x12\x04")  # DRW V0, V0, 5 (twice) / JP 0x204
        self.driver.tick()
        self.assertEqual(2, len(self.frames))
        self.assertEqual(self.machine.drawn_colour, self.frames[0][0])
        self.assertEqual(self.machine.undrawn_colour, self.frames[1][0])

    def test_driver_no_frame_sink(self):
        self._load_program(b"\x00\xE0\x12\x02")
        self.driver.set_frame_sink(None)
        self.driver.tick()
        self.assertFalse(self.machine.redraw)

    def test_driver_idle_without_rom(self):
        self.machine.rom_path = None
        self._load_program(b"\x70\x01\x12\x00")
        self.driver.tick()
        self.assertEqual(0, self.machine.v[0])
        self.assertEqual([], self.samples)

    def test_driver_stops_on_exit(self):
        self._load_program(b"\x70\x01\x00\xFD")  # ADD V0, 1 / EXIT
        self.driver.tick()
        self.assertEqual(2, len(self.samples))
        self.assertFalse(self.machine.is_loaded())
        self.assertEqual(0x200, self.machine.pc)
        self.assertEqual(0, self.machine.v[0])
        # The reset leaves a blank screen to be shown
        self.assertEqual(1, len(self.frames))
        self.driver.tick()
        self.assertEqual(2, len(self.samples))
