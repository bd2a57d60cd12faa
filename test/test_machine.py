#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from c8vm.fonts import SMALL_FONT, BIG_FONT
from c8vm.framebuffer import GraphicsMode
from c8vm.machine import Machine, MachineError, Quirks


class TestMachine(unittest.TestCase):
    def setUp(self):
        self.machine = Machine()

    def test_machine_defaults(self):
        machine = self.machine
        self.assertEqual(0x200, machine.pc)
        self.assertEqual(0, machine.sp)
        self.assertEqual(0, machine.i)
        self.assertEqual(0x10000, len(machine.get_memory()))
        self.assertEqual(GraphicsMode.LOW, machine.graphics_mode)
        self.assertEqual((64, 32), (machine.screen_width, machine.screen_height))
        self.assertFalse(machine.is_loaded())
        self.assertTrue(machine.redraw)
        self.assertEqual(1, machine.speed_modifier)

    def test_machine_fonts(self):
        memory = self.machine.get_memory()
        self.assertEqual(SMALL_FONT, bytes(memory[0:80]))
        self.assertEqual(BIG_FONT, bytes(memory[80:180]))
        self.assertEqual(0, memory[180])

    def test_machine_init_resets_state(self):
        machine = self.machine
        machine.ram.write(0x300, 0xAA)
        machine.v[5] = 3
        machine.rpl[2] = 4
        machine.i = 0x123
        machine.pc = 0x456
        machine.dt = 10
        machine.ds = 11
        machine.opcode = 0x1234
        machine.keys[3] = True
        machine.stack.push(0x202)
        machine.framebuffer.set_mode(GraphicsMode.HIGH)
        machine.framebuffer.xor_pixel(2, 2)
        machine.redraw = False

        machine.init()

        self.assertEqual(0, machine.ram.read(0x300))
        self.assertEqual(bytes(16), machine.v.tobytes())
        self.assertEqual(bytes(8), machine.rpl.tobytes())
        self.assertEqual((0, 0x200, 0, 0, 0), (machine.i, machine.pc, machine.dt, machine.ds, machine.opcode))
        self.assertEqual([False] * 16, machine.keys)
        self.assertEqual(0, machine.sp)
        self.assertEqual((0,) * 16, machine.get_stack())
        self.assertEqual(GraphicsMode.LOW, machine.graphics_mode)
        self.assertEqual(0, sum(machine.get_vram()))
        self.assertTrue(machine.redraw)

    def test_machine_init_keeps_settings(self):
        quirks = Quirks(shift_quirks=True, jump_quirks=True, index_increment_quirks=True)
        machine = Machine(quirks=quirks, speed_modifier=3, drawn_colour=0xFF00FF00, undrawn_colour=0xFF000000)
        machine.init()
        self.assertIs(quirks, machine.quirks)
        self.assertTrue(machine.quirks.shift_quirks)
        self.assertEqual(3, machine.speed_modifier)
        self.assertEqual(0xFF00FF00, machine.drawn_colour)
        self.assertEqual(0xFF000000, machine.undrawn_colour)

    def test_machine_speed_modifier(self):
        self.machine.speed_modifier = 4
        self.assertEqual(4, self.machine.speed_modifier)

        with self.assertRaises(MachineError):
            self.machine.speed_modifier = 0

        with self.assertRaises(MachineError):
            self.machine.speed_modifier = 1.5

    def test_machine_colours(self):
        with self.assertRaises(MachineError):
            self.machine.drawn_colour = 0x100000000

        with self.assertRaises(MachineError):
            self.machine.undrawn_colour = -1

    def test_machine_vram_image(self):
        machine = self.machine
        machine.drawn_colour = 0xFFFFFFFF
        machine.undrawn_colour = 0xFF000000
        machine.framebuffer.xor_pixel(0, 0)
        image = machine.get_vram_image()
        self.assertEqual(64 * 32, len(image))
        self.assertEqual(0xFFFFFFFF, image[0])
        self.assertEqual(0xFF000000, image[1])

    def test_machine_views_read_only(self):
        with self.assertRaises(TypeError):
            self.machine.get_memory()[0] = 1

        with self.assertRaises(TypeError):
            self.machine.get_registers()[0] = 1

        with self.assertRaises(TypeError):
            self.machine.get_vram()[0] = 1

    def test_quirks_defaults(self):
        quirks = Quirks()
        self.assertFalse(quirks.shift_quirks)
        self.assertFalse(quirks.jump_quirks)
        self.assertFalse(quirks.index_increment_quirks)
        self.assertFalse(quirks.index_overflow_quirks)
        self.assertIn("shift=False", repr(quirks))
