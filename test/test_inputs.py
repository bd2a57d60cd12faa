#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from c8vm.constants import DEFAULT_KEYMAP
from c8vm.inputs.i_null import Inputs, InputsError, COMMAND_SAVE_STATE
from c8vm.renderers.r_null import Renderer


class HeldKeys(Inputs):
    def __init__(self, keymap, renderer, held):
        super().__init__(keymap, renderer)
        self.held = held

    def is_key_down(self, key):
        return key in self.held


class TestInputs(unittest.TestCase):
    def setUp(self):
        self.renderer = Renderer()

    def test_inputs_keymap(self):
        inputs = Inputs(DEFAULT_KEYMAP, self.renderer)
        self.assertEqual(16, len(inputs.keymap_dict))
        self.assertEqual(0x0, inputs.keymap_dict[120])  # x
        self.assertEqual(0x1, inputs.keymap_dict[49])   # 1
        self.assertEqual(0xF, inputs.keymap_dict[118])  # v

    def test_inputs_keymap_lowercase(self):
        keymap = ",".join(str(ord(char)) for char in "X123QWEASDZC4RFV")
        inputs = Inputs(keymap, self.renderer, force_lowercase=True)
        self.assertEqual(0x0, inputs.keymap_dict[ord("x")])
        self.assertNotIn(ord("X"), inputs.keymap_dict)

    def test_inputs_keymap_wrong_count(self):
        self.assertRaises(InputsError, Inputs, "1,2,3", self.renderer)

    def test_inputs_keymap_not_integer(self):
        self.assertRaises(InputsError, Inputs, ",".join(["a"] * 16), self.renderer)

    def test_inputs_keymap_duplicate(self):
        self.assertRaises(InputsError, Inputs, ",".join(["1"] * 16), self.renderer)

    def test_inputs_null(self):
        inputs = Inputs(DEFAULT_KEYMAP, self.renderer)
        self.assertFalse(inputs.process_messages())
        self.assertFalse(inputs.is_key_down(0x5))
        self.assertEqual([], inputs.get_commands())

    def test_inputs_sample_keys(self):
        keys = [True] * 16
        HeldKeys(DEFAULT_KEYMAP, self.renderer, {0x2, 0xE}).sample_keys(keys)
        self.assertEqual([key in (0x2, 0xE) for key in range(16)], keys)

    def test_inputs_get_commands(self):
        inputs = Inputs(DEFAULT_KEYMAP, self.renderer)
        inputs.commands.append(COMMAND_SAVE_STATE)
        self.assertEqual([COMMAND_SAVE_STATE], inputs.get_commands())
        self.assertEqual([], inputs.get_commands())
