#!/usr/bin/env python3

"""
CPU Debugger

If enabled, this will output information after each instruction is decoded:
    * All 16 of the [V] registers, starting with most significant (Vf) and
      reducing to least significant (V0)
    * I  - Index register
    * DT - Delay timer
    * ST - Sound timer
    * PC - Program counter
    * OP - OpCode number
    * IN - Decoded instruction

In verbose mode, the following are also included:
    * RPL   - Storage registers
    * Stack - Stack contents

Output, and machine events such as the sound timer running out, are passed as
plain strings to a sink function supplied by the host.  Events are also
logged.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import logging

logger = logging.getLogger(__name__)


class Debugger:
    def __init__(self, sink=None):
        self.live = False
        self.sink = sink

    def debug(self, machine, instruction, pc, verbose=False):
        debug_str = (
            "V: 0x" + ("{:02x}" * 16) + " I: 0x{:04x} DT: 0x{:02x} ST: 0x{:02x} PC: 0x{:04x} OP: 0x{:04x} IN: {}"
        ).format(
            *[machine.v[reg_num] for reg_num in range(15, -1, -1)] +
            [machine.i, machine.dt, machine.ds, pc, machine.opcode, instruction]
        )

        if verbose:
            debug_str += ("\nRPL: 0x" + "{:02x}" * 8).format(*[machine.rpl[reg_num] for reg_num in range(7, -1, -1)])
            stack_items = machine.stack.get_items()
            stack_str = (" 0x{:04x}" * len(stack_items)).format(*stack_items)
            debug_str += ("\nStack:{}").format(stack_str or " (Empty)")

        return debug_str

    def set_live(self, enabled):
        self.live = enabled

    def is_live(self):
        return self.live

    def set_sink(self, sink):
        self.sink = sink

    def output(self, machine, instruction, pc):
        if self.sink:
            self.sink(self.debug(machine, instruction, pc))

    def event(self, message):
        logger.info(message)

        if self.sink:
            self.sink(message)
