#!/usr/bin/env python3

"""
Cycle Driver

The host calls tick() once per frame (normally 60 times a second).  Each tick
runs a fixed batch of CPU cycles, scaled by the machine's speed modifier.
Keys are resampled before every cycle, and whenever a cycle leaves a redraw
pending, the current screen image is handed to the frame sink.

The driver never sleeps.  How often tick() is called is up to the host.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import CYCLES_PER_TICK


class Driver:
    def __init__(self, machine, cpu, input_sampler=None, frame_sink=None):
        self.machine = machine
        self.cpu = cpu
        self.input_sampler = input_sampler  # Called with the machine's key list to update in place
        self.frame_sink = frame_sink        # Called with a list of packed colours

    def set_input_sampler(self, input_sampler):
        self.input_sampler = input_sampler

    def set_frame_sink(self, frame_sink):
        self.frame_sink = frame_sink

    def get_cycles_per_tick(self):
        return CYCLES_PER_TICK * self.machine.speed_modifier

    def tick(self):
        machine = self.machine

        for _ in range(self.get_cycles_per_tick()):
            # A program can exit part way through a tick, so check every cycle
            if not machine.is_loaded():
                return

            if self.input_sampler:
                self.input_sampler(machine.keys)

            self.cpu.cycle()

            if machine.redraw:
                if self.frame_sink:
                    self.frame_sink(machine.get_vram_image())

                machine.redraw = False
