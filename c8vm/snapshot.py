#!/usr/bin/env python3

"""
Snapshots (Save States)

Writes the complete machine state to a binary file named after the loaded ROM
and a slot number, e.g. 'SaveStates/PONG_3.c8state', and reads it back.

File layout (all multi-byte values big-endian):

    magic 'C8ST', format version (1 byte)
    opcode, I, PC, SP (2 bytes each)
    delay timer, sound timer, redraw flag, graphics mode (1 byte each)
    RAM (65536 bytes)
    framebuffer (one byte per pixel, sized by the graphics mode above)
    V0-VF (16 bytes)
    stack (16 x 2 bytes)
    RPL flags (8 bytes)

Quirks, colours and the speed modifier are session settings, so they are not
saved.

Saving and loading are conveniences.  Any failure is logged and the machine is
left as it was; nothing is raised to the caller.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import logging
import os
import struct
from .constants import MEMORY_SIZE, STATE_EXTENSION, DEFAULT_STATE_DIR
from .framebuffer import GraphicsMode, MODE_SIZES
from .machine import NUM_REGISTERS, NUM_RPL_FLAGS
from .stack import STACK_LEVELS

STATE_MAGIC = b"C8ST"
STATE_VERSION = 1
HEADER_FORMAT = ">4sBHHHHBB?B"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
STACK_FORMAT = ">{}H".format(STACK_LEVELS)
STACK_SIZE = struct.calcsize(STACK_FORMAT)

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    pass


class SaveStateIoError(SnapshotError):
    pass


class LoadStateIoError(SnapshotError):
    pass


class Snapshots:
    def __init__(self, machine, state_dir=DEFAULT_STATE_DIR):
        self.machine = machine
        self.state_dir = state_dir

    def get_path(self, slot):
        if slot < 0:
            raise ValueError("Save state slots cannot be negative")

        rom_name = os.path.splitext(os.path.basename(self.machine.rom_path))[0]
        return os.path.join(self.state_dir, "{}_{}{}".format(rom_name, slot, STATE_EXTENSION))

    def save_state(self, slot):
        if not self.machine.is_loaded():
            logger.warning("No ROM loaded, nothing to save")
            return False

        filepath = self.get_path(slot)

        try:
            self._write(filepath)
        except SaveStateIoError as err:
            logger.error("Failed to write save state for %s: %s", filepath, err)
            return False

        logger.info("Saved state: %s", filepath)
        return True

    def load_state(self, slot):
        if not self.machine.is_loaded():
            logger.warning("No ROM loaded, nothing to restore into")
            return False

        filepath = self.get_path(slot)

        try:
            self._read(filepath)
        except LoadStateIoError as err:
            logger.error("Failed to load save state for %s: %s", filepath, err)
            return False

        logger.info("Loaded state: %s", filepath)
        return True

    def encode(self):
        machine = self.machine
        header = struct.pack(
            HEADER_FORMAT, STATE_MAGIC, STATE_VERSION, machine.opcode, machine.i, machine.pc, machine.sp,
            machine.dt, machine.ds, bool(machine.redraw), int(machine.graphics_mode)
        )

        return b"".join((
            header,
            machine.ram.get_bytes(),
            machine.framebuffer.get_bytes(),
            machine.v.tobytes(),
            struct.pack(STACK_FORMAT, *machine.stack.items),
            machine.rpl.tobytes()
        ))

    def decode(self, data):
        # Parse everything up front, so a bad file can't leave the machine half restored
        if len(data) < HEADER_SIZE:
            raise LoadStateIoError("File is too short")

        magic, version, opcode, i, pc, sp, dt, ds, redraw, mode = struct.unpack_from(HEADER_FORMAT, data)

        if magic != STATE_MAGIC:
            raise LoadStateIoError("Not a save state file")

        if version != STATE_VERSION:
            raise LoadStateIoError("Unsupported save state version {}".format(version))

        try:
            mode = GraphicsMode(mode)
        except ValueError:
            raise LoadStateIoError("Unknown graphics mode {}".format(mode)) from None

        if sp > STACK_LEVELS:
            raise LoadStateIoError("Stack pointer out of range")

        vid_width, vid_height = MODE_SIZES[mode]
        block_sizes = (MEMORY_SIZE, vid_width * vid_height, NUM_REGISTERS, STACK_SIZE, NUM_RPL_FLAGS)

        if len(data) != HEADER_SIZE + sum(block_sizes):
            raise LoadStateIoError("File size does not match its graphics mode")

        blocks = []
        offset = HEADER_SIZE

        for block_size in block_sizes:
            blocks.append(data[offset:offset + block_size])
            offset += block_size

        ram, vram, v, stack, rpl = blocks

        return {
            "opcode": opcode, "i": i, "pc": pc, "sp": sp, "dt": dt, "ds": ds, "redraw": redraw, "mode": mode,
            "ram": ram, "vram": vram, "v": v, "stack": struct.unpack(STACK_FORMAT, stack), "rpl": rpl
        }

    def restore(self, state):
        machine = self.machine
        machine.opcode = state["opcode"]
        machine.i = state["i"]
        machine.pc = state["pc"]
        machine.dt = state["dt"]
        machine.ds = state["ds"]
        machine.redraw = state["redraw"]
        machine.stack.restore(state["stack"], state["sp"])
        machine.framebuffer.restore(state["mode"], state["vram"])
        machine.ram.write_block(0, state["ram"])
        machine.v[:] = state["v"]
        machine.rpl[:] = state["rpl"]

    def _write(self, filepath):
        try:
            os.makedirs(self.state_dir, exist_ok=True)

            with open(filepath, "wb") as f:
                f.write(self.encode())
        except OSError as err:
            raise SaveStateIoError(str(err)) from err

    def _read(self, filepath):
        try:
            with open(filepath, "rb") as f:
                data = f.read()
        except OSError as err:
            raise LoadStateIoError(str(err)) from err

        self.restore(self.decode(data))
