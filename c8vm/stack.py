#!/usr/bin/env python3

"""
Stack Emulator

The call stack lives outside of system RAM, since no program can address it.
It is a fixed bank of 16 return addresses with a stack pointer (SP) that
indexes the next free slot.  Unlike a growing list, the slots keep their old
contents after a pop, which is what gets written into save states.

Pushing onto a full stack, or popping from an empty one, is a fault rather
than silently corrupting the pointer.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

STACK_LEVELS = 16


class StackError(Exception):
    pass


class StackOverflowError(StackError):
    pass


class StackUnderflowError(StackError):
    pass


class Stack:
    def __init__(self, size=STACK_LEVELS):
        self.size = size
        self.reset()

    def reset(self):
        self.items = [0] * self.size
        self.sp = 0

    def push(self, item):
        if self.sp >= self.size:
            raise StackOverflowError("Stack overflow")

        self.items[self.sp] = item & 0xFFFF
        self.sp += 1

    def pop(self):
        if self.sp <= 0:
            raise StackUnderflowError("Stack underflow")

        self.sp -= 1
        return self.items[self.sp]

    def restore(self, items, sp):
        # Used when loading save states
        if len(items) != self.size:
            raise StackError("Stack contents must be {} entries long".format(self.size))

        if not 0 <= sp <= self.size:
            raise StackError("Stack pointer out of range")

        self.items = [item & 0xFFFF for item in items]
        self.sp = sp

    def get_items(self):
        # For debugging, only the live entries
        return self.items[:self.sp]
