"""CHIP-8 virtual machine with a pyglet front end."""

from .errors import (Chip8Error, MemoryBoundsError, RomTooLargeError,
                     StackOverflowError, StackUnderflowError)
from .interpreter import Chip8

__all__ = [
    "Chip8",
    "Chip8Error",
    "MemoryBoundsError",
    "RomTooLargeError",
    "StackOverflowError",
    "StackUnderflowError",
]
