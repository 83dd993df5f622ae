"""CHIP-8 interpreter engine with a pyglet frontend."""

from .cpu import Chip8
from .errors import (
    Chip8Error,
    InvalidOpcode,
    OutOfRange,
    ProgramTooLarge,
    StackOverflow,
    StackUnderflow,
)

__all__ = [
    "Chip8",
    "Chip8Error",
    "InvalidOpcode",
    "OutOfRange",
    "ProgramTooLarge",
    "StackOverflow",
    "StackUnderflow",
]

__version__ = "0.1.0"
