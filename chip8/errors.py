"""Exceptions raised by the CHIP-8 engine."""


class Chip8Error(Exception):
    """Base exception for all engine errors.

    Every fatal condition surfaced by ``Chip8.step()`` or the constructor
    derives from this class, so a caller can catch them with one clause.
    """

    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}


class InvalidOpcode(Chip8Error):
    """Raised when an instruction word matches no entry of the decode table."""

    def __init__(self, opcode, address=None):
        if address is None:
            message = f"Invalid opcode {opcode:04X}"
        else:
            message = f"Invalid opcode {opcode:04X} at 0x{address:03X}"
        super().__init__(message, details={"opcode": opcode, "address": address})
        self.opcode = opcode
        self.address = address


class StackOverflow(Chip8Error):
    """Raised by CALL when the stack already holds its maximum depth."""

    def __init__(self, address, depth):
        super().__init__(
            f"Stack overflow on CALL at 0x{address:03X} (depth {depth})",
            details={"address": address, "depth": depth},
        )
        self.address = address
        self.depth = depth


class StackUnderflow(Chip8Error):
    """Raised by RET when the stack is empty."""

    def __init__(self, address):
        super().__init__(
            f"Stack underflow on RET at 0x{address:03X}",
            details={"address": address},
        )
        self.address = address


class ProgramTooLarge(Chip8Error):
    """Raised at construction when the ROM does not fit above 0x200."""

    def __init__(self, size, capacity):
        super().__init__(
            f"ROM is {size} bytes, only {capacity} bytes of program memory available",
            details={"size": size, "capacity": capacity},
        )
        self.size = size
        self.capacity = capacity


class OutOfRange(Chip8Error, IndexError):
    """Raised by the bounds-checked accessors (keys, pixels, registers, memory)."""

    def __init__(self, what, value, limit):
        super().__init__(
            f"{what} {value!r} out of range 0..{limit - 1}",
            details={"what": what, "value": value, "limit": limit},
        )
        self.value = value
        self.limit = limit
