# Exceptions raised by the CHIP-8 virtual machine.
# Unknown opcodes are not errors, they are skipped.


class Chip8Error(Exception):
    """Base class for everything the interpreter raises."""


class RomTooLargeError(Chip8Error):
    def __init__(self, size, capacity):
        super().__init__(
            "ROM is %d bytes, only %d fit in memory" % (size, capacity))
        self.size = size
        self.capacity = capacity


class StackOverflowError(Chip8Error):
    def __init__(self, pc):
        super().__init__("Stack overflow on CALL at 0x%03X" % pc)
        self.pc = pc


class StackUnderflowError(Chip8Error):
    def __init__(self, pc):
        super().__init__("Stack underflow on 00EE at 0x%03X" % pc)
        self.pc = pc


class MemoryBoundsError(Chip8Error, IndexError):
    def __init__(self, address, length=1):
        super().__init__(
            "Memory access out of bounds: 0x%03X (+%d)" % (address, length))
        self.address = address
        self.length = length
