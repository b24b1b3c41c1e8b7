# Faults raised by the virtual machine.
# Runtime faults stop the current run; load failures are raised before init().


class Chip8Error(Exception):
    pass


# ---- Runtime faults ----
class AddressError(Chip8Error):
    def __init__(self, address, what="memory access"):
        super().__init__("%s out of range: 0x%04X" % (what, address))
        self.address = address


class StackOverflow(Chip8Error):
    def __init__(self, pc):
        super().__init__("Stack overflow on CALL at 0x%03X" % pc)
        self.pc = pc


class StackUnderflow(Chip8Error):
    def __init__(self, pc):
        super().__init__("Stack underflow on RET at 0x%03X" % pc)
        self.pc = pc


# ---- Load failures ----
class ROMLoadError(Chip8Error):
    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path


class EmptyProgram(ROMLoadError):
    def __init__(self, path=None):
        super().__init__("Program is empty", path)


class ProgramTooLarge(ROMLoadError):
    def __init__(self, size, limit, path=None):
        super().__init__("Program is %d bytes, limit is %d" % (size, limit), path)
        self.size = size
        self.limit = limit
