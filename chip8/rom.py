# Program (ROM) files: raw bytes, no header, loaded verbatim at 0x200.
import logging
import os

from .constants import MAX_PROGRAM_SIZE
from .errors import EmptyProgram, ProgramTooLarge, ROMLoadError

logger = logging.getLogger(__name__)


def load_rom(path):
    logger.info("Loading ROM: %s", path)
    try:
        with open(path, "rb") as f:
            size = os.fstat(f.fileno()).st_size
            data = f.read()
    except OSError as e:
        raise ROMLoadError("Could not read ROM %s: %s" % (path, e.strerror or e), path) from e

    if len(data) < size:
        raise ROMLoadError("Could not completely read ROM %s" % path, path)

    if not data:
        raise EmptyProgram(path)
    if len(data) > MAX_PROGRAM_SIZE:
        raise ProgramTooLarge(len(data), MAX_PROGRAM_SIZE, path)
    logger.debug("Read %d bytes from %s", len(data), os.path.basename(path))
    return data
