# Log switch. Every module logs through a child of the "chip8" logger;
# set_logs(True) turns on the per-instruction trace (F1 in the window).
import logging
import sys

logger = logging.getLogger("chip8")
logger.addHandler(logging.NullHandler())

_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
_handler = None


def set_logs(on):
    global _handler
    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(_handler)
    logger.setLevel(logging.DEBUG if on else logging.WARNING)
    logger.info("logs on: %s", on)


def logs_on():
    return logger.isEnabledFor(logging.DEBUG)
