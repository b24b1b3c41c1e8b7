# Turns the 64x32 pixel grid into a scaled RGBA frame for pyglet.
# Rows are flipped because pyglet images start at the bottom-left corner;
# each set cell becomes a scale x scale filled block.
import numpy as np

from .constants import PIXEL_OFF, PIXEL_ON, SCALE


def to_rgba(pixels, scale=SCALE, on=PIXEL_ON, off=PIXEL_OFF):
    palette = np.array([off, on], dtype=np.uint8)
    frame = palette[np.flipud(pixels)]
    if scale != 1:
        frame = np.repeat(np.repeat(frame, scale, axis=0), scale, axis=1)
    return np.ascontiguousarray(frame)
