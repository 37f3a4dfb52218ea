import numpy as np

from .config import PIXEL_OFF_COLOR, PIXEL_ON_COLOR
from .interpreter import VIDEO_HEIGHT, VIDEO_WIDTH


def framebuffer_to_rgba(vram, scale=1, on_color=PIXEL_ON_COLOR,
                        off_color=PIXEL_OFF_COLOR):
    """Turn the 2048 cell framebuffer into an upscaled RGBA image.

    Rows come out bottom-up, which is what pyglet.image.ImageData expects.
    """
    lit = np.asarray(vram).reshape(VIDEO_HEIGHT, VIDEO_WIDTH) != 0
    small = np.empty((VIDEO_HEIGHT, VIDEO_WIDTH, 4), dtype=np.uint8)
    small[...] = off_color
    small[lit] = on_color
    small = small[::-1]

    if scale != 1:
        return np.repeat(np.repeat(small, scale, axis=0), scale, axis=1)
    return np.ascontiguousarray(small)
