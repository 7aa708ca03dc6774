"""Framebuffer holding the traced image and its render state.

The framebuffer owns one Taichi vector field of shape (width, height),
indexed [column, row] with row 0 at the bottom of the view plane. Colours
are clamped to [0, 1] (NaN and Inf become 0) when written; tracing itself
never clamps.

A framebuffer also records whether it has been rendered. The frame driver
refuses to trace a RENDERED framebuffer again until reset() is called.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinyray.core.framebuffer import Framebuffer
    >>> fb = Framebuffer(320, 240)
    >>> fb.write_rgb((1.0, 0.5, 0.0), column=0, row=0)
    >>> image = fb.to_numpy()  # (240, 320, 3), top row first
"""

from collections.abc import Sequence
from enum import Enum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from tinyray.core.config import ConfigurationError

vec3 = tm.vec3


class RenderState(Enum):
    """Whether a framebuffer holds a finished frame."""

    UNRENDERED = "unrendered"
    RENDERED = "rendered"


@ti.func
def sanitize_colour(colour: vec3) -> vec3:
    """Clamp a colour to [0, 1], replacing NaN and Inf components with 0."""
    result = colour
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return tm.clamp(result, 0.0, 1.0)


def _sanitize_host(colour: Sequence[float]) -> list[float]:
    values = np.nan_to_num(np.asarray(colour, dtype=np.float64), nan=0.0, posinf=0.0, neginf=0.0)
    return np.clip(values, 0.0, 1.0).tolist()


class Framebuffer:
    """RGB pixel storage of a fixed resolution.

    Attributes:
        width: Number of pixel columns.
        height: Number of pixel rows.
        state: RenderState of the stored frame.
    """

    def __init__(self, width: int, height: int) -> None:
        """Allocate a black framebuffer.

        Args:
            width: Number of pixel columns, must be positive.
            height: Number of pixel rows, must be positive.

        Raises:
            ConfigurationError: If either dimension is not a positive integer.
        """
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(
                    f"Framebuffer {name} must be a positive integer, got {value!r}"
                )
        self._width = width
        self._height = height
        self.pixels = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))
        self.state = RenderState.UNRENDERED

    @property
    def width(self) -> int:
        """Get the number of pixel columns."""
        return self._width

    @property
    def height(self) -> int:
        """Get the number of pixel rows."""
        return self._height

    @property
    def is_rendered(self) -> bool:
        """True once a frame has been traced into this framebuffer."""
        return self.state is RenderState.RENDERED

    def _check_index(self, column: int, row: int) -> None:
        if not (0 <= column < self._width and 0 <= row < self._height):
            raise IndexError(
                f"Pixel ({column}, {row}) outside {self._width}x{self._height} framebuffer"
            )

    def write_rgb(self, colour: Sequence[float], column: int, row: int) -> None:
        """Write one pixel, clamping the colour to [0, 1].

        Raises:
            IndexError: If the pixel is outside the framebuffer.
        """
        self._check_index(column, row)
        self.pixels[column, row] = _sanitize_host(colour)

    def read_rgb(self, column: int, row: int) -> tuple[float, float, float]:
        """Read one pixel.

        Raises:
            IndexError: If the pixel is outside the framebuffer.
        """
        self._check_index(column, row)
        c = self.pixels[column, row]
        return (float(c[0]), float(c[1]), float(c[2]))

    def clear(self, colour: Sequence[float] = (0.0, 0.0, 0.0)) -> None:
        """Fill every pixel with a colour without touching the render state."""
        values = np.empty((self._width, self._height, 3), dtype=np.float32)
        values[...] = _sanitize_host(colour)
        self.pixels.from_numpy(values)

    def reset(self) -> None:
        """Clear to black and mark the framebuffer UNRENDERED."""
        self.clear()
        self.state = RenderState.UNRENDERED

    def to_numpy(self) -> npt.NDArray[np.float32]:
        """Get the image as a (height, width, 3) float32 array, top row first."""
        image = self.pixels.to_numpy()
        image = np.transpose(image, (1, 0, 2))
        # Row 0 of the field is the bottom of the view plane
        image = np.flipud(image)
        return np.ascontiguousarray(image, dtype=np.float32)
