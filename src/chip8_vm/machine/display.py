"""
Monochrome Display Buffer for the CHIP-8 Virtual Machine
========================================================

The display is a 64 × 32 grid of 1-bit pixels addressed row-major
(pixel (x, y) lives at index ``x + 64 * y``). Only two instructions touch
it: 00E0 clears it and Dxyn XORs a sprite onto it.

Sprites are up to 15 rows of 8 pixels, one byte per row, MSB leftmost.
A pixel that is set and gets XORed again turns off; that is a collision
and is what the draw instruction reports in VF.

The buffer does not clip or wrap by itself: the engine resolves
coordinates through the bounds policy and hands only in-range pixels
to ``xor_pixel``.

Copyright (c) 2026 chip8-vm Contributors
"""

from typing import Iterator, List, Optional, Tuple


class Display:
    """
    64 × 32 monochrome framebuffer.

    Example:
        >>> display = Display()
        >>> display.xor_pixel(0, 0)
        False
        >>> display.get_pixel(0, 0)
        1
        >>> display.xor_pixel(0, 0)  # collision
        True
    """

    WIDTH = 64
    HEIGHT = 32
    SPRITE_WIDTH = 8

    def __init__(self):
        self._pixels = bytearray(self.WIDTH * self.HEIGHT)
        # Set on every mutation, cleared when a renderer reads the buffer
        self._needs_refresh = True

    @property
    def needs_refresh(self) -> bool:
        """True if display content has changed since last read."""
        return self._needs_refresh

    def clear(self) -> None:
        """Turn every pixel off."""
        self._pixels[:] = bytes(len(self._pixels))
        self._needs_refresh = True

    def get_pixel(self, x: int, y: int) -> int:
        """
        Get pixel value at (x, y).

        Raises:
            ValueError: If the position is outside the grid
        """
        if not (0 <= x < self.WIDTH and 0 <= y < self.HEIGHT):
            raise ValueError(f"Invalid position ({x}, {y})")
        return self._pixels[x + self.WIDTH * y]

    def xor_pixel(self, x: int, y: int) -> bool:
        """
        Flip the pixel at an in-range (x, y).

        Returns:
            True if the pixel was set and is now off (collision)
        """
        index = x + self.WIDTH * y
        old = self._pixels[index]
        self._pixels[index] = old ^ 1
        self._needs_refresh = True
        return old != 0

    @classmethod
    def sprite_pixels(cls, x: int, y: int, rows: bytes) -> Iterator[Tuple[int, int]]:
        """
        Yield the unresolved (x, y) of every set bit of a sprite.

        Coordinates are not reduced to the grid; they can exceed WIDTH and
        HEIGHT when the sprite crosses the right or bottom edge.
        """
        for row, bits in enumerate(rows):
            for col in range(cls.SPRITE_WIDTH):
                if bits & (0x80 >> col):
                    yield x + col, y + row

    # =========================================================================
    # Snapshot / Text API (for hosts, testing and debugging)
    # =========================================================================

    def snapshot(self) -> Tuple[Tuple[int, ...], ...]:
        """Read-only copy of the grid as HEIGHT rows of WIDTH ints."""
        w = self.WIDTH
        return tuple(
            tuple(self._pixels[row * w:(row + 1) * w]) for row in range(self.HEIGHT)
        )

    def get_text_grid(self, on: str = "#", off: str = ".") -> List[str]:
        """
        Get display contents as list of strings (one per pixel row).

        Args:
            on: Character for set pixels
            off: Character for clear pixels
        """
        self._needs_refresh = False
        return ["".join(on if p else off for p in row) for row in self.snapshot()]

    def get_text(self, on: str = "#", off: str = ".") -> str:
        """Display contents as a single string with newlines."""
        return "\n".join(self.get_text_grid(on, off))

    def count_lit(self) -> int:
        """Number of pixels currently set."""
        return sum(self._pixels)

    # =========================================================================
    # Pixel Buffer API (for graphical rendering)
    # =========================================================================

    def get_pixel_buffer(self) -> bytes:
        """
        Get display as pixel buffer.

        Returns:
            One byte per pixel (0 or 255), row-major, WIDTH × HEIGHT bytes.
        """
        self._needs_refresh = False
        return bytes(255 if p else 0 for p in self._pixels)

    def render_image(self, scale: int = 10) -> Optional[bytes]:
        """
        Render display as PNG image (requires PIL).

        Args:
            scale: Size in screen pixels of one CHIP-8 pixel (default 10)

        Returns:
            PNG image bytes, or None if PIL not available
        """
        try:
            from PIL import Image
            import io
        except ImportError:
            return None

        if scale < 1:
            raise ValueError(f"scale must be >= 1, got {scale}")

        img = Image.frombytes("L", (self.WIDTH, self.HEIGHT), self.get_pixel_buffer())
        if scale != 1:
            img = img.resize((self.WIDTH * scale, self.HEIGHT * scale), Image.NEAREST)

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()
