"""Framebuffer rendering utilities for hosts."""

from typing import Tuple

import numpy as np

from chor.constants import SCREEN_WIDTH, SCREEN_HEIGHT


def framebuffer_to_rgb(
    framebuffer: np.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (255, 255, 255),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert the boolean framebuffer to an RGB array with optional upscaling.

    Args:
        framebuffer: Flat row-major array of 2048 cells, or an array of shape (32, 64)
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: white)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    if scale < 1:
        raise ValueError(f"scale must be at least 1, got {scale}")
    pixels = np.asarray(framebuffer, dtype=np.bool_).reshape(SCREEN_HEIGHT, SCREEN_WIDTH)

    rgb_frame = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH, 3), dtype=np.uint8)
    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Nearest neighbor upscaling
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "white",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for rendering.

    Args:
        scheme: Color scheme name ("white", "classic", "amber", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]


def framebuffer_to_text(framebuffer: np.ndarray, on: str = "#", off: str = ".") -> str:
    """Render the framebuffer as 32 lines of 64 characters."""
    pixels = np.asarray(framebuffer, dtype=np.bool_).reshape(SCREEN_HEIGHT, SCREEN_WIDTH)
    return "\n".join("".join(on if p else off for p in row) for row in pixels)
