"""Image loading."""

from pathlib import Path

import numpy as np

# Pillow modes that carry more than 8 bits per pixel, mapped to their full-scale value
_DEEP_MODES = {
    "I;16": 65535.0,
    "I;16L": 65535.0,
    "I;16B": 65535.0,
    "I;16N": 65535.0,
    "I": 65535.0,
}


def load_image(path: Path) -> np.ndarray:
    """
    Load an image as a grayscale intensity matrix.

    Any format Pillow can decode is accepted (PGM, PNG, JPEG, ...). 16-bit
    grayscale images keep their full depth and are scaled by 65535; float
    images (mode "F") are returned unscaled. Everything else, including color
    images, is converted to 8-bit luminance and scaled by 255.

    Args:
        path: Image file

    Returns:
        Intensities, shape [H, W], float32; in [0, 1] for integer images

    Raises:
        FileNotFoundError: If the file doesn't exist
        ImportError: If Pillow is not installed
    """
    from PIL import Image

    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    with Image.open(path) as img:
        if img.mode == "F":
            return np.asarray(img, dtype=np.float32).copy()

        if img.mode in _DEEP_MODES:
            data = np.asarray(img, dtype=np.float32)
            return data / _DEEP_MODES[img.mode]

        gray = img.convert("L")
        data = np.asarray(gray, dtype=np.float32)

    return data / 255.0
