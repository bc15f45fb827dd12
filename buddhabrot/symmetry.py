"""
In-place symmetry operations on density images.

The Buddhabrot is symmetric under complex conjugation, which in pixel space
is a mirror across the horizontal midline. Folding the two halves together
doubles the effective sample count for free.
"""

from buddhabrot.image import Image


def reflect_horizontal(image: Image) -> Image:
    """
    Replace rows y and height-1-y with their sum. The middle row of an odd
    height maps onto itself and is left unchanged.
    """
    h = image.height
    for y in range(h // 2):
        mirror = h - 1 - y
        for x in range(image.width):
            image.add((x, y), image.get((x, mirror)))
            image.set((x, mirror), image.get((x, y)))
    return image


def transpose(image: Image) -> Image:
    """Swap (x, y) with (y, x); turns the real axis from horizontal to vertical."""
    if image.width != image.height:
        raise ValueError(f"transpose needs a square image, got {image.width}x{image.height}")
    n = image.width
    for y in range(n):
        for x in range(y + 1, n):
            image.swap((x, y), (y, x))
    return image


def apply_symmetry(image: Image, mode: str) -> Image:
    if mode == "none":
        return image
    if mode == "reflect":
        return reflect_horizontal(image)
    if mode == "rotate":
        return transpose(reflect_horizontal(image))
    raise ValueError(f"Unknown symmetry mode: {mode}")
