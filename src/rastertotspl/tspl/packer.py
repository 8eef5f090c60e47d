"""Pack ink decisions into MSB-first bitmap lines.

Bit 7 of byte 0 is the leftmost pixel. Pad bits past the line width are
always 0 (no ink).
"""

from collections.abc import Iterable


def width_to_bytes(width: int) -> int:
    """Number of bytes needed for ``width`` pixels at one bit each."""
    return (width + 7) // 8


def pack_scanline(decisions: Iterable[bool], width: int) -> bytearray:
    """Pack up to ``width`` ink decisions into a zeroed line buffer."""
    packed = bytearray(width_to_bytes(width))
    for idx, ink in enumerate(decisions):
        if idx >= width:
            break
        if ink:
            packed[idx // 8] |= 1 << (7 - idx % 8)
    return packed


def unpack_scanline(packed: bytes, width: int) -> list[bool]:
    """Read ``width`` ink decisions back out of a packed line."""
    return [bool((packed[idx // 8] >> (7 - idx % 8)) & 1) for idx in range(width)]


def copy_mono_scanline(line: bytes, width: int, invert: bool = False) -> bytearray:
    """Pack a 1-bit source line by copying its bytes.

    1-bit sources already use the same MSB-first layout, so this yields the
    same result as decoding and packing each pixel.
    """
    width_bytes = width_to_bytes(width)
    packed = bytearray(line[:width_bytes])
    if invert:
        for i in range(len(packed)):
            packed[i] ^= 0xFF
    # Short source lines have no ink past their end
    packed.extend(bytes(width_bytes - len(packed)))
    tail_bits = width % 8
    if tail_bits and width_bytes:
        packed[-1] &= (0xFF << (8 - tail_bits)) & 0xFF
    return packed
