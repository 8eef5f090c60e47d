"""Tests for the pixel decoder."""

import pytest

from rastertotspl.exceptions import ConfigurationError, UnsupportedFormatError
from rastertotspl.models.page import PixelFormat
from rastertotspl.tspl.decoder import PixelDecoder, PixelEncoding, decode_pixel, select_encoding


class TestSelectEncoding:
    """Tests for choosing a decoding rule from the bit depth."""

    @pytest.mark.parametrize(
        ("bits", "expected"),
        [
            (1, (PixelEncoding.MONO, 0)),
            (8, (PixelEncoding.GRAY8, 1)),
            (24, (PixelEncoding.RGB24, 3)),
            (16, (PixelEncoding.GENERIC, 2)),
            (32, (PixelEncoding.GENERIC, 4)),
            (48, (PixelEncoding.GENERIC, 6)),
        ],
    )
    def test_supported_depths(self, bits, expected):
        assert select_encoding(bits) == expected

    @pytest.mark.parametrize("bits", [0, 2, 4, 12])
    def test_unsupported_depths(self, bits):
        """Depths that are neither 1 nor a multiple of 8 are rejected."""
        with pytest.raises(UnsupportedFormatError):
            select_encoding(bits)

    def test_unsupported_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            PixelDecoder(PixelFormat(bits_per_pixel=4, bytes_per_line=4))


class TestMonochrome:
    """Tests for 1-bit pixels."""

    def test_bits_read_msb_first(self):
        fmt = PixelFormat(bits_per_pixel=1, bytes_per_line=3)
        line = bytes([0x80, 0x00, 0x01])

        assert decode_pixel(fmt, line, 0) is True
        assert decode_pixel(fmt, line, 1) is False
        assert decode_pixel(fmt, line, 22) is False
        assert decode_pixel(fmt, line, 23) is True

    def test_inverted_polarity(self):
        fmt = PixelFormat(bits_per_pixel=1, bytes_per_line=1, invert=True)
        line = bytes([0x80])

        assert decode_pixel(fmt, line, 0) is False
        assert decode_pixel(fmt, line, 1) is True

    def test_out_of_bounds_is_not_ink(self):
        """Pixels past the line never print, even with inverted polarity."""
        line = bytes([0xFF])
        assert decode_pixel(PixelFormat(bits_per_pixel=1, bytes_per_line=1), line, 8) is False
        assert decode_pixel(PixelFormat(bits_per_pixel=1, bytes_per_line=1, invert=True), line, 8) is False


class TestGrayscale:
    """Tests for 8-bit grayscale pixels."""

    def test_threshold_boundary(self):
        """Values below 128 print, 128 and above do not."""
        fmt = PixelFormat(bits_per_pixel=8, bytes_per_line=4)
        line = bytes([0, 127, 128, 255])

        assert [decode_pixel(fmt, line, i) for i in range(4)] == [True, True, False, False]

    def test_inverted_polarity(self):
        fmt = PixelFormat(bits_per_pixel=8, bytes_per_line=2, invert=True)
        line = bytes([127, 128])

        assert decode_pixel(fmt, line, 0) is False
        assert decode_pixel(fmt, line, 1) is True

    def test_past_declared_length(self):
        fmt = PixelFormat(bits_per_pixel=8, bytes_per_line=2)
        assert decode_pixel(fmt, bytes([0, 0, 0]), 2) is False


class TestRGB:
    """Tests for 24-bit RGB pixels."""

    @pytest.fixture
    def fmt(self):
        return PixelFormat(bits_per_pixel=24, bytes_per_line=12)

    def test_black_is_ink(self, fmt):
        assert decode_pixel(fmt, bytes([0, 0, 0] * 4), 0) is True

    def test_white_is_not_ink(self, fmt):
        assert decode_pixel(fmt, bytes([255, 255, 255] * 4), 1) is False

    def test_mid_gray_is_not_ink(self, fmt):
        """(128, 128, 128) has luminance 128, which is not below the threshold."""
        assert decode_pixel(fmt, bytes([128, 128, 128] * 4), 2) is False

    def test_just_below_threshold(self, fmt):
        assert decode_pixel(fmt, bytes([127, 127, 127] * 4), 3) is True

    def test_luminance_weights(self, fmt):
        """Pure green is bright (luma 149), pure blue is dark (luma 29)."""
        line = bytes([0, 255, 0, 0, 0, 255, 255, 0, 0, 0, 0, 0])

        assert decode_pixel(fmt, line, 0) is False
        assert decode_pixel(fmt, line, 1) is True
        assert decode_pixel(fmt, line, 2) is True  # Red luma 76

    def test_pixel_overrunning_line_is_not_ink(self):
        """A pixel whose third byte lies past bytes_per_line defaults to no ink."""
        fmt = PixelFormat(bits_per_pixel=24, bytes_per_line=5)
        line = bytes(6)

        assert decode_pixel(fmt, line, 0) is True
        assert decode_pixel(fmt, line, 1) is False


class TestGeneric:
    """Tests for other byte-aligned depths."""

    def test_average_of_bytes(self):
        fmt = PixelFormat(bits_per_pixel=32, bytes_per_line=12)
        line = bytes([0, 0, 0, 255, 255, 255, 0, 0, 255, 255, 2, 0])

        assert decode_pixel(fmt, line, 0) is True  # 255 // 4 = 63
        assert decode_pixel(fmt, line, 1) is True  # 510 // 4 = 127
        assert decode_pixel(fmt, line, 2) is False  # 512 // 4 = 128

    def test_sixteen_bit(self):
        fmt = PixelFormat(bits_per_pixel=16, bytes_per_line=4)
        line = bytes([0x00, 0xFF, 0xFF, 0xFF])

        assert decode_pixel(fmt, line, 0) is True
        assert decode_pixel(fmt, line, 1) is False

    def test_partial_pixel_divides_by_full_width(self):
        """Only the in-bounds bytes are summed, still divided by the pixel width."""
        fmt = PixelFormat(bits_per_pixel=32, bytes_per_line=6)
        line = bytes([255, 255, 255, 255, 255, 255, 255, 255])

        # Bytes 4 and 5 only: 510 // 4 = 127
        assert decode_pixel(fmt, line, 1) is True

    def test_pixel_entirely_past_line(self):
        fmt = PixelFormat(bits_per_pixel=32, bytes_per_line=4)
        assert decode_pixel(fmt, bytes(8), 1) is False


class TestPixelDecoder:
    """Tests for the per-page decoder object."""

    def test_decode_line_matches_is_ink(self):
        fmt = PixelFormat(bits_per_pixel=8, bytes_per_line=6)
        decoder = PixelDecoder(fmt)
        line = bytes([0, 200, 100, 128, 127, 255])

        assert list(decoder.decode_line(line, 6)) == [decoder.is_ink(line, i) for i in range(6)]
        assert list(decoder.decode_line(line, 6)) == [True, False, True, False, True, False]

    def test_decode_line_width_past_data(self):
        decoder = PixelDecoder(PixelFormat(bits_per_pixel=8, bytes_per_line=2, invert=True))

        assert list(decoder.decode_line(bytes([255, 0]), 4)) == [True, False, False, False]

    def test_encoding_selected_once(self):
        decoder = PixelDecoder(PixelFormat(bits_per_pixel=24, bytes_per_line=3))

        assert decoder.encoding == PixelEncoding.RGB24
        assert decoder.bytes_per_pixel == 3
