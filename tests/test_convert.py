"""Tests for pixel format conversion."""

import tracemalloc

import numpy as np
import pytest

from handbridge.convert import convert
from handbridge.errors import BufferSizeError, InvalidPlaneCountError, ZeroDimensionError
from handbridge.types import Frame, PixelFormat, Plane


def _yuv_frame(width, height, y, u, v, y_pad=0, uv_pixel_stride=1, uv_pad=0):
    y_stride = width + y_pad
    uv_width = (width + 1) // 2
    uv_height = (height + 1) // 2
    uv_stride = uv_width * uv_pixel_stride + uv_pad
    planes = (
        Plane(bytes([y]) * (y_stride * height), y_stride, 1),
        Plane(bytes([u]) * (uv_stride * uv_height), uv_stride, uv_pixel_stride),
        Plane(bytes([v]) * (uv_stride * uv_height), uv_stride, uv_pixel_stride),
    )
    return Frame(width=width, height=height, format=PixelFormat.YUV420, planes=planes)


# ── YUV420 ───────────────────────────────────────────────────────────

class TestYUV420:
    def test_white_frame(self):
        """10x10 frame with Y=255, U=V=128 converts to pure white."""
        image = convert(_yuv_frame(10, 10, 255, 128, 128))

        assert image.width == 10
        assert image.height == 10
        assert image.stride == 40
        assert np.all(image.data == 255)

    @pytest.mark.parametrize("y0", [0, 1, 16, 77, 128, 200, 235, 254])
    def test_neutral_chroma_is_grayscale(self, y0):
        """Neutral chroma yields R=G=B=Y and opaque alpha."""
        image = convert(_yuv_frame(6, 4, y0, 128, 128))

        rgb = image.data[:, :, :3].astype(int)
        assert np.all(np.abs(rgb - y0) <= 1)
        assert np.all(image.data[:, :, 3] == 255)

    def test_bt601_coefficients(self):
        """A single chroma sample is converted with BT.601 and truncated."""
        image = convert(_yuv_frame(2, 2, 100, 150, 90))

        # R = 100 + 1.370705 * -38 = 47.91
        # G = 100 - 0.337633 * 22 - 0.698001 * -38 = 119.09
        # B = 100 + 1.732446 * 22 = 138.11
        assert tuple(image.data[0, 0]) == (47, 119, 138, 255)

    def test_channels_clamp(self):
        """Saturated chroma clamps to [0, 255]."""
        image = convert(_yuv_frame(2, 2, 250, 255, 255))

        r, g, b, a = image.data[0, 0]
        assert r == 255
        assert b == 255
        assert 0 <= g <= 255
        assert a == 255

        image = convert(_yuv_frame(2, 2, 5, 0, 0))
        assert image.data[0, 0, 0] == 0
        assert image.data[0, 0, 2] == 0

    def test_row_padding_ignored(self):
        """Padding bytes in Y rows do not leak into the image."""
        frame = _yuv_frame(4, 4, 200, 128, 128, y_pad=12)
        y = bytearray(frame.planes[0].data)
        for row in range(4):
            start = row * 16 + 4
            y[start:start + 12] = b"\x00" * 12
        frame = Frame(4, 4, PixelFormat.YUV420, (Plane(bytes(y), 16, 1),) + frame.planes[1:])

        image = convert(frame)

        assert np.all(image.data[:, :, :3] == 200)

    def test_interleaved_chroma(self):
        """Pixel stride 2 (semi-planar NV21-style) chroma is addressed correctly."""
        width, height = 4, 2
        y_plane = Plane(bytes([128]) * (width * height), width, 1)
        # Interleaved VU buffer viewed through two planes with pixel stride 2
        vu = bytes([200, 60, 200, 60])
        u_plane = Plane(vu[1:] + b"\x00", 4, 2)
        v_plane = Plane(vu, 4, 2)
        frame = Frame(width, height, PixelFormat.YUV420, (y_plane, u_plane, v_plane))

        image = convert(frame)

        expected = convert(_yuv_frame(width, height, 128, 60, 200))
        assert np.array_equal(image.data, expected.data)

    def test_chroma_subsampling(self):
        """Each chroma sample covers a 2x2 block of output pixels."""
        width, height = 4, 4
        y_plane = Plane(bytes([128]) * 16, 4, 1)
        u_plane = Plane(bytes([128]) * 4, 2, 1)
        v_plane = Plane(bytes([128, 255, 128, 128]), 2, 1)

        image = convert(Frame(width, height, PixelFormat.YUV420, (y_plane, u_plane, v_plane)))

        # Top-right 2x2 block has V=255, so red is boosted there only
        assert np.all(image.data[0:2, 2:4, 0] == 255)
        assert np.all(image.data[0:2, 0:2, 0] == 128)
        assert np.all(image.data[2:4, :, 0] == 128)

    def test_odd_dimensions(self):
        image = convert(_yuv_frame(5, 3, 90, 128, 128))
        assert image.data.shape == (3, 5, 4)

    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_too_few_planes(self, count):
        frame = _yuv_frame(4, 4, 10, 128, 128)
        frame = Frame(4, 4, PixelFormat.YUV420, frame.planes[:count])

        with pytest.raises(InvalidPlaneCountError) as exc:
            convert(frame)
        assert exc.value.expected == 3
        assert exc.value.got == count

    def test_short_luma_plane(self):
        frame = _yuv_frame(4, 4, 10, 128, 128)
        short = Frame(4, 4, PixelFormat.YUV420, (Plane(b"\x00" * 10, 4, 1),) + frame.planes[1:])

        with pytest.raises(BufferSizeError, match="Y plane"):
            convert(short)

    def test_short_chroma_plane(self):
        frame = _yuv_frame(4, 4, 10, 128, 128)
        short = Frame(4, 4, PixelFormat.YUV420, frame.planes[:2] + (Plane(b"\x80" * 3, 2, 1),))

        with pytest.raises(BufferSizeError, match="V plane"):
            convert(short)

    def test_huge_frame_with_tiny_planes_rejected_without_allocating(self):
        """Oversized geometry is rejected before any per-pixel array is built."""
        frame = Frame(12000, 12000, PixelFormat.YUV420, (Plane(b"\x00", None, None),) * 3)

        tracemalloc.start()
        try:
            with pytest.raises(BufferSizeError, match="Y plane holds 1 bytes"):
                convert(frame)
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()

        assert peak < 1024 * 1024


# ── Packed RGBA / BGRA ───────────────────────────────────────────────

class TestPacked:
    def test_dense_rgba_is_exact_copy(self, rgba_pixels):
        pixels = rgba_pixels(7, 5)
        frame = Frame(7, 5, PixelFormat.RGBA, (Plane(pixels.tobytes(), 28, 4),))

        image = convert(frame)

        assert np.array_equal(image.data, pixels)
        assert image.tobytes() == pixels.tobytes()

    def test_dense_bgra_reorders_channels(self, rgba_pixels):
        pixels = rgba_pixels(7, 5)
        bgra = pixels[:, :, [2, 1, 0, 3]]
        frame = Frame(7, 5, PixelFormat.BGRA, (Plane(bgra.tobytes(), 28, 4),))

        image = convert(frame)

        assert np.array_equal(image.data, pixels)

    def test_padded_rows_match_dense(self, rgba_pixels):
        """Stride-padded BGRA converts to the same image as dense RGBA."""
        width, height, stride = 6, 4, 32
        pixels = rgba_pixels(width, height, seed=3)
        bgra = pixels[:, :, [2, 1, 0, 3]]
        buf = bytearray(b"\xee" * (stride * height))
        for row in range(height):
            buf[row * stride:row * stride + width * 4] = bgra[row].tobytes()

        padded = convert(Frame(width, height, PixelFormat.BGRA, (Plane(bytes(buf), stride, 4),)))
        dense = convert(Frame(width, height, PixelFormat.RGBA, (Plane(pixels.tobytes(), width * 4, 4),)))

        assert np.array_equal(padded.data, dense.data)

    def test_last_row_without_padding(self, rgba_pixels):
        """The final row may end right after its pixels."""
        width, height, stride = 3, 3, 16
        pixels = rgba_pixels(width, height, seed=9)
        buf = bytearray(stride * (height - 1) + width * 4)
        for row in range(height):
            buf[row * stride:row * stride + width * 4] = pixels[row].tobytes()

        image = convert(Frame(width, height, PixelFormat.RGBA, (Plane(bytes(buf), stride, 4),)))

        assert np.array_equal(image.data, pixels)

    def test_missing_row_stride_means_dense(self, rgba_pixels):
        pixels = rgba_pixels(4, 4)
        image = convert(Frame(4, 4, PixelFormat.RGBA, (Plane(pixels.tobytes()),)))
        assert np.array_equal(image.data, pixels)

    def test_output_is_writable_copy(self, rgba_pixels):
        pixels = rgba_pixels(4, 4)
        image = convert(Frame(4, 4, PixelFormat.RGBA, (Plane(pixels.tobytes(), 16, 4),)))
        image.data[0, 0, 0] = 1
        assert image.data.flags.writeable

    def test_short_buffer(self):
        frame = Frame(4, 4, PixelFormat.RGBA, (Plane(b"\x00" * 60, 16, 4),))
        with pytest.raises(BufferSizeError):
            convert(frame)

    def test_stride_smaller_than_row(self):
        frame = Frame(4, 4, PixelFormat.BGRA, (Plane(b"\x00" * 64, 8, 4),))
        with pytest.raises(BufferSizeError, match="Row stride"):
            convert(frame)

    def test_no_planes(self):
        with pytest.raises(InvalidPlaneCountError):
            convert(Frame(4, 4, PixelFormat.RGBA, ()))


# ── Dimensions ───────────────────────────────────────────────────────

class TestDimensions:
    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-1, 5), (0, 0)])
    @pytest.mark.parametrize("fmt", list(PixelFormat))
    def test_zero_dimension(self, width, height, fmt):
        frame = Frame(width, height, fmt, (Plane(b"\x00" * 16, 4, 1),) * 3)
        with pytest.raises(ZeroDimensionError):
            convert(frame)

    def test_dimension_checked_before_planes(self):
        with pytest.raises(ZeroDimensionError):
            convert(Frame(0, 0, PixelFormat.YUV420, ()))
