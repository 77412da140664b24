"""Pixel format conversion from raw camera planes to canonical RGBA.

All functions are pure and vectorized with numpy, so independent frames can
be converted concurrently.

Example:
    >>> frame = Frame(width=640, height=480, format=PixelFormat.YUV420,
    ...               planes=(y_plane, u_plane, v_plane))
    >>> image = convert(frame)
    >>> image.data.shape
    (480, 640, 4)
"""

import numpy as np

from handbridge.errors import BufferSizeError, InvalidPlaneCountError, ZeroDimensionError
from handbridge.types import CanonicalImage, Frame, PixelFormat, Plane

# BT.601 full-range coefficients
_R_V = 1.370705
_G_U = 0.337633
_G_V = 0.698001
_B_U = 1.732446

# Channel order that turns BGRA bytes into RGBA
_BGRA_TO_RGBA = [2, 1, 0, 3]


def convert(frame: Frame) -> CanonicalImage:
    """Convert a raw frame into a dense RGBA image.

    Args:
        frame: Raw frame with YUV420 or packed RGBA/BGRA planes.

    Returns:
        CanonicalImage of the same width and height.

    Raises:
        ZeroDimensionError: If width or height is not positive.
        InvalidPlaneCountError: If the frame has too few planes for its format.
        BufferSizeError: If a plane is too short for the declared geometry.
    """
    if frame.width <= 0 or frame.height <= 0:
        raise ZeroDimensionError(frame.width, frame.height)

    if len(frame.planes) < frame.format.min_planes:
        raise InvalidPlaneCountError(frame.format.min_planes, len(frame.planes))

    if frame.format is PixelFormat.YUV420:
        data = yuv420_to_rgba(frame.planes, frame.width, frame.height)
    else:
        data = packed_to_rgba(frame.planes[0], frame.width, frame.height, frame.format)

    return CanonicalImage(data=data)


def yuv420_to_rgba(planes, width: int, height: int) -> np.ndarray:
    """Convert Y, U, V planes to an (H, W, 4) RGBA array.

    Chroma may be subsampled 2:1 in both axes. The U plane's row and pixel
    strides address both chroma planes.
    """
    y_plane, u_plane, v_plane = planes[0], planes[1], planes[2]

    y_row_stride = y_plane.row_stride or width
    uv_row_stride = u_plane.row_stride or (width + 1) // 2
    uv_pixel_stride = u_plane.pixel_stride or 1

    # Bounds are checked on the last pixel before any index array exists
    y_last = (height - 1) * y_row_stride + (width - 1)
    uv_last = ((height - 1) >> 1) * uv_row_stride + ((width - 1) >> 1) * uv_pixel_stride
    _check_plane(y_plane, y_last, "Y")
    _check_plane(u_plane, uv_last, "U")
    _check_plane(v_plane, uv_last, "V")

    rows = np.arange(height, dtype=np.int64)[:, None]
    cols = np.arange(width, dtype=np.int64)[None, :]
    y_index = rows * y_row_stride + cols
    uv_index = (rows >> 1) * uv_row_stride + (cols >> 1) * uv_pixel_stride

    y = _take(y_plane, y_index)
    u = _take(u_plane, uv_index) - 128.0
    v = _take(v_plane, uv_index) - 128.0

    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[:, :, 0] = _to_channel(y + _R_V * v)
    rgba[:, :, 1] = _to_channel(y - _G_U * u - _G_V * v)
    rgba[:, :, 2] = _to_channel(y + _B_U * u)
    rgba[:, :, 3] = 255
    return rgba


def packed_to_rgba(plane: Plane, width: int, height: int, fmt: PixelFormat) -> np.ndarray:
    """Convert a packed 4-byte-per-pixel plane to an (H, W, 4) RGBA array.

    Dense planes are reshaped in one go; padded rows are read through a
    strided view so the padding is dropped.
    """
    row_bytes = width * 4
    row_stride = plane.row_stride or row_bytes
    if row_stride < row_bytes:
        raise BufferSizeError(
            f"Row stride {row_stride} is smaller than {width} pixels x 4 bytes"
        )

    buf = np.frombuffer(plane.data, dtype=np.uint8)
    needed = (height - 1) * row_stride + row_bytes
    if buf.size < needed:
        raise BufferSizeError(
            f"Packed plane holds {buf.size} bytes, {width}x{height} "
            f"with row stride {row_stride} needs {needed}"
        )

    if row_stride == row_bytes:
        pixels = buf[: height * row_bytes].reshape(height, width, 4)
    else:
        rows = np.lib.stride_tricks.as_strided(
            buf, shape=(height, row_bytes), strides=(row_stride, 1), writeable=False
        )
        pixels = rows.reshape(height, width, 4)

    if fmt is PixelFormat.BGRA:
        return np.ascontiguousarray(pixels[:, :, _BGRA_TO_RGBA])
    return np.array(pixels, dtype=np.uint8, copy=True)


def _check_plane(plane: Plane, last: int, name: str) -> None:
    if len(plane.data) <= last:
        raise BufferSizeError(
            f"{name} plane holds {len(plane.data)} bytes, index {last} is out of range"
        )


def _take(plane: Plane, index: np.ndarray) -> np.ndarray:
    return np.frombuffer(plane.data, dtype=np.uint8)[index].astype(np.float64)


def _to_channel(values: np.ndarray) -> np.ndarray:
    # Truncate toward zero, then clamp
    return np.clip(np.trunc(values), 0, 255).astype(np.uint8)


__all__ = ["convert", "yuv420_to_rgba", "packed_to_rgba"]
