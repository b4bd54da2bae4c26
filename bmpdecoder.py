#!/usr/bin/env python3
"""
bmpdecoder.py - Manual 24-bit BMP decoder/encoder (no Pillow)

Reads:
- BITMAPFILEHEADER (14 bytes) and BITMAPINFOHEADER (40 bytes)
- Uncompressed BGR scanlines, each padded to a multiple of 4 bytes
Returns:
    DecodedBitmap(buffer, file_header, info_header)

Rows are kept in on-disk order: row 0 of the buffer is the bottom scanline.
"""

import logging
import os
import struct
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Union

from errors import DecodeError
from pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

# Little-endian, packed
BMP_FILE_HEADER_FMT = "<HIHHI"
BMP_INFO_HEADER_FMT = "<IiiHHIIiiII"
BMP_FILE_HEADER_SIZE = struct.calcsize(BMP_FILE_HEADER_FMT)   # 14
BMP_INFO_HEADER_SIZE = struct.calcsize(BMP_INFO_HEADER_FMT)   # 40
BMP_HEADERS_SIZE = BMP_FILE_HEADER_SIZE + BMP_INFO_HEADER_SIZE

BMP_MAGIC = 0x4D42   # "BM"
BMP_BIT_COUNT = 24
BI_RGB = 0


@dataclass(frozen=True)
class BMPFileHeader:
    bf_type: int
    bf_size: int
    bf_reserved1: int
    bf_reserved2: int
    bf_off_bits: int

    def pack(self) -> bytes:
        return struct.pack(
            BMP_FILE_HEADER_FMT,
            self.bf_type, self.bf_size, self.bf_reserved1, self.bf_reserved2, self.bf_off_bits,
        )


@dataclass(frozen=True)
class BMPInfoHeader:
    bi_size: int
    bi_width: int
    bi_height: int
    bi_planes: int
    bi_bit_count: int
    bi_compression: int
    bi_size_image: int
    bi_x_pels_per_meter: int
    bi_y_pels_per_meter: int
    bi_clr_used: int
    bi_clr_important: int

    @property
    def width(self): return self.bi_width
    @property
    def height(self): return abs(self.bi_height)

    def pack(self) -> bytes:
        return struct.pack(
            BMP_INFO_HEADER_FMT,
            self.bi_size, self.bi_width, self.bi_height, self.bi_planes,
            self.bi_bit_count, self.bi_compression, self.bi_size_image,
            self.bi_x_pels_per_meter, self.bi_y_pels_per_meter,
            self.bi_clr_used, self.bi_clr_important,
        )


@dataclass
class DecodedBitmap:
    buffer: PixelBuffer
    file_header: BMPFileHeader
    info_header: BMPInfoHeader


def row_padding(width: int) -> int:
    """Zero bytes after each scanline so its length is a multiple of 4."""
    return (4 - (width * 3) % 4) % 4


def row_stride(width: int) -> int:
    return width * 3 + row_padding(width)


def read_bmp_headers(data: bytes):
    if len(data) < BMP_HEADERS_SIZE:
        raise DecodeError("Incomplete BMP header")
    file_header = BMPFileHeader(*struct.unpack_from(BMP_FILE_HEADER_FMT, data, 0))
    info_header = BMPInfoHeader(
        *struct.unpack_from(BMP_INFO_HEADER_FMT, data, BMP_FILE_HEADER_SIZE)
    )
    return file_header, info_header


def validate_headers(file_header: BMPFileHeader, info_header: BMPInfoHeader) -> None:
    if file_header.bf_type != BMP_MAGIC:
        raise DecodeError(f"Not a BMP file (magic 0x{file_header.bf_type:04X})")
    if info_header.bi_bit_count != BMP_BIT_COUNT:
        raise DecodeError(f"Unsupported bit depth: {info_header.bi_bit_count}-bit")
    if info_header.bi_compression != BI_RGB:
        raise DecodeError(f"Unsupported compression: {info_header.bi_compression}")
    if info_header.width <= 0 or info_header.height == 0:
        raise DecodeError(
            f"Invalid image dimensions: {info_header.bi_width}x{info_header.bi_height}"
        )


def decode_bmp(data: bytes) -> DecodedBitmap:
    file_header, info_header = read_bmp_headers(data)
    validate_headers(file_header, info_header)

    width, height = info_header.width, info_header.height
    padding = row_padding(width)
    stride = width * 3 + padding
    offset = file_header.bf_off_bits if file_header.bf_off_bits >= BMP_HEADERS_SIZE else BMP_HEADERS_SIZE

    # Last row needs no trailing padding to be readable
    needed = offset + stride * (height - 1) + width * 3
    if len(data) < needed:
        raise DecodeError(
            f"Truncated pixel data: expected {needed} bytes, got {len(data)}"
        )

    rows = []
    for y in range(height):
        start = offset + y * stride
        line = data[start:start + width * 3]
        # on-disk order is B, G, R
        rows.append([(line[i + 2], line[i + 1], line[i]) for i in range(0, width * 3, 3)])

    logger.debug(f"Decoded {width}x{height} bitmap, {padding} padding byte(s) per row")
    return DecodedBitmap(PixelBuffer(width, height, rows), file_header, info_header)


def layout_headers(buffer: PixelBuffer, file_header: BMPFileHeader, info_header: BMPInfoHeader):
    """Headers describing ``buffer`` as it will be written.

    The originals are returned untouched when they already match the buffer
    and the canonical 54-byte layout.
    """
    canonical = (
        file_header.bf_off_bits == BMP_HEADERS_SIZE
        and info_header.bi_size == BMP_INFO_HEADER_SIZE
    )
    if canonical and info_header.width == buffer.width and info_header.height == buffer.height:
        return file_header, info_header

    size_image = row_stride(buffer.width) * buffer.height
    bi_height = -buffer.height if info_header.bi_height < 0 else buffer.height
    info = replace(
        info_header,
        bi_size=BMP_INFO_HEADER_SIZE,
        bi_width=buffer.width,
        bi_height=bi_height,
        bi_size_image=size_image,
    )
    fh = replace(
        file_header,
        bf_size=BMP_HEADERS_SIZE + size_image,
        bf_off_bits=BMP_HEADERS_SIZE,
    )
    logger.debug(f"Rewrote headers for {buffer.width}x{buffer.height} output")
    return fh, info


def encode_bmp(buffer: PixelBuffer, file_header: BMPFileHeader, info_header: BMPInfoHeader) -> bytes:
    file_header, info_header = layout_headers(buffer, file_header, info_header)
    pad = bytes(row_padding(buffer.width))

    out = bytearray()
    out += file_header.pack()
    out += info_header.pack()
    for row in buffer.rows:
        for (r, g, b) in row:
            out += bytes((b, g, r))
        out += pad
    return bytes(out)


def read_bmp(path: Union[str, Path]) -> DecodedBitmap:
    return decode_bmp(Path(path).read_bytes())


def header_info(bitmap: DecodedBitmap, path: Union[str, Path, None] = None) -> Dict[str, object]:
    """Readable summary of the headers, in file order."""
    fh, ih = bitmap.file_header, bitmap.info_header
    info: Dict[str, object] = {}
    if path is not None:
        path = Path(path)
        info["Filename"] = os.path.basename(path)
        info["File Size"] = f"{path.stat().st_size} bytes"
    info.update({
        "Type": f"0x{fh.bf_type:04X} (BM)",
        "Declared Size": f"{fh.bf_size} bytes",
        "Pixel Data Offset": fh.bf_off_bits,
        "Info Header Size": ih.bi_size,
        "Image Dimensions": f"{ih.width}x{ih.height}",
        "Row Order": "top-down" if ih.bi_height < 0 else "bottom-up",
        "Planes": ih.bi_planes,
        "Bits per Pixel": ih.bi_bit_count,
        "Compression": ih.bi_compression,
        "Image Size": ih.bi_size_image,
        "X Pixels per Meter": ih.bi_x_pels_per_meter,
        "Y Pixels per Meter": ih.bi_y_pels_per_meter,
        "Colors Used": ih.bi_clr_used,
        "Important Colors": ih.bi_clr_important,
        "Row Padding": f"{row_padding(ih.width)} byte(s)",
    })
    return info


if __name__ == "__main__":
    import sys
    if len(sys.argv) < 2:
        print("Usage: python bmpdecoder.py <file.bmp>")
    else:
        p = Path(sys.argv[1])
        bmp = read_bmp(p)
        for k, v in header_info(bmp, p).items():
            print(f"{k}: {v}")
