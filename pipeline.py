"""
Decode -> filter -> encode (or render ASCII) -> write.

The pipeline is linear; any step that fails raises and nothing after it runs.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union, get_args

from ascii_art import AsciiGrid, render_ascii
from bmpdecoder import DecodedBitmap, decode_bmp, encode_bmp
from converters import FormatConverter
from errors import ConversionError, DecodeError, OutputWriteError, UnsupportedFormatError
from filter_options import (
    AsciiArt,
    EdgeDetection,
    FilterOption,
    Flip,
    GaussianBlur,
    Grayscale,
    NoFilter,
    NoiseReduction,
    Sepia,
    Sharpen,
    filter_name,
)
from filters import apply_edge_detection, apply_gaussian_blur, apply_noise_reduction, apply_sharpen
from image_processing import apply_sepia, flip_horizontal, to_grayscale
from pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

BMP_EXTENSION = ".bmp"
TEXT_EXTENSION = ".txt"


@dataclass
class FilterOutput:
    data: bytes
    extension: str
    result: Union[PixelBuffer, AsciiGrid]


def load_bitmap(path: Union[str, Path], converter: Optional[FormatConverter] = None) -> DecodedBitmap:
    """Read and decode ``path``, converting a non-BMP input at most once."""
    path = Path(path)
    data = path.read_bytes()
    try:
        return decode_bmp(data)
    except DecodeError as e:
        ext = path.suffix.lower()
        if ext == BMP_EXTENSION or converter is None:
            raise
        logger.info(f"{path.name} is not a 24-bit bitmap ({e}); converting from {ext or 'unknown'}")

    try:
        converted = converter.convert(data, ext)
    except ConversionError as e:
        raise UnsupportedFormatError(f"Could not convert {path.name} to BMP: {e}") from e
    try:
        return decode_bmp(converted)
    except DecodeError as e:
        raise UnsupportedFormatError(f"Converted {path.name} is still not a 24-bit BMP: {e}") from e


def apply_filter(option: FilterOption, image: PixelBuffer) -> Union[PixelBuffer, AsciiGrid]:
    """Run one filter. ``image`` is left untouched."""
    if not isinstance(option, get_args(FilterOption)):
        raise TypeError(f"Unknown filter option: {option!r}")
    logger.info(f"Applying filter: {filter_name(option)}")
    if isinstance(option, NoFilter):
        return image.deep_copy()
    if isinstance(option, Grayscale):
        return to_grayscale(image)
    if isinstance(option, Sepia):
        return apply_sepia(image, option.strength)
    if isinstance(option, Flip):
        return flip_horizontal(image)
    if isinstance(option, GaussianBlur):
        return apply_gaussian_blur(image, option.strength)
    if isinstance(option, Sharpen):
        return apply_sharpen(image, option.strength)
    if isinstance(option, EdgeDetection):
        return apply_edge_detection(image)
    if isinstance(option, NoiseReduction):
        return apply_noise_reduction(image, option.strength)
    if isinstance(option, AsciiArt):
        return render_ascii(image, option.width)


def render_output(bitmap: DecodedBitmap, option: FilterOption) -> FilterOutput:
    result = apply_filter(option, bitmap.buffer)
    if isinstance(result, AsciiGrid):
        return FilterOutput(result.to_text().encode("ascii"), TEXT_EXTENSION, result)
    data = encode_bmp(result, bitmap.file_header, bitmap.info_header)
    return FilterOutput(data, BMP_EXTENSION, result)


def output_path_for(
    input_path: Union[str, Path],
    option: FilterOption,
    output_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """``<dir>/<stem>_<Filter Name><ext>``, beside the input by default."""
    input_path = Path(input_path)
    ext = TEXT_EXTENSION if isinstance(option, AsciiArt) else BMP_EXTENSION
    directory = Path(output_dir) if output_dir is not None else input_path.parent
    return directory / f"{input_path.stem}_{filter_name(option)}{ext}"


def write_output(path: Union[str, Path], output: FilterOutput) -> Path:
    path = Path(path)
    try:
        path.write_bytes(output.data)
    except OSError as e:
        raise OutputWriteError(f"Could not open output file {path}: {e}") from e
    logger.info(f"Output file created: {path}")
    return path


def process_file(
    path: Union[str, Path],
    option: FilterOption,
    converter: Optional[FormatConverter] = None,
    output_dir: Optional[Union[str, Path]] = None,
) -> Path:
    bitmap = load_bitmap(path, converter)
    output = render_output(bitmap, option)
    return write_output(output_path_for(path, option, output_dir), output)
