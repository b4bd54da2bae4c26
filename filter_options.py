"""
filter_options.py

The filter menu as typed values: each kind carries its own parameter
instead of a bare integer code plus a side-channel strength.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Dict, NamedTuple, Optional, Union

from errors import InvalidParameterError

MIN_STRENGTH = 1
MAX_STRENGTH = 100


class FilterKind(IntEnum):
    NONE = 0
    GRAYSCALE = 1
    SEPIA = 2
    FLIP = 3
    GAUSSIAN_BLUR = 4
    SHARPEN = 5
    EDGE_DETECTION = 6
    NOISE_REDUCTION = 7
    ASCII = 8


class FilterType(NamedTuple):
    name: str
    has_parameters: bool


FILTER_TYPES: Dict[FilterKind, FilterType] = {
    FilterKind.NONE: FilterType("No Filter", False),
    FilterKind.GRAYSCALE: FilterType("Grayscale", False),
    FilterKind.SEPIA: FilterType("Sepia", True),
    FilterKind.FLIP: FilterType("Flip", False),
    FilterKind.GAUSSIAN_BLUR: FilterType("Gaussian Blur", True),
    FilterKind.SHARPEN: FilterType("Sharpen", True),
    FilterKind.EDGE_DETECTION: FilterType("Edge Detection", False),
    FilterKind.NOISE_REDUCTION: FilterType("Noise Reduction", True),
    FilterKind.ASCII: FilterType("ASCII", False),
}

# Kinds offered in the interactive menu
MENU_KINDS = [k for k in FilterKind if k != FilterKind.NONE]


def check_strength(strength: int) -> int:
    if isinstance(strength, bool) or not isinstance(strength, int):
        raise InvalidParameterError(f"Filter strength must be an integer, got {strength!r}")
    if not MIN_STRENGTH <= strength <= MAX_STRENGTH:
        raise InvalidParameterError(
            f"Filter strength must be {MIN_STRENGTH}-{MAX_STRENGTH}, got {strength}"
        )
    return strength


@dataclass(frozen=True)
class _Strengthened:
    strength: int

    def __post_init__(self):
        check_strength(self.strength)


@dataclass(frozen=True)
class NoFilter:
    kind: ClassVar[FilterKind] = FilterKind.NONE


@dataclass(frozen=True)
class Grayscale:
    kind: ClassVar[FilterKind] = FilterKind.GRAYSCALE


@dataclass(frozen=True)
class Sepia(_Strengthened):
    kind: ClassVar[FilterKind] = FilterKind.SEPIA


@dataclass(frozen=True)
class Flip:
    kind: ClassVar[FilterKind] = FilterKind.FLIP


@dataclass(frozen=True)
class GaussianBlur(_Strengthened):
    """``strength`` is the number of blur passes."""
    kind: ClassVar[FilterKind] = FilterKind.GAUSSIAN_BLUR


@dataclass(frozen=True)
class Sharpen(_Strengthened):
    kind: ClassVar[FilterKind] = FilterKind.SHARPEN


@dataclass(frozen=True)
class EdgeDetection:
    kind: ClassVar[FilterKind] = FilterKind.EDGE_DETECTION


@dataclass(frozen=True)
class NoiseReduction(_Strengthened):
    kind: ClassVar[FilterKind] = FilterKind.NOISE_REDUCTION


@dataclass(frozen=True)
class AsciiArt:
    """``width`` is the output width in glyphs, checked against the image later."""
    width: int
    kind: ClassVar[FilterKind] = FilterKind.ASCII

    def __post_init__(self):
        if isinstance(self.width, bool) or not isinstance(self.width, int) or self.width <= 0:
            raise InvalidParameterError(f"ASCII width must be a positive integer, got {self.width!r}")


FilterOption = Union[
    NoFilter, Grayscale, Sepia, Flip, GaussianBlur, Sharpen, EdgeDetection, NoiseReduction, AsciiArt
]

_SIMPLE = {
    FilterKind.NONE: NoFilter,
    FilterKind.GRAYSCALE: Grayscale,
    FilterKind.FLIP: Flip,
    FilterKind.EDGE_DETECTION: EdgeDetection,
}
_STRENGTHENED = {
    FilterKind.SEPIA: Sepia,
    FilterKind.GAUSSIAN_BLUR: GaussianBlur,
    FilterKind.SHARPEN: Sharpen,
    FilterKind.NOISE_REDUCTION: NoiseReduction,
}


def parse_kind(value: Union[int, str, FilterKind]) -> FilterKind:
    """Accept a menu number, an enum member or a name like "gaussian-blur"."""
    if isinstance(value, FilterKind):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            value = int(text)
        else:
            key = text.upper().replace("-", "_").replace(" ", "_")
            for kind in FilterKind:
                if key == kind.name or text.lower() == FILTER_TYPES[kind].name.lower():
                    return kind
            raise InvalidParameterError(f"Unknown filter: {value!r}")
    try:
        return FilterKind(value)
    except ValueError:
        raise InvalidParameterError(f"Invalid filter type: {value!r}") from None


def make_filter(
    kind: Union[int, str, FilterKind],
    strength: Optional[int] = None,
    width: Optional[int] = None,
) -> FilterOption:
    kind = parse_kind(kind)
    if kind in _SIMPLE:
        return _SIMPLE[kind]()
    if kind in _STRENGTHENED:
        if strength is None:
            raise InvalidParameterError(f"{FILTER_TYPES[kind].name} needs a strength (1 - 100)")
        return _STRENGTHENED[kind](strength)
    if width is None:
        raise InvalidParameterError("ASCII needs an output width")
    return AsciiArt(width)


def filter_name(option: FilterOption) -> str:
    return FILTER_TYPES[option.kind].name
