"""
Configuration for the bitmap filter tool.

Values come from environment variables (BMPFILTER_*) with defaults below;
command-line flags override them in main.py.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from converters import FormatConverter, MagickConverter, PillowConverter

ENV_PREFIX = "BMPFILTER_"

ConverterBackend = Literal["pillow", "magick", "none"]


class LoggingSettings(BaseModel):
    """Logging configuration"""

    level: str = Field(default="INFO", description="Root log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="logging.basicConfig format string",
    )

    @field_validator("level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Unknown log level: {v}")
        return v


class ConversionSettings(BaseModel):
    """How non-BMP inputs are turned into bitmaps"""

    backend: ConverterBackend = Field(default="pillow", description="Converter to use")
    magick_binary: str = Field(default="convert", description="ImageMagick executable")
    timeout_s: Optional[float] = Field(default=None, gt=0, description="Conversion timeout")


class Settings(BaseModel):
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    conversion: ConversionSettings = Field(default_factory=ConversionSettings)
    output_dir: Optional[Path] = Field(
        default=None, description="Write results here instead of beside the input"
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def settings_from_env(environ=None) -> Settings:
    env = os.environ if environ is None else environ

    def get(name):
        return env.get(ENV_PREFIX + name)

    logging_cfg: Dict[str, Any] = {}
    conversion_cfg: Dict[str, Any] = {}
    data: Dict[str, Any] = {"logging": logging_cfg, "conversion": conversion_cfg}

    if get("LOG_LEVEL"):
        logging_cfg["level"] = get("LOG_LEVEL")
    if get("CONVERTER"):
        conversion_cfg["backend"] = get("CONVERTER").lower()
    if get("MAGICK_BINARY"):
        conversion_cfg["magick_binary"] = get("MAGICK_BINARY")
    if get("CONVERT_TIMEOUT"):
        conversion_cfg["timeout_s"] = get("CONVERT_TIMEOUT")
    if get("OUTPUT_DIR"):
        data["output_dir"] = get("OUTPUT_DIR")

    return Settings(**data)


@lru_cache()
def get_settings() -> Settings:
    return settings_from_env()


def build_converter(conversion: ConversionSettings) -> Optional[FormatConverter]:
    if conversion.backend == "pillow":
        return PillowConverter()
    if conversion.backend == "magick":
        return MagickConverter(conversion.magick_binary, timeout=conversion.timeout_s)
    return None
