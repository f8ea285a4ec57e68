"""Conversion between hex, RGB and CIE 1931 xy chromaticity.

The bridge describes color as an ``[x, y]`` point in CIE xy space, which
carries hue and saturation but no brightness. These helpers turn the hex
strings and 8-bit RGB triples users usually have into that point.

Two gamma curves are available:

- ``"srgb"`` (default): the standard sRGB expansion. Channels are scaled to
  ``[0, 1]`` and expanded with ``((c + 0.055) / 1.055) ** 2.4``.
- ``"legacy"``: the arithmetic older deployments shipped with. It expands the
  raw ``0..255`` value with ``(c + 1.055) ** 2.4``. The result is not sRGB,
  but existing scenes were tuned against it, so it is kept bit-for-bit.

Both curves clamp channels to ``[0, 255]`` before expansion.
"""
from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass
from typing import NamedTuple, Sequence, Union

from alphahue import const

_HEX_RE = re.compile(r"[0-9a-fA-F]{6}")
_PAIR_RE = re.compile(r"[0-9a-fA-F]{2}")
_CHANNELS = ("red", "green", "blue")


class ColorConversionError(ValueError):
    """Base error for color conversion."""


class InvalidColorFormat(ColorConversionError):
    """Raised when a color value cannot be parsed."""


class OutOfRangeChannel(ColorConversionError):
    """Raised in strict mode when an RGB channel is outside 0..255."""


@dataclass(frozen=True, slots=True)
class RGBColor:
    """An 8-bit RGB triple."""

    red: int
    green: int
    blue: int

    def as_tuple(self) -> tuple[int, int, int]:
        """Return the channels as ``(red, green, blue)``."""
        return (self.red, self.green, self.blue)


class ChromaticityPoint(NamedTuple):
    """A CIE 1931 xy point."""

    x: float
    y: float


RGBLike = Union[RGBColor, Sequence[int]]


def _check_gamma_mode(mode: str) -> None:
    if mode not in const.GAMMA_MODES:
        raise ValueError(
            f"Unknown gamma mode {mode!r}; expected one of {sorted(const.GAMMA_MODES)}"
        )


def _clamp(channel: float) -> float:
    if math.isnan(channel):
        return const.MIN_CHANNEL
    if channel < const.MIN_CHANNEL:
        return const.MIN_CHANNEL
    if channel > const.MAX_CHANNEL:
        return const.MAX_CHANNEL
    return channel


def gamma_correct(channel: float, mode: str = const.DEFAULT_GAMMA_MODE) -> float:
    """Clamp a channel to 0..255 and return its gamma-expanded value.

    NaN is treated as 0, so the result is always finite.
    """
    _check_gamma_mode(mode)
    value = _clamp(channel)
    if mode == const.GAMMA_MODE_LEGACY:
        if value > 0.04045:
            return float((value + 1.055) ** 2.4)
        return value / 12.92

    value = value / const.MAX_CHANNEL
    if value > 0.04045:
        return ((value + 0.055) / 1.055) ** 2.4
    return value / 12.92


def hex_to_rgb(hex_color: str) -> RGBColor:
    """Parse ``"#rrggbb"`` or ``"rrggbb"`` into an :class:`RGBColor`."""
    if not isinstance(hex_color, str):
        raise InvalidColorFormat(
            f"Hex color must be a string, got {type(hex_color).__name__}"
        )
    digits = hex_color.removeprefix("#")
    if len(digits) != 6:
        raise InvalidColorFormat(
            f"Hex color {hex_color!r} must have exactly 6 hex digits"
        )
    if not _HEX_RE.fullmatch(digits):
        for name, start in zip(_CHANNELS, range(0, 6, 2)):
            pair = digits[start:start + 2]
            if not _PAIR_RE.fullmatch(pair):
                raise InvalidColorFormat(
                    f"Hex color {hex_color!r} has invalid {name} channel {pair!r}"
                )
    red, green, blue = (int(digits[i:i + 2], 16) for i in range(0, 6, 2))
    return RGBColor(red, green, blue)


def rgb_to_hex(rgb: RGBLike) -> str:
    """Format an RGB triple as ``#rrggbb``, clamping each channel."""
    channels = _channels(rgb, strict=False)
    return "#" + "".join(f"{int(round(_clamp(c))):02x}" for c in channels)


def _channels(rgb: RGBLike, strict: bool) -> tuple[float, float, float]:
    values = rgb.as_tuple() if isinstance(rgb, RGBColor) else tuple(rgb)
    if len(values) != 3:
        raise InvalidColorFormat(
            f"RGB color needs 3 channels, got {len(values)}"
        )
    for name, value in zip(_CHANNELS, values):
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidColorFormat(f"{name} channel {value!r} is not a number")
        if not math.isfinite(value):
            raise InvalidColorFormat(f"{name} channel {value!r} is not finite")
        if strict and not const.MIN_CHANNEL <= value <= const.MAX_CHANNEL:
            raise OutOfRangeChannel(
                f"{name} channel {value!r} is outside "
                f"{const.MIN_CHANNEL}..{const.MAX_CHANNEL}"
            )
    return values  # type: ignore[return-value]


def xy_from_rgb(
    rgb: RGBLike,
    mode: str = const.DEFAULT_GAMMA_MODE,
    *,
    strict: bool = False,
) -> ChromaticityPoint:
    """Return the xy chromaticity of an RGB triple.

    Black has no chromaticity and maps to ``(0, 0)``. With ``strict`` set,
    channels outside 0..255 raise :class:`OutOfRangeChannel` instead of
    being clamped.
    """
    _check_gamma_mode(mode)
    red, green, blue = (
        gamma_correct(c, mode) for c in _channels(rgb, strict=strict)
    )
    (xr, xg, xb), (yr, yg, yb), (zr, zg, zb) = const.RGB_TO_XYZ
    x = red * xr + green * xg + blue * xb
    y = red * yr + green * yg + blue * yb
    z = red * zr + green * zg + blue * zb

    total = x + y + z
    if total == 0:
        return ChromaticityPoint(0.0, 0.0)
    return ChromaticityPoint(x / total, y / total)


def xy_from_hex(
    hex_color: str, mode: str = const.DEFAULT_GAMMA_MODE
) -> ChromaticityPoint:
    """Return the xy chromaticity of a hex color string."""
    return xy_from_rgb(hex_to_rgb(hex_color), mode)
