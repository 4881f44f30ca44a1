# -*- coding: utf-8 -*-
"""
PADDOL: Python Advanced Design & Dispersion Optimization Lab
Copyright (c) 2025 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

import numpy as np
from PySide6.QtCore import Qt

__all__ = [
    "ColorCode", "Rgba", "Hsv", "Color", "ColorMath", "ColorConverter",
    "DEFAULT_LAST_VALID_COLOR", "round_half_up", "is_hex", "is_typing_hex",
    "concatenate_pound_key", "normalize_hex_value",
]

logger = logging.getLogger(__name__)

DEFAULT_LAST_VALID_COLOR = "#000000"

_HEX_PATTERN = re.compile(r"^#?([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")
_TYPING_HEX_PATTERN = re.compile(r"^#?[0-9A-Fa-f]{0,6}$")
_FULL_WIDTH_SPACE = "\u3000"


class ColorCode:
    """String tags for the color representations handled by the picker."""
    HEX = "HEX"
    RGBA = "RGBA"
    HSV = "HSV"

    # Committed formats, in the order the format button cycles through them
    ORDER: Tuple[str, ...] = (HEX, RGBA)


@dataclass(frozen=True)
class Rgba:
    """RGBA color with integer channels 0-255 and alpha 0.0-1.0."""
    r: int = 0
    g: int = 0
    b: int = 0
    a: float = 1.0


@dataclass(frozen=True)
class Hsv:
    """HSV color: hue in degrees (0-360), saturation and value in percent (0-100)."""
    h: float = 0.0
    s: float = 0.0
    v: float = 0.0


@dataclass(frozen=True)
class Color:
    """A committed color: ``value`` is a hex string for HEX, an ``Rgba`` for RGBA."""
    format: str = ColorCode.HEX
    value: Union[str, Rgba] = ""


def round_half_up(x: float) -> int:
    """Rounds to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(x + 0.5))


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


# --- Hex Input Validation ---

def is_hex(value: Any) -> bool:
    """Returns True for a committed hex code: optional '#' plus 3 or 6 hex digits."""
    return isinstance(value, str) and _HEX_PATTERN.match(value) is not None


def is_typing_hex(value: Any) -> bool:
    """Returns True for a hex code that is still being typed (0 to 6 hex digits)."""
    return isinstance(value, str) and _TYPING_HEX_PATTERN.match(value) is not None


def concatenate_pound_key(value: str) -> str:
    """Prefixes '#' when the value does not start with one."""
    if not value.startswith("#"):
        return f"#{value}"
    return value


def normalize_hex_value(raw: Optional[str], previous: Any) -> Any:
    """Normalizes a keystroke in the hex field.

    Full-width spaces are stripped and committed codes get a leading '#'.
    Partially typed codes pass through unchanged. Anything containing
    non-hex characters is rejected and ``previous`` is returned instead.

    Args:
        raw (str, optional): The text currently in the input field.
        previous: The value held before the keystroke.

    Returns:
        The value to store: normalized text, ``''`` or ``previous``.
    """
    if raw is None:
        return previous

    value = raw.replace(_FULL_WIDTH_SPACE, "")
    if value == "":
        return value

    if is_hex(value):
        value = concatenate_pound_key(value)

    if not is_typing_hex(value):
        logger.debug("Rejected hex input %r, keeping %r", raw, previous)
        return previous

    return value


# --- Color Math Library ---

class ColorMath:
    """High-performance vectorized color conversion and utility methods."""

    @staticmethod
    def hsv_to_rgb_vectorized(h, s, v):
        """Converts HSV to RGB using NumPy vectorization.

        Args:
            h: Hue (0.0 - 1.0), scalar or numpy array.
            s: Saturation (0.0 - 1.0), scalar or numpy array.
            v: Value (0.0 - 1.0), scalar or numpy array.

        Returns:
            Tuple of (r, g, b) where values are 0-255.
        """
        h = np.asarray(h)
        h6 = h * 6.0
        r_base = np.clip(np.abs(h6 - 3) - 1, 0, 1)
        g_base = np.clip(2 - np.abs(h6 - 2), 0, 1)
        b_base = np.clip(2 - np.abs(h6 - 4), 0, 1)
        s_inv = 1.0 - s
        red   = v * (s_inv + s * r_base) * 255
        green = v * (s_inv + s * g_base) * 255
        blue  = v * (s_inv + s * b_base) * 255
        return red, green, blue

    @staticmethod
    def rgb_to_hsv_vectorized(r, g, b):
        """Converts RGB to HSV using NumPy vectorization.

        Args:
            r, g, b: Channels (0 - 255), scalars or numpy arrays.

        Returns:
            Tuple of (h, s, v), each 0.0 - 1.0. Achromatic inputs get h = 0.
        """
        rgb = np.stack(np.broadcast_arrays(r, g, b)).astype(np.float64) / 255.0
        red, green, blue = rgb
        mx = rgb.max(axis=0)
        mn = rgb.min(axis=0)
        delta = mx - mn

        with np.errstate(divide="ignore", invalid="ignore"):
            rc = (mx - red) / delta
            gc = (mx - green) / delta
            bc = (mx - blue) / delta
            hue = np.where(red == mx, bc - gc,
                           np.where(green == mx, 2.0 + rc - bc, 4.0 + gc - rc))
            hue = np.where(delta == 0, 0.0, (hue / 6.0) % 1.0)
            sat = np.where(mx == 0, 0.0, delta / mx)

        return hue, sat, mx

    @staticmethod
    def hex_to_rgb(value: str) -> Tuple[int, int, int]:
        """Parses a 3- or 6-digit hex code (with or without '#').

        Raises:
            ValueError: If ``value`` is not a committed hex code.
        """
        if not is_hex(value):
            raise ValueError(f"Invalid Hex format: {value!r}")
        digits = value.lstrip("#")
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)

    @staticmethod
    def rgb_to_hex(r: int, g: int, b: int) -> str:
        """Formats integer channels as a lowercase '#rrggbb' string."""
        return f"#{r:02x}{g:02x}{b:02x}"

    @staticmethod
    def get_contrast_color(r, g, b) -> Qt.GlobalColor:
        """Calculates luminance to return optimal contrast color (Black/White)."""
        lum = 0.299 * r + 0.587 * g + 0.114 * b
        return Qt.GlobalColor.black if lum > 140 else Qt.GlobalColor.white


# --- Color Space Converter ---

class ColorConverter:
    """Converts between the HEX, RGBA and HSV representations.

    Conversion never raises: a source that cannot be read is replaced by the
    ``fallback`` hex code, so a half typed value still renders a color.
    """

    @staticmethod
    def _read_source(code: str, value: Any, fallback: str) -> Tuple[float, float, float, float]:
        """Returns float (r, g, b, a) for the source, falling back on bad input."""
        if code == ColorCode.HSV:
            if isinstance(value, Hsv):
                h = _clamp(float(value.h), 0.0, 360.0) / 360.0
                s = _clamp(float(value.s), 0.0, 100.0) / 100.0
                v = _clamp(float(value.v), 0.0, 100.0) / 100.0
                r, g, b = ColorMath.hsv_to_rgb_vectorized(h, s, v)
                return float(r), float(g), float(b), 1.0
        elif code == ColorCode.HEX:
            if is_hex(value):
                r, g, b = ColorMath.hex_to_rgb(value)
                return float(r), float(g), float(b), 1.0
        else:
            channels = ColorConverter._read_rgba(value)
            if channels is not None:
                return channels

        logger.debug("Unreadable %s source %r, using %s", code, value, fallback)
        try:
            r, g, b = ColorMath.hex_to_rgb(fallback)
        except ValueError:
            r, g, b = ColorMath.hex_to_rgb(DEFAULT_LAST_VALID_COLOR)
        return float(r), float(g), float(b), 1.0

    @staticmethod
    def _read_rgba(value: Any) -> Optional[Tuple[float, float, float, float]]:
        if isinstance(value, Rgba):
            channels = (value.r, value.g, value.b, value.a)
        elif isinstance(value, Mapping) and all(k in value for k in ("r", "g", "b")):
            channels = (value["r"], value["g"], value["b"], value.get("a", 1.0))
        else:
            return None
        try:
            r, g, b, a = (float(c) for c in channels)
        except (TypeError, ValueError):
            return None
        if any(math.isnan(c) for c in (r, g, b, a)):
            return None
        return (_clamp(r, 0.0, 255.0), _clamp(g, 0.0, 255.0),
                _clamp(b, 0.0, 255.0), _clamp(a, 0.0, 1.0))

    @staticmethod
    def convert(code: str, value: Any, export_code: str,
                fallback: str = DEFAULT_LAST_VALID_COLOR) -> Union[str, Rgba, Hsv]:
        """Converts ``value`` from ``code`` into ``export_code``.

        Args:
            code (str): Source format (``ColorCode``).
            value: Hex string, ``Rgba`` (or r/g/b/a mapping) or ``Hsv``.
            export_code (str): Target format (``ColorCode``).
            fallback (str): Hex code used when the source cannot be read.

        Returns:
            ``'#rrggbb'`` for HEX, ``Rgba`` for RGBA, unrounded ``Hsv`` for HSV.
        """
        r, g, b, a = ColorConverter._read_source(code, value, fallback)

        if export_code == ColorCode.HSV:
            h, s, v = ColorMath.rgb_to_hsv_vectorized(r, g, b)
            return Hsv(h=float(h) * 360.0, s=float(s) * 100.0, v=float(v) * 100.0)

        ri, gi, bi = round_half_up(r), round_half_up(g), round_half_up(b)
        if export_code == ColorCode.RGBA:
            return Rgba(r=ri, g=gi, b=bi, a=a)
        return ColorMath.rgb_to_hex(ri, gi, bi)

    @staticmethod
    def is_monochrome(code: str, value: Any,
                      fallback: str = DEFAULT_LAST_VALID_COLOR) -> bool:
        """Returns True when the color has zero saturation (no defined hue)."""
        hsv = ColorConverter.convert(code, value, ColorCode.HSV, fallback)
        return hsv.s == 0
