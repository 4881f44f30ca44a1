# -*- coding: utf-8 -*-
"""
PADDOL: Python Advanced Design & Dispersion Optimization Lab
Copyright (c) 2025 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Union

from colorpickerengine import (
    Color, ColorCode, ColorConverter, DEFAULT_LAST_VALID_COLOR, Hsv, Rgba,
    concatenate_pound_key, is_hex, round_half_up,
)

__all__ = ["ContainerRect", "CoordinateMapper", "FormatCycler", "ColorStateManager",
           "default_selectable_formats"]

logger = logging.getLogger(__name__)


def default_selectable_formats() -> Dict[str, bool]:
    """Every committed format is selectable unless the host says otherwise."""
    return {code: True for code in ColorCode.ORDER}


@dataclass(frozen=True)
class ContainerRect:
    """Bounding rectangle of the spectrum surface in page coordinates."""
    left: float
    top: float
    width: float
    height: float


class CoordinateMapper:
    """Maps pointer positions on the spectrum to saturation/brightness and back."""

    # The vertical coordinate never drops below this. A pointer on the very top
    # edge therefore maps to y = 0.1 instead of 0; keep it as is.
    MIN_POINTER_Y = 0.1

    @staticmethod
    def pointer_to_color(pointer_x: float, pointer_y: float,
                         rect: ContainerRect, hue: float) -> Hsv:
        """Converts a pointer position into an HSV color.

        The x axis carries saturation (left 0%, right 100%) and the y axis
        brightness (top 100%, bottom 0%). Positions outside ``rect`` are
        clamped to its edges. The hue is passed through unchanged.

        Args:
            pointer_x (float): Page x coordinate of the pointer.
            pointer_y (float): Page y coordinate of the pointer.
            rect (ContainerRect): Spectrum bounds in page coordinates.
            hue (float): Current hue in degrees.

        Returns:
            Hsv: ``s`` and ``v`` are whole percentages in [0, 100].
        """
        x = min(max(pointer_x - rect.left, 0), rect.width)
        y = min(max(pointer_y - rect.top, CoordinateMapper.MIN_POINTER_Y), rect.height)

        saturation = round_half_up(x / rect.width * 100) if rect.width > 0 else 0
        brightness = 100 - round_half_up(y / rect.height * 100) if rect.height > 0 else 100

        return Hsv(h=hue, s=saturation, v=brightness)

    @staticmethod
    def hsv_to_spectrum_position(hsv: Hsv, axis: str) -> float:
        """Returns the knob position (0-100) along ``axis``.

        Args:
            hsv (Hsv): The color to locate.
            axis (str): 'saturation' (left to right) or 'brightness'
                (top to bottom, so inverted relative to ``v``).
        """
        if axis == "saturation":
            return max(0, min(100, hsv.s))
        if axis == "brightness":
            return max(0, min(100, 100 - hsv.v))
        return 0


class FormatCycler:
    """Steps the active representation through ``ColorCode.ORDER``."""

    @staticmethod
    def cycle_format(current_format: str, current_value: Any,
                     selectable_formats: Mapping[str, bool],
                     fallback: str = DEFAULT_LAST_VALID_COLOR) -> Color:
        """Returns the current color converted into the next selectable format.

        The current format counts as selectable even if ``selectable_formats``
        omits it, so the loop always ends. An unknown current format yields
        an empty HEX color.
        """
        order = ColorCode.ORDER
        if current_format not in order:
            return Color(ColorCode.HEX, "")

        index = order.index(current_format)
        while True:
            index = (index + 1) % len(order)
            if order[index] == current_format or selectable_formats.get(order[index]):
                break

        next_format = order[index]
        value = ColorConverter.convert(current_format, current_value, next_format, fallback)
        return Color(next_format, value)


class ColorStateManager:
    """Owns the authoritative color of the picker and its fallback memory.

    The host supplies ``current`` on every update cycle. Two pieces of memory
    survive between cycles: the last committed hex code, used whenever a
    source cannot be converted, and the last hue carried by a chromatic color,
    used whenever the color is a gray whose hue is undefined.

    Attributes:
        current (Color): The color last supplied by the host.
        selectable_formats (Dict[str, bool]): Formats the format button may land on.
        default_formats (Dict[str, bool]): Formats used when the host passes none.
        last_valid_color (str): Last committed hex code seen, always with a leading "#".
        latest_valid_hue (float): Hue of the last chromatic pointer/slider color.
        hsv_override (Hsv, optional): Host-supplied HSV, used verbatim mid-drag.
        is_shown (bool): Whether the host currently shows the picker panel.
    """

    def __init__(self, initial_color: str = DEFAULT_LAST_VALID_COLOR,
                 default_formats: Optional[Mapping[str, bool]] = None):
        self.current: Color = Color(ColorCode.HEX, "")
        # Used whenever the host does not pass selectable formats
        self.default_formats: Dict[str, bool] = (
            dict(default_formats) if default_formats is not None else default_selectable_formats()
        )
        self.selectable_formats: Dict[str, bool] = dict(self.default_formats)
        self.last_valid_color: str = (concatenate_pound_key(initial_color) if is_hex(initial_color)
                                      else DEFAULT_LAST_VALID_COLOR)
        self.latest_valid_hue: float = 0
        self.hsv_override: Optional[Hsv] = None
        self.is_shown: bool = False

    def on_external_color_update(self, color: Optional[Color] = None,
                                 selectable_formats: Optional[Mapping[str, bool]] = None,
                                 hsv: Optional[Hsv] = None,
                                 is_shown: Optional[bool] = None) -> None:
        """Takes over the props the host passes on an update cycle."""
        self.current = color if color is not None else Color(ColorCode.HEX, "")
        if selectable_formats is None:
            self.selectable_formats = dict(self.default_formats)
        else:
            self.selectable_formats = dict(selectable_formats)

        if self.current.format == ColorCode.HEX and is_hex(self.current.value):
            self.last_valid_color = concatenate_pound_key(self.current.value)

        if not self.selectable_formats.get(self.current.format):
            self.selectable_formats[self.current.format] = True

        self.hsv_override = hsv
        if is_shown is not None:
            self.is_shown = is_shown

    def convert(self, code: str, value: Any, export_code: str) -> Union[str, Rgba, Hsv]:
        return ColorConverter.convert(code, value, export_code, self.last_valid_color)

    def is_monochrome(self, code: str, value: Any) -> bool:
        return ColorConverter.is_monochrome(code, value, self.last_valid_color)

    def get_hsv(self) -> Hsv:
        """Returns the HSV of the current color.

        A host-supplied override wins and is returned as a copy. Otherwise the
        HSV is derived from ``current``: hue rounded to whole degrees,
        saturation and value to two decimals of a percent. A gray color takes
        ``latest_valid_hue`` as its hue.
        """
        if self.hsv_override is not None:
            return replace(self.hsv_override)

        hsv = self.convert(self.current.format, self.current.value, ColorCode.HSV)
        hue = round_half_up(hsv.h)
        if hsv.s == 0:
            hue = self.latest_valid_hue
        return Hsv(
            h=hue,
            s=round_half_up(hsv.s * 100) / 100,
            v=round_half_up(hsv.v * 100) / 100,
        )

    def record_hue_if_chromatic(self, hsv: Hsv) -> None:
        """Remembers the hue of ``hsv`` unless it is a gray (saturation 0)."""
        if hsv.s > 0:
            self.latest_valid_hue = hsv.h

    def get_spectrum_position(self, axis: str) -> float:
        return CoordinateMapper.hsv_to_spectrum_position(self.get_hsv(), axis)

    # --- Derived display values ---

    def get_alpha_value(self) -> float:
        """Alpha of the current color in percent; HEX colors are opaque."""
        if self.current.format == ColorCode.RGBA and isinstance(self.current.value, Rgba):
            # Decimal keeps 0.07 -> 7.0 instead of 7.000000000000001
            return float(Decimal(str(self.current.value.a)) * 100)
        return 100.0

    def get_color_style(self) -> str:
        """CSS-like color string used to paint the preview."""
        value = self.current.value
        if self.current.format == ColorCode.HEX:
            return concatenate_pound_key(value) if is_hex(value) else self.last_valid_color
        if self.current.format == ColorCode.RGBA and isinstance(value, Rgba):
            return f"rgba({value.r},{value.g},{value.b},{value.a})"
        return ""

    def get_dummy_value(self) -> str:
        """Text for the read-only input that opens the picker."""
        value = self.current.value
        if self.current.format == ColorCode.HEX and isinstance(value, str):
            return concatenate_pound_key(value)
        if self.current.format == ColorCode.RGBA and isinstance(value, Rgba):
            return f"{value.r},{value.g},{value.b},{value.a}"
        return ""

    def get_rgba_value(self, channel: str) -> Union[int, str]:
        """Numeric value of 'red', 'green' or 'blue'; '' when not applicable."""
        value = self.current.value
        if not isinstance(value, Rgba):
            return ""
        return {"red": value.r, "green": value.g, "blue": value.b}.get(channel, "")

    def get_display_rgba(self) -> Rgba:
        """The current color as ``Rgba``, falling back like the converter does."""
        return self.convert(self.current.format, self.current.value, ColorCode.RGBA)
