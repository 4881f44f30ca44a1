# -*- coding: utf-8 -*-
"""
PADDOL: Python Advanced Design & Dispersion Optimization Lab
Copyright (c) 2025 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""

import logging
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from colorpickerengine import Color, ColorCode, Hsv, Rgba, normalize_hex_value, round_half_up
from colorpickerstate import ColorStateManager, ContainerRect, CoordinateMapper, FormatCycler

__all__ = ["ColorPickerController", "RGBA_CHANNELS"]

logger = logging.getLogger(__name__)

ColorChangeCallback = Callable[[Color, Optional[Hsv]], None]
ToggleCallback = Callable[[bool], None]

# Input field name -> Rgba attribute
RGBA_CHANNELS = {"red": "r", "green": "g", "blue": "b", "alpha": "a"}


class ColorPickerController:
    """Translates picker UI events into color changes for the host.

    Every handler runs synchronously and calls ``on_color_change`` exactly
    once. The controller never writes ``state.current`` itself; the host
    feeds the emitted color back through ``on_external_color_update``.
    """

    def __init__(self,
                 state: ColorStateManager,
                 on_color_change: ColorChangeCallback,
                 on_toggle: Optional[ToggleCallback] = None,
                 rect_provider: Optional[Callable[[], ContainerRect]] = None):
        """Initializes the controller.

        Args:
            state (ColorStateManager): State shared with the rendering widget.
            on_color_change (callable): Receives ``(color, hsv)``; ``hsv`` is
                None when the change did not come from an HSV computation.
            on_toggle (callable, optional): Receives the requested panel visibility.
            rect_provider (callable, optional): Returns the spectrum bounds in
                page coordinates at the time of the event.
        """
        self.state = state
        self.on_color_change = on_color_change
        self.on_toggle = on_toggle
        self.rect_provider = rect_provider
        self.is_catcher_active = False

    def _emit(self, color: Color, hsv: Optional[Hsv] = None) -> None:
        self.on_color_change(color, hsv)

    # --- Spectrum ---

    def _emit_from_pointer(self, x: float, y: float) -> None:
        if self.rect_provider is None:
            logger.debug("No spectrum geometry available, pointer event ignored")
            return
        hsv = CoordinateMapper.pointer_to_color(x, y, self.rect_provider(), self.state.get_hsv().h)
        current_format = self.state.current.format
        color = Color(current_format, self.state.convert(ColorCode.HSV, hsv, current_format))
        self.state.record_hue_if_chromatic(hsv)
        self._emit(color, hsv)

    def handle_spectrum_press(self, x: float, y: float) -> None:
        self.is_catcher_active = True
        self._emit_from_pointer(x, y)

    def handle_spectrum_move(self, x: float, y: float) -> None:
        if not self.is_catcher_active:
            return
        self._emit_from_pointer(x, y)

    def handle_spectrum_release(self, x: float, y: float) -> None:
        """Ends the drag; a release outside the spectrum still emits the clamped color."""
        if not self.is_catcher_active:
            return
        self.is_catcher_active = False
        self._emit_from_pointer(x, y)

    # --- Sliders ---

    def handle_hue_slider_change(self, hue: float) -> None:
        """Replaces the hue while keeping saturation and brightness."""
        current = self.state.current
        derived = self.state.convert(current.format, current.value, ColorCode.HSV)
        hsv = Hsv(h=hue, s=round_half_up(derived.s), v=round_half_up(derived.v))
        color = Color(current.format, self.state.convert(ColorCode.HSV, hsv, current.format))
        self.state.record_hue_if_chromatic(hsv)
        self._emit(color, hsv)

    def handle_alpha_slider_change(self, alpha: float) -> None:
        """Sets the alpha in percent, switching the color to RGBA first if needed."""
        rgba = self._current_rgba()
        color = Color(ColorCode.RGBA, replace(rgba, a=self._percent_to_alpha(alpha)))
        self._emit(color, self.state.hsv_override)

    # --- Text inputs ---

    def handle_hex_input(self, raw: Optional[str]) -> None:
        """Stores the typed hex text, or reverts a keystroke that is not hex."""
        previous = self.state.current.value
        if self.state.current.format != ColorCode.HEX or not isinstance(previous, str):
            previous = self.state.convert(self.state.current.format, previous, ColorCode.HEX)
        self._emit(Color(ColorCode.HEX, normalize_hex_value(raw, previous)))

    def handle_rgba_input(self, channel: str, raw: Any) -> None:
        """Updates one RGBA field. Empty input counts as 0.

        Args:
            channel (str): 'red', 'green', 'blue' or 'alpha'.
            raw: Text or number from the field; alpha is given in percent.
        """
        attr = RGBA_CHANNELS.get(channel)
        if attr is None:
            logger.debug("Unknown RGBA channel %r", channel)
            return

        rgba = self._current_rgba()
        number = self._parse_number(raw)
        if number is None:
            logger.debug("Rejected %s input %r", channel, raw)
            self._emit(Color(ColorCode.RGBA, rgba))
            return

        if attr == "a":
            rgba = replace(rgba, a=self._percent_to_alpha(number))
        else:
            rgba = replace(rgba, **{attr: int(max(0, min(255, round_half_up(float(number)))))})
        self._emit(Color(ColorCode.RGBA, rgba))

    # --- Buttons ---

    def handle_format_button_tap(self) -> None:
        current = self.state.current
        color = FormatCycler.cycle_format(current.format, current.value,
                                          self.state.selectable_formats,
                                          self.state.last_valid_color)
        self._emit(color)

    def handle_input_tap(self) -> None:
        """Asks the host to open or close the picker panel."""
        if self.on_toggle is not None:
            self.on_toggle(not self.state.is_shown)

    # --- Helpers ---

    def _current_rgba(self) -> Rgba:
        current = self.state.current
        if current.format == ColorCode.RGBA and isinstance(current.value, Rgba):
            return current.value
        return self.state.convert(current.format, current.value, ColorCode.RGBA)

    @staticmethod
    def _parse_number(raw: Any) -> Optional[Decimal]:
        if raw is None or (isinstance(raw, str) and raw.strip() == ""):
            return Decimal(0)
        try:
            number = Decimal(str(raw).strip())
        except InvalidOperation:
            return None
        if not number.is_finite():
            return None
        return number

    @staticmethod
    def _percent_to_alpha(percent: Any) -> float:
        alpha = Decimal(str(percent)) / 100
        return float(max(Decimal(0), min(Decimal(1), alpha)))
