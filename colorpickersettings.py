# -*- coding: utf-8 -*-
"""
PADDOL: Python Advanced Design & Dispersion Optimization Lab
Copyright (c) 2025 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""
import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from colorpickerengine import ColorCode, DEFAULT_LAST_VALID_COLOR, is_hex

__all__ = ["PickerSettings", "SETTINGS_FILENAME"]

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "colorpicker_settings.json"


def _default_formats() -> Dict[str, bool]:
    return {code: True for code in ColorCode.ORDER}


@dataclass
class PickerSettings:
    """Tunable behaviour of the color picker widget.

    Attributes:
        touch_allow_range (float): Pointer travel in pixels after which a press
            no longer counts as a tap.
        selectable_formats (Dict[str, bool]): Formats the format button offers
            when the host does not pass its own.
        initial_color (str): Hex code used as fallback before any valid color was seen.
        spectrum_width (int): Preferred spectrum width in pixels.
        spectrum_height (int): Preferred spectrum height in pixels.
    """
    touch_allow_range: float = 10.0
    selectable_formats: Dict[str, bool] = field(default_factory=_default_formats)
    initial_color: str = DEFAULT_LAST_VALID_COLOR
    spectrum_width: int = 240
    spectrum_height: int = 160

    @staticmethod
    def _is_positive_number(value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0

    @staticmethod
    def _is_format_map(value: Any) -> bool:
        if not isinstance(value, dict) or not value:
            return False
        return all(k in ColorCode.ORDER and isinstance(v, bool) for k, v in value.items())

    @classmethod
    def _validators(cls) -> Dict[str, Any]:
        return {
            "touch_allow_range": cls._is_positive_number,
            "selectable_formats": cls._is_format_map,
            "initial_color": is_hex,
            "spectrum_width": lambda v: cls._is_positive_number(v) and isinstance(v, int),
            "spectrum_height": lambda v: cls._is_positive_number(v) and isinstance(v, int),
        }

    @classmethod
    def from_dict(cls, raw_data: Dict[str, Any]) -> "PickerSettings":
        """Builds settings from a dict, keeping the default for every invalid entry."""
        settings = cls()
        validators = cls._validators()

        for name, value in raw_data.items():
            check = validators.get(name)
            if check is None:
                logger.warning("[%s] Skipping unknown setting '%s'", cls.__name__, name)
                continue
            if not check(value):
                logger.warning("[%s] Skipping '%s' (invalid value: %r)", cls.__name__, name, value)
                continue
            setattr(settings, name, dict(value) if isinstance(value, dict) else value)

        return settings

    @classmethod
    def from_json(cls, json_filename: Union[str, Path] = SETTINGS_FILENAME) -> "PickerSettings":
        """Loads settings from a JSON file.

        A missing or empty file, broken JSON or a root element that is not an
        object all give the defaults.
        """
        settings_path = Path(json_filename)
        if not settings_path.exists():
            return cls()

        try:
            with settings_path.open('r', encoding='utf-8') as f:
                content = f.read().strip()
        except OSError as e:
            logger.warning("[%s] Could not read %s: %s", cls.__name__, settings_path, e)
            return cls()

        if not content:
            return cls()

        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            logger.warning("[%s] JSON syntax in %s is broken, using defaults", cls.__name__, settings_path)
            return cls()

        if not isinstance(data, dict):
            logger.warning("[%s] Root JSON element is not a dict, using defaults", cls.__name__)
            return cls()

        return cls.from_dict(data)

    def save(self, json_filename: Union[str, Path] = SETTINGS_FILENAME) -> Optional[Exception]:
        """Writes the settings as JSON. Returns the exception instead of raising it."""
        settings_path = Path(json_filename)
        try:
            with settings_path.open('w', encoding='utf-8') as f:
                json.dump(asdict(self), f, indent=4)
            return None
        except OSError as e:
            return e
