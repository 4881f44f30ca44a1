"""Unit tests for loading and saving picker settings."""

import json
import logging

import pytest

from colorpickersettings import PickerSettings


class TestFromDict:
    """Test per-entry validation."""

    @pytest.mark.unit
    def test_valid_entries_are_taken(self):
        settings = PickerSettings.from_dict({
            "touch_allow_range": 4,
            "initial_color": "#336699",
            "selectable_formats": {"HEX": True, "RGBA": False},
        })
        assert settings.touch_allow_range == 4
        assert settings.initial_color == "#336699"
        assert settings.selectable_formats == {"HEX": True, "RGBA": False}

    @pytest.mark.unit
    def test_invalid_entries_keep_defaults(self, caplog):
        with caplog.at_level(logging.WARNING, logger="colorpickersettings"):
            settings = PickerSettings.from_dict({
                "touch_allow_range": -1,
                "initial_color": "ff00",
                "spectrum_width": 12.5,
                "selectable_formats": {"HSV": True},
            })
        assert settings == PickerSettings()
        assert len(caplog.records) == 4

    @pytest.mark.unit
    def test_unknown_entry_is_reported(self, caplog):
        with caplog.at_level(logging.WARNING, logger="colorpickersettings"):
            PickerSettings.from_dict({"wheel_radius": 3})
        assert "wheel_radius" in caplog.text

    @pytest.mark.unit
    def test_bool_is_not_a_number(self):
        assert PickerSettings.from_dict({"touch_allow_range": True}).touch_allow_range == 10.0


class TestJsonFile:
    """Test reading from and writing to disk."""

    @pytest.mark.unit
    def test_missing_file_gives_defaults(self, tmp_path):
        assert PickerSettings.from_json(tmp_path / "absent.json") == PickerSettings()

    @pytest.mark.unit
    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("   ", encoding="utf-8")
        assert PickerSettings.from_json(path) == PickerSettings()

    @pytest.mark.unit
    def test_broken_json_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="colorpickersettings"):
            assert PickerSettings.from_json(path) == PickerSettings()
        assert "broken" in caplog.text

    @pytest.mark.unit
    def test_list_root_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert PickerSettings.from_json(path) == PickerSettings()

    @pytest.mark.unit
    def test_save_then_load(self, tmp_path):
        path = tmp_path / "settings.json"
        settings = PickerSettings(touch_allow_range=3.0, spectrum_width=300)
        assert settings.save(path) is None
        assert json.loads(path.read_text(encoding="utf-8"))["spectrum_width"] == 300
        assert PickerSettings.from_json(path) == settings

    @pytest.mark.unit
    def test_save_returns_error(self, tmp_path):
        error = PickerSettings().save(tmp_path / "missing_dir" / "settings.json")
        assert isinstance(error, OSError)
