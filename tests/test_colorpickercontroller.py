"""Unit tests for the interaction controller and the host update loop."""

import pytest

from colorpickerengine import Color, ColorCode, Hsv, Rgba
from colorpickerstate import ColorStateManager, ContainerRect
from colorpickercontroller import ColorPickerController


class FakeHost:
    """Stores emitted colors and feeds them back, like a real host would."""

    def __init__(self, color, selectable_formats=None, rect=None):
        self.state = ColorStateManager()
        self.selectable_formats = selectable_formats
        self.is_shown = False
        self.emitted = []
        self.toggles = []
        self.rect = rect or ContainerRect(left=0, top=0, width=200, height=100)
        self.controller = ColorPickerController(
            self.state,
            on_color_change=self.on_color_change,
            on_toggle=self.on_toggle,
            rect_provider=lambda: self.rect,
        )
        self.state.on_external_color_update(color, selectable_formats)

    def on_color_change(self, color, hsv=None):
        self.emitted.append((color, hsv))
        self.state.on_external_color_update(color, self.selectable_formats, hsv, self.is_shown)

    def on_toggle(self, show):
        self.toggles.append(show)
        self.is_shown = show
        self.state.on_external_color_update(self.state.current, self.selectable_formats,
                                            self.state.hsv_override, show)

    @property
    def last(self):
        return self.emitted[-1]


@pytest.fixture
def red_host():
    return FakeHost(Color(ColorCode.HEX, "#ff0000"))


@pytest.fixture
def rgba_host():
    return FakeHost(Color(ColorCode.RGBA, Rgba(10, 20, 30, 1.0)))


class TestSpectrumDrag:
    """Test press/move/release on the spectrum."""

    @pytest.mark.unit
    def test_press_top_left_gives_white(self, red_host):
        red_host.state.latest_valid_hue = 42
        red_host.controller.handle_spectrum_press(0, 0)
        color, hsv = red_host.last
        assert hsv == Hsv(0, 0, 100)
        assert color == Color(ColorCode.HEX, "#ffffff")
        assert red_host.state.latest_valid_hue == 42

    @pytest.mark.unit
    def test_move_without_press_is_ignored(self, red_host):
        red_host.controller.handle_spectrum_move(50, 50)
        red_host.controller.handle_spectrum_release(50, 50)
        assert red_host.emitted == []

    @pytest.mark.unit
    def test_drag_emits_once_per_event(self, red_host):
        c = red_host.controller
        c.handle_spectrum_press(100, 50)
        c.handle_spectrum_move(150, 25)
        c.handle_spectrum_release(200, 0)
        assert len(red_host.emitted) == 3
        assert [hsv for _, hsv in red_host.emitted] == [Hsv(0, 50, 50), Hsv(0, 75, 75), Hsv(0, 100, 100)]
        assert not c.is_catcher_active

    @pytest.mark.unit
    def test_release_outside_is_clamped(self, red_host):
        c = red_host.controller
        c.handle_spectrum_press(100, 50)
        c.handle_spectrum_release(500, -20)
        color, hsv = red_host.last
        assert hsv == Hsv(0, 100, 100)
        assert color == Color(ColorCode.HEX, "#ff0000")

    @pytest.mark.unit
    def test_hue_survives_dragging_through_gray(self):
        host = FakeHost(Color(ColorCode.HEX, "#00ff00"))
        c = host.controller
        c.handle_spectrum_press(200, 0)
        assert host.state.latest_valid_hue == 120
        c.handle_spectrum_move(0, 50)
        assert host.last[1] == Hsv(120, 0, 50)
        assert host.state.latest_valid_hue == 120
        c.handle_spectrum_release(0, 50)

        # Without an override the gray color still reports the remembered hue
        host.state.on_external_color_update(host.state.current)
        assert host.state.get_hsv().h == 120

    @pytest.mark.unit
    def test_rgba_format_is_kept(self, rgba_host):
        rgba_host.controller.handle_spectrum_press(0, 0)
        color, _ = rgba_host.last
        assert color.format == ColorCode.RGBA
        assert color.value == Rgba(255, 255, 255, 1.0)

    @pytest.mark.unit
    def test_no_geometry_no_emit(self):
        state = ColorStateManager()
        emitted = []
        controller = ColorPickerController(state, lambda c, h: emitted.append(c))
        controller.handle_spectrum_press(0, 0)
        assert emitted == []


class TestSliders:
    """Test hue and alpha sliders."""

    @pytest.mark.unit
    def test_hue_slider_keeps_saturation_and_brightness(self, red_host):
        red_host.controller.handle_hue_slider_change(120)
        color, hsv = red_host.last
        assert hsv == Hsv(120, 100, 100)
        assert color == Color(ColorCode.HEX, "#00ff00")
        assert red_host.state.latest_valid_hue == 120

    @pytest.mark.unit
    def test_hue_slider_on_gray_keeps_color(self):
        host = FakeHost(Color(ColorCode.HEX, "#808080"))
        host.state.latest_valid_hue = 200
        host.controller.handle_hue_slider_change(30)
        color, hsv = host.last
        assert color == Color(ColorCode.HEX, "#808080")
        assert hsv.h == 30
        assert host.state.latest_valid_hue == 200

    @pytest.mark.unit
    def test_alpha_slider_switches_to_rgba(self, red_host):
        red_host.controller.handle_alpha_slider_change(50)
        color, hsv = red_host.last
        assert color == Color(ColorCode.RGBA, Rgba(255, 0, 0, 0.5))
        assert hsv is None
        assert red_host.state.get_alpha_value() == 50

    @pytest.mark.unit
    def test_alpha_slider_passes_override_through(self, red_host):
        red_host.controller.handle_hue_slider_change(0)
        red_host.controller.handle_alpha_slider_change(7)
        color, hsv = red_host.last
        assert color.value.a == pytest.approx(0.07)
        assert hsv == Hsv(0, 100, 100)


class TestTextInput:
    """Test hex and RGBA fields."""

    @pytest.mark.unit
    def test_partial_hex_is_stored_verbatim(self, red_host):
        red_host.controller.handle_hex_input("ff00")
        assert red_host.last == (Color(ColorCode.HEX, "ff00"), None)
        assert red_host.state.current.value == "ff00"
        assert red_host.state.last_valid_color == "#ff0000"

    @pytest.mark.unit
    def test_invalid_keystroke_reverts_to_previous(self, red_host):
        red_host.controller.handle_hex_input("ff00")
        red_host.controller.handle_hex_input("ff00z")
        assert red_host.last == (Color(ColorCode.HEX, "ff00"), None)

    @pytest.mark.unit
    def test_committed_hex_updates_last_valid(self, red_host):
        red_host.controller.handle_hex_input("00ff00")
        assert red_host.last[0] == Color(ColorCode.HEX, "#00ff00")
        assert red_host.state.last_valid_color == "#00ff00"

    @pytest.mark.unit
    def test_cleared_hex_renders_last_valid(self, red_host):
        red_host.controller.handle_hex_input("")
        assert red_host.state.current.value == ""
        assert red_host.state.get_color_style() == "#ff0000"

    @pytest.mark.unit
    def test_empty_channel_is_zero(self, rgba_host):
        rgba_host.controller.handle_rgba_input("red", "")
        assert rgba_host.last[0].value == Rgba(0, 20, 30, 1.0)

    @pytest.mark.unit
    def test_channel_is_clamped(self, rgba_host):
        rgba_host.controller.handle_rgba_input("green", "300")
        assert rgba_host.last[0].value.g == 255

    @pytest.mark.unit
    def test_alpha_field_is_percent(self, rgba_host):
        rgba_host.controller.handle_rgba_input("alpha", "7")
        assert rgba_host.last[0].value.a == pytest.approx(0.07)
        assert rgba_host.state.get_alpha_value() == 7

    @pytest.mark.unit
    def test_unparseable_channel_keeps_previous(self, rgba_host):
        rgba_host.controller.handle_rgba_input("blue", "abc")
        assert rgba_host.last[0].value == Rgba(10, 20, 30, 1.0)

    @pytest.mark.unit
    def test_unknown_channel_is_ignored(self, rgba_host):
        rgba_host.controller.handle_rgba_input("purple", "1")
        assert rgba_host.emitted == []


class TestButtons:
    """Test format button and dummy input taps."""

    @pytest.mark.unit
    def test_format_button_cycles(self, red_host):
        red_host.controller.handle_format_button_tap()
        assert red_host.last == (Color(ColorCode.RGBA, Rgba(255, 0, 0, 1.0)), None)
        red_host.controller.handle_format_button_tap()
        assert red_host.last == (Color(ColorCode.HEX, "#ff0000"), None)

    @pytest.mark.unit
    def test_format_button_with_single_format(self):
        host = FakeHost(Color(ColorCode.HEX, "#ff0000"), {"HEX": True, "RGBA": False})
        host.controller.handle_format_button_tap()
        assert host.last[0] == Color(ColorCode.HEX, "#ff0000")

    @pytest.mark.unit
    def test_input_tap_toggles(self, red_host):
        red_host.controller.handle_input_tap()
        red_host.controller.handle_input_tap()
        assert red_host.toggles == [True, False]
