# -*- coding: utf-8 -*-
"""
PADDOL: Python Advanced Design & Dispersion Optimization Lab
Copyright (c) 2025 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""
import sys
import logging
from functools import partial
from typing import Dict, Optional, Union

import numpy as np
from PySide6.QtWidgets import (QApplication, QDialog, QWidget, QVBoxLayout, QHBoxLayout,
                               QSizePolicy, QLabel, QGroupBox, QDialogButtonBox, QLineEdit,
                               QPushButton, QStackedWidget, QGridLayout)
from PySide6.QtGui import (QPainter, QImage, QPixmap, QColor, QIcon, QPen, QBrush,
                           QMouseEvent, QWheelEvent, QLinearGradient, QPaintDevice,
                           QIntValidator)
from PySide6.QtCore import Qt, Signal, QPoint, QPointF, QRectF

from colorpickerengine import Color, ColorCode, ColorConverter, ColorMath, Hsv, Rgba
from colorpickerstate import ColorStateManager, ContainerRect
from colorpickercontroller import ColorPickerController
from colorpickersettings import PickerSettings
from qt_gesturebinder import GestureBinder

__all__ = ["render_spectrum", "SpectrumCanvas", "ChannelSlider", "ColorSwatch",
           "ColorPickerWidget", "ColorPickerDialog"]

logger = logging.getLogger(__name__)


def render_spectrum(device: QPaintDevice, hue: float) -> None:
    """Paints the saturation/brightness spectrum for ``hue`` onto ``device``.

    Two gradients are layered over the full rect: white to the pure hue from
    left to right, then transparent to opaque black from top to bottom,
    composited source-over.

    Args:
        device (QPaintDevice): Target surface, e.g. a premultiplied ARGB QImage.
        hue (float): Hue in degrees (0-360).
    """
    w, h = device.width(), device.height()
    if w <= 0 or h <= 0:
        return
    rect = QRectF(0, 0, w, h)
    hue_hex = ColorConverter.convert(ColorCode.HSV, Hsv(h=hue, s=100, v=100), ColorCode.HEX)

    p = QPainter(device)
    p.setCompositionMode(QPainter.CompositionMode.CompositionMode_Source)
    p.fillRect(rect, Qt.GlobalColor.transparent)
    p.setCompositionMode(QPainter.CompositionMode.CompositionMode_SourceOver)

    # 1. Saturation: white -> hue
    horizontal = QLinearGradient(0, 0, w, 0)
    horizontal.setColorAt(0, QColor(255, 255, 255))
    horizontal.setColorAt(1, QColor(hue_hex))
    p.fillRect(rect, QBrush(horizontal))

    # 2. Brightness: transparent -> black
    vertical = QLinearGradient(0, 0, 0, h)
    vertical.setColorAt(0, QColor(0, 0, 0, 0))
    vertical.setColorAt(1, QColor(0, 0, 0, 255))
    p.fillRect(rect, QBrush(vertical))
    p.end()


# --- UI Components ---

class SpectrumCanvas(QWidget):
    """The 2D saturation (x) / brightness (y) surface with its knob.

    The gradient texture is cached and only re-rendered when the widget is
    shown, resized or the hue changes; knob moves just repaint.
    """

    def __init__(self, width: int = 240, height: int = 160):
        """Initializes the SpectrumCanvas.

        Args:
            width (int): Minimum width in pixels. Defaults to 240.
            height (int): Minimum height in pixels. Defaults to 160.
        """
        super().__init__()
        self.setObjectName("spectrum")
        self.setMinimumSize(width, height)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setCursor(Qt.CursorShape.CrossCursor)

        # State
        self._hue: Optional[float] = None
        self._knob_pos = (0.0, 0.0)  # (saturation axis, brightness axis) in percent
        self._knob_color = QColor(0, 0, 0)

        # Caching & Rendering
        self._pixmap: Optional[QPixmap] = None
        self.render_count = 0

    @property
    def hue(self) -> Optional[float]:
        return self._hue

    def set_hue(self, hue: float):
        """Sets the hue of the gradient; re-renders only if it changed."""
        if self._hue == hue:
            return
        self._hue = hue
        self._update_render()

    def set_knob(self, saturation_pos: float, brightness_pos: float, color: QColor):
        """Moves the knob.

        Args:
            saturation_pos (float): Horizontal position in percent (0-100).
            brightness_pos (float): Vertical position in percent (0-100).
            color (QColor): Fill color of the knob.
        """
        self._knob_pos = (saturation_pos, brightness_pos)
        self._knob_color = color
        self.update()

    def knob_position(self):
        return self._knob_pos

    def container_rect(self) -> ContainerRect:
        """Bounds of the canvas in global (page) coordinates."""
        origin = self.mapToGlobal(QPoint(0, 0))
        return ContainerRect(origin.x(), origin.y(), self.width(), self.height())

    def _update_render(self):
        """Renders the spectrum for the current hue into the cached pixmap."""
        if self._hue is None or self.width() <= 0 or self.height() <= 0:
            return
        img = QImage(self.width(), self.height(), QImage.Format.Format_ARGB32_Premultiplied)
        render_spectrum(img, self._hue)
        self._pixmap = QPixmap.fromImage(img)
        self.render_count += 1
        self.update()

    def showEvent(self, e):
        """Renders the spectrum when the canvas is shown."""
        self._update_render()
        super().showEvent(e)

    def resizeEvent(self, e):
        """Handles resize events to regenerate the texture."""
        self._update_render()
        super().resizeEvent(e)

    def paintEvent(self, e):
        """Paints the cached spectrum and the knob."""
        if not self._pixmap:
            return
        p = QPainter(self)
        p.setRenderHint(QPainter.RenderHint.Antialiasing)
        p.drawPixmap(0, 0, self._pixmap)

        sat_pos, bri_pos = self._knob_pos
        center = QPointF(sat_pos / 100.0 * self.width(), bri_pos / 100.0 * self.height())
        kc = self._knob_color
        border_color = ColorMath.get_contrast_color(kc.red(), kc.green(), kc.blue())

        knob_radius = 7
        p.setBrush(kc)
        p.setPen(QPen(border_color, 2))
        p.drawEllipse(center, knob_radius, knob_radius)


class ChannelSlider(QWidget):
    """A slider with a gradient track for the hue (0-360) or alpha (0-100) channel."""
    valueChanged = Signal(int)

    RANGES = {'hue': 360, 'alpha': 100}

    def __init__(self, mode='hue'):
        """Initializes the ChannelSlider.

        Args:
            mode (str): 'hue' or 'alpha'. Defaults to 'hue'.
        """
        super().__init__()
        self.mode = mode
        self.maximum = self.RANGES.get(mode, 100)
        self.value = self.maximum if mode == 'alpha' else 0
        self.setFixedHeight(28)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        self._pixmap = None
        self._rgb = (255, 0, 0)
        self._is_dragging = False

    def setValue(self, val: int, block_signals: bool = False):
        """Sets the slider value programmatically with bounds checking.

        Args:
            val (int): The value to set (0 - maximum).
            block_signals (bool): If True, prevents emitting the valueChanged signal.
                Defaults to False.
        """
        val = max(0, min(self.maximum, int(val)))
        if self.value == val:
            return

        self.value = val
        if not block_signals:
            self.valueChanged.emit(self.value)
        self.update()

    def set_color_state(self, r: int, g: int, b: int):
        """Sets the color the alpha track fades in; ignored by the hue track."""
        if self._rgb == (r, g, b) and self._pixmap is not None:
            return
        self._rgb = (r, g, b)
        self._generate_texture()
        self.update()

    def _generate_texture(self):
        """Generates the 1px high track texture."""
        w = max(256, self.width())
        steps = np.linspace(0, 1, w)
        rgba = np.zeros((1, w, 4), dtype=np.uint8)
        if self.mode == 'hue':
            r, g, b = ColorMath.hsv_to_rgb_vectorized(steps, 1.0, 1.0)
        else:
            # Fade from the mid-gray backdrop into the opaque color
            backdrop = 128.0
            r, g, b = (backdrop + (c - backdrop) * steps for c in self._rgb)
        rgba[0, :, 0], rgba[0, :, 1], rgba[0, :, 2], rgba[0, :, 3] = r, g, b, 255
        img = QImage(rgba.data, w, 1, 4 * w, QImage.Format.Format_RGBA8888)
        self._pixmap = QPixmap.fromImage(img.copy())

    def _update_value_from_pos(self, x):
        """Updates the slider value based on the given mouse position.

        Args:
            x (float): The x-coordinate of the mouse position.
        """
        padding = self.height() // 2
        eff_w = self.width() - 2 * padding
        if eff_w <= 0: return
        pct = max(0, min(1, (x - padding) / eff_w))
        self.setValue(round(pct * self.maximum))

    def mousePressEvent(self, e: QMouseEvent):
        """Starts dragging the slider handle."""
        if e.button() == Qt.MouseButton.LeftButton:
            self._is_dragging = True
            self._update_value_from_pos(e.position().x())

    def mouseMoveEvent(self, e: QMouseEvent):
        """Updates the slider value while dragging."""
        if self._is_dragging: self._update_value_from_pos(e.position().x())

    def mouseReleaseEvent(self, e: QMouseEvent):
        """Stops dragging the slider handle."""
        self._is_dragging = False

    def wheelEvent(self, e: QWheelEvent):
        """Handles mouse wheel events to increment/decrement the value.

        Args:
            e (QWheelEvent): The wheel event containing scroll information.
        """
        delta = e.angleDelta().y()
        if delta == 0:
            return

        increment = 1 if delta > 0 else -1
        self.setValue(self.value + increment)
        e.accept()

    def resizeEvent(self, e):
        """Handles resize events to regenerate the texture."""
        self._generate_texture()
        super().resizeEvent(e)

    def paintEvent(self, e):
        """Paints the slider with the gradient background and handle."""
        p = QPainter(self)
        p.setRenderHint(QPainter.RenderHint.Antialiasing)
        h, w = self.height(), self.width()

        track_h = 20
        if self._pixmap:
            rect = QRectF(0, (h - track_h)/2, w, track_h)
            p.setBrush(QBrush(self._pixmap.scaled(w, int(track_h))))
            p.setPen(Qt.PenStyle.NoPen)
            p.drawRoundedRect(rect, track_h/2, track_h/2)

        padding = h // 2
        x_pos = padding + (self.value / self.maximum) * (w - 2 * padding)
        center = QPointF(x_pos, h/2)

        if self.mode == 'hue':
            r, g, b = ColorMath.hsv_to_rgb_vectorized(self.value / 360.0, 1.0, 1.0)
        else:
            r, g, b = self._rgb

        handle_color = QColor(int(r), int(g), int(b))
        border_color = ColorMath.get_contrast_color(r, g, b)

        handle_radius = 7
        p.setBrush(handle_color)
        p.setPen(QPen(border_color, 2))
        p.drawEllipse(center, handle_radius, handle_radius)


class ColorSwatch(QWidget):
    """Rounded preview of the current color, including its alpha."""

    def __init__(self, size: int = 28):
        super().__init__()
        self.setObjectName("swatch")
        self.setFixedSize(size, size)
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self._color = QColor(0, 0, 0)

    def set_color(self, c: QColor):
        self._color = c
        self.update()

    def color(self) -> QColor:
        return QColor(self._color)

    def paintEvent(self, event):
        """Paints a checker backdrop and the color on top of it."""
        p = QPainter(self)
        p.setRenderHint(QPainter.RenderHint.Antialiasing)
        r = QRectF(self.rect()).adjusted(2, 2, -2, -2)

        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(QBrush(QColor(200, 200, 200), Qt.BrushStyle.Dense4Pattern))
        p.drawRoundedRect(r, 6, 6)

        p.setBrush(QBrush(self._color))
        p.setPen(QPen(QColor("#444"), 1))
        p.drawRoundedRect(r, 6, 6)


# --- Picker ---

class ColorPickerWidget(QWidget):
    """Color picker with a spectrum, hue and alpha sliders and text inputs.

    The widget does not keep the picked color: every interaction is emitted
    through ``colorChanged(color, hsv)`` and the host passes the color back
    via ``set_props`` on its next update. ``toggled(bool)`` asks the host to
    open or close the panel.
    """
    colorChanged = Signal(object, object)
    toggled = Signal(bool)

    GROUPBOX_STYLE = """
        QGroupBox {
            border: 1px solid #444;
            border-radius: 10px;
            margin-top: 10px;
            padding: 4px;
            padding-top: 8px;
            font-weight: bold;
            color: #ddd;
        }
        QGroupBox::title {
            subcontrol-origin: margin;
            subcontrol-position: top left;
            padding: 0 5px;
            left: 10px;
            background-color: #282828;
        }
    """

    FORMAT_BUTTON_STYLE = """
        QPushButton {
            background-color: #333;
            color: #ccc;
            border: 1px solid #444;
            border-radius: 4px;
            padding: 0px 6px;
            font-weight: bold;
        }
        QPushButton[pressed="true"] {
            background-color: #222;
            border: 1px solid #3daee9;
            color: #3daee9;
        }
    """

    INPUT_STYLE = """
        QLineEdit {
            font-family: monospace;
            padding: 4px;
            background: #333;
            color: white;
            border: 1px solid #444;
            border-radius: 4px;
        }
    """

    def __init__(self, settings: Optional[PickerSettings] = None, parent: Optional[QWidget] = None):
        """Initializes the ColorPickerWidget.

        Args:
            settings (PickerSettings, optional): Behaviour settings. Defaults to
                ``PickerSettings()``.
            parent (QWidget, optional): Parent widget.
        """
        super().__init__(parent)
        self.settings = settings or PickerSettings()
        self.state = ColorStateManager(self.settings.initial_color, self.settings.selectable_formats)
        self.binder = GestureBinder(self.settings.touch_allow_range, self)
        self.init_ui()
        self.controller = ColorPickerController(
            self.state,
            on_color_change=self.colorChanged.emit,
            on_toggle=self.toggled.emit,
            rect_provider=self.spectrum.container_rect,
        )
        self._connect_inputs()
        self._sync_ui()

    def init_ui(self):
        """Builds the UI elements."""
        main_layout = QVBoxLayout(self)
        main_layout.setSpacing(8)
        main_layout.setContentsMargins(12, 12, 12, 12)

        # --- Section 1: Preview / toggle ---
        top_row = QHBoxLayout()
        self.swatch = ColorSwatch()
        self.dummy_input = QLineEdit()
        self.dummy_input.setObjectName("dummy_input")
        self.dummy_input.setReadOnly(True)
        self.dummy_input.setCursor(Qt.CursorShape.PointingHandCursor)
        self.dummy_input.setStyleSheet(self.INPUT_STYLE)
        top_row.addWidget(self.swatch)
        top_row.addWidget(self.dummy_input, 1)
        main_layout.addLayout(top_row)

        # --- Section 2: Picker panel ---
        self.panel = QGroupBox("Color")
        self.panel.setStyleSheet(self.GROUPBOX_STYLE)
        panel_layout = QVBoxLayout(self.panel)
        panel_layout.setSpacing(8)
        panel_layout.setContentsMargins(12, 12, 12, 12)

        self.spectrum = SpectrumCanvas(self.settings.spectrum_width, self.settings.spectrum_height)
        self.slider_hue = ChannelSlider(mode='hue')
        self.slider_alpha = ChannelSlider(mode='alpha')

        panel_layout.addWidget(self.spectrum, 1)
        panel_layout.addWidget(QLabel("Hue"))
        panel_layout.addWidget(self.slider_hue)
        panel_layout.addWidget(QLabel("Alpha"))
        panel_layout.addWidget(self.slider_alpha)

        # Code row: format button + HEX or RGBA fields
        code_row = QHBoxLayout()
        self.btn_format = QPushButton(ColorCode.HEX)
        self.btn_format.setObjectName("format_button")
        self.btn_format.setStyleSheet(self.FORMAT_BUTTON_STYLE)
        self.btn_format.setFixedHeight(28)
        self.btn_format.setCursor(Qt.CursorShape.PointingHandCursor)
        self.btn_format.setToolTip("Switch color code")

        self.code_stack = QStackedWidget()
        self.hex_input = QLineEdit()
        self.hex_input.setStyleSheet(self.INPUT_STYLE)
        self.hex_input.setMaxLength(7)
        self.code_stack.addWidget(self.hex_input)

        rgba_page = QWidget()
        rgba_layout = QGridLayout(rgba_page)
        rgba_layout.setContentsMargins(0, 0, 0, 0)
        self.rgba_inputs: Dict[str, QLineEdit] = {}
        for col, (channel, label, top) in enumerate((("red", "R", 255), ("green", "G", 255),
                                                     ("blue", "B", 255), ("alpha", "A%", 100))):
            field = QLineEdit()
            field.setStyleSheet(self.INPUT_STYLE)
            field.setValidator(QIntValidator(0, top, field))
            rgba_layout.addWidget(QLabel(label), 0, col, Qt.AlignmentFlag.AlignCenter)
            rgba_layout.addWidget(field, 1, col)
            self.rgba_inputs[channel] = field
        self.code_stack.addWidget(rgba_page)

        code_row.addWidget(self.btn_format)
        code_row.addWidget(self.code_stack, 1)
        panel_layout.addLayout(code_row)

        main_layout.addWidget(self.panel)
        main_layout.addStretch()

    def _connect_inputs(self):
        """Wires sliders and text fields to the controller."""
        self.slider_hue.valueChanged.connect(self.controller.handle_hue_slider_change)
        self.slider_alpha.valueChanged.connect(self.controller.handle_alpha_slider_change)
        self.hex_input.textEdited.connect(self.controller.handle_hex_input)
        for channel, field in self.rgba_inputs.items():
            field.textEdited.connect(partial(self.controller.handle_rgba_input, channel))

    def _bind_gestures(self):
        """Binds tap and drag gestures; repeated calls keep existing bindings."""
        c = self.controller
        self.binder.bind(self.dummy_input, on_tap=c.handle_input_tap)
        self.binder.bind(self.swatch, on_tap=c.handle_input_tap)
        self.binder.bind(self.btn_format, on_tap=c.handle_format_button_tap)
        self.binder.bind(self.spectrum,
                         on_press=c.handle_spectrum_press,
                         on_move=c.handle_spectrum_move,
                         on_release=c.handle_spectrum_release)

    def showEvent(self, e):
        self._bind_gestures()
        super().showEvent(e)

    def hideEvent(self, e):
        self.binder.unbind_all()
        self.controller.is_catcher_active = False
        super().hideEvent(e)

    def set_props(self,
                  color: Optional[Color] = None,
                  selectable_formats: Optional[Dict[str, bool]] = None,
                  hsv: Optional[Hsv] = None,
                  is_shown: Optional[bool] = None):
        """Applies the props of a host update cycle and refreshes the UI.

        Args:
            color (Color, optional): The current color. Defaults to an empty HEX color.
            selectable_formats (dict, optional): ``{'HEX': bool, 'RGBA': bool}``.
            hsv (Hsv, optional): HSV override from the last interaction.
            is_shown (bool, optional): Whether the picker panel is open.
        """
        self.state.on_external_color_update(color, selectable_formats, hsv, is_shown)
        self._sync_ui()

    def _sync_ui(self):
        """Pushes the state into every sub-widget without emitting signals."""
        state = self.state
        hsv = state.get_hsv()
        rgba: Rgba = state.get_display_rgba()

        self.spectrum.set_hue(hsv.h)
        self.spectrum.set_knob(state.get_spectrum_position('saturation'),
                               state.get_spectrum_position('brightness'),
                               QColor(rgba.r, rgba.g, rgba.b))

        self.slider_hue.setValue(round(hsv.h), block_signals=True)
        self.slider_alpha.set_color_state(rgba.r, rgba.g, rgba.b)
        self.slider_alpha.setValue(round(state.get_alpha_value()), block_signals=True)

        self.swatch.set_color(QColor(rgba.r, rgba.g, rgba.b, round(rgba.a * 255)))
        self.dummy_input.setText(state.get_dummy_value())
        self.btn_format.setText(state.current.format)

        if state.current.format == ColorCode.RGBA:
            self.code_stack.setCurrentIndex(1)
            for channel, field in self.rgba_inputs.items():
                if channel == "alpha":
                    text = f"{state.get_alpha_value():g}"
                else:
                    text = str(state.get_rgba_value(channel))
                if field.text() != text:
                    field.setText(text)
        else:
            self.code_stack.setCurrentIndex(0)
            if state.is_shown and self.hex_input.text() != state.current.value:
                self.hex_input.setText(state.current.value)

        self.panel.setVisible(state.is_shown)


# --- Host ---

class ColorPickerDialog(QDialog):
    """A dialog hosting the ColorPickerWidget.

    The dialog plays the host role: it stores the color emitted by the picker
    and passes it back on the next update, together with the HSV of the
    interaction that produced it.
    """

    BUTTON_STYLE = """
        QPushButton {
            background-color: #333;
            color: white;
            border: 1px solid #444;
            border-radius: 8px;
            padding: 8px 15px;
            font-weight: bold;
            font-size: 12px;
        }
        QPushButton:hover {
            background-color: #444;
            border: 1px solid #555;
        }
        QPushButton:pressed {
            background-color: #222;
            border: 1px solid #3daee9;
            color: #3daee9;
        }
    """

    WINDOW_WIDTH = 320
    WINDOW_HEIGHT = 480

    def __init__(self, parent=None, color: Union[str, Color] = '#FF0000',
                 selectable_formats: Optional[Dict[str, bool]] = None,
                 settings: Optional[PickerSettings] = None,
                 icon=None, show_panel: bool = True):
        """Initializes the ColorPickerDialog.

        Args:
            parent (QWidget, optional): Parent widget for the dialog.
            color (str | Color): Initial color, a hex code or a ``Color``.
                Defaults to '#FF0000'.
            selectable_formats (dict, optional): Formats the user may switch to.
            settings (PickerSettings, optional): Picker behaviour settings.
            icon (QIcon, optional): Icon for the dialog window.
            show_panel (bool): Whether the picker panel starts open. Defaults to True.
        """
        super().__init__(parent)
        self.setWindowTitle("Pick Color")
        self.resize(self.WINDOW_WIDTH, self.WINDOW_HEIGHT)

        if icon:
            self.setWindowIcon(QIcon(icon))

        self._color = color if isinstance(color, Color) else Color(ColorCode.HEX, color)
        self._selectable_formats = selectable_formats
        self._hsv: Optional[Hsv] = None
        self._is_shown = show_panel

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        self.setLayout(layout)

        try:
            self._tool = ColorPickerWidget(settings=settings)
            layout.addWidget(self._tool)
        except Exception as e:
            raise RuntimeError(f"Failed to initialize color picker: {str(e)}") from e

        self._tool.colorChanged.connect(self._on_color_change)
        self._tool.toggled.connect(self._on_toggle)
        self._render()

        button_container_layout = QHBoxLayout()
        button_container_layout.setContentsMargins(10, 10, 10, 10)
        self._buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok |
                                         QDialogButtonBox.StandardButton.Cancel)
        self._buttons.setStyleSheet(self.BUTTON_STYLE)
        self._buttons.accepted.connect(self.accept)
        self._buttons.rejected.connect(self.reject)
        button_container_layout.addWidget(self._buttons)
        layout.addLayout(button_container_layout)

    @property
    def picker(self) -> ColorPickerWidget:
        return self._tool

    def _on_color_change(self, color: Color, hsv: Optional[Hsv]):
        self._color = color
        self._hsv = hsv
        self._render()

    def _on_toggle(self, show: bool):
        self._is_shown = show
        self._render()

    def _render(self):
        self._tool.set_props(self._color, self._selectable_formats, self._hsv, self._is_shown)

    def get_color(self) -> Color:
        """Returns the color currently held by the dialog."""
        return self._color


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s: %(message)s")
    app = QApplication.instance() or QApplication(sys.argv)

    dlg = ColorPickerDialog(color="#3daee9", settings=PickerSettings.from_json())

    if dlg.exec():
        picked = dlg.get_color()
        print(f"Accepted Color: {picked.format} {picked.value}")
