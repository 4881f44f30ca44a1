# -*- coding: utf-8 -*-
"""
PADDOL: Python Advanced Design & Dispersion Optimization Lab
Copyright (c) 2025 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""

import itertools
import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from PySide6.QtWidgets import QWidget
from PySide6.QtCore import Qt, QObject, QEvent, QPointF
from PySide6.QtGui import QMouseEvent, QTouchEvent

__all__ = ["GestureHandle", "GestureBinder", "TOUCH_ALLOW_RANGE"]

logger = logging.getLogger(__name__)

# Default pointer travel (px) that turns a press into a drag
TOUCH_ALLOW_RANGE = 10.0

PointerCallback = Callable[[float, float], None]

_PRESS_EVENTS = (QEvent.Type.MouseButtonPress, QEvent.Type.TouchBegin)
_MOVE_EVENTS = (QEvent.Type.MouseMove, QEvent.Type.TouchUpdate)
_RELEASE_EVENTS = (QEvent.Type.MouseButtonRelease, QEvent.Type.TouchEnd)


@dataclass(frozen=True)
class GestureHandle:
    """Opaque token returned by ``GestureBinder.bind``."""
    id: int


@dataclass
class _Binding:
    widget: QWidget
    on_press: Optional[PointerCallback]
    on_move: Optional[PointerCallback]
    on_release: Optional[PointerCallback]
    on_tap: Optional[Callable[[], None]]
    start: Optional[QPointF] = None
    is_pressed: bool = False


class GestureBinder(QObject):
    """Normalizes mouse and touch input on widgets into press/move/release/tap.

    Each bound widget gets an event filter. Coordinates passed to the
    callbacks are global (page) coordinates. A press puts the widget into a
    pressed state (exposed as the dynamic property ``pressed`` for style
    sheets); moving ``touch_allow_range`` pixels or more cancels it, and a
    release while still pressed fires ``on_tap``.

    The binder owns the handle -> binding registry. Every handle is revoked
    exactly once by ``unbind``.
    """

    def __init__(self, touch_allow_range: float = TOUCH_ALLOW_RANGE, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.touch_allow_range = touch_allow_range
        self._ids = itertools.count()
        self._bindings: Dict[GestureHandle, _Binding] = {}
        self._handles_by_widget: Dict[QWidget, GestureHandle] = {}

    def bind(self,
             widget: QWidget,
             on_press: Optional[PointerCallback] = None,
             on_move: Optional[PointerCallback] = None,
             on_release: Optional[PointerCallback] = None,
             on_tap: Optional[Callable[[], None]] = None) -> GestureHandle:
        """Starts listening to pointer input on ``widget``.

        A widget that is already bound keeps its first binding and the
        existing handle is returned.

        Returns:
            GestureHandle: Token to pass to ``unbind``.
        """
        existing = self._handles_by_widget.get(widget)
        if existing is not None:
            return existing

        handle = GestureHandle(next(self._ids))
        self._bindings[handle] = _Binding(widget, on_press, on_move, on_release, on_tap)
        self._handles_by_widget[widget] = handle

        widget.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        widget.installEventFilter(self)
        widget.destroyed.connect(lambda *_: self._forget(handle))
        logger.debug("Bound gesture handle %d to %s", handle.id, widget.objectName() or type(widget).__name__)
        return handle

    def unbind(self, handle: GestureHandle) -> bool:
        """Stops listening for ``handle``. Returns False if it was already revoked."""
        binding = self._forget(handle)
        if binding is None:
            return False
        binding.widget.removeEventFilter(self)
        self._set_pressed(binding, False)
        logger.debug("Unbound gesture handle %d", handle.id)
        return True

    def unbind_all(self) -> None:
        for handle in list(self._bindings):
            self.unbind(handle)

    def handles(self) -> List[GestureHandle]:
        return list(self._bindings)

    def is_bound(self, handle: GestureHandle) -> bool:
        return handle in self._bindings

    def _forget(self, handle: GestureHandle) -> Optional[_Binding]:
        binding = self._bindings.pop(handle, None)
        if binding is not None:
            self._handles_by_widget.pop(binding.widget, None)
        return binding

    # --- Event normalization ---

    @staticmethod
    def _global_position(event: QEvent) -> Optional[QPointF]:
        if isinstance(event, QTouchEvent):
            points = event.points()
            return points[0].globalPosition() if points else None
        if isinstance(event, QMouseEvent):
            return event.globalPosition()
        return None

    @staticmethod
    def _set_pressed(binding: _Binding, pressed: bool) -> None:
        if binding.is_pressed == pressed:
            return
        binding.is_pressed = pressed
        widget = binding.widget
        widget.setProperty("pressed", pressed)
        widget.style().unpolish(widget)
        widget.style().polish(widget)

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        """Dispatches pointer events of bound widgets; other events pass through."""
        handle = self._handles_by_widget.get(watched)
        if handle is None:
            return False

        event_type = event.type()
        if event_type not in _PRESS_EVENTS + _MOVE_EVENTS + _RELEASE_EVENTS:
            return False
        if isinstance(event, QMouseEvent) and event_type != QEvent.Type.MouseMove \
                and event.button() != Qt.MouseButton.LeftButton:
            return False

        pos = self._global_position(event)
        if pos is None:
            return False

        binding = self._bindings[handle]
        x, y = pos.x(), pos.y()

        if event_type in _PRESS_EVENTS:
            binding.start = QPointF(pos)
            self._set_pressed(binding, True)
            if binding.on_press:
                binding.on_press(x, y)

        elif event_type in _MOVE_EVENTS:
            if binding.is_pressed and binding.start is not None:
                distance = math.hypot(x - binding.start.x(), y - binding.start.y())
                if distance >= self.touch_allow_range:
                    self._set_pressed(binding, False)
            if binding.on_move:
                binding.on_move(x, y)

        else:
            was_pressed = binding.is_pressed
            self._set_pressed(binding, False)
            binding.start = None
            if binding.on_release:
                binding.on_release(x, y)
            if was_pressed and binding.on_tap:
                binding.on_tap()

        event.accept()
        return True
