"""Pytest fixtures for tests."""

import os

# Qt widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from colorpickerengine import Color, ColorCode
from colorpickerstate import ColorStateManager, ContainerRect


@pytest.fixture(scope="session")
def qapp():
    """Create (or reuse) the QApplication for widget tests."""
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def red_state():
    """State manager holding #ff0000 as the host color."""
    state = ColorStateManager()
    state.on_external_color_update(Color(ColorCode.HEX, "#ff0000"))
    return state


@pytest.fixture
def spectrum_rect():
    """A 200x100 spectrum at the page origin."""
    return ContainerRect(left=0, top=0, width=200, height=100)
