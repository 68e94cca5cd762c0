"""Shared fixtures: a controllable clock and a recording navigation primitive."""
import pytest

from ui_tree import UiNode


class FakeClock:
    """Monotonic clock in milliseconds that only moves when told to."""

    def __init__(self, start: float = 100000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


def screen(*labels, class_name=None):
    """Build a flat snapshot whose children carry the given labels as text."""
    return UiNode(class_name=class_name or 'android.widget.FrameLayout',
                  children=[UiNode(text=label) for label in labels])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def performed():
    """Records every navigation action the dispatcher performs."""
    return []
