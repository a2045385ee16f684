"""Background work in the controller always leaves the busy state."""

import pytest

pytest.importorskip("customtkinter")

from gridcutter.controllers import app_controller  # noqa: E402
from gridcutter.controllers.app_controller import AppController  # noqa: E402


class _Window:
    def after(self, _ms, callback):
        callback()


class _Sidebar:
    def __init__(self):
        self.busy = []

    def set_busy(self, busy):
        self.busy.append(busy)


class _BottomBar:
    def __init__(self):
        self.statuses = []

    def set_status(self, text):
        self.statuses.append(text)


class _ImmediateThread:
    def __init__(self, target, daemon=None):
        self._target = target

    def start(self):
        self._target()


@pytest.fixture
def controller(monkeypatch):
    monkeypatch.setattr(app_controller.threading, "Thread", _ImmediateThread)
    errors = []
    monkeypatch.setattr(app_controller.messagebox, "showerror", lambda title, text, parent=None: errors.append(text))
    ctrl = AppController(steps=None, viewer=None, sidebar=_Sidebar(), bottom=_BottomBar(), window=_Window())
    ctrl.errors = errors
    return ctrl


def test_unexpected_failure_releases_busy_state(controller):
    def work():
        raise MemoryError("out of memory")

    controller._run_in_background("Кадрирование…", work, lambda _result: None)

    assert controller._busy is False
    assert controller.sidebar.busy == [True, False]
    assert controller.bottom.statuses[-1] == "Ошибка"
    assert controller.errors == ["out of memory"]


def test_success_passes_result_to_callback(controller):
    results = []
    controller._run_in_background("Нарезка…", lambda: 42, results.append)

    assert results == [42]
    assert controller._busy is False
    assert controller.bottom.statuses[-1] == "Готово"
    assert controller.errors == []
