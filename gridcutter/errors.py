"""Исключения конвейера «кадрирование → сетка».

Все ошибки ядра наследуются от `GridCutterError`, поэтому фронтенды (GUI, CLI)
могут перехватывать их одним `except`. Дополнительные базовые классы
(`ValueError`, `RuntimeError`) сохраняют совместимость с кодом, который
ловит стандартные исключения.
"""
from __future__ import annotations


class GridCutterError(Exception):
    """Базовая ошибка приложения."""


class InvalidGeometry(GridCutterError, ValueError):
    """Некорректный прямоугольник кадрирования, целевой размер или сетка."""


class DecodeFailure(GridCutterError, ValueError):
    """Входные байты или файл не являются изображением."""


class EncodeFailure(GridCutterError, RuntimeError):
    """Растр не удалось сохранить в запрошенный формат."""
