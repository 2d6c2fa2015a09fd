"""Очистка строкового ввода от клиента."""

from typing import Any

# Максимальные длины полей
TEAM_ID_MAX = 50
TEAM_NAME_MAX = 100
USER_ID_MAX = 100
USER_NAME_MAX = 100
INVITE_CODE_MAX = 10
TAG_ID_MAX = 50
TAG_NAME_MAX = 50
TAG_COLOR_MAX = 10
CARD_ID_MAX = 100


def sanitize_string(value: Any, max_length: int = 255) -> str:
    """
    Обрезать пробелы и длину строки.

    Не-строки (None, числа, списки...) превращаются в пустую строку,
    которую дальше отвергает проверка обязательных полей.

    Примеры:
        sanitize_string("  Bug  ", 50) → "Bug"
        sanitize_string(42) → ""
        sanitize_string("x" * 200, 100) → "x" * 100
    """
    if not isinstance(value, str):
        return ""
    return value.strip()[:max_length]
