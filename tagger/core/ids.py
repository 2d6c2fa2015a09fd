"""Генерация идентификаторов: первичные ключи и инвайт-коды."""

import secrets
import string

# Длина первичного ключа (как у nanoid по умолчанию)
ID_LENGTH = 21

INVITE_CODE_LENGTH = 6
# Только заглавные буквы и цифры - код диктуют голосом и набирают руками
INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits


def new_id() -> str:
    """
    Случайный URL-safe идентификатор для первичного ключа.

    Коллизии не проверяются: 21 символ base64url ~ 126 бит случайности.
    """
    return secrets.token_urlsafe(16)[:ID_LENGTH]


def new_invite_code() -> str:
    """
    Шестисимвольный инвайт-код (A-Z, 0-9).

    Уникальность обеспечивает UNIQUE-ограничение на teams.invite_code,
    повторная генерация при коллизии не делается.
    """
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))
