"""
Скрипт для инициализации базы данных.

Создаёт все таблицы (teams, members, tags, card_tags) напрямую через SQLAlchemy.
Приложение делает то же самое при старте, скрипт нужен для подготовки БД заранее.

    python init_db.py            # создать таблицы
    python init_db.py --reset    # удалить и создать заново
"""

import asyncio
import sys

from tagger.core.config import settings
from tagger.core.database import drop_db, init_db


async def main(reset: bool = False):
    """Создать все таблицы."""
    if reset:
        print("Удаление таблиц...")
        await drop_db()

    print(f"Создание таблиц в {settings.database_url}...")
    await init_db()
    print("✓ Таблицы созданы успешно!")


if __name__ == "__main__":
    asyncio.run(main(reset="--reset" in sys.argv))
