"""
Скрипт для инициализации базы данных.

Создаёт таблицы tags, records и record_tags напрямую через SQLAlchemy.
Используется для локального запуска вместо Alembic миграций.

Запуск:
    python init_db.py           # создать недостающие таблицы
    python init_db.py --reset   # удалить все данные и создать заново
"""

import argparse
import asyncio

from tagnotes.core.config import settings
from tagnotes.core.database import drop_db, init_db
from tagnotes.models import Base


async def main(reset: bool) -> None:
    if reset:
        print("Удаление таблиц...")
        await drop_db()

    print(f"Создание таблиц в {settings.DATABASE_URL.split('@')[-1]}...")
    await init_db()
    print(f"✓ Таблицы созданы: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the Tagged Notes schema")
    parser.add_argument("--reset", action="store_true", help="drop all tables first")
    args = parser.parse_args()
    asyncio.run(main(args.reset))
