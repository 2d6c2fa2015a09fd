"""Запуск сервера: python -m tagger"""

import uvicorn

from .core.config import settings


def main() -> None:
    uvicorn.run("tagger.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)


if __name__ == "__main__":
    main()
