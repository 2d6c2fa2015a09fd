"""Basecamp Tagger - командные теги для карточек Basecamp."""

__version__ = "2.0.0"
