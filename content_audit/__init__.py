"""
Content Audit Rules Engine

Аудит статей базы знаний набором правил:
- Устаревший контент
- Качество текста (читаемость, структура, грамматика)
- Повторы внутри статьи
- Проблемные ссылки
- SEO-оптимизация

Usage:
    content-audit audit articles.json --report markdown
"""

__version__ = "1.0.0"
