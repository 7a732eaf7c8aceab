"""
Cache Services

In-process caches shared across request threads: fetched chapters and
once-per-day generated results. Instances are created at app start and
injected; nothing here is a module-level singleton.
"""

from .chapter_cache import ChapterCache
from .daily_cache import DailyResultCache

__all__ = ["ChapterCache", "DailyResultCache"]
