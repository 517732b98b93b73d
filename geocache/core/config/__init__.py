"""
Configuration Module

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Key tags, metric hash names, status enum and HTTP headers

Usage:
------
```python
from geocache.core.config import get_settings
from geocache.core.config.constants import ResponseStatus, Stage

settings = get_settings()
ttl = settings.cache.EXPIRE_SECONDS
```
"""

from geocache.core.config.settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
