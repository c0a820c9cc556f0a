"""
Configuration for DevShelf.

Static, environment-driven settings (``.env`` supported through
python-dotenv). Loaded and validated once on import.

Usage
-----
```python
from devshelf.core.config import Config

if Config.is_production():
    ...
tz = Config.STREAK_TIMEZONE
```
"""

from devshelf.core.config.config import Config, Environment

__all__ = [
    "Config",
    "Environment",
]
