"""
Configuration subsystem for RefactorRPG.

Static vs Dynamic Configuration
--------------------------------
**Static (Config):**
- Loaded from environment variables (.env support) at import
- Includes: environment, log settings, directories, dedup window

**Dynamic (ConfigManager):**
- Built-in defaults deep-merged with YAML files from `config/`
- Includes: XP curve, notification toggles, history limits
- Runtime overrides via `set()` with validation

Usage Examples
--------------
```python
from refactor_rpg.core.config import Config, ConfigManager

if Config.is_production():
    logger.info("Running in production mode")

manager = ConfigManager.from_directory()
base = manager.get("progression.xp_curve.base", 100)
```
"""

from refactor_rpg.core.config.config import Config, Environment
from refactor_rpg.core.config.errors import (
    ConfigError,
    ConfigInitializationError,
    ConfigValidationError,
)
from refactor_rpg.core.config.manager import ConfigManager

__all__ = [
    "Config",
    "Environment",
    "ConfigManager",
    "ConfigError",
    "ConfigInitializationError",
    "ConfigValidationError",
]
