
import asyncio
from pathlib import Path
from typing import Dict, Iterable, Optional, Type, TypeVar
from enum import Enum

import aiofiles

from rpi_camstream.core.logging_utils import get_module_logger


logger = get_module_logger("ConfigManager")

E = TypeVar("E", bound=Enum)

TRUE_VALUES = ('true', '1', 'yes', 'on')


class ConfigManager:
    """Reads ``key = value`` text config files.

    Blank lines and ``#`` comments are ignored, trailing comments are stripped
    and values may be wrapped in single or double quotes.
    """

    def __init__(self):
        self.logger = get_module_logger("ConfigManager")

    @staticmethod
    def parse_config_lines(lines: Iterable[str]) -> Dict[str, str]:
        config: Dict[str, str] = {}

        for raw_line in lines:
            line = raw_line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            value = value.strip()

            if '#' in value:
                value = value.split('#')[0].strip()

            if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                value = value[1:-1]

            config[key] = value

        return config

    def read_config(self, config_path: Path) -> Dict[str, str]:
        """Read a config file synchronously. Missing files yield an empty dict."""
        config_path = Path(config_path)
        if not config_path.exists():
            self.logger.debug("Config file not found: %s", config_path)
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = self.parse_config_lines(f)
        except OSError as e:
            self.logger.error("Failed to read config %s: %s", config_path, e)
            return {}

        self.logger.debug("Loaded config from %s (%d values)", config_path, len(config))
        return config

    async def read_config_async(self, config_path: Path) -> Dict[str, str]:
        """Async version for use inside the event loop."""
        config_path = Path(config_path)
        if not await asyncio.to_thread(config_path.exists):
            self.logger.debug("Config file not found: %s", config_path)
            return {}

        try:
            lines: list[str] = []
            async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                async for line in f:
                    lines.append(line)
        except OSError as e:
            self.logger.error("Failed to read config %s: %s", config_path, e)
            return {}

        config = self.parse_config_lines(lines)
        self.logger.debug("Loaded config from %s (%d values)", config_path, len(config))
        return config

    def get_bool(self, config: Dict[str, str], key: str, default: bool = False) -> bool:
        if key not in config:
            return default

        return config[key].strip().lower() in TRUE_VALUES

    def get_int(self, config: Dict[str, str], key: str, default: Optional[int] = 0) -> Optional[int]:
        if key not in config or config[key] == '':
            return default

        try:
            return int(config[key], 0)
        except ValueError:
            self.logger.warning("Invalid int value for %s: %s, using default %s", key, config[key], default)
            return default

    def get_float(self, config: Dict[str, str], key: str, default: Optional[float] = 0.0) -> Optional[float]:
        if key not in config or config[key] == '':
            return default

        try:
            return float(config[key])
        except ValueError:
            self.logger.warning("Invalid float value for %s: %s, using default %s", key, config[key], default)
            return default

    def get_str(self, config: Dict[str, str], key: str, default: str = "") -> str:
        return config.get(key, default)

    def get_enum(
        self, config: Dict[str, str], key: str, enum_cls: Type[E], default: Optional[E]
    ) -> Optional[E]:
        """Look up an enum member by value or (case-insensitive) name."""
        if key not in config or config[key] == '':
            return default

        raw = config[key].strip()
        for member in enum_cls:
            if str(member.value).lower() == raw.lower() or member.name.lower() == raw.lower():
                return member

        self.logger.warning(
            "Invalid %s value for %s: %s, using default %s",
            enum_cls.__name__, key, raw, default.name if default is not None else None,
        )
        return default


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager
