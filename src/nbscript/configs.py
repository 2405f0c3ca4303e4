import logging
import os
from typing import Optional

from dotenv import load_dotenv

from nbscript.conversion.models import ConversionOptions

TRUTHY = {"1", "true", "yes", "on"}

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in TRUTHY


class Config(object):
    def __init__(self, magics: bool, in_tags: bool, header: bool, log_level: str, request_timeout: float):
        self.magics = magics
        self.in_tags = in_tags
        self.header = header
        self.log_level = log_level
        self.request_timeout = request_timeout

    @property
    def default_options(self) -> ConversionOptions:
        return ConversionOptions(magics=self.magics, in_tags=self.in_tags, header=self.header)

    def options(self, magics: Optional[bool] = None, in_tags: Optional[bool] = None,
                header: Optional[bool] = None) -> ConversionOptions:
        """Configured defaults, overridden by every flag that is not None."""
        overrides = {"magics": magics, "in_tags": in_tags, "header": header}
        return self.default_options.model_copy(
            update={name: value for name, value in overrides.items() if value is not None})

    @property
    def logging_level(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.WARNING


def load_configs() -> Config:
    """
    Read NBSCRIPT_* settings from the environment (and a .env file, if present).
    """
    return Config(magics=_env_flag("NBSCRIPT_MAGICS"),
                  in_tags=_env_flag("NBSCRIPT_IN_TAGS"),
                  header=_env_flag("NBSCRIPT_HEADER"),
                  log_level=os.getenv("NBSCRIPT_LOG_LEVEL", "WARNING"),
                  request_timeout=float(os.getenv("NBSCRIPT_REQUEST_TIMEOUT", "10")))


configs = load_configs()
