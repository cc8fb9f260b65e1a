"""Platform abstraction layer."""

from .paths import (
    APP_NAME,
    user_config_dir,
)
from .process import (
    ProcessError,
    run_silent,
)

__all__ = [
    # paths
    "APP_NAME",
    "user_config_dir",
    # process
    "ProcessError",
    "run_silent",
]
