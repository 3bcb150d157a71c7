# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-02-02
# Description: dependencies.py
# -----------------------------------------------------------------------------
from functools import lru_cache

from api.AppContainer import AppContainer
from config.Config import Config


@lru_cache
def get_cfg() -> Config:
    return Config.from_env()


@lru_cache
def get_app_container() -> AppContainer:
    # one container (and one queue) per process
    return AppContainer(get_cfg())


def reset_app_container() -> None:
    """Stop the cached container (if built) and forget it and its Config."""
    if get_app_container.cache_info().currsize:
        get_app_container().stop()
    get_app_container.cache_clear()
    get_cfg.cache_clear()
