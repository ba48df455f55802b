from functools import lru_cache

from app.core.config import LockoutPolicy, TokenConfig, build_lockout_policy, build_token_config, settings


@lru_cache
def get_token_config() -> TokenConfig:
    return build_token_config(settings)


@lru_cache
def get_lockout_policy() -> LockoutPolicy:
    return build_lockout_policy(settings)


def reset_security_config() -> None:
    get_token_config.cache_clear()
    get_lockout_policy.cache_clear()
