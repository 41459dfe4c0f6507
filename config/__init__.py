import os

_MODULES = {
    "dev": "config.development",
    "development": "config.development",
    "test": "config.testing",
    "testing": "config.testing",
    "prod": "config.production",
    "production": "config.production",
}


def get_settings_module() -> str:
    """Settings module named by APP_ENV (development when unset)."""
    env = os.getenv("APP_ENV", "development").strip().lower()
    try:
        return _MODULES[env]
    except KeyError:
        raise RuntimeError(f"Unknown APP_ENV={env!r}; expected one of {sorted(set(_MODULES))}") from None
