from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel


DEFAULT_CORS_ORIGINS = 'http://localhost:5173,http://localhost:5174,http://localhost:3000,http://localhost:4173'


class Settings(BaseModel):
    APP_ENV: str = 'dev'
    LOG_LEVEL: str = 'INFO'

    DATABASE_URL: str = 'sqlite:///./leave.db'
    DB_ECHO: bool = False

    MAX_LEAVE_DAYS: int = 15
    ALLOW_SINGLE_DAY_REQUESTS: bool = True
    ALLOW_ANONYMOUS_LIST: bool = False

    CORS_ORIGINS: str = DEFAULT_CORS_ORIGINS

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(',') if o.strip()]


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {'1', 'true', 'yes', 'on'}


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or str(v).strip() == '':
        return default
    try:
        return int(v)
    except ValueError:
        return default


@lru_cache
def get_settings() -> Settings:
    load_dotenv(dotenv_path='.env')
    data = {
        'APP_ENV': os.getenv('APP_ENV', 'dev'),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO'),
        'DATABASE_URL': os.getenv('DATABASE_URL', 'sqlite:///./leave.db'),
        'DB_ECHO': _env_bool('DB_ECHO', False),
        'MAX_LEAVE_DAYS': _env_int('MAX_LEAVE_DAYS', 15),
        'ALLOW_SINGLE_DAY_REQUESTS': _env_bool('ALLOW_SINGLE_DAY_REQUESTS', True),
        'ALLOW_ANONYMOUS_LIST': _env_bool('ALLOW_ANONYMOUS_LIST', False),
        'CORS_ORIGINS': os.getenv('CORS_ORIGINS', DEFAULT_CORS_ORIGINS),
    }
    settings = Settings(**data)
    if settings.APP_ENV != 'dev' and settings.ALLOW_ANONYMOUS_LIST:
        raise RuntimeError('ALLOW_ANONYMOUS_LIST is only permitted in dev mode')
    return settings
