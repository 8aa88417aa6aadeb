"""esputnik.common.config

Connection settings are read from the environment (and an optional ``.env``)
once at import. Nothing here opens a connection: the client is always built
explicitly by the caller, e.g. ``ESputnikClient.from_settings(settings)``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv(usecwd=True))


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


DEFAULT_BASE_URL = "https://esputnik.com.ua/api/"


@dataclass
class Settings:
    """
    Settings for the ESputnik connector, read from environment variables.
    """

    # basic auth
    esputnik_user: str = os.getenv("ESPUTNIK_USER", "")
    esputnik_password: str = os.getenv("ESPUTNIK_PASSWORD", "")

    # address book injected into contacts that do not name one
    esputnik_book_id: int | None = _optional_int("ESPUTNIK_BOOK_ID")

    esputnik_base_url: str = os.getenv("ESPUTNIK_BASE_URL", DEFAULT_BASE_URL)
    esputnik_connect_timeout_s: float = float(os.getenv("ESPUTNIK_CONNECT_TIMEOUT_S", "2"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def has_credentials(self) -> bool:
        return bool(self.esputnik_user and self.esputnik_password)


settings = Settings()
