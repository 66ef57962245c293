"""Configuration read from the environment (and ``.env`` files).

Each remote system gets a small frozen dataclass. ``*.from_env()`` raises
:class:`ConfigError` when a required secret is missing so that a run aborts
before the first network call.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class ConfigError(RuntimeError):
    pass


def load_env(env_path: Optional[str] = None) -> None:
    """Load ``.env`` from the project root and the CWD, then ``env_path`` if given.

    Values already present in the process environment win.
    """
    project_env = Path(__file__).resolve().parents[2] / ".env"
    for p in (project_env, Path.cwd() / ".env"):
        if p.exists():
            load_dotenv(p)
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigError(f"Env file not found: {p}")
        load_dotenv(p, override=True)


def env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def env_float(name: str, default: float) -> float:
    raw = env_str(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


def env_bool(name: str, default: bool = False) -> bool:
    raw = env_str(name).lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _require(**values: str) -> None:
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigError(f"Missing required config: {', '.join(missing)}")


@dataclass(frozen=True)
class WooConfig:
    base_url: str
    consumer_key: str
    consumer_secret: str
    timeout: float = 30.0
    max_retries: int = 3

    @property
    def api_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/wp-json/wc/v3"

    @classmethod
    def from_env(cls) -> "WooConfig":
        base_url = env_str("WOO_BASE_URL")
        key = env_str("WOO_CONSUMER_KEY")
        secret = env_str("WOO_CONSUMER_SECRET")
        _require(WOO_BASE_URL=base_url, WOO_CONSUMER_KEY=key, WOO_CONSUMER_SECRET=secret)
        return cls(
            base_url=base_url,
            consumer_key=key,
            consumer_secret=secret,
            timeout=env_float("WOO_TIMEOUT", 30.0),
            max_retries=env_int("WOO_MAX_RETRIES", 3),
        )


@dataclass(frozen=True)
class MerchantProConfig:
    api_url: str
    user: str
    password: str
    category_id: int = 208
    timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "MerchantProConfig":
        api_url = env_str("MERCHANTPRO_API_URL")
        user = env_str("MERCHANTPRO_API_USER")
        password = env_str("MERCHANTPRO_API_PASS")
        _require(MERCHANTPRO_API_URL=api_url, MERCHANTPRO_API_USER=user, MERCHANTPRO_API_PASS=password)
        return cls(
            api_url=api_url,
            user=user,
            password=password,
            category_id=env_int("MERCHANTPRO_CATEGORY_ID", 208),
            timeout=env_float("MERCHANTPRO_TIMEOUT", 30.0),
        )


@dataclass(frozen=True)
class TrendyolConfig:
    username: str
    password: str
    supplier_id: str
    api_base: str = "https://api.trendyol.com/sapigw/suppliers"
    brand_id: int = 0
    category_id: int = 0
    currency: str = "TRY"
    vat_rate: int = 8
    timeout: float = 30.0

    @property
    def products_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/{self.supplier_id}/v2/products"

    @classmethod
    def from_env(cls) -> "TrendyolConfig":
        username = env_str("TRENDYOL_USERNAME")
        password = env_str("TRENDYOL_PASSWORD")
        supplier_id = env_str("TRENDYOL_SUPPLIER_ID")
        _require(TRENDYOL_USERNAME=username, TRENDYOL_PASSWORD=password, TRENDYOL_SUPPLIER_ID=supplier_id)
        return cls(
            username=username,
            password=password,
            supplier_id=supplier_id,
            api_base=env_str("TRENDYOL_API_BASE", "https://api.trendyol.com/sapigw/suppliers"),
            brand_id=env_int("TRENDYOL_BRAND_ID", 0),
            category_id=env_int("TRENDYOL_CATEGORY_ID", 0),
            currency=env_str("TRENDYOL_CURRENCY", "TRY").upper(),
            vat_rate=env_int("TRENDYOL_VAT_RATE", 8),
            timeout=env_float("TRENDYOL_TIMEOUT", 30.0),
        )


@dataclass(frozen=True)
class MailConfig:
    host: str
    port: int
    user: str
    password: str
    default_display_name: str = ""
    use_tls: bool = True
    timeout: float = 30.0

    @classmethod
    def from_env(cls, prefix: str, host: str, port: int = 587) -> "MailConfig":
        """``prefix`` selects the account, e.g. ``GOOGLE_EMAIL`` reads
        ``GOOGLE_EMAIL`` and ``GOOGLE_EMAIL_PASSWORD``."""
        user = env_str(prefix)
        password = env_str(f"{prefix}_PASSWORD")
        _require(**{prefix: user, f"{prefix}_PASSWORD": password})
        return cls(
            host=env_str(f"{prefix}_HOST", host),
            port=env_int(f"{prefix}_PORT", port),
            user=user,
            password=password,
        )


def google_mail_config() -> MailConfig:
    return MailConfig.from_env("GOOGLE_EMAIL", host="smtp.gmail.com")


def nomadic_mail_config() -> MailConfig:
    cfg = MailConfig.from_env("EMAIL", host="mail.thenomadicdigital.com")
    return MailConfig(cfg.host, cfg.port, cfg.user, cfg.password, default_display_name="Contact")


@dataclass(frozen=True)
class ConteConfig:
    api_key: str
    clients_url: str = "https://conteb2b.com/api/v1/clients/list"
    timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "ConteConfig":
        api_key = env_str("API_KEY_CONTE")
        _require(API_KEY_CONTE=api_key)
        return cls(api_key=api_key, clients_url=env_str("CONTE_CLIENTS_URL", cls.clients_url))
