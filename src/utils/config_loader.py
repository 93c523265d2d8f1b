"""
Configuration loader for the automation gateway
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "gateway.yml"


class GatewaySettings(BaseModel):
    """Process-wide settings, read once at startup and never mutated."""

    model_config = ConfigDict(frozen=True)

    integrations_mode: str = "auto"

    # Identity provider / data store
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    database_url: Optional[str] = None
    identity_timeout_seconds: float = Field(default=10.0, gt=0)

    # Outbound request identity
    request_source: str = "cwmia-web"
    public_app_url: Optional[str] = None

    # Checkout flow
    checkout_webhook_url: Optional[str] = None
    checkout_webhook_secret: Optional[str] = None
    checkout_timeout_seconds: float = Field(default=15.0, gt=0, le=300)
    checkout_expires_minutes: int = Field(default=60, ge=1)
    checkout_currency: str = "brl"

    # Generation flow
    creations_webhook_url: Optional[str] = None
    creations_webhook_with_lyrics_url: Optional[str] = None
    creations_webhook_no_lyrics_url: Optional[str] = None
    legacy_webhook_url: Optional[str] = None
    legacy_with_lyrics_url: Optional[str] = None
    legacy_no_lyrics_url: Optional[str] = None
    creations_webhook_secret: Optional[str] = None
    creations_timeout_seconds: float = Field(default=15.0, gt=0, le=300)

    # Inbound callbacks
    purchase_update_secret: Optional[str] = None


# setting name -> env vars, first non-empty wins
_ENV_STRINGS: Dict[str, tuple] = {
    "integrations_mode": ("INTEGRATIONS_MODE",),
    "supabase_url": ("SUPABASE_URL", "VITE_SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
    "supabase_anon_key": ("SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
    "database_url": ("DATABASE_URL", "SUPABASE_DB_URL"),
    "public_app_url": ("APP_PUBLIC_URL",),
    "checkout_webhook_url": ("N8N_MARKETPLACE_CHECKOUT_URL", "N8N_BILLING_CHECKOUT_URL"),
    "checkout_webhook_secret": ("N8N_MARKETPLACE_CHECKOUT_SECRET", "N8N_BILLING_CHECKOUT_SECRET"),
    "creations_webhook_url": ("N8N_CREATIONS_WEBHOOK_URL",),
    "creations_webhook_with_lyrics_url": ("N8N_CREATIONS_WEBHOOK_WITH_LYRICS_URL",),
    "creations_webhook_no_lyrics_url": ("N8N_CREATIONS_WEBHOOK_NO_LYRICS_URL",),
    "legacy_webhook_url": ("N8N_WEBHOOK_URL",),
    "legacy_with_lyrics_url": ("N8N_WEBHOOK_WITH_LYRICS_URL", "N8N_WEBHOOK_LYRICS_URL"),
    "legacy_no_lyrics_url": ("N8N_WEBHOOK_NO_LYRICS_URL", "N8N_WEBHOOK_INSPIRATION_URL"),
    "creations_webhook_secret": ("N8N_CREATIONS_WEBHOOK_SECRET",),
    "purchase_update_secret": ("N8N_MARKETPLACE_PURCHASE_UPDATE_SECRET", "N8N_BILLING_INBOUND_SECRET"),
}

# setting name -> (env var, divisor); timeouts are configured in milliseconds
_ENV_NUMBERS: Dict[str, tuple] = {
    "checkout_timeout_seconds": ("N8N_MARKETPLACE_CHECKOUT_TIMEOUT_MS", 1000.0),
    "creations_timeout_seconds": ("N8N_CREATIONS_WEBHOOK_TIMEOUT_MS", 1000.0),
    "checkout_expires_minutes": ("STRIPE_CHECKOUT_EXPIRES_MINUTES", None),
}


def pick_env(environ: Mapping[str, str], *keys: str) -> Optional[str]:
    for key in keys:
        val = environ.get(key)
        if isinstance(val, str) and val.strip():
            return val.strip()
    return None


def _load_yaml_defaults(config_path: Optional[Path]) -> Dict[str, Any]:
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        if config_path is not None:
            raise FileNotFoundError(f"Config file not found: {path}")
        return {}

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data.get("gateway", data)


def load_gateway_settings(
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> GatewaySettings:
    """
    Build settings from config/gateway.yml defaults and environment overrides.

    Args:
        environ: Mapping to read variables from. Defaults to os.environ
        config_path: YAML defaults file. Defaults to config/gateway.yml (optional)

    Raises:
        FileNotFoundError: If an explicit config_path doesn't exist
        ValidationError: If the merged values don't match the schema
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = dict(_load_yaml_defaults(config_path))

    for name, keys in _ENV_STRINGS.items():
        val = pick_env(environ, *keys)
        if val is not None:
            values[name] = val

    for name, (key, divisor) in _ENV_NUMBERS.items():
        raw = pick_env(environ, key)
        if raw is None:
            continue
        try:
            number = float(raw)
        except ValueError:
            logger.warning("Ignoring non-numeric %s", key)
            continue
        values[name] = number / divisor if divisor else int(number)

    try:
        settings = GatewaySettings(**values)
    except ValidationError as e:
        logger.error(f"Gateway config validation failed: {e}")
        raise
    return settings
