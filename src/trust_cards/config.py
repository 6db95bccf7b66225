"""Configuration for token issuance and card validation.

:class:`TrustCardsConfig` is a pydantic model; every component also takes
plain constructor arguments, so the config object is a convenience for
applications that want one place to load settings from.

Environment overrides (all optional)::

    TRUST_CARDS_APP_ID
    TRUST_CARDS_API_KEY_ID
    TRUST_CARDS_TOKEN_LIFETIME_MINUTES
    TRUST_CARDS_REFRESH_SKEW_SECONDS
    TRUST_CARDS_SERVICE_CARD_ID
    TRUST_CARDS_SERVICE_PUBLIC_KEY
    TRUST_CARDS_AUDIT_LOG
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

# Well-known cards service verifier. Every card the service publishes carries
# a signature under this id.
SERVICE_CARD_ID = "3e29d43373348cfb373b7eae189214dc01d7237765e572db685839b64adca853"
SERVICE_PUBLIC_KEY = (
    "LS0tLS1CRUdJTiBQVUJMSUMgS0VZLS0tLS0KTUNvd0JRWURLMlZ3QXlFQVlSNTAx"
    "a1YxdFVuZTJ1T2RrdzRrRXJSUmJKcmMyU3lhejVWMWZ1RytyVnM9Ci0tLS0tRU5E"
    "IFBVQkxJQyBLRVktLS0tLQo="
)

_ENV_PREFIX = "TRUST_CARDS_"


class TrustCardsConfig(BaseModel):
    """Settings shared by the token generator, providers, and validator."""

    app_id: str = ""
    api_key_id: str = ""
    token_lifetime_minutes: int = Field(default=20, gt=0)
    refresh_skew_seconds: float = Field(default=5.0, ge=0)
    service_card_id: str = SERVICE_CARD_ID
    service_public_key: str = SERVICE_PUBLIC_KEY
    audit_log_path: Optional[Path] = None


def load_config(
    overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> TrustCardsConfig:
    """Build a config from defaults, then the environment, then *overrides*.

    Parameters
    ----------
    overrides:
        Explicit field values; these win over the environment.
    environ:
        Environment mapping to read. Defaults to ``os.environ``.

    Raises
    ------
    pydantic.ValidationError
        If a value fails validation (e.g. a non-numeric lifetime).
    """
    env = os.environ if environ is None else environ
    values: dict[str, object] = {}

    env_fields = {
        "APP_ID": "app_id",
        "API_KEY_ID": "api_key_id",
        "TOKEN_LIFETIME_MINUTES": "token_lifetime_minutes",
        "REFRESH_SKEW_SECONDS": "refresh_skew_seconds",
        "SERVICE_CARD_ID": "service_card_id",
        "SERVICE_PUBLIC_KEY": "service_public_key",
        "AUDIT_LOG": "audit_log_path",
    }
    for suffix, field_name in env_fields.items():
        raw = env.get(_ENV_PREFIX + suffix)
        if raw:
            values[field_name] = raw

    values.update(overrides or {})
    return TrustCardsConfig(**values)


__all__ = [
    "SERVICE_CARD_ID",
    "SERVICE_PUBLIC_KEY",
    "TrustCardsConfig",
    "load_config",
]
