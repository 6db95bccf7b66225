"""TokenContext: what a caller needs a token for."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TokenContext:
    """Parameters of a single token request.

    Parameters
    ----------
    operation:
        Name of the operation the token will authorize (e.g. "get").
    identity:
        Identity the token should be issued for.
    service:
        Target service name, if the obtaining function needs it.
    force_reload:
        Ask caching providers to discard their cached token.
    """

    operation: str
    identity: str
    service: Optional[str] = None
    force_reload: bool = False


__all__ = ["TokenContext"]
