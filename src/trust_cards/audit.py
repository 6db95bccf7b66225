"""TrustAuditLogger: JSONL audit trail for signing, validation, and token events.

Each trust-relevant event (a request signed, a card accepted or rejected, a
token issued or refreshed) is appended as one JSON line to the configured
file. With no path configured, lines go to an in-memory buffer that can be
drained via :meth:`TrustAuditLogger.drain_buffer`.

The audit trail is separate from diagnostic ``logging`` output: it records
*what* was trusted, not how the code got there.
"""
from __future__ import annotations

import datetime
import json
import threading
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class AuditEvent:
    """A single auditable trust event.

    Parameters
    ----------
    event_type:
        Short snake_case string identifying the event (e.g. "card_signed").
    subject:
        What the event is about: a card id/fingerprint or a token identity.
    actor:
        Who triggered it: a signer id, an app id, or "system".
    details:
        Arbitrary key-value metadata about the event.
    timestamp:
        UTC datetime of the event. Defaults to now.
    """

    event_type: str
    subject: str
    actor: str = "system"
    details: dict[str, object] = field(default_factory=dict)
    timestamp: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary suitable for JSON encoding."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type,
            "subject": self.subject,
            "actor": self.actor,
            "details": self.details,
        }


class TrustAuditLogger:
    """Append-only JSONL audit logger.

    Thread-safe: the caching token provider may log refreshes from any
    caller thread.

    Parameters
    ----------
    log_path:
        Path to the JSONL file. Created on first write; parent directories
        are created up front. If None, events are buffered in memory.
    """

    def __init__(self, log_path: Path | None = None) -> None:
        self._log_path = log_path
        self._buffer: list[str] = []
        self._lock = threading.Lock()

        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Core logging
    # ------------------------------------------------------------------

    def log(self, event: AuditEvent) -> None:
        line = json.dumps(event.to_dict(), separators=(",", ":"), default=str)
        with self._lock:
            if self._log_path is not None:
                with self._log_path.open("a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
            else:
                self._buffer.append(line)

    def log_event(
        self,
        event_type: str,
        subject: str,
        actor: str = "system",
        **details: object,
    ) -> None:
        """Log an event without constructing an :class:`AuditEvent` by hand."""
        self.log(
            AuditEvent(event_type=event_type, subject=subject, actor=actor, details=dict(details))
        )

    # ------------------------------------------------------------------
    # Domain events
    # ------------------------------------------------------------------

    def log_card_signed(self, fingerprint_hex: str, signer_id: str, kind: str) -> None:
        """Log a signature added to a request (*kind* is "self" or "authority")."""
        self.log_event("card_signed", subject=fingerprint_hex, actor=signer_id, kind=kind)

    def log_card_validation(self, card_id: str | None, valid: bool, reason: str = "") -> None:
        self.log_event(
            "card_validated" if valid else "card_rejected",
            subject=card_id or "<no id>",
            reason=reason,
        )

    def log_token_issued(
        self, identity: str, app_id: str, expires_at: datetime.datetime
    ) -> None:
        self.log_event(
            "token_issued",
            subject=identity,
            actor=app_id,
            expires_at=expires_at.isoformat(),
        )

    def log_token_refreshed(self, identity: str, operation: str, forced: bool) -> None:
        self.log_event(
            "token_refreshed",
            subject=identity,
            operation=operation,
            forced=forced,
        )

    # ------------------------------------------------------------------
    # Buffer access
    # ------------------------------------------------------------------

    def drain_buffer(self) -> list[str]:
        """Return and clear the in-memory buffer (oldest first)."""
        with self._lock:
            events = list(self._buffer)
            self._buffer.clear()
        return events

    def read_log(self, tail: int | None = None) -> list[dict[str, object]]:
        """Read back recorded events as dictionaries.

        Parameters
        ----------
        tail:
            If given, return only the last *tail* events.
        """
        with self._lock:
            if self._log_path is None or not self._log_path.exists():
                lines = list(self._buffer)
            else:
                lines = self._log_path.read_text(encoding="utf-8").splitlines()

        parsed = [json.loads(line) for line in lines if line.strip()]
        if tail is not None:
            return parsed[-tail:]
        return parsed


__all__ = ["AuditEvent", "TrustAuditLogger"]
