"""Request-scoped session context.

The session context travels explicitly from the entry point (HTTP handler,
job runner) into every service call. It carries what the audit trail needs
about the request and the credential that made it; nothing is read from
ambient globals.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import StrEnum

from ulid import ULID


class RequestSource(StrEnum):
    """Where a mutation originated."""

    API = "api"
    JOB = "job"


def fingerprint_credential(credential: str) -> str:
    """Return a stable, non-reversible fingerprint of a bearer credential.

    The raw credential never leaves the entry point; sessions and step-up
    records compare fingerprints only.
    """
    return hashlib.sha256(credential.encode()).hexdigest()


@dataclass(frozen=True)
class StepUpRecord:
    """A completed re-authentication bound to one credential."""

    credential_fingerprint: str
    completed_at: datetime


@dataclass(frozen=True)
class SessionContext:
    """Immutable description of the request performing a mutation.

    Attributes:
        request_id: Correlation id of the request or job run
        ip_address: Client address, None for jobs
        user_agent: Client user agent, None for jobs
        source: API or JOB
        credential_fingerprint: Fingerprint of the credential in use
        step_up: Most recent re-authentication, if any
        impersonator_id: Real actor when the session is impersonating
    """

    request_id: str
    ip_address: str | None = None
    user_agent: str | None = None
    source: RequestSource = RequestSource.API
    credential_fingerprint: str | None = None
    step_up: StepUpRecord | None = None
    impersonator_id: str | None = None

    @classmethod
    def system(cls, request_id: str | None = None) -> SessionContext:
        """Create a session for background jobs (no client, no credential)."""
        return cls(
            request_id=request_id or str(ULID()),
            source=RequestSource.JOB,
        )

    @property
    def is_impersonating(self) -> bool:
        """Whether a real actor is acting through another user's identity."""
        return self.impersonator_id is not None

    def recently_reauthenticated(self, now: datetime, window: timedelta) -> bool:
        """Check whether a step-up for the current credential is still fresh.

        The step-up only counts when it was completed with the same credential
        this session is using and no longer ago than ``window``.
        """
        if self.step_up is None or self.credential_fingerprint is None:
            return False
        if self.step_up.credential_fingerprint != self.credential_fingerprint:
            return False
        return now - self.step_up.completed_at <= window

    def impersonating(self, impersonator_id: str) -> SessionContext:
        """Return a copy of this session acting on behalf of another user."""
        return replace(self, impersonator_id=impersonator_id)

    def without_impersonation(self) -> SessionContext:
        """Return a copy of this session restored to the real actor."""
        return replace(self, impersonator_id=None)
