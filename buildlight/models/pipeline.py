"""Pipeline record model — the provider's most recent run on a branch."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

UNKNOWN_AUTHOR = "unknown"


class PipelineRecord(BaseModel):
    """One pipeline entry as returned by the provider.

    Only the fields the watchdog acts on are kept.  Built by the fetcher
    and never mutated or persisted afterwards.
    """

    model_config = ConfigDict(frozen=True)

    ref: str
    # None when the provider reports a null status; classified as pending
    status: str | None
    sha: str
    author: str = UNKNOWN_AUTHOR

    @property
    def short_sha(self) -> str:
        """First 8 characters of the commit id, as shown in log lines."""
        return self.sha[:8]

    @classmethod
    def from_api(cls, entry: dict[str, Any]) -> PipelineRecord:
        """Build a record from one element of the pipelines list.

        The author lives in a nested ``user`` object which the provider
        omits on some endpoints; it falls back to ``"unknown"``.
        """
        user = entry.get("user") or {}
        author = user.get("name") if isinstance(user, dict) else None
        return cls(
            ref=entry["ref"],
            status=entry["status"],
            sha=entry["sha"],
            author=author or UNKNOWN_AUTHOR,
        )
