"""Pipeline fetcher — one authenticated GET per poll cycle.

Bridge boundary
---------------
The provider returns the project's pipelines newest-first.  The fetcher
picks the first entry whose ``ref`` equals the tracked branch.  No match
is a valid outcome (``None``), not an error.

Every failure mode (network error, timeout, non-2xx status, a body that
is not a JSON list of pipeline objects) surfaces as ``TransportError`` so
the poll loop has a single thing to catch.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from buildlight.models.pipeline import PipelineRecord

if TYPE_CHECKING:
    from buildlight.config import MonitorSettings

logger = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """Raised when the pipeline list cannot be read or understood."""


class PipelineFetcher:
    """Reads the latest pipeline for a branch from the GitLab API.

    Parameters
    ----------
    api_url:
        Base URL of the API, e.g. ``https://gitlab.com/api/v4``.
    project_id:
        Numeric id or ``group/project`` path; URL-encoded on use.
    private_token:
        Sent as the ``PRIVATE-TOKEN`` header.
    timeout:
        Per-request timeout in seconds.
    client:
        Pre-built ``httpx.Client``.  When given, the caller owns it and
        ``close()`` leaves it open.
    """

    def __init__(
        self,
        api_url: str,
        project_id: str,
        private_token: str,
        *,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._project_id = project_id
        self._private_token = private_token
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: MonitorSettings, *, client: httpx.Client | None = None
    ) -> PipelineFetcher:
        """Build a fetcher from the loaded settings."""
        return cls(
            settings.gitlab_api_url,
            settings.gitlab_project_id,
            settings.gitlab_api_private_token.get_secret_value(),
            timeout=settings.request_timeout,
            client=client,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def pipelines_url(self) -> str:
        """The "list pipelines for project" endpoint."""
        project = quote(str(self._project_id), safe="")
        return f"{self._api_url}/projects/{project}/pipelines"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fetch(self, branch: str) -> PipelineRecord | None:
        """Return the most recent pipeline on *branch*, or ``None``.

        Raises
        ------
        TransportError
            On any network failure, non-2xx response or malformed body.
        """
        logger.info("Fetching pipelines ...")
        try:
            response = self._client.get(
                self.pipelines_url,
                params={"ref": branch},
                headers={"PRIVATE-TOKEN": self._private_token},
            )
        except httpx.RequestError as exc:
            raise TransportError(
                f"{type(exc).__name__} while fetching pipelines: {exc}"
            ) from exc

        if not response.is_success:
            logger.debug("Pipelines response: %r %s", response, response.text)
            raise TransportError(
                f"{response.reason_phrase} ({response.status_code}): {response.text}"
            )

        try:
            pipelines = response.json()
        except ValueError as exc:
            raise TransportError(f"Malformed pipelines response: {exc}") from exc

        record = self._select(pipelines, branch)
        logger.debug("Last build on %s: %r", branch, record)
        return record

    def close(self) -> None:
        """Release the HTTP client if this fetcher created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> PipelineFetcher:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _select(pipelines: Any, branch: str) -> PipelineRecord | None:
        """Pick the first (newest) entry for *branch* from the list body."""
        if not isinstance(pipelines, list):
            raise TransportError(
                f"Malformed pipelines response: expected a list, "
                f"got {type(pipelines).__name__}"
            )

        for entry in pipelines:
            if not isinstance(entry, dict):
                raise TransportError(
                    f"Malformed pipelines response: entry is "
                    f"{type(entry).__name__}, not an object"
                )
            if entry.get("ref") != branch:
                continue
            try:
                return PipelineRecord.from_api(entry)
            except (KeyError, ValidationError) as exc:
                raise TransportError(
                    f"Malformed pipeline entry for {branch}: {exc}"
                ) from exc

        return None
