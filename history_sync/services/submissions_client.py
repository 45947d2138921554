"""
Remote data source for questionnaire submissions.

Key patterns:
- Protocol-based dependency injection (the reconciler only sees SubmissionsSource)
- Result type for expected failures (network, decode, non-2xx)
- Async context manager for the HTTP client lifecycle
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from history_sync.config import APIConfig
from history_sync.domain.models import CheckInCategory, Questionnaire, Submission
from history_sync.services.errors import (
    DecodeError,
    HistoryFetchError,
    ServerError,
    TransportError,
    message_for_status,
)
from history_sync.services.result import Result
from history_sync.services.session import SessionProvider

logger = structlog.get_logger(__name__)

_submissions_adapter = TypeAdapter(list[Submission])
_questionnaires_adapter = TypeAdapter(list[Questionnaire])


class SubmissionsSource(Protocol):
    """
    How the history reconciler talks to the backend.

    Implementations never raise for expected failures; they return a
    Result carrying a HistoryFetchError instead.
    """

    async def fetch_submissions(
        self, *, sort_by: str, sort_order: str, aggregate: bool = True
    ) -> Result[list[Submission], HistoryFetchError]: ...

    async def fetch_questionnaire(
        self, questionnaire_id: int, checkin_type: CheckInCategory
    ) -> Result[Questionnaire, HistoryFetchError]: ...


class HttpSubmissionsSource:
    """
    httpx-backed submissions source.

    Transport failures are retried ``config.retry_attempts`` times; HTTP
    errors and decode failures are not.
    """

    def __init__(
        self,
        config: APIConfig,
        session: SessionProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.session = session
        self.logger = logger.bind(component="submissions_client", base_url=config.base_url)
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpSubmissionsSource":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _auth_headers(self) -> dict[str, str]:
        token = self.session.auth_token if self.session is not None else None
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def _send(
        self, path: str, params: dict[str, Any], headers: dict[str, str]
    ) -> httpx.Response:
        """GET with a fixed number of retries on transport failures."""
        attempts = self.config.retry_attempts + 1
        attempt = 1
        while True:
            try:
                return await self._client.get(path, params=params, headers=headers)
            except httpx.TransportError as e:
                self.logger.warning(
                    "request_transport_failed",
                    path=path,
                    attempt=attempt,
                    max_attempts=attempts,
                    error=str(e) or type(e).__name__,
                )
                if attempt >= attempts:
                    raise TransportError(str(e) or type(e).__name__) from e
                attempt += 1

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        """GET ``path`` and return the decoded JSON body; raises HistoryFetchError subclasses."""
        headers = self._auth_headers()
        if not headers:
            self.logger.debug("request_without_auth_token", path=path)

        response = await self._send(path, params, headers)

        if not response.is_success:
            raise ServerError(response.status_code, _error_message(response))

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(str(e)) from e

    async def fetch_submissions(
        self, *, sort_by: str, sort_order: str, aggregate: bool = True
    ) -> Result[list[Submission], HistoryFetchError]:
        params = {
            "aggregate": "true" if aggregate else "false",
            "sort_by": sort_by,
            "sort_order": sort_order,
        }
        try:
            payload = await self._get_json("/questionnaires/submissions", params)
            submissions = _submissions_adapter.validate_python(payload)
        except ValidationError as e:
            self.logger.error("submissions_decode_failed", error_count=e.error_count())
            return Result.err(DecodeError(str(e)))
        except HistoryFetchError as e:
            self.logger.error(
                "submissions_fetch_failed", error=str(e), error_type=type(e).__name__
            )
            return Result.err(e)

        self.logger.info(
            "submissions_fetched", count=len(submissions), sort_by=sort_by, sort_order=sort_order
        )
        return Result.ok(submissions)

    async def fetch_questionnaire(
        self, questionnaire_id: int, checkin_type: CheckInCategory
    ) -> Result[Questionnaire, HistoryFetchError]:
        try:
            payload = await self._get_json(
                f"/questionnaires/{questionnaire_id}",
                {"checkin_type": checkin_type.value.upper()},
            )
            # The endpoint answers with either one questionnaire or a list of them
            if isinstance(payload, dict):
                payload = [payload]
            questionnaires = _questionnaires_adapter.validate_python(payload)
        except ValidationError as e:
            self.logger.error("questionnaire_decode_failed", error_count=e.error_count())
            return Result.err(DecodeError(str(e)))
        except HistoryFetchError as e:
            self.logger.error("questionnaire_fetch_failed", error=str(e))
            return Result.err(e)

        if not questionnaires:
            return Result.err(DecodeError("empty questionnaire response"))

        merged = questionnaires[0].model_copy(
            update={"questions": [q for qn in questionnaires for q in qn.questions]}
        )
        return Result.ok(merged)


def _error_message(response: httpx.Response) -> str:
    """Prefer the backend's own ``detail``/``message``; fall back to a per-status message."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("detail", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return message_for_status(response.status_code)


@asynccontextmanager
async def open_source(
    config: APIConfig, session: SessionProvider | None = None
) -> AsyncIterator[HttpSubmissionsSource]:
    """Create an HTTP source and make sure its connection pool is closed."""
    source = HttpSubmissionsSource(config, session=session)
    try:
        yield source
    finally:
        await source.aclose()
