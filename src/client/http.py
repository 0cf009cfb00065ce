"""httpx-based client for the analysis service HTTP/JSON contract.

Endpoints:
  POST /api/analyze                       multipart: jobTitle, jobDescription, resumes[]
  GET  /api/analysis/{id}/status          {status, results?}
  GET  /api/candidates/{id}               full candidate record
  GET  /api/analysis/{id}/export          binary report
"""

import logging
from collections.abc import AsyncIterator, Sequence
from types import TracebackType
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.client.base import AnalysisService
from src.core.config import ServiceConfig
from src.core.errors import ServiceTransportError
from src.core.schemas import CandidateDetail, StagedFile, StatusResponse, SubmitResponse

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class HttpAnalysisService(AnalysisService):
    """Talks to the analysis service over HTTP.

    Usage::

        async with HttpAnalysisService(settings.service) as service:
            analysis_id = await service.submit_analysis(title, description, files)

    Pass ``client`` to reuse an existing AsyncClient (it is not closed here),
    or ``transport`` to swap the network layer out, e.g. in tests.
    """

    def __init__(
        self,
        config: ServiceConfig,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> "HttpAnalysisService":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def submit_analysis(
        self,
        title: str,
        description: str,
        files: Sequence[StagedFile],
    ) -> str:
        data = {"jobTitle": title, "jobDescription": description}
        parts = [("resumes", (f.name, f.content, f.mime_type)) for f in files]
        logger.info("Uploading %d resume(s) for '%s'", len(parts), title)

        response = await self._send("POST", "/api/analyze", data=data, files=parts)
        body = _parse(SubmitResponse, _json(response))
        if not body.success or not body.analysis_id:
            msg = "Analysis service did not accept the submission"
            raise ServiceTransportError(msg, response.status_code)
        return body.analysis_id

    async def get_status(self, analysis_id: str) -> StatusResponse:
        response = await self._send("GET", f"/api/analysis/{quote(analysis_id, safe='')}/status")
        return _parse(StatusResponse, _json(response))

    async def get_candidate(self, candidate_id: str) -> CandidateDetail:
        response = await self._send("GET", f"/api/candidates/{quote(candidate_id, safe='')}")
        return _parse(CandidateDetail, _json(response))

    async def export_report(self, analysis_id: str) -> bytes:
        response = await self._send("GET", _export_path(analysis_id))
        return response.content

    async def stream_export(self, analysis_id: str) -> AsyncIterator[bytes]:
        try:
            async with self._client.stream("GET", _export_path(analysis_id)) as response:
                response.raise_for_status()
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.HTTPStatusError as e:
            msg = f"Export request failed with HTTP {e.response.status_code}"
            raise ServiceTransportError(msg, e.response.status_code) from e
        except httpx.HTTPError as e:
            msg = f"Export request failed: {e}"
            raise ServiceTransportError(msg) from e

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            msg = f"{method} {url} returned HTTP {e.response.status_code}"
            raise ServiceTransportError(msg, e.response.status_code) from e
        except httpx.HTTPError as e:
            msg = f"{method} {url} failed: {e}"
            raise ServiceTransportError(msg) from e
        logger.debug("%s %s -> %d", method, url, response.status_code)
        return response


def _export_path(analysis_id: str) -> str:
    return f"/api/analysis/{quote(analysis_id, safe='')}/export"


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        msg = f"Response from {response.request.url} is not valid JSON: {e}"
        raise ServiceTransportError(msg, response.status_code) from e


def _parse(model: type[_ModelT], data: Any) -> _ModelT:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        msg = f"Malformed {model.__name__} payload: {e}"
        raise ServiceTransportError(msg) from e
