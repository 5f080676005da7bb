"""Vision metrics API client (blur, technical quality, aesthetics, emotion)."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from gallery_curation.domain.vision import AnalysisFlags


class VisionApiError(Exception):
    """Raised when the metrics backend cannot serve a request."""

    def __init__(self, code: str, message: str, status_code: int) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class MetricsClient(Protocol):
    """Interface for the metrics inference backend."""

    async def analyze_batch(
        self, images: list[dict[str, str]], flags: AnalysisFlags
    ) -> dict[str, object]:
        """Analyze ``[{"url", "image_id"}]`` images and return raw API data."""


@dataclass
class HttpxVisionApiClient(MetricsClient):
    """HTTPX-backed metrics client."""

    base_url: str
    api_key: str | None
    timeout_seconds: float
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, base_url: str, api_key: str | None, timeout_seconds: float = 30.0
    ) -> "HttpxVisionApiClient":
        """Create a metrics client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            api_key=api_key,
            timeout_seconds=timeout_seconds,
            http_client=httpx.AsyncClient(),
        )

    async def analyze_batch(
        self, images: list[dict[str, str]], flags: AnalysisFlags
    ) -> dict[str, object]:
        """Run the batch analysis endpoint."""
        payload: dict[str, object] = {
            "images": [
                {"url": image["url"], "image_id": image.get("image_id")}
                for image in images
            ],
            **flags.model_dump(),
        }
        return await self._request("POST", "/v1/analyze/batch", payload)

    async def health(self) -> dict[str, object]:
        """Return the backend health payload."""
        return await self._request("GET", "/health")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self, method: str, path: str, payload: dict[str, object] | None = None
    ) -> dict[str, object]:
        url = f"{self.base_url}{path}"
        try:
            response = await self.http_client.request(
                method,
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise VisionApiError(
                "timeout",
                f"Vision API request to {path} timed out after "
                f"{self.timeout_seconds}s",
                408,
            ) from exc
        except httpx.HTTPError as exc:
            raise VisionApiError(
                "network_error", f"Could not reach Vision API at {url}: {exc}", 503
            ) from exc

        if response.is_error:
            code = "api_error"
            message = f"Vision API returned HTTP {response.status_code}"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                code = str(body.get("error") or code)
                message = str(body.get("message") or message)
            raise VisionApiError(code, message, response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise VisionApiError(
                "invalid_response", f"Vision API returned non-JSON for {path}", 502
            ) from exc

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers
