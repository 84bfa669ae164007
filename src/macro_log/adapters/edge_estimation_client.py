"""Client for the hosted estimation functions."""

from dataclasses import dataclass

import httpx

from macro_log.services.estimation import EstimationClient


@dataclass
class HttpxEdgeEstimationClient(EstimationClient):
    """HTTPX-backed client for the description and image estimation functions."""

    base_url: str
    anon_key: str
    http_client: httpx.AsyncClient
    timeout: float = 60.0

    @classmethod
    def create(
        cls, supabase_url: str, anon_key: str, timeout: float = 60.0
    ) -> "HttpxEdgeEstimationClient":
        """Create an estimation client with a managed httpx session."""
        return cls(
            base_url=f"{supabase_url.rstrip('/')}/functions/v1",
            anon_key=anon_key,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def estimate_text(self, *, description: str) -> dict[str, object]:
        """Estimate a free-text meal description."""
        return await self._post("description-estimation", {"description": description})

    async def estimate_image(
        self,
        *,
        image_ref: str,
        title: str | None,
        description: str | None,
    ) -> dict[str, object]:
        """Estimate a meal photo with optional title and description context."""
        return await self._post(
            "image-estimation",
            {"imageUrl": image_ref, "title": title, "description": description},
        )

    async def _post(self, function: str, payload: dict[str, object]) -> dict[str, object]:
        response = await self.http_client.post(
            f"{self.base_url}/{function}",
            headers={
                "Authorization": f"Bearer {self.anon_key}",
                "apikey": self.anon_key,
            },
            json=payload,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
