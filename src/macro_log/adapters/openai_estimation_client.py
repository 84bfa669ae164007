"""OpenAI Responses API client for nutrition estimation."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from macro_log.services.estimation import (
    ESTIMATION_SCHEMA,
    SYSTEM_PROMPT,
    EstimationClient,
    image_prompt,
    text_prompt,
)


@dataclass
class OpenAIEstimationClient(EstimationClient):
    """Estimation client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    model: str
    reasoning_effort: str | None
    store: bool

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        api_key: str,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        timeout: float = 60.0,
    ) -> "OpenAIEstimationClient":
        """Create an OpenAI estimation client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, timeout=timeout),
            model=model,
            reasoning_effort=reasoning_effort,
            store=store,
        )

    async def estimate_text(self, *, description: str) -> dict[str, object]:
        return await self._respond(
            [{"type": "input_text", "text": text_prompt(description)}]
        )

    async def estimate_image(
        self,
        *,
        image_ref: str,
        title: str | None,
        description: str | None,
    ) -> dict[str, object]:
        return await self._respond(
            [
                {"type": "input_text", "text": image_prompt(title, description)},
                {"type": "input_image", "image_url": image_ref},
            ]
        )

    async def _respond(self, content: list[dict[str, str]]) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        request_payload: dict[str, object] = {
            "model": self.model,
            "instructions": SYSTEM_PROMPT,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "nutrition_estimate",
                    "strict": True,
                    "schema": ESTIMATION_SCHEMA,
                }
            },
            "store": self.store,
        }
        if self.reasoning_effort:
            request_payload["reasoning"] = {"effort": self.reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def close(self) -> None:
        await self.client.close()
