"""OpenAI Responses API client for narrative photo analysis."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from gallery_curation.services.narrative import NarrativeClient, StructuredOutput


@dataclass
class OpenAINarrativeClient(NarrativeClient):
    """Narrative client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAINarrativeClient":
        """Create an OpenAI narrative client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        store: bool,
        instructions: str,
        content: list[dict[str, object]],
        schema: dict[str, object],
        schema_name: str,
    ) -> StructuredOutput:
        """Call OpenAI Responses API with structured outputs."""
        response = await self.client.responses.create(
            model=model,
            instructions=instructions,
            input=[{"role": "user", "content": content}],
            text={
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            temperature=0.1,
            store=store,
        )
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        usage = response.usage
        return StructuredOutput(
            data=json.loads(output_text),
            tokens_used=usage.total_tokens if usage is not None else None,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
