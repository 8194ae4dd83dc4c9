"""OpenAI chat completions client for nutrition analysis."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from nutritrack.services.analysis import AnalysisClient


@dataclass
class OpenAIAnalysisClient(AnalysisClient):
    """Analysis client backed by OpenAI chat completions in JSON mode."""

    client: AsyncOpenAI
    max_tokens: int = 1000

    @classmethod
    def create(cls, api_key: str) -> "OpenAIAnalysisClient":
        """Create an OpenAI analysis client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def analyze(
        self,
        *,
        model: str,
        system_prompt: str,
        text: str | None = None,
        image_data_url: str | None = None,
    ) -> object:
        """Call OpenAI and decode the JSON answer."""
        if image_data_url:
            user_content: object = [
                {"type": "text", "text": text or ""},
                {"type": "image_url", "image_url": {"url": image_data_url}},
            ]
        else:
            user_content = text or ""

        response = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            response_format={"type": "json_object"},
            max_tokens=self.max_tokens,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(content)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
