"""Thin async client for the Ollama generate API."""
import logging
from typing import Optional

import httpx

from backend import config
from backend.ai.errors import LLMError

logger = logging.getLogger(__name__)

SEARCH_RESULTS = 5
SEARCH_SNIPPET_CHARS = 1500


class OllamaClient:
    """Send prompts to Ollama and return the response text.

    ``json_mode`` asks for structured output, ``think_budget`` turns on
    reasoning and bounds the generated tokens, and ``search`` grounds the
    prompt with hosted web-search results when an API key is configured.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        url: str = config.OLLAMA_URL,
        model: str = config.MODEL_FLASH,
        api_key: Optional[str] = config.OLLAMA_API_KEY,
        search_url: str = config.OLLAMA_WEB_SEARCH_URL,
        timeout: float = config.LLM_TIMEOUT,
    ):
        self.client = client
        self.url = url
        self.model = model
        self.api_key = api_key
        self.search_url = search_url
        self.timeout = timeout

    async def _post(self, url: str, **kwargs) -> httpx.Response:
        if self.client is not None:
            return await self.client.post(url, timeout=self.timeout, **kwargs)
        async with httpx.AsyncClient() as client:
            return await client.post(url, timeout=self.timeout, **kwargs)

    async def web_search(self, query: str) -> str:
        """Return search results formatted as prompt context, or "" when unavailable."""
        if not self.api_key:
            logger.warning("Web search requested but OLLAMA_API_KEY is not set; skipping")
            return ""
        try:
            resp = await self._post(
                self.search_url,
                json={"query": query, "max_results": SEARCH_RESULTS},
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            resp.raise_for_status()
            results = resp.json().get("results", [])
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Web search failed: %s", e)
            return ""

        chunks = []
        for r in results:
            content = (r.get("content") or "")[:SEARCH_SNIPPET_CHARS]
            chunks.append(f"Source: {r.get('title', '')} ({r.get('url', '')})\n{content}")
        return "\n\n".join(chunks)

    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        json_mode: bool = False,
        search: bool = False,
        think_budget: Optional[int] = None,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Run one generation and return the response text.

        Raises:
            LLMError: the backend is unreachable or returned a non-2xx status.
        """
        if search:
            context = await self.web_search(prompt.strip()[:400])
            if context:
                prompt = f"Web search results:\n{context}\n\n{prompt}"

        options: dict = {}
        if temperature is not None:
            options["temperature"] = temperature
        payload: dict = {
            "model": model or self.model,
            "prompt": prompt,
            "stream": False,
            "options": options,
        }
        if system:
            payload["system"] = system
        if json_mode:
            payload["format"] = "json"
        if think_budget:
            payload["think"] = True
            options["num_predict"] = think_budget + 2048

        try:
            resp = await self._post(self.url, json=payload)
        except httpx.RequestError as e:
            raise LLMError(f"Ollama service unavailable: {e}", retryable=True) from e
        if not resp.is_success:
            raise LLMError(f"Ollama error: {resp.text[:200]}", status_code=resp.status_code)

        result = resp.json()
        return (result.get("response") or "").strip()
