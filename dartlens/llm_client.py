from typing import Any, Dict, Optional, Callable
from urllib.parse import urlparse, urlunparse
import requests

from .errors import AIServiceError, MissingAPIKeyError


class LLMClient:
    def __init__(
        self,
        provider: str,
        model: str,
        api_key: str,
        base_url: str,
        timeout: int = 60,
        post_fn: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.provider = provider
        self.model = model
        self.api_key = api_key
        self.base_url = _normalize_base_url(base_url)
        self.timeout = timeout
        self._post = post_fn or requests.post

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def generate_text(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.4,
    ) -> str:
        provider = self.provider.lower().strip()
        if provider not in ("gemini", "deepseek"):
            raise ValueError(f"Unsupported provider: {self.provider}")
        if not self.api_key:
            raise MissingAPIKeyError("API key not available")
        if provider == "gemini":
            return self._gemini_generate_content(prompt, system_prompt, temperature)
        return self._openai_chat_completion(
            endpoint_path="/v1/chat/completions",
            system_prompt=system_prompt,
            user_prompt=prompt,
            temperature=temperature,
        )

    def _gemini_generate_content(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
    ) -> str:
        url = f"{self.base_url}/v1beta/models/{self.model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": temperature},
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}
        data = self._post_json(url, headers, payload)
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            raise AIServiceError("Malformed Gemini response", detail=str(data)[:500])
        return "".join(part.get("text", "") for part in parts)

    def _openai_chat_completion(
        self,
        endpoint_path: str,
        system_prompt: Optional[str],
        user_prompt: str,
        temperature: float,
    ) -> str:
        url = f"{self.base_url}{endpoint_path}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})
        payload = {
            "model": self.model,
            "temperature": temperature,
            "messages": messages,
        }
        data = self._post_json(url, headers, payload)
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise AIServiceError("Malformed chat completion response", detail=str(data)[:500])

    def _post_json(self, url: str, headers: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self._post(url, headers=headers, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.RequestException as exc:
            raise AIServiceError(f"LLM request failed: {exc}")
        except ValueError as exc:
            raise AIServiceError(f"LLM response is not JSON: {exc}")


def _normalize_base_url(base_url: str) -> str:
    """Accept root URL, /v1 URL, or full chat completions endpoint and normalize."""
    raw = (base_url or "").strip()
    if not raw:
        return ""

    parsed = urlparse(raw)
    if not parsed.scheme or not parsed.netloc:
        return raw.rstrip("/")

    path = parsed.path.rstrip("/")
    lowered = path.lower()
    chat_suffix = "/chat/completions"
    v1_suffix = "/v1"

    if lowered.endswith(chat_suffix):
        path = path[: -len(chat_suffix)]
        lowered = path.lower()
    if lowered.endswith(v1_suffix):
        path = path[: -len(v1_suffix)]

    normalized = parsed._replace(path=path, params="", query="", fragment="")
    return urlunparse(normalized).rstrip("/")
