"""Text generation through the Gemini and OpenAI HTTP APIs.

Prompt in, text out. Failures raise ``AIServiceError``; callers decide on
their own fallback text. There is no retry.
"""
import logging
import re

import requests

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    pass


class GeminiClient:
    def __init__(self, api_key: str | None, model: str = "gemini-1.5-flash",
                 api_base: str = "https://generativelanguage.googleapis.com/v1beta",
                 timeout: int = 30, session=None):
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def generate(self, prompt: str, temperature: float = 0.7, max_output_tokens: int = 2048) -> str:
        if not self.api_key:
            raise AIServiceError("GEMINI_API_KEY is not configured")

        url = f"{self.api_base}/models/{self.model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "topK": 40,
                "topP": 0.95,
                "maxOutputTokens": max_output_tokens,
            },
        }
        try:
            resp = self.session.post(url, params={"key": self.api_key}, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise AIServiceError(f"Gemini request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise AIServiceError(f"Gemini API request failed ({resp.status_code})")

        try:
            data = resp.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except ValueError as exc:
            raise AIServiceError("Gemini returned an invalid response") from exc
        except (KeyError, IndexError, TypeError):
            text = None
        if not isinstance(text, str) or not text:
            raise AIServiceError("No content generated by Gemini")
        return text


class OpenAIClient:
    def __init__(self, api_key: str | None, model: str = "gpt-3.5-turbo",
                 api_base: str = "https://api.openai.com/v1", timeout: int = 30, session=None):
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def generate(self, prompt: str, system: str | None = None,
                 temperature: float = 0.7, max_tokens: int = 1500) -> str:
        if not self.api_key:
            raise AIServiceError("OPENAI_API_KEY is not configured")

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        try:
            resp = self.session.post(f"{self.api_base}/chat/completions",
                                     headers=headers, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise AIServiceError(f"OpenAI request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise AIServiceError(f"OpenAI API request failed ({resp.status_code})")

        try:
            data = resp.json()
            content = ((data.get("choices") or [{}])[0].get("message") or {}).get("content")
        except (ValueError, AttributeError, IndexError, TypeError) as exc:
            raise AIServiceError("OpenAI returned an invalid response") from exc
        if not isinstance(content, str) or not content.strip():
            raise AIServiceError("No content generated by OpenAI")
        return content.strip()


def split_sections(text: str, headings) -> dict:
    """Pull ``**Heading:**`` blocks out of generated text.

    A section runs until the next ``**`` or the end of the text. Headings
    that are not found map to None.
    """
    sections = {}
    for heading in headings:
        pattern = rf"\*\*{re.escape(heading)}:\*\*\s*(.*?)(?=\*\*|\Z)"
        match = re.search(pattern, text or "", flags=re.S)
        sections[heading] = match.group(1).strip() if match else None
    return sections
