from __future__ import annotations

import logging
from typing import Any, Sequence

import requests

from ..config import Settings, settings
from ..errors import (
    AiConfigError,
    AiError,
    AiGenericError,
    AiModelNotFoundError,
    AiNetworkError,
    AiQuotaError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERATION_CONFIG = {"temperature": 0.7, "topP": 0.8, "topK": 40}


class GeminiHttpError(Exception):
    def __init__(self, model: str, status_code: int, body: str) -> None:
        super().__init__(f"{model}: HTTP {status_code}: {body[:200]}")
        self.model = model
        self.status_code = status_code
        self.body = body


def classify_error(error: Exception | None) -> AiError:
    """Map the last model failure onto the assistant error taxonomy."""
    if isinstance(error, AiError):
        return error
    if isinstance(error, (requests.ConnectionError, requests.Timeout)):
        return AiNetworkError()
    if isinstance(error, GeminiHttpError):
        body = error.body.lower()
        if error.status_code in (400, 401, 403) and ("api key" in body or "api_key" in body):
            return AiConfigError("Invalid Gemini API key. Check GEMINI_API_KEY in the server environment.")
        if error.status_code == 404:
            return AiModelNotFoundError()
        if error.status_code == 429 or "quota" in body:
            return AiQuotaError()
    return AiGenericError()


def _response_text(payload: dict[str, Any]) -> str:
    parts = []
    for candidate in payload.get("candidates") or []:
        for part in (candidate.get("content") or {}).get("parts") or []:
            if part.get("text"):
                parts.append(part["text"])
    return "".join(parts)


class Assistant:
    """Text-in/text-out wrapper over the Gemini ``generateContent`` endpoint."""

    def __init__(
        self,
        api_key: str,
        models: Sequence[str],
        api_base: str = settings.gemini_api_base,
        timeout: float = settings.ai_request_timeout_seconds,
    ) -> None:
        self.api_key = api_key
        self.models = tuple(models)
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, config: Settings = settings) -> Assistant:
        return cls(config.gemini_api_key, config.gemini_models, config.gemini_api_base, config.ai_request_timeout_seconds)

    def _call(self, model: str, prompt: str) -> str:
        response = requests.post(
            f"{self.api_base}/models/{model}:generateContent",
            params={"key": self.api_key},
            json={"contents": [{"parts": [{"text": prompt}]}], "generationConfig": GENERATION_CONFIG},
            timeout=self.timeout,
        )
        if response.status_code != 200:
            raise GeminiHttpError(model, response.status_code, response.text)
        text = _response_text(response.json())
        if not text:
            raise GeminiHttpError(model, response.status_code, "empty response")
        return text

    def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise AiConfigError()
        last_error: Exception | None = None
        for model in self.models:
            try:
                text = self._call(model, prompt)
            except (requests.RequestException, GeminiHttpError, ValueError) as exc:
                logger.warning("gemini model %s failed: %s", model, exc)
                last_error = exc
                continue
            logger.info("gemini model %s answered", model)
            return text
        error = classify_error(last_error)
        logger.error("all gemini models failed (%s): %s", error.kind, last_error)
        raise error from last_error

    def summarize_text(self, text: str) -> str:
        prompt = (
            "Please summarize the following text concisely:\n\n"
            f"{text}\n\n"
            "Provide a summary that captures the main points."
        )
        return self.generate(prompt)

    def suggest_note_improvements(self, title: str, content: str) -> str:
        prompt = (
            f'I have a note with the title "{title}" and the following content:\n\n'
            f"{content}\n\n"
            "Please suggest 2-3 ways I could improve or expand on this note. Be concise and practical."
        )
        return self.generate(prompt)

    def suggest_todo_priorities(self, todos: Sequence[str]) -> str:
        todo_list = "\n".join(f"- {todo}" for todo in todos)
        prompt = (
            "Here's my todo list:\n\n"
            f"{todo_list}\n\n"
            "Please help me prioritize these tasks by suggesting which ones I should do first, second, etc.\n"
            "Explain your reasoning briefly."
        )
        return self.generate(prompt)

    def run_action(self, action: str, data: dict[str, Any]) -> str:
        if action == "generate":
            return self.generate(_require_text(data, "prompt"))
        if action == "summarize":
            return self.summarize_text(_require_text(data, "text"))
        if action == "improveNote":
            return self.suggest_note_improvements(_require_text(data, "title"), str(data.get("content") or ""))
        if action == "prioritizeTodos":
            todos = data.get("todos")
            if not isinstance(todos, list) or not todos or not all(isinstance(t, str) for t in todos):
                raise ValidationError("todos must be a non-empty list of strings", field="data.todos")
            return self.suggest_todo_priorities(todos)
        raise ValidationError(f"unknown action: {action}", field="action")


def _require_text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{key} is required", field=f"data.{key}")
    return value


def generate(prompt: str) -> str:
    return Assistant.from_settings(settings).generate(prompt)
