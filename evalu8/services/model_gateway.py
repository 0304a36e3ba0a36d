"""Thin client for an OpenAI-compatible chat-completions endpoint.

We call the HTTP API directly with `requests` rather than through an SDK.
The gateway asks for JSON-mode output and hands back the parsed object; it
never invents a fallback itself. Callers (the conductor and the scorer)
catch `ModelGatewayError` and substitute their own deterministic results.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

JSON_ONLY_INSTRUCTION = "Respond with exactly one JSON object and nothing else."

_FENCE_RE = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$")


class ModelGatewayError(Exception):
    pass


class ModelServiceError(ModelGatewayError):
    """The completion service could not be reached or answered with an error."""


class ModelResponseError(ModelGatewayError):
    """The service answered, but not with a single JSON object."""


def parse_json_object(text: str) -> Dict[str, Any]:
    text = (text or "").strip()
    m = _FENCE_RE.match(text)
    if m:
        text = m.group(1)
    if not text:
        raise ModelResponseError("empty model response")
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ModelResponseError(f"model response is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise ModelResponseError(f"expected a JSON object, got {type(data).__name__}")
    return data


class ModelGateway:
    def __init__(self, api_key: Optional[str], base_url: str = "https://api.openai.com/v1",
                 model: str = "gpt-5-mini", max_tokens: int = 8192, timeout: float = 60.0,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.url = base_url.rstrip("/") + "/chat/completions"
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> "ModelGateway":
        return cls(
            api_key=config.get("OPENAI_API_KEY"),
            base_url=config.get("OPENAI_BASE_URL") or "https://api.openai.com/v1",
            model=config.get("OPENAI_MODEL") or "gpt-5-mini",
            max_tokens=int(config.get("OPENAI_MAX_TOKENS") or 8192),
            timeout=float(config.get("OPENAI_TIMEOUT") or 60),
        )

    def build_request(self, system_prompt: str, turns: List[Dict[str, str]],
                      schema_hint: Optional[str] = None) -> Dict[str, Any]:
        system = system_prompt.rstrip()
        if schema_hint:
            system += "\n\nYou MUST respond with valid JSON in this exact format:\n" + schema_hint
        system += "\n\n" + JSON_ONLY_INSTRUCTION
        messages = [{"role": "system", "content": system}]
        messages += [{"role": t["role"], "content": t["content"]} for t in turns]
        return {
            "model": self.model,
            "messages": messages,
            "max_completion_tokens": self.max_tokens,
            "response_format": {"type": "json_object"},
        }

    def complete(self, system_prompt: str, turns: List[Dict[str, str]],
                 schema_hint: Optional[str] = None) -> Dict[str, Any]:
        """Send one chat request and return the model's JSON object.

        Raises ModelServiceError on transport/HTTP failures and
        ModelResponseError when the reply is not a JSON object.
        """
        if not self.api_key:
            raise ModelServiceError("OPENAI_API_KEY is not configured")

        body = self.build_request(system_prompt, turns, schema_hint)
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            r = self.session.post(self.url, headers=headers, json=body, timeout=self.timeout)
            r.raise_for_status()
            jr = r.json()
        except requests.exceptions.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            text = e.response.text[:1000] if e.response is not None else None
            logger.warning("completion request failed with %s: %s", status, text)
            raise ModelServiceError(f"completion service returned {status}") from e
        except requests.exceptions.RequestException as e:
            logger.warning("completion request failed: %s", e)
            raise ModelServiceError(str(e)) from e
        except ValueError as e:
            raise ModelServiceError("completion service returned a non-JSON body") from e

        try:
            content = jr["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ModelResponseError("completion body has no message content") from e

        logger.debug("model replied with %d chars", len(content or ""))
        return parse_json_object(content)
