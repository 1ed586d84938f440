import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from src.core.config import settings

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Smart search is unavailable right now; showing exact matches only."

PROMPT_TEMPLATE = (
    'For the search term "{term}" on a Hebrew activity finder website, provide related keywords. '
    'For example, for "בריכה", suggest "שחייה", "מים", "קאנטרי". '
    'Return a JSON object where the key "keywords" is an array of Hebrew keyword strings.'
)


class KeywordExpansionUnavailable(RuntimeError):
    pass


class KeywordExpander(Protocol):
    async def expand(self, term: str) -> list[str]: ...


class NullKeywordExpander:
    """Offline expander: never suggests anything."""

    async def expand(self, term: str) -> list[str]:
        return []


class DisabledKeywordExpander:
    def __init__(self, reason: str = "keyword expansion is disabled"):
        self.reason = reason

    async def expand(self, term: str) -> list[str]:
        raise KeywordExpansionUnavailable(self.reason)


def _dedupe(keywords: list[object]) -> list[str]:
    seen: dict[str, None] = {}
    for keyword in keywords:
        if not isinstance(keyword, str):
            continue
        cleaned = keyword.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


class LLMKeywordExpander:
    """Ask an OpenAI-compatible chat-completions endpoint for related search terms."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        api_base: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.llm_api_key
        self.model = model or settings.llm_model
        self.api_base = (api_base or settings.llm_api_base).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.llm_timeout_seconds
        self._transport = transport

    def _payload(self, term: str) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": PROMPT_TEMPLATE.format(term=term)}],
            "response_format": {"type": "json_object"},
            "temperature": 0.2,
        }

    async def expand(self, term: str) -> list[str]:
        if not term or not term.strip():
            return []
        if not self.api_key:
            raise KeywordExpansionUnavailable("LLM API key not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(
            base_url=self.api_base,
            timeout=self.timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post("/chat/completions", json=self._payload(term.strip()), headers=headers)
            except httpx.HTTPError as exc:
                raise KeywordExpansionUnavailable(f"Request failed: {exc}") from exc

        if response.status_code >= 400:
            raise KeywordExpansionUnavailable(f"LLM error {response.status_code}: {response.text[:200]}")

        try:
            content = response.json()["choices"][0]["message"]["content"]
            parsed = json.loads(content)
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise KeywordExpansionUnavailable("Invalid keyword payload from LLM") from exc

        keywords = parsed.get("keywords") if isinstance(parsed, dict) else None
        if not isinstance(keywords, list):
            raise KeywordExpansionUnavailable("LLM payload has no keyword list")
        return _dedupe(keywords)


@dataclass(slots=True)
class KeywordExpansionResult:
    keywords: list[str] = field(default_factory=list)
    available: bool = True
    message: str | None = None


async def expand_keywords_safely(expander: KeywordExpander, term: str) -> KeywordExpansionResult:
    """Run an expansion; failures become an empty list plus an advisory message."""
    try:
        keywords = await expander.expand(term)
    except KeywordExpansionUnavailable as exc:
        logger.warning("keyword expansion unavailable for term=%r: %s", term, exc)
        return KeywordExpansionResult(keywords=[], available=False, message=UNAVAILABLE_MESSAGE)
    except Exception:
        logger.exception("keyword expansion failed for term=%r", term)
        return KeywordExpansionResult(keywords=[], available=False, message=UNAVAILABLE_MESSAGE)
    return KeywordExpansionResult(keywords=_dedupe(list(keywords or [])))


class KeywordExpansionTracker:
    """Last-write-wins bookkeeping for explicit search submissions.

    Each ``submit`` takes a token; a response whose token is no longer the
    newest is dropped so a slow stale reply never overwrites a fresher one.
    """

    def __init__(self, expander: KeywordExpander):
        self.expander = expander
        self._latest_token = 0
        self.current = KeywordExpansionResult()

    async def submit(self, term: str) -> KeywordExpansionResult | None:
        self._latest_token += 1
        token = self._latest_token
        if not (term or "").strip():
            self.current = KeywordExpansionResult()
            return self.current

        result = await expand_keywords_safely(self.expander, term)
        if token != self._latest_token:
            logger.debug("dropping stale keyword expansion for term=%r", term)
            return None
        self.current = result
        return result

    def reset(self) -> None:
        self._latest_token += 1
        self.current = KeywordExpansionResult()


def build_keyword_expander() -> KeywordExpander:
    if settings.keyword_expansion_configured:
        return LLMKeywordExpander()
    return DisabledKeywordExpander("LLM keyword expansion not configured (LLM_ENABLED / LLM_API_KEY)")
