"""Token usage normalization across vendor usage shapes."""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

_INPUT_KEYS = ("input_tokens", "prompt_tokens", "inputTokens", "promptTokens")
_OUTPUT_KEYS = ("output_tokens", "completion_tokens", "outputTokens", "completionTokens")
_TOTAL_KEYS = ("total_tokens", "totalTokens")
_CACHED_KEYS = ("cached_input_tokens", "cache_read_input_tokens", "cachedInputTokens")
_CACHE_CREATION_KEYS = ("cache_creation_input_tokens", "cacheCreationInputTokens")


@dataclass
class Usage:
    """Normalized token accounting for one call."""

    input_tokens: int
    output_tokens: int
    total_tokens: int
    cached_input_tokens: Optional[int] = None
    cache_creation_input_tokens: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: Dict[str, Any] = {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
        }
        if self.cached_input_tokens is not None:
            result["cached_input_tokens"] = self.cached_input_tokens
        if self.cache_creation_input_tokens is not None:
            result["cache_creation_input_tokens"] = self.cache_creation_input_tokens
        return result


def _first(mapping: Optional[Mapping[str, Any]], keys) -> Optional[int]:
    if not mapping:
        return None
    for key in keys:
        value = mapping.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return int(value)
    return None


def _cached_from_details(mapping: Optional[Mapping[str, Any]]) -> Optional[int]:
    # OpenAI reports cached prompt tokens under prompt_tokens_details
    if not mapping:
        return None
    details = mapping.get("prompt_tokens_details")
    if isinstance(details, Mapping):
        return _first(details, ("cached_tokens",))
    return None


def normalize_usage(
    usage: Optional[Mapping[str, Any]],
    total_usage: Optional[Mapping[str, Any]] = None,
) -> Optional[Usage]:
    """Normalize a vendor usage payload.

    Args:
        usage: Usage of the final step (any supported key style).
        total_usage: Aggregate usage, consulted when ``usage`` lacks a value.

    Returns:
        Usage, or None when no tokens were reported at all.
    """
    primary = usage if usage is not None else total_usage

    def pick(keys) -> Optional[int]:
        value = _first(primary, keys)
        if value is None:
            value = _first(total_usage, keys)
        return value

    input_tokens = pick(_INPUT_KEYS) or 0
    output_tokens = pick(_OUTPUT_KEYS) or 0
    cached = pick(_CACHED_KEYS)
    if cached is None:
        cached = _cached_from_details(primary) or _cached_from_details(total_usage)
    cache_creation = pick(_CACHE_CREATION_KEYS)

    total_tokens = pick(_TOTAL_KEYS)
    if total_tokens is None:
        total_tokens = input_tokens + output_tokens

    if total_tokens > 0 and (input_tokens > 0 or output_tokens > 0):
        total_tokens = input_tokens + output_tokens

    if total_tokens > 0 and input_tokens == 0 and output_tokens == 0:
        return Usage(input_tokens=total_tokens, output_tokens=0, total_tokens=total_tokens)

    if total_tokens == 0 and (input_tokens > 0 or output_tokens > 0):
        total_tokens = input_tokens + output_tokens

    if total_tokens == 0:
        return None

    return Usage(
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        total_tokens=total_tokens,
        cached_input_tokens=cached,
        cache_creation_input_tokens=cache_creation,
    )


def merge_usage(first: Optional[Mapping[str, Any]], second: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Shallow-merge two raw usage payloads; non-null values in ``second`` win."""
    merged: Dict[str, Any] = dict(first or {})
    for key, value in (second or {}).items():
        if value is not None:
            merged[key] = value
    return merged
