"""Lenient JSON helpers for model output.

``GroqClient.chat_json`` runs every model JSON payload through
:func:`loads_object`, and callers pull lists out with :func:`list_field`.
Malformed output never raises, it degrades to an empty value at the smallest
possible scope (an empty dict for the whole payload, an empty list for one
field).
"""
import json
import logging

logger = logging.getLogger(__name__)


def loads_object(raw: str | None) -> dict:
    """Parse *raw* as a JSON object.  Returns ``{}`` if it is not one."""
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Model returned malformed JSON: %.200s", raw)
        return {}
    if not isinstance(data, dict):
        logger.warning("Model returned JSON %s, expected an object", type(data).__name__)
        return {}
    return data


def list_field(data: dict, key: str) -> list:
    """Return ``data[key]`` if it is a list, else ``[]``."""
    value = data.get(key)
    return value if isinstance(value, list) else []
