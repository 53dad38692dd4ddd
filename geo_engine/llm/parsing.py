"""
JSON extraction from free-form LLM replies.
"""

import json
import re
from typing import Any, Dict, Optional

JSON_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```")
RAW_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def extract_json(text: str, required_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Find the first JSON object in text.

    Tries the whole reply, then fenced ```json blocks, then the widest
    {...} span. With required_key, only objects holding that key count.
    """
    if not text:
        return None

    candidates = [text.strip()]
    candidates.extend(JSON_BLOCK_PATTERN.findall(text))
    raw = RAW_OBJECT_PATTERN.search(text)
    if raw:
        candidates.append(raw.group())

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if not isinstance(data, dict):
            continue
        if required_key and required_key not in data:
            continue
        return data

    return None
