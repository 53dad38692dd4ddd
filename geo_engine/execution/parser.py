"""
Tolerant parsing of answer-service replies.

Supported shapes:
- {"output": [..., {"type": "message", "status": "completed",
                    "content": [{"type": "output_text", "text": ..., "annotations": [...]}]}]}
- the same wrapped one level deeper: {"data": [...]} or {"data": {"output": [...]}}
- a bare list of output items
- a direct "output_text" field (also "outputText", "message.output_text")
"""

from typing import Any, Dict, List, Optional

from geo_engine.models import WebSearchCitation


def _completed_message(items: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(items, list):
        return None
    for item in items:
        if (
            isinstance(item, dict)
            and item.get("type") == "message"
            and item.get("status") == "completed"
        ):
            return item
    return None


def _find_output_text_item(data: Any) -> Optional[Dict[str, Any]]:
    """The output_text content item of the completed message, if any."""
    if isinstance(data, dict):
        if "output" in data:
            message = _completed_message(data["output"])
        elif "data" in data:
            return _find_output_text_item(data["data"])
        else:
            message = None
    else:
        message = _completed_message(data)

    if not message or not isinstance(message.get("content"), list):
        return None

    for content in message["content"]:
        if isinstance(content, dict) and content.get("type") == "output_text":
            return content
    return None


def extract_output_text(data: Any) -> str:
    item = _find_output_text_item(data)
    if item and isinstance(item.get("text"), str) and item["text"]:
        return item["text"]

    if isinstance(data, dict):
        if isinstance(data.get("output_text"), str):
            return data["output_text"]
        message = data.get("message")
        if isinstance(message, dict) and isinstance(message.get("output_text"), str):
            return message["output_text"]
        if isinstance(data.get("outputText"), str):
            return data["outputText"]
        if "data" in data:
            return extract_output_text(data["data"])

    return ""


def _citations_from_annotations(annotations: Any) -> List[WebSearchCitation]:
    citations = []
    if not isinstance(annotations, list):
        return citations
    for annotation in annotations:
        if not isinstance(annotation, dict):
            continue
        if annotation.get("type") != "url_citation" or not annotation.get("url"):
            continue
        citations.append(
            WebSearchCitation(
                url=annotation["url"],
                title=annotation.get("title") or annotation["url"],
                snippet=annotation.get("snippet") or "",
            )
        )
    return citations


def extract_citations(data: Any) -> List[WebSearchCitation]:
    """url_citation annotations, deduplicated by URL (first wins)."""
    citations: List[WebSearchCitation] = []

    item = _find_output_text_item(data)
    if item:
        citations.extend(_citations_from_annotations(item.get("annotations")))

    if isinstance(data, dict) and isinstance(data.get("message"), dict):
        for content in data["message"].get("content") or []:
            if isinstance(content, dict):
                citations.extend(_citations_from_annotations(content.get("annotations")))

    unique: Dict[str, WebSearchCitation] = {}
    for citation in citations:
        unique.setdefault(citation.url, citation)
    return list(unique.values())
