"""Chat message content classifier.

Decides how the chat client should render a stored message: plain text,
markdown, inline image, audio player, video player, or raw HTML. Message
content is an opaque string that may embed a JSON payload from a media API,
a base64 data URI, markdown image syntax or an HTML fragment.

Rules are evaluated in order and the first extractor that returns a value
wins. An extractor returning None (no match, malformed JSON) falls through
to the next rule, so classification never raises.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ContentType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    LINK = "link"
    MARKDOWN = "markdown"
    HTML = "html"


@dataclass(frozen=True)
class ParsedContent:
    """Renderable view of a message. Derived on every read, never stored."""

    type: ContentType
    content: str
    metadata: dict[str, Any] | None = field(default=None)


AUDIO_DATA_URI = re.compile(r"data:audio/[^;]+;base64,[A-Za-z0-9+/=]+")
VIDEO_DATA_URI = re.compile(r"data:video/[^;]+;base64,[A-Za-z0-9+/=]+")
IMAGE_DATA_URI = re.compile(r"data:image/[^;]+;base64,[A-Za-z0-9+/=]+")
MARKDOWN_IMAGE = re.compile(r"!\[(.*?)\]\((.*?)\)")

MARKDOWN_LENGTH_THRESHOLD = 200

_VIDEO_JSON_KEYS = ('"videoData":', '"videoUrl":', '"videoEmbed":')
_MARKDOWN_MARKERS = ("\n", "**", "#")


def _load_json_object(content: str) -> dict[str, Any] | None:
    try:
        data = json.loads(content)
    except (ValueError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def _audio_json(content: str) -> ParsedContent | None:
    data = _load_json_object(content)
    if data is None or not isinstance(data.get("audioData"), str):
        return None
    metadata: dict[str, Any] = {
        "title": data.get("title") or "Audio",
        "artist": data.get("artist") or "Unknown Artist",
    }
    if data.get("query") is not None:
        metadata["query"] = data["query"]
    return ParsedContent(ContentType.AUDIO, data["audioData"], metadata)


def _video_json(content: str) -> ParsedContent | None:
    data = _load_json_object(content)
    if data is None:
        return None

    title = data.get("title") or "Video"
    source = data.get("source") or "Unknown Source"

    if data.get("videoData"):
        return ParsedContent(ContentType.VIDEO, str(data["videoData"]), {"title": title, "source": source})

    video_url = data.get("videoUrl")
    if video_url and data.get("videoEmbed"):
        return ParsedContent(
            ContentType.VIDEO,
            str(video_url),
            {"title": title, "source": source, "isEmbedded": True},
        )

    if video_url:
        # Untrusted direct link: show a caption instead of a <video> element.
        caption = data.get("caption") or ""
        return ParsedContent(
            ContentType.MARKDOWN,
            f"\U0001f3ac Video URL: {video_url}\n\n{caption}",
            {"title": title, "source": source},
        )

    return None


def _data_uri(pattern: re.Pattern[str], content_type: ContentType) -> Callable[[str], ParsedContent | None]:
    def extract(content: str) -> ParsedContent | None:
        match = pattern.search(content)
        if match is None:
            return None
        return ParsedContent(content_type, match.group(0))

    return extract


def _markdown_image(content: str) -> ParsedContent | None:
    match = MARKDOWN_IMAGE.search(content)
    if match is None:
        return None
    return ParsedContent(ContentType.IMAGE, match.group(2), {"alt": match.group(1)})


def _whole(content_type: ContentType) -> Callable[[str], ParsedContent | None]:
    return lambda content: ParsedContent(content_type, content)


@dataclass(frozen=True)
class Rule:
    """A cheap substring gate plus an extractor that may still decline."""

    name: str
    gate: Callable[[str], bool]
    extract: Callable[[str], ParsedContent | None]


RULES: tuple[Rule, ...] = (
    Rule("audio_json", lambda c: '"audioData":' in c, _audio_json),
    Rule("audio_data_uri", lambda c: "data:audio/" in c, _data_uri(AUDIO_DATA_URI, ContentType.AUDIO)),
    Rule("video_json", lambda c: any(key in c for key in _VIDEO_JSON_KEYS), _video_json),
    Rule("video_data_uri", lambda c: "data:video/" in c, _data_uri(VIDEO_DATA_URI, ContentType.VIDEO)),
    Rule("image_markdown", lambda c: "![" in c, _markdown_image),
    Rule("image_data_uri", lambda c: "data:image/" in c, _data_uri(IMAGE_DATA_URI, ContentType.IMAGE)),
    Rule("html", lambda c: "<audio" in c or "<video" in c, _whole(ContentType.HTML)),
    Rule(
        "markdown",
        lambda c: any(marker in c for marker in _MARKDOWN_MARKERS) or len(c) > MARKDOWN_LENGTH_THRESHOLD,
        _whole(ContentType.MARKDOWN),
    ),
)


def classify_content(content: str) -> ParsedContent:
    """Classify a raw message string. Pure; always returns a ParsedContent."""
    for rule in RULES:
        if not rule.gate(content):
            continue
        parsed = rule.extract(content)
        if parsed is not None:
            return parsed
    return ParsedContent(ContentType.TEXT, content)
