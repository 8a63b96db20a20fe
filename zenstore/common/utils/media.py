"""YouTube link helpers for product videos."""

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse


_ID_FALLBACK = re.compile(
    r"(?:youtube\.com/(?:[^/\n\s]+/\S+/|(?:v|e(?:mbed)?)/|\S*?[?&]v=)|youtu\.be/)([a-zA-Z0-9_-]{11})"
)


def _query_param(parsed, key: str) -> Optional[str]:
    values = parse_qs(parsed.query).get(key)
    return values[0] if values else None


def youtube_embed_url(url: Optional[str]) -> Optional[str]:
    video_id = youtube_id(url)
    return f"https://www.youtube.com/embed/{video_id}" if video_id else None


def youtube_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    parsed = urlparse(url)
    host = parsed.hostname or ""
    path = parsed.path
    video_id: Optional[str] = None
    if host in {"www.youtube.com", "youtube.com", "m.youtube.com"}:
        if path == "/watch":
            video_id = _query_param(parsed, "v")
        elif path.startswith("/shorts/"):
            video_id = path[len("/shorts/"):]
        elif path.startswith("/embed/"):
            video_id = path[len("/embed/"):]
        else:
            video_id = _query_param(parsed, "v")
    elif host == "youtu.be":
        video_id = path[1:]
    elif host:
        return None
    else:
        match = _ID_FALLBACK.search(url)
        if match:
            video_id = match.group(1)
    if video_id:
        video_id = video_id.split("?")[0].split("&")[0].strip("/")
    return video_id or None
