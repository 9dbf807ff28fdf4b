"""
Playback source helpers: classify a livestream URL and derive its embed URL.

    detect_source_type("https://youtu.be/abc")       -> "youtube"
    embed_url("https://www.youtube.com/watch?v=abc") -> "https://www.youtube.com/embed/abc"

Anything that is not YouTube, Vimeo or an HLS playlist is treated as a direct
MP4 (or other progressive) file and embedded as-is.
"""

from typing import Optional
from urllib.parse import parse_qs, urlparse

YOUTUBE_HOSTS = ("youtube.com", "youtu.be", "youtube-nocookie.com")


def _host(url: str) -> str:
    host = (urlparse(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def detect_source_type(url: str) -> str:
    host = _host(url)
    path = urlparse(url).path.lower()

    if any(host == h or host.endswith("." + h) for h in YOUTUBE_HOSTS):
        return "youtube"
    if host == "vimeo.com" or host.endswith(".vimeo.com"):
        return "vimeo"
    if path.endswith(".m3u8"):
        return "hls"
    return "mp4"


def _youtube_id(url: str) -> Optional[str]:
    parsed = urlparse(url)
    host = _host(url)
    if host == "youtu.be":
        return parsed.path.strip("/").split("/")[0] or None
    if parsed.path == "/watch":
        return parse_qs(parsed.query).get("v", [None])[0]
    # /embed/<id>, /live/<id>, /shorts/<id>
    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) >= 2 and parts[0] in {"embed", "live", "shorts"}:
        return parts[1]
    return None


def embed_url(url: str, source_type: Optional[str] = None) -> str:
    """
    Player URL for an iframe/video element.

    YouTube and Vimeo page URLs are rewritten to their embed players. If no
    video id can be found the original URL is returned unchanged.
    """
    kind = source_type or detect_source_type(url)

    if kind == "youtube":
        video_id = _youtube_id(url)
        return f"https://www.youtube.com/embed/{video_id}" if video_id else url

    if kind == "vimeo":
        parts = [p for p in urlparse(url).path.split("/") if p]
        if _host(url) == "player.vimeo.com":
            return url
        if parts and parts[-1].isdigit():
            return f"https://player.vimeo.com/video/{parts[-1]}"
        return url

    return url
