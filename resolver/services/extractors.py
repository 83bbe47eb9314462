"""
Format-tolerant extraction helpers shared by the strategies.

Upstream pages embed the asset URL in several shapes (JSON fields, meta tags,
script blobs, escaped inline text); these helpers look through all of them
without trusting any single layout.
"""
from __future__ import annotations

import json
import re
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence
from urllib.parse import unquote

from bs4 import BeautifulSoup

MEDIA_EXTENSIONS = ("mp4", "m4v", "mov", "webm", "m3u8", "mpd")
MAX_SEARCH_DEPTH = 64

_MEDIA_EXT_RE = re.compile(r"\.(?:%s)(?=$|[?#&/\"'])" % "|".join(MEDIA_EXTENSIONS), re.IGNORECASE)
_IMAGE_EXT_RE = re.compile(r"\.(?:jpe?g|png|gif|webp|heic|avif)(?=$|[?#&/\"'])", re.IGNORECASE)

# ---------- Text patterns ----------

QUOTED_VIDEO_URL = re.compile(r'"video_url"\s*:\s*"([^"]+)"')

VIDEO_URL_PATTERNS: Sequence[re.Pattern] = (
    QUOTED_VIDEO_URL,
    re.compile(r"video_url[\"']?\s*:\s*[\"']([^\"']+)[\"']"),
    re.compile(
        r"<meta[^>]+property=[\"']og:video(?::secure_url|:url)?[\"'][^>]*content=[\"']([^\"']+)[\"']",
        re.IGNORECASE,
    ),
    re.compile(
        r"<meta[^>]+content=[\"']([^\"']+)[\"'][^>]*property=[\"']og:video(?::secure_url|:url)?[\"']",
        re.IGNORECASE,
    ),
    re.compile(r"og:video[\"']?\s*content=[\"']([^\"']+)[\"']", re.IGNORECASE),
)

_JSON_FRAGMENT_RE = re.compile(r'\{[^{}]*"video_url"[^{}]*\}')
_MEDIA_TOKEN_RE = re.compile(
    r"https?://[^\s\"'<>]+?\.(?:%s)(?![A-Za-z0-9])(?:\?[^\s\"'<>]*)?" % "|".join(MEDIA_EXTENSIONS),
    re.IGNORECASE,
)


def match_patterns(text: str, patterns: Iterable[re.Pattern] = VIDEO_URL_PATTERNS) -> Iterator[str]:
    """Yield every capture of each pattern, in pattern order then document order."""
    for pattern in patterns:
        for m in pattern.finditer(text):
            if m.group(1):
                yield m.group(1)


def json_fragments(text: str) -> Iterator[Any]:
    """Yield decoded flat JSON objects embedded in text that mention `video_url`."""
    for m in _JSON_FRAGMENT_RE.finditer(text):
        try:
            yield json.loads(m.group(0))
        except (ValueError, RecursionError):
            continue


def media_tokens(text: str) -> Iterator[str]:
    for m in _MEDIA_TOKEN_RE.finditer(text):
        yield m.group(0)


# ---------- DOM ----------

def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def video_element_sources(soup: BeautifulSoup) -> List[str]:
    out: List[str] = []
    for video in soup.find_all("video"):
        if video.get("src"):
            out.append(video["src"])
        for source in video.find_all("source"):
            if source.get("src"):
                out.append(source["src"])
    return out


def script_payloads(soup: BeautifulSoup) -> Iterator[Any]:
    """Decoded JSON from <script type="application/json"> and ld+json blocks."""
    for script in soup.find_all("script", attrs={"type": re.compile(r"json", re.I)}):
        raw = script.string or script.get_text()
        if not raw or "video_url" not in raw:
            continue
        try:
            yield json.loads(raw)
        except (ValueError, RecursionError):
            continue


def visible_text(soup: BeautifulSoup) -> str:
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return soup.get_text(" ")


# ---------- Structured payloads ----------

def find_key(payload: Any, key: str, max_depth: int = MAX_SEARCH_DEPTH) -> Optional[str]:
    """
    Depth-first search for the first string value stored under `key`.

    Traversal stops descending past `max_depth` levels so hostile payloads cannot
    exhaust the stack.
    """

    def _walk(node: Any, depth: int) -> Optional[str]:
        if depth > max_depth:
            return None
        if isinstance(node, dict):
            value = node.get(key)
            if isinstance(value, str) and value.strip():
                return value
            for child in node.values():
                if isinstance(child, (dict, list)):
                    found = _walk(child, depth + 1)
                    if found is not None:
                        return found
        elif isinstance(node, list):
            for child in node:
                if isinstance(child, (dict, list)):
                    found = _walk(child, depth + 1)
                    if found is not None:
                        return found
        return None

    return _walk(payload, 0)


def find_all_keys(payload: Any, key: str, max_depth: int = MAX_SEARCH_DEPTH) -> List[str]:
    """Every string value stored under `key`, depth-first, with the same depth bound."""
    out: List[str] = []

    def _walk(node: Any, depth: int) -> None:
        if depth > max_depth:
            return
        if isinstance(node, dict):
            value = node.get(key)
            if isinstance(value, str) and value.strip():
                out.append(value)
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            return
        for child in children:
            if isinstance(child, (dict, list)):
                _walk(child, depth + 1)

    _walk(payload, 0)
    return out


def dig(payload: Any, *path: Any) -> Any:
    """Follow dict keys / list indexes; None as soon as the shape does not match."""
    node = payload
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, list) or len(node) <= step:
                return None
        elif not isinstance(node, dict):
            return None
        node = node[step] if isinstance(step, int) else node.get(step)
        if node is None:
            return None
    return node


Accessor = Callable[[Any], Optional[Any]]


def first_of(payload: Any, accessors: Iterable[Accessor]) -> Optional[Any]:
    """Run accessors in order and return the first non-empty value."""
    for accessor in accessors:
        value = accessor(payload)
        if value:
            return value
    return None


# ---------- URL cleanup ----------

def _clean_once(url: str) -> str:
    url = url.strip()
    if url.startswith("\\"):
        url = url[1:]
    url = url.replace("\\u0026", "&").replace("\\/", "/")
    try:
        url = unquote(url, errors="strict")
    except UnicodeDecodeError:
        pass
    return url


def clean_url(url: str) -> str:
    """
    Normalise an extracted candidate: drop one leading escape, unescape `\\u0026`
    and `\\/`, percent-decode (keeping the input when decoding fails).

    Applied until nothing changes; every step only shortens the string, so this
    terminates and cleaning an already-clean url is a no-op.
    """
    while True:
        cleaned = _clean_once(url)
        if cleaned == url:
            return url
        url = cleaned


def has_media_extension(url: str) -> bool:
    return bool(_MEDIA_EXT_RE.search(url))


def looks_like_media(url: str, media_domains: Sequence[str] = ()) -> bool:
    if not url or not url.lower().startswith(("http://", "https://", "//")):
        return False
    if has_media_extension(url):
        return True
    # a CDN host alone is not enough for a still image
    if _IMAGE_EXT_RE.search(url):
        return False
    lowered = url.lower()
    return any(d in lowered for d in media_domains)


def accept(candidates: Iterable[Optional[str]], media_domains: Sequence[str] = ()) -> Optional[str]:
    """Clean each candidate and return the first one that plausibly is a media asset."""
    for candidate in candidates:
        if not candidate:
            continue
        url = clean_url(candidate)
        if looks_like_media(url, media_domains):
            return url
    return None
