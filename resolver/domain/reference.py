import re

from resolver.domain.errors import ParseError

_SHORTCODE_RE = re.compile(r"/(?:reel|reels|p|tv)/(?P<id>[A-Za-z0-9_-]+)")


def parse_reference(reference: str) -> str:
    """Return the shortcode of a reel/post URL or raise ParseError."""
    m = _SHORTCODE_RE.search(reference or "")
    if not m:
        raise ParseError(reference)
    return m.group("id")
