import json
from typing import Any, Optional

import httpx

from resolver.adapters.outbound.strategies.base import HttpStrategy
from resolver.services import extractors as ex

# Known places the media node has lived in query responses, most recent first
MEDIA_CONTAINERS = (
    ("data", "media"),
    ("data", "shortcode_media"),
    ("graphql", "media"),
    ("graphql", "shortcode_media"),
    ("media",),
    ("shortcode_media",),
)


def _container_accessor(path):
    return lambda payload: ex.dig(payload, *path)


def _video_leaf_accessor(path):
    return lambda payload: ex.dig(payload, *path, "video_url")


VIDEO_URL_ACCESSORS = tuple(_video_leaf_accessor(p) for p in MEDIA_CONTAINERS)
CONTAINER_ACCESSORS = tuple(_container_accessor(p) for p in MEDIA_CONTAINERS)


def _first_child_video(media: dict) -> Optional[str]:
    return ex.first_of(
        media,
        (
            lambda m: ex.dig(m, "edge_sidecar_to_children", "edges", 0, "node", "video_url"),
            lambda m: ex.dig(m, "carousel_media", 0, "video_url"),
            lambda m: ex.dig(m, "carousel_media", 0, "video_versions", 0, "url"),
        ),
    )


def video_url_from_payload(payload: Any) -> Optional[str]:
    url = ex.first_of(payload, VIDEO_URL_ACCESSORS)
    if isinstance(url, str):
        return url

    media = ex.first_of(payload, CONTAINER_ACCESSORS)
    if not isinstance(media, dict):
        return None

    child = _first_child_video(media)
    if isinstance(child, str):
        return child

    # a display asset only counts when it is explicitly flagged as video
    if media.get("is_video") is True and isinstance(media.get("display_url"), str):
        return media["display_url"]
    return None


class StructuredQueryStrategy(HttpStrategy):
    """Query the GraphQL endpoint by shortcode and walk the known response shapes."""

    name = "structured_query"

    def __init__(self, config, query_hash: str):
        super().__init__(config)
        self.query_hash = query_hash

    async def extract(self, client: httpx.AsyncClient, reference: str, identifier: str) -> Optional[str]:
        params = {
            "query_hash": self.query_hash,
            "variables": json.dumps({"shortcode": identifier}, separators=(",", ":")),
        }
        r = await self.get(client, self.config.endpoint, params=params)
        payload = self.decode_json(r)
        url = video_url_from_payload(payload)
        return ex.accept([url], self.config.media_domains) if url else None
