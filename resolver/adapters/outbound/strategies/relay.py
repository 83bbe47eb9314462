from typing import Iterator, Optional

import httpx

from resolver.adapters.outbound.strategies.base import HttpStrategy
from resolver.services import extractors as ex

# Keys that name the video itself; a bare `url` is often the echoed post or a thumbnail
RELAY_VIDEO_KEYS = ("video_url", "download_url")


class RelayStrategy(HttpStrategy):
    """Ask a third-party download relay for the asset (needs an API key header)."""

    name = "relay"

    async def extract(self, client: httpx.AsyncClient, reference: str, identifier: str) -> Optional[str]:
        r = await self.get(client, self.config.endpoint, params={"url": reference})
        payload = self.decode_json(r)
        url = ex.accept((ex.find_key(payload, key) for key in RELAY_VIDEO_KEYS), self.config.media_domains)
        if url:
            return url
        # generic `url` keys only count with an explicit video extension
        return ex.accept(self._generic_urls(payload))

    @staticmethod
    def _generic_urls(payload) -> Iterator[str]:
        for value in ex.find_all_keys(payload, "url"):
            if ex.has_media_extension(ex.clean_url(value)):
                yield value
