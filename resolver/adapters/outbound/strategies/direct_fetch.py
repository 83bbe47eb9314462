import json
from typing import Optional

import httpx

from resolver.adapters.outbound.strategies.base import HttpStrategy
from resolver.services import extractors as ex


class DirectFetchStrategy(HttpStrategy):
    """
    Hit the lightweight `?__a=1` page-data endpoint. The body is JSON on a good day
    and an HTML/JS blob otherwise; both are searched for `video_url`.
    """

    name = "direct_fetch"

    async def extract(self, client: httpx.AsyncClient, reference: str, identifier: str) -> Optional[str]:
        r = await self.get(client, self.config.endpoint.format(shortcode=identifier))
        body = r.text
        try:
            payload = json.loads(body)
        except ValueError:
            candidates = ex.match_patterns(body, [ex.QUOTED_VIDEO_URL])
        else:
            candidates = [ex.find_key(payload, "video_url")]
        return ex.accept(candidates, self.config.media_domains)
