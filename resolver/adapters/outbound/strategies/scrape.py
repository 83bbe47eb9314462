from typing import Iterator, Optional

import httpx

from resolver.adapters.outbound.strategies.base import HttpStrategy
from resolver.services import extractors as ex


class ScrapeStrategy(HttpStrategy):
    """Fetch the post page itself and dig the asset url out of the markup."""

    name = "scrape"

    async def extract(self, client: httpx.AsyncClient, reference: str, identifier: str) -> Optional[str]:
        r = await self.get(client, self.page_url(reference, identifier))
        return self.extract_from_html(r.text)

    def page_url(self, reference: str, identifier: str) -> str:
        if reference.lower().startswith(("http://", "https://")):
            return reference
        # scheme-less references go to the canonical page for the shortcode
        return self.config.endpoint.format(shortcode=identifier)

    def extract_from_html(self, html: str) -> Optional[str]:
        domains = self.config.media_domains
        soup = ex.parse_html(html)

        # first match wins, in reliability order
        for stage in (
            ex.video_element_sources(soup),
            ex.match_patterns(html),
            self._embedded_json(html, soup),
        ):
            url = ex.accept(stage, domains)
            if url:
                return url

        return ex.accept(ex.media_tokens(ex.visible_text(soup)), domains)

    @staticmethod
    def _embedded_json(html, soup) -> Iterator[Optional[str]]:
        for payload in ex.json_fragments(html):
            yield ex.find_key(payload, "video_url")
        for payload in ex.script_payloads(soup):
            yield ex.find_key(payload, "video_url")
