import pytest
from httpx import AsyncClient

from resolver.domain.entities.result import StrategyOutcome


# ==============================================================================
# System
# ==============================================================================

@pytest.mark.asyncio
async def test_should_report_running_on_index(client: AsyncClient):
    r = await client.get("/")
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Instagram Reel Downloader API is running!"
    assert body["version"] == "2.0"
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


# ==============================================================================
# Download
# ==============================================================================

@pytest.mark.asyncio
async def test_should_return_download_url_when_resolved(client: AsyncClient, override_chain, make_strategy):
    # GIVEN
    miss = make_strategy("structured_query", StrategyOutcome.failed("http status 401"))
    hit = make_strategy("scrape", StrategyOutcome.found("https://cdn.example/x.mp4"))
    override_chain(miss, hit)

    # WHEN
    r = await client.post("/download", json={"url": "https://www.instagram.com/reel/ABC123/"})

    # THEN
    assert r.status_code == 200
    assert r.json() == {"success": True, "downloadUrl": "https://cdn.example/x.mp4", "strategy": "scrape"}


@pytest.mark.asyncio
async def test_should_return_404_with_attempts_when_exhausted(client: AsyncClient, override_chain, make_strategy):
    override_chain(
        make_strategy("structured_query", StrategyOutcome.failed("timeout")),
        make_strategy("scrape"),
        make_strategy("direct_fetch"),
    )

    r = await client.post("/download", json={"url": "https://www.instagram.com/p/ABC123/"})

    assert r.status_code == 404
    body = r.json()
    assert body["success"] is False
    assert "Could not find downloadable video" in body["message"]
    assert [a["strategy"] for a in body["attempts"]] == ["structured_query", "scrape", "direct_fetch"]
    assert body["attempts"][0]["outcome"] == {"kind": "failed", "reason": "timeout"}
    assert body["attempts"][1]["outcome"] == {"kind": "not_found"}


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"url": ""}, {"url": "   "}])
async def test_should_return_400_when_url_missing(client: AsyncClient, override_chain, make_strategy, payload):
    s = make_strategy("scrape")
    override_chain(s)

    r = await client.post("/download", json=payload)

    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "URL is required"}
    assert s.call_count == 0


@pytest.mark.asyncio
async def test_should_return_400_for_non_instagram_url(client: AsyncClient, override_chain, make_strategy):
    s = make_strategy("scrape")
    override_chain(s)

    r = await client.post("/download", json={"url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"})

    assert r.status_code == 400
    assert r.json() == {"success": False, "message": r.json()["message"]}
    assert r.json()["message"].startswith("Invalid Instagram URL")
    assert s.call_count == 0


@pytest.mark.asyncio
async def test_should_return_400_when_engine_cannot_parse_shortcode(client: AsyncClient, override_chain, make_strategy):
    # passes the gross shape check but has no shortcode segment
    s = make_strategy("scrape")
    override_chain(s)

    r = await client.post("/download", json={"url": "https://www.instagram.com/reel/"})

    assert r.status_code == 400
    assert r.json()["success"] is False
    assert s.call_count == 0


@pytest.mark.asyncio
async def test_should_return_500_on_unexpected_error(client: AsyncClient, override_chain, make_strategy, monkeypatch):
    chain = override_chain(make_strategy("scrape"))

    async def _boom(reference):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(chain, "resolve", _boom)

    r = await client.post("/download", json={"url": "https://www.instagram.com/reel/ABC123/"})

    assert r.status_code == 500
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_should_send_security_headers(client: AsyncClient, override_chain, make_strategy):
    override_chain(make_strategy("scrape", StrategyOutcome.found("https://cdn.example/x.mp4")))

    for r in (
        await client.get("/health"),
        await client.post("/download", json={"url": "https://www.instagram.com/reel/ABC123/"}),
    ):
        assert r.headers["X-Content-Type-Options"] == "nosniff"
        assert r.headers["X-Frame-Options"] == "DENY"
        assert "Strict-Transport-Security" in r.headers
