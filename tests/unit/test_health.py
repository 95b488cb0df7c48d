"""Unit tests for binger.health."""

from __future__ import annotations

import httpx
import respx

from binger.health import check_domain_health, check_domains, is_healthy, normalize_url
from binger.models.health import DomainHealthResult


class TestNormalizeUrl:
    def test_adds_https(self) -> None:
        assert normalize_url("vidsrc.test") == "https://vidsrc.test"

    def test_keeps_existing_scheme(self) -> None:
        assert normalize_url("http://app.test") == "http://app.test"
        assert normalize_url("HTTPS://app.test") == "HTTPS://app.test"


class TestCheckDomainHealth:
    async def test_not_configured(self, fetcher) -> None:
        result = await check_domain_health(fetcher, "MULTI_DOMAIN", "")
        assert result == DomainHealthResult(
            name="MULTI_DOMAIN", status="error", message="Domain not configured"
        )

    async def test_ok(self, fetcher) -> None:
        with respx.mock as router:
            router.get(host="vidsrc.test").mock(return_value=httpx.Response(200))
            result = await check_domain_health(fetcher, "VIDSRC_DOMAIN", "vidsrc.test")
        assert result.status == "success"
        assert result.http_status == 200
        assert result.domain == "vidsrc.test"
        assert result.message is None

    async def test_redirect_counts_as_up_and_is_not_followed(self, fetcher) -> None:
        with respx.mock(assert_all_called=False) as router:
            router.get(host="vidsrc.test").mock(
                return_value=httpx.Response(302, headers={"location": "https://moved.test/"})
            )
            moved = router.get("https://moved.test/").mock(return_value=httpx.Response(500))
            result = await check_domain_health(fetcher, "VIDSRC_DOMAIN", "vidsrc.test")
        assert result.status == "success"
        assert result.http_status == 302
        assert moved.call_count == 0

    async def test_error_status(self, fetcher) -> None:
        with respx.mock as router:
            router.get(host="vidsrc.test").mock(return_value=httpx.Response(503))
            result = await check_domain_health(fetcher, "VIDSRC_DOMAIN", "vidsrc.test")
        assert result.status == "error"
        assert result.http_status == 503
        assert result.message == "Received status code 503"

    async def test_network_failure(self, fetcher) -> None:
        with respx.mock as router:
            router.get(host="vidsrc.test").mock(
                side_effect=httpx.ConnectError("Connection refused")
            )
            result = await check_domain_health(fetcher, "VIDSRC_DOMAIN", "vidsrc.test")
        assert result.status == "error"
        assert result.http_status is None
        assert result.message == "Connection refused"

    async def test_timeout_retried_before_reporting(self, fetcher, sleep) -> None:
        with respx.mock as router:
            route = router.get(host="vidsrc.test").mock(
                side_effect=httpx.ConnectTimeout("timed out")
            )
            result = await check_domain_health(fetcher, "VIDSRC_DOMAIN", "vidsrc.test")
        assert result.status == "error"
        assert route.call_count == 3


class TestCheckDomains:
    async def test_order_preserved(self, fetcher) -> None:
        with respx.mock as router:
            router.get(host="a.test").mock(return_value=httpx.Response(500))
            router.get(host="b.test").mock(return_value=httpx.Response(200))
            results = await check_domains(fetcher, [("A", "a.test"), ("B", "b.test")])
        assert [r.name for r in results] == ["A", "B"]
        assert [r.status for r in results] == ["error", "success"]
        assert not is_healthy(results)

    async def test_all_healthy(self, fetcher) -> None:
        with respx.mock as router:
            router.get(host="a.test").mock(return_value=httpx.Response(204))
            results = await check_domains(fetcher, [("A", "a.test")])
        assert is_healthy(results)

    def test_empty_is_healthy(self) -> None:
        assert is_healthy([])
