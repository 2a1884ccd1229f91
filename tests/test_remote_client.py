"""
Tests for the concurrency-limited, caching remote client.
"""

import asyncio

import httpx
import pytest

from stacksfinder_mcp.core.clients.remote import canonical_key
from stacksfinder_mcp.core.errors import ErrorKind, StacksFinderError

SCORE = "/api/v1/score"


def ok(payload=None):
    return httpx.Response(200, json=payload if payload is not None else {"ok": True})


class TestCanonicalKey:
    """Test cache key derivation."""

    def test_body_key_order_does_not_matter(self):
        assert canonical_key("POST", SCORE, {"a": 1, "b": [1, 2]}) == canonical_key("POST", SCORE, {"b": [1, 2], "a": 1})

    def test_method_path_and_body_all_count(self):
        base = canonical_key("POST", SCORE, {"a": 1})
        assert canonical_key("GET", SCORE, {"a": 1}) != base
        assert canonical_key("POST", "/api/v1/other", {"a": 1}) != base
        assert canonical_key("POST", SCORE, {"a": 2}) != base


class TestCaching:
    """Test the response cache."""

    @pytest.mark.asyncio
    async def test_cache_hit_skips_network(self, make_client, recorder):
        client = make_client(lambda request: ok({"score": 1}))

        first = await client.request("POST", SCORE, {"a": 1}, cacheable=True)
        second = await client.request("POST", SCORE, {"a": 1}, cacheable=True)

        assert first == second == {"score": 1}
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_equivalent_bodies_share_entry(self, make_client, recorder):
        client = make_client(lambda request: ok())

        await client.request("POST", SCORE, {"a": 1, "b": 2}, cacheable=True)
        await client.request("POST", SCORE, {"b": 2, "a": 1}, cacheable=True)

        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_non_cacheable_always_hits_network(self, make_client, recorder):
        client = make_client(lambda request: ok())

        await client.request("POST", SCORE, {"a": 1})
        await client.request("POST", SCORE, {"a": 1})

        assert len(recorder.requests) == 2
        assert client.cached_entries == 0

    @pytest.mark.asyncio
    async def test_entries_expire(self, make_client, recorder, fake_clock):
        client = make_client(lambda request: ok(), cache_ttl=60, clock=fake_clock)

        await client.request("POST", SCORE, {"a": 1}, cacheable=True)
        fake_clock.now += 61
        await client.request("POST", SCORE, {"a": 1}, cacheable=True)

        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_capacity_evicts_oldest(self, make_client, recorder):
        client = make_client(lambda request: ok(), cache_capacity=1)

        await client.request("POST", SCORE, {"a": 1}, cacheable=True)
        await client.request("POST", SCORE, {"a": 2}, cacheable=True)
        await client.request("POST", SCORE, {"a": 1}, cacheable=True)

        assert len(recorder.requests) == 3
        assert client.cached_entries == 1

    @pytest.mark.asyncio
    async def test_errors_are_not_cached(self, make_client, recorder):
        responses = [httpx.Response(500, json={"error": "boom"}), ok({"score": 2})]
        client = make_client(lambda request: responses.pop(0))

        with pytest.raises(StacksFinderError):
            await client.request("POST", SCORE, {"a": 1}, cacheable=True)
        assert await client.request("POST", SCORE, {"a": 1}, cacheable=True) == {"score": 2}
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_clear_cache(self, make_client, recorder):
        client = make_client(lambda request: ok())

        await client.request("POST", SCORE, {"a": 1}, cacheable=True)
        client.clear_cache()
        await client.request("POST", SCORE, {"a": 1}, cacheable=True)

        assert len(recorder.requests) == 2


class TestCoalescing:
    """Test in-flight request sharing."""

    @pytest.mark.asyncio
    async def test_concurrent_identical_requests_share_one_call(self, make_client, recorder):
        async def slow(request):
            await asyncio.sleep(0.02)
            return ok({"score": 42})

        client = make_client(slow)

        results = await asyncio.gather(*[
            client.request("POST", SCORE, {"a": 1}, cacheable=True) for _ in range(5)
        ])

        assert results == [{"score": 42}] * 5
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_shared_failure_reaches_every_caller(self, make_client, recorder):
        async def failing(request):
            await asyncio.sleep(0.02)
            return httpx.Response(503, json={"error": "unavailable"})

        client = make_client(failing)

        results = await asyncio.gather(
            client.request("POST", SCORE, {"a": 1}, cacheable=True),
            client.request("POST", SCORE, {"a": 1}, cacheable=True),
            return_exceptions=True,
        )

        assert all(isinstance(r, StacksFinderError) for r in results)
        assert all(r.kind == ErrorKind.API_ERROR for r in results)
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_joining_caller_keeps_its_own_timeout(self, make_client, recorder):
        async def slow(request):
            await asyncio.sleep(0.2)
            return ok({"score": 7})

        client = make_client(slow)

        first, joiner = await asyncio.gather(
            client.request("POST", SCORE, {"a": 1}, cacheable=True, timeout=2),
            client.request("POST", SCORE, {"a": 1}, cacheable=True, timeout=0.05),
            return_exceptions=True,
        )

        assert isinstance(joiner, StacksFinderError)
        assert joiner.kind == ErrorKind.TIMEOUT
        # The shared call still completes for the caller that started it.
        assert first == {"score": 7}
        assert len(recorder.requests) == 1
        assert client.cached_entries == 1

    @pytest.mark.asyncio
    async def test_different_keys_are_not_coalesced(self, make_client, recorder):
        async def slow(request):
            await asyncio.sleep(0.01)
            return ok()

        client = make_client(slow)

        await asyncio.gather(
            client.request("POST", SCORE, {"a": 1}, cacheable=True),
            client.request("POST", SCORE, {"a": 2}, cacheable=True),
        )

        assert len(recorder.requests) == 2


class TestConcurrencyLimit:
    """Test the outbound call limiter."""

    @pytest.mark.asyncio
    async def test_never_exceeds_limit(self, make_client):
        active = [0]
        peak = [0]

        async def tracked(request):
            active[0] += 1
            peak[0] = max(peak[0], active[0])
            await asyncio.sleep(0.02)
            active[0] -= 1
            return ok()

        client = make_client(tracked, max_concurrency=2)

        await asyncio.gather(*[client.request("POST", SCORE, {"n": n}) for n in range(6)])

        assert peak[0] == 2

    @pytest.mark.asyncio
    async def test_queued_calls_dispatch_in_submission_order(self, make_client, recorder):
        gate = asyncio.Event()

        async def gated(request):
            await gate.wait()
            return ok()

        client = make_client(gated, max_concurrency=1)

        calls = []
        for n in range(5):
            calls.append(asyncio.ensure_future(client.request("POST", SCORE, {"n": n})))
            await asyncio.sleep(0)
        await asyncio.sleep(0.01)
        # Only the first call holds the slot; the rest wait in line.
        assert [recorder.body(r)["n"] for r in recorder.requests] == [0]

        gate.set()
        await asyncio.gather(*calls)

        assert [recorder.body(r)["n"] for r in recorder.requests] == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_cache_hit_needs_no_slot(self, make_client, recorder):
        gate = asyncio.Event()

        async def blocked(request):
            if recorder.body(request).get("block"):
                await gate.wait()
            return ok({"cached": True})

        client = make_client(blocked, max_concurrency=1)
        await client.request("POST", SCORE, {"a": 1}, cacheable=True)

        holder = asyncio.ensure_future(client.request("POST", SCORE, {"block": True}))
        await asyncio.sleep(0.01)
        # The only slot is taken, yet the cached answer comes back.
        assert await asyncio.wait_for(client.request("POST", SCORE, {"a": 1}, cacheable=True), 1) == {"cached": True}

        gate.set()
        await holder


class TestTimeouts:
    """Test per-call deadlines."""

    @pytest.mark.asyncio
    async def test_slow_call_times_out(self, make_client):
        async def hang(request):
            await asyncio.sleep(5)
            return ok()

        client = make_client(hang, timeout=0.05)

        with pytest.raises(StacksFinderError) as excinfo:
            await client.request("GET", "/api/v1/jobs/job-1")
        assert excinfo.value.kind == ErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_timeout_frees_the_slot(self, make_client):
        async def handler(request):
            if request.url.path == "/slow":
                await asyncio.sleep(5)
            return ok({"fast": True})

        client = make_client(handler, timeout=0.05, max_concurrency=1)

        with pytest.raises(StacksFinderError):
            await client.request("GET", "/slow")
        assert await client.request("GET", "/fast") == {"fast": True}

    @pytest.mark.asyncio
    async def test_per_call_override(self, make_client):
        async def slowish(request):
            await asyncio.sleep(0.1)
            return ok()

        client = make_client(slowish, timeout=0.01)

        assert await client.request("GET", "/x", timeout=2) == {"ok": True}


class TestErrorMapping:
    """Test status code and payload handling."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,kind", [
        (401, ErrorKind.UNAUTHORIZED),
        (403, ErrorKind.UNAUTHORIZED),
        (404, ErrorKind.NOT_FOUND),
        (429, ErrorKind.RATE_LIMITED),
        (400, ErrorKind.API_ERROR),
        (500, ErrorKind.API_ERROR),
    ])
    async def test_status_mapping(self, make_client, status, kind):
        client = make_client(lambda request: httpx.Response(status, json={}))

        with pytest.raises(StacksFinderError) as excinfo:
            await client.request("GET", "/api/v1/blueprints/x")
        assert excinfo.value.kind == kind

    @pytest.mark.asyncio
    async def test_server_message_is_used(self, make_client):
        client = make_client(lambda request: httpx.Response(404, json={"error": "Blueprint not found"}))

        with pytest.raises(StacksFinderError) as excinfo:
            await client.request("GET", "/api/v1/blueprints/x")
        assert excinfo.value.message == "Blueprint not found"

    @pytest.mark.asyncio
    async def test_short_text_body_is_used(self, make_client):
        client = make_client(lambda request: httpx.Response(502, text="Bad gateway"))

        with pytest.raises(StacksFinderError) as excinfo:
            await client.request("GET", "/x")
        assert excinfo.value.message == "Bad gateway"

    @pytest.mark.asyncio
    async def test_non_json_success_is_an_error(self, make_client, recorder):
        client = make_client(lambda request: httpx.Response(200, text="<html></html>", headers={"content-type": "text/html"}))

        for _ in range(2):
            with pytest.raises(StacksFinderError) as excinfo:
                await client.request("GET", "/x", cacheable=True)
            assert excinfo.value.kind == ErrorKind.API_ERROR
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_connection_error(self, make_client):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(refuse)

        with pytest.raises(StacksFinderError) as excinfo:
            await client.request("GET", "/x")
        assert excinfo.value.kind == ErrorKind.API_ERROR

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_before_io(self, make_client, recorder):
        client = make_client(lambda request: ok(), api_key=None)

        with pytest.raises(StacksFinderError) as excinfo:
            await client.request("POST", SCORE, {"a": 1}, cacheable=True)
        assert excinfo.value.kind == ErrorKind.CONFIG_ERROR
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_bearer_token_sent(self, make_client, recorder):
        client = make_client(lambda request: ok())

        await client.request("GET", "/x")

        assert recorder.requests[0].headers["authorization"] == "Bearer sk_test_123"
