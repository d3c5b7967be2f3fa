import unittest
from unittest.mock import AsyncMock, patch

import httpx

from practice_tracker.clients import FetchError, GfgClient, LeetCodeClient, with_retries
from practice_tracker.utils.errors import UpstreamUnavailableError

PRIMARY = "https://primary.example/{username}"
SECONDARY = "https://secondary.example/{username}"


class RecordingHandler:
    """httpx.MockTransport handler answering from a per-host script of responses."""

    def __init__(self, script):
        self.script = {host: list(responses) for host, responses in script.items()}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        answer = self.script[request.url.host].pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


def make_client(cls, handler, endpoints=(PRIMARY, SECONDARY), attempts=3, retry_delay=0):
    return cls(list(endpoints), attempts=attempts, retry_delay=retry_delay, timeout=1,
               transport=httpx.MockTransport(handler))


class TestWithRetries(unittest.IsolatedAsyncioTestCase):

    async def test_returns_first_success(self):
        attempt = AsyncMock(side_effect=[FetchError("boom"), "ok"])
        with patch("practice_tracker.clients.base.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await with_retries(attempt, attempts=3, delay=2)
        self.assertEqual(result, "ok")
        self.assertEqual(attempt.await_count, 2)
        sleep.assert_awaited_once_with(2)

    async def test_raises_last_error_when_exhausted(self):
        attempt = AsyncMock(side_effect=[FetchError("one"), FetchError("two"), FetchError("three")])
        with patch("practice_tracker.clients.base.asyncio.sleep", new=AsyncMock()) as sleep:
            with self.assertRaises(FetchError) as ctx:
                await with_retries(attempt, attempts=3, delay=2)
        self.assertEqual(str(ctx.exception), "three")
        # no sleep after the final attempt
        self.assertEqual(sleep.await_count, 2)


class TestPlatformClient(unittest.IsolatedAsyncioTestCase):

    async def test_first_endpoint_success_short_circuits(self):
        handler = RecordingHandler({"primary.example": [httpx.Response(200, json={"solvedStats": {}})]})
        result = await make_client(GfgClient, handler).fetch("alice")
        self.assertEqual(result.payload, {"solvedStats": {}})
        self.assertEqual(result.endpoint, "https://primary.example/alice")
        self.assertEqual(handler.requests, ["https://primary.example/alice"])

    async def test_retries_then_succeeds_on_same_endpoint(self):
        handler = RecordingHandler({"primary.example": [
            httpx.Response(500),
            httpx.ConnectError("refused"),
            httpx.Response(200, json={"totalSolved": 3}),
        ]})
        result = await make_client(LeetCodeClient, handler).fetch("bob")
        self.assertEqual(result.payload, {"totalSolved": 3})
        self.assertEqual(len(handler.requests), 3)

    async def test_falls_back_to_second_endpoint(self):
        handler = RecordingHandler({
            "primary.example": [httpx.Response(503)] * 3,
            "secondary.example": [httpx.Response(200, json={"submission": [], "count": 0})],
        })
        result = await make_client(LeetCodeClient, handler).fetch("bob")
        self.assertEqual(result.endpoint, "https://secondary.example/bob")
        self.assertEqual(len(handler.requests), 4)

    async def test_error_bodies_and_bad_json_count_as_failures(self):
        handler = RecordingHandler({
            "primary.example": [
                httpx.Response(200, json={"errors": [{"message": "user does not exist"}]}),
                httpx.Response(200, text="<html>rate limited</html>"),
            ],
            "secondary.example": [
                httpx.Response(200, json={"status": "error", "message": "user does not exist"}),
                httpx.Response(200, json={"status": "error", "message": "user does not exist"}),
            ],
        })
        client = make_client(LeetCodeClient, handler, attempts=2)
        with self.assertRaises(UpstreamUnavailableError) as ctx:
            await client.fetch("ghost")
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertIn("user does not exist", ctx.exception.detail)
        self.assertIn("suggestion", ctx.exception.to_content())

    async def test_exhausting_all_endpoints_raises_upstream_unavailable(self):
        handler = RecordingHandler({
            "primary.example": [httpx.ReadTimeout("slow")] * 3,
            "secondary.example": [httpx.Response(502)] * 3,
        })
        with self.assertRaises(UpstreamUnavailableError) as ctx:
            await make_client(GfgClient, handler).fetch("alice")
        self.assertIn("HTTP 502", ctx.exception.detail)
        self.assertEqual(len(handler.requests), 6)

    async def test_at_most_two_endpoints_are_used(self):
        client = GfgClient([PRIMARY, SECONDARY, "https://third.example/{username}"])
        self.assertEqual(client.endpoints, [PRIMARY, SECONDARY])

    async def test_username_is_url_encoded(self):
        handler = RecordingHandler({"primary.example": [httpx.Response(200, json={})]})
        await make_client(GfgClient, handler).fetch("a b/c")
        self.assertEqual(handler.requests, ["https://primary.example/a%20b%2Fc"])


if __name__ == '__main__':
    unittest.main()
