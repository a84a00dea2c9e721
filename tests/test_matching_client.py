import json

import httpx
import pytest

from roster_match.matching.client import (
    AuthenticationError,
    ChatCompletionMatcher,
    MatchingServiceError,
    RateLimitError,
    extract_answer,
)

URL = "https://llm.example.com/v1/chat/completions"
BODY = {"model": "gpt-4o", "messages": [{"role": "user", "content": "Tatum"}]}


def _matcher(handler) -> ChatCompletionMatcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ChatCompletionMatcher(URL, "sk-test-key", client=client)


@pytest.mark.asyncio
async def test_posts_body_with_bearer_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "abc"}}]})

    matcher = _matcher(handler)
    answer = await matcher.identify(BODY)
    await matcher.close()

    assert answer == "abc"
    assert seen == {"method": "POST", "url": URL, "auth": "Bearer sk-test-key", "body": BODY}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, error",
    [(401, AuthenticationError), (403, AuthenticationError), (429, RateLimitError), (500, MatchingServiceError)],
)
async def test_http_errors_raise_matching_errors(status, error):
    matcher = _matcher(lambda request: httpx.Response(status))

    with pytest.raises(error):
        await matcher.identify(BODY)


@pytest.mark.asyncio
async def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    matcher = _matcher(handler)

    with pytest.raises(MatchingServiceError):
        await matcher.identify(BODY)


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"choices": [{"message": {"content": "id-1"}}, {"message": {"content": "id-2"}}]}, "id-1"),
        ({"choices": [{"message": {"content": None}}]}, ""),
        ({"choices": []}, ""),
        ({"error": "nope"}, ""),
    ],
)
def test_extract_answer_reads_first_choice(payload, expected):
    assert extract_answer(payload) == expected
