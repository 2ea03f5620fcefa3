# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
import logging

import pytest

from netkit.errors import NetworkError
from netkit.http.interceptors import (
    AuthenticationInterceptor,
    HeaderInterceptor,
    InterceptorChain,
    LoggingInterceptor,
    LogLevel,
    RequestInterceptor,
)
from netkit.http.models import AttemptResult, HttpMethod, HttpRequest, HttpResponse


class TagInterceptor(RequestInterceptor):
    def __init__(self, tag, seen):
        self.tag = tag
        self.seen = seen

    async def adapt(self, request):
        previous = request.headers.get("X-Order", "")
        return request.with_header("X-Order", f"{previous}{self.tag}")

    async def observe(self, result, request):
        self.seen.append(self.tag)


class ExplodingObserver(RequestInterceptor):
    async def observe(self, result, request):
        raise RuntimeError("observer broke")


def test_chain_adapts_in_order():
    chain = InterceptorChain([TagInterceptor("a", []), TagInterceptor("b", []), TagInterceptor("c", [])])
    adapted = asyncio.run(chain.adapt(HttpRequest("http://example")))
    assert adapted.headers["X-Order"] == "abc"


def test_chain_is_captured_at_construction():
    interceptors = [TagInterceptor("a", [])]
    chain = InterceptorChain(interceptors)
    interceptors.append(TagInterceptor("b", []))
    assert len(chain) == 1


def test_notify_swallows_observer_failures(caplog):
    seen = []
    chain = InterceptorChain([TagInterceptor("a", seen), ExplodingObserver(), TagInterceptor("b", seen)])
    result = AttemptResult(response=HttpResponse(content=b"", status_code=200))
    with caplog.at_level(logging.WARNING, logger="netkit.http.interceptors"):
        asyncio.run(chain.notify(result, HttpRequest("http://example")))
    assert seen == ["a", "b"]
    assert "ExplodingObserver" in caplog.text


def test_header_interceptor_adds_headers():
    interceptor = HeaderInterceptor({"X-API-Key": "secret", "Accept": "application/json"})
    request = HttpRequest("http://example", headers={"accept": "text/html"})
    adapted = asyncio.run(interceptor.adapt(request))
    assert adapted.headers == {"X-API-Key": "secret", "Accept": "application/json"}


def test_authentication_interceptor_with_sync_and_async_providers():
    async def async_token():
        return "abc"

    request = HttpRequest("http://example")
    assert asyncio.run(AuthenticationInterceptor(lambda: "xyz").adapt(request)).headers == {"Authorization": "Bearer xyz"}
    assert asyncio.run(AuthenticationInterceptor(async_token).adapt(request)).headers == {"Authorization": "Bearer abc"}
    assert asyncio.run(AuthenticationInterceptor(lambda: "t", scheme="Token").adapt(request)).headers == {
        "Authorization": "Token t"
    }


def test_authentication_interceptor_without_token_leaves_request():
    request = HttpRequest("http://example")
    assert asyncio.run(AuthenticationInterceptor(lambda: None).adapt(request)) is request


def test_authentication_interceptor_provider_failure_propagates():
    def provider():
        raise PermissionError("token store locked")

    with pytest.raises(PermissionError):
        asyncio.run(AuthenticationInterceptor(provider).adapt(HttpRequest("http://example")))


def test_logging_interceptor_basic(caplog):
    interceptor = LoggingInterceptor()
    request = HttpRequest("http://example/users", method=HttpMethod.POST, body=b"{}")
    with caplog.at_level(logging.DEBUG, logger="netkit.network"):
        asyncio.run(interceptor.adapt(request))
        asyncio.run(interceptor.observe(AttemptResult(response=HttpResponse(b"ok", 201)), request))
        asyncio.run(interceptor.observe(AttemptResult(error=NetworkError.timeout()), request))
    assert "-> POST http://example/users" in caplog.text
    assert "<- 201 http://example/users" in caplog.text
    assert "Request timed out" in caplog.text
    assert "Body:" not in caplog.text


def test_logging_interceptor_detailed_redacts_credentials(caplog):
    interceptor = LoggingInterceptor(LogLevel.DETAILED)
    request = HttpRequest("http://example", headers={"Authorization": "Bearer secret"}, body=b"payload")
    with caplog.at_level(logging.DEBUG, logger="netkit.network"):
        asyncio.run(interceptor.adapt(request))
    assert "secret" not in caplog.text
    assert "<redacted>" in caplog.text
    assert "Body: payload" in caplog.text


def test_logging_interceptor_none_is_silent(caplog):
    interceptor = LoggingInterceptor("none")
    with caplog.at_level(logging.DEBUG, logger="netkit.network"):
        asyncio.run(interceptor.adapt(HttpRequest("http://example")))
    assert [record for record in caplog.records if record.name == "netkit.network"] == []
