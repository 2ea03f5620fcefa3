# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
import json
from dataclasses import dataclass

import httpx
import pytest

from netkit.cache import CachePolicy, DurableCache, LayeredCache, MemoryCache
from netkit.config import NetkitSettings
from netkit.errors import ErrorKind, NetworkError
from netkit.http.adapters import StubTransport
from netkit.http.httpx_transport import HttpxTransport
from netkit.http.interceptors import RequestInterceptor
from netkit.http.models import HttpMethod, HttpRequest, RawResponse, RetryConfig
from netkit.http.retry import DefaultRetryPolicy
from netkit.pipeline import Pipeline, create_default_pipeline

URL = "http://example/users/1"


@dataclass
class User:
    id: int
    name: str = ""


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class RecordingInterceptor(RequestInterceptor):
    def __init__(self):
        self.adapted = []
        self.results = []

    async def adapt(self, request):
        self.adapted.append(request)
        return request.with_header("X-Attempt", str(len(self.adapted)))

    async def observe(self, result, request):
        self.results.append(result)


class FailingAdapter(RequestInterceptor):
    async def adapt(self, request):
        raise PermissionError("no credentials")


class FailingObserver(RequestInterceptor):
    async def observe(self, result, request):
        raise RuntimeError("observer broke")


class BrokenStore:
    def store(self, key, data, ttl):
        raise OSError("read-only filesystem")

    def retrieve(self, key):
        return None

    def remove(self, key):
        pass

    def clear(self):
        pass


def ok(body=b'{"id": 1}', status=200):
    return RawResponse(status_code=status, content=body)


def make_pipeline(transport, *, sleeper=None, max_retries=3, **kwargs):
    policy = DefaultRetryPolicy(RetryConfig(max_retries=max_retries), sleep=sleeper or RecordingSleep())
    return Pipeline(transport, retry_policy=policy, settings=NetkitSettings(), **kwargs)


def test_retries_server_errors_then_decodes():
    transport = StubTransport({URL: [ok(b"", 500), ok(b"", 500), ok()]})
    sleeper = RecordingSleep()
    pipeline = make_pipeline(transport, sleeper=sleeper)

    user = asyncio.run(pipeline.execute_decoded(HttpRequest(URL), into=User))

    assert user == User(id=1)
    assert transport.calls == 3
    assert sleeper.delays == [1.0, 2.0]


def test_gives_up_after_max_retries():
    transport = StubTransport({URL: [ok(b"", 503)]})
    sleeper = RecordingSleep()
    pipeline = make_pipeline(transport, sleeper=sleeper, max_retries=3)

    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(pipeline.execute(HttpRequest(URL)))

    assert excinfo.value == NetworkError.server_error(503)
    assert transport.calls == 3
    assert sleeper.delays == [1.0, 2.0]


def test_non_retryable_errors_fail_fast():
    transport = StubTransport({URL: [ok(b"", 404)]})
    pipeline = make_pipeline(transport)
    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(pipeline.execute(HttpRequest(URL)))
    assert excinfo.value.kind is ErrorKind.NOT_FOUND
    assert transport.calls == 1


def test_post_is_not_retried():
    transport = StubTransport({URL: [ok(b"", 503), ok()]})
    pipeline = make_pipeline(transport)
    with pytest.raises(NetworkError):
        asyncio.run(pipeline.execute(HttpRequest(URL, method=HttpMethod.POST, body=b"{}")))
    assert transport.calls == 1


def test_transport_exceptions_are_classified_and_retried():
    request = httpx.Request("GET", URL)
    transport = StubTransport({URL: [httpx.ConnectError("refused", request=request), ok()]})
    pipeline = make_pipeline(transport)
    assert asyncio.run(pipeline.execute(HttpRequest(URL))) == b'{"id": 1}'
    assert transport.calls == 2


def test_decode_failure_is_not_retried():
    transport = StubTransport({URL: [ok(b"not json")]})
    pipeline = make_pipeline(transport)
    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(pipeline.execute_decoded(HttpRequest(URL)))
    assert excinfo.value.kind is ErrorKind.DECODING_FAILED
    assert transport.calls == 1


def test_decode_into_mismatched_type_fails():
    transport = StubTransport({URL: [ok(b'{"unexpected": true}')]})
    pipeline = make_pipeline(transport)
    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(pipeline.execute_decoded(HttpRequest(URL), into=User))
    assert excinfo.value.kind is ErrorKind.DECODING_FAILED


def test_interceptors_adapt_every_attempt_and_observe_every_result():
    transport = StubTransport({URL: [ok(b"", 502), ok()]})
    recorder = RecordingInterceptor()
    pipeline = make_pipeline(transport, interceptors=[recorder])

    asyncio.run(pipeline.execute(HttpRequest(URL)))

    assert len(recorder.adapted) == 2
    assert [r.ok for r in recorder.results] == [False, True]
    assert recorder.results[0].error == NetworkError.server_error(502)
    assert [r.headers["X-Attempt"] for r in transport.requests] == ["1", "2"]


def test_adaptation_failure_propagates_without_sending():
    transport = StubTransport({URL: [ok()]})
    recorder = RecordingInterceptor()
    pipeline = make_pipeline(transport, interceptors=[FailingAdapter(), recorder])
    with pytest.raises(PermissionError):
        asyncio.run(pipeline.execute(HttpRequest(URL)))
    assert transport.calls == 0
    assert recorder.results == []


def test_observer_failure_does_not_fail_call():
    transport = StubTransport({URL: [ok()]})
    pipeline = make_pipeline(transport, interceptors=[FailingObserver()])
    assert asyncio.run(pipeline.execute(HttpRequest(URL))) == b'{"id": 1}'


@pytest.mark.parametrize("url", ["not a url", "ftp://example/file", "http://"])
def test_invalid_targets_are_rejected_before_sending(url):
    transport = StubTransport()
    pipeline = make_pipeline(transport)
    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(pipeline.execute(HttpRequest(url)))
    assert excinfo.value.kind is ErrorKind.INVALID_TARGET
    assert transport.calls == 0


def test_body_gets_default_content_type():
    transport = StubTransport({URL: [ok()]})
    pipeline = make_pipeline(transport)
    asyncio.run(pipeline.execute(HttpRequest(URL, method=HttpMethod.POST, body=b"{}")))
    asyncio.run(pipeline.execute(HttpRequest(URL, method=HttpMethod.PUT, body=b"x", headers={"content-type": "text/plain"})))
    assert transport.requests[0].headers == {"Content-Type": "application/json"}
    assert transport.requests[1].headers == {"content-type": "text/plain"}


def test_hybrid_cache_serves_repeat_calls(tmp_path):
    transport = StubTransport({URL: [ok()]})
    cache = LayeredCache(MemoryCache(), DurableCache(tmp_path))
    pipeline = make_pipeline(transport, cache=cache, cache_policy=CachePolicy.hybrid(ttl=60))

    first = asyncio.run(pipeline.execute(HttpRequest(URL)))
    second = asyncio.run(pipeline.execute(HttpRequest(URL)))

    assert first == second == b'{"id": 1}'
    assert transport.calls == 1


def test_durable_cache_survives_pipeline_restart(tmp_path):
    settings = NetkitSettings(cache_dir=tmp_path)
    first = Pipeline(StubTransport({URL: [ok()]}), cache_policy=CachePolicy.hybrid(ttl=60), settings=settings)
    asyncio.run(first.execute(HttpRequest(URL)))

    offline = StubTransport()
    second = Pipeline(offline, cache_policy=CachePolicy.hybrid(ttl=60), settings=settings)
    assert asyncio.run(second.execute(HttpRequest(URL))) == b'{"id": 1}'
    assert offline.calls == 0


def test_failed_calls_are_not_cached():
    transport = StubTransport({URL: [ok(b"", 404), ok()]})
    pipeline = make_pipeline(transport, cache=MemoryCache(), cache_policy=CachePolicy.memory(ttl=60))
    with pytest.raises(NetworkError):
        asyncio.run(pipeline.execute(HttpRequest(URL)))
    assert asyncio.run(pipeline.execute(HttpRequest(URL))) == b'{"id": 1}'
    assert transport.calls == 2


def test_non_cacheable_methods_bypass_cache():
    cache = MemoryCache()
    transport = StubTransport({URL: [ok()]})
    pipeline = make_pipeline(transport, cache=cache, cache_policy=CachePolicy.memory(ttl=60))
    for _ in range(2):
        asyncio.run(pipeline.execute(HttpRequest(URL, method=HttpMethod.POST, body=b"{}")))
    assert transport.calls == 2
    assert len(cache) == 0


def test_never_policy_skips_provided_cache():
    cache = MemoryCache()
    transport = StubTransport({URL: [ok()]})
    pipeline = make_pipeline(transport, cache=cache, cache_policy=CachePolicy.never())
    asyncio.run(pipeline.execute(HttpRequest(URL)))
    asyncio.run(pipeline.execute(HttpRequest(URL)))
    assert transport.calls == 2
    assert len(cache) == 0


def test_cache_write_failure_is_ignored():
    transport = StubTransport({URL: [ok()]})
    pipeline = make_pipeline(transport, cache=BrokenStore(), cache_policy=CachePolicy.disk(ttl=60))
    assert asyncio.run(pipeline.execute(HttpRequest(URL))) == b'{"id": 1}'


def test_cancellation_during_backoff_propagates():
    transport = StubTransport({URL: [ok(b"", 503)]})
    policy = DefaultRetryPolicy(RetryConfig(base_delay=30.0))
    pipeline = Pipeline(transport, retry_policy=policy, settings=NetkitSettings())

    async def run():
        task = asyncio.create_task(pipeline.execute(HttpRequest(URL)))
        while transport.calls == 0:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return task.cancelled()

    assert asyncio.run(run()) is True
    assert transport.calls == 1


def test_upload_reports_progress_and_notifies_once():
    transport = StubTransport({URL: [ok(b"stored")]}, chunk_size=4)
    recorder = RecordingInterceptor()
    pipeline = make_pipeline(transport, interceptors=[recorder])
    updates = []

    body = asyncio.run(pipeline.upload(HttpRequest(URL, method=HttpMethod.POST), b"0123456789", updates.append))

    assert body == b"stored"
    assert transport.uploads == [b"0123456789"]
    assert [u.total_bytes_transferred for u in updates] == [4, 8, 10]
    assert updates[-1].fraction_completed == 1.0
    assert len(recorder.results) == 1


def test_upload_is_single_attempt():
    transport = StubTransport({URL: [ok(b"", 503), ok()]})
    pipeline = make_pipeline(transport)
    with pytest.raises(NetworkError):
        asyncio.run(pipeline.upload(HttpRequest(URL, method=HttpMethod.PUT), b"data"))
    assert transport.calls == 1


def test_download_writes_file_to_destination(tmp_path):
    transport = StubTransport({URL: [ok(b"file body")]})
    recorder = RecordingInterceptor()
    pipeline = make_pipeline(transport, interceptors=[recorder])
    updates = []

    location = asyncio.run(pipeline.download(HttpRequest(URL), updates.append, destination=tmp_path))

    assert location.parent == tmp_path
    assert location.read_bytes() == b"file body"
    assert updates[-1].total_bytes_transferred == len(b"file body")
    assert recorder.results[0].ok


def test_download_uses_configured_directory(tmp_path):
    transport = StubTransport({URL: [ok(b"x")]})
    pipeline = Pipeline(transport, settings=NetkitSettings(download_dir=tmp_path))
    assert asyncio.run(pipeline.download(HttpRequest(URL))).parent == tmp_path


def test_download_without_body_is_no_data(tmp_path):
    transport = StubTransport({URL: [ok(b"")]})
    recorder = RecordingInterceptor()
    pipeline = make_pipeline(transport, interceptors=[recorder])
    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(pipeline.download(HttpRequest(URL), destination=tmp_path))
    assert excinfo.value.kind is ErrorKind.NO_DATA
    assert recorder.results[0].error == NetworkError.no_data()


def test_pipeline_context_manager_closes_transport():
    transport = StubTransport()

    async def run():
        async with Pipeline(transport, settings=NetkitSettings()):
            pass

    asyncio.run(run())
    assert transport.closed is True


def test_default_pipeline_over_httpx_mock_transport():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": 7, "name": "Ada"})

    async def run():
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        settings = NetkitSettings(user_agent="netkit-tests")
        async with Pipeline(HttpxTransport(settings, client=client), settings=settings) as pipeline:
            return await pipeline.execute_decoded(HttpRequest(URL).with_header("Accept", "application/json"), into=User)

    assert asyncio.run(run()) == User(id=7, name="Ada")
    assert seen[0].headers["user-agent"] == "netkit-tests"
    assert seen[0].headers["accept"] == "application/json"


def test_create_default_pipeline_uses_httpx_transport():
    pipeline = create_default_pipeline(NetkitSettings(), cache_policy=CachePolicy.memory(ttl=5))
    try:
        assert isinstance(pipeline.transport, HttpxTransport)
        assert isinstance(pipeline.cache, MemoryCache)
    finally:
        asyncio.run(pipeline.aclose())


def test_execute_decoded_without_type_returns_json():
    transport = StubTransport({URL: [ok(json.dumps([1, 2, 3]).encode())]})
    pipeline = make_pipeline(transport)
    assert asyncio.run(pipeline.execute_decoded(HttpRequest(URL))) == [1, 2, 3]
