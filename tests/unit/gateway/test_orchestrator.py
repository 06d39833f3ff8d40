"""
Unit tests for FallbackOrchestrator.

Covers both fallback policies end to end through the real retry controller
and attempt executor, with upstreams simulated per host and backoff sleeps
captured by an AsyncMock.
"""

from unittest.mock import AsyncMock, call

import httpx
import pytest

from fallback_gateway.gateway.exceptions import (
    AllProvidersExhaustedError,
    ClientError,
    ConfigurationError,
    MissingCredentialError,
    ServerError,
    StreamingNotSupportedError,
)
from fallback_gateway.gateway.metadata import RetryPolicy
from fallback_gateway.gateway.orchestrator import FallbackOrchestrator
from fallback_gateway.models.completion_models import CompletionRequest
from fallback_gateway.models.enums import FallbackPolicy
from fixtures.upstream import Reply, chat_reply, corrupt_gzip_reply, status_reply


@pytest.fixture
def primary(make_provider):
    return make_provider("Primary", host="primary.test", model_id="primary-model")


@pytest.fixture
def secondary(make_provider):
    return make_provider("Secondary", host="secondary.test", model_id="secondary-model")


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def build(upstream, sleep):
    """Build an orchestrator wired to the scripted upstream."""
    def _build(providers, policy=FallbackPolicy.SEQUENTIAL, **policy_kwargs):
        return FallbackOrchestrator(
            providers,
            policy=policy,
            retry_policy=RetryPolicy(timeout_ms=2000, **policy_kwargs),
            executor=upstream.executor(),
            sleep=sleep,
        )

    return _build


def test_empty_provider_list_rejected():
    with pytest.raises(ConfigurationError):
        FallbackOrchestrator([])


def test_retry_overrides_apply_per_provider(primary, secondary):
    fast = RetryPolicy(max_retries=0, timeout_ms=500)

    orchestrator = FallbackOrchestrator(
        [primary, secondary], retry_overrides={"Secondary": fast}
    )

    assert orchestrator.routes[0].policy == RetryPolicy()
    assert orchestrator.routes[1].policy == fast


class TestSequential:
    @pytest.mark.asyncio
    async def test_single_healthy_provider(self, build, upstream, primary, completion_request):
        upstream.script("primary.test", chat_reply("  नमस्ते  "))

        result = await build([primary]).complete(completion_request)

        assert result.text == "नमस्ते"
        assert result.provider_name == "Primary"
        assert result.model == "primary-model"
        assert result.attempts == 1
        assert result.providers_tried == ["Primary"]

    @pytest.mark.asyncio
    async def test_primary_wins_without_touching_secondary(
        self, build, upstream, primary, secondary, completion_request
    ):
        upstream.script("primary.test", chat_reply("a"))
        upstream.script("secondary.test", chat_reply("b"))

        result = await build([primary, secondary]).complete(completion_request)

        assert result.provider_name == "Primary"
        assert upstream.attempts("secondary.test") == 0

    @pytest.mark.asyncio
    async def test_falls_back_after_primary_retries_exhausted(
        self, build, upstream, sleep, primary, secondary, completion_request
    ):
        upstream.script("primary.test", status_reply(503, "overloaded"))
        upstream.script("secondary.test", chat_reply("जलम्"))

        result = await build([primary, secondary], max_retries=2).complete(completion_request)

        assert result.provider_name == "Secondary"
        assert result.text == "जलम्"
        assert result.providers_tried == ["Primary", "Secondary"]
        assert upstream.attempts("primary.test") == 3
        assert upstream.attempts("secondary.test") == 1
        assert sleep.await_args_list == [call(1.0), call(2.0)]

    @pytest.mark.asyncio
    async def test_fatal_primary_falls_back_immediately(
        self, build, upstream, sleep, primary, secondary, completion_request
    ):
        upstream.script("primary.test", status_reply(400, "bad request"))
        upstream.script("secondary.test", chat_reply("ok"))

        result = await build([primary, secondary]).complete(completion_request)

        assert result.provider_name == "Secondary"
        assert upstream.attempts("primary.test") == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_all_unauthorized_aggregates_without_backoff(
        self, build, upstream, sleep, primary, secondary, completion_request
    ):
        upstream.script("primary.test", status_reply(401, "invalid key A"))
        upstream.script("secondary.test", status_reply(401, "invalid key B"))

        with pytest.raises(AllProvidersExhaustedError) as exc_info:
            await build([primary, secondary]).complete(completion_request)

        error = exc_info.value
        assert error.message == (
            "All providers failed. Primary: Primary error 401: invalid key A. "
            "Secondary: Secondary error 401: invalid key B"
        )
        assert [f["provider"] for f in error.summary()] == ["Primary", "Secondary"]
        assert all(f["kind"] == "client_error" for f in error.summary())
        assert upstream.attempts("primary.test") == 1
        assert upstream.attempts("secondary.test") == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_primary_answer_falls_back(
        self, build, upstream, primary, secondary, completion_request
    ):
        upstream.script("primary.test", chat_reply("   "))
        upstream.script("secondary.test", chat_reply("ok"))

        result = await build([primary, secondary]).complete(completion_request)

        assert result.provider_name == "Secondary"
        assert upstream.attempts("primary.test") == 1

    @pytest.mark.asyncio
    async def test_empty_answer_from_every_provider(
        self, build, upstream, primary, secondary, completion_request
    ):
        upstream.script("primary.test", chat_reply(""))
        upstream.script("secondary.test", chat_reply("\n"))

        with pytest.raises(AllProvidersExhaustedError) as exc_info:
            await build([primary, secondary]).complete(completion_request)

        assert "Primary returned an empty or malformed response" in exc_info.value.message
        assert [f["kind"] for f in exc_info.value.summary()] == ["empty_response", "empty_response"]


class TestSingleProvider:
    @pytest.mark.asyncio
    async def test_reraises_own_error(self, build, upstream, primary, completion_request):
        upstream.script("primary.test", status_reply(401, "nope"))

        with pytest.raises(ClientError) as exc_info:
            await build([primary]).complete(completion_request)

        assert exc_info.value.message == "Primary error 401: nope"

    @pytest.mark.asyncio
    async def test_reraises_last_retryable_error(self, build, upstream, primary, completion_request):
        upstream.script("primary.test", status_reply(502))

        with pytest.raises(ServerError):
            await build([primary], max_retries=1).complete(completion_request)

        assert upstream.attempts("primary.test") == 2


class TestCredentials:
    @pytest.mark.asyncio
    async def test_disabled_provider_is_skipped(
        self, build, upstream, make_provider, secondary, completion_request
    ):
        keyless = make_provider("Keyless", host="keyless.test", credential="")
        upstream.script("secondary.test", chat_reply("ok"))

        result = await build([keyless, secondary]).complete(completion_request)

        assert result.provider_name == "Secondary"
        assert result.providers_tried == ["Secondary"]
        assert upstream.attempts("keyless.test") == 0

    @pytest.mark.asyncio
    async def test_skipped_providers_listed_in_aggregate(
        self, build, upstream, make_provider, primary, completion_request
    ):
        keyless = make_provider("Keyless", host="keyless.test", credential=None)
        upstream.script("primary.test", status_reply(404))

        with pytest.raises(AllProvidersExhaustedError) as exc_info:
            await build([primary, keyless]).complete(completion_request)

        assert exc_info.value.skipped == ["Keyless"]
        assert list(exc_info.value.failures) == ["Primary"]

    @pytest.mark.asyncio
    async def test_only_provider_without_credential(self, build, upstream, make_provider, completion_request):
        keyless = make_provider("Keyless", host="keyless.test", credential="  ")

        with pytest.raises(MissingCredentialError) as exc_info:
            await build([keyless]).complete(completion_request)

        assert exc_info.value.providers == ["Keyless"]
        assert upstream.attempts("keyless.test") == 0


class TestRequestHandling:
    @pytest.mark.asyncio
    async def test_stream_rejected_before_any_call(self, build, upstream, primary):
        request = CompletionRequest.from_prompt("hello", "sys", stream=True)

        with pytest.raises(StreamingNotSupportedError):
            await build([primary]).complete(request)

        assert upstream.attempts("primary.test") == 0

    @pytest.mark.asyncio
    async def test_model_override_reaches_every_provider(
        self, build, upstream, primary, secondary
    ):
        upstream.script("primary.test", status_reply(500))
        upstream.script("secondary.test", chat_reply("ok"))
        request = CompletionRequest.from_prompt("hello", "sys", model="custom-model")

        result = await build([primary, secondary], max_retries=0).complete(request)

        assert b'"custom-model"' in upstream.requests["primary.test"][0].content
        assert b'"custom-model"' in upstream.requests["secondary.test"][0].content
        assert b'"secondary-model"' not in upstream.requests["secondary.test"][0].content
        assert result.model == "custom-model"

    @pytest.mark.asyncio
    async def test_default_models_without_override(
        self, build, upstream, primary, secondary, completion_request
    ):
        upstream.script("primary.test", status_reply(500))
        upstream.script("secondary.test", chat_reply("ok"))

        result = await build([primary, secondary], max_retries=0).complete(completion_request)

        assert b'"primary-model"' in upstream.requests["primary.test"][0].content
        assert result.model == "secondary-model"

    @pytest.mark.asyncio
    async def test_request_is_not_mutated(self, build, upstream, primary, secondary, completion_request):
        upstream.script("primary.test", status_reply(503))
        upstream.script("secondary.test", chat_reply("ok"))
        before = completion_request.model_dump()

        await build([primary, secondary]).complete(completion_request)

        assert completion_request.model_dump() == before

    @pytest.mark.asyncio
    async def test_orchestrator_is_reusable(self, build, upstream, primary, completion_request):
        upstream.script("primary.test", chat_reply("ok"))
        orchestrator = build([primary])

        first = await orchestrator.complete(completion_request)
        second = await orchestrator.complete(completion_request)

        assert first.text == second.text == "ok"
        assert upstream.attempts("primary.test") == 2


class TestRace:
    @pytest.mark.asyncio
    async def test_slow_primary_beats_fast_secondary(
        self, build, upstream, primary, secondary, completion_request
    ):
        upstream.script("primary.test", chat_reply("primary answer", delay=0.2))
        upstream.script("secondary.test", chat_reply("secondary answer"))

        result = await build([primary, secondary], FallbackPolicy.RACE).complete(completion_request)

        assert result.provider_name == "Primary"
        assert result.text == "primary answer"
        assert result.providers_tried == ["Primary", "Secondary"]
        assert upstream.attempts("secondary.test") == 1

    @pytest.mark.asyncio
    async def test_failed_primary_yields_to_secondary(
        self, build, upstream, primary, secondary, completion_request
    ):
        upstream.script("primary.test", status_reply(401))
        upstream.script("secondary.test", chat_reply("secondary answer", delay=0.05))

        result = await build([primary, secondary], FallbackPolicy.RACE).complete(completion_request)

        assert result.provider_name == "Secondary"

    @pytest.mark.asyncio
    async def test_empty_primary_answer_is_skipped(
        self, build, upstream, primary, secondary, completion_request
    ):
        upstream.script("primary.test", chat_reply(" "))
        upstream.script("secondary.test", chat_reply("ok"))

        result = await build([primary, secondary], FallbackPolicy.RACE).complete(completion_request)

        assert result.provider_name == "Secondary"

    @pytest.mark.asyncio
    async def test_all_fail(self, build, upstream, primary, secondary, completion_request):
        upstream.script("primary.test", status_reply(403))
        upstream.script("secondary.test", status_reply(503))

        with pytest.raises(AllProvidersExhaustedError) as exc_info:
            await build([primary, secondary], FallbackPolicy.RACE, max_retries=0).complete(
                completion_request
            )

        assert [f["kind"] for f in exc_info.value.summary()] == ["client_error", "server_error"]

    @pytest.mark.asyncio
    async def test_model_override_reaches_every_provider(self, build, upstream, primary, secondary):
        upstream.script("primary.test", chat_reply("a"))
        upstream.script("secondary.test", chat_reply("b"))
        request = CompletionRequest.from_prompt("hello", "sys", model="custom-model")

        await build([primary, secondary], FallbackPolicy.RACE).complete(request)

        assert b'"custom-model"' in upstream.requests["primary.test"][0].content
        assert b'"custom-model"' in upstream.requests["secondary.test"][0].content


class TestUndecodableBodies:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("policy", [FallbackPolicy.SEQUENTIAL, FallbackPolicy.RACE])
    async def test_corrupt_encoding_falls_back(
        self, build, upstream, primary, secondary, completion_request, policy
    ):
        upstream.script("primary.test", corrupt_gzip_reply())
        upstream.script("secondary.test", chat_reply("ok"))

        result = await build([primary, secondary], policy, max_retries=0).complete(completion_request)

        assert result.provider_name == "Secondary"
        assert upstream.attempts("primary.test") == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("policy", [FallbackPolicy.SEQUENTIAL, FallbackPolicy.RACE])
    async def test_corrupt_encoding_everywhere_is_aggregated(
        self, build, upstream, primary, secondary, completion_request, policy
    ):
        upstream.script("primary.test", corrupt_gzip_reply())
        upstream.script("secondary.test", Reply(error=httpx.TooManyRedirects))

        with pytest.raises(AllProvidersExhaustedError) as exc_info:
            await build([primary, secondary], policy).complete(completion_request)

        assert [f["kind"] for f in exc_info.value.summary()] == ["malformed_response", "protocol_error"]
        assert upstream.attempts("primary.test") == 1
        assert upstream.attempts("secondary.test") == 1


@pytest.mark.asyncio
async def test_race_crash_waits_for_siblings(build, upstream, primary, secondary, completion_request):
    upstream.script("primary.test", Reply(error=RuntimeError))
    upstream.script("secondary.test", chat_reply("late", delay=0.1))

    with pytest.raises(RuntimeError):
        await build([primary, secondary], FallbackPolicy.RACE).complete(completion_request)

    assert upstream.finished["secondary.test"] == 1
