import asyncio

import pytest

from musebridge.errors import AuthorizationFailed
from musebridge.sources import consent as consent_module
from musebridge.sources.consent import CallbackConsentFlow, ConsoleConsentFlow

CALLBACK = "musee://spotify-callback?code=abc"


def test_callback_flow_resolves_with_delivered_url():
    opened = []

    async def scenario():
        flow = CallbackConsentFlow(open_url=opened.append)
        task = asyncio.create_task(flow.run("https://accounts.example/authorize"))
        await asyncio.sleep(0)
        assert flow.pending
        assert flow.handle_callback(CALLBACK) is True
        result = await task
        return flow, result

    flow, result = asyncio.run(scenario())
    assert result == CALLBACK
    assert opened == ["https://accounts.example/authorize"]
    assert flow.pending is False


def test_callback_flow_accepts_callback_from_another_thread():
    async def scenario():
        flow = CallbackConsentFlow(open_url=lambda url: True)
        task = asyncio.create_task(flow.run("https://auth"))
        await asyncio.sleep(0)
        delivered = await asyncio.to_thread(flow.handle_callback, CALLBACK)
        return delivered, await task

    assert asyncio.run(scenario()) == (True, CALLBACK)


def test_callback_flow_fail_raises_authorization_failed():
    cause = RuntimeError("cancelled")

    async def scenario():
        flow = CallbackConsentFlow(open_url=lambda url: True)
        task = asyncio.create_task(flow.run("https://auth"))
        await asyncio.sleep(0)
        flow.fail(cause)
        return await task

    with pytest.raises(AuthorizationFailed) as excinfo:
        asyncio.run(scenario())
    assert excinfo.value.cause is cause


def test_callback_without_pending_authorization_is_ignored():
    flow = CallbackConsentFlow(open_url=lambda url: True)
    assert flow.handle_callback(CALLBACK) is False
    assert flow.fail() is False


def test_callback_flow_fails_when_url_cannot_be_opened():
    flow = CallbackConsentFlow(open_url=lambda url: False)

    with pytest.raises(AuthorizationFailed):
        asyncio.run(flow.run("https://auth"))
    assert flow.pending is False


def test_console_flow_reads_pasted_url(monkeypatch):
    prompts = []

    def fake_input(prompt=""):
        prompts.append(prompt)
        return CALLBACK

    monkeypatch.setattr(consent_module.console, "input", fake_input)

    result = asyncio.run(ConsoleConsentFlow().run("https://auth"))

    assert result == CALLBACK
    assert prompts == ["Paste the redirect URL: "]


def test_second_run_while_pending_is_rejected():
    async def scenario():
        flow = CallbackConsentFlow(open_url=lambda url: True)
        first = asyncio.create_task(flow.run("https://auth"))
        await asyncio.sleep(0)

        with pytest.raises(AuthorizationFailed):
            await flow.run("https://auth")

        assert flow.pending
        assert flow.handle_callback(CALLBACK) is True
        return flow, await first

    flow, result = asyncio.run(scenario())
    assert result == CALLBACK
    assert flow.pending is False
