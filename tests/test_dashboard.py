import asyncio
import json
from dataclasses import replace

from sentient.application import (
    ANALYSIS_FAILED_MESSAGE,
    CHAT_ERROR_MESSAGE,
    READY_MESSAGE,
    SAMPLE_REVIEWS,
    WELCOME_MESSAGE,
    build_controller,
)
from sentient.domain import ChatRole
from sentient.infrastructure.llm import ProviderError


def _payload_with_summary(payload, summary):
    return json.dumps({**payload, "executiveSummary": summary})


def test_initial_state(controller):
    assert controller.input_text == SAMPLE_REVIEWS
    assert controller.result is None
    assert controller.error is None
    assert not controller.is_analyzing
    assert [m.text for m in controller.chat.messages] == [WELCOME_MESSAGE]
    assert not controller.chat.is_active


def test_analyze_installs_result(controller, stub_client, payload, payload_json):
    stub_client.queue(payload_json)

    snapshot = asyncio.run(controller.analyze("Great app"))

    assert snapshot.snapshot_id == 1
    assert controller.result.to_dict() == payload
    assert controller.error is None
    assert not controller.is_analyzing
    assert [m.text for m in controller.chat.messages] == [READY_MESSAGE]


def test_blank_input_is_a_no_op(controller, stub_client):
    assert asyncio.run(controller.analyze("  ")) is None
    assert stub_client.calls == []
    assert controller.input_text == SAMPLE_REVIEWS


def test_failure_keeps_previous_result(controller, stub_client, payload_json):
    stub_client.queue(payload_json)
    asyncio.run(controller.analyze("first batch"))
    previous = controller.snapshot

    stub_client.queue(ProviderError("HTTP 500"))
    assert asyncio.run(controller.analyze("second batch")) is None

    assert controller.snapshot is previous
    assert controller.error == ANALYSIS_FAILED_MESSAGE
    assert not controller.is_analyzing


def test_format_error_uses_same_message(controller, stub_client):
    stub_client.queue("{}")

    asyncio.run(controller.analyze("reviews"))

    assert controller.result is None
    assert controller.error == ANALYSIS_FAILED_MESSAGE


def test_next_success_clears_error(controller, stub_client, payload_json):
    stub_client.queue(ProviderError("down"), payload_json)

    asyncio.run(controller.analyze("reviews"))
    asyncio.run(controller.analyze("reviews"))

    assert controller.error is None
    assert controller.result is not None


def test_stale_analysis_completion_is_discarded(controller, stub_client, payload, monkeypatch):
    """A slow first request finishing after a newer one must not overwrite it."""
    release_first = None

    async def scenario():
        nonlocal release_first
        release_first = asyncio.Event()
        service = controller._analysis_service
        real_analyze = service.analyze
        calls = []

        async def fake_threadpool(func, *args):
            calls.append(args[0])
            if args[0] == "slow":
                await release_first.wait()
            return real_analyze(*args)

        monkeypatch.setattr("sentient.application.dashboard.run_in_threadpool", fake_threadpool)
        stub_client.queue(_payload_with_summary(payload, "fast"), _payload_with_summary(payload, "slow"))

        slow = asyncio.create_task(controller.analyze("slow"))
        await asyncio.sleep(0)
        await controller.analyze("fast")
        release_first.set()
        return await slow

    assert asyncio.run(scenario()) is None
    assert controller.result.executive_summary == "fast"
    assert not controller.is_analyzing


def test_session_is_recreated_for_new_result(controller, stub_client, payload):
    stub_client.queue(_payload_with_summary(payload, "R1 summary"))
    asyncio.run(controller.analyze("batch one"))

    stub_client.queue("about R1")
    asyncio.run(controller.chat.send("hi"))
    first_session = controller.chat.session
    assert "R1 summary" in first_session.system_instruction

    stub_client.queue(_payload_with_summary(payload, "R2 summary"))
    asyncio.run(controller.analyze("batch two"))
    assert not controller.chat.is_active

    stub_client.queue("about R2")
    asyncio.run(controller.chat.send("hi again"))

    second_session = controller.chat.session
    assert second_session is not first_session
    assert second_session.snapshot_id == controller.snapshot.snapshot_id
    assert "R2 summary" in stub_client.calls[-1]["system_instruction"]
    assert "R1 summary" not in stub_client.calls[-1]["system_instruction"]
    # fresh session: only the new user turn is sent
    assert len(stub_client.calls[-1]["contents"]) == 1


def test_open_creates_session_only_with_result(controller, stub_client, payload_json):
    controller.chat.open()
    assert controller.chat.is_open
    assert not controller.chat.is_active

    controller.chat.close()
    stub_client.queue(payload_json)
    asyncio.run(controller.analyze("reviews"))

    controller.chat.toggle()
    assert controller.chat.is_active
    assert controller.chat.session.snapshot_id == controller.snapshot.snapshot_id


def test_send_without_result_uses_placeholder_context(controller, stub_client):
    stub_client.queue("Please run an analysis first.")

    reply = asyncio.run(controller.chat.send("What do customers think?"))

    assert reply.text == "Please run an analysis first."
    assert "No analysis loaded yet." in stub_client.calls[0]["system_instruction"]


def test_send_appends_transcript(controller, stub_client, payload_json):
    stub_client.queue(payload_json, "Login issues dominate.")
    asyncio.run(controller.analyze("reviews"))

    asyncio.run(controller.chat.send("Top issue?"))

    roles = [m.role for m in controller.chat.messages]
    assert roles == [ChatRole.ASSISTANT, ChatRole.USER, ChatRole.ASSISTANT]
    assert controller.chat.messages[-1].text == "Login issues dominate."
    assert not controller.chat.is_waiting


def test_chat_error_becomes_assistant_message(controller, stub_client, payload_json):
    stub_client.queue(payload_json, ProviderError("boom"))
    asyncio.run(controller.analyze("reviews"))

    reply = asyncio.run(controller.chat.send("Top issue?"))

    assert reply.role is ChatRole.ASSISTANT
    assert reply.text == CHAT_ERROR_MESSAGE
    assert controller.chat.messages[-1] is reply
    assert not controller.chat.is_waiting


def test_blank_chat_message_is_ignored(controller, stub_client):
    assert asyncio.run(controller.chat.send("   ")) is None
    assert len(controller.chat.messages) == 1
    assert stub_client.calls == []


def test_load_sample_restores_input(controller, stub_client, payload_json):
    stub_client.queue(payload_json)
    asyncio.run(controller.analyze("something else"))
    assert controller.input_text == "something else"

    controller.load_sample()

    assert controller.input_text == SAMPLE_REVIEWS


def test_reply_for_replaced_session_is_dropped(controller, stub_client, payload, monkeypatch):
    """A chat reply arriving after a new analysis replaced its session is not shown."""
    stub_client.queue(_payload_with_summary(payload, "R1 summary"))
    asyncio.run(controller.analyze("batch one"))

    async def scenario():
        release_reply = asyncio.Event()

        async def fake_threadpool(func, *args):
            if args[0] == "slow question":
                await release_reply.wait()
            return func(*args)

        monkeypatch.setattr("sentient.application.dashboard.run_in_threadpool", fake_threadpool)
        # The gated chat call reaches the client only after the second analysis
        stub_client.queue(_payload_with_summary(payload, "R2 summary"), "old reply")

        pending = asyncio.create_task(controller.chat.send("slow question"))
        await asyncio.sleep(0)
        old_session = controller.chat.session
        await controller.analyze("batch two")
        release_reply.set()
        return old_session, await pending

    old_session, reply = asyncio.run(scenario())

    assert reply is None
    assert old_session is not None
    assert controller.chat.session is not old_session
    assert controller.result.executive_summary == "R2 summary"
    assert [m.text for m in controller.chat.messages] == [READY_MESSAGE]
    assert "old reply" not in [m.text for m in controller.chat.messages]
    assert not controller.chat.is_waiting


def _refuse_network(monkeypatch):
    def no_network(*args, **kwargs):
        raise AssertionError("request should not be sent")

    monkeypatch.setattr("requests.post", no_network)


def test_missing_key_surfaces_analysis_failed_message(llm_settings, monkeypatch):
    _refuse_network(monkeypatch)
    controller = build_controller(replace(llm_settings, api_key=""))

    assert asyncio.run(controller.analyze("Great app")) is None

    assert controller.error == ANALYSIS_FAILED_MESSAGE
    assert controller.result is None
    assert not controller.is_analyzing


def test_missing_key_surfaces_chat_error_message(llm_settings, monkeypatch):
    _refuse_network(monkeypatch)
    controller = build_controller(replace(llm_settings, api_key=""))

    reply = asyncio.run(controller.chat.send("What do customers think?"))

    assert reply.role is ChatRole.ASSISTANT
    assert reply.text == CHAT_ERROR_MESSAGE
    assert [m.role for m in controller.chat.messages] == [ChatRole.ASSISTANT, ChatRole.USER, ChatRole.ASSISTANT]
    assert not controller.chat.is_active
    assert not controller.chat.is_waiting
