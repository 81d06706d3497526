import asyncio

import pytest

from conversation import NO_BUSINESS_ERROR, ConversationController


async def sleep_forever(seconds):
    await asyncio.Event().wait()


@pytest.fixture
async def controller(mock_backend, business):
    """Controller whose poll loop never ticks on its own."""
    ctrl = ConversationController(mock_backend, sleep=sleep_forever, poll_interval=3.0, message_limit=16)
    ctrl.select_business(business)
    yield ctrl
    await ctrl.close()


async def test_start_requires_business(mock_backend):
    ctrl = ConversationController(mock_backend, sleep=sleep_forever)
    await ctrl.start()

    assert ctrl.error == NO_BUSINESS_ERROR
    assert ctrl.state == "stopped"
    assert ctrl.conversation_id is None


async def test_lifecycle_follows_backend(controller, mock_backend):
    await controller.start()
    assert controller.state == "running"
    assert controller.conversation_id
    assert controller.is_polling
    conversation_id = controller.conversation_id

    await controller.pause()
    assert controller.state == "paused"
    assert not controller.is_polling
    assert (await mock_backend.get_conversation_status(conversation_id))["state"] == "paused"

    await controller.resume()
    assert controller.state == "running"
    assert controller.is_polling

    await controller.stop()
    assert controller.state == "stopped"
    assert controller.conversation_id is None
    assert not controller.is_polling


async def test_actions_without_conversation_are_no_ops(controller):
    await controller.pause()
    await controller.resume()
    await controller.stop()
    await controller.reset()
    assert controller.state == "stopped"
    assert controller.error is None


async def test_ticks_rotate_agents_and_update_stats(controller):
    await controller.start()

    for _ in range(5):
        controller.tick()

    assert [m.provider for m in controller.messages] == ["GPT-4", "Claude-3", "Gemini Pro", "Perplexity", "GPT-4"]
    assert controller.messages[0].content == (
        "This is a simulated AI response about Roofing Services. Message 1 analyzing the business "
        "from the perspective of advocate for the business with factual, compelling arguments."
    )
    assert controller.stats == {"total_messages": 5, "current_round": 2, "duration": 25}


async def test_message_limit_completes_conversation(controller):
    await controller.start()

    for _ in range(16):
        controller.tick()

    assert controller.state == "completed"
    assert len(controller.messages) == 16
    assert controller.stats == {"total_messages": 16, "current_round": 5, "duration": 80}
    assert controller.tick() is None


async def test_poll_loop_runs_until_limit(mock_backend, business, fake_sleep):
    ctrl = ConversationController(mock_backend, sleep=fake_sleep, poll_interval=3.0, message_limit=16)
    ctrl.select_business(business)
    await ctrl.start()

    for _ in range(200):
        if ctrl.state == "completed":
            break
        await asyncio.sleep(0)

    assert ctrl.state == "completed"
    assert len(ctrl.messages) == 16
    assert set(fake_sleep.calls) == {3.0}
    await ctrl.close()


async def test_reset_clears_transcript(controller):
    await controller.start()
    controller.tick()
    controller.tick()

    await controller.reset()

    assert controller.messages == []
    assert controller.stats == {"total_messages": 0, "current_round": 0, "duration": 0}
    assert controller.state == "stopped"
    assert controller.conversation_id is None


async def test_reset_round_matches_backend(controller, mock_backend):
    await controller.start()
    conversation_id = controller.conversation_id
    controller.tick()

    await controller.reset()
    status = await mock_backend.get_conversation_status(conversation_id)

    assert status["current_round"] == controller.stats["current_round"] == 0


async def test_start_while_active_keeps_current_conversation(controller):
    await controller.start()
    conversation_id = controller.conversation_id
    poll_task = controller._poll_task
    controller.tick()

    await controller.start()

    assert controller.conversation_id == conversation_id
    assert controller._poll_task is poll_task
    assert len(controller.messages) == 1

    await controller.pause()
    await controller.start()
    assert controller.conversation_id == conversation_id
    assert controller.state == "paused"


async def test_start_after_completion_begins_new_conversation(controller):
    await controller.start()
    first = controller.conversation_id
    for _ in range(16):
        controller.tick()
    assert controller.state == "completed"

    await controller.start()

    assert controller.state == "running"
    assert controller.conversation_id != first
    assert controller.stats == {"total_messages": 0, "current_round": 1, "duration": 0}


async def test_backend_failure_sets_error_and_keeps_state(controller):
    controller.conversation_id = "missing"
    controller.state = "paused"

    await controller.resume()

    assert controller.error == "Failed to resume conversation: Conversation not found"
    assert controller.state == "paused"


async def test_paid_tier_reports_payment_required(mock_backend, business):
    ctrl = ConversationController(mock_backend, sleep=sleep_forever)
    ctrl.select_business(business, tier="tier3")
    await ctrl.start()

    assert ctrl.state == "stopped"
    assert ctrl.payment_required == {"price": 99.0, "tier_name": "Market Launch"}
    assert ctrl.error == "Failed to start conversation: Payment required"


async def test_sync_takes_state_from_backend(controller, mock_backend):
    await controller.start()
    await mock_backend.pause_conversation(controller.conversation_id)

    await controller.sync()

    assert controller.state == "paused"
    assert not controller.is_polling
    assert controller.stats["current_round"] == 1
