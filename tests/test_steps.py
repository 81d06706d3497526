import asyncio

import pytest

from agents.steps import Step, StepRunner


def value_step(name, value, log):
    async def action():
        await asyncio.sleep(0)
        log.append(name)
        return value

    return Step(name, action)


async def test_runs_in_order_and_resolves_handles():
    log = []
    runner = StepRunner()
    results = await runner.run([value_step("a", 1, log), value_step("b", 2, log), value_step("c", 3, log)])

    assert results == [1, 2, 3]
    assert log == ["a", "b", "c"]
    assert runner.handle("b").result() == 2
    assert runner.cancelled is False


async def test_failure_stops_run_and_propagates():
    log = []

    async def boom():
        raise RuntimeError("step failed")

    runner = StepRunner()
    with pytest.raises(RuntimeError, match="step failed"):
        await runner.run([value_step("a", 1, log), Step("b", boom), value_step("c", 3, log)])

    assert log == ["a"]
    assert isinstance(runner.handle("b").exception(), RuntimeError)
    assert runner.handle("c").cancelled()


async def test_cancel_stops_current_and_pending_steps():
    started = asyncio.Event()
    log = []

    async def slow():
        started.set()
        await asyncio.sleep(10)
        log.append("slow")

    runner = StepRunner()
    task = asyncio.create_task(runner.run([value_step("a", 1, log), Step("b", slow), value_step("c", 3, log)]))
    await started.wait()
    runner.cancel()
    results = await task

    assert results == [1]
    assert log == ["a"]
    assert runner.cancelled is True
    assert runner.handle("a").result() == 1
    assert runner.handle("b").cancelled()
    assert runner.handle("c").cancelled()


async def test_duplicate_names_rejected():
    with pytest.raises(ValueError):
        await StepRunner().run([value_step("a", 1, []), value_step("a", 2, [])])


async def test_handle_unknown_before_run():
    with pytest.raises(KeyError):
        StepRunner().handle("a")
