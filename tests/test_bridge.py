from __future__ import annotations

import asyncio
import threading

import pytest

from callbridge import (
    BridgeConfig,
    Failure,
    MisuseFault,
    Resumer,
    Success,
    bridge,
    bridge_result,
    capture_misuse,
    configure,
)


class RecordingSink:
    def __init__(self) -> None:
        self.reports: list[tuple[str, str]] = []

    def report(self, label: str, kind: str) -> None:
        self.reports.append((label, kind))


def test_single_resume_returns_value_without_reports() -> None:
    async def runner() -> int:
        loop = asyncio.get_running_loop()
        return await bridge(lambda done: loop.call_soon(done, 42))

    with capture_misuse() as reports:
        assert asyncio.run(runner()) == 42
    assert reports == []


def test_error_passes_through_unchanged() -> None:
    error = ConnectionResetError("peer went away")

    async def runner() -> None:
        await bridge_result(lambda done: done(Failure(error)))

    with pytest.raises(ConnectionResetError) as excinfo:
        asyncio.run(runner())
    assert excinfo.value is error


def test_second_resume_is_reported_and_ignored() -> None:
    stash: list[Resumer] = []

    def setup(done: Resumer) -> None:
        stash.append(done)
        done(42)

    async def runner() -> int:
        return await bridge(setup, label="answer")

    with capture_misuse() as reports:
        assert asyncio.run(runner()) == 42
        stash[0](7)

    assert [(r.label, r.kind) for r in reports] == [("answer", "double_resume")]
    assert stash[0].state == "resumed"


def test_double_resume_with_mixed_payloads_keeps_first() -> None:
    stash: list[Resumer] = []

    def setup(done: Resumer) -> None:
        stash.append(done)
        done.resume_raising(LookupError("first"))
        done.resume_returning("second")
        done.resume_with(Success("third"))

    async def runner() -> None:
        await bridge(setup, label="mixed")

    with capture_misuse() as reports:
        with pytest.raises(LookupError, match="first"):
            asyncio.run(runner())

    assert [r.kind for r in reports] == ["double_resume", "double_resume"]


def test_resume_from_other_thread() -> None:
    def setup(done: Resumer) -> None:
        threading.Timer(0.01, done, args=("from-timer",)).start()

    async def runner() -> str:
        return await bridge(setup)

    assert asyncio.run(runner()) == "from-timer"


def test_concurrent_resumers_single_winner() -> None:
    barrier = threading.Barrier(2)
    workers: list[threading.Thread] = []

    def setup(done: Resumer) -> None:
        def fire(value: str) -> None:
            barrier.wait()
            done(value)

        for value in ("left", "right"):
            worker = threading.Thread(target=fire, args=(value,))
            workers.append(worker)
            worker.start()

    async def runner() -> str:
        return await bridge(setup, label="race")

    with capture_misuse() as reports:
        winner = asyncio.run(runner())
        for worker in workers:
            worker.join()

    assert winner in {"left", "right"}
    assert [(r.label, r.kind) for r in reports] == [("race", "double_resume")]


@pytest.mark.parametrize(
    ("arity", "args", "expected"),
    [
        (0, (), None),
        (1, ("solo",), "solo"),
        (3, (1, "two", 3.0), (1, "two", 3.0)),
        (6, tuple(range(6)), tuple(range(6))),
    ],
)
def test_arity_variants(arity: int, args: tuple[object, ...], expected: object) -> None:
    async def runner() -> object:
        return await bridge(lambda done: done(*args), arity=arity)

    assert asyncio.run(runner()) == expected


def test_wrong_arity_raises_to_invoker_and_keeps_token_pending() -> None:
    errors: list[TypeError] = []

    def setup(done: Resumer) -> None:
        try:
            done("only-one")
        except TypeError as exc:
            errors.append(exc)
        assert done.state == "pending"
        done("a", "b")

    async def runner() -> tuple[str, str]:
        return await bridge(setup, arity=2)

    assert asyncio.run(runner()) == ("a", "b")
    assert len(errors) == 1


def test_negative_arity_rejected() -> None:
    called: list[Resumer] = []

    async def runner() -> None:
        await bridge(called.append, arity=-1)

    with pytest.raises(ValueError, match="arity"):
        asyncio.run(runner())
    assert called == []


def test_result_shape_rejects_plain_values() -> None:
    stash: list[Resumer] = []

    def setup(done: Resumer) -> None:
        stash.append(done)
        with pytest.raises(TypeError):
            done("not a result")
        done(Success(5))

    async def runner() -> int:
        return await bridge_result(setup)

    assert asyncio.run(runner()) == 5


def test_setup_failure_propagates_and_discards_token() -> None:
    stash: list[Resumer] = []

    def setup(done: Resumer) -> None:
        stash.append(done)
        raise OSError("registration refused")

    async def runner() -> None:
        await bridge(setup, label="refused")

    with capture_misuse() as reports:
        with pytest.raises(OSError, match="registration refused"):
            asyncio.run(runner())
        stash[0]("stray")

    assert stash[0].state == "discarded"
    assert [(r.label, r.kind) for r in reports] == [("refused", "resume_after_discard")]


def test_cancelled_caller_makes_late_resume_a_noop() -> None:
    stash: list[Resumer] = []

    async def runner() -> None:
        task = asyncio.create_task(bridge(stash.append, label="cancelled"))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    with capture_misuse() as reports:
        asyncio.run(runner())
        stash[0]("too late")

    assert stash[0].settled
    assert [r.kind for r in reports] == ["resume_after_discard"]


def test_timeout_composed_externally() -> None:
    stash: list[Resumer] = []

    async def runner() -> None:
        await asyncio.wait_for(bridge(stash.append, label="slow"), timeout=0.01)

    with pytest.raises(TimeoutError):
        asyncio.run(runner())
    assert stash[0].state == "discarded"


def test_dropped_resumer_reported_as_leaked() -> None:
    async def runner() -> None:
        await asyncio.wait_for(bridge(lambda done: None, label="leaky"), timeout=0.01)

    with capture_misuse() as reports:
        with pytest.raises(TimeoutError):
            asyncio.run(runner())

    assert [(r.label, r.kind) for r in reports] == [("leaky", "leaked")]


def test_unchecked_mode_drops_misuse_silently() -> None:
    stash: list[Resumer] = []

    def setup(done: Resumer) -> None:
        stash.append(done)
        done(1)
        done(2)

    async def runner() -> int:
        return await bridge(setup, checked=False)

    with capture_misuse() as reports:
        assert asyncio.run(runner()) == 1
    assert reports == []
    assert stash[0].label == "<unchecked>"


def test_unchecked_mode_from_global_config() -> None:
    configure(BridgeConfig(checked=False))

    def setup(done: Resumer) -> None:
        done("once")
        done("twice")

    async def runner() -> str:
        return await bridge(setup)

    with capture_misuse() as reports:
        assert asyncio.run(runner()) == "once"
    assert reports == []


def test_strict_mode_raises_to_invoker() -> None:
    configure(BridgeConfig(strict=True))
    faults: list[MisuseFault] = []

    def setup(done: Resumer) -> None:
        done("kept")
        try:
            done("rejected")
        except MisuseFault as fault:
            faults.append(fault)

    async def runner() -> str:
        return await bridge(setup, label="strict")

    with capture_misuse() as reports:
        assert asyncio.run(runner()) == "kept"

    assert [(f.label, f.kind) for f in faults] == [("strict", "double_resume")]
    assert [r.kind for r in reports] == ["double_resume"]


def test_per_call_sink_replaces_global_hub() -> None:
    sink = RecordingSink()

    def setup(done: Resumer) -> None:
        done(1)
        done(2)

    async def runner() -> int:
        return await bridge(setup, label="custom", sink=sink)

    with capture_misuse() as reports:
        assert asyncio.run(runner()) == 1

    assert sink.reports == [("custom", "double_resume")]
    assert reports == []


def test_default_label_names_calling_function() -> None:
    sink = RecordingSink()

    def setup(done: Resumer) -> None:
        done(None)
        done(None)

    async def fetch_profile() -> None:
        await bridge(setup, sink=sink)

    async def runner() -> None:
        await fetch_profile()

    asyncio.run(runner())
    assert sink.reports == [
        (
            "test_default_label_names_calling_function.<locals>.fetch_profile",
            "double_resume",
        )
    ]


def test_stop_iteration_error_reaches_caller() -> None:
    error = StopIteration("exhausted")

    async def runner() -> None:
        await asyncio.wait_for(
            bridge_result(lambda done: done(Failure(error))),
            timeout=1,
        )

    # Coroutines cannot raise StopIteration; it arrives chained to RuntimeError.
    with pytest.raises(RuntimeError) as excinfo:
        asyncio.run(runner())
    assert excinfo.value.__cause__ is error


def test_malformed_second_call_is_reported() -> None:
    stash: list[Resumer] = []

    def setup(done: Resumer) -> None:
        stash.append(done)
        done(Success(42))

    async def runner() -> int:
        return await bridge_result(setup, label="twice")

    with capture_misuse() as reports:
        assert asyncio.run(runner()) == 42
        stash[0](7)
        stash[0]()
        stash[0].resume_with("not a result")  # type: ignore[arg-type]
        stash[0].resume_raising("not an exception")  # type: ignore[arg-type]

    assert [(r.label, r.kind) for r in reports] == [("twice", "double_resume")] * 4


def test_wrong_arity_after_discard_is_reported() -> None:
    stash: list[Resumer] = []

    def setup(done: Resumer) -> None:
        stash.append(done)
        raise OSError("registration refused")

    async def runner() -> None:
        await bridge(setup, arity=2, label="discarded")

    with capture_misuse() as reports:
        with pytest.raises(OSError):
            asyncio.run(runner())
        stash[0]("only one")

    assert [r.kind for r in reports] == ["resume_after_discard"]


def test_resumer_base_is_abstract() -> None:
    with pytest.raises(TypeError):
        Resumer(None, None)  # type: ignore[abstract, arg-type]
