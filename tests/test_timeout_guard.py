from __future__ import annotations

import asyncio

import pytest

from career_match_ai.errors import StageTimeout, UpstreamError
from career_match_ai.utils.timeout_guard import guard


def test_guard_returns_result_of_fast_operation() -> None:
    async def _op() -> str:
        await asyncio.sleep(0)
        return "done"

    assert asyncio.run(guard(_op(), 1.0, "slow")) == "done"


def test_guard_passes_through_operation_error() -> None:
    async def _op() -> None:
        raise UpstreamError("Exa contents", 502, "bad gateway")

    with pytest.raises(UpstreamError) as exc:
        asyncio.run(guard(_op(), 1.0, "slow"))
    assert exc.value.status == 502


def test_guard_cancels_operation_and_raises_stage_timeout() -> None:
    state = {"cancelled": False}

    async def _op() -> None:
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            state["cancelled"] = True
            raise

    with pytest.raises(StageTimeout) as exc:
        asyncio.run(guard(_op(), 0.01, "Inference stage timed out after 0.01s"))

    assert str(exc.value) == "Inference stage timed out after 0.01s"
    assert exc.value.status_code == 500
    assert state["cancelled"] is True
