# tests/unit/test_cancellation.py

from __future__ import annotations
import asyncio
import sys
from pathlib import Path
import pytest

# Make "src" importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from corrin.core.cancellation import run_cancellable
from corrin.core.errors import ProviderCancelledError


async def _value(v, delay=0.0):
    await asyncio.sleep(delay)
    return v


@pytest.mark.asyncio
async def test_without_signal_is_plain_await():
    assert await run_cancellable(_value(1)) == 1


@pytest.mark.asyncio
async def test_completes_before_signal():
    assert await run_cancellable(_value(2), asyncio.Event()) == 2


@pytest.mark.asyncio
async def test_signal_already_set_never_starts_call():
    started = []

    async def call():
        started.append(True)
        return 3

    ev = asyncio.Event()
    ev.set()
    with pytest.raises(ProviderCancelledError):
        await run_cancellable(call(), ev)
    assert started == []


@pytest.mark.asyncio
async def test_signal_aborts_in_flight_call():
    cleaned_up = []

    async def call():
        try:
            await asyncio.sleep(5)
        finally:
            cleaned_up.append(True)

    ev = asyncio.Event()
    asyncio.get_running_loop().call_later(0.01, ev.set)
    with pytest.raises(ProviderCancelledError):
        await run_cancellable(call(), ev)
    assert cleaned_up == [True]


@pytest.mark.asyncio
async def test_errors_from_call_propagate():
    async def call():
        raise ValueError("bad")

    with pytest.raises(ValueError):
        await run_cancellable(call(), asyncio.Event())
