"""Typed probe outcomes.

Every probe call made while building a snapshot goes through ``run_probe``,
which turns raised exceptions and timeouts into a ``ProbeFailed`` value. The
builder then decides per field which default stands in for a failure, so no
probe exception can escape a scan.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProbeOk(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class ProbeFailed:
    probe: str
    error: str
    timed_out: bool = False


ProbeResult = ProbeOk[T] | ProbeFailed


async def run_probe(label: str, probe: Awaitable[T], *, timeout_s: float) -> ProbeResult[T]:
    try:
        value = await asyncio.wait_for(probe, timeout=timeout_s)
    except TimeoutError:
        logger.warning("Probe %s timed out after %.1fs", label, timeout_s)
        return ProbeFailed(probe=label, error=f"timed out after {timeout_s:g}s", timed_out=True)
    except Exception as exc:
        logger.debug("Probe %s failed: %s", label, exc)
        return ProbeFailed(probe=label, error=str(exc) or exc.__class__.__name__)
    return ProbeOk(value)


def value_or(result: ProbeResult[T], default: T) -> T:
    if isinstance(result, ProbeOk):
        return result.value
    return default
