"""
Availability poller for the gateway read path.

Data is written through a node but read through a caching gateway, so a fresh
transaction becomes visible only after some propagation delay. The poller
probes the gateway at a fixed interval until it answers with a success status
or the maximum wait is used up.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Tuple

import aiohttp

from configuration import POLL_INTERVAL_MS, MAX_WAIT_MS, MILLISECONDS_PER_SECOND
from common.timer import Timer
from persistence.record import PollResult

logger = logging.getLogger(__name__)

Probe = Callable[[str], Awaitable[Tuple[bool, str]]]

# Errors that mean "not reachable yet" rather than "abort the run"
PROBE_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


class AvailabilityPoller:
    """Fixed-interval poller with a bounded total wait."""

    def __init__(
        self,
        probe: Probe,
        poll_interval_ms: int = POLL_INTERVAL_MS,
        max_wait_ms: int = MAX_WAIT_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be positive")
        self.probe = probe
        self.poll_interval_ms = poll_interval_ms
        self.max_wait_ms = max_wait_ms
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        """Upper bound on probes: one at wait 0 and one after every interval up to max wait."""
        return self.max_wait_ms // self.poll_interval_ms + 1

    async def _probe_once(self, url: str) -> Tuple[bool, str]:
        try:
            return await self.probe(url)
        except PROBE_ERRORS as e:
            return False, str(e) or "fetch error"

    async def wait_until_available(self, url: str) -> PollResult:
        """Probe url until it succeeds or the maximum wait elapses.

        Returns:
            PollResult with the availability flag, the last status text (or
            transport error message), real elapsed ms and number of probes
        """
        available = False
        status_text = ""
        attempts = 0
        waited_ms = 0

        with Timer("availability") as timer:
            for _ in range(self.max_attempts):
                attempts += 1
                ok, status_text = await self._probe_once(url)
                logger.debug(f"Probe #{attempts} {url}: {status_text}")
                if ok:
                    available = True
                    break

                await self._sleep(self.poll_interval_ms / MILLISECONDS_PER_SECOND)
                waited_ms += self.poll_interval_ms

        result = PollResult(
            available=available,
            last_status=status_text,
            elapsed_ms=timer.elapsed_ms,
            attempts=attempts,
            waited_ms=waited_ms,
        )
        if available:
            logger.info(f"Gateway served {url} after {attempts} probe(s)")
        else:
            logger.warning(
                f"Gateway did not serve {url} within {self.max_wait_ms:,} ms "
                f"(last status: {status_text})"
            )
        return result
