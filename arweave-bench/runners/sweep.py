"""
Sequential sweep of latency tests over several payload sizes.

Tests run one at a time with a fixed pause in between so that consecutive
uploads never overlap on the network.
"""

import asyncio
import logging
import os
from typing import Dict, List

from configuration import (
    SWEEP_SIZES,
    SWEEP_DELAY_SECONDS,
    DEFAULT_GATEWAY,
    DEFAULT_OUTPUT_DIR,
    REPORT_PREFIX,
)
from common.errors import SizeFormatError
from common.sizes import parse_size
from runners.latency import LatencyTest

logger = logging.getLogger(__name__)

BANNER = "=" * 48


class SweepRunner:
    """Runs LatencyTest for each size in turn and records the exit codes."""

    def __init__(
        self,
        wallet_path: str,
        sizes: List[str] = None,
        gateway: str = DEFAULT_GATEWAY,
        output_dir: str = DEFAULT_OUTPUT_DIR,
        prefix: str = REPORT_PREFIX,
        delay_seconds: float = SWEEP_DELAY_SECONDS,
        test_factory=LatencyTest,
        sleep=asyncio.sleep,
    ):
        self.wallet_path = wallet_path
        self.sizes = list(sizes) if sizes else list(SWEEP_SIZES)
        self.gateway = gateway
        self.output_dir = output_dir
        self.prefix = prefix
        self.delay_seconds = delay_seconds
        self.test_factory = test_factory
        self._sleep = sleep
        self.outcomes: Dict[str, int] = {}

    async def _run_one(self, size_token: str) -> int:
        try:
            size_bytes = parse_size(size_token)
        except SizeFormatError as e:
            logger.error(f"{size_token}: {e}")
            return 1

        test = self.test_factory(
            self.wallet_path,
            size_bytes,
            size_token,
            gateway=self.gateway,
            output_dir=self.output_dir,
            prefix=self.prefix,
        )
        return await test.run()

    async def run(self) -> int:
        """Run every configured size; returns 1 only if the wallet file is missing."""
        if not os.path.isfile(self.wallet_path):
            logger.error(f"Wallet file not found: {self.wallet_path}")
            return 1

        logger.info(f"Starting Arweave latency tests with {len(self.sizes)} different file sizes")

        for index, size_token in enumerate(self.sizes):
            logger.info(BANNER)
            logger.info(f"Testing with file size: {size_token}")
            logger.info(BANNER)

            code = await self._run_one(size_token)
            self.outcomes[size_token] = code
            if code == 0:
                logger.info(f"✓ Test completed for {size_token}")
            else:
                logger.error(f"✗ Test failed for {size_token}")

            if index < len(self.sizes) - 1:
                logger.info(f"Waiting {self.delay_seconds:g} seconds before next test...")
                await self._sleep(self.delay_seconds)

        logger.info(BANNER)
        logger.info("All tests completed!")
        logger.info(f"Results saved to {self.prefix}-test-*.json files in {self.output_dir}")
        return 0
