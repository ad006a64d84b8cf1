"""
Batch Scheduler

The main loop. Each batch runs a random number of swap cycles, then the bot
sleeps for a long pause and starts over.

A cycle with no candidates (or whose balance read failed) is idle: the bot
waits and retries the same cycle number, so idle time never uses up the
batch's cycle budget.
"""

import time
import random
import asyncio
from datetime import datetime
from typing import Optional

from rich.table import Table
from rich import box

from .config import BotConfig
from .utils import BalanceReadError, console, format_duration, logger


class BatchScheduler:
    """Runs batches of randomly chosen swaps."""

    def __init__(self, config: BotConfig, generator, executor,
                 rng: Optional[random.Random] = None, sleep=asyncio.sleep,
                 clock=time.time):
        self.config = config
        self.generator = generator
        self.executor = executor
        self.rng = rng or random.Random()
        self._sleep = sleep
        self._clock = clock

        # Stats
        self.batch_count = 0
        self.cycles_completed = 0
        self.idle_cycles = 0

    def draw_cycle_count(self) -> int:
        """Cycle budget for a new batch, uniform over [min_cycles, max_cycles]."""
        return self.rng.randint(self.config.min_cycles, self.config.max_cycles)

    async def run_cycle(self, index: int, total: int) -> Optional[bool]:
        """
        Attempt one swap cycle.

        Returns:
            None if the cycle was idle (nothing executed), otherwise the
            executor's success flag.
        """
        logger.info(f"--- Cycle {index} of {total} ---")

        try:
            candidates = self.generator.get_possible_swaps()
        except BalanceReadError as e:
            logger.error(f"  > {e}. Waiting before re-checking.")
            candidates = None

        if not candidates:
            if candidates is not None:
                logger.info("  > No possible swaps with current balances. Waiting before re-checking.")
            self.idle_cycles += 1
            await self._sleep(self.config.idle_wait_seconds)
            return None

        swap = self.rng.choice(candidates)
        success = await self.executor.execute_swap(swap)

        self.cycles_completed += 1
        logger.info(f"--- End of Cycle {index} ({'success' if success else 'failed'}) ---")
        await self._sleep(self.config.cycle_delay_seconds)
        return success

    async def run_batch(self) -> int:
        """Run one full batch; returns the number of cycles it executed."""
        self.batch_count += 1
        cycles = self.draw_cycle_count()
        logger.info(f"--- Starting New Batch #{self.batch_count}: Targeting {cycles} Swap Cycles ---")

        index = 1
        while index <= cycles:
            result = await self.run_cycle(index, cycles)
            if result is None:
                continue
            index += 1

        logger.info("All cycles for this batch are complete.")
        return cycles

    async def pause(self) -> datetime:
        """Long pause between batches; returns when the next batch is due."""
        seconds = self.config.batch_pause_seconds
        next_start = datetime.fromtimestamp(self._clock() + seconds)
        logger.info(f"Now starting {format_duration(int(seconds))} pause...")
        logger.info(f"Next batch will start around: {next_start.strftime('%Y-%m-%d %H:%M:%S')}")
        await self._sleep(seconds)
        return next_start

    async def run_forever(self, max_batches: Optional[int] = None):
        """
        Run batches indefinitely, or max_batches of them.

        The pause after the final bounded batch is skipped.
        """
        while max_batches is None or self.batch_count < max_batches:
            await self.run_batch()
            self.show_stats()
            if max_batches is not None and self.batch_count >= max_batches:
                break
            await self.pause()

    def show_stats(self):
        """Display current stats"""
        stats = self.executor.get_stats()

        table = Table(title="Bot Statistics", box=box.ROUNDED)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Batches", str(self.batch_count))
        table.add_row("Cycles Completed", str(self.cycles_completed))
        table.add_row("Idle Checks", str(self.idle_cycles))
        table.add_row("Successful Swaps", str(stats["successful_swaps"]))
        table.add_row("Failed Swaps", str(stats["failed_swaps"]))
        table.add_row("Success Rate", f"{stats['success_rate']:.1f}%")
        table.add_row("Dry Run", "Yes" if self.config.dry_run else "No")

        console.print(table)
