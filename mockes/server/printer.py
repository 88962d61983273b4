"""
Periodic metrics printer.

Writes the handler's counter totals to stdout as one JSON line every
interval, skipping intervals where nothing has been counted yet.
"""
from __future__ import annotations

import asyncio
import sys
from typing import Optional, TextIO

from mockes.metrics import MetricsRegistry


class MetricsPrinter:
    """Background task started and stopped by the app lifespan."""

    def __init__(
        self,
        metrics: MetricsRegistry,
        interval: float,
        stream: Optional[TextIO] = None,
    ) -> None:
        self._metrics = metrics
        self._interval = interval
        self._stream = stream or sys.stdout
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None

    async def start(self) -> None:
        """Start printing. Does nothing when the interval is zero."""
        if self._interval > 0 and self._task is None:
            self._task = asyncio.create_task(self._print_loop())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _print_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self._metrics.print_snapshot(self._stream)
