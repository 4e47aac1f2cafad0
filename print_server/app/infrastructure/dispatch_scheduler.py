# Copyright 2026 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.
"""Background dispatch scheduler."""

from __future__ import annotations

import logging
from threading import Event, Lock, Thread
from typing import Any, Callable

logger = logging.getLogger(__name__)


class DispatchScheduler:
    """Runs one dispatch cycle per interval on a single daemon thread.

    Cycles never overlap. Scheduled and manual runs share one cycle lock, and
    the next scheduled cycle starts only after the previous one returned and
    the interval elapsed.
    """

    def __init__(self, cycle: Callable[[], Any], interval_seconds: float = 10.0):
        self.cycle = cycle
        self.interval_seconds = interval_seconds
        self._lock = Lock()
        self._cycle_lock = Lock()
        self._stop = Event()
        self._thread: Thread | None = None

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive())

    def start(self) -> bool:
        """Start the scheduler thread if not already running."""
        with self._lock:
            if self._thread and self._thread.is_alive():
                return False
            self._stop.clear()
            self._thread = Thread(target=self._loop, daemon=True)
            self._thread.start()
            return True

    def stop(self, timeout: float | None = None) -> None:
        with self._lock:
            thread = self._thread
            self._stop.set()
        if thread is not None:
            thread.join(timeout)

    def run_once(self) -> Any:
        """Run one cycle now, waiting for any cycle already in progress."""
        with self._cycle_lock:
            return self.cycle()

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception:
                logger.exception("Dispatch cycle failed")
