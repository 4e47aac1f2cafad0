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
"""Unit tests for the background dispatch scheduler."""

import threading
import time

from print_server.app.infrastructure.dispatch_scheduler import DispatchScheduler


def test_scheduler_runs_cycles_until_stopped():
    calls: list[float] = []
    scheduler = DispatchScheduler(
        cycle=lambda: calls.append(time.monotonic()), interval_seconds=0.01
    )

    assert scheduler.start() is True
    assert scheduler.start() is False
    time.sleep(0.2)
    scheduler.stop(timeout=1)

    assert scheduler.is_running() is False
    assert len(calls) >= 2
    count = len(calls)
    time.sleep(0.05)
    assert len(calls) == count


def test_scheduler_cycles_never_overlap():
    active = threading.Lock()
    overlaps: list[bool] = []

    def cycle():
        if not active.acquire(blocking=False):
            overlaps.append(True)
            return
        try:
            time.sleep(0.03)
        finally:
            active.release()

    scheduler = DispatchScheduler(cycle=cycle, interval_seconds=0.001)
    scheduler.start()
    time.sleep(0.2)
    scheduler.stop(timeout=1)

    assert overlaps == []


def test_scheduler_survives_failing_cycle():
    calls: list[int] = []

    def cycle():
        calls.append(1)
        raise RuntimeError("boom")

    scheduler = DispatchScheduler(cycle=cycle, interval_seconds=0.01)
    scheduler.start()
    time.sleep(0.1)
    scheduler.stop(timeout=1)

    assert len(calls) >= 2


def test_scheduler_can_restart_after_stop():
    scheduler = DispatchScheduler(cycle=lambda: None, interval_seconds=0.01)

    scheduler.start()
    scheduler.stop(timeout=1)

    assert scheduler.start() is True
    scheduler.stop(timeout=1)


def test_run_once_returns_cycle_result():
    scheduler = DispatchScheduler(cycle=lambda: "done", interval_seconds=10)

    assert scheduler.run_once() == "done"


def test_manual_run_waits_for_scheduled_cycle():
    entered = threading.Event()
    release = threading.Event()
    counter = threading.Lock()
    active = [0]
    peak = [0]

    def cycle():
        with counter:
            active[0] += 1
            peak[0] = max(peak[0], active[0])
        entered.set()
        release.wait(1)
        with counter:
            active[0] -= 1

    scheduler = DispatchScheduler(cycle=cycle, interval_seconds=0.01)
    scheduler.start()
    assert entered.wait(1)

    manual = threading.Thread(target=scheduler.run_once)
    manual.start()
    manual.join(0.1)
    assert manual.is_alive()

    release.set()
    manual.join(1)
    scheduler.stop(timeout=1)

    assert manual.is_alive() is False
    assert peak[0] == 1
