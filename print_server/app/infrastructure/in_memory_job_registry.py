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
"""In-memory registry of print job snapshots."""

from __future__ import annotations

from datetime import datetime
from threading import Lock

from print_server.app.domain.job import PrinterJob


class InMemoryJobRegistry:
    """Thread-safe map of job id to the current job snapshot.

    The lock only guards single dictionary operations. It is never held while
    a caller computes the next snapshot or performs I/O, so writers follow
    read, compute, compare-and-replace and report a conflict on mismatch.
    """

    def __init__(self, seed: int) -> None:
        self._lock = Lock()
        self._jobs: dict[int, PrinterJob] = {}
        self._last_id = seed

    @classmethod
    def seeded_from(cls, now: datetime) -> InMemoryJobRegistry:
        """Seed ids from the day of month to reduce collisions across restarts."""
        return cls(seed=now.day * 1000)

    def next_id(self) -> int:
        with self._lock:
            self._last_id += 1
            return self._last_id

    def get(self, job_id: int) -> PrinterJob | None:
        with self._lock:
            return self._jobs.get(job_id)

    def insert(self, job: PrinterJob) -> bool:
        """Add a job unless its id is already taken."""
        with self._lock:
            if job.id in self._jobs:
                return False
            self._jobs[job.id] = job
            return True

    def compare_and_replace(
        self, job_id: int, expected: PrinterJob, new: PrinterJob
    ) -> bool:
        """Store new only if the current entry is still the expected snapshot."""
        with self._lock:
            if self._jobs.get(job_id) is not expected:
                return False
            self._jobs[job_id] = new
            return True

    def remove(
        self, job_id: int, expected: PrinterJob | None = None
    ) -> PrinterJob | None:
        """Remove and return the entry; with expected, only if still current."""
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return None
            if expected is not None and current is not expected:
                return None
            del self._jobs[job_id]
            return current

    def values(self) -> list[PrinterJob]:
        """Point-in-time copy of all current snapshots."""
        with self._lock:
            return list(self._jobs.values())
