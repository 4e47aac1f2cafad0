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
"""Finite state machine for print job lifecycle control."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from .job import PrinterJob
from .models import JobState


class JobStateMachine:
    """Validates job state transitions and builds the next snapshot."""

    _transitions = {
        (JobState.CREATED, JobState.PENDING),
        (JobState.CREATED, JobState.CANCELED),
        (JobState.PENDING, JobState.HELD),
        (JobState.PENDING, JobState.PROCESSING),
        (JobState.PENDING, JobState.CANCELED),
        (JobState.HELD, JobState.PENDING),
        (JobState.HELD, JobState.CANCELED),
        (JobState.PROCESSING, JobState.COMPLETED),
        (JobState.PROCESSING, JobState.ABORTED),
    }

    def can_transition(self, state: JobState, target: JobState) -> bool:
        """Return True if moving from state to target is allowed."""
        return (state, target) in self._transitions

    def transition(
        self, job: PrinterJob, target: JobState, now: datetime
    ) -> PrinterJob | None:
        """Return the next snapshot, or None when the transition is rejected.

        The given snapshot is left untouched.
        """
        if not self.can_transition(job.state, target):
            return None
        processing_at = job.processing_at
        if target == JobState.PROCESSING and processing_at is None:
            processing_at = now
        completed_at = job.completed_at
        if target.is_terminal:
            completed_at = now
        return replace(
            job,
            state=target,
            processing_at=processing_at,
            completed_at=completed_at,
        )
