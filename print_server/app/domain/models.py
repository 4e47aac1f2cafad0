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
"""Domain models for the print job server."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class JobState(str, Enum):
    """Lifecycle states for a print job."""

    CREATED = "created"
    PENDING = "pending"
    HELD = "held"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELED = "canceled"
    ABORTED = "aborted"

    @property
    def rank(self) -> int:
        """Protocol job-state enum value, used for ordering job listings."""
        return _STATE_RANKS[self]

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES

    @property
    def keyword(self) -> str:
        """Protocol keyword reported to clients."""
        if self in (JobState.CREATED, JobState.HELD):
            return "pending-held"
        return self.value

    @property
    def reason(self) -> str:
        """Single job-state-reasons keyword for the state."""
        return _STATE_REASONS[self]


_STATE_RANKS = {
    JobState.CREATED: 4,
    JobState.PENDING: 3,
    JobState.HELD: 4,
    JobState.PROCESSING: 5,
    JobState.CANCELED: 7,
    JobState.ABORTED: 8,
    JobState.COMPLETED: 9,
}

_STATE_REASONS = {
    JobState.CREATED: "job-incoming",
    JobState.PENDING: "none",
    JobState.HELD: "job-hold-until-specified",
    JobState.PROCESSING: "job-printing",
    JobState.CANCELED: "job-canceled-by-user",
    JobState.ABORTED: "aborted-by-system",
    JobState.COMPLETED: "job-completed-successfully",
}

TERMINAL_STATES = frozenset({JobState.COMPLETED, JobState.CANCELED, JobState.ABORTED})


class WhichJobs(str, Enum):
    """Job list filter."""

    COMPLETED = "completed"
    NOT_COMPLETED = "not-completed"
    ALL = "all"


class StatusCode(int, Enum):
    """Protocol status codes returned by the job service."""

    SUCCESSFUL_OK = 0x0000
    CLIENT_ERROR_BAD_REQUEST = 0x0400
    CLIENT_ERROR_NOT_POSSIBLE = 0x0404
    CLIENT_ERROR_NOT_FOUND = 0x0406


class JobOutcome(str, Enum):
    """Why an operation succeeded or failed.

    Illegal transitions and lost races share CLIENT_ERROR_NOT_POSSIBLE on the
    wire; the outcome keeps them apart for logs and the JSON API.
    """

    OK = "ok"
    BAD_REQUEST = "bad-request"
    NOT_FOUND = "not-found"
    ILLEGAL_TRANSITION = "illegal-transition"
    CONFLICT = "conflict"


class PrinterState(str, Enum):
    """Printer state reported by get-printer-attributes."""

    IDLE = "idle"
    PROCESSING = "processing"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Resolution:
    """Printer resolution."""

    cross_feed: int
    feed: int
    units: str = "dpi"

    def __str__(self) -> str:
        return f"{self.cross_feed}x{self.feed}{self.units}"


@dataclass(frozen=True)
class JobTemplateAttributes:
    """Job template attributes; unset values are filled from printer options."""

    media: Optional[str] = None
    printer_resolution: Optional[Resolution] = None
    sides: Optional[str] = None
    print_quality: Optional[str] = None
    job_priority: Optional[int] = None
    copies: Optional[int] = None
    orientation_requested: Optional[str] = None
    job_hold_until: Optional[str] = None
    print_scaling: Optional[str] = None
    finishings: Optional[str] = None
    print_color_mode: Optional[str] = None


@dataclass(frozen=True)
class OperationAttributes:
    """Operation attributes shared by job creation and document requests."""

    requesting_user_name: Optional[str] = None
    job_name: Optional[str] = None
    document_name: Optional[str] = None
    document_format: Optional[str] = None
    compression: Optional[str] = None
    ipp_attribute_fidelity: Optional[bool] = None
