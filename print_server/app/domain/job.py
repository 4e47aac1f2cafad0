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
"""Immutable print job snapshot."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import BinaryIO, Iterator, Optional

from print_server.app.domain.models import JobState
from print_server.app.domain.operations import (
    CreateJob,
    JobRequest,
    PrintJob,
    PrintUri,
    SendDocument,
)


@dataclass(frozen=True, eq=False)
class PrinterJob:
    """One version of a print job.

    Snapshots compare by identity: the registry replaces an entry only when
    the stored object is the very snapshot the writer read.
    """

    id: int
    owner: Optional[str]
    created_at: datetime
    state: JobState = JobState.CREATED
    requests: tuple[JobRequest, ...] = ()
    processing_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def with_request(self, request: JobRequest) -> PrinterJob:
        """New snapshot with one more request appended."""
        return replace(self, requests=self.requests + (request,))

    @property
    def name(self) -> str | None:
        for request in self.requests:
            if isinstance(request, (CreateJob, PrintJob, PrintUri)):
                if request.attributes.job_name:
                    return request.attributes.job_name
        return None

    def documents(self) -> Iterator[BinaryIO]:
        """Document streams still attached to the job's requests."""
        for request in self.requests:
            if isinstance(request, (PrintJob, SendDocument)) and request.document:
                yield request.document

    def release_documents(self) -> None:
        """Close every attached document stream; closing twice is harmless."""
        for document in self.documents():
            document.close()
