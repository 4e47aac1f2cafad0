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
"""Already-decoded protocol operations accepted by the job service.

Each operation kind is its own frozen dataclass and ``Operation`` is the closed
union of them. The transport layer builds these; the job service never sees
wire bytes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Union
from urllib.parse import urlparse

from print_server.app.domain.models import (
    JobTemplateAttributes,
    OperationAttributes,
    WhichJobs,
)


@dataclass(frozen=True)
class JobOperation:
    """Operation addressed to an existing job by id or job URI."""

    job_id: Optional[int] = None
    job_uri: Optional[str] = None
    requesting_user_name: Optional[str] = None

    def resolve_job_id(self) -> int | None:
        """Job id from the last job URI path segment, else the explicit id."""
        if self.job_uri:
            segment = urlparse(self.job_uri).path.rstrip("/").rsplit("/", 1)[-1]
            if segment.isdigit():
                return int(segment)
        return self.job_id


@dataclass(frozen=True)
class CreateJob:
    """Create an empty job that will receive documents later."""

    attributes: OperationAttributes = field(default_factory=OperationAttributes)
    template: JobTemplateAttributes = field(default_factory=JobTemplateAttributes)


@dataclass(frozen=True)
class PrintJob:
    """Create a job with a single document in the request body."""

    attributes: OperationAttributes = field(default_factory=OperationAttributes)
    template: JobTemplateAttributes = field(default_factory=JobTemplateAttributes)
    document: Optional[BinaryIO] = field(default=None, compare=False)


@dataclass(frozen=True)
class PrintUri:
    """Create a job whose single document is fetched from a URI."""

    document_uri: str = ""
    attributes: OperationAttributes = field(default_factory=OperationAttributes)
    template: JobTemplateAttributes = field(default_factory=JobTemplateAttributes)


@dataclass(frozen=True)
class ValidateJob:
    attributes: OperationAttributes = field(default_factory=OperationAttributes)
    template: JobTemplateAttributes = field(default_factory=JobTemplateAttributes)


@dataclass(frozen=True)
class SendDocument(JobOperation):
    """Append a document to a created job."""

    attributes: OperationAttributes = field(default_factory=OperationAttributes)
    last_document: bool = False
    document: Optional[BinaryIO] = field(default=None, compare=False)


@dataclass(frozen=True)
class SendUri(JobOperation):
    """Append a document reference to a created job."""

    document_uri: str = ""
    attributes: OperationAttributes = field(default_factory=OperationAttributes)
    last_document: bool = False


@dataclass(frozen=True)
class CancelJob(JobOperation):
    pass


@dataclass(frozen=True)
class HoldJob(JobOperation):
    pass


@dataclass(frozen=True)
class ReleaseJob(JobOperation):
    pass


@dataclass(frozen=True)
class RestartJob(JobOperation):
    pass


@dataclass(frozen=True)
class GetJobAttributes(JobOperation):
    requested_attributes: tuple[str, ...] = ()


@dataclass(frozen=True)
class GetJobs:
    """List jobs, newest and most active first."""

    which_jobs: WhichJobs = WhichJobs.NOT_COMPLETED
    my_jobs: bool = False
    requesting_user_name: Optional[str] = None
    limit: Optional[int] = None
    requested_attributes: tuple[str, ...] = ()


@dataclass(frozen=True)
class GetPrinterAttributes:
    requested_attributes: tuple[str, ...] = ()


@dataclass(frozen=True)
class PausePrinter:
    pass


@dataclass(frozen=True)
class ResumePrinter:
    pass


@dataclass(frozen=True)
class PurgeJobs:
    pass


JobRequest = Union[CreateJob, PrintJob, PrintUri, SendDocument, SendUri]

Operation = Union[
    CreateJob,
    PrintJob,
    PrintUri,
    ValidateJob,
    SendDocument,
    SendUri,
    CancelJob,
    HoldJob,
    ReleaseJob,
    RestartJob,
    GetJobAttributes,
    GetJobs,
    GetPrinterAttributes,
    PausePrinter,
    ResumePrinter,
    PurgeJobs,
]
