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
"""One dispatch cycle: claim a pending job, save its documents, report back."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import BinaryIO, Protocol
from urllib.parse import urlparse

from print_server.app.application.printer_service import PrinterService
from print_server.app.domain.job import PrinterJob
from print_server.app.domain.operations import (
    JobRequest,
    PrintJob,
    PrintUri,
    SendDocument,
    SendUri,
)

logger = logging.getLogger(__name__)


class DocumentSink(Protocol):
    """Persists document bytes; owns naming and storage."""

    def save(
        self,
        job_id: int,
        request_index: int,
        document: BinaryIO,
        suggested_name: str | None,
        suggested_format: str | None,
        fallback_extension: str | None = None,
    ) -> None:
        """Copy one document stream to storage."""


class DocumentFetcher(Protocol):
    """Resolves a document URI to a readable stream."""

    def fetch(self, uri: str) -> BinaryIO | None:
        """Return the document, or None when the server refused it."""


class JobDispatcher:
    """Runs dispatch cycles against the printer service.

    A claimed job always leaves processing: any error while saving its
    documents reports the job aborted.
    """

    def __init__(
        self,
        service: PrinterService,
        sink: DocumentSink,
        fetcher: DocumentFetcher,
    ):
        self.service = service
        self.sink = sink
        self.fetcher = fetcher

    def run_cycle(self) -> PrinterJob | None:
        """Process at most one job and return the claimed snapshot."""
        job = self.service.claim_next_pending_job()
        if job is None:
            return None
        try:
            for index, request in enumerate(job.requests):
                self._save(job.id, index, request)
        except Exception as exc:
            self.service.report_aborted(job.id, exc)
        else:
            self.service.report_completed(job.id)
        finally:
            job.release_documents()
        return job

    def _save(self, job_id: int, index: int, request: JobRequest) -> None:
        if isinstance(request, (PrintJob, SendDocument)):
            if request.document is None:
                return
            with request.document as document:
                document.seek(0)
                self.sink.save(
                    job_id,
                    index,
                    document,
                    request.attributes.document_name,
                    request.attributes.document_format,
                )
        elif isinstance(request, (PrintUri, SendUri)):
            if not request.document_uri:
                return
            fetched = self.fetcher.fetch(request.document_uri)
            if fetched is None:
                logger.warning(
                    "Document %s of job %s could not be fetched from %s",
                    index,
                    job_id,
                    request.document_uri,
                )
                return
            path = PurePosixPath(urlparse(request.document_uri).path)
            with fetched as document:
                self.sink.save(
                    job_id,
                    index,
                    document,
                    request.attributes.document_name or path.stem or None,
                    request.attributes.document_format,
                    fallback_extension=path.suffix or None,
                )
