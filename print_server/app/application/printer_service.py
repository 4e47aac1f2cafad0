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
"""Printer use-cases: job operations and the dispatcher-facing claim path."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional, Protocol, TypeVar

from print_server.app.application.printer_options import PrinterOptions
from print_server.app.domain.job import PrinterJob
from print_server.app.domain.models import (
    JobOutcome,
    JobState,
    JobTemplateAttributes,
    OperationAttributes,
    PrinterState,
    StatusCode,
    TERMINAL_STATES,
    WhichJobs,
)
from print_server.app.domain.operations import (
    CancelJob,
    CreateJob,
    GetJobAttributes,
    GetJobs,
    GetPrinterAttributes,
    HoldJob,
    JobOperation,
    Operation,
    PausePrinter,
    PrintJob,
    PrintUri,
    PurgeJobs,
    ReleaseJob,
    RestartJob,
    ResumePrinter,
    SendDocument,
    SendUri,
    ValidateJob,
)
from print_server.app.domain.state_machine import JobStateMachine

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUPPORTED_OPERATIONS = (
    "Print-Job",
    "Print-URI",
    "Validate-Job",
    "Create-Job",
    "Send-Document",
    "Send-URI",
    "Cancel-Job",
    "Get-Job-Attributes",
    "Get-Jobs",
    "Get-Printer-Attributes",
    "Hold-Job",
    "Release-Job",
    "Restart-Job",
    "Pause-Printer",
    "Resume-Printer",
    "Purge-Jobs",
)

_OUTCOME_STATUS = {
    JobOutcome.OK: StatusCode.SUCCESSFUL_OK,
    JobOutcome.BAD_REQUEST: StatusCode.CLIENT_ERROR_BAD_REQUEST,
    JobOutcome.NOT_FOUND: StatusCode.CLIENT_ERROR_NOT_FOUND,
    JobOutcome.ILLEGAL_TRANSITION: StatusCode.CLIENT_ERROR_NOT_POSSIBLE,
    JobOutcome.CONFLICT: StatusCode.CLIENT_ERROR_NOT_POSSIBLE,
}


class Clock(Protocol):
    """Time source, injected for deterministic timestamps."""

    def now(self) -> datetime:
        """Current UTC time."""


class JobRegistry(Protocol):
    """Registry contract: atomic insert, compare-and-replace and remove."""

    def next_id(self) -> int:
        """Allocate the next job id."""

    def get(self, job_id: int) -> PrinterJob | None:
        """Fetch the current snapshot."""

    def insert(self, job: PrinterJob) -> bool:
        """Add a job if its id is free."""

    def compare_and_replace(
        self, job_id: int, expected: PrinterJob, new: PrinterJob
    ) -> bool:
        """Replace the entry if it is still the expected snapshot."""

    def remove(
        self, job_id: int, expected: PrinterJob | None = None
    ) -> PrinterJob | None:
        """Remove and return the entry."""

    def values(self) -> list[PrinterJob]:
        """Point-in-time list of all snapshots."""


@dataclass(frozen=True)
class JobDescription:
    """Job description attributes; None means not requested."""

    job_id: int
    job_uri: str
    job_printer_uri: Optional[str] = None
    job_name: Optional[str] = None
    job_state: Optional[JobState] = None
    job_state_reasons: Optional[tuple[str, ...]] = None
    job_originating_user_name: Optional[str] = None
    date_time_at_creation: Optional[datetime] = None
    date_time_at_processing: Optional[datetime] = None
    date_time_at_completed: Optional[datetime] = None
    time_at_creation: Optional[int] = None
    time_at_processing: Optional[int] = None
    time_at_completed: Optional[int] = None
    job_printer_up_time: Optional[int] = None


@dataclass(frozen=True)
class PrinterDescription:
    """Printer description attributes; None means not requested."""

    printer_uri: str
    printer_name: Optional[str] = None
    printer_state: Optional[PrinterState] = None
    printer_is_accepting_jobs: Optional[bool] = None
    queued_job_count: Optional[int] = None
    printer_up_time: Optional[int] = None
    printer_current_time: Optional[datetime] = None
    operations_supported: Optional[tuple[str, ...]] = None
    document_format_default: Optional[str] = None
    media_default: Optional[str] = None
    media_supported: Optional[tuple[str, ...]] = None
    sides_default: Optional[str] = None
    sides_supported: Optional[tuple[str, ...]] = None
    printer_resolution_default: Optional[str] = None
    print_quality_default: Optional[str] = None
    print_quality_supported: Optional[tuple[str, ...]] = None
    copies_default: Optional[int] = None
    job_priority_default: Optional[int] = None
    orientation_requested_default: Optional[str] = None
    job_hold_until_default: Optional[str] = None
    print_color_mode_default: Optional[str] = None


@dataclass(frozen=True)
class OperationResponse:
    """Protocol-level result of one operation."""

    status_code: StatusCode
    outcome: JobOutcome
    job_id: Optional[int] = None
    job_uri: Optional[str] = None
    job_state: Optional[JobState] = None
    job: Optional[JobDescription] = None
    jobs: tuple[JobDescription, ...] = ()
    printer: Optional[PrinterDescription] = None

    @property
    def ok(self) -> bool:
        return self.status_code == StatusCode.SUCCESSFUL_OK


def _default(value: Optional[T], fallback: T) -> T:
    return fallback if value is None else value


def _first(values: tuple[T, ...]) -> Optional[T]:
    return values[0] if values else None


class PrinterService:
    """Job service for a single virtual printer.

    Every write path reads a snapshot, asks the state machine for the next
    one and tries a compare-and-replace on the registry. A lost race is
    reported to the caller and never retried here.
    """

    def __init__(
        self,
        registry: JobRegistry,
        state_machine: JobStateMachine,
        options: PrinterOptions,
        clock: Clock,
        printer_uri: str = "ipp://localhost:631/ipp/print",
    ):
        self.registry = registry
        self.state_machine = state_machine
        self.options = options
        self.clock = clock
        self.printer_uri = printer_uri.rstrip("/")
        self.started_at = clock.now()
        self._paused = False
        self._handlers: dict[type, Callable[..., OperationResponse]] = {
            CreateJob: self.create_job,
            PrintJob: self.print_job,
            PrintUri: self.print_uri,
            ValidateJob: self.validate_job,
            SendDocument: self.send_document,
            SendUri: self.send_uri,
            CancelJob: self.cancel_job,
            HoldJob: self.hold_job,
            ReleaseJob: self.release_job,
            RestartJob: self.restart_job,
            GetJobAttributes: self.get_job_attributes,
            GetJobs: self.get_jobs,
            GetPrinterAttributes: self.get_printer_attributes,
            PausePrinter: self.pause_printer,
            ResumePrinter: self.resume_printer,
            PurgeJobs: self.purge_jobs,
        }

    @property
    def is_paused(self) -> bool:
        return self._paused

    def handle(self, operation: Operation) -> OperationResponse:
        """Route an operation to its handler."""
        handler = self._handlers.get(type(operation))
        if handler is None:
            raise NotImplementedError(
                f"Unsupported operation: {type(operation).__name__}"
            )
        return handler(operation)

    def job_uri(self, job_id: int) -> str:
        return f"{self.printer_uri}/{job_id}"

    # Job creation

    def create_job(self, operation: CreateJob) -> OperationResponse:
        """Create a job that waits for its documents."""
        return self._add_job(operation, submit=False)

    def print_job(self, operation: PrintJob) -> OperationResponse:
        """Create a job with its only document and queue it."""
        return self._add_job(operation, submit=True)

    def print_uri(self, operation: PrintUri) -> OperationResponse:
        """Create a job referencing its only document and queue it."""
        return self._add_job(operation, submit=True)

    def validate_job(self, operation: ValidateJob) -> OperationResponse:
        del operation
        logger.info("Job has been validated")
        return self._success()

    def _add_job(
        self, operation: CreateJob | PrintJob | PrintUri, submit: bool
    ) -> OperationResponse:
        now = self.clock.now()
        job_id = self.registry.next_id()
        request = replace(
            operation,
            attributes=self._fill_operation_attributes(
                operation.attributes,
                job_id=job_id,
                with_format=not isinstance(operation, CreateJob),
            ),
            template=self._fill_template_attributes(operation.template),
        )
        job = PrinterJob(
            id=job_id,
            owner=operation.attributes.requesting_user_name,
            created_at=now,
            requests=(request,),
        )
        if submit:
            submitted = self.state_machine.transition(job, JobState.PENDING, now)
            if submitted is None:
                logger.warning("Job %s could not be queued", job_id)
                self._discard(operation)
                return self._failure(JobOutcome.ILLEGAL_TRANSITION, job=job)
            job = submitted
        if not self.registry.insert(job):
            logger.warning("Job id %s is already in use", job_id)
            self._discard(operation)
            return self._failure(JobOutcome.CONFLICT, job=job)
        logger.info("Job %s has been added to queue", job_id)
        return self._success(job=job)

    # Documents

    def send_document(self, operation: SendDocument) -> OperationResponse:
        """Append a document to a job that is still receiving documents."""
        return self._append_document(operation)

    def send_uri(self, operation: SendUri) -> OperationResponse:
        """Append a document URI to a job that is still receiving documents."""
        return self._append_document(operation)

    def _append_document(
        self, operation: SendDocument | SendUri
    ) -> OperationResponse:
        job = self._lookup(operation)
        if isinstance(job, OperationResponse):
            self._discard(operation)
            return job
        if job.state != JobState.CREATED:
            logger.warning(
                "Job %s is %s and no longer accepts documents", job.id, job.state.value
            )
            self._discard(operation)
            return self._failure(JobOutcome.ILLEGAL_TRANSITION, job=job)
        request = replace(
            operation,
            attributes=self._fill_operation_attributes(operation.attributes),
        )
        updated: PrinterJob | None = job.with_request(request)
        if operation.last_document:
            updated = self.state_machine.transition(
                updated, JobState.PENDING, self.clock.now()
            )
            if updated is None:
                self._discard(operation)
                return self._failure(JobOutcome.ILLEGAL_TRANSITION, job=job)
        if not self.registry.compare_and_replace(job.id, job, updated):
            logger.warning("Job %s was modified concurrently", job.id)
            self._discard(operation)
            return self._failure(JobOutcome.CONFLICT, job=job)
        logger.info("Document has been added to job %s", job.id)
        if updated.state == JobState.PENDING:
            logger.info("Job %s has been moved to queue", job.id)
        return self._success(job=updated)

    # State changes

    def cancel_job(self, operation: CancelJob) -> OperationResponse:
        response = self._change_state(operation, JobState.CANCELED, "canceled")
        if response.ok:
            canceled = self.registry.get(response.job_id)
            if canceled is not None:
                canceled.release_documents()
        return response

    def hold_job(self, operation: HoldJob) -> OperationResponse:
        return self._change_state(operation, JobState.HELD, "held")

    def release_job(self, operation: ReleaseJob) -> OperationResponse:
        return self._change_state(
            operation, JobState.PENDING, "released", from_state=JobState.HELD
        )

    def restart_job(self, operation: RestartJob) -> OperationResponse:
        return self._change_state(
            operation, JobState.PENDING, "restarted", from_state=JobState.HELD
        )

    def _change_state(
        self,
        operation: JobOperation,
        target: JobState,
        action: str,
        from_state: JobState | None = None,
    ) -> OperationResponse:
        job = self._lookup(operation)
        if isinstance(job, OperationResponse):
            return job
        updated = None
        if from_state is None or job.state == from_state:
            updated = self.state_machine.transition(job, target, self.clock.now())
        if updated is None:
            logger.warning(
                "Job %s cannot move from %s to %s",
                job.id,
                job.state.value,
                target.value,
            )
            return self._failure(JobOutcome.ILLEGAL_TRANSITION, job=job)
        if not self.registry.compare_and_replace(job.id, job, updated):
            logger.warning("Job %s was modified concurrently", job.id)
            return self._failure(JobOutcome.CONFLICT, job=job)
        logger.info("Job %s has been %s", job.id, action)
        return self._success(job=updated)

    # Queries

    def get_job_attributes(self, operation: GetJobAttributes) -> OperationResponse:
        job = self._lookup(operation)
        if isinstance(job, OperationResponse):
            return job
        logger.info("System returned job attributes for job %s", job.id)
        return replace(
            self._success(job=job),
            job=self.describe(job, operation.requested_attributes, is_batch=False),
        )

    def get_jobs(self, operation: GetJobs) -> OperationResponse:
        jobs = self.list_jobs(
            which_jobs=operation.which_jobs,
            owner=operation.requesting_user_name,
            my_jobs=operation.my_jobs,
            limit=operation.limit,
        )
        logger.info("System returned jobs attributes")
        return replace(
            self._success(),
            jobs=tuple(
                self.describe(job, operation.requested_attributes, is_batch=True)
                for job in jobs
            ),
        )

    def list_jobs(
        self,
        which_jobs: WhichJobs = WhichJobs.NOT_COMPLETED,
        owner: str | None = None,
        my_jobs: bool = False,
        limit: int | None = None,
    ) -> list[PrinterJob]:
        """Filtered jobs, ordered by descending state rank then descending id."""
        jobs = self.registry.values()
        if which_jobs == WhichJobs.COMPLETED:
            jobs = [job for job in jobs if job.state in TERMINAL_STATES]
        elif which_jobs == WhichJobs.NOT_COMPLETED:
            jobs = [
                job
                for job in jobs
                if job.state in (JobState.PENDING, JobState.PROCESSING)
            ]
        if my_jobs:
            jobs = [job for job in jobs if owner is not None and job.owner == owner]
        jobs.sort(key=lambda job: (job.state.rank, job.id), reverse=True)
        if limit is not None:
            jobs = jobs[: max(limit, 0)]
        return jobs

    def describe(
        self,
        job: PrinterJob,
        requested_attributes: tuple[str, ...] = (),
        is_batch: bool = False,
    ) -> JobDescription:
        """Project a job snapshot onto its description attributes."""

        def is_required(name: str) -> bool:
            if not requested_attributes:
                return not is_batch
            if "all" in requested_attributes:
                return True
            return name in requested_attributes

        return JobDescription(
            job_id=job.id,
            job_uri=self.job_uri(job.id),
            job_printer_uri=self.printer_uri if is_required("job-printer-uri") else None,
            job_name=job.name if is_required("job-name") else None,
            job_state=job.state if is_required("job-state") else None,
            job_state_reasons=(job.state.reason,)
            if is_required("job-state-reasons")
            else None,
            job_originating_user_name=job.owner
            if is_required("job-originating-user-name")
            else None,
            date_time_at_creation=job.created_at
            if is_required("date-time-at-creation")
            else None,
            date_time_at_processing=job.processing_at
            if is_required("date-time-at-processing")
            else None,
            date_time_at_completed=job.completed_at
            if is_required("date-time-at-completed")
            else None,
            time_at_creation=self._uptime_at(job.created_at)
            if is_required("time-at-creation")
            else None,
            time_at_processing=self._uptime_at(job.processing_at)
            if is_required("time-at-processing")
            else None,
            time_at_completed=self._uptime_at(job.completed_at)
            if is_required("time-at-completed")
            else None,
            job_printer_up_time=self._uptime_at(self.clock.now())
            if is_required("job-printer-up-time")
            else None,
        )

    def get_printer_attributes(
        self, operation: GetPrinterAttributes
    ) -> OperationResponse:
        requested = operation.requested_attributes

        def is_required(name: str) -> bool:
            if not requested or all(not item for item in requested):
                return True
            if "all" in requested:
                return True
            return name in requested

        now = self.clock.now()
        jobs = self.registry.values()
        queued = sum(
            1 for job in jobs if job.state in (JobState.PENDING, JobState.PROCESSING)
        )
        if self._paused:
            state = PrinterState.STOPPED
        elif queued:
            state = PrinterState.PROCESSING
        else:
            state = PrinterState.IDLE
        options = self.options
        resolution = _first(options.resolution)
        attributes = {
            "printer-name": ("printer_name", options.name),
            "printer-state": ("printer_state", state),
            "printer-is-accepting-jobs": ("printer_is_accepting_jobs", True),
            "queued-job-count": ("queued_job_count", queued),
            "printer-up-time": ("printer_up_time", self._uptime_at(now)),
            "printer-current-time": ("printer_current_time", now),
            "operations-supported": ("operations_supported", SUPPORTED_OPERATIONS),
            "document-format-default": (
                "document_format_default",
                options.document_format,
            ),
            "media-default": ("media_default", _first(options.media) or ""),
            "media-supported": ("media_supported", options.media),
            "sides-default": ("sides_default", _first(options.sides) or ""),
            "sides-supported": ("sides_supported", options.sides),
            "printer-resolution-default": (
                "printer_resolution_default",
                str(resolution) if resolution else "",
            ),
            "print-quality-default": (
                "print_quality_default",
                _first(options.print_quality) or "",
            ),
            "print-quality-supported": (
                "print_quality_supported",
                options.print_quality,
            ),
            "copies-default": ("copies_default", options.copies),
            "job-priority-default": ("job_priority_default", options.job_priority),
            "orientation-requested-default": (
                "orientation_requested_default",
                options.orientation,
            ),
            "job-hold-until-default": (
                "job_hold_until_default",
                options.job_hold_until,
            ),
            "print-color-mode-default": (
                "print_color_mode_default",
                _first(options.print_color_modes) or "",
            ),
        }
        printer = PrinterDescription(
            printer_uri=self.printer_uri,
            **{
                field: value
                for name, (field, value) in attributes.items()
                if is_required(name)
            },
        )
        logger.info("System returned printer attributes")
        return replace(self._success(), printer=printer)

    # Printer control

    def pause_printer(self, operation: PausePrinter) -> OperationResponse:
        del operation
        self._paused = True
        logger.info("Printer has been paused")
        return self._success()

    def resume_printer(self, operation: ResumePrinter) -> OperationResponse:
        del operation
        self._paused = False
        logger.info("Printer has been resumed")
        return self._success()

    def purge_jobs(self, operation: PurgeJobs) -> OperationResponse:
        """Remove every job that is not processing and release its documents."""
        del operation
        purged = 0
        for job in self.registry.values():
            current: PrinterJob | None = job
            while current is not None and current.state != JobState.PROCESSING:
                removed = self.registry.remove(current.id, expected=current)
                if removed is not None:
                    removed.release_documents()
                    purged += 1
                    break
                current = self.registry.get(job.id)
        logger.info("System purged %s jobs", purged)
        return self._success()

    # Dispatcher contract

    def claim_next_pending_job(self) -> PrinterJob | None:
        """Move the oldest pending job to processing and return it.

        Jobs lost to a concurrent writer are skipped; they are picked up on a
        later cycle if still pending.
        """
        if self._paused:
            return None
        pending = sorted(
            (job for job in self.registry.values() if job.state == JobState.PENDING),
            key=lambda job: job.id,
        )
        for job in pending:
            claimed = self.state_machine.transition(
                job, JobState.PROCESSING, self.clock.now()
            )
            if claimed is None:
                continue
            if not self.registry.compare_and_replace(job.id, job, claimed):
                logger.debug("Job %s was claimed or changed concurrently", job.id)
                continue
            logger.info("Job %s is processing", job.id)
            return claimed
        return None

    def report_completed(self, job_id: int) -> bool:
        """Mark a processing job completed; no-op if gone or changed."""
        updated = self._finish(job_id, JobState.COMPLETED)
        if updated is not None:
            logger.info("Job %s has been completed", job_id)
        return updated is not None

    def report_aborted(self, job_id: int, error: BaseException | None = None) -> bool:
        """Mark a processing job aborted; no-op if gone or changed."""
        updated = self._finish(job_id, JobState.ABORTED)
        if updated is not None:
            logger.error("Job %s has been aborted", job_id, exc_info=error)
        return updated is not None

    def _finish(self, job_id: int, target: JobState) -> PrinterJob | None:
        job = self.registry.get(job_id)
        if job is None:
            logger.warning("Job %s vanished before it was reported", job_id)
            return None
        updated = self.state_machine.transition(job, target, self.clock.now())
        if updated is None:
            logger.warning(
                "Job %s is %s and cannot become %s",
                job_id,
                job.state.value,
                target.value,
            )
            return None
        if not self.registry.compare_and_replace(job_id, job, updated):
            logger.warning("Job %s was modified concurrently", job_id)
            return None
        return updated

    # Helpers

    def _lookup(self, operation: JobOperation) -> PrinterJob | OperationResponse:
        job_id = operation.resolve_job_id()
        if job_id is None:
            return self._failure(JobOutcome.BAD_REQUEST)
        job = self.registry.get(job_id)
        if job is None:
            logger.warning("Job %s not found", job_id)
            return replace(
                self._failure(JobOutcome.NOT_FOUND),
                job_id=job_id,
                job_uri=self.job_uri(job_id),
            )
        return job

    def _fill_operation_attributes(
        self,
        attributes: OperationAttributes,
        job_id: int | None = None,
        with_format: bool = True,
    ) -> OperationAttributes:
        job_name = attributes.job_name
        if job_id is not None and not job_name:
            job_name = f"Job {job_id}"
        document_format = attributes.document_format
        if with_format and not document_format:
            document_format = self.options.document_format
        return replace(attributes, job_name=job_name, document_format=document_format)

    def _fill_template_attributes(
        self, template: JobTemplateAttributes
    ) -> JobTemplateAttributes:
        options = self.options
        return JobTemplateAttributes(
            media=_default(template.media, _first(options.media)),
            printer_resolution=_default(
                template.printer_resolution, _first(options.resolution)
            ),
            sides=_default(template.sides, _first(options.sides)),
            print_quality=_default(template.print_quality, _first(options.print_quality)),
            job_priority=_default(template.job_priority, options.job_priority),
            copies=_default(template.copies, options.copies),
            orientation_requested=_default(
                template.orientation_requested, options.orientation
            ),
            job_hold_until=_default(template.job_hold_until, options.job_hold_until),
            print_scaling=_default(template.print_scaling, _first(options.print_scaling)),
            finishings=_default(template.finishings, _first(options.finishings)),
            print_color_mode=_default(
                template.print_color_mode, _first(options.print_color_modes)
            ),
        )

    def _uptime_at(self, moment: datetime | None) -> int:
        if moment is None:
            return -1
        return int((moment - self.started_at).total_seconds())

    @staticmethod
    def _discard(operation: object) -> None:
        document = getattr(operation, "document", None)
        if document is not None:
            document.close()

    def _success(self, job: PrinterJob | None = None) -> OperationResponse:
        return self._response(JobOutcome.OK, job)

    def _failure(
        self, outcome: JobOutcome, job: PrinterJob | None = None
    ) -> OperationResponse:
        return self._response(outcome, job)

    def _response(
        self, outcome: JobOutcome, job: PrinterJob | None
    ) -> OperationResponse:
        if job is None:
            return OperationResponse(
                status_code=_OUTCOME_STATUS[outcome], outcome=outcome
            )
        return OperationResponse(
            status_code=_OUTCOME_STATUS[outcome],
            outcome=outcome,
            job_id=job.id,
            job_uri=self.job_uri(job.id),
            job_state=job.state,
        )
