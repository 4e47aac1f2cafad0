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
"""FastAPI entrypoint for the print job server."""

import io
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException

from print_server.app.api.schemas import (
    CreateJobRequest,
    DispatchResponse,
    JobResponse,
    JobTemplatePayload,
    OperationAttributesPayload,
    OperationResultResponse,
    PrinterResponse,
    PrintJobRequest,
    PrintUriRequest,
    SendDocumentRequest,
    SendUriRequest,
)
from print_server.app.application.dispatcher import JobDispatcher
from print_server.app.application.printer_options import PrinterOptions, ServerSettings
from print_server.app.application.printer_service import (
    JobDescription,
    OperationResponse,
    PrinterService,
)
from print_server.app.domain.models import (
    JobOutcome,
    JobTemplateAttributes,
    OperationAttributes,
    Resolution,
    WhichJobs,
)
from print_server.app.domain.operations import (
    CancelJob,
    CreateJob,
    GetJobAttributes,
    GetJobs,
    GetPrinterAttributes,
    HoldJob,
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
from print_server.app.infrastructure.dispatch_scheduler import DispatchScheduler
from print_server.app.infrastructure.file_document_sink import FileSystemDocumentSink
from print_server.app.infrastructure.http_document_fetcher import HttpxDocumentFetcher
from print_server.app.infrastructure.in_memory_job_registry import InMemoryJobRegistry
from print_server.app.infrastructure.system_clock import SystemClock

settings = ServerSettings.from_env()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

clock = SystemClock()
registry = InMemoryJobRegistry.seeded_from(clock.now())
service = PrinterService(
    registry=registry,
    state_machine=JobStateMachine(),
    options=PrinterOptions.from_env(),
    clock=clock,
)
dispatcher = JobDispatcher(
    service=service,
    sink=FileSystemDocumentSink(settings.storage_dir),
    fetcher=HttpxDocumentFetcher(),
)
scheduler = DispatchScheduler(
    cycle=dispatcher.run_cycle,
    interval_seconds=settings.dispatch_interval_seconds,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.dispatch_enabled:
        scheduler.start()
        logger.info(
            "Dispatch scheduler started, interval %ss",
            settings.dispatch_interval_seconds,
        )
    yield
    scheduler.stop(timeout=settings.dispatch_interval_seconds)
    for job in registry.values():
        job.release_documents()


app = FastAPI(title="Print Job Server", version="0.1.0", lifespan=lifespan)


def _to_attributes(payload: OperationAttributesPayload) -> OperationAttributes:
    return OperationAttributes(**payload.model_dump())


def _to_template(payload: JobTemplatePayload) -> JobTemplateAttributes:
    data = payload.model_dump(exclude={"printer_resolution"})
    resolution = None
    if payload.printer_resolution is not None:
        resolution = Resolution(
            cross_feed=payload.printer_resolution.cross_feed,
            feed=payload.printer_resolution.feed,
            units=payload.printer_resolution.units,
        )
    return JobTemplateAttributes(printer_resolution=resolution, **data)


def _to_stream(document: Optional[bytes]) -> Optional[io.BytesIO]:
    return io.BytesIO(document) if document is not None else None


def _raise_for_failure(response: OperationResponse) -> None:
    """Map expected service failures onto HTTP errors."""
    if response.outcome == JobOutcome.OK:
        return
    if response.outcome == JobOutcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Job not found")
    if response.outcome == JobOutcome.BAD_REQUEST:
        raise HTTPException(status_code=400, detail="Job id is required")
    if response.outcome == JobOutcome.CONFLICT:
        raise HTTPException(
            status_code=409, detail="Job was modified concurrently, retry"
        )
    raise HTTPException(
        status_code=409, detail="Operation is not possible in the current job state"
    )


def to_result(response: OperationResponse) -> OperationResultResponse:
    _raise_for_failure(response)
    return OperationResultResponse(
        status_code=int(response.status_code),
        outcome=response.outcome.value,
        job_id=response.job_id,
        job_uri=response.job_uri,
        job_state=response.job_state.value if response.job_state else None,
    )


def to_job_response(job: JobDescription) -> JobResponse:
    """Convert job description to API response."""
    return JobResponse(
        job_id=job.job_id,
        job_uri=job.job_uri,
        job_printer_uri=job.job_printer_uri,
        job_name=job.job_name,
        job_state=job.job_state.value if job.job_state else None,
        job_state_keyword=job.job_state.keyword if job.job_state else None,
        job_state_reasons=list(job.job_state_reasons)
        if job.job_state_reasons is not None
        else None,
        job_originating_user_name=job.job_originating_user_name,
        date_time_at_creation=job.date_time_at_creation,
        date_time_at_processing=job.date_time_at_processing,
        date_time_at_completed=job.date_time_at_completed,
        time_at_creation=job.time_at_creation,
        time_at_processing=job.time_at_processing,
        time_at_completed=job.time_at_completed,
        job_printer_up_time=job.job_printer_up_time,
    )


def _requested(attributes: Optional[str]) -> tuple[str, ...]:
    if not attributes:
        return ()
    return tuple(item.strip() for item in attributes.split(",") if item.strip())


@app.get("/health")
def health() -> dict[str, str]:
    """Simple health endpoint."""
    return {"status": "ok"}


@app.post("/api/v1/jobs", response_model=OperationResultResponse)
def create_job(payload: CreateJobRequest) -> OperationResultResponse:
    """Create a job that waits for documents."""
    operation = CreateJob(
        attributes=_to_attributes(payload.attributes),
        template=_to_template(payload.template),
    )
    return to_result(service.handle(operation))


@app.post("/api/v1/jobs/print", response_model=OperationResultResponse)
def print_job(payload: PrintJobRequest) -> OperationResultResponse:
    """Create and queue a job with one document."""
    operation = PrintJob(
        attributes=_to_attributes(payload.attributes),
        template=_to_template(payload.template),
        document=_to_stream(payload.document),
    )
    return to_result(service.handle(operation))


@app.post("/api/v1/jobs/print-uri", response_model=OperationResultResponse)
def print_uri(payload: PrintUriRequest) -> OperationResultResponse:
    """Create and queue a job whose document is fetched from a URI."""
    operation = PrintUri(
        document_uri=payload.document_uri,
        attributes=_to_attributes(payload.attributes),
        template=_to_template(payload.template),
    )
    return to_result(service.handle(operation))


@app.post("/api/v1/jobs/validate", response_model=OperationResultResponse)
def validate_job(payload: CreateJobRequest) -> OperationResultResponse:
    operation = ValidateJob(
        attributes=_to_attributes(payload.attributes),
        template=_to_template(payload.template),
    )
    return to_result(service.handle(operation))


@app.get("/api/v1/jobs", response_model=list[JobResponse])
def list_jobs(
    which_jobs: WhichJobs = WhichJobs.NOT_COMPLETED,
    my_jobs: bool = False,
    requesting_user_name: Optional[str] = None,
    limit: Optional[int] = None,
    requested_attributes: Optional[str] = None,
) -> list[JobResponse]:
    """List jobs, most active and newest first."""
    operation = GetJobs(
        which_jobs=which_jobs,
        my_jobs=my_jobs,
        requesting_user_name=requesting_user_name,
        limit=limit,
        requested_attributes=_requested(requested_attributes),
    )
    response = service.handle(operation)
    _raise_for_failure(response)
    return [to_job_response(job) for job in response.jobs]


@app.get("/api/v1/jobs/{job_id}", response_model=JobResponse)
def get_job(job_id: int, requested_attributes: Optional[str] = None) -> JobResponse:
    """Fetch job description."""
    response = service.handle(
        GetJobAttributes(
            job_id=job_id, requested_attributes=_requested(requested_attributes)
        )
    )
    _raise_for_failure(response)
    if response.job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return to_job_response(response.job)


@app.post("/api/v1/jobs/{job_id}/documents", response_model=OperationResultResponse)
def send_document(job_id: int, payload: SendDocumentRequest) -> OperationResultResponse:
    """Add a document to a created job."""
    operation = SendDocument(
        job_id=job_id,
        requesting_user_name=payload.attributes.requesting_user_name,
        attributes=_to_attributes(payload.attributes),
        last_document=payload.last_document,
        document=_to_stream(payload.document),
    )
    return to_result(service.handle(operation))


@app.post("/api/v1/jobs/{job_id}/uris", response_model=OperationResultResponse)
def send_uri(job_id: int, payload: SendUriRequest) -> OperationResultResponse:
    """Add a document URI to a created job."""
    operation = SendUri(
        job_id=job_id,
        requesting_user_name=payload.attributes.requesting_user_name,
        document_uri=payload.document_uri,
        attributes=_to_attributes(payload.attributes),
        last_document=payload.last_document,
    )
    return to_result(service.handle(operation))


@app.post("/api/v1/jobs/{job_id}/cancel", response_model=OperationResultResponse)
def cancel_job(job_id: int) -> OperationResultResponse:
    return to_result(service.handle(CancelJob(job_id=job_id)))


@app.post("/api/v1/jobs/{job_id}/hold", response_model=OperationResultResponse)
def hold_job(job_id: int) -> OperationResultResponse:
    return to_result(service.handle(HoldJob(job_id=job_id)))


@app.post("/api/v1/jobs/{job_id}/release", response_model=OperationResultResponse)
def release_job(job_id: int) -> OperationResultResponse:
    return to_result(service.handle(ReleaseJob(job_id=job_id)))


@app.post("/api/v1/jobs/{job_id}/restart", response_model=OperationResultResponse)
def restart_job(job_id: int) -> OperationResultResponse:
    return to_result(service.handle(RestartJob(job_id=job_id)))


def _listed(values: Optional[tuple[str, ...]]) -> Optional[list[str]]:
    return list(values) if values is not None else None


@app.get("/api/v1/printer", response_model=PrinterResponse)
def get_printer(requested_attributes: Optional[str] = None) -> PrinterResponse:
    """Return printer description and state."""
    response = service.handle(
        GetPrinterAttributes(requested_attributes=_requested(requested_attributes))
    )
    _raise_for_failure(response)
    printer = response.printer
    if printer is None:
        raise HTTPException(status_code=500, detail="Printer attributes unavailable")
    return PrinterResponse(
        printer_name=printer.printer_name,
        printer_uri=printer.printer_uri,
        printer_state=printer.printer_state.value if printer.printer_state else None,
        printer_is_accepting_jobs=printer.printer_is_accepting_jobs,
        queued_job_count=printer.queued_job_count,
        printer_up_time=printer.printer_up_time,
        printer_current_time=printer.printer_current_time,
        operations_supported=_listed(printer.operations_supported),
        document_format_default=printer.document_format_default,
        media_default=printer.media_default,
        media_supported=_listed(printer.media_supported),
        sides_default=printer.sides_default,
        sides_supported=_listed(printer.sides_supported),
        printer_resolution_default=printer.printer_resolution_default,
        print_quality_default=printer.print_quality_default,
        print_quality_supported=_listed(printer.print_quality_supported),
        copies_default=printer.copies_default,
        job_priority_default=printer.job_priority_default,
        orientation_requested_default=printer.orientation_requested_default,
        job_hold_until_default=printer.job_hold_until_default,
        print_color_mode_default=printer.print_color_mode_default,
    )


@app.post("/api/v1/printer/pause", response_model=OperationResultResponse)
def pause_printer() -> OperationResultResponse:
    """Stop claiming pending jobs."""
    return to_result(service.handle(PausePrinter()))


@app.post("/api/v1/printer/resume", response_model=OperationResultResponse)
def resume_printer() -> OperationResultResponse:
    return to_result(service.handle(ResumePrinter()))


@app.post("/api/v1/printer/purge", response_model=OperationResultResponse)
def purge_jobs() -> OperationResultResponse:
    """Remove every job that is not processing."""
    return to_result(service.handle(PurgeJobs()))


@app.post("/api/v1/printer/dispatch", response_model=DispatchResponse)
def dispatch_once() -> DispatchResponse:
    """Run one dispatch cycle now."""
    job = scheduler.run_once()
    if job is None:
        return DispatchResponse(claimed=False)
    current = registry.get(job.id)
    return DispatchResponse(
        claimed=True,
        job_id=job.id,
        job_state=(current or job).state.value,
    )
