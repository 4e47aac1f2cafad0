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
"""Race tests for compare-and-replace updates in the printer service."""

import io
import threading
from datetime import datetime, timezone

from print_server.app.application.printer_options import PrinterOptions
from print_server.app.application.printer_service import PrinterService
from print_server.app.domain.models import JobOutcome, JobState, StatusCode
from print_server.app.domain.operations import (
    CancelJob,
    CreateJob,
    HoldJob,
    PrintJob,
    SendDocument,
)
from print_server.app.domain.state_machine import JobStateMachine
from print_server.app.infrastructure.in_memory_job_registry import InMemoryJobRegistry


class FixedClock:
    def now(self) -> datetime:
        return datetime(2026, 3, 14, 9, 0, tzinfo=timezone.utc)


class RacingRegistry(InMemoryJobRegistry):
    """Runs a competing writer right before the next compare-and-replace."""

    def __init__(self) -> None:
        super().__init__(seed=1000)
        self.before_replace = None

    def compare_and_replace(self, job_id, expected, new):
        competitor, self.before_replace = self.before_replace, None
        if competitor is not None:
            competitor()
        return super().compare_and_replace(job_id, expected, new)


def build_service(registry: InMemoryJobRegistry | None = None) -> PrinterService:
    return PrinterService(
        registry=registry or InMemoryJobRegistry(seed=1000),
        state_machine=JobStateMachine(),
        options=PrinterOptions(),
        clock=FixedClock(),
    )


def queue_job(service: PrinterService) -> int:
    return service.handle(PrintJob(document=io.BytesIO(b"%PDF"))).job_id


def test_losing_cancel_reports_conflict():
    registry = RacingRegistry()
    service = build_service(registry)
    job_id = queue_job(service)
    competing: list = []
    registry.before_replace = lambda: competing.append(
        service.handle(CancelJob(job_id=job_id))
    )

    loser = service.handle(CancelJob(job_id=job_id))

    assert competing[0].ok
    assert loser.status_code == StatusCode.CLIENT_ERROR_NOT_POSSIBLE
    assert loser.outcome == JobOutcome.CONFLICT
    assert registry.get(job_id).state == JobState.CANCELED


def test_hold_losing_to_claim_leaves_job_processing():
    registry = RacingRegistry()
    service = build_service(registry)
    job_id = queue_job(service)
    registry.before_replace = service.claim_next_pending_job

    response = service.handle(HoldJob(job_id=job_id))

    assert response.outcome == JobOutcome.CONFLICT
    assert registry.get(job_id).state == JobState.PROCESSING


def test_claim_moves_on_when_candidate_is_taken():
    registry = RacingRegistry()
    service = build_service(registry)
    oldest = queue_job(service)
    newer = queue_job(service)
    taken: list = []
    registry.before_replace = lambda: taken.append(service.claim_next_pending_job())

    claimed = service.claim_next_pending_job()

    assert taken[0].id == oldest
    assert claimed.id == newer
    assert registry.get(oldest).state == JobState.PROCESSING
    assert registry.get(newer).state == JobState.PROCESSING


def test_append_losing_to_cancel_does_not_attach_document():
    registry = RacingRegistry()
    service = build_service(registry)
    job_id = service.handle(CreateJob()).job_id
    document = io.BytesIO(b"page")
    registry.before_replace = lambda: service.handle(CancelJob(job_id=job_id))

    response = service.handle(
        SendDocument(job_id=job_id, document=document, last_document=True)
    )

    job = registry.get(job_id)
    assert response.outcome == JobOutcome.CONFLICT
    assert job.state == JobState.CANCELED
    assert len(job.requests) == 1
    assert document.closed


def test_report_losing_race_is_noop():
    registry = RacingRegistry()
    service = build_service(registry)
    job_id = queue_job(service)
    service.claim_next_pending_job()
    registry.before_replace = lambda: service.report_aborted(job_id)

    assert service.report_completed(job_id) is False
    assert registry.get(job_id).state == JobState.ABORTED


def run_concurrently(count: int, target) -> list:
    barrier = threading.Barrier(count)
    results: list = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        result = target()
        with lock:
            results.append(result)

    threads = [threading.Thread(target=worker) for _ in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return results


def test_concurrent_claims_have_exactly_one_winner():
    service = build_service()
    job_id = queue_job(service)

    results = run_concurrently(8, service.claim_next_pending_job)

    winners = [job for job in results if job is not None]
    assert len(winners) == 1
    assert winners[0].id == job_id
    assert service.registry.get(job_id).state == JobState.PROCESSING


def test_concurrent_claims_never_share_a_job():
    service = build_service()
    ids = [queue_job(service) for _ in range(5)]

    results = run_concurrently(8, service.claim_next_pending_job)

    claimed = sorted(job.id for job in results if job is not None)
    assert claimed == ids


def test_concurrent_cancels_have_exactly_one_winner():
    service = build_service()
    job_id = queue_job(service)

    results = run_concurrently(8, lambda: service.handle(CancelJob(job_id=job_id)))

    assert sum(1 for response in results if response.ok) == 1
    assert all(
        response.status_code == StatusCode.CLIENT_ERROR_NOT_POSSIBLE
        for response in results
        if not response.ok
    )
    job = service.registry.get(job_id)
    assert job.state == JobState.CANCELED
    assert job.completed_at is not None
