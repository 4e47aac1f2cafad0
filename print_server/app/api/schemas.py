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
"""API schemas for the print job server."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Base64Bytes, BaseModel, Field


class OperationAttributesPayload(BaseModel):
    """Operation attributes sent with job and document requests."""

    requesting_user_name: Optional[str] = Field(default=None, max_length=255)
    job_name: Optional[str] = Field(default=None, max_length=255)
    document_name: Optional[str] = Field(default=None, max_length=255)
    document_format: Optional[str] = Field(default=None, max_length=255)
    compression: Optional[str] = None
    ipp_attribute_fidelity: Optional[bool] = None


class ResolutionPayload(BaseModel):
    cross_feed: int = Field(ge=1)
    feed: int = Field(ge=1)
    units: str = "dpi"


class JobTemplatePayload(BaseModel):
    """Job template attributes; omitted values take printer defaults."""

    media: Optional[str] = None
    printer_resolution: Optional[ResolutionPayload] = None
    sides: Optional[str] = None
    print_quality: Optional[str] = None
    job_priority: Optional[int] = Field(default=None, ge=1, le=100)
    copies: Optional[int] = Field(default=None, ge=1)
    orientation_requested: Optional[str] = None
    job_hold_until: Optional[str] = None
    print_scaling: Optional[str] = None
    finishings: Optional[str] = None
    print_color_mode: Optional[str] = None


class CreateJobRequest(BaseModel):
    attributes: OperationAttributesPayload = Field(
        default_factory=OperationAttributesPayload
    )
    template: JobTemplatePayload = Field(default_factory=JobTemplatePayload)


class PrintJobRequest(CreateJobRequest):
    """Payload to print a base64 encoded document."""

    document: Optional[Base64Bytes] = None


class PrintUriRequest(CreateJobRequest):
    document_uri: str = Field(min_length=1)


class SendDocumentRequest(BaseModel):
    """Payload to add a base64 encoded document to a created job."""

    attributes: OperationAttributesPayload = Field(
        default_factory=OperationAttributesPayload
    )
    last_document: bool = False
    document: Optional[Base64Bytes] = None


class SendUriRequest(BaseModel):
    attributes: OperationAttributesPayload = Field(
        default_factory=OperationAttributesPayload
    )
    last_document: bool = False
    document_uri: str = Field(min_length=1)


class OperationResultResponse(BaseModel):
    """Result of a job or printer operation."""

    status_code: int
    outcome: str
    job_id: Optional[int] = None
    job_uri: Optional[str] = None
    job_state: Optional[str] = None


class JobResponse(BaseModel):
    """Job description payload."""

    job_id: int
    job_uri: str
    job_printer_uri: Optional[str] = None
    job_name: Optional[str] = None
    job_state: Optional[str] = None
    job_state_keyword: Optional[str] = None
    job_state_reasons: Optional[List[str]] = None
    job_originating_user_name: Optional[str] = None
    date_time_at_creation: Optional[datetime] = None
    date_time_at_processing: Optional[datetime] = None
    date_time_at_completed: Optional[datetime] = None
    time_at_creation: Optional[int] = None
    time_at_processing: Optional[int] = None
    time_at_completed: Optional[int] = None
    job_printer_up_time: Optional[int] = None


class PrinterResponse(BaseModel):
    """Printer description payload."""

    printer_uri: str
    printer_name: Optional[str] = None
    printer_state: Optional[str] = None
    printer_is_accepting_jobs: Optional[bool] = None
    queued_job_count: Optional[int] = None
    printer_up_time: Optional[int] = None
    printer_current_time: Optional[datetime] = None
    operations_supported: Optional[List[str]] = None
    document_format_default: Optional[str] = None
    media_default: Optional[str] = None
    media_supported: Optional[List[str]] = None
    sides_default: Optional[str] = None
    sides_supported: Optional[List[str]] = None
    printer_resolution_default: Optional[str] = None
    print_quality_default: Optional[str] = None
    print_quality_supported: Optional[List[str]] = None
    copies_default: Optional[int] = None
    job_priority_default: Optional[int] = None
    orientation_requested_default: Optional[str] = None
    job_hold_until_default: Optional[str] = None
    print_color_mode_default: Optional[str] = None


class DispatchResponse(BaseModel):
    """Outcome of a manually triggered dispatch cycle."""

    claimed: bool
    job_id: Optional[int] = None
    job_state: Optional[str] = None
