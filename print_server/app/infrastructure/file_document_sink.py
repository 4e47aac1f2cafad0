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
"""File system document sink."""

from __future__ import annotations

import logging
import mimetypes
import shutil
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)


class FileSystemDocumentSink:
    """Stores documents under ``<root>/jobs`` as ``{job}.{index}_{name}{ext}``."""

    def __init__(self, root: str | Path):
        self.directory = Path(root) / "jobs"

    def file_name(
        self,
        job_id: int,
        request_index: int,
        suggested_name: str | None,
        suggested_format: str | None,
        fallback_extension: str | None = None,
    ) -> str:
        extension = None
        if suggested_format:
            extension = mimetypes.guess_extension(suggested_format, strict=False)
        name = Path(suggested_name).name if suggested_name else "no-name"
        return (
            f"{job_id}.{request_index}_{name}"
            f"{extension or fallback_extension or '.unknown'}"
        )

    def save(
        self,
        job_id: int,
        request_index: int,
        document: BinaryIO,
        suggested_name: str | None,
        suggested_format: str | None,
        fallback_extension: str | None = None,
    ) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / self.file_name(
            job_id, request_index, suggested_name, suggested_format, fallback_extension
        )
        with path.open("wb") as target:
            shutil.copyfileobj(document, target)
        logger.info("Document %s of job %s saved to %s", request_index, job_id, path)
