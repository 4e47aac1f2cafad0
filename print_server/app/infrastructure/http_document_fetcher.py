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
"""HTTP document fetcher for URI-referenced documents."""

from __future__ import annotations

import logging
import tempfile
from typing import BinaryIO

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(connect=10, read=30, write=30, pool=30)

_SPOOL_LIMIT = 8 * 1024 * 1024


class HttpxDocumentFetcher:
    """Downloads a document into a spooled temporary file.

    Non-success responses return None; transport errors propagate so the
    dispatch cycle aborts the job.
    """

    def __init__(
        self,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.timeout = timeout
        self.transport = transport

    def fetch(self, uri: str) -> BinaryIO | None:
        with httpx.Client(
            timeout=self.timeout, transport=self.transport, follow_redirects=True
        ) as client:
            with client.stream("GET", uri) as response:
                if not response.is_success:
                    logger.warning(
                        "Fetching %s returned HTTP %s", uri, response.status_code
                    )
                    return None
                spool = tempfile.SpooledTemporaryFile(max_size=_SPOOL_LIMIT)
                try:
                    for chunk in response.iter_bytes():
                        spool.write(chunk)
                except BaseException:
                    spool.close()
                    raise
        spool.seek(0)
        return spool
