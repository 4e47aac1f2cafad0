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
"""Printer capability defaults and server settings."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from print_server.app.domain.models import Resolution


def _env(name: str, default: str) -> str:
    return os.getenv(f"PRINT_SERVER_{name}", default).strip() or default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(f"PRINT_SERVER_{name}", "").strip()
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


_RESOLUTION = re.compile(r"^(\d+)x(\d+)(dpi|dpcm)$")


def _parse_resolution(value: str) -> Resolution:
    match = _RESOLUTION.match(value)
    if match is None:
        raise ValueError(f"Invalid printer resolution: {value!r}")
    return Resolution(int(match.group(1)), int(match.group(2)), match.group(3))


@dataclass(frozen=True)
class PrinterOptions:
    """Read-only printer configuration.

    Sequences list supported values; the first entry is the default applied
    when a request leaves the attribute unset.
    """

    name: str = "SharpIpp"
    media: tuple[str, ...] = ("iso_a4_210x297mm",)
    resolution: tuple[Resolution, ...] = (Resolution(600, 600),)
    sides: tuple[str, ...] = ("one-sided",)
    print_quality: tuple[str, ...] = ("high",)
    print_scaling: tuple[str, ...] = ("auto",)
    finishings: tuple[str, ...] = ("none",)
    print_color_modes: tuple[str, ...] = ("color",)
    job_priority: int = 1
    copies: int = 1
    orientation: str = "portrait"
    job_hold_until: str = "no-hold"
    document_format: str = "application/pdf"

    @classmethod
    def from_env(cls) -> PrinterOptions:
        defaults = cls()
        return cls(
            name=_env("NAME", defaults.name),
            media=_env_list("MEDIA", defaults.media),
            resolution=tuple(
                _parse_resolution(item)
                for item in _env_list(
                    "RESOLUTION", tuple(str(r) for r in defaults.resolution)
                )
            ),
            sides=_env_list("SIDES", defaults.sides),
            print_quality=_env_list("PRINT_QUALITY", defaults.print_quality),
            print_scaling=_env_list("PRINT_SCALING", defaults.print_scaling),
            finishings=_env_list("FINISHINGS", defaults.finishings),
            print_color_modes=_env_list(
                "PRINT_COLOR_MODES", defaults.print_color_modes
            ),
            job_priority=int(_env("JOB_PRIORITY", str(defaults.job_priority))),
            copies=int(_env("COPIES", str(defaults.copies))),
            orientation=_env("ORIENTATION", defaults.orientation),
            job_hold_until=_env("JOB_HOLD_UNTIL", defaults.job_hold_until),
            document_format=_env("DOCUMENT_FORMAT", defaults.document_format),
        )


@dataclass(frozen=True)
class ServerSettings:
    """Runtime behavior for storage and the dispatch scheduler."""

    storage_dir: str = "."
    dispatch_interval_seconds: float = 10.0
    dispatch_enabled: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> ServerSettings:
        defaults = cls()
        return cls(
            storage_dir=_env("STORAGE_DIR", defaults.storage_dir),
            dispatch_interval_seconds=float(
                _env("DISPATCH_INTERVAL_SECONDS", str(defaults.dispatch_interval_seconds))
            ),
            dispatch_enabled=_env("DISPATCH_ENABLED", "true").lower()
            in {"1", "true", "yes"},
            log_level=_env("LOG_LEVEL", defaults.log_level).upper(),
        )
