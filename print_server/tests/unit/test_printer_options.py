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
"""Unit tests for printer options and server settings."""

import pytest

from print_server.app.application.printer_options import PrinterOptions, ServerSettings
from print_server.app.domain.models import Resolution


def test_defaults_match_reference_printer():
    options = PrinterOptions()

    assert options.name == "SharpIpp"
    assert options.media[0] == "iso_a4_210x297mm"
    assert str(options.resolution[0]) == "600x600dpi"
    assert options.document_format == "application/pdf"
    assert options.job_hold_until == "no-hold"


def test_options_from_env(monkeypatch):
    monkeypatch.setenv("PRINT_SERVER_NAME", "Office")
    monkeypatch.setenv("PRINT_SERVER_MEDIA", "na_letter_8.5x11in, iso_a4_210x297mm")
    monkeypatch.setenv("PRINT_SERVER_COPIES", "2")
    monkeypatch.delenv("PRINT_SERVER_DOCUMENT_FORMAT", raising=False)

    options = PrinterOptions.from_env()

    assert options.name == "Office"
    assert options.media == ("na_letter_8.5x11in", "iso_a4_210x297mm")
    assert options.copies == 2
    assert options.document_format == "application/pdf"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("PRINT_SERVER_DISPATCH_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("PRINT_SERVER_DISPATCH_ENABLED", "false")
    monkeypatch.setenv("PRINT_SERVER_LOG_LEVEL", "debug")

    settings = ServerSettings.from_env()

    assert settings.dispatch_interval_seconds == 2.5
    assert settings.dispatch_enabled is False
    assert settings.log_level == "DEBUG"


def test_options_from_env_covers_fixed_capabilities(monkeypatch):
    monkeypatch.setenv("PRINT_SERVER_RESOLUTION", "300x300dpi, 600x600dpi")
    monkeypatch.setenv("PRINT_SERVER_ORIENTATION", "landscape")
    monkeypatch.setenv("PRINT_SERVER_PRINT_SCALING", "fit")
    monkeypatch.setenv("PRINT_SERVER_FINISHINGS", "staple")
    monkeypatch.setenv("PRINT_SERVER_PRINT_COLOR_MODES", "monochrome,color")
    monkeypatch.setenv("PRINT_SERVER_JOB_HOLD_UNTIL", "indefinite")

    options = PrinterOptions.from_env()

    assert options.resolution == (Resolution(300, 300), Resolution(600, 600))
    assert options.orientation == "landscape"
    assert options.print_scaling == ("fit",)
    assert options.finishings == ("staple",)
    assert options.print_color_modes == ("monochrome", "color")
    assert options.job_hold_until == "indefinite"


def test_options_from_env_rejects_bad_resolution(monkeypatch):
    monkeypatch.setenv("PRINT_SERVER_RESOLUTION", "high")

    with pytest.raises(ValueError):
        PrinterOptions.from_env()
