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
"""API-level tests for the print job server."""

import base64

import pytest
from fastapi.testclient import TestClient

import print_server.app.api.main as api_main

from print_server.app.application.printer_options import ServerSettings

from print_server.app.api.main import app


class RecordingSink:
    def __init__(self) -> None:
        self.saved: list[tuple[int, int, bytes]] = []

    def save(
        self,
        job_id,
        request_index,
        document,
        suggested_name,
        suggested_format,
        fallback_extension=None,
    ):
        self.saved.append((job_id, request_index, document.read()))


@pytest.fixture()
def sink(monkeypatch):
    recording = RecordingSink()
    monkeypatch.setattr(api_main.dispatcher, "sink", recording)
    return recording


@pytest.fixture()
def client(sink):
    test_client = TestClient(app)
    test_client.post("/api/v1/printer/resume")
    test_client.post("/api/v1/printer/purge")
    return test_client


def encode(content: bytes) -> str:
    return base64.b64encode(content).decode()


def test_health_endpoint(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_print_dispatch_and_describe_job(client, sink):
    create_response = client.post(
        "/api/v1/jobs/print",
        json={
            "attributes": {"requesting_user_name": "alice", "job_name": "report"},
            "document": encode(b"%PDF-1.7"),
        },
    )
    assert create_response.status_code == 200
    payload = create_response.json()
    assert payload["job_state"] == "pending"
    job_id = payload["job_id"]

    dispatch_response = client.post("/api/v1/printer/dispatch")
    assert dispatch_response.json() == {
        "claimed": True,
        "job_id": job_id,
        "job_state": "completed",
    }
    assert sink.saved == [(job_id, 0, b"%PDF-1.7")]

    job_response = client.get(f"/api/v1/jobs/{job_id}")
    assert job_response.status_code == 200
    job = job_response.json()
    assert job["job_name"] == "report"
    assert job["job_state"] == "completed"
    assert job["job_state_reasons"] == ["job-completed-successfully"]
    assert job["job_originating_user_name"] == "alice"
    assert job["date_time_at_completed"] is not None


def test_create_send_and_list_jobs(client):
    job_id = client.post("/api/v1/jobs", json={}).json()["job_id"]

    not_completed = client.get("/api/v1/jobs").json()
    assert not_completed == []

    send_response = client.post(
        f"/api/v1/jobs/{job_id}/documents",
        json={"document": encode(b"page"), "last_document": True},
    )
    assert send_response.status_code == 200
    assert send_response.json()["job_state"] == "pending"

    jobs = client.get(
        "/api/v1/jobs", params={"requested_attributes": "job-state,job-name"}
    ).json()
    assert [(job["job_id"], job["job_state"]) for job in jobs] == [
        (job_id, "pending")
    ]
    assert jobs[0]["job_name"] == f"Job {job_id}"


def test_hold_release_cancel_flow(client):
    job_id = client.post(
        "/api/v1/jobs/print", json={"document": encode(b"x")}
    ).json()["job_id"]

    assert client.post(f"/api/v1/jobs/{job_id}/hold").json()["job_state"] == "held"
    assert (
        client.post(f"/api/v1/jobs/{job_id}/release").json()["job_state"]
        == "pending"
    )
    assert (
        client.post(f"/api/v1/jobs/{job_id}/cancel").json()["job_state"]
        == "canceled"
    )

    second_cancel = client.post(f"/api/v1/jobs/{job_id}/cancel")
    assert second_cancel.status_code == 409

    completed = client.get("/api/v1/jobs", params={"which_jobs": "completed"}).json()
    assert [job["job_id"] for job in completed] == [job_id]


def test_missing_job_is_not_found(client):
    assert client.post("/api/v1/jobs/1/cancel").status_code == 404
    assert client.get("/api/v1/jobs/1").status_code == 404


def test_pause_blocks_dispatch(client):
    client.post("/api/v1/jobs/print", json={"document": encode(b"x")})
    client.post("/api/v1/printer/pause")

    assert client.get("/api/v1/printer").json()["printer_state"] == "stopped"
    assert client.post("/api/v1/printer/dispatch").json() == {
        "claimed": False,
        "job_id": None,
        "job_state": None,
    }

    client.post("/api/v1/printer/resume")
    assert client.post("/api/v1/printer/dispatch").json()["claimed"] is True


def test_printer_attributes(client):
    response = client.get("/api/v1/printer")

    assert response.status_code == 200
    printer = response.json()
    assert printer["printer_state"] == "idle"
    assert printer["media_default"] == "iso_a4_210x297mm"
    assert printer["document_format_default"] == "application/pdf"


def test_invalid_template_is_rejected(client):
    response = client.post(
        "/api/v1/jobs/print", json={"template": {"copies": 0}}
    )

    assert response.status_code == 422


def test_printer_attributes_filtered_by_request(client):
    response = client.get(
        "/api/v1/printer", params={"requested_attributes": "printer-state"}
    )

    assert response.status_code == 200
    printer = response.json()
    assert printer["printer_state"] == "idle"
    assert printer["media_supported"] is None
    assert printer["printer_name"] is None


def test_dispatch_endpoint_runs_through_scheduler(client, monkeypatch):
    calls: list[int] = []

    def cycle():
        calls.append(1)
        return None

    monkeypatch.setattr(api_main.scheduler, "cycle", cycle)

    response = client.post("/api/v1/printer/dispatch")

    assert response.json()["claimed"] is False
    assert calls == [1]


def test_shutdown_releases_job_documents(client, monkeypatch):
    monkeypatch.setattr(api_main, "settings", ServerSettings(dispatch_enabled=False))

    with TestClient(app) as running:
        job_id = running.post(
            "/api/v1/jobs/print", json={"document": encode(b"%PDF")}
        ).json()["job_id"]
        documents = list(api_main.registry.get(job_id).documents())
        assert documents[0].closed is False

    assert documents[0].closed is True
