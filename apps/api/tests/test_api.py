"""HTTP API tests for upload signing, finalize, polling and job listing."""

from __future__ import annotations

import os
import tempfile
import unittest
from datetime import UTC, datetime, timedelta
from pathlib import Path

from fastapi.testclient import TestClient

from pipeline_fixtures import LONG_TRANSCRIPT, build_pipeline
from visitscribe.adapters.storage import InMemoryObjectStore
from visitscribe.adapters.transcription import MockTranscriber
from visitscribe.core.config import get_settings
from visitscribe.main import create_app
from visitscribe.schemas.job import JobMetadata


class _ApiCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.pipeline = build_pipeline(Path(self._tmp.name))
        self.client = TestClient(create_app(self.pipeline.settings, self.pipeline.adapters))

    def tearDown(self) -> None:
        self.client.close()
        self._tmp.cleanup()


class HealthAndSigningTests(_ApiCase):
    def test_health(self) -> None:
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"ok": True})

    def test_sign_upload_returns_chunk_path(self) -> None:
        response = self.client.post(
            "/api/v1/uploads/sign",
            json={"sessionId": "s1", "userId": "U1", "seq": 7, "contentType": "audio/webm;codecs=opus"},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["ok"])
        self.assertEqual(body["objectPath"], "sessions/s1/chunk-00007.webm")
        self.assertIn("method=PUT", body["signedUrl"])
        self.assertIn("expires=900", body["signedUrl"])

    def test_sign_upload_uses_mp4_extension(self) -> None:
        response = self.client.post(
            "/api/v1/uploads/sign",
            json={"sessionId": "s1", "userId": "U1", "seq": 1, "contentType": "audio/mp4"},
        )
        self.assertEqual(response.json()["objectPath"], "sessions/s1/chunk-00001.mp4")

    def test_sign_upload_rejects_missing_fields_and_bad_seq(self) -> None:
        for body in (
            {"sessionId": "s1", "seq": 1},
            {"sessionId": "s1", "userId": "U1", "seq": 0},
            {"sessionId": "s1", "userId": "U1", "seq": "first"},
        ):
            with self.subTest(body=body):
                response = self.client.post("/api/v1/uploads/sign", json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["code"], "VALIDATION_ERROR")
                self.assertFalse(response.json()["ok"])


class FinalizeApiTests(_ApiCase):
    def test_finalize_then_replay(self) -> None:
        self.pipeline.upload_chunks("s1", 3)
        body = {"sessionId": "s1", "userId": "U1", "patientName": "Sato"}

        first = self.client.post("/api/v1/finalize", json=body)
        second = self.client.post("/api/v1/finalize", json=body)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json(), {"ok": True, "jobId": "mock-op-1", "replayed": False})
        self.assertEqual(second.json(), {"ok": True, "jobId": "mock-op-1", "replayed": True})

    def test_finalize_without_chunks_is_400(self) -> None:
        response = self.client.post("/api/v1/finalize", json={"sessionId": "empty", "userId": "U1"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "NO_CHUNKS")
        self.assertEqual(response.json()["details"], {"session_id": "empty"})

    def test_finalize_without_user_is_400(self) -> None:
        response = self.client.post("/api/v1/finalize", json={"sessionId": "s1"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

    def test_finalize_with_malformed_body_is_400(self) -> None:
        response = self.client.post("/api/v1/finalize", json={"sessionId": ["s1"], "userId": "U1"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

    def test_transcode_failure_is_500(self) -> None:
        self.pipeline.upload_chunks("s1", 1)
        self.pipeline.transcoder.failure_message = "bad input"

        response = self.client.post("/api/v1/finalize", json={"sessionId": "s1", "userId": "U1"})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["code"], "TRANSCODE_FAILED")


class PollApiTests(_ApiCase):
    def test_poll_running_then_done(self) -> None:
        self.pipeline.upload_chunks("s1", 2)
        job_id = self.client.post("/api/v1/finalize", json={"sessionId": "s1", "userId": "U1"}).json()["jobId"]

        running = self.client.get(f"/api/v1/jobs/{job_id}")
        self.assertEqual(running.status_code, 200)
        self.assertEqual(running.json(), {"ok": True, "status": "RUNNING"})

        self.pipeline.transcriber.complete(job_id, LONG_TRANSCRIPT)
        done = self.client.get(f"/api/v1/jobs/{job_id}").json()
        self.assertEqual(done["status"], "DONE")
        self.assertEqual(done["transcript"], LONG_TRANSCRIPT)
        self.assertIn("summary_top3", done["summary"])

        again = self.client.get(f"/api/v1/jobs/{job_id}").json()
        self.assertEqual(again["status"], "DONE")
        self.assertEqual(again["summary"]["summary_top3"], done["summary"]["summary_top3"])
        self.assertEqual(len(self.pipeline.messenger.sent), 1)

    def test_poll_unknown_job_is_502(self) -> None:
        response = self.client.get("/api/v1/jobs/mock-op-999")

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["code"], "TRANSCRIPTION_QUERY_FAILED")

    def test_poll_failed_transcription_is_502(self) -> None:
        self.pipeline.upload_chunks("s1", 1)
        job_id = self.client.post("/api/v1/finalize", json={"sessionId": "s1", "userId": "U1"}).json()["jobId"]
        self.pipeline.transcriber.fail(job_id, "INVALID_ARGUMENT: bad audio")

        response = self.client.get(f"/api/v1/jobs/{job_id}")

        self.assertEqual(response.status_code, 502)
        body = response.json()
        self.assertEqual(body["code"], "TRANSCRIPTION_FAILED")
        self.assertEqual(body["details"], {"job_id": job_id, "reason": "INVALID_ARGUMENT: bad audio"})

    def test_poll_extraction_failure_is_500(self) -> None:
        self.pipeline.upload_chunks("s1", 1)
        job_id = self.client.post("/api/v1/finalize", json={"sessionId": "s1", "userId": "U1"}).json()["jobId"]
        self.pipeline.transcriber.complete(job_id, LONG_TRANSCRIPT, shape="missing")

        response = self.client.get(f"/api/v1/jobs/{job_id}")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["code"], "TRANSCRIPT_EXTRACTION_FAILED")


class JobListApiTests(_ApiCase):
    def test_jobs_are_listed_newest_first(self) -> None:
        now = datetime.now(UTC)
        for index in range(3):
            self.pipeline.records.write_job_record(
                JobMetadata(
                    session_id=f"s{index}",
                    user_id="U1",
                    job_id=f"op-{index}",
                    context={"patientName": f"patient {index}"},
                    finalized_at=now - timedelta(minutes=10 - index),
                )
            )

        response = self.client.get("/api/v1/jobs")

        self.assertEqual(response.status_code, 200)
        jobs = response.json()["jobs"]
        self.assertEqual([job["jobId"] for job in jobs], ["op-2", "op-1", "op-0"])
        self.assertEqual(jobs[0]["patientName"], "patient 2")
        self.assertEqual(jobs[0]["sessionId"], "s2")

    def test_listing_is_capped(self) -> None:
        now = datetime.now(UTC)
        for index in range(25):
            self.pipeline.records.write_job_record(
                JobMetadata(session_id=f"s{index}", job_id=f"op-{index}", finalized_at=now + timedelta(seconds=index))
            )

        jobs = self.client.get("/api/v1/jobs").json()["jobs"]

        self.assertEqual(len(jobs), 20)
        self.assertEqual(jobs[0]["jobId"], "op-24")


class SettingsWiringTests(unittest.TestCase):
    _env_keys = (
        "VISITSCRIBE_STORAGE_PROVIDER",
        "VISITSCRIBE_SPEECH_PROVIDER",
        "VISITSCRIBE_LLM_PROVIDER",
        "VISITSCRIBE_PUSH_PROVIDER",
        "VISITSCRIBE_TRANSCODER_PROVIDER",
        "VISITSCRIBE_DATA_DIR",
    )

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self._old_env = {key: os.environ.get(key) for key in self._env_keys}
        os.environ["VISITSCRIBE_STORAGE_PROVIDER"] = "memory"
        os.environ["VISITSCRIBE_SPEECH_PROVIDER"] = "mock"
        os.environ["VISITSCRIBE_LLM_PROVIDER"] = "mock"
        os.environ["VISITSCRIBE_PUSH_PROVIDER"] = "mock"
        os.environ["VISITSCRIBE_TRANSCODER_PROVIDER"] = "passthrough"
        os.environ["VISITSCRIBE_DATA_DIR"] = self._tmp.name
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()
        self._tmp.cleanup()

    def test_create_app_builds_mock_adapters_from_environment(self) -> None:
        app = create_app()

        self.assertIsInstance(app.state.adapters.store, InMemoryObjectStore)
        self.assertIsInstance(app.state.adapters.transcriber, MockTranscriber)
        self.assertEqual(app.state.settings.data_dir, Path(self._tmp.name))

    def test_openapi_lists_pipeline_paths(self) -> None:
        paths = TestClient(create_app()).get("/openapi.json").json()["paths"]

        self.assertIn("/api/v1/uploads/sign", paths)
        self.assertIn("/api/v1/finalize", paths)
        self.assertIn("/api/v1/jobs/{jobId}", paths)
        self.assertIn("/api/v1/jobs", paths)


if __name__ == "__main__":
    unittest.main()
