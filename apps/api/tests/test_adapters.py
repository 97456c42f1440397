"""Adapter and record store tests that need no cloud credentials."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from visitscribe.adapters.audio import FfmpegTranscoder, PassthroughTranscoder
from visitscribe.adapters.factory import build_adapters
from visitscribe.adapters.generation import GenerationOptions, MockTextGenerator
from visitscribe.adapters.messaging import MockPushMessenger
from visitscribe.adapters.storage import InMemoryObjectStore, ObjectNotFoundError
from visitscribe.adapters.transcription import MockTranscriber
from visitscribe.core.config import Settings
from visitscribe.core.logging_safety import safe_log_identifier, safe_log_reason
from visitscribe.errors import TranscodeError
from visitscribe.repositories import layout
from visitscribe.repositories.records import PipelineRecords
from visitscribe.schemas.job import JobMetadata


class InMemoryObjectStoreTests(unittest.TestCase):
    def test_create_if_absent_has_one_winner(self) -> None:
        store = InMemoryObjectStore()

        self.assertTrue(store.create_if_absent("a", b"1", "text/plain"))
        self.assertFalse(store.create_if_absent("a", b"2", "text/plain"))
        self.assertEqual(store.download("a"), b"1")

    def test_compose_rejects_too_many_sources(self) -> None:
        store = InMemoryObjectStore()
        keys = [f"k{n:02d}" for n in range(33)]
        for key in keys:
            store.upload(key, b"x", "audio/webm")

        with self.assertRaises(ValueError):
            store.compose(keys, "dest")

    def test_download_missing_raises(self) -> None:
        with self.assertRaises(ObjectNotFoundError):
            InMemoryObjectStore().download("nope")

    def test_delete_prefix(self) -> None:
        store = InMemoryObjectStore()
        store.upload("p/a", b"", "text/plain")
        store.upload("p/b", b"", "text/plain")
        store.upload("q/a", b"", "text/plain")

        store.delete_prefix("p/")

        self.assertEqual(store.list_prefix(""), ["q/a"])


class FfmpegTranscoderTests(unittest.TestCase):
    def test_command_normalizes_to_mono_16k_pcm(self) -> None:
        command = FfmpegTranscoder(binary="ffmpeg").build_command(Path("in.webm"), Path("out.wav"))

        self.assertEqual(
            command,
            [
                "ffmpeg", "-y", "-hide_banner", "-loglevel", "error", "-i", "in.webm",
                "-ar", "16000", "-ac", "1", "-c:a", "pcm_s16le", "out.wav",
            ],
        )

    def test_missing_binary_raises_transcode_error(self) -> None:
        transcoder = FfmpegTranscoder(binary="definitely-not-an-ffmpeg-binary")

        with self.assertRaises(TranscodeError) as ctx:
            transcoder.to_wav16k_mono(Path("in.webm"), Path("out.wav"))

        self.assertEqual(ctx.exception.payload.code, "TRANSCODE_FAILED")

    def test_stderr_output_is_a_failure_even_with_zero_exit(self) -> None:
        completed = type("Completed", (), {"returncode": 0, "stderr": b"Header missing\n", "stdout": b""})()
        with patch("visitscribe.adapters.audio.ffmpeg.shutil.which", return_value="/usr/bin/ffmpeg"), patch(
            "visitscribe.adapters.audio.ffmpeg.subprocess.run", return_value=completed
        ):
            with self.assertRaises(TranscodeError) as ctx:
                FfmpegTranscoder().to_wav16k_mono(Path("in.webm"), Path("out.wav"))

        self.assertEqual(ctx.exception.payload.details, {"reason": "Header missing"})


class PipelineRecordsTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = InMemoryObjectStore()
        self.records = PipelineRecords(self.store, cache_dir=Path(self._tmp.name))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_job_record_falls_back_to_local_cache(self) -> None:
        record = JobMetadata(session_id="s1", user_id="U1", job_id="op-1")
        self.records.write_cache_record(record)

        loaded = self.records.read_job_record("op-1")

        self.assertIsNotNone(loaded)
        self.assertEqual(loaded.session_id, "s1")

    def test_listing_orders_naive_and_aware_timestamps_together(self) -> None:
        rows = (
            ("op-naive", "2026-01-01T12:00:00"),
            ("op-aware", "2026-01-01T11:00:00+00:00"),
            ("op-undated", None),
        )
        for job_id, finalized_at in rows:
            payload = {"sessionId": f"s-{job_id}", "jobId": job_id, "finalizedAt": finalized_at}
            self.store.upload(layout.job_meta_key(job_id), json.dumps(payload).encode("utf-8"), "application/json")

        listed = self.records.list_job_records()

        self.assertEqual([record.job_id for record in listed], ["op-naive", "op-aware", "op-undated"])

    def test_done_marker_is_create_once(self) -> None:
        self.records.mark_done("op-1")
        first = self.store.download(layout.done_key("op-1"))
        self.records.mark_done("op-1")

        self.assertTrue(self.records.is_done("op-1"))
        self.assertEqual(self.store.download(layout.done_key("op-1")), first)

    def test_lock_records_acquisition_time(self) -> None:
        self.assertTrue(self.records.acquire_delivery_lock("op-1"))
        self.assertFalse(self.records.acquire_delivery_lock("op-1", stale_after_seconds=900))

        payload = json.loads(self.store.download(layout.lock_key("op-1")))
        self.assertEqual(payload["jobId"], "op-1")
        self.assertIn("acquiredAt", payload)

    def test_unreadable_lock_counts_as_stale(self) -> None:
        self.store.upload(layout.lock_key("op-1"), b"garbage", "application/json")

        self.assertTrue(self.records.acquire_delivery_lock("op-1", stale_after_seconds=900))
        self.assertFalse(self.records.acquire_delivery_lock("op-1", stale_after_seconds=900))

    def test_no_takeover_after_done(self) -> None:
        self.store.upload(layout.lock_key("op-1"), b"garbage", "application/json")
        self.records.mark_done("op-1")

        self.assertFalse(self.records.acquire_delivery_lock("op-1", stale_after_seconds=900))

    def test_summary_json_is_written_last(self) -> None:
        self.records.save_summary_artifacts("s1", {"a": 1}, detail={"b": 2}, html="<p>x</p>")

        writes = sorted(self.store.objects.items(), key=lambda item: item[1].generation)
        self.assertEqual(writes[-1][0], layout.summary_key("s1"))
        self.assertEqual(self.records.load_summary("s1"), {"a": 1})


class FactoryTests(unittest.TestCase):
    def test_mock_providers(self) -> None:
        settings = Settings(
            storage_provider="memory",
            speech_provider="mock",
            llm_provider="mock",
            push_provider="mock",
            transcoder_provider="passthrough",
        )

        adapters = build_adapters(settings)

        self.assertIsInstance(adapters.store, InMemoryObjectStore)
        self.assertIsInstance(adapters.transcriber, MockTranscriber)
        self.assertIsInstance(adapters.generator, MockTextGenerator)
        self.assertIsInstance(adapters.messenger, MockPushMessenger)
        self.assertIsInstance(adapters.transcoder, PassthroughTranscoder)

    def test_generation_defaults(self) -> None:
        options = GenerationOptions()
        self.assertEqual((options.temperature, options.top_p), (0.2, 0.9))


class LoggingSafetyTests(unittest.TestCase):
    def test_identifiers_are_hashed(self) -> None:
        token = safe_log_identifier("U1234567890", prefix="uid")
        self.assertTrue(token.startswith("uid-"))
        self.assertNotIn("U1234567890", token)
        self.assertEqual(safe_log_identifier("", prefix="uid"), "uid-missing")

    def test_reasons_are_single_line_and_capped(self) -> None:
        reason = safe_log_reason(RuntimeError("line one\nline two " + "x" * 400))
        self.assertTrue(reason.startswith("RuntimeError:line one line two"))
        self.assertNotIn("\n", reason)
        self.assertLessEqual(len(reason), len("RuntimeError:") + 200)


if __name__ == "__main__":
    unittest.main()
