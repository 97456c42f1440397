"""Object key layout shared by every instance."""

import re

CHUNK_NAME_PATTERN = re.compile(r"chunk-\d+\.(webm|mp4)$")
JOB_META_PREFIX = "jobs-meta/by-job/"


def chunk_key(session_id: str, seq: int, ext: str) -> str:
    return f"sessions/{session_id}/chunk-{seq:05d}.{ext}"


def session_prefix(session_id: str) -> str:
    return f"sessions/{session_id}/"


def assembled_key(session_id: str, ext: str) -> str:
    return f"sessions/{session_id}/assembled.{ext}"


def audio_key(session_id: str) -> str:
    return f"audio/{session_id}.wav"


def session_meta_key(session_id: str) -> str:
    return f"jobs-meta/by-session/{session_id}.json"


def job_meta_key(job_id: str) -> str:
    return f"{JOB_META_PREFIX}{job_id}.json"


def lock_key(job_id: str, epoch: int = 0) -> str:
    base = f"deliveries/{job_id}.lock"
    return base if epoch == 0 else f"{base}.{epoch}"


def lock_epoch(job_id: str, key: str) -> int | None:
    """Inverse of ``lock_key``; ``None`` for keys that are not a lock of ``job_id``."""
    base = lock_key(job_id)
    if key == base:
        return 0
    suffix = key[len(base) + 1 :] if key.startswith(f"{base}.") else ""
    return int(suffix) if suffix.isdigit() else None


def done_key(job_id: str) -> str:
    return f"deliveries/{job_id}.done"


def retry_key_key(job_id: str) -> str:
    return f"deliveries/{job_id}.retryKey"


def transcript_key(session_id: str) -> str:
    return f"transcripts/{session_id}.txt"


def summary_key(session_id: str) -> str:
    return f"summaries/{session_id}.json"


def detail_key(session_id: str) -> str:
    return f"summaries/{session_id}.full.json"


def detail_html_key(session_id: str) -> str:
    return f"summaries/{session_id}.html"
