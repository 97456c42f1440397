"""Bounded fan-in merge of uploaded chunks."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from uuid import uuid4

from visitscribe.adapters.storage import ObjectStore
from visitscribe.core.logging_safety import safe_log_reason

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 32


def temporary_prefix(destination: str) -> str:
    return f"{destination}.compose."


def compose_many(
    store: ObjectStore,
    sources: Sequence[str],
    destination: str,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Concatenate ``sources`` in order into ``destination``.

    The store accepts at most ``batch_size`` sources per compose, so the queue
    is merged round by round until one object remains. Returns the number of
    rounds performed.

    Intermediate objects live under a prefix owned by this call alone.
    """
    if not sources:
        raise ValueError("compose_many requires at least one source")
    if batch_size < 2:
        raise ValueError("batch_size must be at least 2")

    run_prefix = f"{temporary_prefix(destination)}{uuid4().hex}."
    queue = list(sources)
    rounds = 0
    try:
        while len(queue) > 1:
            merged: list[str] = []
            for index, start in enumerate(range(0, len(queue), batch_size)):
                batch = queue[start : start + batch_size]
                if len(batch) == 1:
                    merged.append(batch[0])
                    continue
                if len(queue) <= batch_size:
                    target = destination
                else:
                    target = f"{run_prefix}{rounds}.{index}"
                store.compose(batch, target)
                merged.append(target)
            queue = merged
            rounds += 1

        if queue[0] != destination:
            store.copy(queue[0], destination)
    finally:
        _cleanup(store, run_prefix)
    return rounds


def _cleanup(store: ObjectStore, prefix: str) -> None:
    try:
        store.delete_prefix(prefix)
    except Exception as exc:
        logger.warning("assembly.cleanup_failed reason=%s", safe_log_reason(exc))


__all__ = ["DEFAULT_BATCH_SIZE", "compose_many", "temporary_prefix"]
