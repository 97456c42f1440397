"""Bounded fan-in compose tests."""

from __future__ import annotations

import unittest

from visitscribe.adapters.storage import InMemoryObjectStore
from visitscribe.services.assembly import compose_many, temporary_prefix


def _seed(store: InMemoryObjectStore, count: int) -> list[str]:
    keys = []
    for seq in range(1, count + 1):
        key = f"sessions/s1/chunk-{seq:05d}.webm"
        store.upload(key, f"[{seq}]".encode("utf-8"), "audio/webm")
        keys.append(key)
    return keys


class _FailingFinalComposeStore(InMemoryObjectStore):
    def compose(self, sources, destination):
        if destination == "dest.webm":
            raise RuntimeError("compose rejected")
        super().compose(sources, destination)


class _InterleavingStore(InMemoryObjectStore):
    """Runs a complete second merge into the same destination after the first compose call."""

    merge_sources: list[str] = []
    interleaved_rounds: int | None = None

    def compose(self, sources, destination):
        super().compose(sources, destination)
        if self.interleaved_rounds is None:
            self.interleaved_rounds = 0
            self.interleaved_rounds = compose_many(self, self.merge_sources, destination)


class ComposeManyTests(unittest.TestCase):
    def test_single_source_is_copied_without_compose(self) -> None:
        store = InMemoryObjectStore()
        sources = _seed(store, 1)

        rounds = compose_many(store, sources, "sessions/s1/assembled.webm")

        self.assertEqual(rounds, 0)
        self.assertEqual(store.compose_calls, [])
        self.assertEqual(store.download("sessions/s1/assembled.webm"), b"[1]")

    def test_batch_that_fits_composes_directly_into_destination(self) -> None:
        store = InMemoryObjectStore()
        sources = _seed(store, 32)

        rounds = compose_many(store, sources, "out.webm")

        self.assertEqual(rounds, 1)
        self.assertEqual(len(store.compose_calls), 1)
        self.assertEqual(store.compose_calls[0][1], "out.webm")

    def test_sixty_five_chunks_take_two_rounds_and_keep_order(self) -> None:
        store = InMemoryObjectStore()
        sources = _seed(store, 65)

        rounds = compose_many(store, sources, "sessions/s1/assembled.webm")

        self.assertEqual(rounds, 2)
        expected = b"".join(f"[{seq}]".encode("utf-8") for seq in range(1, 66))
        self.assertEqual(store.download("sessions/s1/assembled.webm"), expected)
        self.assertTrue(all(len(sources) <= 32 for sources, _ in store.compose_calls))

    def test_temporaries_are_removed_after_success(self) -> None:
        store = InMemoryObjectStore()
        sources = _seed(store, 70)

        compose_many(store, sources, "dest.webm")

        self.assertEqual(store.list_prefix(temporary_prefix("dest.webm")), [])

    def test_temporaries_are_removed_when_final_compose_fails(self) -> None:
        store = _FailingFinalComposeStore()
        sources = _seed(store, 40)

        with self.assertRaises(RuntimeError):
            compose_many(store, sources, "dest.webm")

        self.assertEqual(len(store.compose_calls), 2)
        self.assertEqual(store.list_prefix(temporary_prefix("dest.webm")), [])
        self.assertFalse(store.exists("dest.webm"))

    def test_overlapping_merges_into_one_destination_both_succeed(self) -> None:
        store = _InterleavingStore()
        sources = _seed(store, 40)
        store.merge_sources = sources
        expected = b"".join(f"[{seq}]".encode("utf-8") for seq in range(1, 41))

        rounds = compose_many(store, sources, "dest.webm")

        self.assertEqual(rounds, 2)
        self.assertEqual(store.interleaved_rounds, 2)
        self.assertEqual(store.download("dest.webm"), expected)
        self.assertEqual(store.list_prefix(temporary_prefix("dest.webm")), [])

    def test_smaller_batch_size_adds_rounds(self) -> None:
        store = InMemoryObjectStore()
        sources = _seed(store, 9)

        rounds = compose_many(store, sources, "dest.webm", batch_size=2)

        self.assertEqual(rounds, 4)
        expected = b"".join(f"[{seq}]".encode("utf-8") for seq in range(1, 10))
        self.assertEqual(store.download("dest.webm"), expected)

    def test_empty_sources_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            compose_many(InMemoryObjectStore(), [], "dest.webm")


if __name__ == "__main__":
    unittest.main()
