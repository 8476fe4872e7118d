"""Unit tests for the reader/writer lock and concurrent store access."""

import threading
import time

import pytest

from minisearch.search.locking import ReadWriteLock
from minisearch.search.scoring import ScoringEngine


pytestmark = pytest.mark.unit

TIMEOUT = 5.0


class TestReadWriteLock:
    def test_readers_share_access(self):
        lock = ReadWriteLock()
        both_inside = threading.Barrier(2, timeout=TIMEOUT)

        def reader():
            with lock.read():
                both_inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(TIMEOUT)

        assert not any(thread.is_alive() for thread in threads)
        assert lock.readers == 0

    def test_writer_waits_for_readers(self):
        lock = ReadWriteLock()
        writer_done = threading.Event()

        def writer():
            with lock.write():
                writer_done.set()

        lock.acquire_read()
        thread = threading.Thread(target=writer)
        thread.start()
        assert not writer_done.wait(0.1)

        lock.release_read()
        thread.join(TIMEOUT)
        assert writer_done.is_set()
        assert not lock.writer_active

    def test_waiting_writer_blocks_new_readers(self):
        lock = ReadWriteLock()
        order: list[str] = []
        reader_started = threading.Event()

        def writer():
            with lock.write():
                order.append("writer")

        def late_reader():
            reader_started.set()
            with lock.read():
                order.append("reader")

        lock.acquire_read()
        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        while not lock._writers_waiting:
            time.sleep(0.001)

        reader_thread = threading.Thread(target=late_reader)
        reader_thread.start()
        reader_started.wait(TIMEOUT)
        assert not order

        lock.release_read()
        writer_thread.join(TIMEOUT)
        reader_thread.join(TIMEOUT)
        assert order == ["writer", "reader"]

    def test_unbalanced_release(self):
        lock = ReadWriteLock()

        with pytest.raises(RuntimeError):
            lock.release_read()
        with pytest.raises(RuntimeError):
            lock.release_write()

    def test_context_managers_release_on_error(self):
        lock = ReadWriteLock()

        with pytest.raises(KeyError), lock.write():
            raise KeyError("boom")

        assert not lock.writer_active
        with lock.read():
            assert lock.readers == 1


class TestConcurrentStoreAccess:
    def test_queries_during_ingestion_see_whole_documents(self, store):
        store.index_document("seed token", "seed")
        engine = ScoringEngine(store)
        errors: list[Exception] = []
        stop = threading.Event()

        def query():
            try:
                while not stop.is_set():
                    for result in engine.rank_tfidf(["token"]):
                        # every posting refers to a document already recorded
                        store.get_document(result.doc_id)
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

        readers = [threading.Thread(target=query) for _ in range(3)]
        for thread in readers:
            thread.start()
        for n in range(200):
            store.index_document(f"token word{n}", f"doc-{n}")
        stop.set()
        for thread in readers:
            thread.join(TIMEOUT)

        assert not errors
        assert store.document_count == 201
        assert len(store.get_postings("token")) == 201
