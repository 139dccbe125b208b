import shutil
from pathlib import Path
from unittest import TestCase

from primegen.cache import PrimeCache
from primegen.config import Configuration
from primegen.errors import StorageCorruptionError
from primegen.events import Listener
from primegen.loader import ExistingStateLoader, GenerationState, FIRST_CANDIDATE
from primegen.resultstore import ResultStore
from primegen._utilities import random_unique_filename

PRIMES = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67, 71]


def write_result_file(directory, index, primes):

    path = directory / f"PrimeNumbers{index}.txt"

    with path.open("w", encoding = "utf-8") as fh:

        for prime in primes:
            fh.write(f"{prime}\n")

    return path


class Load_Recorder(Listener):

    def __init__(self):
        self.calls = []

    def on_load_started(self):
        self.calls.append(("started",))

    def on_load_progress(self, file_ordinal, total_files):
        self.calls.append(("progress", file_ordinal, total_files))

    def on_load_finished(self, primes_loaded, files_loaded):
        self.calls.append(("finished", primes_loaded, files_loaded))


class Test_Generation_State(TestCase):

    def test_from_scratch(self):

        state = GenerationState.from_scratch()
        self.assertEqual(len(state.cache), 0)
        self.assertIsNone(state.cache.max_primes())
        self.assertEqual(state.next_candidate, FIRST_CANDIDATE)
        self.assertFalse(state.memory_limit_reached)
        self.assertEqual(state.next_file_index, 1)
        self.assertFalse(state.aborted)
        self.assertTrue(state.is_from_scratch())
        self.assertEqual(GenerationState.from_scratch(5).cache.max_primes(), 5)

        with self.assertRaises(TypeError):
            GenerationState([2, 3])


class Test_Existing_State_Loader(TestCase):

    def setUp(self):

        self.test_dir = random_unique_filename(Path.home())
        self.test_dir.mkdir(exist_ok = False)
        self.test_dir = self.test_dir.resolve()

    def tearDown(self):

        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def loader(self, capacity, max_cached_primes = None, poll_cancel = None, listeners = None):

        store = ResultStore(Configuration(capacity_per_file = capacity), self.test_dir)
        return ExistingStateLoader(store, max_cached_primes, poll_cancel, listeners)

    def test___init__(self):

        with self.assertRaises(TypeError):
            ExistingStateLoader(self.test_dir)

        store = ResultStore(Configuration(), self.test_dir)

        with self.assertRaises(TypeError):
            ExistingStateLoader(store, 5.0)

        with self.assertRaises(TypeError):
            ExistingStateLoader(store, poll_cancel = True)

    def test_load_empty_directory(self):

        state = self.loader(5).load()
        self.assertTrue(state.is_from_scratch())
        self.assertEqual(state.next_candidate, FIRST_CANDIDATE)
        self.assertEqual(state.next_file_index, 1)
        self.assertFalse(state.memory_limit_reached)
        self.assertFalse(state.aborted)

    def test_load_complete_and_partial(self):

        write_result_file(self.test_dir, 1, [2, 3, 5, 7, 11])
        write_result_file(self.test_dir, 2, [13, 17])
        state = self.loader(5).load()
        self.assertEqual(state.cache, [2, 3, 5, 7, 11, 13, 17])
        self.assertEqual(state.next_candidate, 18)
        self.assertEqual(state.next_file_index, 2)
        self.assertEqual(state.files_loaded, 2)
        self.assertFalse(state.memory_limit_reached)
        self.assertFalse(state.is_from_scratch())

    def test_load_one_complete_file(self):

        write_result_file(self.test_dir, 1, [2, 3, 5, 7, 11])
        recorder = Load_Recorder()
        state = self.loader(5, listeners = [recorder]).load()
        self.assertEqual(recorder.calls[-1], ("finished", 5, 1))
        self.assertEqual(state.next_candidate, 12)
        self.assertEqual(state.next_file_index, 2)

        # a gap at index 2 hides file 3
        write_result_file(self.test_dir, 3, [101, 103, 107, 109, 113])
        recorder = Load_Recorder()
        state = self.loader(5, listeners = [recorder]).load()
        self.assertEqual(recorder.calls[-1], ("finished", 5, 1))
        self.assertEqual(state.next_candidate, 12)
        self.assertEqual(state.next_file_index, 2)

    def test_load_all_complete(self):

        write_result_file(self.test_dir, 1, [2, 3, 5, 7, 11])
        write_result_file(self.test_dir, 2, [13, 17, 19, 23, 29])
        state = self.loader(5).load()
        self.assertEqual(len(state.cache), 10)
        self.assertEqual(state.next_candidate, 30)
        self.assertEqual(state.next_file_index, 3)

    def test_load_ignores_after_gap(self):

        write_result_file(self.test_dir, 1, [2, 3, 5])
        write_result_file(self.test_dir, 3, [101, 103, 107])
        state = self.loader(3).load()
        self.assertEqual(state.cache, [2, 3, 5])
        self.assertEqual(state.next_file_index, 2)
        self.assertEqual(state.files_loaded, 1)

    def test_load_overfilled(self):

        path = write_result_file(self.test_dir, 1, PRIMES[:6])

        with self.assertRaises(StorageCorruptionError) as cm:
            self.loader(5).load()

        self.assertEqual(cm.exception.index, 1)
        self.assertEqual(cm.exception.path, path)

    def test_load_empty_file(self):

        write_result_file(self.test_dir, 1, [2, 3, 5])
        (self.test_dir / "PrimeNumbers2.txt").touch()
        write_result_file(self.test_dir, 3, [17, 19])

        with self.assertWarns(UserWarning):
            state = self.loader(3).load()

        self.assertEqual(state.cache, [2, 3, 5])
        self.assertEqual(state.next_candidate, 6)
        self.assertEqual(state.files_loaded, 1)

    def test_load_partial_followed_by_empty(self):

        write_result_file(self.test_dir, 1, [2, 3, 5])
        (self.test_dir / "PrimeNumbers2.txt").touch()
        store = ResultStore(Configuration(capacity_per_file = 5), self.test_dir)

        with self.assertWarns(UserWarning):
            state = ExistingStateLoader(store).load()

        self.assertEqual(state.cache, [2, 3, 5])
        self.assertEqual(state.next_candidate, 6)
        self.assertEqual(state.files_loaded, 1)
        self.assertEqual(state.next_file_index, 1)
        self.assertEqual(state.next_file_index, store.storable_index())

    def test_load_partial_followed_by_nonempty(self):

        write_result_file(self.test_dir, 1, [2, 3])
        path = write_result_file(self.test_dir, 2, [5, 7, 11])

        with self.assertRaises(StorageCorruptionError) as cm:
            self.loader(3).load()

        self.assertEqual(cm.exception.index, 2)
        self.assertEqual(cm.exception.path, path)

    def test_load_not_ascending(self):

        write_result_file(self.test_dir, 1, [2, 3, 5])
        write_result_file(self.test_dir, 2, [5, 7, 11])

        with self.assertRaises(StorageCorruptionError) as cm:
            self.loader(3).load()

        self.assertEqual(cm.exception.index, 2)

        write_result_file(self.test_dir, 2, [7, 13, 11])

        with self.assertRaises(StorageCorruptionError):
            self.loader(3).load()

    def test_load_bad_line(self):

        write_result_file(self.test_dir, 1, [2, 3, 5])
        (self.test_dir / "PrimeNumbers2.txt").write_text("7\nseven\n")

        with self.assertRaises(StorageCorruptionError) as cm:
            self.loader(3).load()

        self.assertEqual(cm.exception.index, 2)

    def test_load_memory_limit(self):

        write_result_file(self.test_dir, 1, [2, 3, 5, 7, 11])
        write_result_file(self.test_dir, 2, [13, 17, 19])
        state = self.loader(5, 7).load()
        self.assertTrue(state.memory_limit_reached)
        self.assertEqual(state.cache, [2, 3, 5, 7, 11])
        self.assertEqual(state.cache.max_primes(), 7)
        self.assertEqual(state.next_candidate, 20)
        self.assertEqual(state.next_file_index, 2)
        self.assertEqual(state.files_loaded, 1)

    def test_load_memory_limit_exact(self):

        write_result_file(self.test_dir, 1, [2, 3, 5, 7, 11])
        write_result_file(self.test_dir, 2, [13, 17])
        state = self.loader(5, 7).load()
        self.assertFalse(state.memory_limit_reached)
        self.assertEqual(len(state.cache), 7)
        self.assertTrue(state.cache.is_full())
        self.assertEqual(state.next_candidate, 18)

    def test_load_memory_limit_skips_later_files(self):

        write_result_file(self.test_dir, 1, [2, 3, 5])
        write_result_file(self.test_dir, 2, [7, 11, 13])
        write_result_file(self.test_dir, 3, [17, 19, 23])
        write_result_file(self.test_dir, 4, [29])
        state = self.loader(3, 4).load()
        self.assertTrue(state.memory_limit_reached)
        self.assertEqual(state.cache, [2, 3, 5])
        self.assertEqual(state.next_candidate, 30)
        self.assertEqual(state.next_file_index, 4)

    def test_load_memory_limit_inconsistent(self):

        write_result_file(self.test_dir, 1, [2, 3, 5])
        write_result_file(self.test_dir, 2, [7, 11, 13])
        write_result_file(self.test_dir, 3, [3])

        with self.assertRaises(StorageCorruptionError) as cm:
            self.loader(3, 4).load()

        self.assertEqual(cm.exception.index, 3)

    def test_load_cancelled(self):

        write_result_file(self.test_dir, 1, [2, 3, 5])
        write_result_file(self.test_dir, 2, [7, 11, 13])
        write_result_file(self.test_dir, 3, [17, 19])
        polls = []

        def poll_cancel():

            polls.append(None)
            return len(polls) >= 2

        state = self.loader(3, poll_cancel = poll_cancel).load()
        self.assertTrue(state.aborted)
        self.assertEqual(state.cache, [2, 3, 5, 7, 11, 13])
        self.assertEqual(state.files_loaded, 2)
        self.assertEqual(state.next_candidate, 14)

    def test_load_events(self):

        write_result_file(self.test_dir, 1, [2, 3, 5])
        write_result_file(self.test_dir, 2, [7, 11])
        recorder = Load_Recorder()
        self.loader(3, listeners = [recorder]).load()
        self.assertEqual(
            recorder.calls,
            [("started",), ("progress", 1, 2), ("progress", 2, 2), ("finished", 5, 2)]
        )

        recorder = Load_Recorder()
        store = ResultStore(Configuration(capacity_per_file = 3), self.test_dir, [recorder])
        ExistingStateLoader(store).load()
        self.assertEqual(recorder.calls[-1], ("finished", 5, 2))

    def test_load_idempotent(self):

        write_result_file(self.test_dir, 1, [2, 3, 5])
        write_result_file(self.test_dir, 2, [7, 11])
        loader = self.loader(3)
        state1 = loader.load()
        state2 = loader.load()
        self.assertEqual(state1.cache, state2.cache)
        self.assertEqual(state1.next_candidate, state2.next_candidate)
        self.assertEqual(state1.next_file_index, state2.next_file_index)
        self.assertIsInstance(state2.cache, PrimeCache)
