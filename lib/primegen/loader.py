"""
    primegen, an incremental prime generator with durable checkpoints.
    Copyright (C) 2021 Michael P. Lane

    This program is free software: you can redistribute it and/or modify
    it under the terms of the GNU General Public License as published by
    the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    This program is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
    GNU General Public License for more details.
"""

import warnings

from .cache import PrimeCache
from .errors import CacheFullError, StorageCorruptionError, CORRUPTED_FILES_MESSAGE, overfilled_file_error
from .events import as_hub
from .resultstore import ResultStore
from ._utilities import check_type, check_return_int_None_default
from ._utilities.signals import never_cancelled

FIRST_CANDIDATE = 2

class GenerationState:
    """Where generation resumes: the rebuilt cache and the next number to test.

    `next_file_index` reports `ResultStore.storable_index()` at load time, the file the next append starts in. It is
    informational; the store recomputes it when it writes.
    """

    def __init__(
        self, cache, next_candidate = FIRST_CANDIDATE, memory_limit_reached = False, next_file_index = 1,
        aborted = False, files_loaded = 0
    ):

        check_type(cache, "cache", PrimeCache)
        self.cache = cache
        self.next_candidate = next_candidate
        self.memory_limit_reached = memory_limit_reached
        self.next_file_index = next_file_index
        self.aborted = aborted
        self.files_loaded = files_loaded

    @classmethod
    def from_scratch(cls, max_cached_primes = None):
        return cls(PrimeCache(max_cached_primes))

    def is_from_scratch(self):
        return self.files_loaded == 0 and len(self.cache) == 0

    def __str__(self):
        return (
            f"{self.__class__.__name__}({len(self.cache)} cached primes, next_candidate = {self.next_candidate}, "
            f"memory_limit_reached = {self.memory_limit_reached}, next_file_index = {self.next_file_index}, "
            f"aborted = {self.aborted}, files_loaded = {self.files_loaded})"
        )

    def __repr__(self):
        return str(self)

class ExistingStateLoader:
    """Rebuilds a `GenerationState` from the checkpoint files of a `ResultStore`.

    Files are trusted once they pass the structural checks (line count, ascending order); primality is not
    re-verified.
    """

    def __init__(self, store, max_cached_primes = None, poll_cancel = None, listeners = None):

        check_type(store, "store", ResultStore)
        max_cached_primes = check_return_int_None_default(max_cached_primes, "max_cached_primes", None)

        if poll_cancel is not None and not callable(poll_cancel):
            raise TypeError("`poll_cancel` must be callable.")

        self._store = store
        self._max_cached_primes = max_cached_primes
        self._poll_cancel = poll_cancel if poll_cancel is not None else never_cancelled
        self._hub = as_hub(listeners) if listeners is not None else store.hub()

    def load(self):

        self._hub.emit("on_load_started")
        files = self._store.list_checkpoint_files()
        state = self._fetch_primes(files)
        state.next_file_index = self._store.storable_index()
        self._hub.emit("on_load_finished", len(state.cache), state.files_loaded)
        return state

    def _fetch_primes(self, files):

        state = GenerationState.from_scratch(self._max_cached_primes)
        capacity = self._store.config().capacity_per_file
        partial_index = None

        for ordinal, (index, path) in enumerate(files.items(), start = 1):

            self._hub.emit("on_load_progress", ordinal, len(files))
            primes = list(self._store.read_primes(path))

            if len(primes) > capacity:
                raise overfilled_file_error(StorageCorruptionError, index, path, capacity)

            if len(primes) == 0:

                warnings.warn(f"The result file with index {index} is empty. Loading stopped before it.\n`{path}`")
                return state

            if partial_index is not None:
                raise StorageCorruptionError(
                    f"{CORRUPTED_FILES_MESSAGE}\nThe result file with index {partial_index} holds fewer than "
                    f"{capacity} primes, but it is followed by the non-empty file with index {index}.",
                    index, path
                )

            if len(primes) < capacity:
                partial_index = index

            state.next_candidate = primes[-1] + 1

            try:
                state.cache.extend(primes)

            except CacheFullError:

                self._handle_memory_overflow(state, files)
                return state

            except ValueError as e:
                raise StorageCorruptionError(
                    f"{CORRUPTED_FILES_MESSAGE}\nThe primes of the result file with index {index} do not continue "
                    f"the ascending order.\n`{path}`",
                    index, path
                ) from e

            state.files_loaded += 1

            if self._poll_cancel():

                state.aborted = True
                return state

        return state

    def _handle_memory_overflow(self, state, files):
        """The cache is full. Recover the next candidate from the final line of the last non-empty file."""

        state.memory_limit_reached = True

        for index in sorted(files.keys(), reverse = True):

            path = files[index]
            last_prime = self._store.last_prime(path)

            if last_prime is not None:
                break

        else:
            raise StorageCorruptionError(CORRUPTED_FILES_MESSAGE)

        next_candidate = last_prime + 1

        if next_candidate < state.next_candidate:
            raise StorageCorruptionError(
                f"{CORRUPTED_FILES_MESSAGE}\nThe last prime of the result file with index {index} is {last_prime}, "
                f"but {state.next_candidate - 1} was already loaded from an earlier file.",
                index, path
            )

        state.next_candidate = next_candidate
