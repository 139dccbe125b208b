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

from datetime import datetime

from .config import Configuration
from .errors import CacheFullError, UnsupportedOperationError
from .events import EventHub
from .loader import ExistingStateLoader
from .primality import PrimalityTester
from .resultstore import ResultStore
from ._utilities import check_type, LOCAL_TIMEZONE
from ._utilities.signals import never_cancelled

class EngineState:

    LOADING           = "loading"
    MEMORY_GENERATION = "memory generation"
    OVERFLOWING       = "overflowing"
    DISK_GENERATION   = "disk generation"
    STOPPED           = "stopped"

class GenerationEngine:
    """Drives prime discovery: load the checkpoints, generate in memory, then overflow to disk.

    The engine runs on the calling thread and polls `poll_cancel()` once per candidate, before testing it. A
    candidate whose test has started is always finished, and a prime it yields is kept.

    Every exception escaping `run` after loading has the attribute `candidate`, the number that was being tested.
    """

    def __init__(self, config = None, directory = None, poll_cancel = None, tester = None, listeners = None):

        if config is None:
            config = Configuration()

        check_type(config, "config", Configuration)

        if poll_cancel is not None and not callable(poll_cancel):
            raise TypeError("`poll_cancel` must be callable.")

        if tester is not None:
            check_type(tester, "tester", PrimalityTester)

        self._config = config
        self._hub = EventHub(listeners)
        self._poll_cancel = poll_cancel if poll_cancel is not None else never_cancelled
        self._owns_tester = tester is None
        self._tester = tester if tester is not None else PrimalityTester.from_config(config)
        self._store = ResultStore(config, directory, self._hub)
        self._loader = ExistingStateLoader(self._store, config.max_cached_primes, self._poll_cancel, self._hub)
        self._state = None
        self._cache = None
        self._candidate = None

    def add_listener(self, listener):
        self._hub.add_listener(listener)

    def store(self):
        return self._store

    def state(self):
        return self._state

    def cache(self):
        return self._cache

    def candidate(self):
        """The next number to test."""
        return self._candidate

    def _set_state(self, new_state):

        old_state = self._state
        self._state = new_state
        self._hub.emit("on_state_changed", old_state, new_state)

    def run(self, start_time = None):
        """Load the existing checkpoints and generate primes until cancelled or until a fatal error.

        :param start_time: (type `datetime.datetime`, default now) Reference time for the first checkpoint event.
        :return: (type `GenerationState`) The state as loaded, with `cache` and `next_candidate` advanced to where
        generation stopped.
        """

        try:
            return self._run(start_time)

        finally:

            if self._owns_tester:
                self._tester.close()

    def _run(self, start_time):

        self._set_state(EngineState.LOADING)

        try:
            loaded = self._loader.load()

        except Exception:

            self._set_state(EngineState.STOPPED)
            raise

        self._cache = loaded.cache
        self._candidate = loaded.next_candidate

        if loaded.aborted:

            self._set_state(EngineState.STOPPED)
            return loaded

        try:

            self._hub.emit("on_generation_started")
            self._store.generation_started(start_time if start_time is not None else datetime.now(LOCAL_TIMEZONE))

            if not loaded.memory_limit_reached:

                self._set_state(EngineState.MEMORY_GENERATION)

                if not self._generate_in_memory():
                    # cancelled
                    loaded.next_candidate = self._candidate
                    self._set_state(EngineState.STOPPED)
                    return loaded

                loaded.memory_limit_reached = True

            self._set_state(EngineState.DISK_GENERATION)
            self._generate_on_disk()

        except Exception as e:

            e.candidate = self._candidate
            self._set_state(EngineState.STOPPED)
            raise

        loaded.next_candidate = self._candidate
        self._set_state(EngineState.STOPPED)
        return loaded

    def _generate_in_memory(self):
        """Return `True` if the cache filled up, `False` if generation was cancelled."""

        cache = self._cache
        capacity = self._config.capacity_per_file
        first_unsaved = len(cache)

        while not self._poll_cancel():

            candidate = self._candidate

            if self._tester.is_prime(cache, candidate):

                try:
                    cache.append(candidate)

                except CacheFullError:

                    self._set_state(EngineState.OVERFLOWING)
                    self._store_unsaved_after_overflow(first_unsaved, candidate)
                    self._candidate = candidate + 1
                    return True

                if len(cache) % capacity == 0:

                    self._store.append(cache[first_unsaved:])
                    first_unsaved = len(cache)

            self._candidate = candidate + 1

        return False

    def _store_unsaved_after_overflow(self, first_unsaved, prime):
        """`prime` passed the primality test but did not fit in the cache."""

        self._store.append(self._cache[first_unsaved:])
        self._store.append([prime])

    def _generate_on_disk(self):
        raise UnsupportedOperationError(
            f"The prime cache is full at {len(self._cache)} primes and disk-backed generation is not supported. "
            f"Generation stopped before testing {self._candidate}."
        )
