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

import threading
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .config import DEFAULT_CHUNK_SIZE, DEFAULT_NUM_WORKERS
from .errors import InvalidInputError, UnsupportedOperationError
from ._utilities import check_return_int

_INT64_MAX = int(np.iinfo(np.int64).max)

def factor_bound(known_primes_asc, candidate):
    """Binary search for the trial factors needed to test `candidate`.

    :param known_primes_asc: Ascending primes, gapless up to the last one.
    :param candidate: (type `int`)
    :return: (type `tuple`) `(count, exact_factor)`. `count` is the number of primes `p` at the front of
    `known_primes_asc` with `p * p < candidate`. If the search hits a prime with `p * p == candidate`, then
    `exact_factor` is that prime, otherwise it is `None`.
    """

    lo = 0
    hi = len(known_primes_asc)

    while lo < hi:

        mid = (lo + hi) // 2
        prime = known_primes_asc[mid]
        square = prime * prime

        if square < candidate:
            lo = mid + 1

        elif square > candidate:
            hi = mid

        else:
            return mid, prime

    return lo, None

def _has_factor(candidate, factors, dtype, stop = None):

    if stop is not None and stop.is_set():
        return False

    found = bool(np.any(np.remainder(candidate, np.asarray(factors, dtype = dtype)) == 0))

    if found and stop is not None:
        stop.set()

    return found

class PrimalityTester:
    """Trial division of a candidate by the cached primes up to its square root.

    With `num_workers > 1`, the factors are split into chunks of `chunk_size` and divided on a thread pool. The first
    worker to find a factor sets a shared stop flag that the other workers check before starting each chunk.

    `extension`, if given, is a callable `extension(after, candidate)` returning an iterable of the ascending primes
    greater than `after`. It is consulted only when the cached primes do not reach the square root of the
    candidate.
    """

    def __init__(self, num_workers = DEFAULT_NUM_WORKERS, chunk_size = DEFAULT_CHUNK_SIZE, extension = None):

        num_workers = check_return_int(num_workers, "num_workers")
        chunk_size = check_return_int(chunk_size, "chunk_size")

        if num_workers <= 0:
            raise ValueError("`num_workers` must be positive.")

        if chunk_size <= 0:
            raise ValueError("`chunk_size` must be positive.")

        if extension is not None and not callable(extension):
            raise TypeError("`extension` must be callable.")

        self._num_workers = num_workers
        self._chunk_size = chunk_size
        self._extension = extension

        if num_workers > 1:
            self._executor = ThreadPoolExecutor(max_workers = num_workers, thread_name_prefix = "primegen-trial")

        else:
            self._executor = None

    @classmethod
    def from_config(cls, config, extension = None):
        return cls(config.num_workers, config.chunk_size, extension)

    def num_workers(self):
        return self._num_workers

    def is_prime(self, known_primes_asc, candidate):

        candidate = check_return_int(candidate, "candidate")

        if candidate < 0:
            raise InvalidInputError(f"`candidate` must be non-negative, not {candidate}.")

        if candidate < 2:
            return False

        if candidate == 2:
            return True

        if candidate % 2 == 0:
            return False

        count, exact_factor = factor_bound(known_primes_asc, candidate)

        if exact_factor is not None:
            return False

        if count < len(known_primes_asc):
            factors = known_primes_asc[:count]

        else:
            factors = self._extended_factors(known_primes_asc, candidate)

            if factors is None:
                return False

        return not self._any_divides(candidate, factors)

    def _extended_factors(self, known_primes_asc, candidate):
        """Return every factor needed beyond the cache, or `None` if an exact square root was found."""

        if len(known_primes_asc) == 0:
            raise InvalidInputError(
                f"Cannot test {candidate} against an empty prime cache. At least the prime 2 must be known."
            )

        last = known_primes_asc[-1]

        if self._extension is None:
            raise UnsupportedOperationError(
                f"The largest cached prime {last} is too small to test {candidate}, and disk-backed trial division "
                "is not supported."
            )

        factors = list(known_primes_asc)

        for prime in self._extension(last, candidate):

            square = prime * prime

            if square == candidate:
                return None

            elif square > candidate:
                return factors

            factors.append(prime)

        raise UnsupportedOperationError(
            f"The prime source ran out of primes before reaching the square root of {candidate}."
        )

    def _any_divides(self, candidate, factors):

        if len(factors) == 0:
            return False

        dtype = np.int64 if candidate <= _INT64_MAX else object
        chunks = [factors[i : i + self._chunk_size] for i in range(0, len(factors), self._chunk_size)]

        if self._executor is None or len(chunks) == 1:
            return any(_has_factor(candidate, chunk, dtype) for chunk in chunks)

        stop = threading.Event()
        futures = [self._executor.submit(_has_factor, candidate, chunk, dtype, stop) for chunk in chunks]
        # wait for every worker so that none outlives this call
        results = [future.result() for future in futures]
        return any(results)

    def close(self):

        if self._executor is not None:

            self._executor.shutdown(wait = True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

_serial_tester = PrimalityTester()

def is_prime(known_primes_asc, candidate):
    return _serial_tester.is_prime(known_primes_asc, candidate)
