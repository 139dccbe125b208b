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

from .errors import CacheFullError
from ._utilities import check_return_int, check_return_int_None_default, is_int

class PrimeCache:
    """Ascending, gapless, in-memory list of every prime found so far.

    The cache enforces a budget of at most `max_primes` elements. Exhausting the budget raises `CacheFullError`,
    which is the only out-of-memory condition the generator treats as expected.
    """

    def __init__(self, max_primes = None):

        max_primes = check_return_int_None_default(max_primes, "max_primes", None)

        if max_primes is not None and max_primes <= 0:
            raise ValueError("`max_primes` must be positive.")

        self._max_primes = max_primes
        self._primes = []

    def max_primes(self):
        return self._max_primes

    def is_full(self):
        return self._max_primes is not None and len(self._primes) >= self._max_primes

    def last(self):

        if len(self._primes) == 0:
            raise IndexError("The cache is empty.")

        return self._primes[-1]

    def append(self, prime):

        prime = check_return_int(prime, "prime")

        if len(self._primes) > 0 and prime <= self._primes[-1]:
            raise ValueError(f"Primes must be added in ascending order: {prime} <= {self._primes[-1]}.")

        if self.is_full():
            raise CacheFullError(self._max_primes)

        self._primes.append(prime)

    def extend(self, primes):
        """Add all of `primes` or none of them."""

        primes = list(primes)

        if len(primes) == 0:
            return

        if self._max_primes is not None and len(self._primes) + len(primes) > self._max_primes:
            raise CacheFullError(self._max_primes)

        prev = self._primes[-1] if len(self._primes) > 0 else -1

        for prime in primes:

            if not is_int(prime):
                raise TypeError(f"Primes must be of type `int`, not `{type(prime).__name__}`.")

            if prime <= prev:
                raise ValueError(f"Primes must be added in ascending order: {prime} <= {prev}.")

            prev = prime

        self._primes.extend(int(prime) for prime in primes)

    def __len__(self):
        return len(self._primes)

    def __getitem__(self, item):
        return self._primes[item]

    def __iter__(self):
        return iter(self._primes)

    def __eq__(self, other):

        if isinstance(other, PrimeCache):
            return self._primes == other._primes

        elif isinstance(other, list):
            return self._primes == other

        else:
            return NotImplemented

    def __str__(self):

        if len(self._primes) <= 10:
            shown = ", ".join(str(p) for p in self._primes)

        else:
            shown = ", ".join(str(p) for p in self._primes[:5]) + ", ..., " + \
                    ", ".join(str(p) for p in self._primes[-3:])

        return f"{self.__class__.__name__}([{shown}], max_primes = {self._max_primes})"

    def __repr__(self):
        return str(self)
