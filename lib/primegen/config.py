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

from ._utilities import check_type, check_return_int, check_return_int_None_default

DEFAULT_CAPACITY_PER_FILE = 10000
DEFAULT_FILE_PREFIX       = "PrimeNumbers"
DEFAULT_FILE_EXTENSION    = ".txt"
DEFAULT_NUM_WORKERS       = 1
DEFAULT_CHUNK_SIZE        = 4096
JOURNAL_SUFFIX            = ".journal"

class Configuration:
    """Options shared by the store, the loader and the engine.

    :param capacity_per_file: (type positive `int`, default 10000) The maximum number of primes a single checkpoint
    file holds.
    :param file_prefix: (type non-empty `str`, default "PrimeNumbers") What every checkpoint filename starts with.
    :param file_extension: (type `str`, default ".txt") The suffix of every checkpoint file, including the dot.
    :param max_cached_primes: (type positive `int`, default `None`) How many primes the in-memory cache may hold.
    `None` means the cache is unbounded.
    :param num_workers: (type positive `int`, default 1) Number of threads used for trial division.
    :param chunk_size: (type positive `int`, default 4096) Number of trial factors handed to a worker at once.
    """

    def __init__(
        self, capacity_per_file = DEFAULT_CAPACITY_PER_FILE, file_prefix = DEFAULT_FILE_PREFIX,
        file_extension = DEFAULT_FILE_EXTENSION, max_cached_primes = None, num_workers = DEFAULT_NUM_WORKERS,
        chunk_size = DEFAULT_CHUNK_SIZE
    ):

        capacity_per_file = check_return_int(capacity_per_file, "capacity_per_file")
        check_type(file_prefix, "file_prefix", str)
        check_type(file_extension, "file_extension", str)
        max_cached_primes = check_return_int_None_default(max_cached_primes, "max_cached_primes", None)
        num_workers = check_return_int(num_workers, "num_workers")
        chunk_size = check_return_int(chunk_size, "chunk_size")

        if capacity_per_file <= 0:
            raise ValueError("`capacity_per_file` must be positive.")

        if len(file_prefix) == 0:
            raise ValueError("`file_prefix` must be non-empty.")

        if any(c in file_prefix for c in "/\\"):
            raise ValueError("`file_prefix` cannot contain a path separator.")

        if not file_extension.startswith(".") or len(file_extension) < 2:
            raise ValueError("`file_extension` must start with a `.` followed by at least one character.")

        if max_cached_primes is not None and max_cached_primes <= 0:
            raise ValueError("`max_cached_primes` must be positive.")

        if num_workers <= 0:
            raise ValueError("`num_workers` must be positive.")

        if chunk_size <= 0:
            raise ValueError("`chunk_size` must be positive.")

        self.capacity_per_file = capacity_per_file
        self.file_prefix = file_prefix
        self.file_extension = file_extension
        self.max_cached_primes = max_cached_primes
        self.num_workers = num_workers
        self.chunk_size = chunk_size

    @classmethod
    def from_args(cls, args):
        """Build a `Configuration` from an `argparse.Namespace` produced by the command line."""

        return cls(
            capacity_per_file = args.capacity,
            file_prefix = args.prefix,
            file_extension = args.ext,
            max_cached_primes = getattr(args, "max_cached", None),
            num_workers = getattr(args, "workers", DEFAULT_NUM_WORKERS),
            chunk_size = getattr(args, "chunk_size", DEFAULT_CHUNK_SIZE)
        )

    def filename(self, index):
        return f"{self.file_prefix}{index}{self.file_extension}"

    def journal_name(self):
        return f"{self.file_prefix}{JOURNAL_SUFFIX}"

    def __eq__(self, other):
        return type(self) == type(other) and self.__dict__ == other.__dict__

    def __str__(self):
        return (
            f"{self.__class__.__name__}(capacity_per_file = {self.capacity_per_file}, "
            f"file_prefix = {self.file_prefix!r}, file_extension = {self.file_extension!r}, "
            f"max_cached_primes = {self.max_cached_primes}, num_workers = {self.num_workers}, "
            f"chunk_size = {self.chunk_size})"
        )

    def __repr__(self):
        return str(self)
