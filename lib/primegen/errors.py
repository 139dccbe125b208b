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

NOT_ABSOLUTE_ERROR_MESSAGE = (
    "The path `{0}` is not absolute."
)

CORRUPTED_FILES_MESSAGE = (
    "Calculation indicates corrupted result files. Make sure all result files exist and that the prime numbers "
    "within are sorted ascending."
)

class PrimegenError(RuntimeError):pass

class InvalidInputError(PrimegenError, ValueError):pass

class UnsupportedOperationError(PrimegenError, NotImplementedError):pass

class CacheFullError(PrimegenError):

    def __init__(self, max_primes):

        super().__init__(f"The prime cache has reached its budget of {max_primes} primes.")
        self.max_primes = max_primes

class StorageError(PrimegenError):

    def __init__(self, message, index = None, path = None):

        super().__init__(message)
        self.index = index
        self.path = path

class StorageCorruptionError(StorageError):pass

class StorageConflictError(StorageError):pass

def overfilled_file_error(cls, index, path, capacity):
    return cls(
        f"The result file with index {index} contains more primes than the allowed {capacity}.\n"
        f"path : `{path}`",
        index, path
    )

class JournalError(PrimegenError):pass
