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

from .cache import PrimeCache
from .config import Configuration
from .engine import GenerationEngine, EngineState
from .errors import PrimegenError, InvalidInputError, UnsupportedOperationError, CacheFullError, StorageError, \
    StorageCorruptionError, StorageConflictError, JournalError
from .events import Listener, EventHub, CheckpointWritten
from .journal import CheckpointJournal
from .loader import ExistingStateLoader, GenerationState
from .primality import PrimalityTester, is_prime
from .resultstore import ResultStore
from .version import CURRENT_VERSION

__version__ = CURRENT_VERSION

__all__ = [
    "PrimeCache",
    "Configuration",
    "GenerationEngine",
    "EngineState",
    "PrimegenError",
    "InvalidInputError",
    "UnsupportedOperationError",
    "CacheFullError",
    "StorageError",
    "StorageCorruptionError",
    "StorageConflictError",
    "JournalError",
    "Listener",
    "EventHub",
    "CheckpointWritten",
    "CheckpointJournal",
    "ExistingStateLoader",
    "GenerationState",
    "PrimalityTester",
    "is_prime",
    "ResultStore",
    "generate"
]

def generate(directory = None, poll_cancel = None, listeners = None, **kwargs):
    """Resume generation in `directory` with a `Configuration` built from `kwargs`."""

    engine = GenerationEngine(Configuration(**kwargs), directory, poll_cancel, listeners = listeners)
    return engine.run()
