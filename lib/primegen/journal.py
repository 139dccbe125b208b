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

import json

import lmdb

from .config import Configuration
from .errors import JournalError
from .events import Listener, CheckpointWritten
from .version import CURRENT_VERSION, COMPATIBLE_VERSIONS
from ._utilities import check_return_Path, check_type, resolve_path, BYTES_PER_MB
from ._utilities.lmdb import open_lmdb, grow_lmdb, txn_prefix_iter, txn_count_keys

DEFAULT_MAPSIZE = 16 * BYTES_PER_MB

_VERSION_KEY = b"version"
_EVENT_PREFIX = b"event-"

def _event_key(event):
    return _EVENT_PREFIX + f"{event.file_index:010d}-{event.start_ordinal:020d}".encode("ASCII")

class CheckpointJournal(Listener):
    """A history of every checkpoint write, kept in an LMDB database beside the checkpoint files.

    The journal is only a record for the user. Resuming generation never reads it.
    """

    def __init__(self, directory, name, mapsize = DEFAULT_MAPSIZE, readonly = False):

        directory = resolve_path(check_return_Path(directory, "directory"))
        check_type(name, "name", str)
        check_type(readonly, "readonly", bool)
        self._path = directory / name

        if readonly and not self._path.is_dir():
            raise FileNotFoundError(f"No checkpoint journal found at `{self._path}`.")

        self._readonly = readonly
        self._db = open_lmdb(self._path, mapsize, readonly)

        try:
            self._check_version()

        except JournalError:

            self._db.close()
            raise

    @classmethod
    def for_config(cls, config, directory, **kwargs):

        check_type(config, "config", Configuration)
        return cls(directory, config.journal_name(), **kwargs)

    def path(self):
        return self._path

    def _check_version(self):

        with self._db.begin(write = not self._readonly) as txn:

            version = txn.get(_VERSION_KEY)

            if version is None:

                if not self._readonly:
                    txn.put(_VERSION_KEY, CURRENT_VERSION.encode("ASCII"))

            elif version.decode("ASCII") not in COMPATIBLE_VERSIONS:
                raise JournalError(
                    f"The journal at `{self._path}` was written by version {version.decode('ASCII')}, which is not "
                    f"compatible with the current version {CURRENT_VERSION}."
                )

    def on_checkpoint_written(self, event):
        self.record(event)

    def record(self, event):

        check_type(event, "event", CheckpointWritten)

        if self._readonly:
            raise JournalError("This journal is opened in readonly mode.")

        key = _event_key(event)
        val = json.dumps(event.to_json(), sort_keys = True).encode("ASCII")

        while True:

            try:

                with self._db.begin(write = True) as txn:
                    txn.put(key, val)

            except lmdb.MapFullError:
                grow_lmdb(self._db)

            else:
                return

    def events(self):

        with self._db.begin() as txn:
            return [
                CheckpointWritten.from_json(json.loads(val.decode("ASCII")))
                for _, val in txn_prefix_iter(txn, _EVENT_PREFIX)
            ]

    def __len__(self):

        with self._db.begin() as txn:
            return txn_count_keys(txn, _EVENT_PREFIX)

    def close(self):
        self._db.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
