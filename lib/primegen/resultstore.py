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

import os
import re
from datetime import datetime
from pathlib import Path

from .config import Configuration
from .errors import StorageConflictError, StorageCorruptionError, overfilled_file_error
from .events import CheckpointWritten, as_hub
from ._utilities import check_type, check_return_Path_None_default, resolve_path, LOCAL_TIMEZONE, check_return_int

_PRIME_LINE_REGEX = re.compile(r"^\d+$")

class ResultStore:
    """Ordered, chunked persistence of primes into checkpoint files.

    Checkpoint files are named `<prefix><index><ext>` and hold at most `capacity_per_file` primes each, one per line.
    Only the run of files with consecutive indices starting at 1 is trusted; everything after the first gap is
    ignored. Every file before the last non-empty one is complete. Empty files after it are removed by the next
    `append`.
    """

    def __init__(self, config, directory = None, listeners = None):

        check_type(config, "config", Configuration)
        directory = check_return_Path_None_default(directory, "directory", None)

        if directory is None:
            directory = Path.cwd()

        directory = resolve_path(directory)

        if not directory.is_dir():
            raise NotADirectoryError(f"`{directory}` is not a directory.")

        self._config = config
        self._dir = directory
        self._hub = as_hub(listeners)
        self._filename_regex = re.compile(
            "^" + re.escape(config.file_prefix) + "([1-9][0-9]*)" + re.escape(config.file_extension) + "$"
        )
        self._last_write = None
        self._files = {}
        self.list_checkpoint_files()

    def config(self):
        return self._config

    def directory(self):
        return self._dir

    def hub(self):
        return self._hub

    def add_listener(self, listener):
        self._hub.add_listener(listener)

    def files(self):
        """The trusted checkpoint files as of the last scan or write, keyed by ascending index."""
        return dict(self._files)

    def path_for(self, index):

        index = check_return_int(index, "index")

        if index <= 0:
            raise ValueError("`index` must be positive.")

        return self._dir / self._config.filename(index)

    def index_of(self, path):

        for index, path_ in self._files.items():

            if path_ == path:
                return index

        return None

    def list_checkpoint_files(self):

        indexed = {}

        for path in self._dir.iterdir():

            match = self._filename_regex.match(path.name)

            if match is not None and path.is_file():
                indexed[int(match.group(1))] = path

        consecutive = {}
        index = 1

        while index in indexed:

            consecutive[index] = indexed[index]
            index += 1

        self._files = consecutive
        return dict(consecutive)

    def read_primes(self, path):
        """Yield the primes of a checkpoint file in file order. Blank lines are skipped."""

        with path.open("r", encoding = "utf-8") as fh:

            for line_num, line in enumerate(fh, start = 1):

                line = line.strip()

                if len(line) == 0:
                    continue

                if _PRIME_LINE_REGEX.match(line) is None:
                    raise StorageCorruptionError(
                        f"Line {line_num} of the result file `{path}` is not a non-negative decimal integer : "
                        f"{line!r}",
                        self.index_of(path), path
                    )

                yield int(line)

    def count_lines(self, path):

        if not path.exists():
            return 0

        count = 0

        with path.open("r", encoding = "utf-8") as fh:

            for line in fh:

                if len(line.strip()) > 0:
                    count += 1

        return count

    def last_prime(self, path):

        last = None

        for last in self.read_primes(path):
            pass

        return last

    def generation_started(self, start_time = None):
        """Set the reference time that the first write's elapsed duration is measured from."""

        if start_time is None:
            start_time = datetime.now(LOCAL_TIMEZONE)

        check_type(start_time, "start_time", datetime)
        # naive datetimes are taken as local time
        self._last_write = start_time.astimezone(LOCAL_TIMEZONE)

    def append(self, primes):
        """Write `primes` after the last stored prime, rolling over into new files at capacity.

        :param primes: Ascending primes, all greater than every stored prime.
        Writing resumes in the last non-empty file. Empty files after it are removed first.

        :raise StorageCorruptionError: If the last non-empty file holds more primes than the capacity.
        :raise StorageConflictError: If a new file would overwrite existing content, or if the file to append to is
        already full.
        :return: (type `list` of `CheckpointWritten`) One event per file written to.
        """

        primes = list(primes)

        if len(primes) == 0:
            return []

        for prev, prime in zip(primes[:-1], primes[1:]):

            if prime <= prev:
                raise ValueError(f"`primes` must be strictly ascending: {prime} <= {prev}.")

        capacity = self._config.capacity_per_file
        index = self._prepare_for_writing(primes[0])
        events = []
        written = 0

        while written < len(primes):

            path = self._files[index]
            num_lines = self.count_lines(path)

            if num_lines >= capacity:
                raise StorageConflictError(
                    f"Cannot append to the result file with index {index}, it already holds {num_lines} primes "
                    f"(capacity {capacity}).\npath : `{path}`",
                    index, path
                )

            segment = primes[written : written + capacity - num_lines]

            with path.open("a", encoding = "utf-8") as fh:

                fh.writelines(f"{prime}\n" for prime in segment)
                fh.flush()
                os.fsync(fh.fileno())

            start_ordinal = (index - 1) * capacity + num_lines
            events.append(self._written(index, start_ordinal, len(segment)))
            written += len(segment)

            if written < len(primes):

                index += 1
                self._add_empty_file(index)

        return events

    def last_nonempty_index(self):
        """The highest trusted index whose file holds at least one prime, or `None`."""

        for index in sorted(self._files.keys(), reverse = True):

            if self.count_lines(self._files[index]) > 0:
                return index

        return None

    def storable_index(self):
        """The index of the file that the next `append` writes into first.

        Empty files after the last non-empty one do not count: writing resumes in the last non-empty file if it has
        room, and in the file after it otherwise.
        """

        index = self.last_nonempty_index()

        if index is None:
            return 1

        elif self.count_lines(self._files[index]) < self._config.capacity_per_file:
            return index

        else:
            return index + 1

    def _prepare_for_writing(self, first_prime):
        """Check the last non-empty file, drop the empty files after it and return the index to write into."""

        last_index = self.last_nonempty_index()

        if last_index is not None:

            path = self._files[last_index]
            num_lines = self.count_lines(path)
            capacity = self._config.capacity_per_file

            if num_lines > capacity:
                raise overfilled_file_error(StorageCorruptionError, last_index, path, capacity)

            last = self.last_prime(path)

            if first_prime <= last:
                raise StorageConflictError(
                    f"Appending {first_prime} after {last} would break the ascending order of the result files.\n"
                    f"path : `{path}`",
                    last_index, path
                )

        else:
            last_index = 0

        # only the highest-indexed file may be partial
        for index in [index for index in self._files.keys() if index > last_index]:

            self._files[index].unlink()
            del self._files[index]

        index = self.storable_index()

        if index not in self._files:
            self._add_empty_file(index)

        return index

    def _add_empty_file(self, index):

        path = self.path_for(index)

        if path.exists():

            if not path.is_file() or self.count_lines(path) > 0:
                raise StorageConflictError(
                    f"Expected the result file with index {index} to be empty or absent, but it already has "
                    f"content. Move or delete it before continuing.\npath : `{path}`",
                    index, path
                )

            path.unlink()

        path.touch(exist_ok = False)
        self._files[index] = path
        return path

    def _written(self, index, start_ordinal, num_primes):

        now = datetime.now(LOCAL_TIMEZONE)
        last = self._last_write if self._last_write is not None else now
        self._last_write = now
        event = CheckpointWritten(index, start_ordinal, start_ordinal + num_primes - 1, now, now - last)
        self._hub.emit("on_checkpoint_written", event)
        return event

    def __str__(self):
        return f"{self.__class__.__name__}(`{self._dir}`, {len(self._files)} files, {self._config})"

    def __repr__(self):
        return str(self)
