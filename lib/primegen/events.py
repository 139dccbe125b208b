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

from datetime import datetime, timedelta

from ._utilities import LOCAL_TIMEZONE, check_type, check_return_int

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

class Listener:
    """Receives progress from the loader, the store and the engine. Override any subset of the methods.

    Every method is called synchronously on the thread that produced the event. `on_checkpoint_written` is only called
    after the primes have been flushed to disk.
    """

    def on_load_started(self):pass

    def on_load_progress(self, file_ordinal, total_files):pass

    def on_load_finished(self, primes_loaded, files_loaded):pass

    def on_generation_started(self):pass

    def on_checkpoint_written(self, event):pass

    def on_state_changed(self, old_state, new_state):pass

class EventHub:
    """Fans out events to every registered listener, in registration order."""

    def __init__(self, listeners = None):

        self._listeners = []

        if listeners is not None:

            for listener in listeners:
                self.add_listener(listener)

    def add_listener(self, listener):

        if listener is None:
            raise TypeError("`listener` cannot be `None`.")

        self._listeners.append(listener)

    def remove_listener(self, listener):
        self._listeners.remove(listener)

    def listeners(self):
        return tuple(self._listeners)

    def emit(self, method_name, *args):

        for listener in self._listeners:

            method = getattr(listener, method_name, None)

            if method is not None:
                method(*args)

    def __len__(self):
        return len(self._listeners)

def as_hub(listeners):

    if isinstance(listeners, EventHub):
        return listeners

    return EventHub(listeners)

class CheckpointWritten:
    """A contiguous slice of the prime sequence that was durably written to one checkpoint file.

    `start_ordinal` and `end_ordinal` are the 0-based positions of the first and last prime written, inclusive.
    `elapsed` is the time since the previous write, or since generation started for the first write.
    """

    def __init__(self, file_index, start_ordinal, end_ordinal, write_time, elapsed):

        self.file_index = check_return_int(file_index, "file_index")
        self.start_ordinal = check_return_int(start_ordinal, "start_ordinal")
        self.end_ordinal = check_return_int(end_ordinal, "end_ordinal")
        check_type(write_time, "write_time", datetime)
        check_type(elapsed, "elapsed", timedelta)

        if self.end_ordinal < self.start_ordinal:
            raise ValueError("`end_ordinal` must be at least `start_ordinal`.")

        self.write_time = write_time
        self.elapsed = elapsed

    def num_primes(self):
        return self.end_ordinal - self.start_ordinal + 1

    def to_json(self):
        return {
            "file_index" : self.file_index,
            "start_ordinal" : self.start_ordinal,
            "end_ordinal" : self.end_ordinal,
            "write_time" : self.write_time.strftime(_TIME_FORMAT),
            "elapsed" : self.elapsed.total_seconds()
        }

    @classmethod
    def from_json(cls, json_):

        check_type(json_, "json_", dict)
        return cls(
            json_["file_index"],
            json_["start_ordinal"],
            json_["end_ordinal"],
            datetime.strptime(json_["write_time"], _TIME_FORMAT).replace(tzinfo = LOCAL_TIMEZONE),
            timedelta(seconds = json_["elapsed"])
        )

    def __eq__(self, other):
        return (
            isinstance(other, CheckpointWritten) and
            self.file_index == other.file_index and
            self.start_ordinal == other.start_ordinal and
            self.end_ordinal == other.end_ordinal
        )

    def __hash__(self):
        return hash((self.file_index, self.start_ordinal, self.end_ordinal))

    def __str__(self):
        # ordinals are shown 1-based
        return (
            f"{self.file_index}. Wrote primes #{self.start_ordinal + 1} to #{self.end_ordinal + 1} to file at "
            f"{self.write_time.strftime('%Y-%m-%d %H:%M:%S')} (generation time: "
            f"{self.elapsed.total_seconds():.3f} sec)."
        )

    def __repr__(self):
        return (
            f"{self.__class__.__name__}({self.file_index}, {self.start_ordinal}, {self.end_ordinal}, "
            f"{self.write_time!r}, {self.elapsed!r})"
        )
