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

import random
from datetime import datetime, timedelta, timezone
from pathlib import Path

import numpy as np

BYTES_PER_KB = 1024
BYTES_PER_MB = 1024**2
BASE52 = "2346789abcdefghijmnpqrstuvwxyzABCDEFGHJLMNPQRTUVWXYZ"

try:
    LOCAL_TIMEZONE = datetime.now(timezone(timedelta(0))).astimezone().tzinfo

except RuntimeError:
    LOCAL_TIMEZONE = timezone.utc

def random_unique_filename(directory, suffix = "", length = 6, alphabet = BASE52, num_attempts = 10):

    directory = Path(directory)

    for n in range(num_attempts):

        filename = directory / "".join(random.choices(alphabet, k = length + n))

        if suffix != "":
            filename = filename.with_suffix(suffix)

        if not filename.exists():
            return filename

    raise RuntimeError("buy a lottery ticket fr")

def is_int(num):
    return isinstance(num, (int, np.int8, np.int16, np.int32, np.int64, np.uint8, np.uint16, np.uint32, np.uint64)) \
        and not isinstance(num, bool)

def check_type(obj, name, expected_type):

    if not isinstance(obj, expected_type):

        if isinstance(expected_type, tuple):
            type_names = " or ".join(f"`{type_.__name__}`" for type_ in expected_type)

        else:
            type_names = f"`{expected_type.__name__}`"

        raise TypeError(f"`{name}` must be of type {type_names}, not `{type(obj).__name__}`.")

def check_return_int(num, name):

    if not is_int(num):
        raise TypeError(f"`{name}` must be of type `int`, not `{type(num).__name__}`.")

    return int(num)

def check_return_int_None_default(num, name, default):

    if num is None:
        return default

    return check_return_int(num, name)

def check_return_Path(path, name):

    if isinstance(path, str):
        return Path(path)

    elif isinstance(path, Path):
        return path

    else:
        raise TypeError(f"`{name}` must be either of type `str` or `pathlib.Path`, not `{type(path).__name__}`.")

def check_return_Path_None_default(path, name, default):

    if path is None:
        return default

    return check_return_Path(path, name)

def resolve_path(path):
    """
    :param path: (type `pathlib.Path`)
    :raise FileNotFoundError: If the path could not be resolved.
    :return: (type `pathlib.Path`) Resolved.
    """

    try:
        return path.resolve(True)

    except FileNotFoundError:
        pass

    resolved = path.resolve(False)

    for parent in reversed(resolved.parents):

        if not parent.exists():
            raise FileNotFoundError(
                f"Resolved path : `{resolved}`\n" +
                f"The file or directory `{str(parent)}` could not be found."
            )

    raise FileNotFoundError(f"The file or directory `{path}` could not be found.")
