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
from pathlib import Path

import lmdb

from ..errors import NOT_ABSOLUTE_ERROR_MESSAGE
from .._utilities import check_type, check_return_int

def open_lmdb(filepath, mapsize, readonly = False):

    check_type(filepath, "filepath", Path)
    mapsize = check_return_int(mapsize, "mapsize")
    check_type(readonly, "readonly", bool)

    if not filepath.is_absolute():
        raise ValueError(NOT_ABSOLUTE_ERROR_MESSAGE.format(str(filepath)))

    if mapsize <= 0:
        raise ValueError("`mapsize` must be positive.")

    return lmdb.open(
        str(filepath),
        map_size = mapsize,
        subdir = True,
        create = not readonly,
        readonly = readonly,
        max_readers = 1 if readonly else 126
    )

def grow_lmdb(db):
    """Double the map size of `db`. Only call this while no transaction is active."""

    mapsize = db.info()["map_size"]
    db.set_mapsize(2 * mapsize)
    return 2 * mapsize

def txn_prefix_iter(txn, prefix):

    prefix_len = len(prefix)

    with txn.cursor() as cursor:

        if not cursor.set_range(prefix):
            return

        while True:

            key, val = cursor.item()

            if key[:prefix_len] != prefix:
                return

            yield key, val

            if not cursor.next():
                return

def txn_count_keys(txn, prefix):

    ret = 0

    for _ in txn_prefix_iter(txn, prefix):
        ret += 1

    return ret

