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

from setuptools import setup

# get version
with (Path(__file__).parent / "lib" / "primegen" / "version.py").open("r") as fh:
    # hacky way to import `primegen.version.CURRENT_VERSION`
    exec(fh.read())

setup(
    name = 'primegen',
    version = CURRENT_VERSION,
    description = "Incremental prime generation by trial division, with resumable checkpoint files.",
    long_description = "Incremental prime generation by trial division, with resumable checkpoint files.",
    long_description_content_type = "text/plain",

    author = "Michael P. Lane",
    author_email = "mlanetheta@gmail.com",

    package_dir = {"": "lib"},

    packages = [
        "primegen",
        "primegen._utilities"
    ],

    install_requires = [
        'numpy>=1.20.0',
        'lmdb>=1.2.1'
    ],

    entry_points = {
        "console_scripts": ["primegen = primegen.__main__:main"]
    },

    classifiers = [
        "Programming Language :: Python",
        "Topic :: Scientific/Engineering :: Mathematics"
    ],

    test_suite = "tests",

    zip_safe=False
)
