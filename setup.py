#!/usr/bin/python3
# Setup file for gitsparse
# Copyright (C) 2008-2022 Jelmer Vernooĳ <jelmer@jelmer.uk>
# Copyright (C) 2026 The gitsparse Authors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

import os

from setuptools import setup

with open(os.path.join(os.path.dirname(__file__), "gitsparse", "__init__.py")) as f:
    for line in f:
        if line.startswith("__version__"):
            version = ".".join(
                str(part) for part in line.split("=", 1)[1].strip(" ()\n").split(", ")
            )
            break
    else:
        raise RuntimeError("unable to determine gitsparse version")

with open(os.path.join(os.path.dirname(__file__), "README.rst")) as f:
    long_description = f.read()


setup(
    name="gitsparse",
    version=version,
    description="Manage the sparse-checkout patterns of git repositories",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    license="Apache-2.0 OR GPL-2.0-or-later",
    keywords=["git", "sparse-checkout", "vcs"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Operating System :: POSIX",
        "Operating System :: Microsoft :: Windows",
        "Topic :: Software Development :: Version Control",
    ],
    python_requires=">=3.10",
    packages=["gitsparse"],
    package_data={"": ["py.typed"]},
    extras_require={
        "dev": ["ruff==0.14.3", "mypy==1.18.2"],
    },
    entry_points={
        "console_scripts": ["gitsparse=gitsparse.cli:_main"],
    },
    test_suite="tests.test_suite",
)
