# __init__.py -- The tests for gitsparse
# Copyright (C) 2024 Jelmer Vernooij <jelmer@jelmer.uk>
# Copyright (C) 2026 The gitsparse Authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# gitsparse is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Tests for gitsparse."""

__all__ = [
    "SkipTest",
    "TestCase",
    "expectedFailure",
    "skipIf",
]

import os
import shutil
import tempfile
import unittest
from unittest import SkipTest, expectedFailure, skipIf
from unittest import TestCase as _TestCase

# Variables that would let the developer's own git setup leak into tests.
_ISOLATED_VARIABLES = (
    "GIT_CONFIG_GLOBAL",
    "GIT_CONFIG_NOSYSTEM",
    "GIT_CONFIG_SYSTEM",
    "GIT_TRACE",
    "XDG_CONFIG_HOME",
)


class TestCase(_TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.overrideEnv("HOME", "/nonexistent")
        for name in _ISOLATED_VARIABLES:
            self.overrideEnv(name, None)
        # Keep the machine-wide /etc/gitconfig out of the picture.
        self.overrideEnv("GIT_CONFIG_NOSYSTEM", "1")

    def overrideEnv(self, name: str, value: str | None) -> None:
        def restore() -> None:
            if oldval is not None:
                os.environ[name] = oldval
            else:
                os.environ.pop(name, None)

        oldval = os.environ.get(name)
        if value is not None:
            os.environ[name] = value
        else:
            os.environ.pop(name, None)
        self.addCleanup(restore)

    def make_temp_dir(self) -> str:
        path = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, path)
        return path

    def make_repo(self) -> str:
        """Create an empty repository layout and return its working tree."""
        worktree = self.make_temp_dir()
        os.makedirs(os.path.join(worktree, ".git", "info"))
        with open(os.path.join(worktree, ".git", "config"), "w") as f:
            f.write("[core]\n\trepositoryformatversion = 0\n\tbare = false\n")
        return worktree


def test_suite() -> unittest.TestSuite:
    names = [
        "cli",
        "config",
        "file",
        "log_utils",
        "paths",
        "pattern",
        "pattern_set",
        "repo",
        "sparse",
    ]
    module_names = ["tests.test_" + name for name in names]
    loader = unittest.TestLoader()
    return loader.loadTestsFromNames(module_names)
