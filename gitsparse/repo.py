# repo.py -- Locating git repositories on disk
# Copyright (C) 2007 James Westby <jw+debian@jameswestby.net>
# Copyright (C) 2008-2013 Jelmer Vernooij <jelmer@jelmer.uk>
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

"""Locating the repository that encloses a directory."""

__all__ = [
    "CONFIG_FILENAME",
    "CONTROLDIR",
    "INFODIR",
    "SPARSE_CHECKOUT_FILENAME",
    "RepositoryPaths",
    "controldir_config_path",
    "find_repository",
    "read_gitfile",
    "sparse_checkout_path",
]

import os
from typing import BinaryIO, NamedTuple

from .errors import NotGitRepository

CONTROLDIR = ".git"
CONFIG_FILENAME = "config"
INFODIR = "info"
SPARSE_CHECKOUT_FILENAME = "sparse-checkout"


class RepositoryPaths(NamedTuple):
    """Working tree and control directory of a repository."""

    worktree: str
    controldir: str


def read_gitfile(f: BinaryIO) -> str:
    """Read a ``.git`` file.

    The first line of the file should start with "gitdir: "

    Args:
      f: File-like object to read from
    Returns: A path
    """
    cs = f.read()
    if not cs.startswith(b"gitdir: "):
        raise ValueError("Expected file to start with 'gitdir: '")
    return cs[len(b"gitdir: ") :].rstrip(b"\r\n").decode("utf-8")


def _open_repository(root: str) -> RepositoryPaths:
    hidden_path = os.path.join(root, CONTROLDIR)
    if os.path.isdir(hidden_path):
        return RepositoryPaths(root, hidden_path)
    if os.path.isfile(hidden_path):
        with open(hidden_path, "rb") as f:
            try:
                path = read_gitfile(f)
            except ValueError as exc:
                raise NotGitRepository(f"Invalid .git file at {hidden_path}") from exc
        return RepositoryPaths(root, os.path.normpath(os.path.join(root, path)))
    raise NotGitRepository(f"No git repository was found at {root}")


def find_repository(start: str | os.PathLike[str] = ".") -> RepositoryPaths:
    """Iterate parent directories to discover a repository.

    Args:
      start: The directory to start discovery from (defaults to '.')
    Returns: Paths of the first parent directory that holds a ``.git``
    Raises:
      NotGitRepository: if the filesystem root is reached
    """
    path = os.path.abspath(start)
    while True:
        try:
            return _open_repository(path)
        except NotGitRepository:
            new_path, _tail = os.path.split(path)
            if new_path == path:  # Root reached
                break
            path = new_path
    raise NotGitRepository(f"No git repository was found at {os.fspath(start)}")


def controldir_config_path(controldir: str) -> str:
    """Return the path of the repository-local config file."""
    return os.path.join(controldir, CONFIG_FILENAME)


def sparse_checkout_path(controldir: str) -> str:
    """Return the path of the sparse-checkout pattern file."""
    return os.path.join(controldir, INFODIR, SPARSE_CHECKOUT_FILENAME)
