# sparse.py -- Managing the sparse-checkout configuration of a repository
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

"""Managing the sparse-checkout configuration of a repository.

The patterns live in ``$GIT_DIR/info/sparse-checkout``, one per line, with
all inclusive patterns written before the exclusive ones. The feature is
switched on by setting ``core.sparsecheckout`` in the repository config,
which is done by running git itself.
"""

__all__ = [
    "BYTE_ORDER_MARK",
    "CONFIG_KEY",
    "DEFAULT_MAPPING",
    "FEATURE_NAME",
    "InitResult",
    "SparseCheckoutError",
    "SpecFile",
    "SubprocessGitRunner",
    "add_sparse_paths",
    "find_git_executable",
    "init_sparse_checkout",
    "is_enabled",
    "load_pattern_set",
    "parse_spec_file",
    "read_pattern_lines",
    "read_sparse_checkout",
    "read_spec_file",
    "remove_sparse_paths",
    "sparse_checkout_file",
    "sparse_status_lines",
    "write_pattern_file",
    "write_sparse_checkout",
]

import os
import re
import shutil
import subprocess
from collections.abc import Iterable, Sequence
from typing import BinaryIO, NamedTuple, Protocol

from .config import ConfigResolver
from .errors import GitSparseError, NotGitRepository
from .file import LockedFile, ensure_dir_exists
from .log_utils import getLogger
from .paths import canonicalize_path
from .pattern import Pattern, PatternKind
from .pattern_set import PatternSet, ReconcilePolicy
from .repo import INFODIR, SPARSE_CHECKOUT_FILENAME, find_repository, sparse_checkout_path

logger = getLogger(__name__)

FEATURE_NAME = "sparse-checkout"
CONFIG_KEY = "core.sparsecheckout"
DEFAULT_MAPPING = "/*"
BYTE_ORDER_MARK = "\ufeff"

_FETCH_RE = re.compile(r"^fetch=+(.+)$", re.IGNORECASE)


class SparseCheckoutError(GitSparseError):
    """Raised when the sparse-checkout configuration cannot be updated."""


class GitRunner(Protocol):
    """Something that can run git and report its exit code."""

    def run(self, args: Sequence[str], cwd: str | None = None) -> int: ...


def find_git_executable() -> str | None:
    """Locate the git executable on PATH."""
    return shutil.which("git")


class SubprocessGitRunner:
    """Runs an explicitly located git executable."""

    def __init__(self, git_path: str) -> None:
        if not git_path:
            raise ValueError("git_path must not be empty")
        self.git_path = git_path

    def run(self, args: Sequence[str], cwd: str | None = None) -> int:
        """Run git with the given arguments.

        Returns:
          The exit code of the git process
        Raises:
          SparseCheckoutError: if git cannot be started
        """
        cmd = [self.git_path, *args]
        logger.debug("Running %r in %s", cmd, cwd)
        try:
            result = subprocess.run(cmd, cwd=cwd, check=False)
        except FileNotFoundError as exc:
            raise SparseCheckoutError(f"git not found at {self.git_path}") from exc
        logger.debug("git exited with %d", result.returncode)
        return result.returncode

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.git_path!r})"


def is_enabled(config: ConfigResolver) -> bool:
    """Check whether sparse checkout is switched on in the configuration."""
    value = config.get(CONFIG_KEY)
    return value is not None and value.lower() == "true"


def sparse_checkout_file(config: ConfigResolver) -> str | None:
    """Return the path of the sparse-checkout file for a configuration.

    Returns: None when the configuration does not belong to a repository
    """
    if config.local_path is not None:
        return os.path.join(
            os.path.dirname(config.local_path), INFODIR, SPARSE_CHECKOUT_FILENAME
        )
    if config.start_directory is None:
        return None
    try:
        return sparse_checkout_path(find_repository(config.start_directory).controldir)
    except NotGitRepository:
        return None


def read_pattern_lines(f: BinaryIO) -> list[str]:
    """Read the lines of a pattern file.

    Undecodable bytes are replaced and a leading byte order mark is dropped,
    so hand-edited files never abort a read.

    Args:
      f: File-like object to read from
    Returns: List of lines, without line endings
    """
    lines = [line.rstrip(b"\r\n").decode("utf-8", errors="replace") for line in f]
    if lines and lines[0].startswith(BYTE_ORDER_MARK):
        lines[0] = lines[0][len(BYTE_ORDER_MARK) :]
    return lines


def read_sparse_checkout(config: ConfigResolver) -> list[str] | None:
    """Read the sparse-checkout file of the repository.

    Returns: The lines of the file, or None outside a repository or when the
      file does not exist
    """
    path = sparse_checkout_file(config)
    if path is None:
        logger.debug("no local config detected, not a git repo")
        return None
    try:
        with open(path, "rb") as f:
            lines = read_pattern_lines(f)
    except FileNotFoundError:
        logger.debug("%s not found", path)
        return None
    logger.debug("%d entries found in %s", len(lines), path)
    return lines


def load_pattern_set(
    lines: Iterable[str],
    policy: ReconcilePolicy = ReconcilePolicy.PRUNE_EXCLUSIVE,
) -> PatternSet:
    """Build a pattern set from pattern file lines.

    Comments and blank lines are dropped.
    """
    patterns = PatternSet(admission=PatternKind.PATTERNS, policy=policy)
    patterns.add_many(lines)
    return patterns


def write_pattern_file(f: BinaryIO, patterns: PatternSet) -> None:
    """Write a pattern set in pattern file format.

    Args:
      f: File-like object to write to
      patterns: Patterns to write; inclusive ones are written first
    """
    for line in patterns.lines():
        f.write(line.encode("utf-8") + b"\n")


def write_sparse_checkout(config: ConfigResolver, patterns: PatternSet) -> str:
    """Replace the sparse-checkout file of the repository.

    Returns: Path of the written file
    Raises:
      NotGitRepository: if the configuration does not belong to a repository
      FileLocked: if another process holds the lock on the file
    """
    path = sparse_checkout_file(config)
    if path is None:
        raise NotGitRepository("No git repository was found")
    ensure_dir_exists(os.path.dirname(path))
    with LockedFile(path) as f:
        write_pattern_file(f, patterns)
    logger.debug("wrote %d patterns to %s", len(patterns), path)
    return path


class SpecFile(NamedTuple):
    """Contents of a sparse spec file."""

    patterns: list[str]
    refspecs: list[str]


def parse_spec_file(lines: Iterable[str]) -> SpecFile:
    """Parse the lines of a spec file.

    ``fetch=<refspec>`` lines are collected separately from path patterns.
    Blank lines and lines starting with ``#`` or ``;`` are skipped.
    """
    patterns = []
    refspecs = []
    for line in lines:
        line = line.strip()
        if not line or line[0] in "#;":
            continue
        m = _FETCH_RE.match(line)
        if m:
            refspecs.append(m.group(1))
        else:
            patterns.append(line)
    return SpecFile(patterns, refspecs)


def read_spec_file(path: str | os.PathLike[str]) -> SpecFile:
    """Read a spec file from disk.

    Raises:
      SparseCheckoutError: if the file does not exist
    """
    try:
        with open(path, encoding="utf-8-sig") as f:
            spec = parse_spec_file(f)
    except FileNotFoundError as exc:
        raise SparseCheckoutError(
            f"spec file '{os.path.abspath(path)}' cannot be found"
        ) from exc
    logger.debug(
        "%d entries and %d refspecs found in %s",
        len(spec.patterns),
        len(spec.refspecs),
        path,
    )
    return spec


class InitResult(NamedTuple):
    """Outcome of :func:`init_sparse_checkout`."""

    path: str
    patterns: PatternSet
    refspecs: list[str]
    enabled: bool
    defaulted: bool


def _inclusive(path: str, canonical: bool) -> Pattern:
    if canonical:
        path = canonicalize_path(path)
    return Pattern(path, PatternKind.INCLUSIVE)


def _exclusive(path: str, canonical: bool) -> Pattern:
    if canonical:
        path = canonicalize_path(path)
    return Pattern(path, PatternKind.PATTERNS).with_exclusive(True)


def _add_unique(patterns: PatternSet, item: Pattern) -> None:
    if item.is_pattern and item not in patterns:
        patterns.add(item)


def _load_existing(config: ConfigResolver) -> PatternSet:
    return load_pattern_set(read_sparse_checkout(config) or [])


def init_sparse_checkout(
    config: ConfigResolver,
    maps: Iterable[str] = (),
    nots: Iterable[str] = (),
    spec_path: str | os.PathLike[str] | None = None,
    runner: GitRunner | None = None,
    cwd: str | None = None,
    canonical: bool = False,
) -> InitResult:
    """Set up sparse checkout for a repository.

    The existing sparse-checkout file, the spec file and the given paths
    are merged and written back, then ``core.sparsecheckout`` is enabled.
    When nothing ends up included, everything is mapped.

    Args:
      config: Configuration of the repository
      maps: Paths to include
      nots: Paths to exclude
      spec_path: Optional spec file with more patterns and fetch refspecs
      runner: Used to run git; defaults to the git found on PATH
      cwd: Directory to run git in; defaults to the configuration's
        start directory
      canonical: Canonicalize the given paths before adding them
    Raises:
      SparseCheckoutError: if the spec file is missing or git cannot be found
      NotGitRepository: if the configuration does not belong to a repository
    """
    patterns = _load_existing(config)

    refspecs: list[str] = []
    if spec_path is not None:
        spec = read_spec_file(spec_path)
        for line in spec.patterns:
            _add_unique(patterns, Pattern(line, PatternKind.PATTERNS))
        refspecs = spec.refspecs

    for path in maps:
        _add_unique(patterns, _inclusive(path, canonical))
    for path in nots:
        _add_unique(patterns, _exclusive(path, canonical))

    defaulted = not patterns.inclusive()
    if defaulted:
        logger.warning(
            "no paths were added to the %s configuration, "
            "defaulting to mapping everything",
            FEATURE_NAME,
        )
        patterns.add(Pattern(DEFAULT_MAPPING, PatternKind.INCLUSIVE))

    path = write_sparse_checkout(config, patterns)

    if runner is None:
        git_path = find_git_executable()
        if git_path is None:
            raise SparseCheckoutError("git executable not found on PATH")
        runner = SubprocessGitRunner(git_path)
    if cwd is None:
        cwd = config.start_directory
    enabled = runner.run(["config", "--local", CONFIG_KEY, "true"], cwd=cwd) == 0
    if not enabled:
        logger.warning("failed to set %s", CONFIG_KEY)

    return InitResult(path, patterns, refspecs, enabled, defaulted)


def add_sparse_paths(
    config: ConfigResolver, paths: Iterable[str], canonical: bool = False
) -> PatternSet:
    """Include more paths in the sparse checkout.

    Returns: The patterns that were written
    """
    patterns = _load_existing(config)
    for path in paths:
        _add_unique(patterns, _inclusive(path, canonical))
    write_sparse_checkout(config, patterns)
    return patterns


def remove_sparse_paths(
    config: ConfigResolver, paths: Iterable[str], canonical: bool = False
) -> PatternSet:
    """Take paths out of the sparse checkout.

    A path that was included explicitly loses its inclusive pattern; any
    other path gets an exclusive pattern.

    Returns: The patterns that were written
    """
    patterns = _load_existing(config)
    for path in paths:
        inclusive = _inclusive(path, canonical)
        if not inclusive.is_pattern:
            continue
        if not patterns.remove(inclusive):
            _add_unique(patterns, inclusive.with_exclusive(True))
    write_sparse_checkout(config, patterns)
    return patterns


def sparse_status_lines(config: ConfigResolver) -> list[str]:
    """Describe the sparse-checkout state of a repository.

    Inclusive patterns are indented by one space so they line up with the
    ``!`` of exclusive ones.
    """
    if not is_enabled(config):
        return ["sparse is not enabled."]
    lines = ["sparse enabled."]
    for value in read_sparse_checkout(config) or []:
        if not value:
            continue
        if value[0] != "!":
            lines.append(" " + value)
        else:
            lines.append(value)
    return lines
