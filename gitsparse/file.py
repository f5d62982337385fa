# file.py -- Safe access to git files
# Copyright (C) 2010 Google, Inc.
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

"""Safe writes to files inside a git control directory.

Git never rewrites ``foo`` in place: it creates ``foo.lock`` exclusively,
writes the new contents there and renames it over ``foo``. A second writer
finds the lock file and backs off. The sparse-checkout file is written the
same way so that git and this tool never observe a half-written file.
"""

__all__ = [
    "FileLocked",
    "LockedFile",
    "ensure_dir_exists",
]

import os
import warnings
from types import TracebackType

PathLike = str | os.PathLike[str]


def ensure_dir_exists(dirname: PathLike) -> None:
    """Ensure a directory exists, creating if necessary."""
    try:
        os.makedirs(dirname)
    except FileExistsError:
        pass


class FileLocked(Exception):
    """File is already locked."""

    def __init__(self, filename: PathLike, lockfilename: str) -> None:
        """Initialize FileLocked.

        Args:
          filename: Name of the file that is locked
          lockfilename: Name of the lock file
        """
        self.filename = filename
        self.lockfilename = lockfilename
        super().__init__(filename, lockfilename)


class LockedFile:
    """Binary file that follows the git locking protocol for writes.

    All writes go to ``<filename>.lock``; :meth:`close` renames the lock
    file over the target and :meth:`abort` discards it. Used as a context
    manager, the file is committed on success and aborted when the block
    raises.

    Note: You *must* call close() or abort() for the lock to be released.
    """

    def __init__(
        self, filename: PathLike, mask: int = 0o644, fsync: bool = True
    ) -> None:
        """Create the lock file.

        Args:
          filename: Path of the file to (re)write
          mask: Permission bits for the created file
          fsync: Whether to fsync() the data before renaming

        Raises:
          FileLocked: if the lock file already exists
        """
        self._filename = os.fspath(filename)
        self._lockfilename = self._filename + ".lock"
        self._fsync = fsync
        try:
            fd = os.open(
                self._lockfilename,
                os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0),
                mask,
            )
        except FileExistsError as exc:
            raise FileLocked(filename, self._lockfilename) from exc
        self._file = os.fdopen(fd, "wb")
        self._closed = False

    @property
    def closed(self) -> bool:
        """Return whether the lock has been released."""
        return self._closed

    @property
    def name(self) -> str:
        """Path of the file being written."""
        return self._filename

    def write(self, data: bytes) -> int:
        """Write data to the lock file."""
        return self._file.write(data)

    def writelines(self, lines: list[bytes]) -> None:
        """Write several chunks of data to the lock file."""
        self._file.writelines(lines)

    def abort(self) -> None:
        """Close and discard the lock file without touching the target.

        If the file is already closed, this is a no-op.
        """
        if self._closed:
            return
        self._file.close()
        try:
            os.remove(self._lockfilename)
        except FileNotFoundError:
            # The lock may have been renamed already.
            pass
        self._closed = True

    def close(self) -> None:
        """Commit the lock file over the original and release the lock.

        Raises:
          OSError: if the original file could not be replaced. The lock
            file is removed in that case.
        """
        if self._closed:
            return
        self._file.flush()
        if self._fsync:
            os.fsync(self._file.fileno())
        self._file.close()
        try:
            os.replace(self._lockfilename, self._filename)
        finally:
            self.abort()

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            warnings.warn(f"unclosed {self!r}", ResourceWarning, stacklevel=2)
            self.abort()

    def __enter__(self) -> "LockedFile":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.abort()
        else:
            self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._filename!r}>"
