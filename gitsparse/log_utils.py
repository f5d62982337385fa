# log_utils.py -- Logging utilities for gitsparse
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

"""Logging utilities for gitsparse.

gitsparse is mostly used as a library by the sparse-checkout helper and by
other tools, so the ``gitsparse`` logger carries a null handler and stays
silent until the embedding program configures logging. Modules get their
logger with ``getLogger(__name__)``.

Like git itself, the command-line front end honours ``GIT_TRACE``:

- ``1``, ``2`` or ``true`` traces to stderr
- an integer from 3 to 9 traces to that file descriptor
- an absolute file path appends to that file
- an absolute directory path writes ``trace.<pid>`` inside it

Any other value disables tracing.
"""

__all__ = [
    "TRACE_FORMAT",
    "default_logging_config",
    "getLogger",
    "remove_null_handler",
]

import logging
import os
import sys
from collections.abc import Mapping

getLogger = logging.getLogger

TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

_STDERR = 2

_NULL_HANDLER = logging.NullHandler()
_GITSPARSE_LOGGER = getLogger("gitsparse")
_GITSPARSE_LOGGER.addHandler(_NULL_HANDLER)


def _get_trace_target(env: Mapping[str, str] | None = None) -> str | int | None:
    """Interpret the GIT_TRACE environment variable.

    Returns:
      None when tracing is disabled, 2 for stderr, a file descriptor
      between 3 and 9, or an absolute path.
    """
    if env is None:
        env = os.environ
    value = env.get("GIT_TRACE", "")
    if not value or value.lower() in ("0", "false"):
        return None
    if value.lower() in ("1", "2", "true"):
        return _STDERR
    if value.isdigit():
        fd = int(value)
        return fd if 3 <= fd <= 9 else None
    if os.path.isabs(value):
        return value
    return None


def _open_trace_handler(target: str | int) -> logging.Handler:
    if target == _STDERR:
        return logging.StreamHandler(sys.stderr)
    if isinstance(target, int):
        return logging.StreamHandler(os.fdopen(target, "w", buffering=1))
    if os.path.isdir(target):
        target = os.path.join(target, f"trace.{os.getpid()}")
    return logging.FileHandler(target, mode="a")


def _configure_logging_from_trace(env: Mapping[str, str] | None = None) -> bool:
    """Send debug output to the GIT_TRACE destination, if one is set.

    Returns:
      True if tracing was configured, False otherwise.
    """
    target = _get_trace_target(env)
    if target is None:
        return False
    try:
        handler = _open_trace_handler(target)
    except OSError as e:
        sys.stderr.write(f"Warning: Failed to open GIT_TRACE target {target}: {e}\n")
        return False
    handler.setFormatter(logging.Formatter(TRACE_FORMAT))
    remove_null_handler()
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    return True


def default_logging_config() -> None:
    """Set up logging for command-line use.

    Trace output goes where GIT_TRACE points; otherwise messages of level
    INFO and above are written to stderr.
    """
    remove_null_handler()
    if not _configure_logging_from_trace():
        logging.basicConfig(
            level=logging.INFO,
            stream=sys.stderr,
            format="%(levelname)s: %(message)s",
        )


def remove_null_handler() -> None:
    """Remove the null handler from the gitsparse logger."""
    _GITSPARSE_LOGGER.removeHandler(_NULL_HANDLER)
