#!/usr/bin/env python3
# cli.py -- Command-line interface to gitsparse
# Copyright (C) 2008-2011 Jelmer Vernooij <jelmer@jelmer.uk>
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

"""Command-line interface to gitsparse.

Usage: gitsparse [-C DIR] [status | init | add | remove] ...

Without a command the sparse-checkout status of the current repository is
shown.
"""

__all__ = [
    "Command",
    "commands",
    "main",
    "signal_int",
]

import argparse
import os
import signal
import sys
import types
from collections.abc import Sequence

from .config import ConfigResolver
from .errors import GitSparseError
from .file import FileLocked
from .log_utils import default_logging_config, getLogger
from .sparse import (
    FEATURE_NAME,
    add_sparse_paths,
    init_sparse_checkout,
    remove_sparse_paths,
    sparse_status_lines,
)

logger = getLogger(__name__)


def signal_int(signal: int, frame: types.FrameType | None) -> None:
    """Handle interrupt signal by exiting.

    Args:
        signal: Signal number
        frame: Current stack frame
    """
    sys.exit(1)


class Command:
    """A gitsparse subcommand."""

    def __init__(self, directory: str = ".") -> None:
        self.directory = directory

    def load_config(self) -> ConfigResolver:
        return ConfigResolver.load(self.directory)

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_status(Command):
    """Show whether sparse checkout is enabled and its patterns."""

    def run(self, argv: Sequence[str]) -> int:
        parser = argparse.ArgumentParser(prog="gitsparse status")
        parser.parse_args(argv)
        for line in sparse_status_lines(self.load_config()):
            sys.stdout.write(line + "\n")
        return 0


class cmd_init(Command):
    """Enable sparse checkout and write the initial patterns."""

    def run(self, argv: Sequence[str]) -> int:
        """Execute the init command.

        Args:
            argv: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitsparse init")
        parser.add_argument(
            "--map",
            action="append",
            default=[],
            metavar="PATH",
            help="Path to include in the checkout",
        )
        parser.add_argument(
            "--not",
            action="append",
            default=[],
            dest="nots",
            metavar="PATH",
            help="Path to exclude from the checkout",
        )
        parser.add_argument(
            "--spec", metavar="FILE", help="Spec file with patterns and refspecs"
        )
        parser.add_argument(
            "--canonical",
            action="store_true",
            help="Canonicalize paths before storing them",
        )
        args = parser.parse_args(argv)

        result = init_sparse_checkout(
            self.load_config(),
            maps=args.map,
            nots=args.nots,
            spec_path=args.spec,
            cwd=self.directory,
            canonical=args.canonical,
        )
        if result.defaulted:
            sys.stdout.write(
                "warning: no paths were added to the sparse-checkout configuration.\n"
                "         defaulting to mapping everything.\n"
            )
        for refspec in result.refspecs:
            sys.stdout.write(f"fetch {refspec}\n")
        if not result.enabled:
            logger.error("Failed to enable %s", FEATURE_NAME)
            return 1
        sys.stdout.write(f"git {FEATURE_NAME} enabled.\n")
        return 0


class cmd_add(Command):
    """Add paths to the sparse checkout."""

    def run(self, argv: Sequence[str]) -> int:
        parser = argparse.ArgumentParser(prog="gitsparse add")
        parser.add_argument("path", nargs="+")
        parser.add_argument("--canonical", action="store_true")
        args = parser.parse_args(argv)
        add_sparse_paths(self.load_config(), args.path, canonical=args.canonical)
        return 0


class cmd_remove(Command):
    """Remove paths from the sparse checkout."""

    def run(self, argv: Sequence[str]) -> int:
        parser = argparse.ArgumentParser(prog="gitsparse remove")
        parser.add_argument("path", nargs="+")
        parser.add_argument("--canonical", action="store_true")
        args = parser.parse_args(argv)
        remove_sparse_paths(self.load_config(), args.path, canonical=args.canonical)
        return 0


commands: dict[str, type[Command]] = {
    "add": cmd_add,
    "init": cmd_init,
    "remove": cmd_remove,
    "status": cmd_status,
}

DEFAULT_COMMAND: type[Command] = cmd_status


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the gitsparse CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(
        prog="gitsparse",
        description="Manage the sparse checkout of a git repository",
    )
    parser.add_argument(
        "-C",
        dest="directory",
        default=os.curdir,
        help="Run as if started in DIRECTORY",
    )
    parser.add_argument(
        "command",
        nargs="?",
        help=f"Command to run. Available: {', '.join(sorted(commands.keys()))}",
    )
    parser.add_argument("args", nargs=argparse.REMAINDER)
    global_args = parser.parse_args(argv)

    default_logging_config()

    if global_args.command is None:
        cmd_kls: type[Command] = DEFAULT_COMMAND
    else:
        try:
            cmd_kls = commands[global_args.command]
        except KeyError:
            logger.error("No such subcommand: %s", global_args.command)
            return 1

    try:
        return cmd_kls(global_args.directory).run(global_args.args) or 0
    except (GitSparseError, FileLocked, NotADirectoryError) as e:
        logger.error("%s", e)
        return 1


def _main() -> None:
    signal.signal(signal.SIGINT, signal_int)
    sys.exit(main())


if __name__ == "__main__":
    _main()
