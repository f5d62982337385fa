# config.py -- Reading layered Git configuration files
# Copyright (C) 2011-2013 Jelmer Vernooij and others
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

"""Reading layered Git configuration files.

The system, XDG, global and repository-local files are merged, in that
order, into one case-insensitive map from dotted keys
(``section.subsection.name``) to values. A later file overrides keys set by
an earlier one.

The parser is deliberately forgiving: it understands one ``key = value``
per line and ``[section]`` / ``[section "subsection"]`` headers, and skips
everything else without complaint.
"""

__all__ = [
    "CaseInsensitiveDict",
    "ConfigLocations",
    "ConfigLookup",
    "ConfigResolver",
    "LookupStatus",
    "get_win_system_paths",
    "get_xdg_config_home_path",
    "lower_key",
    "parse_config",
]

import enum
import os
import re
import sys
from collections.abc import (
    Iterable,
    Iterator,
    Mapping,
    MutableMapping,
)
from contextlib import suppress
from typing import Generic, NamedTuple, TypeVar
from urllib.parse import urlsplit

from .errors import NotGitRepository
from .log_utils import getLogger
from .repo import controldir_config_path, find_repository

logger = getLogger(__name__)

HOST_SPLIT_CHARACTER = "."

_COMMENT_RE = re.compile(r"^\s*[#;]")
_SECTION_RE = re.compile(r'^\s*\[\s*(\w+)\s*("[^\]]+)?\]')
_ENTRY_RE = re.compile(r"^\s*(\w+)\s*=\s*(.+)")

_TRUE_VALUES = ("true", "yes", "on", "1")
_FALSE_VALUES = ("false", "no", "off", "0")

V = TypeVar("V")


def lower_key(key: str) -> str:
    """Fold a config key for case-insensitive comparison.

    Raises:
      TypeError: If key is not a str
    """
    if isinstance(key, str):
        return key.lower()
    raise TypeError(key)


class CaseInsensitiveDict(MutableMapping[str, V], Generic[V]):
    """A dictionary with case-insensitive string keys.

    The spelling of a key as first inserted is kept for iteration.
    """

    def __init__(self, dict_in: Mapping[str, V] | None = None) -> None:
        self._keyed: dict[str, tuple[str, V]] = {}
        if dict_in is not None:
            for key, value in dict_in.items():
                self[key] = value

    def __len__(self) -> int:
        return len(self._keyed)

    def __iter__(self) -> Iterator[str]:
        return (key for key, _value in self._keyed.values())

    def __setitem__(self, key: str, value: V) -> None:
        lower = lower_key(key)
        original = self._keyed.get(lower, (key, value))[0]
        self._keyed[lower] = (original, value)

    def __delitem__(self, key: str) -> None:
        del self._keyed[lower_key(key)]

    def __getitem__(self, key: str) -> V:
        return self._keyed[lower_key(key)][1]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and lower_key(key) in self._keyed

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


def _trim_quotes(value: str) -> str:
    # Only trim in pairs; an unmatched leading quote is dropped on its own.
    if value.startswith('"'):
        if len(value) > 1 and value.endswith('"'):
            return value[1:-1]
        return value[1:]
    return value


def parse_config(lines: Iterable[str], destination: MutableMapping[str, str]) -> None:
    """Parse configuration lines into a flat map.

    Lines that are blank, commented out or not understood are skipped. Keys
    that appear before any section header are stored without a prefix.

    Args:
      lines: Lines of a configuration file
      destination: Map receiving ``section[.subsection].name`` keys
    """
    section: str | None = None
    for line in lines:
        if not line.strip() or _COMMENT_RE.match(line):
            continue
        m = _SECTION_RE.match(line)
        if m:
            section = m.group(1).strip()
            if m.group(2) and m.group(2).strip():
                section += HOST_SPLIT_CHARACTER + _trim_quotes(m.group(2).strip())
            continue
        m = _ENTRY_RE.match(line)
        if m:
            name = m.group(1).strip()
            key = name if section is None else section + HOST_SPLIT_CHARACTER + name
            destination[key] = _trim_quotes(m.group(2).strip())
            continue
        logger.debug("Skipping unrecognized config line: %r", line)


def get_xdg_config_home_path(*path_segments: str) -> str:
    """Get a path in the XDG config home directory.

    Args:
      *path_segments: Path segments to join to the XDG config home

    Returns:
      Full path in XDG config home directory
    """
    xdg_config_home = os.environ.get(
        "XDG_CONFIG_HOME",
        os.path.expanduser("~/.config/"),
    )
    return os.path.join(xdg_config_home, *path_segments)


def _find_git_in_win_path() -> Iterator[str]:
    for exe in ("git.exe", "git.cmd"):
        for path in os.environ.get("PATH", "").split(";"):
            if os.path.exists(os.path.join(path, exe)):
                # in windows native shells (powershell/cmd) exe path is
                # .../Git/bin/git.exe or .../Git/cmd/git.exe
                #
                # in git-bash exe path is .../Git/mingw64/bin/git.exe
                git_dir, _bin_dir = os.path.split(path)
                yield git_dir
                parent_dir, basename = os.path.split(git_dir)
                if basename == "mingw32" or basename == "mingw64":
                    yield parent_dir
                break


def _find_git_in_win_reg() -> Iterator[str]:
    import platform
    import winreg

    if platform.machine() == "AMD64":
        subkey = (
            "SOFTWARE\\Wow6432Node\\Microsoft\\Windows\\"
            "CurrentVersion\\Uninstall\\Git_is1"
        )
    else:
        subkey = "SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Uninstall\\Git_is1"

    for key in (winreg.HKEY_CURRENT_USER, winreg.HKEY_LOCAL_MACHINE):  # type: ignore[attr-defined,unused-ignore]
        with suppress(OSError):
            with winreg.OpenKey(key, subkey) as k:  # type: ignore[attr-defined,unused-ignore]
                val, typ = winreg.QueryValueEx(k, "InstallLocation")  # type: ignore[attr-defined,unused-ignore]
                if typ == winreg.REG_SZ:  # type: ignore[attr-defined,unused-ignore]
                    yield val


def get_win_system_paths() -> Iterator[str]:
    """Get the Git for Windows system config path.

    The installation is looked up on PATH first, then in the registry.
    """
    for git_dir in _find_git_in_win_path():
        yield os.path.join(git_dir, "etc", "gitconfig")
        return

    for git_dir in _find_git_in_win_reg():
        yield os.path.join(git_dir, "etc", "gitconfig")
        return


class ConfigLocations(NamedTuple):
    """Paths of the four configuration layers; None for an absent layer."""

    system: str | None = None
    xdg: str | None = None
    global_: str | None = None
    local: str | None = None

    @classmethod
    def discover(cls, start_directory: str | os.PathLike[str]) -> "ConfigLocations":
        """Find the configuration files that apply to a directory.

        See git-config(1) for details on the files searched.
        """
        try:
            system: str | None = os.environ["GIT_CONFIG_SYSTEM"]
        except KeyError:
            system = None
            if "GIT_CONFIG_NOSYSTEM" not in os.environ:
                if sys.platform == "win32":
                    system = next(get_win_system_paths(), None)
                else:
                    system = "/etc/gitconfig"

        xdg = get_xdg_config_home_path("git", "config")

        try:
            global_ = os.environ["GIT_CONFIG_GLOBAL"]
        except KeyError:
            global_ = os.path.expanduser("~/.gitconfig")

        try:
            local: str | None = controldir_config_path(
                find_repository(start_directory).controldir
            )
        except NotGitRepository:
            local = None

        return cls(system, xdg, global_, local)


class LookupStatus(enum.Enum):
    """Outcome of a configuration lookup."""

    FOUND = "found"
    NOT_FOUND = "not-found"
    INVALID_ARGUMENT = "invalid-argument"


class ConfigLookup(NamedTuple):
    """Result of a configuration lookup.

    ``key`` is the key that matched, or the last key tried.
    """

    status: LookupStatus
    key: str | None = None
    value: str | None = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND


_INVALID = ConfigLookup(LookupStatus.INVALID_ARGUMENT)


def _valid(*args: object) -> bool:
    return all(isinstance(a, str) and a for a in args)


class ConfigResolver:
    """Merged view of the configuration that applies to a directory.

    Build one with :meth:`load`; the instance does not change afterwards.
    """

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values: CaseInsensitiveDict[str] = CaseInsensitiveDict(values)
        self.system_path: str | None = None
        self.xdg_path: str | None = None
        self.global_path: str | None = None
        self.local_path: str | None = None
        self.start_directory: str | None = None

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "ConfigResolver":
        """Create a resolver from the lines of a single configuration file."""
        ret = cls()
        parse_config(lines, ret._values)
        return ret

    @classmethod
    def load(
        cls,
        start_directory: str | os.PathLike[str],
        locations: ConfigLocations | None = None,
    ) -> "ConfigResolver":
        """Load the configuration layers that apply to a directory.

        Args:
          start_directory: Directory to resolve the configuration for; the
            local layer comes from the repository enclosing it
          locations: Explicit layer paths, discovered when omitted
        Raises:
          ValueError: if start_directory is empty
          NotADirectoryError: if start_directory is not a directory
        """
        if not start_directory:
            raise ValueError("start_directory must not be empty")
        start_directory = os.fspath(start_directory)
        if not os.path.isdir(start_directory):
            raise NotADirectoryError(start_directory)
        if locations is None:
            locations = ConfigLocations.discover(start_directory)
        logger.debug("Loading gitconfig from paths: %s", locations)

        ret = cls()
        ret.start_directory = start_directory
        ret.system_path = ret._parse_file(locations.system)
        ret.xdg_path = ret._parse_file(locations.xdg)
        ret.global_path = ret._parse_file(locations.global_)
        ret.local_path = ret._parse_file(locations.local)
        for key, value in ret._values.items():
            logger.debug("%s = %s", key, value)
        return ret

    def _parse_file(self, path: str | None) -> str | None:
        if not path:
            return None
        try:
            with open(path, encoding="utf-8-sig", errors="replace") as f:
                parse_config(f, self._values)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            logger.debug("Gitconfig file not found: %s", path)
            return None
        logger.debug("Successfully loaded gitconfig from: %s", path)
        return path

    def lookup(self, key: str) -> ConfigLookup:
        """Look up a key exactly, ignoring case."""
        if not _valid(key):
            return _INVALID
        try:
            return ConfigLookup(LookupStatus.FOUND, key, self._values[key])
        except KeyError:
            return ConfigLookup(LookupStatus.NOT_FOUND, key)

    def lookup_scoped(self, prefix: str, name: str | None, suffix: str) -> ConfigLookup:
        """Look up ``prefix.name.suffix``, or ``prefix.suffix`` without a name."""
        if not _valid(prefix, suffix):
            return _INVALID
        if name:
            key = f"{prefix}.{name}.{suffix}"
        else:
            key = f"{prefix}.{suffix}"
        return self.lookup(key)

    def lookup_hierarchical(
        self,
        prefix: str,
        target: str,
        suffix: str,
        scheme: str | None = None,
    ) -> ConfigLookup:
        """Look up a key for a host, from most to least specific.

        The keys tried are ``prefix.scheme://host.suffix``,
        ``prefix.host.suffix``, then ``prefix.<host>.suffix`` with one leading
        label of the host dropped at a time (never down to the top-level
        label alone) and finally ``prefix.suffix``.

        Args:
          prefix: First part of the key, e.g. "credential"
          target: Host name or URL
          suffix: Last part of the key, e.g. "authority"
          scheme: URL scheme, when target is a bare host name
        """
        if not _valid(prefix, suffix) or not isinstance(target, str):
            return _INVALID

        host = target
        if "://" in target:
            parsed = urlsplit(target)
            scheme = parsed.scheme
            host = parsed.hostname or ""

        if host:
            names = []
            if scheme:
                names.append(f"{scheme}://{host}")
            names.append(host)
            fragments = host.split(HOST_SPLIT_CHARACTER)
            for i in range(1, len(fragments) - 1):
                names.append(HOST_SPLIT_CHARACTER.join(fragments[i:]))
            for name in names:
                result = self.lookup_scoped(prefix, name, suffix)
                if result.found:
                    return result

        return self.lookup_scoped(prefix, None, suffix)

    def _unwrap(self, result: ConfigLookup) -> str | None:
        if result.status is LookupStatus.INVALID_ARGUMENT:
            raise ValueError("configuration keys must be non-empty strings")
        return result.value

    def get(self, key: str) -> str | None:
        """Get a configuration value.

        Returns: The value, or None if the key is not set
        Raises:
          ValueError: if key is empty or not a string
        """
        return self._unwrap(self.lookup(key))

    def get_scoped(self, prefix: str, name: str | None, suffix: str) -> str | None:
        return self._unwrap(self.lookup_scoped(prefix, name, suffix))

    def get_hierarchical(
        self,
        prefix: str,
        target: str,
        suffix: str,
        scheme: str | None = None,
    ) -> str | None:
        """Get the most specific value of a key for a host or URL.

        See :meth:`lookup_hierarchical` for the keys tried.
        """
        return self._unwrap(self.lookup_hierarchical(prefix, target, suffix, scheme))

    def get_boolean(self, key: str, default: bool | None = None) -> bool | None:
        """Retrieve a configuration setting as boolean.

        Args:
          key: Dotted configuration key
          default: Default value if setting is not found

        Returns:
          Contents of the setting
        Raises:
          ValueError: if the value is not a valid boolean string
        """
        value = self.get(key)
        if value is None:
            return default
        if value.lower() in _TRUE_VALUES:
            return True
        elif value.lower() in _FALSE_VALUES:
            return False
        raise ValueError(f"not a valid boolean string: {value!r}")

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._values.items()))

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} for {self.start_directory!r}>"
