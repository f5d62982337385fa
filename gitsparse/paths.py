# paths.py -- Canonical form of sparse-checkout paths
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

"""Canonical form of paths stored in the sparse-checkout file.

A canonical path is trimmed, lowercased, has every special character
escaped with a backslash and is percent-encoded the way a URI is, so it can
be stored in a flat file or embedded in a URI without further quoting.

Escaping is applied on every call. Text that is already clean (lowercase,
no surrounding whitespace, no ``#``/``!`` and nothing that needs
percent-encoding) canonicalizes to itself; anything else is escaped again
when canonicalized a second time.
"""

__all__ = [
    "ESCAPE_CHARACTER",
    "SPECIAL_CHARACTERS",
    "SparsePath",
    "canonicalize_path",
]

from urllib.parse import quote

ESCAPE_CHARACTER = "\\"
SPECIAL_CHARACTERS = ("#", "!")

# Reserved URI characters are left alone, like a URI escaper does for a
# whole URI rather than a single component.
_URI_SAFE = ":/?#[]@!$&'()*+,;="


def canonicalize_path(raw: str) -> str:
    """Normalize a raw path into its canonical, storable form.

    Args:
      raw: Path as typed by a user or read from a file
    Returns:
      The canonical path; an empty string for empty or blank input
    Raises:
      TypeError: if raw is not a string
    """
    if not isinstance(raw, str):
        raise TypeError(f"expected str, got {type(raw).__name__}")
    text = raw.strip()
    if not text:
        return ""
    chars = []
    for c in text.lower():
        if c in SPECIAL_CHARACTERS:
            chars.append(ESCAPE_CHARACTER)
        chars.append(c)
    return quote("".join(chars), safe=_URI_SAFE)


class SparsePath:
    """A canonical sparse-checkout path.

    Equality, hashing and comparison ignore case. Conversion is explicit in
    both directions: construct from raw text, use ``str()`` to get the
    canonical text back.
    """

    __slots__ = ("_value",)

    def __init__(self, raw: str) -> None:
        self._value = canonicalize_path(raw)

    @property
    def value(self) -> str:
        return self._value

    def compare(self, other: "SparsePath | str") -> int:
        """Compare with another path, ignoring case.

        Returns:
          -1, 0 or 1
        """
        a = self._value.lower()
        b = str(other).lower()
        return (a > b) - (a < b)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SparsePath, str)):
            return self.compare(other) == 0
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value.lower())

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"
