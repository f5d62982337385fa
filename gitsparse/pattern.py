# pattern.py -- Classified sparse-checkout patterns
# Copyright (C) 2017 Jelmer Vernooij <jelmer@jelmer.uk>
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

"""Parsing and classification of sparse-checkout pattern lines.

Each line of ``$GIT_DIR/info/sparse-checkout`` is one of:

- empty
- a comment, starting with ``#``
- an exclusive pattern, starting with ``!``
- an inclusive pattern (anything else)

Patterns use gitignore syntax. A :class:`Pattern` is an immutable value:
operations that would change its text return a new instance instead.
"""

__all__ = [
    "COMMENT_MARKER",
    "DEPTH1_MATCH",
    "DEPTHN_MATCH",
    "ESCAPE_CHARACTER",
    "EXCLUSION_MARKER",
    "PATH_SEPARATOR",
    "Pattern",
    "PatternKind",
    "classify",
    "clean_pattern",
    "compare_patterns",
    "is_subsumed",
    "translate",
]

import enum
import re

COMMENT_MARKER = "#"
ESCAPE_CHARACTER = "\\"
EXCLUSION_MARKER = "!"
PATH_SEPARATOR = "/"
DEPTH1_MATCH = "*"
DEPTHN_MATCH = "**"


class PatternKind(enum.Flag):
    """Classification of a pattern line, also usable as an admission mask."""

    NONE = 0
    COMMENT = 1
    EMPTY = 2
    EXCLUSIVE = 4
    INCLUSIVE = 8

    PATTERNS = EXCLUSIVE | INCLUSIVE
    ANY = COMMENT | EMPTY | EXCLUSIVE | INCLUSIVE


def _rstrip_unescaped(text: str) -> str:
    # Trailing whitespace is kept when the character before it is escaped.
    end = len(text)
    while end > 0 and text[end - 1].isspace():
        if end > 1 and text[end - 2] == ESCAPE_CHARACTER:
            break
        end -= 1
    return text[:end]


def clean_pattern(raw: str, admit: PatternKind = PatternKind.ANY) -> str:
    """Canonicalize the raw text of a pattern line.

    Args:
      raw: Line as read from a file or given by a user
      admit: Classifications the caller is willing to accept; a leading
        marker for a classification that is not admitted is escaped so it
        becomes literal text.
    Returns:
      The cleaned text; an empty string when nothing admissible remains
    """
    if not isinstance(raw, str):
        raise TypeError(f"expected str, got {type(raw).__name__}")

    if not admit & (PatternKind.PATTERNS | PatternKind.COMMENT):
        return ""
    text = raw.lstrip()
    if admit == PatternKind.COMMENT and not text.startswith(COMMENT_MARKER):
        return ""
    text = _rstrip_unescaped(text)

    if text.startswith(COMMENT_MARKER) and not admit & PatternKind.COMMENT:
        text = ESCAPE_CHARACTER + text
    elif text.startswith(EXCLUSION_MARKER) and not admit & PatternKind.EXCLUSIVE:
        text = ESCAPE_CHARACTER + text

    return text.rstrip(PATH_SEPARATOR)


def classify(text: str) -> PatternKind:
    """Classify pattern text by its first character."""
    if not text:
        return PatternKind.EMPTY
    if text[0] == COMMENT_MARKER:
        return PatternKind.COMMENT
    if text[0] == EXCLUSION_MARKER:
        return PatternKind.EXCLUSIVE
    return PatternKind.INCLUSIVE


def _translate_segment(segment: str) -> str:
    if segment == "*":
        return "[^/]+"

    res = ""
    i, n = 0, len(segment)
    while i < n:
        c = segment[i]
        i += 1
        if c == "*":
            res += "[^/]*"
        elif c == "?":
            res += "[^/]"
        elif c == "\\":
            if i < n:
                res += re.escape(segment[i])
                i += 1
            else:
                res += re.escape(c)
        elif c == "[":
            j = i
            if j < n and segment[j] == "!":
                j += 1
            if j < n and segment[j] == "]":
                j += 1
            while j < n and segment[j] != "]":
                j += 1
            if j >= n:
                res += "\\["
            else:
                stuff = segment[i:j].replace("\\", "\\\\")
                i = j + 1
                if stuff.startswith("!"):
                    stuff = "^" + stuff[1:]
                elif stuff.startswith("^"):
                    stuff = "\\" + stuff
                res += "[" + stuff + "]"
        else:
            res += re.escape(c)
    return res


def _translate_double_asterisk(segments: list[str], i: int) -> tuple[str, bool]:
    """Translate a ``**`` segment, returns (regex_part, skip_next)."""
    remaining = segments[i + 1 :]
    if all(s == "" for s in remaining):
        return ".*", False

    if i + 1 < len(segments) and segments[i + 1] == "**":
        remaining_after_next = segments[i + 2 :]
        if len(remaining_after_next) == 1 and remaining_after_next[0] == "":
            # c/**/**/ needs at least one intermediate directory
            return "[^/]+/(?:[^/]+/)*", True
        return "(?:[^/]+/)*", True
    if i == 0:
        return "(?:.*/)??", False
    return "(?:[^/]+/)*", False


def translate(pat: str) -> str:
    """Translate a gitignore pattern to a regular expression.

    ``*`` and ``?`` never match ``/``, ``**`` matches any number of whole
    directories, a pattern without a slash matches at any depth and a
    leading slash anchors the pattern at the top of the tree.
    """
    res = "(?ms)"

    if "//" in pat:
        # git treats these as broken and never matches them
        return "(?!.*)"

    if "/" not in pat[:-1]:
        res += "(.*/)?"

    if pat.startswith("/**/"):
        pat = pat[4:]
        res += "(.*/)?"
    elif pat.startswith("**/"):
        pat = pat[3:]
        res += "(.*/)?"
    elif pat.startswith("/"):
        pat = pat[1:]

    if pat == "**":
        res += ".*"
    else:
        segments = pat.split("/")
        i = 0
        while i < len(segments):
            segment = segments[i]
            if i > 0 and segments[i - 1] != "**":
                res += re.escape("/")
            if segment == "**":
                regex_part, skip_next = _translate_double_asterisk(segments, i)
                res += regex_part
                if regex_part == ".*":
                    break
                if skip_next:
                    i += 1
            else:
                res += _translate_segment(segment)
            i += 1

    if not pat.endswith("/"):
        res += "/?"

    return res + "\\Z"


class Pattern:
    """A single classified line of a sparse-checkout file."""

    __slots__ = ("_kind", "_regex", "_value")

    def __init__(self, raw: str = "", admit: PatternKind = PatternKind.ANY) -> None:
        """Create a pattern from raw text.

        Args:
          raw: Text of the line
          admit: Classifications the caller accepts, see :func:`clean_pattern`
        """
        self._value = clean_pattern(raw, admit)
        self._kind = classify(self._value)
        self._regex: dict[bool, re.Pattern[str]] = {}

    @classmethod
    def _from_value(cls, value: str) -> "Pattern":
        self = cls.__new__(cls)
        self._value = value
        self._kind = classify(value)
        self._regex = {}
        return self

    @property
    def value(self) -> str:
        """Stored text of the line, including any leading marker."""
        return self._value

    @property
    def kind(self) -> PatternKind:
        return self._kind

    @property
    def is_comment(self) -> bool:
        return self._kind == PatternKind.COMMENT

    @property
    def is_empty(self) -> bool:
        return self._kind == PatternKind.EMPTY

    @property
    def is_exclusive(self) -> bool:
        return self._kind == PatternKind.EXCLUSIVE

    @property
    def is_inclusive(self) -> bool:
        return self._kind == PatternKind.INCLUSIVE

    @property
    def is_pattern(self) -> bool:
        return bool(self._kind & PatternKind.PATTERNS)

    @property
    def pattern(self) -> str:
        """The path pattern without its exclusion marker.

        Empty for comments and empty lines.
        """
        if self._kind == PatternKind.EXCLUSIVE:
            return self._value[1:]
        if self._kind == PatternKind.INCLUSIVE:
            return self._value
        return ""

    def with_comment(self, comment: bool) -> "Pattern":
        """Return a copy of this pattern with the comment marker set or cleared."""
        if self.is_empty or comment == self.is_comment:
            return self
        if comment:
            return self._from_value(COMMENT_MARKER + self._value)
        return self._from_value(self._value[1:])

    def with_exclusive(self, exclusive: bool) -> "Pattern":
        """Return a copy of this pattern with the exclusion marker set or cleared.

        Only inclusive patterns can be made exclusive and only exclusive
        ones made inclusive; anything else is returned unchanged.
        """
        if exclusive and self.is_inclusive:
            return self._from_value(EXCLUSION_MARKER + self._value)
        if not exclusive and self.is_exclusive:
            return self._from_value(self._value[1:])
        return self

    def _compiled(self, ignorecase: bool) -> re.Pattern[str]:
        try:
            return self._regex[ignorecase]
        except KeyError:
            pat = self.pattern
            if (
                pat.startswith(ESCAPE_CHARACTER)
                and len(pat) > 1
                and pat[1] in (COMMENT_MARKER, EXCLUSION_MARKER)
            ):
                pat = pat[1:]
            regex = re.compile(translate(pat), re.IGNORECASE if ignorecase else 0)
            self._regex[ignorecase] = regex
            return regex

    def match(self, path: str, ignorecase: bool = False) -> bool:
        """Check whether a path is matched by this pattern.

        The marker is not taken into account: ``!foo`` matches ``foo``.
        Comments and empty lines match nothing.

        Args:
          path: Slash-separated path relative to the top of the tree; use
            a trailing slash for directories
          ignorecase: Whether to match case-insensitively
        """
        if not self.is_pattern:
            return False
        return bool(self._compiled(ignorecase).match(path))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Pattern):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


def compare_patterns(a: Pattern | str, b: Pattern | str, ignore_case: bool = False) -> int:
    """Compare the raw text of two patterns.

    Ordering is ordinal, character by character; on a common prefix the
    shorter text sorts first.

    Returns:
      -1, 0 or 1
    """
    x = str(a)
    y = str(b)
    if ignore_case:
        x = x.lower()
        y = y.lower()
    return (x > y) - (x < y)


def is_subsumed(major: Pattern, minor: Pattern) -> bool:
    """Check whether every path matched by ``minor`` is matched by ``major``.

    The decision is a walk over the slash-separated segments of both
    patterns, where ``*`` stands for exactly one segment and ``**`` for any
    number of segments. Wildcards are only honoured on the major side: a
    ``*`` or ``**`` in the minor is covered by the same wildcard in the
    major, never by a literal segment. When in doubt the answer is False.

    Args:
      major: The pattern that may cover the other
      minor: The pattern that may be covered
    """
    if compare_patterns(major, minor) == 0:
        return True
    if not (major.is_pattern and minor.is_pattern):
        return False
    if major.pattern == DEPTH1_MATCH:
        return True

    majors = major.pattern.split(PATH_SEPARATOR)
    minors = minor.pattern.split(PATH_SEPARATOR)
    a = b = 0
    trailing = False

    while b < len(minors) and a < len(majors):
        start = (a, b)

        while a < len(majors) and b < len(minors) and majors[a] == minors[b]:
            a += 1
            b += 1

        if (
            a < len(majors)
            and b < len(minors)
            and majors[a] == DEPTH1_MATCH
            and minors[b] != DEPTHN_MATCH
        ):
            a += 1
            b += 1

        while b < len(minors) and a < len(majors) and majors[a] == DEPTHN_MATCH:
            trailing = a == len(majors) - 1
            b += 1
            if a + 1 < len(majors) and b < len(minors) and majors[a + 1] == minors[b]:
                a += 1

        if b < len(minors) and a < len(majors) and minors[b] == DEPTHN_MATCH:
            # Only a ``**`` in the major can cover any depth.
            return False

        if (a, b) == start:
            # Literal mismatch; nothing further can line up.
            break

    # A trailing ``**`` only counts once it has absorbed minor segments.
    return b >= len(minors) and (a >= len(majors) or trailing)
