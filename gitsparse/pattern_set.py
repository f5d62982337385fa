# pattern_set.py -- Ordered collections of sparse-checkout patterns
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

"""Ordered, thread-safe collections of sparse-checkout patterns."""

__all__ = [
    "AdmissionMode",
    "PatternSet",
    "ReconcilePolicy",
]

import enum
import threading
from collections.abc import Iterable, Iterator

from .log_utils import getLogger
from .pattern import Pattern, PatternKind, is_subsumed

logger = getLogger(__name__)


class AdmissionMode(enum.Enum):
    """Restriction applied to a single insert."""

    UNRESTRICTED = "unrestricted"
    ONLY_INCLUSIVE = "only-inclusive"
    ONLY_EXCLUSIVE = "only-exclusive"


class ReconcilePolicy(enum.Enum):
    """What to do with redundant patterns after an insert."""

    KEEP_ALL = "keep-all"
    # Drop exclusive patterns covered by another exclusive pattern; of two
    # patterns covering each other the earlier one stays.
    PRUNE_EXCLUSIVE = "prune-exclusive"


class PatternSet:
    """An ordered set of :class:`Pattern` objects.

    The set only accepts the classifications in its admission mask, which
    always includes inclusive and exclusive patterns. Once made read-only,
    every structural change is refused by returning False.

    All access is serialized by a per-instance lock, so a set can be shared
    between threads.
    """

    def __init__(
        self,
        patterns: Iterable[Pattern | str] | None = None,
        admission: PatternKind = PatternKind.ANY,
        policy: ReconcilePolicy = ReconcilePolicy.PRUNE_EXCLUSIVE,
    ) -> None:
        self._lock = threading.RLock()
        self._admission = admission | PatternKind.PATTERNS
        self._policy = policy
        self._read_only = False
        self._patterns: list[Pattern] = []
        if patterns is not None:
            # Initial patterns go through the same admission and pruning as
            # later inserts.
            self.add_many(patterns)

    @property
    def admission(self) -> PatternKind:
        return self._admission

    @property
    def policy(self) -> ReconcilePolicy:
        return self._policy

    @property
    def read_only(self) -> bool:
        with self._lock:
            return self._read_only

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not self._patterns

    def set_read_only(self, read_only: bool = True) -> bool:
        """Freeze the set.

        Freezing cannot be undone: asking to unfreeze a frozen set returns
        False and leaves it frozen.

        Returns:
          True if the set is now in the requested state
        """
        with self._lock:
            if self._read_only and not read_only:
                return False
            self._read_only = read_only
            return True

    def _admits(self, item: Pattern, mode: AdmissionMode) -> bool:
        if item.is_comment and not self._admission & PatternKind.COMMENT:
            return False
        if item.is_empty and not self._admission & PatternKind.EMPTY:
            return False
        if mode is AdmissionMode.ONLY_INCLUSIVE:
            return item.is_inclusive
        if mode is AdmissionMode.ONLY_EXCLUSIVE:
            return item.is_exclusive
        return True

    def add(
        self,
        item: Pattern | str | None,
        mode: AdmissionMode = AdmissionMode.UNRESTRICTED,
    ) -> bool:
        """Append a pattern to the set.

        Args:
          item: Pattern to add; a string is parsed as a pattern line
          mode: Further restriction on the classification of item
        Returns:
          True if the item was admitted, even if reconciliation removed it
          again afterwards
        """
        if item is None:
            return False
        if isinstance(item, str):
            item = Pattern(item)
        elif not isinstance(item, Pattern):
            raise TypeError(f"expected Pattern or str, got {type(item).__name__}")
        with self._lock:
            if self._read_only or not self._admits(item, mode):
                logger.debug("rejected pattern %r (mode %s)", item.value, mode.value)
                return False
            self._patterns.append(item)
            self._reconcile()
            return True

    def add_only_inclusive(self, item: Pattern | str | None) -> bool:
        """Add item only if it is an inclusive pattern."""
        return self.add(item, AdmissionMode.ONLY_INCLUSIVE)

    def add_only_exclusive(self, item: Pattern | str | None) -> bool:
        """Add item only if it is an exclusive pattern."""
        return self.add(item, AdmissionMode.ONLY_EXCLUSIVE)

    def add_many(
        self,
        items: Iterable[Pattern | str | None] | None,
        mode: AdmissionMode = AdmissionMode.UNRESTRICTED,
    ) -> tuple[list[Pattern], bool]:
        """Add several patterns, each independently of the others.

        Returns:
          Tuple with the items that were admitted and whether all of them were
        """
        if items is None:
            return [], False
        added: list[Pattern] = []
        success = True
        with self._lock:
            for item in items:
                pattern = Pattern(item) if isinstance(item, str) else item
                if pattern is not None and self.add(pattern, mode):
                    added.append(pattern)
                else:
                    success = False
        return added, success

    def remove(self, item: Pattern | str) -> bool:
        """Remove the first pattern equal to item.

        Returns:
          False if the set is read-only or holds no such pattern
        """
        with self._lock:
            if self._read_only:
                return False
            try:
                self._patterns.remove(item)
            except ValueError:
                return False
            return True

    def clear(self) -> bool:
        """Remove all patterns, unless the set is read-only."""
        with self._lock:
            if self._read_only:
                return False
            self._patterns.clear()
            return True

    def _reconcile(self) -> None:
        if self._read_only or not self._patterns:
            return
        if self._policy is ReconcilePolicy.KEEP_ALL:
            return
        exclusive = [
            (i, p) for i, p in enumerate(self._patterns) if p.is_exclusive
        ]
        redundant = set()
        for i, minor in exclusive:
            for j, major in exclusive:
                if i == j or not is_subsumed(major, minor):
                    continue
                if j < i or not is_subsumed(minor, major):
                    redundant.add(i)
                    break
        if redundant:
            for i in sorted(redundant):
                logger.debug(
                    "dropping redundant exclusive pattern %r", self._patterns[i].value
                )
            self._patterns = [
                p for i, p in enumerate(self._patterns) if i not in redundant
            ]

    def inclusive(self) -> list[Pattern]:
        """Return the inclusive patterns, in order."""
        with self._lock:
            return [p for p in self._patterns if p.is_inclusive]

    def exclusive(self) -> list[Pattern]:
        """Return the exclusive patterns, in order."""
        with self._lock:
            return [p for p in self._patterns if p.is_exclusive]

    def lines(self) -> list[str]:
        """Return the pattern lines in the order they are persisted."""
        with self._lock:
            return [p.value for p in self.inclusive()] + [
                p.value for p in self.exclusive()
            ]

    def is_included(self, path: str, ignorecase: bool = False) -> bool:
        """Check whether a path is part of the sparse checkout.

        The last pattern matching the path, or one of its parent directories,
        decides. Paths matched by no pattern are not included.
        """
        parts = path.strip("/").split("/")
        candidates = [path] + [
            "/".join(parts[:i]) + "/" for i in range(1, len(parts))
        ]
        result = False
        for p in self:
            if any(p.match(c, ignorecase) for c in candidates):
                result = p.is_inclusive
        return result

    def __len__(self) -> int:
        with self._lock:
            return len(self._patterns)

    def __iter__(self) -> Iterator[Pattern]:
        with self._lock:
            return iter(list(self._patterns))

    def __contains__(self, item: object) -> bool:
        with self._lock:
            return item in self._patterns

    def __repr__(self) -> str:
        with self._lock:
            return f"{type(self).__name__}({self._patterns!r})"
