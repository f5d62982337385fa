# test_pattern.py -- Tests for sparse-checkout patterns
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

"""Tests for gitsparse.pattern."""

import threading

from gitsparse.pattern import (
    Pattern,
    PatternKind,
    classify,
    clean_pattern,
    compare_patterns,
    is_subsumed,
    translate,
)

from . import TestCase

POSITIVE_MATCH_TESTS = [
    ("foo.c", "*.c"),
    (".c", "*.c"),
    ("foo/foo.c", "*.c"),
    ("foo/foo.c", "foo.c"),
    ("foo.c", "/*.c"),
    ("foo.c", "/foo.c"),
    ("foo.c", "foo.[ch]"),
    ("foo/bar/bla.c", "foo/**"),
    ("foo/bar/bla/blie.c", "foo/**/blie.c"),
    ("foo/bar/bla.c", "**/bla.c"),
    ("bla.c", "**/bla.c"),
    ("foo/bar", "foo/**/bar"),
    ("foo/bla/bar", "foo/**/bar"),
    ("foo/bar/something", "foo/bar/*"),
    ("src", "/*"),
    ("#hash", "\\#hash"),
    ("!bang", "\\!bang"),
]

NEGATIVE_MATCH_TESTS = [
    ("foo.c", "foo.[dh]"),
    ("foo/foo.c", "/foo.c"),
    ("foo/foo.c", "/*.c"),
    ("foo/bar/", "foo/bar/*"),
    ("foo/bar", "foo?bar"),
    ("src/lib", "/*"),
    ("foo", "foo//bar"),
]

TRANSLATE_TESTS = [
    ("*.c", "(?ms)(.*/)?[^/]*\\.c/?\\Z"),
    ("foo.c", "(?ms)(.*/)?foo\\.c/?\\Z"),
    ("/*.c", "(?ms)[^/]*\\.c/?\\Z"),
    ("/foo.c", "(?ms)foo\\.c/?\\Z"),
    ("foo.[ch]", "(?ms)(.*/)?foo\\.[ch]/?\\Z"),
    ("foo/**", "(?ms)foo/.*/?\\Z"),
    ("foo/**/blie.c", "(?ms)foo/(?:[^/]+/)*blie\\.c/?\\Z"),
    ("**/bla.c", "(?ms)(.*/)?bla\\.c/?\\Z"),
    ("foo/**/bar", "(?ms)foo/(?:[^/]+/)*bar/?\\Z"),
    ("foo/bar/*", "(?ms)foo/bar/[^/]+/?\\Z"),
    ("/foo\\[bar\\]", "(?ms)foo\\[bar\\]/?\\Z"),
    ("/foo[0-9]", "(?ms)foo[0-9]/?\\Z"),
]

CLEAN_TESTS = [
    ("", PatternKind.ANY, ""),
    ("  src  ", PatternKind.ANY, "src"),
    ("src/", PatternKind.ANY, "src"),
    ("src///", PatternKind.ANY, "src"),
    ("/", PatternKind.ANY, ""),
    ("trailing\\ ", PatternKind.ANY, "trailing\\ "),
    ("# note", PatternKind.ANY, "# note"),
    ("# note", PatternKind.PATTERNS, "\\# note"),
    ("!src", PatternKind.ANY, "!src"),
    ("!src", PatternKind.INCLUSIVE, "\\!src"),
    ("!src", PatternKind.EXCLUSIVE, "!src"),
    ("src", PatternKind.EMPTY, ""),
    ("src", PatternKind.NONE, ""),
    ("src", PatternKind.COMMENT, ""),
    ("#src", PatternKind.COMMENT, "#src"),
]


class TranslateTests(TestCase):
    def test_translate(self) -> None:
        for pattern, regex in TRANSLATE_TESTS:
            self.assertEqual(
                regex,
                translate(pattern),
                f"orig pattern: {pattern!r}, regex: {translate(pattern)!r}, expected: {regex!r}",
            )


class CleanPatternTests(TestCase):
    def test_clean(self) -> None:
        for raw, admit, expected in CLEAN_TESTS:
            self.assertEqual(
                expected, clean_pattern(raw, admit), f"raw: {raw!r}, admit: {admit!r}"
            )

    def test_not_a_string(self) -> None:
        self.assertRaises(TypeError, clean_pattern, b"src")


class ClassifyTests(TestCase):
    def test_classify(self) -> None:
        self.assertEqual(PatternKind.EMPTY, classify(""))
        self.assertEqual(PatternKind.COMMENT, classify("#x"))
        self.assertEqual(PatternKind.EXCLUSIVE, classify("!x"))
        self.assertEqual(PatternKind.INCLUSIVE, classify("x"))
        self.assertEqual(PatternKind.INCLUSIVE, classify("\\#x"))

    def test_masks(self) -> None:
        self.assertIn(PatternKind.EXCLUSIVE, PatternKind.PATTERNS)
        self.assertIn(PatternKind.INCLUSIVE, PatternKind.PATTERNS)
        self.assertNotIn(PatternKind.COMMENT, PatternKind.PATTERNS)
        for kind in (
            PatternKind.COMMENT,
            PatternKind.EMPTY,
            PatternKind.EXCLUSIVE,
            PatternKind.INCLUSIVE,
        ):
            self.assertIn(kind, PatternKind.ANY)


class PatternTests(TestCase):
    def test_inclusive(self) -> None:
        p = Pattern("src/lib")
        self.assertTrue(p.is_inclusive)
        self.assertTrue(p.is_pattern)
        self.assertFalse(p.is_exclusive)
        self.assertEqual("src/lib", p.pattern)
        self.assertEqual("src/lib", p.value)

    def test_exclusive(self) -> None:
        p = Pattern("!src/lib")
        self.assertTrue(p.is_exclusive)
        self.assertEqual("src/lib", p.pattern)
        self.assertEqual("!src/lib", p.value)

    def test_comment(self) -> None:
        p = Pattern("# note")
        self.assertTrue(p.is_comment)
        self.assertFalse(p.is_pattern)
        self.assertEqual("", p.pattern)

    def test_empty(self) -> None:
        p = Pattern("   ")
        self.assertTrue(p.is_empty)
        self.assertEqual("", p.pattern)
        self.assertTrue(Pattern().is_empty)

    def test_escaped_marker_is_inclusive(self) -> None:
        p = Pattern("!src", PatternKind.INCLUSIVE)
        self.assertTrue(p.is_inclusive)
        self.assertEqual("\\!src", p.pattern)

    def test_with_exclusive(self) -> None:
        p = Pattern("src")
        q = p.with_exclusive(True)
        self.assertEqual("!src", q.value)
        self.assertTrue(q.is_exclusive)
        # the original is untouched
        self.assertEqual("src", p.value)
        self.assertTrue(p.is_inclusive)
        self.assertEqual(p, q.with_exclusive(False))
        self.assertIs(q, q.with_exclusive(True))

    def test_with_exclusive_comment(self) -> None:
        p = Pattern("# note")
        self.assertIs(p, p.with_exclusive(True))

    def test_with_comment(self) -> None:
        p = Pattern("src")
        q = p.with_comment(True)
        self.assertEqual("#src", q.value)
        self.assertTrue(q.is_comment)
        self.assertEqual("src", q.with_comment(False).value)
        self.assertIs(p, p.with_comment(False))

    def test_toggle_empty(self) -> None:
        p = Pattern("")
        self.assertIs(p, p.with_comment(True))
        self.assertIs(p, p.with_exclusive(True))

    def test_equality(self) -> None:
        self.assertEqual(Pattern("src"), Pattern("src/"))
        self.assertEqual(Pattern("src"), "src")
        self.assertNotEqual(Pattern("src"), Pattern("!src"))
        self.assertNotEqual(Pattern("src"), Pattern("SRC"))
        self.assertNotEqual(Pattern("src"), 1)
        self.assertEqual(hash(Pattern("src")), hash(Pattern(" src ")))

    def test_str_repr(self) -> None:
        self.assertEqual("!src", str(Pattern("!src")))
        self.assertEqual("Pattern('!src')", repr(Pattern("!src")))

    def test_immutable(self) -> None:
        p = Pattern("src")
        self.assertRaises(AttributeError, setattr, p, "extra", 1)

    def test_matches(self) -> None:
        for path, pattern in POSITIVE_MATCH_TESTS:
            self.assertTrue(
                Pattern(pattern).match(path),
                f"path: {path!r}, pattern: {pattern!r}",
            )

    def test_no_matches(self) -> None:
        for path, pattern in NEGATIVE_MATCH_TESTS:
            self.assertFalse(
                Pattern(pattern).match(path),
                f"path: {path!r}, pattern: {pattern!r}",
            )

    def test_match_ignores_marker(self) -> None:
        self.assertTrue(Pattern("!*.c").match("foo.c"))

    def test_match_ignorecase(self) -> None:
        p = Pattern("Docs")
        self.assertFalse(p.match("docs"))
        self.assertTrue(p.match("docs", ignorecase=True))

    def test_comment_matches_nothing(self) -> None:
        self.assertFalse(Pattern("#foo").match("#foo"))
        self.assertFalse(Pattern("").match(""))


class ComparePatternsTests(TestCase):
    def test_ordinal(self) -> None:
        self.assertEqual(0, compare_patterns(Pattern("a"), Pattern("a")))
        self.assertEqual(-1, compare_patterns(Pattern("a"), Pattern("b")))
        self.assertEqual(1, compare_patterns(Pattern("b"), Pattern("a")))
        self.assertEqual(-1, compare_patterns(Pattern("B"), Pattern("a")))

    def test_shorter_is_less(self) -> None:
        self.assertEqual(-1, compare_patterns(Pattern("ab"), Pattern("abc")))
        self.assertEqual(1, compare_patterns(Pattern("abc"), Pattern("ab")))

    def test_raw_values(self) -> None:
        self.assertEqual(-1, compare_patterns(Pattern("!b"), Pattern("a")))

    def test_ignore_case(self) -> None:
        self.assertEqual(
            0, compare_patterns(Pattern("Src"), Pattern("sRC"), ignore_case=True)
        )
        self.assertNotEqual(0, compare_patterns(Pattern("Src"), Pattern("sRC")))

    def test_against_string(self) -> None:
        self.assertEqual(0, compare_patterns(Pattern("src"), "src"))

    def test_concurrent_opposite_order(self) -> None:
        a = Pattern("a/b")
        b = Pattern("a/c")
        results: list[int] = []
        lock = threading.Lock()

        def work(x: Pattern, y: Pattern) -> None:
            for _ in range(1000):
                r = compare_patterns(x, y)
                is_subsumed(x, y)
                with lock:
                    results.append(r)

        threads = [
            threading.Thread(target=work, args=(a, b)),
            threading.Thread(target=work, args=(b, a)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)
            self.assertFalse(t.is_alive())
        self.assertEqual(2000, len(results))
        self.assertEqual({-1, 1}, set(results))


class IsSubsumedTests(TestCase):
    def test_reflexive(self) -> None:
        for text in ["a", "a/b/c", "!a/b", "*", "**", "a/**/b", "/*"]:
            p = Pattern(text)
            self.assertTrue(is_subsumed(p, p), text)

    def test_wildcard_subsumes_everything(self) -> None:
        star = Pattern("*")
        for text in ["a", "a/b/c", "!a/b", "**", "a/*/c"]:
            self.assertTrue(is_subsumed(star, Pattern(text)), text)
        self.assertTrue(is_subsumed(Pattern("!*"), Pattern("a/b")))

    def test_not_patterns(self) -> None:
        self.assertFalse(is_subsumed(Pattern("*"), Pattern("# a")))
        self.assertFalse(is_subsumed(Pattern("# a"), Pattern("a")))
        self.assertFalse(is_subsumed(Pattern("a"), Pattern("")))

    def test_equal_comments(self) -> None:
        self.assertTrue(is_subsumed(Pattern("# a"), Pattern("# a")))

    def test_depthn_wildcard(self) -> None:
        self.assertTrue(is_subsumed(Pattern("a/**"), Pattern("a/b/c")))
        self.assertTrue(is_subsumed(Pattern("a/**/c"), Pattern("a/b/d/c")))
        self.assertTrue(is_subsumed(Pattern("**"), Pattern("a/b")))

    def test_depth1_wildcard(self) -> None:
        self.assertTrue(is_subsumed(Pattern("a/*/c"), Pattern("a/b/c")))
        self.assertFalse(is_subsumed(Pattern("a/*/c"), Pattern("a/b/d/c")))

    def test_minor_depthn_wildcard(self) -> None:
        self.assertFalse(is_subsumed(Pattern("a/b/c"), Pattern("a/**")))

    def test_literal_mismatch(self) -> None:
        self.assertFalse(is_subsumed(Pattern("a/b"), Pattern("a/c")))
        self.assertFalse(is_subsumed(Pattern("x"), Pattern("y/z")))

    def test_uses_pattern_text(self) -> None:
        self.assertTrue(is_subsumed(Pattern("!a/**"), Pattern("a/b")))
        self.assertTrue(is_subsumed(Pattern("a/**"), Pattern("!a/b")))

    def test_longer_major(self) -> None:
        self.assertFalse(is_subsumed(Pattern("a/b/c"), Pattern("a/b")))
        self.assertFalse(is_subsumed(Pattern("docs/api"), Pattern("docs")))
        self.assertFalse(is_subsumed(Pattern("docs"), Pattern("docs/api")))

    def test_minor_wildcards_need_major_wildcards(self) -> None:
        self.assertFalse(is_subsumed(Pattern("a/b/c"), Pattern("a/**/c")))
        self.assertFalse(is_subsumed(Pattern("a/b"), Pattern("a/*")))
        self.assertFalse(is_subsumed(Pattern("a/*"), Pattern("a/**")))
        self.assertTrue(is_subsumed(Pattern("a/**"), Pattern("a/*")))
        self.assertTrue(is_subsumed(Pattern("a/**"), Pattern("a/b/**")))
        self.assertTrue(is_subsumed(Pattern("a/**/c"), Pattern("a/*/c")))

    def test_trailing_depthn_needs_a_segment(self) -> None:
        self.assertFalse(is_subsumed(Pattern("a/**"), Pattern("a")))
        self.assertFalse(is_subsumed(Pattern("a/**/b"), Pattern("a/c")))
