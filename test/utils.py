"""
Tests for the shared helpers.

This module verifies the guarantees the schema layer builds upon:
- The `Unset` sentinel is a falsy, sealed singleton that survives copies.
- `coalesce` only replaces `Unset`.
- `rename` retitles callables in both of its forms.
- `SpecType` classes are read-only, compared field-wise and replaceable.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from argot.utils import *


class Pair(metaclass=SpecType):
    __introspectable__ = ("left", "right")

    def __new__(cls, left, right=0):
        self = super().__new__(cls)
        setattr(self, "_left", left)
        setattr(self, "_right", right)
        return self

    @classmethod
    def _rebuild(cls, fields):
        return cls(**fields)


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def setUp(self) -> None:
        self.unset: UnsetType = UnsetType()

    def testSingleton(self) -> None:
        """
        The constructor and the exported constant are the same object.
        """
        self.assertIs(self.unset, Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsyButNotNone(self) -> None:
        self.assertFalse(self.unset)
        self.assertIsNot(self.unset, None)
        self.assertEqual(repr(self.unset), "Unset")

    def testCopiesPreserveIdentity(self) -> None:
        """
        Copy, deepcopy and pickle round-trips return the singleton.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnionWithTypes(self) -> None:
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(None, str | Unset)

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    Test suite for `coalesce` and `rename`.
    """

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)

    def testRenameFunctionForm(self) -> None:
        def work():
            pass

        self.assertIs(rename(work, "job"), work)
        self.assertEqual((work.__name__, work.__qualname__), ("job", "job"))

    def testRenameDecoratorForm(self) -> None:
        @rename("job")
        def work():
            pass

        self.assertEqual(work.__name__, "job")

    def testRenameRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(42, "job")
        with self.assertRaises(TypeError):
            rename("job", "work", "extra")
        with self.assertRaises(TypeError):
            rename(len, "length")


class SpecTypeTest(TestCase):
    """
    Test suite for the `SpecType` metaclass.
    """

    def testTypename(self) -> None:
        self.assertEqual(Pair.__typename__, "pair")

    def testReadOnlyFields(self) -> None:
        pair = Pair(1, 2)
        self.assertEqual((pair.left, pair.right), (1, 2))
        with self.assertRaises(AttributeError):
            pair.left = 3

    def testReprAndRichRepr(self) -> None:
        self.assertEqual(repr(Pair(1, 2)), "pair(left=1, right=2)")
        self.assertEqual(list(Pair(1).__rich_repr__()), [("left", 1), ("right", 0)])

    def testFieldWiseEquality(self) -> None:
        self.assertEqual(Pair(1, 2), Pair(1, 2))
        self.assertNotEqual(Pair(1, 2), Pair(2, 1))
        self.assertNotEqual(Pair(1, 2), (1, 2))

    def testUnhashable(self) -> None:
        with self.assertRaises(TypeError):
            hash(Pair(1))

    def testReplace(self) -> None:
        pair = Pair(1, 2)
        self.assertEqual(copy.replace(pair, right=5), Pair(1, 5))
        self.assertEqual(pair, Pair(1, 2))


if __name__ == "__main__":
    unittest.main()
