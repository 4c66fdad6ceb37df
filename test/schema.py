"""
Schema module behavioral tests (CommandNode, builders, literals).

Scope
- Validate CommandNode construction rules (dest, aliases, unique codes/names).
- Validate that direct construction, the fluent builder and the declarative
  literal produce equal nodes.
- Validate build_schema() normalization (fresh nodes, literal key routing).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argot import (
    Argument,
    CommandBuilder,
    CommandNode,
    Flag,
    IntegerOptions,
    NumberOptions,
    build_schema,
)


def _direct():
    return CommandNode(
        "todo",
        help="manage the todo list",
        flags=(Flag("verbose", "v"),),
        subcommands=(
            CommandNode("add", args=(Argument("title"),)),
            CommandNode(
                "remove",
                aliases=("rm",),
                args=(Argument("index", "int", options=IntegerOptions(unsigned=True)),),
                flags=(Flag("count", "c", dest="counted", args=(Argument("count", "int", required=False, default=1),)),),
            ),
        ),
    )


def _built():
    return (
        CommandBuilder("todo")
        .set_help("manage the todo list")
        .add_flag("verbose", "v")
        .add_subcommand("add", build=lambda sub: sub.add_argument("title"))
        .add_subcommand("remove", build=lambda sub: (
            sub.add_alias("rm")
            .add_argument("index", "int", options=IntegerOptions(unsigned=True))
            .add_flag("count", "c", dest="counted", build=lambda flag: (
                flag.add_argument("count", "int", required=False, default=1)
            ))
        ))
        .build()
    )


def _declared():
    return build_schema({
        "name": "todo",
        "help": "manage the todo list",
        "flags": [{"long": "verbose", "short": "v"}],
        "subcommands": [
            {"name": "add", "args": [{"name": "title"}]},
            {
                "name": "remove",
                "aliases": ["rm"],
                "args": [{"name": "index", "type": "int", "unsigned": True}],
                "flags": [{
                    "long": "count",
                    "short": "c",
                    "dest": "counted",
                    "args": [{"name": "count", "type": "int", "required": False, "default": 1}],
                }],
            },
        ],
    })


class TestCommandNode(TestCase):
    """Behavioral tests for CommandNode construction."""

    def testDestDefaultsToName(self):
        node = CommandNode("todo")
        self.assertEqual(node.dest, "todo")
        self.assertTrue(node.named)
        self.assertEqual((node.aliases, node.args, node.flags, node.subcommands), ((), (), (), ()))

    def testUnnamedRequiresDest(self):
        with self.assertRaises(TypeError):
            CommandNode()
        node = CommandNode(dest="fallback")
        self.assertIsNone(node.name)
        self.assertFalse(node.named)
        self.assertFalse(node.match("fallback"))

    def testUnnamedCannotHaveAliases(self):
        with self.assertRaises(ValueError):
            CommandNode(dest="fallback", aliases=("fb",))

    def testMatchNameAndAliases(self):
        node = CommandNode("remove", aliases=("rm", "del"))
        self.assertTrue(node.match("remove"))
        self.assertTrue(node.match("rm"))
        self.assertFalse(node.match("add"))

    def testInvalidWords(self):
        with self.assertRaises(ValueError):
            CommandNode("two words")
        with self.assertRaises(ValueError):
            CommandNode("x", aliases=("x",))
        with self.assertRaises(ValueError):
            CommandNode("x", aliases=("y", "y"))
        with self.assertRaises(TypeError):
            CommandNode("x", aliases="y")

    def testDuplicateFlagCodes(self):
        with self.assertRaises(ValueError):
            CommandNode("x", flags=(Flag("verbose", "v"), Flag("version", "v")))
        with self.assertRaises(ValueError):
            CommandNode("x", flags=(Flag("verbose"), Flag("verbose", dest="other")))

    def testDuplicateSubcommandNames(self):
        with self.assertRaises(ValueError):
            CommandNode("x", subcommands=(CommandNode("a"), CommandNode("b", aliases=("a",))))
        # Unnamed alternatives never clash.
        CommandNode("x", subcommands=(CommandNode(dest="one"), CommandNode(dest="two")))

    def testChildrenMustBeSpecs(self):
        with self.assertRaises(TypeError):
            CommandNode("x", args=("title",))
        with self.assertRaises(TypeError):
            CommandNode("x", subcommands=({"name": "a"},))

    def testEmptyDestIsKept(self):
        node = build_schema({"name": "echo", "aliases": ["&"], "dest": "", "args": [{"name": "val"}]})
        self.assertEqual(node.dest, "")
        self.assertTrue(node.match("&"))
        with self.assertRaises(TypeError):
            CommandNode("echo", dest=None)

    def testRepr(self):
        self.assertTrue(repr(CommandNode("todo")).startswith("command-node(name='todo', dest='todo'"))


class TestDeclarationStyles(TestCase):
    """The three declaration styles normalize to equal nodes."""

    def testBuilderMatchesDirect(self):
        self.assertEqual(_built(), _direct())

    def testLiteralMatchesDirect(self):
        self.assertEqual(_declared(), _direct())

    def testBuilderBuildsFreshNodes(self):
        builder = CommandBuilder("ping")
        self.assertEqual(builder.build(), builder.build())
        self.assertIsNot(builder.build(), builder.build())


class TestBuildSchema(TestCase):
    """Behavioral tests for build_schema()."""

    def testReturnsNewNodeEachCall(self):
        literal = {"name": "ping"}
        first, second = build_schema(literal), build_schema(literal)
        self.assertEqual(first, second)
        self.assertIsNot(first, second)

        node = _direct()
        self.assertEqual(build_schema(node), node)
        self.assertIsNot(build_schema(node), node)

    def testAcceptsBuilders(self):
        self.assertEqual(build_schema(CommandBuilder("ping")), CommandNode("ping"))

    def testMixedLiteralAndSpecs(self):
        node = build_schema({"name": "x", "args": [Argument("a")], "flags": [Flag("v")], "subcommands": [CommandNode("s")]})
        self.assertEqual(node, CommandNode("x", args=(Argument("a"),), flags=(Flag("v"),), subcommands=(CommandNode("s"),)))

    def testArgumentLiteralRouting(self):
        node = build_schema({"name": "x", "args": [
            {"name": "n", "type": "number", "range": [0, 10]},
            {"name": "b", "type": "byte", "unsigned": True},
            {"dest": "p", "name": "POINT", "type": "point", "precision": 2},
        ]})
        number, byte, point = node.args
        self.assertEqual(build_schema({"name": "x", "args": [{"name": "n", "type": "number", "range": [5]}]}).args[0].options, NumberOptions((5, None)))
        self.assertEqual(number.options, NumberOptions((0, 10)))
        self.assertEqual(byte.options, IntegerOptions(True))
        self.assertIsNone(point.options)
        self.assertEqual((point.dest, point.name), ("p", "POINT"))
        self.assertEqual(dict(point.extras), {"precision": 2})

    def testArgumentLiteralErrors(self):
        with self.assertRaises(TypeError):
            build_schema({"name": "x", "args": [{"type": "int"}]})
        with self.assertRaises(TypeError):
            build_schema({"name": "x", "args": [{"name": "n", "range": [0, 1], "unsigned": True}]})
        with self.assertRaises(TypeError):
            build_schema({"name": "x", "args": ["n"]})

    def testUnknownKeysAreRejected(self):
        with self.assertRaises(TypeError):
            build_schema({"name": "x", "callback": print})
        with self.assertRaises(TypeError):
            build_schema({"name": "x", "flags": [{"long": "v", "alias": "w"}]})

    def testRejectsOtherObjects(self):
        with self.assertRaises(TypeError):
            build_schema("ping")  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            build_schema(42)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
