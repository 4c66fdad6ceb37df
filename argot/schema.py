r"""
Argot command schemas.

Overview
- CommandNode: immutable description of a command or sub-command: its
  positional arguments, flags, and child sub-commands (named or unnamed).
- CommandBuilder / FlagBuilder: fluent builders producing the same nodes.
- build_schema(): normalize a declaration (node, builder, or literal mapping)
  into a fresh CommandNode.

Named and unnamed sub-commands
- A named sub-command is selected when a token equals its name or one of its
  aliases.
- An unnamed sub-command (name=None) is never matched by text; it is a
  fallback grammar tried in declaration order when no named one matches. It
  must declare a dest so that the path taken stays observable.

Validation highlights
- Names, aliases and dests are non-empty strings; names and aliases cannot
  contain whitespace.
- Long and short codes are unique among the flags of one node.
- Names and aliases are unique among the named sub-commands of one node.
- Literal mappings only accept known keys; argument literals route 'range'
  to NumberOptions, 'unsigned' to IntegerOptions and any other key to extras.

Quick example:
    >>> from argot.schema import CommandBuilder, build_schema
    >>> built = (
    ...     CommandBuilder("todo")
    ...     .add_subcommand("add", build=lambda sub: sub.add_argument("title"))
    ...     .add_subcommand("remove", build=lambda sub: sub.add_alias("rm").add_argument("index", "int"))
    ...     .build()
    ... )
    >>> declared = build_schema({
    ...     "name": "todo",
    ...     "subcommands": [
    ...         {"name": "add", "args": [{"name": "title"}]},
    ...         {"name": "remove", "aliases": ["rm"], "args": [{"name": "index", "type": "int"}]},
    ...     ],
    ... })
    >>> built == declared
    True
"""
import copy
from collections.abc import Iterable, Mapping

from .arguments import Argument, Flag, IntegerOptions, NumberOptions
from .utils import *


def _sanitize_words(cls, metadata, /):
    """
    Internal: validate the node name and aliases.

    - name: None (unnamed) or a non-empty string without whitespace.
    - aliases: iterable of such strings, without duplicates and different
      from the name. Unnamed nodes cannot have aliases.
    """
    def word(object, label):
        if not isinstance(object, str):
            raise TypeError(f"{cls.__typename__} {label} must be a string")
        elif not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {label} cannot be empty")
        elif any(char.isspace() for char in object):
            raise ValueError(f"{cls.__typename__} {label} cannot contain whitespaces")
        return object

    if (name := metadata["name"]) is not None:
        metadata["name"] = name = word(name, "'name'")

    if not isinstance(aliases := metadata["aliases"], Iterable) or isinstance(aliases, str | Mapping):
        raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")

    sanitized = []
    for alias in aliases:
        alias = word(alias, "aliases")
        if alias == name or alias in sanitized:
            raise ValueError(f"{cls.__typename__} 'aliases' cannot contain duplicates")
        sanitized.append(alias)

    if sanitized and name is None:
        raise ValueError(f"unnamed {cls.__typename__} cannot have aliases")
    metadata["aliases"] = tuple(sanitized)


def _sanitize_children(cls, metadata, /):
    """
    Internal: validate args, flags and subcommands and stabilize them into tuples.

    Enforces unique flag codes and unique sub-command names/aliases.
    """
    for name, kind, label in (
            ("args", Argument, "arguments"),
            ("flags", Flag, "flags"),
            ("subcommands", CommandNode, "command-nodes"),
    ):
        if not isinstance(object := metadata[name], Iterable) or isinstance(object, str | Mapping):
            raise TypeError(f"{cls.__typename__} {name!r} must be an iterable of {label}")
        object = tuple(object)
        if not all(isinstance(item, kind) for item in object):
            raise TypeError(f"{cls.__typename__} {name!r} must be an iterable of {label}")
        metadata[name] = object

    codes = set()
    for flag in metadata["flags"]:
        for code in flag.codes:
            if code in codes:
                raise ValueError(f"{cls.__typename__} flag {code!r} is already in use")
            codes.add(code)

    words = set()
    for node in metadata["subcommands"]:
        if node.name is None:
            continue
        for word in (node.name, *node.aliases):
            if word in words:
                raise ValueError(f"{cls.__typename__} sub-command name {word!r} is already in use")
            words.add(word)


class CommandNode(metaclass=SpecType):
    """
    Immutable command / sub-command grammar.

    Highlights
    - dest defaults to name; on success the parse engine stores True under
      the dest of every node it went through.
    - args are resolved in order, flags may appear anywhere their level is
      active, subcommands are consulted once the positionals are exhausted.
    """

    __introspectable__ = (
        "name",
        "dest",
        "aliases",
        "help",
        "args",
        "flags",
        "subcommands",
    )

    def __new__(
            cls,
            name=None,
            *,
            dest=Unset,
            aliases=(),
            help=Unset,
            args=(),
            flags=(),
            subcommands=(),
    ):
        metadata = {
            "name": name,
            "dest": dest,
            "aliases": aliases,
            "help": help,
            "args": args,
            "flags": flags,
            "subcommands": subcommands,
        }
        _sanitize_words(cls, metadata)

        if metadata["name"] is None and metadata["dest"] is Unset:
            raise TypeError(f"unnamed {cls.__typename__} must specify a 'dest'")
        metadata["dest"] = coalesce(metadata["dest"], metadata["name"])
        if not isinstance(dest := metadata["dest"], str):
            raise TypeError(f"{cls.__typename__} 'dest' must be a string")
        # An empty dest is a valid key for the presence marker.
        metadata["dest"] = dest.strip()

        if not isinstance(help := metadata["help"], str | Unset | None):
            raise TypeError(f"{cls.__typename__} 'help' must be a string")
        elif isinstance(help, str) and not (help := help.strip()):
            raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
        metadata["help"] = coalesce(help)

        _sanitize_children(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def named(self):
        return self._name is not None

    def match(self, word, /):
        """
        Whether `word` selects this node (never true for unnamed nodes).
        """
        return self._name is not None and (word == self._name or word in self._aliases)

    @classmethod
    def _rebuild(cls, fields):
        return cls(fields.pop("name"), **fields)


class FlagBuilder:
    """
    Fluent builder of a Flag (see CommandBuilder.add_flag).
    """

    def __init__(self, long=None, short=None, *, dest=Unset, help=Unset):
        self._long = long
        self._short = short
        self._dest = dest
        self._help = help
        self._args = []

    def set_help(self, help, /):
        self._help = help
        return self

    def add_argument(self, dest, type="string", **metadata):
        self._args.append(Argument(dest, type, **metadata))
        return self

    def build(self):
        return Flag(self._long, self._short, dest=self._dest, help=self._help, args=self._args)

    def __repr__(self):
        return f"{type(self).__name__}(long={self._long!r}, short={self._short!r})"


class CommandBuilder:
    """
    Fluent builder of a CommandNode.

    Every add_* method returns the builder itself; add_flag/add_subcommand
    take an optional `build` callback receiving the child builder. Children
    are built when build() is called, so each call yields a fresh node tree.
    """

    def __init__(self, name=None, *, dest=Unset):
        self._name = name
        self._dest = dest
        self._aliases = []
        self._help = Unset
        self._args = []
        self._flags = []
        self._subcommands = []

    def add_alias(self, *aliases):
        self._aliases.extend(aliases)
        return self

    def set_help(self, help, /):
        self._help = help
        return self

    def add_argument(self, dest, type="string", **metadata):
        self._args.append(Argument(dest, type, **metadata))
        return self

    def add_flag(self, long=None, short=None, *, dest=Unset, help=Unset, build=None):
        builder = FlagBuilder(long, short, dest=dest, help=help)
        if build is not None:
            build(builder)
        self._flags.append(builder)
        return self

    def add_subcommand(self, name=None, *, dest=Unset, build=None):
        builder = CommandBuilder(name, dest=dest)
        if build is not None:
            build(builder)
        self._subcommands.append(builder)
        return self

    def build(self):
        return CommandNode(
            self._name,
            dest=self._dest,
            aliases=self._aliases,
            help=self._help,
            args=self._args,
            flags=[flag.build() for flag in self._flags],
            subcommands=[subcommand.build() for subcommand in self._subcommands],
        )

    def __repr__(self):
        return f"{type(self).__name__}(name={self._name!r})"


_COMMAND_KEYS = frozenset(("name", "dest", "aliases", "help", "args", "flags", "subcommands"))
_FLAG_KEYS = frozenset(("long", "short", "dest", "help", "args"))
_ARGUMENT_KEYS = frozenset(("name", "type", "dest", "help", "required", "default"))


def _argument_from_literal(declaration, /):
    if isinstance(declaration, Argument):
        return declaration
    if not isinstance(declaration, Mapping):
        raise TypeError("argument declarations must be arguments or mappings")

    metadata = {key: value for key, value in declaration.items() if key in _ARGUMENT_KEYS}
    extras = {key: value for key, value in declaration.items() if key not in _ARGUMENT_KEYS}

    if "dest" not in metadata and "name" not in metadata:
        raise TypeError("argument declarations must specify a 'dest' or a 'name'")
    dest = metadata.pop("dest", metadata.get("name"))

    match "range" in extras, "unsigned" in extras:
        case True, True:
            raise TypeError("argument declarations cannot combine 'range' and 'unsigned'")
        case True, False:
            bounds = tuple(extras.pop("range"))
            # A missing maximum leaves the range open above.
            metadata["options"] = NumberOptions((bounds + (None, None))[:2] if len(bounds) < 2 else bounds)
        case False, True:
            metadata["options"] = IntegerOptions(extras.pop("unsigned"))

    return Argument(dest, metadata.pop("type", "string"), extras=extras, **metadata)


def _flag_from_literal(declaration, /):
    if isinstance(declaration, Flag):
        return declaration
    if isinstance(declaration, FlagBuilder):
        return declaration.build()
    if not isinstance(declaration, Mapping):
        raise TypeError("flag declarations must be flags or mappings")
    if unknown := set(declaration) - _FLAG_KEYS:
        raise TypeError(f"flag declarations got unexpected keys: {", ".join(map(repr, sorted(unknown)))}")

    metadata = dict(declaration)
    metadata["args"] = [_argument_from_literal(argument) for argument in metadata.get("args", ())]
    return Flag(metadata.pop("long", None), metadata.pop("short", None), **metadata)


def _node_from_literal(declaration, /):
    if unknown := set(declaration) - _COMMAND_KEYS:
        raise TypeError(f"command declarations got unexpected keys: {", ".join(map(repr, sorted(unknown)))}")

    metadata = dict(declaration)
    metadata["args"] = [_argument_from_literal(argument) for argument in metadata.get("args", ())]
    metadata["flags"] = [_flag_from_literal(flag) for flag in metadata.get("flags", ())]
    metadata["subcommands"] = [build_schema(node) for node in metadata.get("subcommands", ())]
    return CommandNode(metadata.pop("name", None), **metadata)


def build_schema(declaration, /):
    """
    Normalize a declaration into a new CommandNode.

    Accepted forms
    - CommandNode: an equal copy is returned.
    - CommandBuilder: its build() result.
    - Mapping: a declarative literal (nested mappings and/or spec objects).

    Raises
    - TypeError: for any other object, or unknown literal keys.
    - ValueError: for invalid values (duplicates, empty names, ...).
    """
    match declaration:
        case CommandNode():
            return copy.replace(declaration)
        case CommandBuilder():
            return declaration.build()
        case Mapping():
            return _node_from_literal(declaration)
        case _:
            raise TypeError("build_schema() argument must be a command-node, a command builder or a mapping")


__all__ = (
    "CommandNode",
    "CommandBuilder",
    "FlagBuilder",
    "build_schema",
)
