"""
Argot commands and dispatch.

Overview
- Command: a schema bound to a callback, with its own parse options and
  (optionally) its own type registry.
- command(): decorator form producing a Command from a callback.
- CommandContext: what a callback receives: the raw text, the parsed values
  and the opaque issuer given by the host.
- CommandRegistry: a set of commands looked up by name (and aliases), plus a
  dispatcher for prefixed chat lines ("!todo add milk").

Dispatch
- dispatch(message, issuer, reply=...) returns False when the message is not
  for this registry (no prefix configured, or prefix missing), True otherwise.
- Unknown commands, parse errors and crashing callbacks are reported through
  `reply`; the default reply prints to stderr with a rich console.
- The host stays in charge of transport: the registry never subscribes to
  anything, it is simply fed with messages.

Quick example:
    >>> from argot import CommandRegistry
    >>> registry = CommandRegistry("!")
    >>> @registry.register({"name": "greet", "args": [{"name": "who"}]})
    ... def greet(context):
    ...     print("hello", context.args["who"])
    >>> registry.dispatch("!greet world")
    hello world
    True
"""
import traceback
from collections import namedtuple

from rich.console import Console

from .faults import CommandError
from .logs import get_logger
from .parsing import ParseOptions, parse
from .schema import build_schema
from .utils import *

logger = get_logger(__name__)

CommandContext = namedtuple("CommandContext", ("text", "args", "issuer"), defaults=(None,))


class Command:
    """
    A schema bound to a callback.

    Highlights
    - parse(text, start=0): resolve text against the schema (see argot.parse).
    - call(text, issuer=None): parse, then invoke the callback with a
      CommandContext and return its result.
    - options: the ParseOptions in effect (keyword overrides at construction).
    """

    def __init__(self, schema, callback, /, *, registry=None, **options):
        if not callable(callback):
            raise TypeError("command callback must be callable")
        self._schema = build_schema(schema)
        self._callback = callback
        self._registry = registry
        self._options = ParseOptions.derive(**options)

    schema = property(lambda self: self._schema)
    callback = property(lambda self: self._callback)
    registry = property(lambda self: self._registry)
    options = property(lambda self: self._options)
    name = property(lambda self: self._schema.name)
    aliases = property(lambda self: self._schema.aliases)

    def parse(self, text, start=0, /):
        return parse(self._schema, text, start, registry=self._registry, options=self._options)

    def call(self, text, /, issuer=None, *, start=0):
        return self._callback(CommandContext(text, self.parse(text, start), issuer))

    def __call__(self, context, /):
        return self._callback(context)

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r}, callback={getattr(self._callback, "__qualname__", self._callback)!r})"

    def __rich_repr__(self):
        yield "schema", self._schema
        yield "options", self._options


def command(schema, /, **options):
    """
    Build a Command from the decorated callback.

        @command({"name": "ping"}, java_flags=True)
        def ping(context): ...
    """
    @rename("command")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        return Command(schema, callback, **options)

    return wrapper


def _print(text, /):
    Console(stderr=True, markup=False, highlight=False).print(text)


class CommandRegistry:
    """
    Commands indexed by name, with an optional chat prefix for dispatch.
    """

    def __init__(self, prefix=None):
        self.prefix = prefix
        self._commands = []

    @property
    def prefix(self):
        return self._prefix

    @prefix.setter
    def prefix(self, prefix):
        if prefix is not None:
            if not isinstance(prefix, str):
                raise TypeError("registry prefix must be a string")
            elif not prefix:
                raise ValueError("registry prefix cannot be empty")
        self._prefix = prefix

    def register(self, schema, callback=Unset, /, **options):
        """
        Register a command.

        Forms
        - registry.register(schema, callback, **options) -> Command
        - registry.register(existing_command) -> Command
        - @registry.register(schema, **options) decorating the callback.

        Raises
        - ValueError: unnamed schema, or a name/alias already in use.
        """
        if isinstance(schema, Command):
            if callback is not Unset or options:
                raise TypeError("register() takes no callback nor options along with a command")
            command = schema
        elif callback is Unset:
            @rename("register")
            def wrapper(callback, /):
                return self.register(schema, callback, **options)
            return wrapper
        else:
            command = Command(schema, callback, **options)

        if command.name is None:
            raise ValueError("registered commands must be named")
        for word in (command.name, *command.aliases):
            if self.get(word, aliases=True) is not None:
                raise ValueError(f"command name {word!r} is already in use")

        self._commands.append(command)
        logger.debug("command_registered", command=command.name, aliases=list(command.aliases))
        return command

    def get(self, name, /, *, aliases=False):
        """
        Find a command by name (and by alias when `aliases` is true), or None.
        """
        for command in self._commands:
            if command.name == name or (aliases and name in command.aliases):
                return command
        return None

    def dispatch(self, message, /, issuer=None, *, reply=None):
        """
        Handle a chat line. Returns whether the message was meant for this
        registry (i.e., it starts with the prefix).
        """
        if not isinstance(message, str):
            raise TypeError("dispatch() message must be a string")
        if self._prefix is None or not message.startswith(self._prefix):
            return False

        reply = reply if reply is not None else _print
        body = message[len(self._prefix):]
        name = words[0] if (words := body.split(None, 1)) else ""

        if (command := self.get(name, aliases=True)) is None:
            logger.info("unknown_command", command=name, raw_text=message)
            reply(f"unknown command: {name}. please check that the command exists and you have permission to use it.")
            return True

        # Parsing starts right after the command name.
        start = len(self._prefix) + len(body) - len(body.lstrip()) + len(name)

        try:
            context = CommandContext(message, command.parse(message, start), issuer)
            logger.info("command_dispatched", command=command.name, raw_text=message)
            command(context)
        except CommandError as error:
            logger.warning("command_failed", command=command.name, raw_text=message, error=error.message)
            reply(str(error))
        except Exception as exception:
            logger.exception("command_crashed", command=command.name, raw_text=message)
            reply("internal error\n" + "".join(traceback.format_exception(exception)))
        return True

    def __iter__(self):
        return iter(tuple(self._commands))

    def __len__(self):
        return len(self._commands)

    def __contains__(self, name):
        return self.get(name, aliases=True) is not None

    def __repr__(self):
        return f"{type(self).__name__}(prefix={self._prefix!r}, commands={[command.name for command in self._commands]!r})"


__all__ = (
    "Command",
    "CommandContext",
    "CommandRegistry",
    "command",
)
