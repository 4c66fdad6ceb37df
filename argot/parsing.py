"""
Argot parse engine.

Purpose
- Resolve a token sequence against a CommandNode into a flat dict of values,
  recursing into sub-commands, or raise a CommandError pointing at the
  offending part of the source.

Behavior (per level)
- Flag tokens (unquoted, starting with '-', at least one more character)
  are handled while flags are active:
  • "--" disables flags for the rest of the level (and the levels below) when
    breakable_flags is set.
  • "--name[=value]" resolves a long flag; "-abc" walks packed short codes.
    With java_flags, "-name" resolves a long flag when one is named so.
  • An inline "=value" splits the flag token: the value becomes a token of its
    own, inserted right after the flag and consumed by the flag's arguments.
  • Every flag met stores True under its dest (presence marker).
- Other tokens fill the level's positional arguments in order. Once they are
  exhausted, the token selects a named sub-command (by name or alias), or the
  unnamed sub-commands are tried in order as fallback grammars; the first one
  that parses wins, and if all fail the first error is raised.
- At end of input, optional positionals take their defaults; a missing
  required one raises "unexpected end of input".
- A level that completes stores True under its dest.

Atomicity
- The result dict is private to one call and only returned on success.
  Unnamed alternatives are tried on their own copy of the token list and of
  the result, so a rejected alternative leaves no trace.

Errors
- Errors are built without the source text; the outermost frame annotates the
  escaping error once with copy.replace (see CommandError.annotate).
"""
import traceback
from collections import namedtuple

from .converters import Conversion, registry as default_registry
from .faults import *
from .logs import get_logger
from .schema import CommandNode, build_schema
from .tokens import Token, terminal, tokenize

logger = get_logger(__name__)


class ParseOptions(namedtuple("ParseOptions", (
        "parse_flags",
        "breakable_flags",
        "java_flags",
        "equals_in_short_flags",
), defaults=(True, True, False, True))):
    """
    Runtime switches of the parse engine.

    Fields
    - parse_flags: recognize flags at all.
    - breakable_flags: a standalone "--" ends flag parsing.
    - java_flags: "-name" may spell a long flag (e.g., -verbose).
    - equals_in_short_flags: "-abc=value" feeds value to the flag c.
    """
    __slots__ = ()

    def __new__(cls, parse_flags=True, breakable_flags=True, java_flags=False, equals_in_short_flags=True):
        return super().__new__(cls, bool(parse_flags), bool(breakable_flags), bool(java_flags), bool(equals_in_short_flags))

    @classmethod
    def derive(cls, options=None, /, **overrides):
        """
        Return `options` (or the defaults) updated with keyword overrides.
        """
        if unknown := set(overrides) - set(cls._fields):
            raise TypeError(f"unexpected parse option(s): {", ".join(map(repr, sorted(unknown)))}")
        if options is None:
            options = cls()
        elif not isinstance(options, cls):
            raise TypeError("parse options must be a ParseOptions instance")
        return cls(**options._asdict() | overrides)


class Parser:
    """
    Per-call parse state: the source, its tokens, the type registry and the
    options in use. A Parser is single-use; parse() builds a fresh one.
    """

    def __init__(self, source, start=0, /, *, registry=None, options=None):
        self._source = source
        self._tokens = tokenize(source, start)
        self._registry = registry if registry is not None else default_registry
        self._options = options if options is not None else ParseOptions()

    source = property(lambda self: self._source)
    tokens = property(lambda self: tuple(self._tokens))
    options = property(lambda self: self._options)

    def parse(self, schema, /):
        """
        Resolve the tokens against `schema` and return the result mapping.
        """
        result = {}
        try:
            self._command(schema, self._tokens, 0, result, self._options.parse_flags)
        except CommandError as error:
            raise error.annotate(self._source) from error.__cause__
        return result

    def _command(self, node, tokens, index, result, flags):
        """
        Resolve one level. Returns the index of the first unconsumed token.
        """
        position = 0

        while index < len(tokens):
            token = tokens[index]

            if flags and not token.quoted and len(token.text) > 1 and token.text.startswith("-"):
                if token.text == "--" and self._options.breakable_flags:
                    flags = False
                    index += 1
                else:
                    index = self._flag(node, tokens, index, result)
                continue

            if position < len(node.args):
                index = self._argument(node.args[position], tokens, index, result)
                position += 1
                continue

            if not node.subcommands:
                raise TooManyArgumentsError("too many arguments", token, 0, token.end - len(self._source))

            for subcommand in node.subcommands:
                if subcommand.match(token.text):
                    logger.debug("subcommand_matched", command=node.dest, subcommand=subcommand.dest, word=token.text)
                    index = self._command(subcommand, tokens, index + 1, result, flags)
                    break
            else:
                index = self._alternatives(node, tokens, index, result, flags)
            break

        for argument in node.args[position:]:
            if argument.required:
                raise UnexpectedEndError("unexpected end of input", terminal(self._source))
            result[argument.dest] = argument.default

        result[node.dest] = True
        return index

    def _alternatives(self, node, tokens, index, result, flags):
        """
        Try the unnamed sub-commands of `node` from the same token, in order.
        """
        alternatives = [subcommand for subcommand in node.subcommands if not subcommand.named]
        if not alternatives:
            token = tokens[index]
            raise UnknownSubcommandError(f"unknown sub-command: {token.text}", token)

        first = None
        for alternative in alternatives:
            trial, scratch = list(tokens), {}
            try:
                end = self._command(alternative, trial, index, scratch, flags)
            except CommandError as error:
                logger.debug("alternative_rejected", command=node.dest, alternative=alternative.dest, error=error.message)
                if first is None:
                    first = error
                continue

            logger.debug("alternative_accepted", command=node.dest, alternative=alternative.dest)
            tokens[:] = trial
            result.update(scratch)
            return end

        raise first

    def _positions(self, token):
        """
        Source offset of every character of an unquoted token's text, plus
        token.end. Escaping backslashes have no text character of their own.
        """
        positions, escaped = [], False
        for index in range(token.start, token.end):
            if self._source[index] == "\\" and not escaped:
                escaped = True
                continue
            escaped = False
            positions.append(index)
        positions.append(token.end)
        return positions

    def _flag(self, node, tokens, index, result):
        """
        Resolve the flag token at `index` (and its arguments). Returns the
        index of the first token after them.
        """
        token = tokens[index]
        text = token.text
        long = text.startswith("--")
        dashes = 2 if long else 1
        name, equals, inline = text[dashes:].partition("=")
        positions = self._positions(token)

        flag = next((flag for flag in node.flags if flag.long is not None and flag.long == name), None)

        if long and flag is None:
            raise UnrecognizedFlagError(f"unrecognized flag: {name}", token, positions[2] - token.start)

        if not long and flag is not None and self._options.java_flags:
            long = True

        if long:
            current = flag
        else:
            current = None
            for offset, code in enumerate(text[1:], start=1):
                if code == "=" and self._options.equals_in_short_flags and current is not None and current.args:
                    break
                current = next((flag for flag in node.flags if flag.short == code), None)
                if current is None:
                    raise UnknownOptionError(
                        f"unknown option: {code}", token, positions[offset] - token.start, token.end - positions[offset + 1]
                    )
                result[current.dest] = True

        if equals:
            at = dashes + len(name)

            if not current.args:
                message = f"option '{text[:at]}' doesn't allow an argument"
                if inline:
                    raise FlagAssignmentError(message, token, positions[at + 1] - token.start)
                elif index + 1 < len(tokens):
                    raise FlagAssignmentError(message, tokens[index + 1])
                raise FlagAssignmentError(message, token, positions[at] - token.start, token.end - positions[at + 1])

            tokens[index] = token._replace(text=text[:at], end=positions[at])
            if inline:
                tokens.insert(index + 1, Token(inline, positions[at + 1], token.end, False))

        if current.args:
            error = None
            for position, argument in enumerate(current.args):
                if error is None:
                    if index + 1 >= len(tokens):
                        error = FlagArgumentRequiredError("flag requires more argument", terminal(self._source))
                    else:
                        try:
                            index = self._argument(argument, tokens, index + 1, result) - 1
                            continue
                        except CommandError as exception:
                            error = exception

                # Only optional arguments fall back; an inline value must convert.
                if argument.required or (position == 0 and equals):
                    raise error
                result[argument.dest] = argument.default

        result[current.dest] = True
        return index + 1

    def _argument(self, argument, tokens, index, result):
        """
        Convert the token(s) at `index` for `argument` and store the value.
        Returns the index of the first token after the consumed ones.
        """
        token = tokens[index]

        if isinstance(argument.type, str):
            converter = self._registry.resolve(argument.type)
        else:
            converter = argument.type

        if not callable(converter):
            raise InternalError(f"internal error: type parser {argument.type!r} of argument {argument.name!r} is not callable", token)

        try:
            conversion = converter(tuple(tokens[index:]), argument)
        except CommandError:
            raise
        except Exception as exception:
            raise InternalError(
                "internal error: exception encountered with traceback:\n" + "".join(traceback.format_exception(exception))
            ) from exception

        if not isinstance(conversion, Conversion):
            raise InternalError(f"internal error: type parser {argument.type!r} must return a conversion", token)
        if not isinstance(step := conversion.step, int) or isinstance(step, bool) or step < 1:
            raise InternalError(f"internal error: type parser {argument.type!r} returned an invalid step {step!r}", token)

        result[argument.dest] = conversion.value
        return index + step


def parse(schema, source, start=0, /, *, registry=None, options=None, **overrides):
    """
    Parse `source` (from offset `start`) against `schema`.

    Parameters
    - schema: CommandNode, CommandBuilder or literal mapping (see build_schema).
    - source: the raw command text.
    - start: offset where tokenizing starts (e.g., after a command prefix).
    - registry: TypeRegistry to resolve type names (default: the global one).
    - options: ParseOptions; keyword overrides (parse_flags=False, ...) are
      applied on top of it.

    Returns
    - dict: dest -> value, including True presence markers for every command,
      sub-command and flag met.

    Raises
    - CommandError (or a subclass) carrying the source text for rendering.
    """
    if not isinstance(source, str):
        raise TypeError("parse() source must be a string")
    if not isinstance(schema, CommandNode):
        schema = build_schema(schema)

    parser = Parser(source, start, registry=registry, options=ParseOptions.derive(options, **overrides))
    logger.debug("parse_started", command=schema.dest, source=source, start=start)
    try:
        return parser.parse(schema)
    except CommandError as error:
        logger.debug("parse_failed", command=schema.dest, code=error.code.name, error=error.message, column=error.column)
        raise


__all__ = (
    "ParseOptions",
    "Parser",
    "parse",
)
