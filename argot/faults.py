"""
Argot faults (structured errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing
  parse failure. Codes are grouped by domain to keep logs and searches
  predictable.
- CommandError: base type that carries the message, the offending token, the
  raw command text and the column offsets needed to point at the failure.
- render(): the one-line annotated excerpt ("...left>>span<<right...").
- __rich__(): a colored rendering for rich consoles (header, message, excerpt).

Immutability
- Errors are built bottom-up. A converter raises an error that knows only the
  offending token; the parse engine derives an annotated copy with
  copy.replace(error, command=source) on its way out instead of mutating the
  original instance.

UX goals
- Column-first messages: syntax errors print the 1-based column and the
  excerpt with the offending span bracketed by '>>' and '<<'.
- Lowercased, short messages that name the offending text.
"""
import copy
from collections import defaultdict
from enum import IntEnum

from rich.console import Group
from rich.text import Text


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, UNKNOWN_SUBCOMMAND
    - flags (1111x)
      • UNRECOGNIZED_FLAG, UNKNOWN_OPTION, FLAG_ASSIGNMENT, FLAG_ARGUMENT_REQUIRED
    - positionals (1112x)
      • TOO_MANY_ARGUMENTS, UNEXPECTED_END
    - conversions (1113x)
      • MALFORMED_VALUE, VALUE_OUT_OF_RANGE
    - internals (1114x)
      • INTERNAL_ERROR

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired (e.g., to shorter labels).
    """
    # --- routing errors ---
    UNKNOWN_COMMAND             = 11101
    UNKNOWN_SUBCOMMAND          = 11102

    # --- flag errors ---
    UNRECOGNIZED_FLAG           = 11111
    UNKNOWN_OPTION              = 11112
    FLAG_ASSIGNMENT             = 11113
    FLAG_ARGUMENT_REQUIRED      = 11114

    # --- positional errors ---
    TOO_MANY_ARGUMENTS          = 11121
    UNEXPECTED_END              = 11122

    # --- conversion errors ---
    MALFORMED_VALUE             = 11131
    VALUE_OUT_OF_RANGE          = 11132

    # --- internal errors ---
    INTERNAL_ERROR              = 11141

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandError(Exception):
    """
    Structured parse error.

    Fields
    - message: short, lowercased description of the failure.
    - token: the offending Token, or None when the failure is not tied to a
      position (e.g., an internal misconfiguration). A token makes the error a
      syntax error.
    - start / end: offsets applied to the token span when pointing at the failure;
      the span is token.start + start up to token.end - end.
    - command: the raw text that was parsed (None until annotated).
    - hint: optional actionable follow-up for the user.

    Subclasses only pin a default `code` and `title`.
    """
    code = FaultCode.INTERNAL_ERROR
    title = "command error"

    def __init__(self, message, /, token=None, start=0, end=0, *, command=None, hint=None):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self._message = message
        self._token = token
        self._start = int(start)
        self._end = int(end)
        self._command = command
        self._hint = hint

    message = property(lambda self: self._message)
    token = property(lambda self: self._token)
    start = property(lambda self: self._start)
    end = property(lambda self: self._end)
    command = property(lambda self: self._command)
    hint = property(lambda self: self._hint)

    @property
    def syntax(self):
        """
        whether this error points at a position of the command text.
        """
        return self._token is not None

    @property
    def span(self):
        """
        (start, end) of the offending text in the raw command, or None.
        """
        if self._token is None:
            return None
        return self._token.start + self._start, self._token.end - self._end

    @property
    def column(self):
        """
        1-based column of the offending text, or None for non-syntax errors.
        """
        if self._token is None:
            return None
        return self._token.start + self._start + 1

    def render(self, width=10):
        """
        render the one-line annotated excerpt for this error.

        behavior
        - syntax errors: up to `width` characters of left context, then '>>',
          the offending span, '<<' and up to `width` characters of right
          context. contexts are clipped to the bounds of the command text.
        - non-syntax errors (or errors not yet annotated with their command):
          the message itself.
        """
        if not isinstance(width, int) or width < 0:
            raise ValueError("render() width must be a non-negative integer")
        if self._token is None or self._command is None:
            return self._message
        left, right = self._bounds()
        command = self._command
        return (
            command[max(0, left - width):left] +
            ">>" + command[left:right] + "<<" +
            command[right:min(right + width, len(command))]
        )

    def _bounds(self):
        left, right = self.span
        left = min(max(0, left), len(self._command))
        right = min(max(left, right), len(self._command))
        return left, right

    def __str__(self):
        if not self.syntax or self._command is None:
            return self._message
        return "%s\n    at column %d\n    %s" % (self._message, self.column, self.render())

    def __repr__(self):
        return f"{type(self).__name__}({self._message!r}, token={self._token!r}, start={self._start}, end={self._end})"

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "context": "dim",
            "offender": "bold reverse #FF4DA6",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        header = Text.assemble(
            "[ ",
            (self.code.normalize(), styles["code"]),
            " | ",
            (self.title.title(), styles["error-title"]),
            " ]",
        )
        renders = [header, Text(self._message, styles["error-message"])]

        if self.syntax and self._command is not None:
            left, right = self._bounds()
            command = self._command
            renders.append(Text.assemble(
                "    ",
                (command[max(0, left - 10):left], styles["context"]),
                (command[left:right] or " ", styles["offender"]),
                (command[right:right + 10], styles["context"]),
            ))

        if self._hint:
            renders.append(Text.assemble((" → ", styles["hint-arrow"]), (self._hint, styles["hint"])))

        return Group(*renders)

    def __replace__(self, /, **overrides):
        # Subclasses may take other constructor arguments; __init__ is bypassed.
        if unknown := set(overrides) - {"message", "token", "start", "end", "command", "hint"}:
            raise TypeError(f"unexpected {type(self).__name__} field(s): {", ".join(map(repr, sorted(unknown)))}")
        if not isinstance(overrides.get("message", self._message), str):
            raise TypeError(f"{type(self).__name__} message must be a string")

        replica = type(self).__new__(type(self), *self.args)
        replica.__dict__.update(vars(self))
        for name, object in overrides.items():
            setattr(replica, "_" + name, int(object) if name in ("start", "end") else object)
        if "message" in overrides:
            replica.args = (overrides["message"],)
        replica.__cause__ = self.__cause__
        replica.__context__ = self.__context__
        return replica

    def annotate(self, command, /):
        """
        return this error carrying the raw command text.

        errors already annotated by an inner frame are returned unchanged,
        so the innermost context always wins.
        """
        if self._command is not None:
            return self
        return copy.replace(self, command=command)


class UnknownCommandError(CommandError):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"


class UnknownSubcommandError(CommandError):
    code = FaultCode.UNKNOWN_SUBCOMMAND
    title = "unknown sub-command"


class UnrecognizedFlagError(CommandError):
    code = FaultCode.UNRECOGNIZED_FLAG
    title = "unrecognized flag"


class UnknownOptionError(CommandError):
    code = FaultCode.UNKNOWN_OPTION
    title = "unknown option"


class FlagAssignmentError(CommandError):
    code = FaultCode.FLAG_ASSIGNMENT
    title = "flag cannot take a value"


class FlagArgumentRequiredError(CommandError):
    code = FaultCode.FLAG_ARGUMENT_REQUIRED
    title = "missing flag argument"


class TooManyArgumentsError(CommandError):
    code = FaultCode.TOO_MANY_ARGUMENTS
    title = "too many arguments"


class UnexpectedEndError(CommandError):
    code = FaultCode.UNEXPECTED_END
    title = "unexpected end of input"


class ConversionError(CommandError):
    code = FaultCode.MALFORMED_VALUE
    title = "type error"


class MalformedValueError(ConversionError):
    code = FaultCode.MALFORMED_VALUE
    title = "malformed value"


class ValueRangeError(ConversionError):
    code = FaultCode.VALUE_OUT_OF_RANGE
    title = "value out of range"


class InternalError(CommandError):
    code = FaultCode.INTERNAL_ERROR
    title = "internal error"


__all__ = (
    "FaultCode",
    "CommandError",
    "UnknownCommandError",
    "UnknownSubcommandError",
    "UnrecognizedFlagError",
    "UnknownOptionError",
    "FlagAssignmentError",
    "FlagArgumentRequiredError",
    "TooManyArgumentsError",
    "UnexpectedEndError",
    "ConversionError",
    "MalformedValueError",
    "ValueRangeError",
    "InternalError",
)
