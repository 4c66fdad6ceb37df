r"""
Argot argument and flag specifications.

Overview
- Specs
  • Argument: positional (or flag-carried) value, converted by a registered
    type name or a conversion callable and stored under its dest.
  • Flag: named switch (--long and/or -s). Without arguments it is a boolean
    presence flag; otherwise it carries its own ordered arguments.

- Per-type options (tagged variants instead of a loose attribute bag)
  • NumberOptions(range=(min, max)): inclusive bounds for the "number" type;
    either bound may be None.
  • IntegerOptions(unsigned=False): signedness of "byte", "short", "int" and
    "long".
  • extras: read-only mapping handed untouched to custom converters.

- Introspection & representation
  • SpecType metaclass provides stable __repr__/__rich_repr__, read-only
    properties for every field in __introspectable__, field-wise equality and
    copy.replace() support.

Metadata (sanitized on construction)
- dest/name: non-empty strings (trimmed); an argument's name defaults to dest,
  a flag's dest defaults to its long code, then to its short code.
- type: non-empty type name or callable.
- help: Unset | str, non-empty when provided (None when omitted).
- long: code without leading dashes, no '=' and no whitespace.
- short: exactly one character (not '-', '=' or whitespace).

Quick example:
    >>> from argot.arguments import Argument, Flag, IntegerOptions
    >>> count = Argument("count", "int", options=IntegerOptions(unsigned=True))
    >>> Flag("count", "c", dest="counted", args=(count,))
    flag(dest='counted', long='count', short='c', help=None, args=(...))
"""
from collections import namedtuple
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from .utils import *


class NumberOptions(namedtuple("NumberOptions", ("range",), defaults=((None, None),))):
    """
    Options of the "number" type: an inclusive (min, max) range where either
    bound may be None (unbounded on that side).
    """
    __slots__ = ()

    def __new__(cls, range=(None, None)):
        if not isinstance(range, Sequence) or isinstance(range, str) or len(range) != 2:
            raise TypeError("number-options 'range' must be a (min, max) pair")
        for bound in range:
            if bound is not None and (isinstance(bound, bool) or not isinstance(bound, int | float)):
                raise TypeError("number-options 'range' bounds must be numbers or None")
        low, high = range
        if low is not None and high is not None and low > high:
            raise ValueError("number-options 'range' minimum cannot exceed its maximum")
        return super().__new__(cls, (low, high))


class IntegerOptions(namedtuple("IntegerOptions", ("unsigned",), defaults=(False,))):
    """
    Options of the sized integer types: signed (two's complement) by default.
    """
    __slots__ = ()

    def __new__(cls, unsigned=False):
        return super().__new__(cls, bool(unsigned))


def _sanitize_identifier(cls, metadata, name, /):
    """
    Internal: validate a required, non-empty string field and trim it.
    """
    if not isinstance(object := metadata[name], str):
        raise TypeError(f"{cls.__typename__} {name!r} must be a string")
    elif not (object := object.strip()):
        raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
    metadata[name] = object


def _sanitize_help(cls, metadata, /):
    """
    Internal: normalize the optional 'help' text (Unset becomes None).
    """
    if not isinstance(help := metadata["help"], str | Unset | None):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
    metadata["help"] = coalesce(help)


def _sanitize_argument_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the metadata of an Argument.

    Responsibilities
    - dest: required, non-empty string.
    - name: display name, defaults to dest.
    - type: registered type name (non-empty string) or a conversion callable.
      Whether a name is actually registered is checked at parse time, against
      the registry in use.
    - options: None, NumberOptions or IntegerOptions.
    - extras: mapping with string keys, frozen into a MappingProxyType.

    Side effects
    - Mutates the provided metadata dict in place.
    """
    _sanitize_identifier(cls, metadata, "dest")

    metadata["name"] = coalesce(metadata["name"], metadata["dest"])
    _sanitize_identifier(cls, metadata, "name")

    if isinstance(type := metadata["type"], str):
        if not (type := type.strip()):
            raise ValueError(f"{cls.__typename__} 'type' cannot be empty")
        metadata["type"] = type
    elif not callable(type):
        raise TypeError(f"{cls.__typename__} 'type' must be a type name or a callable")

    if not isinstance(metadata["options"], NumberOptions | IntegerOptions | None):
        raise TypeError(f"{cls.__typename__} 'options' must be number-options or integer-options")

    if not isinstance(extras := metadata["extras"], Mapping):
        raise TypeError(f"{cls.__typename__} 'extras' must be a mapping")
    if not all(isinstance(key, str) for key in extras):
        raise TypeError(f"{cls.__typename__} 'extras' keys must be strings")
    metadata["extras"] = MappingProxyType(dict(extras))

    _sanitize_help(cls, metadata)


def _sanitize_flag_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the metadata of a Flag.

    Responsibilities
    - long/short: at least one is required. The long code is written without
      its leading dashes and cannot contain '=' or whitespace; the short code
      is exactly one character.
    - dest: defaults to the long code, then to the short code.
    - args: iterable of Argument, stabilized into a tuple.

    Side effects
    - Mutates the provided metadata dict in place.
    """
    long, short = metadata["long"], metadata["short"]

    if long is None and short is None:
        raise TypeError(f"{cls.__typename__} must specify a long or a short code")

    if long is not None:
        if not isinstance(long, str):
            raise TypeError(f"{cls.__typename__} 'long' must be a string")
        elif not long:
            raise ValueError(f"{cls.__typename__} 'long' cannot be empty")
        elif long.startswith("-"):
            raise ValueError(f"{cls.__typename__} 'long' must be given without its leading dashes")
        elif "=" in long or any(char.isspace() for char in long):
            raise ValueError(f"{cls.__typename__} 'long' cannot contain '=' or whitespaces")

    if short is not None:
        if not isinstance(short, str):
            raise TypeError(f"{cls.__typename__} 'short' must be a string")
        elif len(short) != 1:
            raise ValueError(f"{cls.__typename__} 'short' must be exactly one character")
        elif short in "-=" or short.isspace():
            raise ValueError(f"{cls.__typename__} 'short' cannot be '-', '=' or a whitespace")

    metadata["dest"] = coalesce(metadata["dest"], long if long is not None else short)
    _sanitize_identifier(cls, metadata, "dest")

    if not isinstance(args := metadata["args"], Iterable) or isinstance(args, str | Mapping):
        raise TypeError(f"{cls.__typename__} 'args' must be an iterable of arguments")
    args = tuple(args)
    if not all(isinstance(argument, Argument) for argument in args):
        raise TypeError(f"{cls.__typename__} 'args' must be an iterable of arguments")
    metadata["args"] = args

    _sanitize_help(cls, metadata)


class Argument(metaclass=SpecType):
    """
    Value-bearing argument specification.

    An Argument tells the parse engine how to convert the token(s) at its
    position and where to store the value (dest). Optional arguments fall back
    to their default when the input runs out.

    Properties
    - The names listed in __introspectable__ are exposed as read-only
      attributes mirroring the sanitized metadata.
    """

    __introspectable__ = (
        "dest",
        "type",
        "name",
        "required",
        "default",
        "help",
        "options",
        "extras",
    )

    def __new__(
            cls,
            dest,
            type="string",
            *,
            name=Unset,
            required=True,
            default=None,
            help=Unset,
            options=None,
            extras=MappingProxyType({}),
    ):
        """
        Construct an Argument spec.

        Parameters
        - dest: str
          Key of the parsed value in the result mapping.
        - type: str | Callable
          Registered type name (e.g., "int") or a converter callable taking
          (tokens, argument) and returning a Conversion.
        - name: Unset | str
          Display name, defaults to dest.
        - required: bool
          When False, the default is used if the input runs out.
        - default: Any
          Value used for optional arguments. Not validated.
        - help: Unset | str
          Short description.
        - options: None | NumberOptions | IntegerOptions
          Settings for the builtin numeric types.
        - extras: Mapping[str, Any]
          Free-form settings for custom converters.
        """
        metadata = {
            "dest": dest,
            "type": type,
            "name": name,
            "required": bool(required),
            "default": default,
            "help": help,
            "options": options,
            "extras": extras,
        }
        _sanitize_argument_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @classmethod
    def _rebuild(cls, fields):
        return cls(**fields)


class Flag(metaclass=SpecType):
    """
    Named switch specification (--long / -s).

    A Flag always records its presence by storing True under its dest. Its
    own arguments (if any) are parsed right after the flag token, or from an
    inline value (--count=5, -c=5), and stored under their own dests.
    """

    __introspectable__ = (
        "dest",
        "long",
        "short",
        "help",
        "args",
    )

    def __new__(cls, long=None, short=None, *, dest=Unset, help=Unset, args=()):
        metadata = {
            "dest": dest,
            "long": long,
            "short": short,
            "help": help,
            "args": args,
        }
        _sanitize_flag_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def codes(self):
        """
        The command-line spellings of this flag (e.g., ('--count', '-c')).
        """
        return tuple(
            prefix + code for prefix, code in (("--", self._long), ("-", self._short)) if code is not None
        )

    @classmethod
    def _rebuild(cls, fields):
        return cls(fields.pop("long"), fields.pop("short"), **fields)


__all__ = (
    # Options
    "NumberOptions",
    "IntegerOptions",

    # Specs
    "Argument",
    "Flag",
)
