"""
Argot type registry and builtin conversions.

Purpose
- Map type names used by argument specs (e.g., "int", "boolean") to converter
  callables, through an explicit, injectable TypeRegistry.

Converter contract
- converter(tokens, argument) -> Conversion(value, step=1)
  • tokens: tuple of the remaining tokens, tokens[0] being the one to convert.
  • argument: the Argument spec being resolved (its options/extras carry
    per-type settings such as ranges or signedness).
  • step: how many tokens were consumed (>= 1).
- Failures raise MalformedValueError (format) or ValueRangeError (bounds),
  both carrying the offending token. The parse engine annotates them with the
  raw command text on their way out.

Builtins
- string: verbatim token text.
- boolean: exactly "true" or "false".
- number: optional sign, integer or decimal, no leading zeros; optional
  inclusive range from NumberOptions. Integral literals give an int.
- byte/short/int/long: sized integers (8, 16, 32 and 64 bits), signed by
  default or unsigned through IntegerOptions.
- float / double: decimals with at least one / two fractional digits.

Notes
- The module-level `registry` is the process-wide default; parse() and Command
  accept a private TypeRegistry instead, which keeps tests isolated.
"""
import re
from collections import namedtuple

from .arguments import IntegerOptions, NumberOptions
from .faults import MalformedValueError, ValueRangeError
from .logs import get_logger
from .utils import Unset, rename

logger = get_logger(__name__)

Conversion = namedtuple("Conversion", ("value", "step"), defaults=(1,))

_BOOLEAN = re.compile(r"true|false")
_NUMBER = re.compile(r"[-+]?(0|[1-9]\d*)(\.\d+)?", re.ASCII)
_INTEGER = re.compile(r"[-+]?(0|[1-9]\d*)", re.ASCII)
_FLOAT = re.compile(r"[-+]?(0|[1-9]\d*)\.\d+", re.ASCII)
_DOUBLE = re.compile(r"[-+]?(0|[1-9]\d*)\.\d{2,}", re.ASCII)


def _string(tokens, argument, /):
    return Conversion(tokens[0].text)


def _boolean(tokens, argument, /):
    token = tokens[0]
    if not _BOOLEAN.fullmatch(token.text):
        raise MalformedValueError(f"type error: '{token.text}' is not true or false", token)
    return Conversion(token.text == "true")


def _number(tokens, argument, /):
    token = tokens[0]
    if not (match := _NUMBER.fullmatch(text := token.text)):
        raise MalformedValueError(f"type error: '{text}' is not a valid number", token)

    value = float(text) if match.group(2) else int(text)

    if isinstance(options := argument.options, NumberOptions):
        low, high = options.range
        if low is not None and value < low:
            raise ValueRangeError(f"type error: {text} is too small, it must be at least {low}", token)
        if high is not None and value > high:
            raise ValueRangeError(f"type error: {text} is too big, it must be at most {high}", token)

    return Conversion(value)


def _integer(name, bits, /):
    """
    Build the converter of a sized integer type `bits` wide.
    """
    @rename(name)
    def converter(tokens, argument, /):
        token = tokens[0]
        if not _INTEGER.fullmatch(text := token.text):
            raise MalformedValueError(f"type error: '{text}' is not a valid {name}", token)

        value = int(text)
        unsigned = isinstance(options := argument.options, IntegerOptions) and options.unsigned

        if unsigned:
            low, high = 0, 2 ** bits - 1
        else:
            low, high = -2 ** (bits - 1), 2 ** (bits - 1) - 1

        if not low <= value <= high:
            raise ValueRangeError(f"{bits}-bit {"unsigned" if unsigned else "signed"} overflow", token)

        return Conversion(value)

    return converter


def _decimal(name, pattern, /):
    """
    Build a converter for decimals matching `pattern` (float and double only
    differ by their minimum count of fractional digits).
    """
    @rename(name)
    def converter(tokens, argument, /):
        token = tokens[0]
        if not pattern.fullmatch(token.text):
            raise MalformedValueError(f"type error: '{token.text}' is not a valid {name}", token)
        return Conversion(float(token.text))

    return converter


_builtins = {
    "string": _string,
    "boolean": _boolean,
    "number": _number,
} | {
    name: _integer(name, 8 << index) for index, name in enumerate(("byte", "short", "int", "long"))
} | {
    "float": _decimal("float", _FLOAT),
    "double": _decimal("double", _DOUBLE),
}


class TypeRegistry:
    """
    Mapping from type name to converter.

    A registry is populated during setup and read by the parse engine. Each
    instance is independent: copy() gives a registry that can be extended
    without affecting the original.
    """

    def __init__(self, builtins=True):
        self._converters = dict(_builtins) if builtins else {}

    def register(self, name, converter=Unset, /):
        """
        Register `converter` under `name`, replacing any previous entry.

        Forms
        - registry.register("point", parse_point)
        - @registry.register("point")
        """
        if not isinstance(name, str):
            raise TypeError("register() type name must be a string")
        if not name.strip():
            raise ValueError("register() type name cannot be empty")

        if converter is Unset:
            @rename("register")
            def wrapper(converter):
                self.register(name, converter)
                return converter
            return wrapper

        if not callable(converter):
            raise TypeError("register() converter must be callable")

        self._converters[name] = converter
        logger.debug("type_registered", type=name, converter=getattr(converter, "__qualname__", repr(converter)))
        return converter

    def resolve(self, name, /):
        """
        Return the converter registered under `name`, or None.
        """
        return self._converters.get(name)

    def copy(self):
        replica = TypeRegistry(builtins=False)
        replica._converters.update(self._converters)
        return replica

    def __contains__(self, name):
        return name in self._converters

    def __iter__(self):
        return iter(self._converters)

    def __len__(self):
        return len(self._converters)

    def __repr__(self):
        return f"{type(self).__name__}({", ".join(self._converters)})"


registry = TypeRegistry()
"""
Process-wide default registry, pre-seeded with the builtin types.
"""


def register_type(name, converter=Unset, /):
    """
    Register a converter into the default registry (function or decorator form).
    """
    return registry.register(name, converter)


__all__ = (
    "Conversion",
    "TypeRegistry",
    "registry",
    "register_type",
)
