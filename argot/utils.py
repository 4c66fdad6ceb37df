"""
Argot utilities (internal helpers, carefully exposed)

Scope
- Core building blocks shared by the tokenizer, the schema model and the
  parse engine, so that every layer reports and displays itself the same way.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- view("attr")
  • Read-only property factory exposing a private backing field (self._attr).

- SpecType
  • Metaclass for immutable specifications (arguments, flags, command nodes):
    read-only properties, stable __repr__/__rich_repr__, field-wise equality
    and copy.replace() support.

Stability and contract
- Names not in __all__ are internal and may change without notice.

Quick examples
    >>> one = coalesce(Unset, "fallback")  # "fallback"
    >>> two = coalesce(None, "fallback")    # None  (None is preserved)
    >>> @rename("do_work")
    ... def work(): ...
"""
import builtins
import functools
import operator
import re
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value (for instance, an
    argument default), but the API needs a way to distinguish “not provided”
    from “provided as None”.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when Unset appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    Falsey values like None, 0, "", or [] are preserved as-is; only the
    Unset sentinel is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - Function form: rename(callable, name) -> callable
    - Decorator form: rename(name) -> (decorator)

    Notes
    - Only metadata changes; behavior is untouched.
    - Some built-in or C-implemented callables are not updatable and will
      raise TypeError.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def view(name, /):
    """
    Define a read-only property that exposes a private backing attribute.

    The generated property reads "_{name}" from the instance. Containers are
    expected to be normalized to immutable shapes (tuple, frozenset,
    MappingProxyType) by the constructor, so the value is returned as-is.
    """
    if not isinstance(name, str):
        raise TypeError("view() argument must be a string")

    @rename(name)
    def getter(self):
        return getattr(self, "_" + name)

    return property(getter)


class SpecType(type):
    """
    Metaclass that turns schema classes into immutable, introspectable specs.

    Responsibilities
    - Expose every field listed in __introspectable__ as a read-only property
      backed by "_{field}".
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and pretty printing with rich.
    - Provide field-wise __eq__ so that equivalent declarations compare equal,
      and __replace__ so copy.replace() derives modified copies.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in validation messages.
    - __displayable__ (if set) narrows which fields are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    - Construction goes through the class' own __new__ with keyword metadata,
      so __replace__ simply rebuilds the spec from its current fields.
    """
    __introspectable__ = ()
    __displayable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: view(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - flag(dest='verbose', long='verbose', short='v', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers such as rich.pretty.
            """
            for name in type(self).__displayable__ or type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__eq__")
        def __eq__(self, other):
            if type(other) is not type(self):
                return NotImplemented
            return all(getattr(self, name) == getattr(other, name) for name in type(self).__introspectable__)
        self.__eq__ = __eq__
        # Specs are compared by value, they cannot be used as dictionary keys.
        self.__hash__ = None

        @rename("__replace__")
        def __replace__(self, /, **overrides):
            fields = {name: getattr(self, name) for name in type(self).__introspectable__}
            return type(self)._rebuild(fields | overrides)
        self.__replace__ = __replace__

        return self


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: equality and identity checks must not treat it as None.
- Typical pattern: value = coalesce(user_value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "view",

    # Types
    "UnsetType",
    "SpecType",

    # Constants
    "Unset",
)
