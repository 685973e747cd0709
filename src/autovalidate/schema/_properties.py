# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

__all__ = [
    "Boolean",
    "Custom",
    "Decimal",
    "Float",
    "Integer",
    "Numeric",
    "Property",
    "Serial",
    "String",
    "Text",
]

import collections.abc as cabc
import decimal
import types
import typing as t

import typing_extensions as te

from autovalidate.inference import PropertyType

U = t.TypeVar("U")

_COMMON_OPTIONS = frozenset(
    {
        "allow_blank",
        "auto_validation",
        "format",
        "message",
        "messages",
        "required",
        "set",
        "unique",
        "validation_context",
    }
)


class Property(t.Generic[U]):
    """A typed property of a model.

    All keyword arguments apart from *name*, *default* and *primitive*
    are stored in :attr:`options`. Each property class only accepts the
    options that make sense for it, passing anything else raises a
    TypeError. Use :meth:`accept_options` to allow additional ones.
    """

    __slots__ = (
        "__dict__",
        "__name__",
        "__objclass__",
        "_primitive",
        "default",
        "options",
    )

    DECLARED_TYPE: t.ClassVar[PropertyType] = PropertyType.OTHER
    PRIMITIVE: t.ClassVar[type[t.Any]] = object
    CUSTOM: t.ClassVar[bool] = False

    _OPTIONS: t.ClassVar[frozenset[str]] = _COMMON_OPTIONS

    def __init__(
        self,
        *,
        name: str | None = None,
        default: U | None = None,
        primitive: type[t.Any] | None = None,
        **options: t.Any,
    ) -> None:
        unknown = options.keys() - self.accepted_options()
        if unknown:
            raise TypeError(
                f"{type(self).__name__} does not accept option(s):"
                f" {', '.join(sorted(unknown))}"
            )

        self.options: cabc.Mapping[str, t.Any] = types.MappingProxyType(
            options
        )
        self.default = default
        self._primitive = primitive

        self.__name__ = name or "(unknown)"
        self.__objclass__: type[t.Any] | None = None

    @classmethod
    def accepted_options(cls) -> frozenset[str]:
        """Return the option names this class accepts."""
        names: set[str] = set()
        for base in cls.__mro__:
            names.update(base.__dict__.get("_OPTIONS", ()))
        return frozenset(names)

    @classmethod
    def accept_options(cls, *names: str) -> None:
        """Allow additional options on this class and its subclasses."""
        cls._OPTIONS = cls.__dict__.get("_OPTIONS", frozenset()) | set(names)

    @property
    def _qualname(self) -> str:
        """Generate the qualified name of this descriptor."""
        if self.__objclass__ is None:
            return f"(unknown {type(self).__name__} - call __set_name__)"
        return f"{self.__objclass__.__name__}.{self.__name__}"

    @property
    def name(self) -> str:
        return self.__name__

    @property
    def declared_type(self) -> PropertyType:
        return self.DECLARED_TYPE

    @property
    def primitive(self) -> type[t.Any]:
        """The runtime type of this property's values."""
        return self._primitive or self.PRIMITIVE

    @property
    def required(self) -> bool:
        return bool(self.options.get("required", False))

    @property
    def allow_blank(self) -> bool:
        """Whether blank values are allowed.

        Unless explicitly given, only optional properties allow blanks.
        """
        return bool(self.options.get("allow_blank", not self.required))

    @property
    def serial(self) -> bool:
        return False

    @property
    def custom(self) -> bool:
        return self.CUSTOM

    @property
    def min(self) -> t.Any:
        return None

    @property
    def max(self) -> t.Any:
        return None

    @property
    def precision(self) -> int | None:
        return None

    @property
    def scale(self) -> int | None:
        return None

    @t.overload
    def __get__(self, obj: None, objtype: type) -> te.Self: ...
    @t.overload
    def __get__(self, obj: t.Any, objtype: type | None = None) -> U: ...
    def __get__(self, obj, objtype=None):
        del objtype
        if obj is None:
            return self
        return obj._values.get(self.__name__, self.default)

    def __set__(self, obj: t.Any, value: U | None) -> None:
        if value is None:
            obj._values.pop(self.__name__, None)
        else:
            obj._values[self.__name__] = value

    def __delete__(self, obj: t.Any) -> None:
        self.__set__(obj, None)

    def __set_name__(self, owner: type[t.Any], name: str) -> None:
        if self.__objclass__ is not None:
            raise RuntimeError(
                f"__set_name__ called twice on {self._qualname}"
            )
        self.__name__ = name
        self.__objclass__ = owner

    def __repr__(self) -> str:
        args = [f"{k}={v!r}" for k, v in self.options.items()]
        return f"<{type(self).__name__} {self.__name__!r}({', '.join(args)})>"


class String(Property[str]):
    """A property containing a short string."""

    __slots__ = ()

    DECLARED_TYPE = PropertyType.STRING
    PRIMITIVE = str
    _OPTIONS = frozenset({"length"})


class Text(String):
    """A property containing an arbitrarily long text."""

    __slots__ = ()

    DECLARED_TYPE = PropertyType.TEXT


class Boolean(Property[bool]):
    __slots__ = ()

    DECLARED_TYPE = PropertyType.BOOLEAN
    PRIMITIVE = bool


class Numeric(Property[U]):
    """A property containing a number.

    The runtime type defaults to :class:`decimal.Decimal` and can be
    changed with the *primitive* argument.
    """

    __slots__ = ()

    DECLARED_TYPE = PropertyType.NUMERIC
    PRIMITIVE = decimal.Decimal
    DEFAULT_PRECISION: t.ClassVar[int | None] = None
    DEFAULT_SCALE: t.ClassVar[int | None] = None
    _OPTIONS = frozenset({"max", "min", "precision", "scale"})

    def __init__(self, **kw: t.Any) -> None:
        super().__init__(**kw)

        if (
            self.min is not None
            and self.max is not None
            and self.min > self.max
        ):
            raise ValueError(
                f"min must not be greater than max: {self.min} > {self.max}"
            )

        precision, scale = self.precision, self.scale
        if precision is not None and precision < 1:
            raise ValueError(f"precision must be at least 1: {precision}")
        if scale is not None and not 0 <= scale <= (precision or scale):
            raise ValueError(
                f"scale must be between 0 and precision ({precision}):"
                f" {scale}"
            )

    @property
    def min(self) -> t.Any:
        return self.options.get("min")

    @property
    def max(self) -> t.Any:
        return self.options.get("max")

    @property
    def precision(self) -> int | None:
        return self.options.get("precision", self.DEFAULT_PRECISION)

    @property
    def scale(self) -> int | None:
        return self.options.get("scale", self.DEFAULT_SCALE)


class Integer(Numeric[int]):
    """A property containing an integer number."""

    __slots__ = ()

    DECLARED_TYPE = PropertyType.INTEGER
    PRIMITIVE = int


class Serial(Integer):
    """An automatically generated integer identity."""

    __slots__ = ()

    @property
    def serial(self) -> bool:
        return True


class Decimal(Numeric[decimal.Decimal]):
    """A property containing a fixed-point decimal number."""

    __slots__ = ()

    DECLARED_TYPE = PropertyType.DECIMAL
    PRIMITIVE = decimal.Decimal
    DEFAULT_PRECISION = 10
    DEFAULT_SCALE = 0


class Float(Numeric[float]):
    """A property containing a floating-point number."""

    __slots__ = ()

    DECLARED_TYPE = PropertyType.FLOAT
    PRIMITIVE = float
    DEFAULT_PRECISION = 10


class Custom(Property[t.Any]):
    """A property whose type handles its own validation.

    No type or numericality rules are inferred for custom properties.
    """

    __slots__ = ()

    DECLARED_TYPE = PropertyType.CUSTOM
    CUSTOM = True
