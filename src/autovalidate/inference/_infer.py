# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

__all__ = [
    "DEFAULT_LENGTHS",
    "InvalidLengthRangeError",
    "PropertyDescriptor",
    "PropertyType",
    "auto_validations_disabled",
    "auto_validations_suspended",
    "infer_validations",
    "is_custom_type_property",
    "resolve_message",
    "with_auto_validations_suspended",
]

import collections.abc as cabc
import contextlib
import contextvars
import decimal
import enum
import logging
import math
import numbers
import os
import typing as t

import typing_extensions as te

from ._rules import LengthRange, RegistrationSurface, RuleKind, RuleOptions

LOGGER = logging.getLogger(__name__)

_R = t.TypeVar("_R")

_SUSPENDED: contextvars.ContextVar[bool | None] = contextvars.ContextVar(
    "autovalidate_suspended", default=None
)


class PropertyType(enum.Enum):
    """The declared type of a property."""

    STRING = enum.auto()
    TEXT = enum.auto()
    INTEGER = enum.auto()
    DECIMAL = enum.auto()
    FLOAT = enum.auto()
    NUMERIC = enum.auto()
    BOOLEAN = enum.auto()
    OTHER = enum.auto()
    CUSTOM = enum.auto()

    @property
    def is_textual(self) -> bool:
        return self in (PropertyType.STRING, PropertyType.TEXT)

    @property
    def is_numeric(self) -> bool:
        return self in (
            PropertyType.INTEGER,
            PropertyType.DECIMAL,
            PropertyType.FLOAT,
            PropertyType.NUMERIC,
        )


DEFAULT_LENGTHS: dict[PropertyType, int] = {
    PropertyType.STRING: 50,
    PropertyType.TEXT: 65535,
}
"""Maximum lengths used for textual properties without a ``length``."""


class PropertyDescriptor(t.Protocol):
    """The read-only view of a property that inference works with."""

    @property
    def name(self) -> str: ...
    @property
    def declared_type(self) -> PropertyType: ...
    @property
    def options(self) -> cabc.Mapping[str, t.Any]: ...
    @property
    def primitive(self) -> type[t.Any]: ...
    @property
    def allow_blank(self) -> bool: ...
    @property
    def serial(self) -> bool: ...
    @property
    def min(self) -> t.Any: ...
    @property
    def max(self) -> t.Any: ...
    @property
    def precision(self) -> int | None: ...
    @property
    def scale(self) -> int | None: ...


class InvalidLengthRangeError(ValueError):
    """Raised when a property's length range has no finite upper bound."""

    property_name = property(lambda self: self.args[0])
    length = property(lambda self: self.args[1])

    def __str__(self) -> str:
        if len(self.args) != 2:
            return super().__str__()
        return (
            f"Infinity is not a valid upper bound for the length of"
            f" {self.property_name!r}: {self.length}"
        )


def auto_validations_disabled() -> bool:
    """Check whether inference is currently disabled.

    Inference is disabled inside :func:`auto_validations_suspended`.
    Outside of it, setting the environment variable
    ``AUTOVALIDATE_DISABLE=1`` disables it as well.
    """
    state = _SUSPENDED.get()
    if state is None:
        return os.getenv("AUTOVALIDATE_DISABLE") == "1"
    return state


@contextlib.contextmanager
def auto_validations_suspended() -> cabc.Iterator[None]:
    """Suspend inference for the duration of the ``with`` block.

    The suspension is bound to the current context, so other threads
    and asyncio tasks keep inferring rules. When the block is left,
    the previous state is restored, even if it raised an exception.
    """
    token = _SUSPENDED.set(True)
    try:
        yield
    finally:
        _SUSPENDED.reset(token)


def with_auto_validations_suspended(unit_of_work: cabc.Callable[[], _R]) -> _R:
    """Call ``unit_of_work`` with inference suspended.

    Returns whatever ``unit_of_work`` returned.
    """
    with auto_validations_suspended():
        return unit_of_work()


def is_custom_type_property(prop: object) -> bool:
    """Check whether a property has a custom type.

    Objects that do not carry a ``custom`` flag are not custom.
    """
    return bool(getattr(prop, "custom", False))


def resolve_message(
    options: RuleOptions, prop: PropertyDescriptor, kind: RuleKind
) -> RuleOptions:
    """Apply the property's custom error message for a rule.

    A message for the specific *kind* in the ``messages`` option wins
    over the general ``message`` option. Without either, the returned
    options carry no message and the rule uses its default wording.
    """
    messages = prop.options.get("messages") or {}
    for key in (kind, kind.value, kind.legacy_name):
        if key in messages:
            return options.evolve(message=messages[key])

    message = prop.options.get("message")
    if message is not None:
        return options.evolve(message=message)
    return options


def infer_validations(
    prop: PropertyDescriptor, surface: RegistrationSurface
) -> None:
    """Infer validation rules for a property.

    The following options of a property trigger the registration of
    rules on *surface*:

    ``required=True``
        A presence rule. Blank or serial properties never get one.
    ``length``
        For String and Text properties, a length rule. An integer
        becomes the ``maximum``, a range becomes ``within``. Without
        the option the type's entry in :data:`DEFAULT_LENGTHS` is used
        as maximum.
    ``format``
        A format rule matching the given tag, callable or pattern.
    ``unique``
        A uniqueness rule. A key or sequence of keys becomes the
        ``scope``, ``True`` means globally unique.
    ``set``
        A set membership rule allowing only the given values.

    Additionally, properties with an integer, float or decimal
    primitive get a numericality rule, and all other non-custom
    properties get a primitive type rule.

    ``auto_validation=False`` turns off inference for the property.
    Custom messages can be set with the ``message`` and ``messages``
    options, see :func:`resolve_message`.

    Raises
    ------
    InvalidLengthRangeError
        If the length range of the property is unbounded. Rules
        registered for the property before the length rule remain
        registered.
    """
    if auto_validations_disabled():
        LOGGER.debug("Auto validations disabled, skipping %r", prop.name)
        return
    if not prop.options.get("auto_validation", True):
        LOGGER.debug("Auto validation turned off for %r", prop.name)
        return

    options = RuleOptions(allow_nil=True)
    if prop.options.get("validation_context") is not None:
        options = options.evolve(context=prop.options["validation_context"])

    _infer_presence(prop, surface, options)
    _infer_length(prop, surface, options)
    _infer_format(prop, surface, options)
    _infer_uniqueness(prop, surface, options)
    _infer_set_membership(prop, surface, options)
    _infer_type(prop, surface, options)


def _infer_presence(
    prop: PropertyDescriptor,
    surface: RegistrationSurface,
    options: RuleOptions,
) -> None:
    if prop.allow_blank or prop.serial:
        return

    options = options.evolve(allow_nil=None)
    surface.register_presence(
        prop.name, resolve_message(options, prop, RuleKind.PRESENCE)
    )


def _infer_length(
    prop: PropertyDescriptor,
    surface: RegistrationSurface,
    options: RuleOptions,
) -> None:
    if not prop.declared_type.is_textual:
        return

    length = prop.options.get("length")
    if length is None:
        length = DEFAULT_LENGTHS[prop.declared_type]

    if isinstance(length, numbers.Real) and not isinstance(length, bool):
        if math.isinf(length):
            raise InvalidLengthRangeError(prop.name, length)
        options = options.evolve(maximum=length)
    else:
        within = LengthRange.coerce(length)
        if not within.is_bounded:
            raise InvalidLengthRangeError(prop.name, within)
        options = options.evolve(within=within)

    surface.register_length(
        prop.name, resolve_message(options, prop, RuleKind.LENGTH)
    )


def _infer_format(
    prop: PropertyDescriptor,
    surface: RegistrationSurface,
    options: RuleOptions,
) -> None:
    format = prop.options.get("format")
    if format is None:
        return

    options = options.evolve(with_=format)
    surface.register_format(
        prop.name, resolve_message(options, prop, RuleKind.FORMAT)
    )


def _infer_uniqueness(
    prop: PropertyDescriptor,
    surface: RegistrationSurface,
    options: RuleOptions,
) -> None:
    unique = prop.options.get("unique")
    if isinstance(unique, str):
        options = options.evolve(scope=(unique,))
    elif isinstance(unique, cabc.Sequence):
        options = options.evolve(scope=tuple(unique))
    elif unique is not True:
        return

    surface.register_uniqueness(
        prop.name, resolve_message(options, prop, RuleKind.UNIQUENESS)
    )


def _infer_set_membership(
    prop: PropertyDescriptor,
    surface: RegistrationSurface,
    options: RuleOptions,
) -> None:
    values = prop.options.get("set")
    if values is None:
        return

    if isinstance(values, str):
        values = (values,)
    elif isinstance(values, cabc.Set):
        try:
            values = sorted(values)
        except TypeError:
            values = sorted(values, key=repr)
    options = options.evolve(set=tuple(values))
    surface.register_set_membership(
        prop.name, resolve_message(options, prop, RuleKind.SET_MEMBERSHIP)
    )


def _infer_type(
    prop: PropertyDescriptor,
    surface: RegistrationSurface,
    options: RuleOptions,
) -> None:
    if is_custom_type_property(prop):
        return

    if prop.declared_type.is_numeric:
        if prop.min is not None:
            options = options.evolve(gte=prop.min)
        if prop.max is not None:
            options = options.evolve(lte=prop.max)

    kind = _primitive_rule_kind(prop.primitive)
    if kind is RuleKind.NUMERICALITY:
        if prop.primitive is int:
            options = options.evolve(integer_only=True)
        else:
            options = options.evolve(
                precision=prop.precision, scale=prop.scale
            )
        surface.register_numericality(
            prop.name, resolve_message(options, prop, kind)
        )
    elif kind is RuleKind.PRIMITIVE_TYPE:
        surface.register_primitive_type(
            prop.name, resolve_message(options, prop, kind)
        )
    else:
        te.assert_never(kind)


def _primitive_rule_kind(
    primitive: type[t.Any],
) -> t.Literal[RuleKind.NUMERICALITY, RuleKind.PRIMITIVE_TYPE]:
    # bool is an int subclass, but is not a number here
    if primitive in (int, float, decimal.Decimal):
        return RuleKind.NUMERICALITY
    return RuleKind.PRIMITIVE_TYPE
