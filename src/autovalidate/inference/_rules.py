# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

__all__ = [
    "LengthRange",
    "RegistrationSurface",
    "Rule",
    "RuleKind",
    "RuleOptions",
    "RuleSet",
]

import collections.abc as cabc
import dataclasses
import enum
import logging
import math
import typing as t

LOGGER = logging.getLogger(__name__)


class RuleKind(enum.Enum):
    """The kinds of validation rules that can be inferred."""

    PRESENCE = "presence"
    LENGTH = "length"
    FORMAT = "format"
    UNIQUENESS = "uniqueness"
    SET_MEMBERSHIP = "set_membership"
    NUMERICALITY = "numericality"
    PRIMITIVE_TYPE = "primitive_type"

    @property
    def legacy_name(self) -> str:
        """The older message key for this kind of rule.

        Schemas written for earlier releases address per-rule messages
        with these names, e.g. ``{"is_unique": "Already taken"}``.
        """
        return _LEGACY_NAMES[self]

    def __str__(self) -> str:
        return self.value


_LEGACY_NAMES = {
    RuleKind.PRESENCE: "presence",
    RuleKind.LENGTH: "length",
    RuleKind.FORMAT: "format",
    RuleKind.UNIQUENESS: "is_unique",
    RuleKind.SET_MEMBERSHIP: "within",
    RuleKind.NUMERICALITY: "is_number",
    RuleKind.PRIMITIVE_TYPE: "is_primitive",
}


@dataclasses.dataclass(frozen=True)
class LengthRange:
    """An inclusive range of allowed lengths.

    The upper bound may be :data:`math.inf` to express an unbounded
    range. Such ranges can be constructed, but are rejected when used
    as the length of a property.
    """

    minimum: int
    maximum: int | float

    def __post_init__(self) -> None:
        if self.minimum < 0:
            raise ValueError(f"Negative minimum length: {self.minimum}")
        if self.maximum < self.minimum:
            raise ValueError(
                f"Empty length range: {self.minimum}..{self.maximum}"
            )

    @classmethod
    def coerce(cls, value: t.Any, /) -> LengthRange:
        """Convert a range-like value into a LengthRange.

        Accepted are LengthRange instances, inclusive ``(lo, hi)``
        pairs given as tuple or list, and :class:`range` objects with a
        step of 1. Note that the latter are half-open, so
        ``range(1, 11)`` results in ``1..10``.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, range):
            if value.step != 1:
                raise ValueError(f"Length range must have step 1: {value!r}")
            return cls(value.start, value.stop - 1)
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return cls(*value)
        raise TypeError(
            f"Cannot use {type(value).__name__} as length range: {value!r}"
        )

    @property
    def is_bounded(self) -> bool:
        """Whether the upper bound is finite."""
        return not math.isinf(self.maximum)

    def __contains__(self, length: object) -> bool:
        if not isinstance(length, int):
            return False
        return self.minimum <= length <= self.maximum

    def __str__(self) -> str:
        return f"{self.minimum}..{self.maximum}"


@dataclasses.dataclass(frozen=True)
class RuleOptions:
    """Configuration for a single inferred validation rule.

    Instances are immutable. Use :meth:`evolve` to derive an updated
    copy; unset entries are ``None`` and are omitted by
    :meth:`to_dict`.
    """

    allow_nil: bool | None = None
    context: t.Any = None
    message: str | None = None
    within: LengthRange | None = None
    maximum: int | None = None
    scope: tuple[str, ...] | None = None
    with_: t.Any = None
    set: tuple[t.Any, ...] | None = None
    gte: t.Any = None
    lte: t.Any = None
    integer_only: bool | None = None
    precision: int | None = None
    scale: int | None = None

    def evolve(self, **changes: t.Any) -> RuleOptions:
        """Return a copy with the given entries replaced."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, t.Any]:
        result: dict[str, t.Any] = {}
        for field in dataclasses.fields(self):
            value = getattr(self, field.name)
            if value is not None:
                result[field.name.rstrip("_")] = value
        return result


@dataclasses.dataclass(frozen=True)
class Rule:
    """A validation rule attached to a named property."""

    kind: RuleKind
    name: str
    options: RuleOptions

    def to_dict(self) -> dict[str, t.Any]:
        """Serialize for reports."""
        return {
            "kind": self.kind.value,
            "property": self.name,
            "options": self.options.to_dict(),
        }


@t.runtime_checkable
class RegistrationSurface(t.Protocol):
    """Something that validation rules can be attached to.

    Every call attaches one rule. Implementations are not expected to
    de-duplicate, so registering the same rule twice results in two
    rules.
    """

    def register_presence(self, name: str, options: RuleOptions) -> None: ...
    def register_length(self, name: str, options: RuleOptions) -> None: ...
    def register_format(self, name: str, options: RuleOptions) -> None: ...
    def register_uniqueness(
        self, name: str, options: RuleOptions
    ) -> None: ...
    def register_set_membership(
        self, name: str, options: RuleOptions
    ) -> None: ...
    def register_numericality(
        self, name: str, options: RuleOptions
    ) -> None: ...
    def register_primitive_type(
        self, name: str, options: RuleOptions
    ) -> None: ...


class RuleSet(list[Rule]):
    """Records registered validation rules in registration order."""

    def register(
        self, kind: RuleKind, name: str, options: RuleOptions
    ) -> Rule:
        rule = Rule(kind, name, options)
        LOGGER.debug("Registering %s rule for %r", kind.value, name)
        self.append(rule)
        return rule

    def register_presence(self, name: str, options: RuleOptions) -> None:
        self.register(RuleKind.PRESENCE, name, options)

    def register_length(self, name: str, options: RuleOptions) -> None:
        self.register(RuleKind.LENGTH, name, options)

    def register_format(self, name: str, options: RuleOptions) -> None:
        self.register(RuleKind.FORMAT, name, options)

    def register_uniqueness(self, name: str, options: RuleOptions) -> None:
        self.register(RuleKind.UNIQUENESS, name, options)

    def register_set_membership(
        self, name: str, options: RuleOptions
    ) -> None:
        self.register(RuleKind.SET_MEMBERSHIP, name, options)

    def register_numericality(self, name: str, options: RuleOptions) -> None:
        self.register(RuleKind.NUMERICALITY, name, options)

    def register_primitive_type(
        self, name: str, options: RuleOptions
    ) -> None:
        self.register(RuleKind.PRIMITIVE_TYPE, name, options)

    def by_kind(self, kind: RuleKind | str, /) -> RuleSet:
        """Filter the rules by their kind."""
        if isinstance(kind, str):
            kind = RuleKind(kind)
        return RuleSet(i for i in self if i.kind is kind)

    def by_property(self, name: str, /) -> RuleSet:
        """Filter the rules by the property they are attached to."""
        return RuleSet(i for i in self if i.name == name)

    def by_context(self, context: t.Any, /) -> RuleSet:
        """Filter the rules that apply in the given validation context.

        Rules without a context apply in every context.
        """
        return RuleSet(
            i
            for i in self
            if i.options.context is None or i.options.context == context
        )

    def kinds_for(self, name: str, /) -> list[RuleKind]:
        """List the kinds of rules attached to a property, in order."""
        return [i.kind for i in self.by_property(name)]

    def properties(self) -> cabc.Iterator[str]:
        """Iterate over the names of properties that have rules."""
        seen: set[str] = set()
        for rule in self:
            if rule.name in seen:
                continue
            seen.add(rule.name)
            yield rule.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"
