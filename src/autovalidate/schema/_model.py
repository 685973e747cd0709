# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

__all__ = ["Model"]

import logging
import typing as t

from autovalidate import inference

from ._properties import Property

LOGGER = logging.getLogger(__name__)


class Model:
    """Base class for models with automatically inferred validations.

    Properties are declared as class attributes. When a subclass is
    created, validation rules are inferred for each of its properties,
    including inherited ones, and stored in the class' ``__rules__``.

    Example::

        >>> from autovalidate.schema import Model, String
        >>> class User(Model):
        ...     email = String(required=True, format="email", unique=True)
        >>> User.__rules__.kinds_for("email")  # doctest: +NORMALIZE_WHITESPACE
        [<RuleKind.PRESENCE: 'presence'>, <RuleKind.LENGTH: 'length'>,
         <RuleKind.FORMAT: 'format'>, <RuleKind.UNIQUENESS: 'uniqueness'>,
         <RuleKind.PRIMITIVE_TYPE: 'primitive_type'>]

    Pass ``auto_validation=False`` as class keyword to skip inference
    for a model altogether.
    """

    __properties__: t.ClassVar[dict[str, Property[t.Any]]] = {}
    __rules__: t.ClassVar[inference.RuleSet] = inference.RuleSet()

    _values: dict[str, t.Any]

    def __init_subclass__(
        cls, *, auto_validation: bool = True, **kw: t.Any
    ) -> None:
        super().__init_subclass__(**kw)

        properties: dict[str, Property[t.Any]] = {}
        for base in reversed(cls.__mro__[1:]):
            properties.update(base.__dict__.get("__properties__", {}))
        for key, value in cls.__dict__.items():
            if isinstance(value, Property):
                properties[key] = value
        cls.__properties__ = properties
        cls.__rules__ = inference.RuleSet()

        if auto_validation:
            cls._infer_rules()

    @classmethod
    def _infer_rules(cls) -> None:
        errors: list[Exception] = []
        for prop in cls.__properties__.values():
            try:
                inference.infer_validations(prop, cls.__rules__)
            except inference.InvalidLengthRangeError as err:
                LOGGER.error(
                    "Cannot infer validations for %s.%s: %s",
                    cls.__name__,
                    prop.name,
                    err,
                )
                errors.append(err)
        if errors:
            raise errors[0]

    @classmethod
    def rules(cls, context: t.Any = None) -> inference.RuleSet:
        """Return the rules of this model.

        If *context* is given, only the rules that apply in that
        validation context are returned.
        """
        if context is None:
            return inference.RuleSet(cls.__rules__)
        return cls.__rules__.by_context(context)

    def __init__(self, **values: t.Any) -> None:
        self._values = {}
        for key, value in values.items():
            if key not in self.__properties__:
                raise TypeError(
                    f"{type(self).__name__} has no property {key!r}"
                )
            setattr(self, key, value)

    def __repr__(self) -> str:
        attrs = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"{type(self).__name__}({attrs})"
