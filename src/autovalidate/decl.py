# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0
"""Support for YAML-based declarative schemas.

A schema file declares models and their properties::

    models:
      User:
        properties:
          id: {type: Serial}
          email: {type: String, required: true, format: email, unique: true}
          nickname: {type: String, length: !range 3..20}
          handle: {type: String, format: !regex "^[a-z_]+$"}
          age: {type: Integer, min: 0, max: 150}

Each model may additionally set ``auto_validation: false`` to skip the
inference of validation rules for all of its properties.

The tags ``!range`` and ``!regex`` construct a
:class:`~autovalidate.inference.LengthRange` and a compiled regular
expression respectively. An upper range bound of ``inf`` (or an
omitted one, like in ``!range 1..``) denotes an unbounded range.
"""

from __future__ import annotations

__all__ = [
    "PRIMITIVES",
    "PROPERTY_TYPES",
    "SchemaDumper",
    "SchemaError",
    "SchemaLoader",
    "dump_rules",
    "load",
]

import collections.abc as cabc
import contextlib
import datetime
import decimal
import logging
import math
import os
import re
import typing as t

import yaml

from autovalidate import inference, schema

LOGGER = logging.getLogger(__name__)

PROPERTY_TYPES: dict[str, type[schema.Property[t.Any]]] = {
    "Boolean": schema.Boolean,
    "Custom": schema.Custom,
    "Decimal": schema.Decimal,
    "Float": schema.Float,
    "Integer": schema.Integer,
    "Numeric": schema.Numeric,
    "Property": schema.Property,
    "Serial": schema.Serial,
    "String": schema.String,
    "Text": schema.Text,
}
"""The property classes that can be used as ``type`` in schema files."""

PRIMITIVES: dict[str, type[t.Any]] = {
    "bool": bool,
    "date": datetime.date,
    "datetime": datetime.datetime,
    "decimal": decimal.Decimal,
    "float": float,
    "int": int,
    "str": str,
}
"""The runtime types that can be used as ``primitive`` in schema files."""


class SchemaError(ValueError):
    """Raised when rules cannot be inferred for some declared models.

    All other models are still created, and are available from the
    :attr:`models` attribute.
    """

    models = property(lambda self: self.args[0])
    errors = property(lambda self: self.args[1])

    def __str__(self) -> str:
        if len(self.args) != 2:
            return super().__str__()
        count = len(self.errors)
        lines = [f"Cannot infer validations for {count} model(s)"]
        lines.extend(f"  {k}: {v}" for k, v in self.errors.items())
        return "\n".join(lines)


class SchemaLoader(yaml.SafeLoader):
    """A YAML loader with extensions for declarative schemas."""

    def construct_range(self, node: yaml.Node) -> inference.LengthRange:
        if not isinstance(node, yaml.ScalarNode):
            raise TypeError("!range only accepts scalar nodes")
        data = self.construct_scalar(node)
        lower, sep, upper = data.partition("..")
        if not sep:
            raise ValueError(f"Malformed range, expected 'lo..hi': {data}")

        upper = upper.strip()
        maximum: int | float
        if upper in ("", "inf"):
            maximum = math.inf
        else:
            maximum = int(upper)
        return inference.LengthRange(int(lower), maximum)

    def construct_regex(self, node: yaml.Node) -> re.Pattern[str]:
        if not isinstance(node, yaml.ScalarNode):
            raise TypeError("!regex only accepts scalar nodes")
        return re.compile(self.construct_scalar(node))


SchemaLoader.add_constructor("!range", SchemaLoader.construct_range)
SchemaLoader.add_constructor("!regex", SchemaLoader.construct_regex)


class SchemaDumper(yaml.SafeDumper):
    """A YAML dumper that understands inferred rule options."""

    def represent_range(self, data: inference.LengthRange) -> yaml.Node:
        if data.is_bounded:
            return self.represent_scalar("!range", str(data))
        return self.represent_scalar("!range", f"{data.minimum}..inf")

    def represent_regex(self, data: re.Pattern[str]) -> yaml.Node:
        return self.represent_scalar("!regex", data.pattern)

    def represent_decimal(self, data: t.Any) -> yaml.Node:
        return self.represent_scalar("tag:yaml.org,2002:str", str(data))

    def represent_other(self, data: t.Any) -> yaml.Node:
        return self.represent_scalar("tag:yaml.org,2002:str", repr(data))


SchemaDumper.add_representer(
    inference.LengthRange, SchemaDumper.represent_range
)
SchemaDumper.add_representer(re.Pattern, SchemaDumper.represent_regex)
SchemaDumper.add_representer(decimal.Decimal, SchemaDumper.represent_decimal)
SchemaDumper.add_representer(tuple, SchemaDumper.represent_list)
SchemaDumper.add_multi_representer(object, SchemaDumper.represent_other)


def load(
    file: str | os.PathLike[t.Any] | t.IO[str],
) -> dict[str, type[schema.Model]]:
    """Load the models declared in a schema file.

    Validation rules are inferred while the models are created, so
    errors in the property options surface here.

    Parameters
    ----------
    file
        An open file-like object containing a schema, or a path or
        PathLike pointing to such a file. Files are expected to use
        UTF-8 encoding.

    Returns
    -------
    dict[str, type[Model]]
        The created model classes, keyed by their names.

    Raises
    ------
    SchemaError
        If the rules of some models cannot be inferred. The remaining
        models are still created and attached to the exception.
    """
    if hasattr(file, "read"):
        file = t.cast(t.IO[str], file)
        ctx: t.ContextManager[t.IO[str]] = contextlib.nullcontext(file)
    else:
        assert not isinstance(file, t.IO)
        ctx = open(file, encoding="utf-8")  # noqa: SIM115

    with ctx as opened_file:
        document = yaml.load(opened_file, Loader=SchemaLoader)

    if not document:
        return {}
    if not isinstance(document, dict) or "models" not in document:
        raise ValueError("Expected a mapping with a 'models' key")

    models: dict[str, type[schema.Model]] = {}
    errors: dict[str, inference.InvalidLengthRangeError] = {}
    for name, definition in (document["models"] or {}).items():
        try:
            models[name] = _build_model(name, definition or {})
        except inference.InvalidLengthRangeError as err:
            errors[name] = err
    if errors:
        raise SchemaError(models, errors)
    return models


def _build_model(
    name: str, definition: dict[str, t.Any]
) -> type[schema.Model]:
    namespace: dict[str, t.Any] = {}
    for propname, propdef in (definition.get("properties") or {}).items():
        namespace[propname] = _build_property(name, propname, propdef or {})

    auto_validation = definition.get("auto_validation", True)
    LOGGER.debug("Creating model %s with %d properties", name, len(namespace))
    return t.cast(
        type[schema.Model],
        type(
            name,
            (schema.Model,),
            namespace,
            auto_validation=auto_validation,
        ),
    )


def _build_property(
    model: str, name: str, definition: dict[str, t.Any]
) -> schema.Property[t.Any]:
    options = dict(definition)
    typename = options.pop("type", "Property")
    try:
        cls = PROPERTY_TYPES[typename]
    except KeyError:
        raise ValueError(
            f"Unknown property type for {model}.{name}: {typename!r}"
        ) from None

    if "primitive" in options:
        primname = options.pop("primitive")
        try:
            options["primitive"] = PRIMITIVES[primname]
        except KeyError:
            raise ValueError(
                f"Unknown primitive for {model}.{name}: {primname!r}"
            ) from None

    return cls(**options)


def dump_rules(
    rules: cabc.Mapping[str, cabc.Iterable[inference.Rule]],
) -> str:
    """Dump rules, grouped by model name, as YAML."""
    data = {
        name: [rule.to_dict() for rule in model_rules]
        for name, model_rules in rules.items()
    }
    return yaml.dump(data, Dumper=SchemaDumper, sort_keys=False)
