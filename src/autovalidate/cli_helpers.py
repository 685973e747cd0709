# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0
"""Helpers for working with schemas in CLI scripts."""

from __future__ import annotations

__all__ = ["SchemaCLI", "loadschema"]

import logging
import os
import typing as t

import click
import yaml

from autovalidate import decl, inference, schema

LOGGER = logging.getLogger(__name__)


class SchemaCLI(click.ParamType):
    """Declare an argument or option that loads a schema file.

    The converted value is the dictionary of model classes returned by
    :func:`loadschema`. Errors in the schema are reported as usage
    errors instead of tracebacks.

    Examples
    --------
    .. code-block:: python

       @click.command()
       @click.argument("schema", type=autovalidate.cli_helpers.SchemaCLI())
       def main(schema: dict[str, type[autovalidate.Model]]) -> None:
           ...
    """

    name = "SCHEMA"

    def convert(
        self, value: t.Any, param, ctx
    ) -> dict[str, type[schema.Model]]:
        """Convert the value to the target type."""
        if isinstance(value, dict):
            return value

        try:
            return loadschema(value)
        except OSError as err:
            self.fail(f"Cannot read {value}: {err.strerror}", param, ctx)
        except yaml.YAMLError as err:
            self.fail(f"Malformed schema file {value}: {err}", param, ctx)
        except (TypeError, ValueError) as err:
            self.fail(str(err), param, ctx)


def loadschema(
    value: str | os.PathLike[str],
) -> dict[str, type[schema.Model]]:
    """Load a schema file and infer the validation rules of its models.

    Parameters
    ----------
    value
        A str or PathLike pointing to a YAML schema file, see
        :mod:`autovalidate.decl` for the format.

    Raises
    ------
    ~autovalidate.decl.SchemaError
        If a textual property has an unbounded length range.
    """
    LOGGER.info("Loading schema from %s", value)
    if inference.auto_validations_disabled():
        LOGGER.warning("Auto validations are disabled, inferring no rules")
    return decl.load(value)
