# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0

import json
import logging
import typing as t

import click

import autovalidate
from autovalidate import cli_helpers, decl


@click.command()
@click.argument("schema", type=cli_helpers.SchemaCLI())
@click.option(
    "-f",
    "--format",
    "format_",
    type=click.Choice(["text", "yaml", "json"]),
    default="text",
    show_default=True,
    help="Output format",
)
@click.option(
    "-c",
    "--context",
    help="Only show rules that apply in this validation context",
)
def main(
    schema: dict[str, type[autovalidate.Model]],
    format_: str,
    context: str | None,
) -> None:
    """Show the validation rules inferred from a schema file."""
    logging.basicConfig()

    rules = {name: model.rules(context) for name, model in schema.items()}
    if format_ == "yaml":
        click.echo(decl.dump_rules(rules), nl=False)
    elif format_ == "json":
        data = {
            name: [rule.to_dict() for rule in model_rules]
            for name, model_rules in rules.items()
        }
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        for name, model_rules in rules.items():
            click.echo(name)
            for rule in model_rules:
                click.echo(f"  {rule.name}: {rule.kind}{_format(rule)}")


def _format(rule: autovalidate.Rule) -> str:
    options = rule.options.to_dict()
    if not options:
        return ""
    return " " + " ".join(f"{k}={_value(v)}" for k, v in options.items())


def _value(value: t.Any) -> str:
    if isinstance(value, autovalidate.LengthRange):
        return str(value)
    return repr(value)
