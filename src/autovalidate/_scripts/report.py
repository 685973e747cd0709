# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0

import logging
import typing as t

import click
import jinja2
import markupsafe

import autovalidate
from autovalidate import cli_helpers


@click.command()
@click.argument("schema", type=cli_helpers.SchemaCLI())
@click.option(
    "-o",
    "--output",
    type=click.File("wb", atomic=True),
    required=True,
    help="Output file to render the template into",
)
@click.option("-t", "--template", help="An optional custom template to render")
@click.option(
    "-c",
    "--context",
    help="Only report rules that apply in this validation context",
)
def main(
    schema: dict[str, type[autovalidate.Model]],
    template: str | None,
    context: str | None,
    output: t.IO[bytes],
) -> None:
    """Render a report of the validation rules inferred from a schema."""
    logging.basicConfig()

    loader: jinja2.BaseLoader
    if template is None:
        loader = jinja2.PackageLoader("autovalidate", "templates")
        template = "report.html.jinja"
    else:
        loader = jinja2.FileSystemLoader(".")
    env = jinja2.Environment(loader=loader, autoescape=True)
    env.filters["rule_options"] = render_options

    with output:
        env.get_template(template).stream(
            models=schema,
            rules={
                name: model.rules(context) for name, model in schema.items()
            },
        ).dump(output, encoding="utf-8")


def render_options(options: autovalidate.RuleOptions) -> markupsafe.Markup:
    """Render rule options as a list of ``<code>`` snippets."""
    parts = []
    for key, value in options.to_dict().items():
        if isinstance(value, autovalidate.LengthRange):
            text = str(value)
        else:
            text = repr(value)
        parts.append(markupsafe.Markup("<code>{}={}</code>").format(key, text))
    return markupsafe.Markup(" ").join(parts)
