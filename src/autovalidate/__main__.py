# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0
"""Command line interface of autovalidate.

The subcommands live in :mod:`autovalidate._scripts`, one module each.
They are only imported when invoked, so that ``--help`` and the
completion of command names stay fast.
"""

import importlib

import click

from . import _scripts

COMMANDS = {
    "infer": "Show the validation rules inferred from a schema file.",
    "report": "Render a report of the rules inferred from a schema.",
}
"""Known subcommands and their short help texts."""


class SchemaCommands(click.Group):
    """A group that loads the known subcommands on demand."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*super().list_commands(ctx), *COMMANDS})

    def get_command(
        self, ctx: click.Context, cmd_name: str
    ) -> click.Command | None:
        if cmd_name not in COMMANDS:
            return super().get_command(ctx, cmd_name)

        module = importlib.import_module(f"{_scripts.__name__}.{cmd_name}")
        cmd = module.main
        if not isinstance(cmd, click.Command):
            raise TypeError(f"{module.__name__}.main is not a click command")
        cmd.name = cmd_name
        cmd.short_help = COMMANDS[cmd_name]
        return cmd


@click.group(cls=SchemaCommands, no_args_is_help=True)
@click.version_option(package_name="autovalidate")
def main() -> None:
    """Infer validation rules from typed schema declarations."""


if __name__ == "__main__":
    main()
