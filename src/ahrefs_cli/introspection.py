"""Machine-readable description of the command tree (``--list-commands``).

Walks the Click command objects Typer builds, so every command, option and
argument registered anywhere in the app is described without a separate
registry.  Hidden commands and options are skipped.

Parameters and groups are recognised by their Click attributes
(``param_type_name``, ``list_commands``) rather than by class, since Typer
may build its commands on its own bundled copy of Click.

Example output (abridged)::

    {
      "name": "ahrefs",
      "use": "ahrefs [OPTIONS] COMMAND [ARGS]...",
      "short": "...",
      "flags": [{"name": "format", "usage": "...", "default": "json", "required": false}],
      "subcommands": [{"name": "config", ...}, {"name": "site-explorer", ...}]
    }
"""

from __future__ import annotations

import enum
from typing import Any, Optional

import click


def _is_option(param: click.Parameter) -> bool:
    return getattr(param, "param_type_name", "") == "option"


def _is_argument(param: click.Parameter) -> bool:
    return getattr(param, "param_type_name", "") == "argument"


def _is_group(command: click.Command) -> bool:
    return callable(getattr(command, "list_commands", None)) and callable(
        getattr(command, "get_command", None)
    )


def _default_string(param: click.Parameter, ctx: click.Context) -> Optional[str]:
    """The parameter default as shown to users, or ``None`` when it has none."""
    try:
        value = param.get_default(ctx, call=False)
    except (TypeError, ValueError):
        return None
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)) and value != "":
        return str(value)
    return None


def _describe_option(option: click.Option, ctx: click.Context) -> dict[str, Any]:
    long_names = [o for o in option.opts if o.startswith("--")]
    short_names = [o for o in option.opts if not o.startswith("--")]
    info: dict[str, Any] = {
        "name": (long_names or option.opts)[0].lstrip("-"),
    }
    if short_names:
        info["shorthand"] = short_names[0].lstrip("-")
    info["usage"] = option.help or ""
    default = _default_string(option, ctx)
    if default is not None and not option.required:
        info["default"] = default
    info["required"] = bool(option.required)
    return info


def _describe_argument(argument: click.Argument) -> dict[str, Any]:
    return {
        "name": argument.name or "",
        "usage": getattr(argument, "help", None) or "",
        "required": bool(argument.required),
    }


def describe_command(
    command: click.Command,
    name: str,
    parent: Optional[click.Context] = None,
) -> dict[str, Any]:
    """Describe *command* and, recursively, its visible sub-commands.

    Args:
        command: The Click command or group to describe.
        name: The name it is invoked under.
        parent: The parent context, used to build the usage line.

    Returns:
        A JSON-serialisable dict with ``name``, ``use``, ``short``, ``long``
        and, when non-empty, ``examples``, ``flags``, ``arguments`` and
        ``subcommands``.
    """
    ctx = command.context_class(command, info_name=name, parent=parent)
    usage = " ".join([ctx.command_path, *command.collect_usage_pieces(ctx)])

    info: dict[str, Any] = {
        "name": name,
        "use": usage,
        "short": command.get_short_help_str(limit=120),
        "long": (command.help or "").strip(),
    }
    if command.epilog:
        info["examples"] = command.epilog.strip()

    flags = [
        _describe_option(p, ctx)
        for p in command.params
        if _is_option(p) and not getattr(p, "hidden", False)
    ]
    if flags:
        info["flags"] = flags

    arguments = [_describe_argument(p) for p in command.params if _is_argument(p)]
    if arguments:
        info["arguments"] = arguments

    if _is_group(command):
        subcommands = []
        for sub_name in command.list_commands(ctx):
            sub = command.get_command(ctx, sub_name)
            if sub is None or sub.hidden:
                continue
            subcommands.append(describe_command(sub, sub_name, ctx))
        if subcommands:
            info["subcommands"] = subcommands

    return info
