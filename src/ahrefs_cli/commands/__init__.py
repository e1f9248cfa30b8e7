"""Built-in CLI sub-commands for ahrefs-cli.

This package groups the Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~ahrefs_cli.commands.site_explorer` -- Site Explorer endpoints
  (also available as ``se``).
* :mod:`~ahrefs_cli.commands.config` -- store, show and validate the API key.

Endpoint commands are declared as data in
:mod:`~ahrefs_cli.commands.endpoints` and all run through
:func:`~ahrefs_cli.commands.runner.run_endpoint`.  Global flags shared by
the root and the leaf commands live in :mod:`~ahrefs_cli.commands.options`.
"""
