"""Built-in CLI sub-commands for plughost.

* :mod:`~plughost.commands.run` -- load plugins and run the lifecycle loop.
* :mod:`~plughost.commands.list_plugins` -- load plugins and report their
  load status without running them.
* :mod:`~plughost.commands.config` -- view and modify the user config.

Single commands export a plain callback registered directly on the root
app; command groups export a :class:`typer.Typer` sub-application.
"""
