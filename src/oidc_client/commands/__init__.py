"""Built-in CLI commands for oidc-client.

* :mod:`~oidc_client.commands.discover` -- resolve a provider's metadata
  and signing keys.
* :mod:`~oidc_client.commands.login` -- ``verify`` an ID token and build an
  ``authorize-url``.
* :mod:`~oidc_client.commands.profile` -- manage stored client profiles.

Single commands are plain callbacks registered on the root app; the
``profile`` group is a :class:`typer.Typer` sub-application.
"""
