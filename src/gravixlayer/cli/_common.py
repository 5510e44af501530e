import functools
import importlib.metadata
from dataclasses import dataclass
from typing import Optional

import click

from ..client import GravixLayer
from ..exceptions import GravixLayerAPIError, GravixLayerError

try:
    VERSION = importlib.metadata.version("gravixlayer")
except importlib.metadata.PackageNotFoundError:
    VERSION = "unknown"


@dataclass
class Context:
    """Class for CLI context."""

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    debug: bool = False
    _client: Optional[GravixLayer] = None

    @property
    def client(self) -> GravixLayer:
        if self._client is None:
            try:
                self._client = GravixLayer(api_key=self.api_key, base_url=self.base_url)
            except ValueError as e:
                raise click.UsageError(str(e)) from e
        return self._client


pass_context = click.make_pass_decorator(Context, ensure=True)


def error_message(e: GravixLayerError) -> str:
    if isinstance(e, GravixLayerAPIError) and e.status_code is not None:
        return f"{e} (status {e.status_code})"
    return str(e)


def handle_sdk_errors(f):
    """
    Decorator that turns SDK errors into ``click.ClickException``.

    With ``--debug`` the original exception propagates with its traceback.
    """

    @functools.wraps(f)
    def wrapper(ctx: Context, *args, **kwargs):
        try:
            return f(ctx, *args, **kwargs)
        except GravixLayerError as e:
            if ctx.debug:
                raise
            raise click.ClickException(error_message(e)) from e

    return wrapper


class AliasedGroup(click.Group):
    """
    A Click Group that also resolves fixed aliases, e.g. ``gpu`` for
    ``hardware``.
    """

    aliases = {}

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str, click.Command, list[str]]:
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name, cmd, args
