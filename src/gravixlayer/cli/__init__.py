import click

from ..utils.logging import configure_logging
from . import _common, chat, deployments


@click.group(
    epilog="""
\b
Authentication:
  Use --api-key or GRAVIXLAYER_API_KEY to authenticate
""",
)
@click.version_option(
    version=_common.VERSION, package_name="gravixlayer", prog_name="gravixlayer"
)
@click.option(
    "--debug",
    is_flag=True,
    envvar="GRAVIXLAYER_DEBUG",
    help="Show debug logs and full stack traces",
)
@click.option(
    "--api-key",
    envvar="GRAVIXLAYER_API_KEY",
    help="The GravixLayer API key",
)
@click.option(
    "--base-url",
    envvar="GRAVIXLAYER_BASE_URL",
    help="The GravixLayer inference API URL",
)
@click.pass_context
def cli(
    ctx: click.Context,
    debug: bool,
    api_key: str | None,
    base_url: str | None,
):
    """
    GravixLayer CLI: chat and text completions, and deployment management.
    """
    configure_logging(debug)
    ctx.obj = _common.Context(api_key=api_key, base_url=base_url, debug=debug)


cli.add_command(chat.chat)
cli.add_command(deployments.deployments)
