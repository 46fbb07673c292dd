import asyncio
import json
import logging
import click

from api.client import MediaWikiClient
from common.config import settings
from errors import MwSessionError
from utils.logger import setup_logging

logger = logging.getLogger("main")


def _echo_json(data):
    click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


async def _with_client(base_url, username, password, action):
    async with MediaWikiClient(base_url) as wiki:
        if username:
            user = await wiki.login(username, password or "")
            logger.info(f"Session opened for {user.user_name}")
        try:
            return await action(wiki)
        finally:
            if wiki.is_authorized():
                await wiki.logout()


def _run(ctx, action):
    opts = ctx.obj
    try:
        result = asyncio.run(_with_client(opts["base_url"], opts["username"], opts["password"], action))
    except MwSessionError as e:
        raise click.ClickException(str(e))
    _echo_json(result)


@click.group()
@click.option("--base-url", envvar="MWSESSION_BASE_URL", default=lambda: settings.client.base_url,
              help="api.php URL or the script path in front of it.")
@click.option("--username", envvar="MWSESSION_USERNAME", default=None, help="Log in before running the command.")
@click.option("--password", envvar="MWSESSION_PASSWORD", default=None, help="Password or BotPassword.")
@click.option("--log-level", default=lambda: settings.logging.level, show_default="from config")
@click.pass_context
def cli(ctx, base_url, username, password, log_level):
    setup_logging(level=log_level, format_type=settings.logging.format, client_name=settings.name)
    if not base_url:
        raise click.UsageError("--base-url (or MWSESSION_BASE_URL / client.base_url) is required")
    ctx.obj = {"base_url": base_url, "username": username, "password": password}


@cli.command()
@click.pass_context
def siteinfo(ctx):
    """Prints the site name and namespaces."""
    async def _action(wiki):
        await wiki.site_info()
        return {"sitename": wiki.get_site_name(), "namespaces": wiki.get_namespace_array()}

    _run(ctx, _action)


@cli.command()
@click.option("--type", "types", multiple=True, default=["csrf"], show_default=True,
              help="Token type; repeat for several.")
@click.pass_context
def tokens(ctx, types):
    """Fetches tokens for the current session."""
    async def _action(wiki):
        return await wiki.get_token(list(types))

    _run(ctx, _action)


@cli.command()
@click.pass_context
def whoami(ctx):
    """Shows the user the session is acting as."""
    async def _action(wiki):
        res = await wiki.user_info()
        userinfo = (res.get("query") or {}).get("userinfo") or {}
        return {
            "id": userinfo.get("id"),
            "name": userinfo.get("name"),
            "anon": bool(userinfo.get("anon", False)),
            "cookies": [c.name for c in wiki.get_cookies()],
        }

    _run(ctx, _action)


if __name__ == "__main__":
    cli()
