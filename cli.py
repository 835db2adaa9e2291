# Simple CLI for Alice Mirror
import asyncio
import json
import click

from app.containers import AppContainer
from core.logging import configure_logging
from core.utils.exceptions import AliceMirrorException
from services.alice.models import Credentials
from services.alice.security import mask_session_id


def _build_container() -> AppContainer:
    container = AppContainer()
    configure_logging(container.settings())
    return container


@click.group()
def cli():
    """Alice Mirror CLI"""
    pass


@cli.command()
@click.option("--user-id", prompt=True, help="Alice Blue user id")
@click.option("--password", prompt=True, hide_input=True)
@click.option("--twofa", prompt="2FA code", hide_input=True)
@click.option("--app-id", prompt=True, help="Alice Blue app id")
@click.option("--reveal", is_flag=True, default=False, help="Print the SID unmasked")
def sid(user_id, password, twofa, app_id, reveal):
    """Exchange credentials for a session id (dev only)"""
    service = _build_container().alice_service()
    credentials = Credentials(user_id=user_id, password=password, two_factor_code=twofa, app_id=app_id)
    try:
        session_id = asyncio.run(service.exchange_session(credentials))
    except AliceMirrorException as e:
        raise click.ClickException(e.message)
    click.echo(session_id if reveal else mask_session_id(session_id))


@cli.command()
@click.option("--session-id", envvar="ALICE_SESSION_ID", default=None, help="SID to attach to the request")
@click.option("--watch", type=float, default=None, help="Poll every N seconds until interrupted")
def trades(session_id, watch):
    """Print master trades as JSON"""
    service = _build_container().alice_service()

    async def _read_once():
        feed = await service.get_master_trades(session_token=session_id)
        click.echo(json.dumps(feed.to_dict(), indent=2))

    async def _poll(interval: float):
        while True:
            await _read_once()
            await asyncio.sleep(interval)

    try:
        asyncio.run(_poll(watch) if watch else _read_once())
    except AliceMirrorException as e:
        raise click.ClickException(e.message)
    except KeyboardInterrupt:
        click.echo("Stopped.")


@cli.command()
def api():
    """Run the API server"""
    click.echo("Starting Alice Mirror API server...")
    from api.main import run as run_api
    run_api()


if __name__ == "__main__":
    cli()
