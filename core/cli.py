"""
Command-line interface for redis-scripts
"""
import json
import sys
from typing import Any, Optional, Tuple

import click
from redis.exceptions import RedisError

from core.config import get_settings
from core.exceptions import RedisScriptsError
from core.logging import get_logger, setup_logging
from redis_scripts import __version__, create_scripts

logger = get_logger(__name__)


def _decode(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _format_result(value: Any) -> str:
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, default=_decode)
    return _decode(value)


@click.group()
@click.version_option(version=__version__)
@click.option("--redis-url", envvar="REDIS_URL", help="Redis URL (defaults to settings)")
@click.option(
    "--path",
    "paths",
    multiple=True,
    type=click.Path(file_okay=False),
    help="Script directory; repeat for more, earlier ones win",
)
@click.pass_context
def cli(ctx: click.Context, redis_url: Optional[str], paths: Tuple[str, ...]):
    """redis-scripts CLI - run named Lua scripts on Redis"""
    settings = get_settings()
    if redis_url:
        settings = settings.model_copy(update={"redis_url": redis_url})
    setup_logging(settings)
    ctx.obj = create_scripts(settings, search_path=list(paths) if paths else None)


@cli.command("list")
@click.pass_obj
def list_scripts(scripts):
    """List discovered scripts with their SHA and path"""
    for name, script in sorted(scripts.scripts().items()):
        try:
            sha = script.sha
        except OSError as e:
            raise click.ClickException(f"cannot read {script.path}: {e.strerror}")
        click.echo(f"{name}\t{sha}\t{script.path}")


@cli.command("load-all")
@click.pass_obj
def load_all(scripts):
    """Load every script into the Redis script cache"""
    result = scripts.load_all()
    for name, sha in result.loaded.items():
        click.echo(f"loaded {name} {sha}")
    for name, error in result.failed.items():
        click.echo(f"failed {name}: {error}", err=True)
    if not result.ok:
        sys.exit(1)


@cli.command()
@click.argument("name")
@click.pass_obj
def exists(scripts, name: str):
    """Check whether NAME is in the Redis script cache"""
    try:
        click.echo("true" if scripts.exists(name) else "false")
    except RedisScriptsError as e:
        raise click.ClickException(e.message)
    except (RedisError, OSError) as e:
        logger.error(f"SCRIPT EXISTS for {name} failed: {e}")
        raise click.ClickException(str(e))


@cli.command()
@click.argument("name")
@click.argument("args", nargs=-1)
@click.option("--key", "-k", "keys", multiple=True, help="Key passed in KEYS; repeatable")
@click.pass_obj
def run(scripts, name: str, args: Tuple[str, ...], keys: Tuple[str, ...]):
    """Run script NAME with optional KEYS and ARGS"""
    try:
        result = scripts.run(name, len(keys), *keys, *args)
    except RedisScriptsError as e:
        raise click.ClickException(e.message)
    except (RedisError, OSError) as e:
        logger.error(f"Script {name} failed: {e}")
        raise click.ClickException(str(e))
    click.echo(_format_result(result))


def main():
    cli()


if __name__ == "__main__":
    main()
