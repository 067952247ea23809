"""
Entry point of `nodesync` CLI.
"""
from __future__ import annotations

from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Generator

import dotenv
from click.exceptions import BadParameter
from pydantic import ValidationError
from typer import Context, Exit, Option

from ...core.namespace.client import NamespaceClient
from ...core.sync.options import SyncOptions
from ..config import Config, InstanceConfig
from . import sync
from ._utils import MainTyper, get_root_context, logger, lookup_param

DEFAULT_SERVER_PREFIX = "/discodev"
"""
Remote root used if not given on the command line or in the config file.
"""

dotenv.load_dotenv()

app = MainTyper(
    "nodesync",
    help="Synchronize a local folder with a ZooKeeper tree",
)


@app.callback()
def main(
    ctx: Context,
    servers: str = Option(
        "localhost",
        help="Comma-separated ZooKeeper server list, e.g. zk1:2181,zk2:2181",
        envvar="NODESYNC_SERVERS",
    ),
    auth: str
    | None = Option(
        None,
        help="Digest auth information sent to server, e.g. user:password",
        envvar="NODESYNC_AUTH",
    ),
    timeout: float = Option(
        5.0,
        help="Connect timeout in seconds",
        envvar="NODESYNC_TIMEOUT",
    ),
    instance_name: str
    | None = Option(
        None,
        "--instance",
        help="Instance name as configured in .yaml",
        envvar="NODESYNC_INSTANCE",
    ),
    config_file: Path = Option(
        "nodesync.yaml",
        help=".yaml file containing instance info, only applicable with --instance",
        envvar="NODESYNC_CONFIG_FILE",
        dir_okay=False,
    ),
):
    if instance_name:
        root_context = RootContext.from_config(
            ctx=ctx, instance_name=instance_name, config_file=config_file
        )
    else:
        try:
            instance = InstanceConfig(
                servers=servers, auth=auth, timeout=timeout
            )
        except ValidationError as e:
            raise BadParameter(
                str(e), ctx=ctx, param=lookup_param(ctx, "servers")
            )

        root_context = RootContext(ctx=ctx, instance=instance)

    ctx.obj = root_context


app.command()(sync.upload)
app.command()(sync.download)
app.command()(sync.delete)


@app.command()
def check(ctx: Context):
    """
    Check ZooKeeper connection
    """
    root_context = get_root_context(ctx)

    with root_context.connect() as client:
        client.exists("/")
        logger.info(
            f"Connected to servers '{','.join(root_context.instance.servers)}'"
        )


def run():
    app()


@dataclass(kw_only=True)
class RootContext:
    ctx: Context
    instance: InstanceConfig

    @classmethod
    def from_config(
        cls,
        *,
        ctx: Context,
        instance_name: str,
        config_file: Path,
    ) -> RootContext:
        # ensure config file exists
        if not config_file.is_file():
            raise BadParameter(
                message=f"file does not exist: {config_file}",
                ctx=ctx,
                param=lookup_param(ctx, "config_file"),
            )

        # get config from file
        try:
            config = Config.load_yaml(config_file)
        except (ValueError, ValidationError) as e:
            raise BadParameter(
                f"failed to load config file '{config_file}': {e}",
                ctx=ctx,
                param=lookup_param(ctx, "config_file"),
            )

        # get instance from config
        instance = config.instances.get(instance_name)
        if not instance:
            raise BadParameter(
                f"instance '{instance_name}' not found in '{config_file}'",
                ctx=ctx,
                param=lookup_param(ctx, "instance_name"),
            )

        return RootContext(ctx=ctx, instance=instance)

    @property
    def server_prefix(self) -> str:
        return self.instance.server_prefix or DEFAULT_SERVER_PREFIX

    def sync_options(self, *, dry_run: bool) -> SyncOptions:
        return self.instance.sync_options(dry_run=dry_run)

    @contextmanager
    def connect(self) -> Generator[NamespaceClient, None, None]:
        with ExitStack() as stack:
            try:
                client = stack.enter_context(
                    self.instance.connect(logger=logger)
                )
            except Exception:
                # would have already logged error
                raise Exit(code=1)

            yield client


if __name__ == "__main__":
    app()
