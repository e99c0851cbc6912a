import logging
import click

from veriton_backend.settings import settings
from .db import init_db
from .scope import explain_scope


@click.group()
def cli():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

cli.add_command(init_db,"init-db")
cli.add_command(explain_scope,"explain-scope")

if __name__ == '__main__':
    cli()
