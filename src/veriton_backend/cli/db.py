import logging
import click
from sqlalchemy import create_engine

from veriton_backend.database import get_engine
from veriton_backend.model import metadata

logger = logging.getLogger(__name__)


@click.command()
@click.option("--database-url", "database_url", default=None, help="Overrides DATABASE_URL")
def init_db(database_url):
    """Create all tables"""
    engine = create_engine(database_url) if database_url else get_engine()

    metadata.create_all(engine)
    logger.info("created %d tables", len(metadata.sorted_tables))
    click.echo(f"Created {len(metadata.sorted_tables)} tables")
