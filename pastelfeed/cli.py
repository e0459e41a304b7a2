import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect, text

from .auth import purge_expired_sessions
from .models import db, init_db


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create missing tables and patch old user tables."""
    added = init_db()
    if added:
        click.echo(f"Added columns to users: {', '.join(added)}")
    purged = purge_expired_sessions()
    if purged:
        click.echo(f'Removed {purged} expired sessions')
    click.echo(f"Database ready at {current_app.config['SQLALCHEMY_DATABASE_URI']}")


@click.command('inspect-db')
@click.option('--limit', default=20, show_default=True, help='Rows to print per table.')
@with_appcontext
def inspect_db_command(limit):
    """Print every table with its columns and first rows."""
    inspector = inspect(db.engine)
    tables = sorted(inspector.get_table_names())
    click.echo(f"Tables: {tables or '(none)'}")

    with db.engine.connect() as conn:
        for table in tables:
            click.echo(f'\n-- {table}')
            cols = [c['name'] for c in inspector.get_columns(table)]
            click.echo(f'Columns: {cols}')
            rows = conn.execute(text(f'SELECT * FROM "{table}" LIMIT :limit'), {'limit': limit}).mappings().all()
            for row in rows:
                record = dict(row)
                if 'password' in record:
                    record['password'] = '***'
                click.echo(record)
            if not rows:
                click.echo('(no rows)')


def init_app(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(inspect_db_command)
