"""
Flask CLI commands for database management.

Commands:
- flask init-db: Create the catalog tables
- flask drop-db: Drop the catalog tables
"""

import click
from catalog_admin.database import create_all, drop_all


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create the category and product tables."""
        try:
            create_all()
            click.echo(click.style('✅ Tables created', fg='green', bold=True))
        except Exception as e:
            click.echo(click.style(f'❌ Error creating tables: {str(e)}', fg='red'))
            raise SystemExit(1)

    @app.cli.command('drop-db')
    @click.confirmation_option(prompt='This deletes every category and product. Continue?')
    def drop_db_command():
        """Drop the category and product tables."""
        drop_all()
        click.echo(click.style('Tables dropped', fg='yellow'))
