import click
from flask_jwt_extended import create_access_token

from circulation.extensions import db
from circulation.utils.decorators import MEMBER, STAFF


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (use `flask db upgrade` once migrations exist)."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("issue-token")
    @click.argument("identity")
    @click.option("--role", type=click.Choice([STAFF, MEMBER]), default=STAFF, show_default=True)
    def issue_token(identity, role):
        """Print an access token. For members IDENTITY is the member id."""
        if role == MEMBER and not identity.isdigit():
            raise click.BadParameter("member tokens need a numeric member id", param_hint="IDENTITY")
        token = create_access_token(identity=str(identity), additional_claims={"role": role})
        click.echo(token)
