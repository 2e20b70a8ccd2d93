"""
Maintenance commands, run with `flask --app tedlist <command>`.

  make-admin EMAIL   grant administrator rights to an existing user
  list-users         print every account with its teddy balance
"""
import click

from tedlist.extensions import db


def register_commands(app) -> None:

    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Grant administrator rights to EMAIL."""
        from tedlist.models.user import User
        user = User.query.filter_by(email=email.strip().lower()).first()
        if user is None:
            raise click.ClickException(f"No user with email {email}")
        user.is_admin = True
        db.session.commit()
        click.echo(f"{user.email} is now an administrator.")

    @app.cli.command("list-users")
    def list_users():
        """Print every account."""
        from tedlist.models.user import User
        for user in User.query.order_by(User.id.asc()).all():
            flag = " [admin]" if user.is_admin else ""
            click.echo(f"{user.id:>5}  {user.email:<40} {user.name:<24} {user.teddies:>6} teddies{flag}")
