from attendance import create_app
from attendance.seed import ensure_user, seed_data
from flask.cli import with_appcontext
from flask_migrate import upgrade, migrate, init
import click

app = create_app()


@app.cli.command("db-init")
@with_appcontext
def db_init():
    """Initializes migrations directory"""
    init()


@app.cli.command("db-migrate")
@with_appcontext
def db_migrate():
    """Creates a new migration"""
    migrate()


@app.cli.command("db-upgrade")
@with_appcontext
def db_upgrade():
    """Applies migrations"""
    upgrade()


@app.cli.command("seed")
@click.option("--no-samples", is_flag=True, help="Only create the default accounts.")
@with_appcontext
def seed(no_samples):
    """Creates default users and a sample roster"""
    seed_data(with_samples=not no_samples)
    click.echo("Seed data inserted successfully.")


@app.cli.command("create-user")
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--role", type=click.Choice(["admin", "teacher"]), default="teacher")
@with_appcontext
def create_user(username, password, role):
    """Creates a login account"""
    user, created = ensure_user(username, password, role)
    if created:
        click.echo(f"Created {role} '{user.username}'.")
    else:
        click.echo(f"User '{user.username}' already exists.")
