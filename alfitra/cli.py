"""
Maintenance commands, available through ``flask <command>``.

    flask create-admin --name "Admin" --email admin@example.com --password secret
    flask cleanup-materials --yes
"""
import click
from flask.cli import with_appcontext

from alfitra import db
from alfitra.auth.models import User, ROLE_ADMIN
from alfitra.auth.utils import hash_password, is_valid_email, normalize_email, validate_password
from alfitra.common.errors import ApiError
from alfitra.materials import storage
from alfitra.materials.models import ReferenceMaterial


@click.command('create-admin')
@click.option('--name', required=True, help='Display name of the admin.')
@click.option('--email', required=True, help='Login email.')
@click.option('--password', required=True, help='Login password.')
@with_appcontext
def create_admin(name, email, password):
    """Create an admin account, or promote and reset an existing one."""
    email = normalize_email(email)
    if not is_valid_email(email):
        raise click.BadParameter('Invalid email address', param_hint='--email')
    is_valid, message = validate_password(password)
    if not is_valid:
        raise click.BadParameter(message, param_hint='--password')

    user = User.query.filter_by(email=email).first()
    if user:
        user.role = ROLE_ADMIN
        user.password_hash = hash_password(password.strip())
        action = 'promoted'
    else:
        user = User(name=name.strip(), email=email, password_hash=hash_password(password.strip()), role=ROLE_ADMIN)
        db.session.add(user)
        action = 'created'
    db.session.commit()
    click.echo(f"Admin {email} {action} (id {user.id})")


@click.command('cleanup-materials')
@click.option('--yes', is_flag=True, help='Skip the confirmation prompt.')
@click.option('--purge-store', is_flag=True,
              help='Also delete every stored file under the materials folder, referenced or not.')
@with_appcontext
def cleanup_materials(yes, purge_store):
    """Delete all reference materials and their stored files."""
    materials = ReferenceMaterial.query.all()
    if not yes:
        click.confirm(f"Delete {len(materials)} reference material(s)?", abort=True)

    failed = 0
    for material in materials:
        if material.storage_public_id and not storage.destroy_quietly(material.storage_public_id):
            failed += 1
        db.session.delete(material)
    db.session.commit()
    click.echo(f"Deleted {len(materials)} material record(s); {failed} stored file(s) could not be removed")

    if purge_store:
        try:
            removed = storage.purge_folder()
        except ApiError as e:
            raise click.ClickException(e.message)
        click.echo(f"Purged {removed} file(s) from storage")


def register_commands(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(cleanup_materials)
