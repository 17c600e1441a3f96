"""CLI tools for MedHub administration."""

import click

from medhub.core.errors import ServiceError
from medhub.core.identity import CallerIdentity
from medhub.db.base import Base
from medhub.db.enums import AutomationRule, OrganizationType, PlatformRole
from medhub.db.models import User
from medhub.db.session import SessionLocal, engine
from medhub.jobs.registry import resolve_rule_handler
from medhub.services import automation_service, org_service


@click.group()
def cli():
    """MedHub CLI tools."""
    pass


@cli.command()
def init_db():
    """Create all tables on the configured database."""
    Base.metadata.create_all(bind=engine)
    click.echo("✓ Database tables created")


@cli.command()
@click.option("--email", required=True, help="User email to promote")
@click.option("--name", default=None, help="Display name if the user is new")
def create_platform_admin(email: str, name: str | None):
    """
    Grant the platform admin role to a user (creating the user if needed).

    Example:
        python -m medhub.cli create-platform-admin --email "ops@medhub.vn"
    """
    db = SessionLocal()
    try:
        user = org_service.get_or_create_user(db, email, name)
        user.platform_role = PlatformRole.PLATFORM_ADMIN.value
        db.commit()
        click.echo(f"✓ {user.email} is now a platform admin")
        click.echo(f"  ID: {user.id}")
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--name", required=True, help="Organization name")
@click.option("--slug", required=True, help="URL-friendly slug (lowercase, no spaces)")
@click.option(
    "--type",
    "org_type",
    type=click.Choice([t.value for t in OrganizationType]),
    default=OrganizationType.HOSPITAL.value,
    show_default=True,
)
@click.option("--owner-email", required=True, help="Owner email address")
@click.option("--owner-name", default=None, help="Owner display name")
@click.option("--admin-email", required=True, help="Platform admin performing the onboarding")
def create_org(
    name: str,
    slug: str,
    org_type: str,
    owner_email: str,
    owner_name: str | None,
    admin_email: str,
):
    """
    Onboard an organization with its first owner.

    This is the bootstrap command for setting up a new tenant.

    Example:
        python -m medhub.cli create-org --name "BV Cho Ray" --slug "cho-ray" \\
            --owner-email "owner@choray.vn" --admin-email "ops@medhub.vn"
    """
    db = SessionLocal()
    try:
        admin = db.query(User).filter(User.email == admin_email.strip().lower()).first()
        if not admin or admin.platform_role != PlatformRole.PLATFORM_ADMIN.value:
            click.echo(f"❌ {admin_email} is not a platform admin")
            return

        caller = CallerIdentity(user_id=admin.id, platform_role=admin.platform_role)
        org = org_service.onboard_organization(
            db,
            caller,
            name=name,
            slug=slug,
            org_type=OrganizationType(org_type),
            owner_email=owner_email,
            owner_name=owner_name,
        )
        click.echo(f"✓ Created organization: {org.name}")
        click.echo(f"  ID: {org.id}")
        click.echo(f"  Slug: {org.slug}")
        click.echo(f"  Status: {org.status}")
        click.echo(f"✓ Owner: {owner_email.lower()}")
    except ServiceError as e:
        db.rollback()
        click.echo(f"❌ {e.message}")
    finally:
        db.close()


@cli.command()
@click.argument("rule_name", type=click.Choice([r.value for r in AutomationRule]))
def run_rule(rule_name: str):
    """
    Run one automation rule now.

    Example:
        python -m medhub.cli run-rule checkStockLevels
    """
    db = SessionLocal()
    try:
        handler = resolve_rule_handler(rule_name)
        run = handler(db, None)
        click.echo(f"✓ {rule_name}: {run.affected_count} affected")
    except Exception as e:
        click.echo(f"❌ {rule_name} failed: {e}")
        raise SystemExit(1)
    finally:
        db.close()


@cli.command()
@click.option(
    "--rule",
    "rule_name",
    type=click.Choice([r.value for r in AutomationRule]),
    default=None,
    help="Only show runs of this rule",
)
@click.option("--limit", default=20, show_default=True)
def list_runs(rule_name: str | None, limit: int):
    """Show recent automation runs, newest first."""
    db = SessionLocal()
    try:
        runs = automation_service.list_runs(db, rule_name=rule_name, limit=limit)
        if not runs:
            click.echo("No automation runs recorded")
            return
        for run in runs:
            line = f"{run.created_at:%Y-%m-%d %H:%M:%S} {run.rule_name:<26} {run.status:<8} {run.affected_count}"
            if run.error_message:
                line += f"  {run.error_message}"
            click.echo(line)
    finally:
        db.close()


if __name__ == "__main__":
    cli()
