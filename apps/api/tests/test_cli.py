"""Tests for the administration CLI."""

import pytest
from click.testing import CliRunner

from medhub import cli as cli_module
from medhub.db.enums import PlatformRole
from medhub.db.models import AutomationRun, Organization, User


@pytest.fixture
def runner(db, monkeypatch):
    monkeypatch.setattr(cli_module, "SessionLocal", lambda: db)
    return CliRunner()


def test_create_platform_admin(runner, db):
    result = runner.invoke(cli_module.cli, ["create-platform-admin", "--email", "Ops@MedHub.vn"])

    assert result.exit_code == 0
    assert "✓ ops@medhub.vn is now a platform admin" in result.output
    user = db.query(User).filter(User.email == "ops@medhub.vn").one()
    assert user.platform_role == PlatformRole.PLATFORM_ADMIN.value


def test_create_org_requires_platform_admin(runner, db, make_user):
    user = make_user()

    result = runner.invoke(
        cli_module.cli,
        [
            "create-org",
            "--name", "Bệnh viện Test CLI",
            "--slug", "bv-cli",
            "--owner-email", "owner@bv-cli.vn",
            "--admin-email", user.email,
        ],
    )

    assert "is not a platform admin" in result.output
    assert db.query(Organization).count() == 0


def test_create_org(runner, db, make_user):
    admin = make_user(platform_role=PlatformRole.PLATFORM_ADMIN)

    result = runner.invoke(
        cli_module.cli,
        [
            "create-org",
            "--name", "Công ty CLI",
            "--slug", "cong-ty-cli",
            "--type", "provider",
            "--owner-email", "owner@cli.vn",
            "--admin-email", admin.email,
        ],
    )

    assert result.exit_code == 0, result.output
    assert "✓ Created organization: Công ty CLI" in result.output
    assert db.query(Organization).filter(Organization.slug == "cong-ty-cli").one()


def test_create_org_reports_service_errors(runner, make_user, hospital_org):
    admin = make_user(platform_role=PlatformRole.PLATFORM_ADMIN)

    result = runner.invoke(
        cli_module.cli,
        [
            "create-org",
            "--name", "Trùng slug",
            "--slug", hospital_org.slug,
            "--owner-email", "owner@dup.vn",
            "--admin-email", admin.email,
        ],
    )

    assert "❌" in result.output
    assert "already taken" in result.output


def test_run_rule_and_list_runs(runner, db):
    empty = runner.invoke(cli_module.cli, ["list-runs"])
    assert "No automation runs recorded" in empty.output

    result = runner.invoke(cli_module.cli, ["run-rule", "checkStockLevels"])
    assert result.exit_code == 0
    assert "✓ checkStockLevels: 0 affected" in result.output
    assert db.query(AutomationRun).count() == 1

    listing = runner.invoke(cli_module.cli, ["list-runs", "--rule", "checkStockLevels"])
    assert "checkStockLevels" in listing.output
    assert "success" in listing.output


def test_run_rule_rejects_unknown_names(runner):
    result = runner.invoke(cli_module.cli, ["run-rule", "sendBirthdayCards"])

    assert result.exit_code != 0
