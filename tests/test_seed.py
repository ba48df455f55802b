from app.core.config import Settings
from app.db.seed import seed_admin
from app.services.user_directory import UserDirectory


def _settings(**overrides) -> Settings:
    values = {'ADMIN_USERNAME': 'admin', 'ADMIN_PASSWORD': 'Admin123!', 'ADMIN_EMAIL': 'admin@example.com'}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_seed_admin_creates_confirmed_admin(session):
    user = seed_admin(session, _settings())
    assert user is not None
    assert user.email_confirmed
    assert UserDirectory(session).get_roles(user) == ['admin', 'user']


def test_seed_admin_is_idempotent(session):
    seed_admin(session, _settings())
    assert seed_admin(session, _settings()) is None


def test_seed_admin_skipped_without_credentials(session):
    assert seed_admin(session, _settings(ADMIN_USERNAME=None)) is None
