import unittest
from unittest import mock

from fastapi.testclient import TestClient

from flowpilot.core import config
from flowpilot.core.config import DEFAULT_SECRET_KEY, validate_config
from flowpilot.core.security import verify_password
from flowpilot.database import Base, SessionLocal, engine, seed_default_users
from flowpilot.main import app
from flowpilot.models import User

class SeedUsersTests(unittest.TestCase):

    def setUp(self):
        Base.metadata.create_all(bind=engine)

    def tearDown(self):
        Base.metadata.drop_all(bind=engine)

    def test_seeds_an_empty_database_once(self):
        with SessionLocal() as db:
            self.assertEqual(seed_default_users(db), 2)
            self.assertEqual(seed_default_users(db), 0)

            admin = db.query(User).filter(User.email == config.settings.ADMIN_EMAIL).one()
            self.assertEqual(admin.name, "admin")
            self.assertTrue(verify_password(config.settings.ADMIN_PASSWORD, admin.password))
            self.assertEqual(db.query(User).count(), 2)

    def test_startup_seeds_when_enabled(self):
        with mock.patch.object(config.settings, "SEED_DEFAULT_USERS", True):
            # Shutdown disposes the in-memory database, so check before leaving the block
            with TestClient(app), SessionLocal() as db:
                names = sorted(user.name for user in db.query(User).all())
        self.assertEqual(names, ["admin", "developer"])

class ValidateConfigTests(unittest.TestCase):

    def production(self, **overrides):
        values = {"ENVIRONMENT": "production", **overrides}
        return mock.patch.multiple(config.settings, **values)

    def test_development_accepts_defaults(self):
        with mock.patch.object(config.settings, "SECRET_KEY", DEFAULT_SECRET_KEY):
            validate_config()

    def test_production_accepts_strong_secrets(self):
        with self.production():
            validate_config()

    def test_production_rejects_default_secret(self):
        with self.production(SECRET_KEY=DEFAULT_SECRET_KEY):
            with self.assertRaises(ValueError):
                validate_config()

    def test_production_rejects_short_refresh_secret(self):
        with self.production(REFRESH_SECRET_KEY="too-short"):
            with self.assertRaises(ValueError) as ctx:
                validate_config()
        self.assertIn("REFRESH_SECRET_KEY", str(ctx.exception))

    def test_production_rejects_debug(self):
        with self.production(DEBUG=True):
            with self.assertRaises(ValueError):
                validate_config()
