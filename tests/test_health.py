import unittest

from fastapi.testclient import TestClient

from flowpilot.main import app

class HealthTests(unittest.TestCase):

    def test_startup_and_health(self):
        with TestClient(app) as client:
            resp = client.get("/health")
            self.assertEqual(resp.status_code, 200)
            body = resp.json()
            self.assertEqual(body["status"], "healthy")
            self.assertEqual(body["database"], "connected")
            self.assertEqual(body["poolStats"]["pool_class"], "StaticPool")
            self.assertIn("X-Process-Time", resp.headers)
