import unittest

from fastapi.testclient import TestClient

from flowpilot.database import Base, SessionLocal, engine
from flowpilot.main import app

class ApiTestCase(unittest.TestCase):
    """Fresh in-memory database and a registered user for every test"""

    email = "ada@flowpilot.io"
    password = "secret123"

    def setUp(self):
        Base.metadata.create_all(bind=engine)
        self.client = TestClient(app)
        self.tokens = self.register(self.email, self.password, name="ada", full_name="Ada Lovelace")
        self.headers = self.bearer(self.tokens["accessToken"])

    def tearDown(self):
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)

    def bearer(self, token):
        return {"Authorization": f"Bearer {token}"}

    def register(self, email, password, name="user", full_name=None):
        resp = self.client.post("/api/auth/register", json={
            "email": email,
            "password": password,
            "name": name,
            "fullName": full_name,
        })
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def create_project(self, name="Website", **fields):
        resp = self.client.post("/api/projects", json={"name": name, **fields}, headers=self.headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def create_task(self, project_id, name="Build login", **fields):
        resp = self.client.post(
            "/api/tasks",
            json={"name": name, "projectId": project_id, **fields},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def audit_actions(self, **filters):
        resp = self.client.get("/api/audit/logs", params={"limit": 100, **filters}, headers=self.headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        return [log["action"] for log in resp.json()["logs"]]

    def session(self):
        return SessionLocal()
