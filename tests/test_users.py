import uuid

from api_case import ApiTestCase

class UserTests(ApiTestCase):

    def test_list_users(self):
        self.register("bob@flowpilot.io", "secret123", name="bob")
        resp = self.client.get("/api/users", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(sorted(u["name"] for u in resp.json()), ["ada", "bob"])

        page = self.client.get("/api/users", params={"pageSize": 1}, headers=self.headers)
        self.assertEqual(len(page.json()), 1)

    def test_get_by_id(self):
        user_id = self.tokens["user"]["id"]
        resp = self.client.get(f"/api/users/{user_id}", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["email"], self.email)

        missing = self.client.get(f"/api/users/{uuid.uuid4()}", headers=self.headers)
        self.assertEqual(missing.status_code, 404)

    def test_update_profile(self):
        resp = self.client.patch(
            "/api/users/me",
            json={"fullName": "Augusta Ada King", "email": "countess@flowpilot.io"},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["fullName"], "Augusta Ada King")
        self.assertEqual(resp.json()["email"], "countess@flowpilot.io")
        self.assertIn("UPDATE_PROFILE", self.audit_actions())

    def test_update_profile_email_taken(self):
        self.register("bob@flowpilot.io", "secret123", name="bob")
        resp = self.client.patch("/api/users/me", json={"email": "bob@flowpilot.io"}, headers=self.headers)
        self.assertEqual(resp.status_code, 409)

    def test_update_profile_rejects_overlong_full_name(self):
        resp = self.client.patch("/api/users/me", json={"fullName": "x" * 256}, headers=self.headers)
        self.assertEqual(resp.status_code, 422)
