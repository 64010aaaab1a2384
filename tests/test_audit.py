import json
import unittest
import uuid
from datetime import datetime, timedelta

from flowpilot.utils.audit_logger import serialize_details

from api_case import ApiTestCase

class AuditLogTests(ApiTestCase):

    def logs(self, path="/api/audit/logs", **params):
        resp = self.client.get(path, params=params, headers=self.headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def test_newest_first_with_pagination(self):
        for name in ("One", "Two", "Three"):
            self.create_project(name)

        body = self.logs(limit=2, page=1)
        self.assertEqual(body["page"], 1)
        self.assertEqual(body["limit"], 2)
        self.assertEqual(body["total"], 4)  # REGISTER + three CREATE_PROJECT
        self.assertEqual(len(body["logs"]), 2)
        stamps = [log["createdAt"] for log in body["logs"]]
        self.assertEqual(stamps, sorted(stamps, reverse=True))

        second = self.logs(limit=2, page=2)
        self.assertEqual(len(second["logs"]), 2)

    def test_entry_shape(self):
        log = self.logs(action="REGISTER")["logs"][0]
        for key in ("id", "action", "description", "status", "createdAt", "userId", "ipAddress", "userAgent"):
            self.assertIn(key, log)
        self.assertEqual(log["status"], "success")
        self.assertEqual(log["user"]["email"], self.email)

    def test_filters(self):
        project = self.create_project("Billing Portal")
        self.client.post("/api/auth/login", json={"email": self.email, "password": "nope"})

        self.assertEqual(self.logs(action="CREATE_PROJECT")["total"], 1)
        self.assertEqual(self.logs(status="failure")["logs"][0]["action"], "LOGIN_FAILED")
        self.assertEqual(self.logs(search="billing")["total"], 1)
        self.assertEqual(self.logs(search=project["id"])["total"], 1)  # Matches details

        other = self.register("bob@flowpilot.io", "secret123", name="bob")
        by_bob = self.logs(userId=other["user"]["id"])
        self.assertEqual([log["action"] for log in by_bob["logs"]], ["REGISTER"])

    def test_date_range(self):
        past = (datetime.utcnow() - timedelta(days=1)).isoformat()
        future = (datetime.utcnow() + timedelta(days=1)).isoformat()
        self.assertEqual(self.logs(startDate=past, endDate=future)["total"], 1)
        self.assertEqual(self.logs(startDate=future)["total"], 0)

    def test_limit_bounds(self):
        self.assertEqual(self.client.get("/api/audit/logs", params={"limit": 101}, headers=self.headers).status_code, 422)
        self.assertEqual(self.client.get("/api/audit/logs", params={"page": 0}, headers=self.headers).status_code, 422)

    def test_success_feed_only_has_own_domain_actions(self):
        project = self.create_project()
        self.create_task(project["id"])
        self.client.get("/api/projects", headers=self.headers)
        self.client.post("/api/auth/login", json={"email": self.email, "password": "nope"})

        bob = self.register("bob@flowpilot.io", "secret123", name="bob")
        self.client.post("/api/projects", json={"name": "Bob's"}, headers=self.bearer(bob["accessToken"]))

        body = self.logs("/api/audit/logs/success")
        self.assertEqual(
            sorted(log["action"] for log in body["logs"]),
            ["CREATE_PROJECT", "CREATE_TASK"],
        )

    def test_get_single_log(self):
        log_id = self.logs()["logs"][0]["id"]
        resp = self.client.get(f"/api/audit/logs/{log_id}", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["id"], log_id)

        missing = self.client.get(f"/api/audit/logs/{uuid.uuid4()}", headers=self.headers)
        self.assertEqual(missing.status_code, 404)

    def test_stats(self):
        self.create_project()
        self.client.post("/api/auth/login", json={"email": self.email, "password": "nope"})

        resp = self.client.get("/api/audit/stats", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        stats = resp.json()
        self.assertEqual(stats["totalEvents"], 3)
        self.assertEqual(stats["eventsToday"], 3)
        self.assertEqual(stats["failedLogins"], 1)
        self.assertEqual(stats["activeUsers"], 1)
        self.assertEqual(stats["actions"]["CREATE_PROJECT"], 1)

    def test_search_treats_wildcards_literally(self):
        self.create_project("50% off")

        body = self.logs(search="%")
        self.assertEqual([log["action"] for log in body["logs"]], ["CREATE_PROJECT"])

class SerializeDetailsTests(unittest.TestCase):

    def test_small_details_are_kept_verbatim(self):
        self.assertEqual(serialize_details({"taskId": "1"}), '{"taskId": "1"}')

    def test_oversized_details_stay_valid_json(self):
        many_fields = {f"field{i}": "value" for i in range(200)}
        details = json.loads(serialize_details(many_fields))
        self.assertTrue(details["truncated"])
        self.assertGreater(details["length"], 1024)
