import json
import uuid

from flowpilot.models import AuditLog, Task

from api_case import ApiTestCase

class TaskTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.project = self.create_project("Website")

    def test_create(self):
        task = self.create_task(
            self.project["id"],
            "Login page",
            description="Email and password form",
            assignedTo="Grace",
            sprint=2,
        )
        self.assertEqual(task["projectId"], self.project["id"])
        self.assertEqual(task["assignedTo"], "Grace")
        self.assertEqual(task["sprint"], 2)
        self.assertIn("CREATE_TASK", self.audit_actions())

    def test_create_for_missing_project_writes_nothing(self):
        resp = self.client.post(
            "/api/tasks",
            json={"name": "Orphan", "projectId": str(uuid.uuid4())},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Project not found")
        with self.session() as db:
            self.assertEqual(db.query(Task).count(), 0)
        self.assertNotIn("CREATE_TASK", self.audit_actions())

    def test_name_required(self):
        resp = self.client.post(
            "/api/tasks", json={"name": "", "projectId": self.project["id"]}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 422)

    def test_list_filters(self):
        other = self.create_project("Mobile")
        self.create_task(self.project["id"], "A", sprint=1, assignedTo="Grace")
        self.create_task(self.project["id"], "B", sprint=2, assignedTo="Alan")
        self.create_task(other["id"], "C", sprint=1, assignedTo="Grace")

        def names(**params):
            resp = self.client.get("/api/tasks", params=params, headers=self.headers)
            self.assertEqual(resp.status_code, 200)
            return sorted(t["name"] for t in resp.json())

        self.assertEqual(names(), ["A", "B", "C"])
        self.assertEqual(names(projectId=self.project["id"]), ["A", "B"])
        self.assertEqual(names(sprint=1), ["A", "C"])
        self.assertEqual(names(assignedTo="Grace", projectId=self.project["id"]), ["A"])
        self.assertIn("GET_ALL_TASKS", self.audit_actions())

    def test_get(self):
        task = self.create_task(self.project["id"])
        resp = self.client.get(f"/api/tasks/{task['id']}", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["name"], task["name"])
        self.assertIn("GET_TASK", self.audit_actions())

    def test_get_missing(self):
        resp = self.client.get(f"/api/tasks/{uuid.uuid4()}", headers=self.headers)
        self.assertEqual(resp.status_code, 404)

    def test_update_and_move(self):
        other = self.create_project("Mobile")
        task = self.create_task(self.project["id"], sprint=1)

        resp = self.client.patch(
            f"/api/tasks/{task['id']}",
            json={"sprint": 3, "projectId": other["id"]},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["sprint"], 3)
        self.assertEqual(resp.json()["projectId"], other["id"])
        self.assertIn("UPDATE_TASK", self.audit_actions())

    def test_move_to_missing_project(self):
        task = self.create_task(self.project["id"])
        resp = self.client.patch(
            f"/api/tasks/{task['id']}",
            json={"projectId": str(uuid.uuid4())},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 404)

        resp = self.client.get(f"/api/tasks/{task['id']}", headers=self.headers)
        self.assertEqual(resp.json()["projectId"], self.project["id"])

    def test_delete(self):
        task = self.create_task(self.project["id"])
        resp = self.client.delete(f"/api/tasks/{task['id']}", headers=self.headers)
        self.assertEqual(resp.status_code, 204)
        self.assertEqual(self.client.get(f"/api/tasks/{task['id']}", headers=self.headers).status_code, 404)
        self.assertIn("DELETE_TASK", self.audit_actions())

    def test_overlong_assignee_rejected(self):
        resp = self.client.post(
            "/api/tasks",
            json={"name": "Build login", "projectId": self.project["id"], "assignedTo": "x" * 256},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 422)

    def test_long_description_update_keeps_audit_details_valid(self):
        task = self.create_task(self.project["id"])
        description = "word " * 800

        resp = self.client.patch(
            f"/api/tasks/{task['id']}",
            json={"description": description},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["description"], description.strip())

        with self.session() as db:
            log = db.query(AuditLog).filter(AuditLog.action == "UPDATE_TASK").one()
            self.assertLessEqual(len(log.details), 1024)
            details = json.loads(log.details)
            self.assertEqual(details["taskId"], task["id"])
            self.assertTrue(details["changes"]["description"]["new"].endswith("..."))
