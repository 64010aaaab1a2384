import json
import unittest

from flowpilot.assistant.exceptions import AssistantError
from flowpilot.assistant.processors import (
    JsonCleaner,
    JsonParser,
    SpecNormalizer,
    SpecPersister,
    as_plain_text,
    parse_int_or_none,
)
from flowpilot.database import Base, SessionLocal, engine
from flowpilot.models import Project, Task

class JsonCleanerTests(unittest.TestCase):

    def clean_and_load(self, raw):
        return json.loads(JsonCleaner().handle(raw))

    def test_strips_fences_and_prose(self):
        raw = 'Here you go:\n```json\n{"projectName": "Shop"}\n```\nEnjoy!'
        self.assertEqual(self.clean_and_load(raw), {"projectName": "Shop"})

    def test_repairs_common_mistakes(self):
        raw = """{
            // planner output
            projectName: 'Shop',
            "priority": 3, /* high */
            "Tasks": [{"name": "Cart",},],
            "budget": NaN,
        }"""
        self.assertEqual(
            self.clean_and_load(raw),
            {"projectName": "Shop", "priority": 3, "Tasks": [{"name": "Cart"}], "budget": None},
        )

    def test_smart_quotes(self):
        self.assertEqual(self.clean_and_load("{“name”: “Shop”}"), {"name": "Shop"})

    def test_newlines_inside_strings_collapse(self):
        data = self.clean_and_load('{"description": "line one\nline two"}')
        self.assertEqual(data["description"], "line one line two")

    def test_string_contents_are_left_alone(self):
        raw = '{"description": "setup, config: see http://example.org // not a comment"}'
        data = self.clean_and_load(raw)
        self.assertEqual(data["description"], "setup, config: see http://example.org // not a comment")

    def test_braces_inside_strings_do_not_end_block(self):
        data = self.clean_and_load('{"name": "Use {curly} braces"} trailing text }')
        self.assertEqual(data, {"name": "Use {curly} braces"})

    def test_empty_input(self):
        with self.assertRaises(AssistantError):
            JsonCleaner().handle("")

class JsonParserTests(unittest.TestCase):

    def test_error_includes_context(self):
        with self.assertRaises(AssistantError) as ctx:
            JsonParser().handle('{"name": "Shop" "priority": 3}')
        self.assertIn("Invalid JSON", ctx.exception.message)
        self.assertIn('"Shop" "priority"', ctx.exception.message)

class SpecNormalizerTests(unittest.TestCase):

    def test_aliases_and_coercion(self):
        result = SpecNormalizer().handle({
            "projectName": "Shop",
            "priority": 4,
            "backTech": "Laravel",
            "front_tech": "Next",
            "cloud": "AWS",
            "sprints_quantity": "5",
            "endDate": 20260216,
            "Tasks": [
                {"title": "Cart", "assigned_to": "Grace", "sprint": "2"},
                {"taskName": "Checkout", "sprint": "soon"},
            ],
        })
        self.assertTrue(result["is_single"])
        project = result["projects"][0]
        self.assertEqual(project["name"], "Shop")
        self.assertEqual(project["priority"], "4")
        self.assertEqual(project["backtech"], "Laravel")
        self.assertEqual(project["fronttech"], "Next")
        self.assertEqual(project["cloud_tech"], "AWS")
        self.assertEqual(project["sprints_quantity"], 5)
        self.assertEqual(project["end_date"], "20260216")
        self.assertEqual(project["tasks"][0], {
            "name": "Cart", "description": None, "assigned_to": "Grace", "sprint": 2,
        })
        self.assertIsNone(project["tasks"][1]["sprint"])

    def test_shapes(self):
        multi = SpecNormalizer().handle({"projects": [{"name": "A"}, {"name": "B"}]})
        self.assertFalse(multi["is_single"])
        self.assertEqual([p["name"] for p in multi["projects"]], ["A", "B"])

        wrapped = SpecNormalizer().handle({"project": {"name": "A"}})
        self.assertTrue(wrapped["is_single"])

        with self.assertRaises(AssistantError):
            SpecNormalizer().handle(["not", "an", "object"])

    def test_missing_names_report_position(self):
        with self.assertRaises(AssistantError) as ctx:
            SpecNormalizer().handle({"projects": [{"name": "A"}, {"priority": 1}]})
        self.assertIn("Project #2", ctx.exception.message)

        with self.assertRaises(AssistantError) as ctx:
            SpecNormalizer().handle({"name": "A", "tasks": [{"name": "ok"}, {"sprint": 1}]})
        self.assertIn("Project #1, task #2", ctx.exception.message)

    def test_description_flattening(self):
        self.assertEqual(as_plain_text(["Build  API", None, "Write\ntests"]), "Build API • Write tests")
        self.assertEqual(as_plain_text({"short": "s", "long": "Full text"}), "Full text")
        self.assertEqual(as_plain_text({"other": 1}), '{"other": 1}')

        long_text = "x" * 5000
        tasks = SpecNormalizer.normalize_tasks([{"name": "T", "description": long_text}])
        self.assertEqual(len(tasks[0]["description"]), 4000)

    def test_text_fields_fit_their_columns(self):
        result = SpecNormalizer().handle({
            "name": "P" * 300,
            "backTech": "B" * 300,
            "priority": "9" * 300,
            "Tasks": [{"name": "T" * 300, "assignedTo": "A" * 300}],
        })
        project = result["projects"][0]
        for field in ("name", "backtech", "priority"):
            self.assertEqual(len(project[field]), 255, field)
        self.assertEqual(len(project["tasks"][0]["name"]), 255)
        self.assertEqual(len(project["tasks"][0]["assigned_to"]), 255)

    def test_negative_counts_become_none(self):
        result = SpecNormalizer().handle({
            "name": "Shop",
            "sprintsQuantity": -2,
            "Tasks": [{"name": "Cart", "sprint": -1}, {"name": "Pay", "sprint": 0}],
        })
        project = result["projects"][0]
        self.assertIsNone(project["sprints_quantity"])
        self.assertEqual([t["sprint"] for t in project["tasks"]], [None, 0])

    def test_parse_int_or_none(self):
        self.assertEqual(parse_int_or_none("3"), 3)
        self.assertEqual(parse_int_or_none(2.0), 2)
        self.assertIsNone(parse_int_or_none(""))
        self.assertIsNone(parse_int_or_none("abc"))
        self.assertIsNone(parse_int_or_none(float("inf")))

class SpecPersisterTests(unittest.TestCase):

    def setUp(self):
        Base.metadata.create_all(bind=engine)
        self.db = SessionLocal()

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(bind=engine)

    def test_full_chain_saves_projects_and_tasks(self):
        raw = """```json
        {"projects": [
            {"projectName": "Shop", "Tasks": [{"name": "Cart", "sprint": 1}, {"name": "Pay", "sprint": 2}]},
            {"projectName": "Blog", "Tasks": []}
        ]}
        ```"""
        cleaner = JsonCleaner()
        cleaner.set_next(JsonParser()).set_next(SpecNormalizer()).set_next(SpecPersister(self.db))

        result = cleaner.process(raw)
        self.assertFalse(result["is_single"])
        self.assertEqual(self.db.query(Project).count(), 2)
        self.assertEqual(self.db.query(Task).count(), 2)
        shop = self.db.query(Project).filter(Project.name == "Shop").one()
        self.assertEqual(sorted(t.name for t in shop.tasks), ["Cart", "Pay"])

    def test_nothing_saved_when_normalizing_fails(self):
        cleaner = JsonCleaner()
        cleaner.set_next(JsonParser()).set_next(SpecNormalizer()).set_next(SpecPersister(self.db))

        with self.assertRaises(AssistantError):
            cleaner.process('{"projects": [{"name": "Shop"}, {"name": ""}]}')
        self.assertEqual(self.db.query(Project).count(), 0)
