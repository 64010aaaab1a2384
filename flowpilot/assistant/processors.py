"""
Processing Chain - Turns raw model output into saved projects

Each processor handles one step and passes its result to the next:

    JsonCleaner -> JsonParser -> SpecNormalizer -> SpecPersister

Build a chain with set_next() and run it with process() on the first link.
"""

from typing import Any, Dict, List, Optional
import json
import math
import re
import logging

from sqlalchemy.orm import Session

from flowpilot.models import Project, Task
from flowpilot.assistant.exceptions import AssistantError

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LENGTH = 4000
STRING_MAX_LENGTH = 255  # VARCHAR(255) columns

# Keys tried, in order, when a description arrives as an object
DESCRIPTION_KEYS = ("long", "full", "description", "desc", "details", "summary", "text", "short", "body")

def parse_int_or_none(value: Any) -> Optional[int]:
    """3, "3" and 3.0 become 3; blanks and non-numbers become None"""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)

def parse_count_or_none(value: Any) -> Optional[int]:
    """Like parse_int_or_none, but negative sprints and counts become None"""
    number = parse_int_or_none(value)
    if number is None or number < 0:
        return None
    return number

def safe_string(value: Any, max_length: int = STRING_MAX_LENGTH) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()[:max_length].strip()
    return text or None

def as_plain_text(value: Any) -> Optional[str]:
    """Flatten lists and objects the model sometimes returns as descriptions"""
    if value is None:
        return None
    if isinstance(value, list):
        parts = [re.sub(r"\s+", " ", str(item if item is not None else "")).strip() for item in value]
        joined = " • ".join(part for part in parts if part)
        return joined or None
    if isinstance(value, dict):
        for key in DESCRIPTION_KEYS:
            if key in value:
                return as_plain_text(value[key])
        return json.dumps(value) or None
    text = re.sub(r"\s+", " ", str(value)).strip()
    return text or None

def safe_text(value: Any, max_length: int = DESCRIPTION_MAX_LENGTH) -> Optional[str]:
    text = as_plain_text(value)
    if not text:
        return None
    return text[:max_length]

def first_present(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Value of the first key that is present and not None"""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default

class SpecProcessor:
    """Base link of the processing chain"""

    def __init__(self):
        self._next: Optional["SpecProcessor"] = None

    def set_next(self, processor: "SpecProcessor") -> "SpecProcessor":
        """Attach the next link and return it, so calls can be chained"""
        self._next = processor
        return processor

    def process(self, data: Any) -> Any:
        result = self.handle(data)
        if self._next is not None:
            return self._next.process(result)
        return result

    def handle(self, data: Any) -> Any:
        raise NotImplementedError

class JsonCleaner(SpecProcessor):
    """
    Repairs the almost-JSON that language models tend to produce.

    Strips code fences and surrounding prose, comments, trailing commas,
    smart quotes, bare keys, single-quoted strings, NaN and Infinity.
    """

    FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
    BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")
    TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
    NON_FINITE_RE = re.compile(r"-?\bInfinity\b|\bNaN\b")

    def handle(self, raw_text: Any) -> str:
        if not raw_text or not isinstance(raw_text, str):
            raise AssistantError("Empty response")

        cleaned = self.FENCE_RE.sub("", raw_text).replace("\r\n", "\n").strip()
        cleaned = self.extract_balanced_block(cleaned) or cleaned
        cleaned = self.collapse_newlines_in_strings(cleaned)
        cleaned = self.strip_comments(cleaned)
        cleaned = (
            cleaned.replace("\u201c", '"').replace("\u201d", '"')
            .replace("\u2018", "'").replace("\u2019", "'")
        )
        cleaned = self.convert_single_quoted(cleaned)
        cleaned = self.outside_strings(cleaned, self._repair_syntax)
        return cleaned

    def _repair_syntax(self, segment: str) -> str:
        segment = self.BARE_KEY_RE.sub(r'\1"\2"\3', segment)
        segment = self.TRAILING_COMMA_RE.sub(r"\1", segment)
        return self.NON_FINITE_RE.sub("null", segment)

    @staticmethod
    def extract_balanced_block(text: str) -> str:
        """First {...} block with balanced braces, ignoring braces inside strings"""
        text = text.replace("\ufeff", "")
        start = text.find("{")
        if start < 0:
            return ""

        depth = 0
        quote = None
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if quote:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == quote:
                    quote = None
                continue
            if ch in ('"', "'"):
                quote = ch
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        return text[start:]  # Unbalanced, let the parser report it

    @staticmethod
    def collapse_newlines_in_strings(text: str) -> str:
        out = []
        in_string = False
        escaped = False
        for ch in text:
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch in ("\n", "\r"):
                    ch = " "
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            out.append(ch)
        return "".join(out)

    @staticmethod
    def strip_comments(text: str) -> str:
        """Remove // and /* */ comments that are not inside strings"""
        out = []
        in_string = False
        escaped = False
        in_block = False
        i = 0
        while i < len(text):
            ch = text[i]
            nxt = text[i + 1] if i + 1 < len(text) else ""
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                out.append(ch)
            elif in_block:
                if ch == "*" and nxt == "/":
                    in_block = False
                    i += 1
            elif ch == '"':
                in_string = True
                out.append(ch)
            elif ch == "/" and nxt == "*":
                in_block = True
                i += 1
            elif ch == "/" and nxt == "/":
                while i < len(text) and text[i] != "\n":
                    i += 1
                continue
            else:
                out.append(ch)
            i += 1
        return "".join(out)

    @staticmethod
    def convert_single_quoted(text: str) -> str:
        """'value' becomes "value" where a string may start (after : [ , or {)"""
        out = []
        in_double = False
        in_single = False
        escaped = False
        for ch in text:
            if escaped:
                out.append(ch)
                escaped = False
                continue
            if ch == "\\":
                out.append(ch)
                escaped = True
                continue
            if in_double:
                if ch == '"':
                    in_double = False
                out.append(ch)
                continue
            if in_single:
                if ch == "'":
                    in_single = False
                    out.append('"')
                elif ch == '"':
                    out.append('\\"')
                else:
                    out.append(ch)
                continue
            if ch == '"':
                in_double = True
                out.append(ch)
                continue
            if ch == "'":
                prev = "".join(out).rstrip()[-1:]
                if prev in (":", "[", ",", "{"):
                    in_single = True
                    out.append('"')
                else:
                    out.append(ch)
                continue
            out.append(ch)
        return "".join(out)

    @staticmethod
    def outside_strings(text: str, fn) -> str:
        """Apply fn to every stretch of text that is not a double-quoted string"""
        out = []
        segment = []
        in_string = False
        escaped = False
        for ch in text:
            if in_string:
                segment.append(ch)
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                    out.append("".join(segment))
                    segment = []
            elif ch == '"':
                out.append(fn("".join(segment)))
                segment = [ch]
                in_string = True
            else:
                segment.append(ch)
        tail = "".join(segment)
        out.append(tail if in_string else fn(tail))
        return "".join(out)

class JsonParser(SpecProcessor):
    """Decodes cleaned text, reporting where decoding failed"""

    CONTEXT_CHARS = 30

    def handle(self, cleaned: str) -> Any:
        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as e:
            start = max(0, e.pos - self.CONTEXT_CHARS)
            snippet = cleaned[start:e.pos + self.CONTEXT_CHARS]
            logger.warning(f"⚠️  Model output is not valid JSON: {e.msg} at {e.pos}")
            raise AssistantError(f'Invalid JSON: {e.msg} (position {e.pos}). Context: "…{snippet}…"')

class SpecNormalizer(SpecProcessor):
    """
    Maps the model's loosely named fields onto project/task columns.

    Accepts {"projects": [...]}, {"project": {...}} or a bare project object.
    Returns {"is_single": bool, "projects": [project dict, ...]} with the
    ORM attribute names as keys.
    """

    def handle(self, data: Any) -> Dict[str, Any]:
        if isinstance(data, dict) and isinstance(data.get("projects"), list):
            raw_projects, is_single = data["projects"], False
        elif isinstance(data, dict) and isinstance(data.get("project"), dict):
            raw_projects, is_single = [data["project"]], True
        elif isinstance(data, dict):
            raw_projects, is_single = [data], True
        else:
            raise AssistantError("Unrecognized structure")

        projects = []
        for i, raw in enumerate(raw_projects, start=1):
            if not isinstance(raw, dict):
                raise AssistantError(f"Project #{i}: expected an object")
            projects.append(self.normalize_project(raw, i))
        return {"is_single": is_single, "projects": projects}

    def normalize_project(self, raw: Dict[str, Any], index: int) -> Dict[str, Any]:
        name = safe_string(first_present(raw, "name", "projectName", "project_name"))
        if not name:
            raise AssistantError(f'Project #{index}: "name" is required')

        return {
            "name": name,
            "priority": safe_string(raw.get("priority")),
            "backtech": safe_string(first_present(raw, "backtech", "backTech", "back_tech")),
            "fronttech": safe_string(first_present(raw, "fronttech", "frontTech", "front_tech")),
            "cloud_tech": safe_string(first_present(raw, "cloudTech", "cloud_tech", "cloud")),
            "sprints_quantity": parse_count_or_none(first_present(raw, "sprintsQuantity", "sprints_quantity")),
            "end_date": safe_string(raw.get("endDate")),
            "tasks": self.normalize_tasks(first_present(raw, "tasks", "Tasks", default=[]), index),
        }

    @staticmethod
    def normalize_tasks(raw_tasks: Any, project_index: int = 1) -> List[Dict[str, Any]]:
        if not isinstance(raw_tasks, list):
            return []
        tasks = []
        for j, raw in enumerate(raw_tasks, start=1):
            raw = raw if isinstance(raw, dict) else {}
            name = safe_string(first_present(raw, "name", "taskName", "title"))
            if not name:
                raise AssistantError(f'Project #{project_index}, task #{j}: "name" is required')
            tasks.append({
                "name": name,
                "description": safe_text(raw.get("description")),
                "assigned_to": safe_string(first_present(raw, "assignedTo", "assigned_to")),
                "sprint": parse_count_or_none(raw.get("sprint")),
            })
        return tasks

class SpecPersister(SpecProcessor):
    """Saves normalized projects with their tasks in a single transaction"""

    def __init__(self, db: Session):
        super().__init__()
        self.db = db

    def handle(self, normalized: Dict[str, Any]) -> Dict[str, Any]:
        saved = []
        try:
            for spec in normalized["projects"]:
                fields = {key: value for key, value in spec.items() if key != "tasks"}
                project = Project(**fields)
                project.tasks = [Task(**task) for task in spec["tasks"]]
                self.db.add(project)
                saved.append(project)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save generated projects: {str(e)}", exc_info=True)
            raise

        for project in saved:
            self.db.refresh(project)
        logger.info(f"✅ Saved {len(saved)} generated project(s)")
        return {"is_single": normalized["is_single"], "projects": saved}

def build_processing_chain(db: Session) -> SpecProcessor:
    """Cleaner -> parser -> normalizer -> persister"""
    cleaner = JsonCleaner()
    cleaner.set_next(JsonParser()).set_next(SpecNormalizer()).set_next(SpecPersister(db))
    return cleaner
