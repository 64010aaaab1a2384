"""
Assistant Strategies - create, predict and optimize projects with the model

A strategy builds the prompt, asks the text generator, and turns the
answer into database changes. StrategyFactory looks strategies up by name.
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from flowpilot.models import Project, Task, AuditAction
from flowpilot.assistant.exceptions import AssistantError
from flowpilot.assistant.prompts import CREATE_PROMPT, OPTIMIZE_PROMPT, build_prompt, predict_prompt
from flowpilot.assistant.processors import (
    JsonCleaner,
    JsonParser,
    SpecNormalizer,
    build_processing_chain,
    parse_count_or_none,
    safe_string,
)

logger = logging.getLogger(__name__)

class ProjectStrategy:
    """Base strategy - subclasses set name, audit_action and implement run()"""

    name: str = ""
    audit_action: str = ""

    def __init__(self, generator, db: Session):
        self.generator = generator
        self.db = db

    def get_prompt(self) -> str:
        raise NotImplementedError

    def validate(self, user_input: Optional[str], project: Optional[Project]) -> None:
        pass

    def execute(self, user_input: Optional[str] = None, project: Optional[Project] = None) -> Dict[str, Any]:
        """
        Run the strategy.

        Returns:
            {"action": name, "project": Project or [Project], "metadata": {...}}
        """
        self.validate(user_input, project)
        prompt = build_prompt(self.get_prompt(), user_input=user_input, project=project)
        raw = self.generator.generate(prompt)
        return self.run(raw, project)

    def run(self, raw: str, project: Optional[Project]) -> Dict[str, Any]:
        raise NotImplementedError

    def parse(self, raw: str) -> Any:
        """Clean and decode model output without normalizing or saving it"""
        return JsonParser().handle(JsonCleaner().handle(raw))

    def apply_plan_fields(self, project: Project, plan: Dict[str, Any]) -> List[str]:
        """Update sprintsQuantity/endDate when the model proposes different values"""
        updated = []
        sprints = parse_count_or_none(plan.get("sprintsQuantity", plan.get("sprints_quantity")))
        if sprints is not None and sprints != project.sprints_quantity:
            project.sprints_quantity = sprints
            updated.append("sprintsQuantity")

        end_date = safe_string(plan.get("endDate", plan.get("end_date")))
        if end_date is not None and end_date != project.end_date:
            project.end_date = end_date
            updated.append("endDate")
        return updated

    def planned_tasks(self, plan: Any) -> List[Task]:
        if not isinstance(plan, dict):
            raise AssistantError("Unrecognized structure")
        raw_tasks = plan.get("Tasks", plan.get("tasks", []))
        return [Task(**task) for task in SpecNormalizer.normalize_tasks(raw_tasks)]

    def _require_project(self, project: Optional[Project]) -> None:
        if project is None:
            raise AssistantError(f"projectId is required for the {self.name} strategy")

class CreateProjectStrategy(ProjectStrategy):
    """New project(s) from a free-text idea"""

    name = "create"
    audit_action = AuditAction.CREATE_PROJECT

    def get_prompt(self) -> str:
        return CREATE_PROMPT

    def validate(self, user_input, project):
        if not user_input or not user_input.strip():
            raise AssistantError("userInput is required for the create strategy")

    def execute(self, user_input=None, project=None):
        # The idea alone drives creation; an existing project is not sent
        return super().execute(user_input=user_input, project=None)

    def run(self, raw, project):
        result = build_processing_chain(self.db).process(raw)
        projects = result["projects"]
        return {
            "action": self.name,
            "project": projects[0] if result["is_single"] else projects,
            "metadata": {
                "tasks_added": sum(len(p.tasks) for p in projects),
                "tasks_removed": 0,
                "fields_updated": [],
            },
        }

class PredictProjectStrategy(ProjectStrategy):
    """Append suggested tasks to an existing project"""

    name = "predict"
    audit_action = AuditAction.PREDICT_PROJECT

    def get_prompt(self) -> str:
        return predict_prompt()

    def validate(self, user_input, project):
        self._require_project(project)

    def run(self, raw, project):
        plan = self.parse(raw)
        new_tasks = self.planned_tasks(plan)

        try:
            fields_updated = self.apply_plan_fields(project, plan)
            project.tasks.extend(new_tasks)
            self.db.commit()
            self.db.refresh(project)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to apply prediction to {project.id}: {str(e)}", exc_info=True)
            raise

        logger.info(f"✅ Predicted {len(new_tasks)} task(s) for project {project.id}")
        return {
            "action": self.name,
            "project": project,
            "metadata": {
                "tasks_added": len(new_tasks),
                "tasks_removed": 0,
                "fields_updated": fields_updated,
            },
        }

class OptimizeProjectStrategy(ProjectStrategy):
    """Replace every task of a project with an optimized plan"""

    name = "optimize"
    audit_action = AuditAction.OPTIMIZE_PROJECT

    def get_prompt(self) -> str:
        return OPTIMIZE_PROMPT

    def validate(self, user_input, project):
        self._require_project(project)

    def run(self, raw, project):
        plan = self.parse(raw)
        new_tasks = self.planned_tasks(plan)

        try:
            removed = len(project.tasks)
            fields_updated = self.apply_plan_fields(project, plan)
            project.tasks = new_tasks  # delete-orphan removes the old rows
            self.db.commit()
            self.db.refresh(project)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to optimize project {project.id}: {str(e)}", exc_info=True)
            raise

        logger.info(f"✅ Optimized project {project.id}: -{removed} +{len(new_tasks)} tasks")
        return {
            "action": self.name,
            "project": project,
            "metadata": {
                "tasks_added": len(new_tasks),
                "tasks_removed": removed,
                "fields_updated": fields_updated,
            },
        }

class StrategyFactory:
    """Looks up strategies by name"""

    STRATEGIES = {
        CreateProjectStrategy.name: CreateProjectStrategy,
        PredictProjectStrategy.name: PredictProjectStrategy,
        OptimizeProjectStrategy.name: OptimizeProjectStrategy,
    }

    def __init__(self, generator, db: Session):
        self.generator = generator
        self.db = db

    @classmethod
    def available(cls) -> List[str]:
        return list(cls.STRATEGIES)

    def get_strategy(self, name: str) -> ProjectStrategy:
        strategy_class = self.STRATEGIES.get(name)
        if strategy_class is None:
            raise AssistantError(
                f"Unknown strategy type: {name}. Available: {', '.join(self.available())}"
            )
        return strategy_class(self.generator, self.db)
