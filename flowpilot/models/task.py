"""
Task Model - Represents work items inside a project
"""

from sqlalchemy import Column, String, Text, Integer, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from flowpilot.database import Base

class Task(Base):
    """
    Task table - a unit of work assigned to a person and scoped to a sprint.
    Always belongs to an existing project.
    """
    __tablename__ = "tasks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    assigned_to = Column("assignedTo", String(255), nullable=True)  # Person's name, not a user reference
    sprint = Column(Integer, nullable=True)

    project_id = Column(
        "projectId",
        UUID(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project = relationship("Project", back_populates="tasks")

    def __repr__(self):
        return f"<Task {self.id}: {self.name} (sprint {self.sprint})>"
