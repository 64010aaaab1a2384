"""
Project Model - A unit of work that owns tasks
"""

from sqlalchemy import Column, String, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid

from flowpilot.database import Base

class Project(Base):
    """
    Project table - priority and technology-stack metadata for a body of work.
    Deleting a project deletes its tasks.
    """
    __tablename__ = "projects"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    priority = Column(String(255), nullable=True)  # "high"/"medium"/"low" or 1-5 from the assistant

    # Technology stack
    backtech = Column(String(255), nullable=True)
    fronttech = Column(String(255), nullable=True)
    cloud_tech = Column("cloudTech", String(255), nullable=True)

    # Planning
    sprints_quantity = Column(Integer, nullable=True)
    end_date = Column("endDate", String(255), nullable=True)  # Free text, e.g. "16/02/2026"

    tasks = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Task.sprint",
    )

    def __repr__(self):
        return f"<Project {self.id}: {self.name}>"
