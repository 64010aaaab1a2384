"""
User Model - Represents authenticated users in the system
"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from flowpilot.database import Base

class User(Base):
    """
    User table - stores authentication and profile information.
    """
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)

    # Profile information
    name = Column(String(255), nullable=False)  # Short handle shown in the UI
    email = Column(String(255), unique=True, nullable=False, index=True)  # Login identifier
    full_name = Column(String(255), nullable=True)

    # Authentication fields
    password = Column(String(255), nullable=False)  # bcrypt hash, never plaintext
    token = Column(String(1024), nullable=True)  # Current refresh token, cleared on logout

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)

    audit_logs = relationship("AuditLog", back_populates="user")

    def __repr__(self):
        return f"<User {self.email}>"
