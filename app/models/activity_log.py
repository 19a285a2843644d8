"""
Modelos ORM para Auditoría.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.sql import func
from app.db.base import Base


class ActivityLog(Base):
    """Modelo de Log de Actividad (Auditoría)."""

    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"))
    action_type = Column(String(50), nullable=False)
    entity_type = Column(String(50))
    entity_id = Column(Uuid)
    extra_data = Column(JSON)  # 'metadata' es palabra reservada en SQLAlchemy
    ip_address = Column(String(45))
    user_agent = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<ActivityLog {self.action_type} by user {self.user_id}>"
