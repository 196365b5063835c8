import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base


class Assessment(Base):
    """A saved body-map assessment and the AI analysis it received (if any)."""

    __tablename__ = "assessments"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # JSON strings for SQLite
    selected_muscles_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    pain_points_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    form_data_json: Mapped[str] = mapped_column(Text, nullable=False)
    analysis_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    diary_entries: Mapped[list["DiaryEntry"]] = relationship(
        back_populates="assessment", cascade="all, delete-orphan"
    )
