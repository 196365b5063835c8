import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base


class DiaryEntry(Base):
    __tablename__ = "diary_entries"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    assessment_id: Mapped[str] = mapped_column(
        String, ForeignKey("assessments.id", ondelete="CASCADE"), index=True, nullable=False
    )

    entry_type: Mapped[str] = mapped_column(String, nullable=False)  # pain | workout | progression | general
    pain_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sentiment: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 1-5
    entry_text: Mapped[str] = mapped_column(Text, nullable=False)

    ai_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    # At most one follow-up question per entry.
    follow_up_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    assessment: Mapped["Assessment"] = relationship(back_populates="diary_entries")
