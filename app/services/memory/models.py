from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy import Boolean, Integer, String, Text, DateTime, ForeignKey
from datetime import datetime
import uuid

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class ChatThread(Base):
    __tablename__ = "chat_threads"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    name: Mapped[str] = mapped_column(String(256), default="New chat")
    chat_type: Mapped[str] = mapped_column(String(16), default="simple")  # 'simple' | 'web' | 'doc'
    chat_api_model: Mapped[str] = mapped_column(String(32), default="GPT-4")
    chat_doc: Mapped[str] = mapped_column(String(128), default="all")
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ChatMessage(Base):
    __tablename__ = "chat_messages"
    # Insertion order; created_at alone can tie
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, index=True, default=_uuid)
    thread_id: Mapped[str] = mapped_column(String(36), ForeignKey("chat_threads.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    role: Mapped[str] = mapped_column(String(16))  # 'user' | 'assistant' | 'system'
    content: Mapped[str] = mapped_column(Text)
    # Retrieval context used to produce an assistant answer (document chat only)
    context: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
