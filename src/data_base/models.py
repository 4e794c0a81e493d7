# src/data_base/models.py
# This module declares the events table the load generator writes into.


###### IMPORT TOOLS ######
# global imports
from datetime import datetime
from uuid import UUID as PyUUID
from sqlalchemy import (
    BigInteger,
    CHAR,
    DateTime,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID as PgUUID, JSONB

# local imports
from src.data_base.db import Base


###### EVENT MODEL ######
class Events(Base):
    """Analytics event, stored in a table range-partitioned by event_time."""
    __tablename__ = "events"
    __table_args__ = {"postgresql_partition_by": "RANGE (event_time)"}
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    event_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), primary_key=True, server_default=func.now(), nullable=False
    )
    user_id: Mapped[PyUUID] = mapped_column(PgUUID(as_uuid=True), nullable=False)
    session_id: Mapped[PyUUID] = mapped_column(PgUUID(as_uuid=True), nullable=False)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    properties: Mapped[dict] = mapped_column(JSONB, nullable=False, server_default=text("'{}'"))
    page_url: Mapped[str | None] = mapped_column(Text)
    referrer: Mapped[str | None] = mapped_column(Text)
    device_type: Mapped[str | None] = mapped_column(String(20))
    browser: Mapped[str | None] = mapped_column(String(50))
    os: Mapped[str | None] = mapped_column(String(50))
    country_code: Mapped[str | None] = mapped_column(CHAR(2))
    city: Mapped[str | None] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


###### COPY COLUMN ORDER ######
# everything except the generated primary key, in the order COPY receives it
COPY_COLUMNS: tuple[str, ...] = tuple(
    column.name for column in Events.__table__.columns if column.name != "id"
)
