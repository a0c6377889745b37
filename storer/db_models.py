from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def utc_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class AgencyMonthlyInfoRow(Base):
    __tablename__ = "agency_monthly_info"
    __table_args__ = (
        UniqueConstraint("collection", "agency_id", "month", "year", name="uq_agency_month_year"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(128), index=True)
    agency_id: Mapped[str] = mapped_column(String(64), index=True)
    month: Mapped[int] = mapped_column(Integer)
    year: Mapped[int] = mapped_column(Integer)
    crawling_timestamp: Mapped[datetime] = mapped_column(DateTime)
    exec_time: Mapped[float] = mapped_column(Float, default=0.0)
    proc_info: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    package: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    backups: Mapped[list | None] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, onupdate=utc_now)
