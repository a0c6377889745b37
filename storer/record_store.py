from dataclasses import asdict
from datetime import UTC
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from storer.db_models import AgencyMonthlyInfoRow
from storer.schemas import AgencyMonthlyInfo


logger = logging.getLogger(__name__)


def get_record(
    db: Session,
    *,
    collection: str,
    agency_id: str,
    month: int,
    year: int,
) -> AgencyMonthlyInfoRow | None:
    stmt = select(AgencyMonthlyInfoRow).where(
        AgencyMonthlyInfoRow.collection == collection,
        AgencyMonthlyInfoRow.agency_id == agency_id,
        AgencyMonthlyInfoRow.month == month,
        AgencyMonthlyInfoRow.year == year,
    )
    return db.execute(stmt).scalar_one_or_none()


def _apply(row: AgencyMonthlyInfoRow, record: AgencyMonthlyInfo) -> None:
    crawled = record.crawling_timestamp
    if crawled.tzinfo is not None:
        crawled = crawled.astimezone(UTC).replace(tzinfo=None)
    row.crawling_timestamp = crawled
    row.exec_time = record.exec_time
    row.proc_info = _proc_info_payload(record)
    row.package = asdict(record.package) if record.package else None
    row.backups = [asdict(backup) for backup in record.backups] or None


def _proc_info_payload(record: AgencyMonthlyInfo) -> dict[str, object] | None:
    if record.proc_info is None:
        return None
    payload = asdict(record.proc_info)
    payload["env"] = list(record.proc_info.env)
    return payload


def upsert_record(db: Session, *, collection: str, record: AgencyMonthlyInfo) -> AgencyMonthlyInfoRow:
    agency_id, month, year = record.key
    row = get_record(db, collection=collection, agency_id=agency_id, month=month, year=year)
    if row is None:
        row = AgencyMonthlyInfoRow(collection=collection, agency_id=agency_id, month=month, year=year)
        _apply(row, record)
        db.add(row)
        try:
            db.commit()
        except IntegrityError:
            # Another writer created the key first; fall through to update it.
            db.rollback()
            row = get_record(db, collection=collection, agency_id=agency_id, month=month, year=year)
            if row is None:
                raise
        else:
            db.refresh(row)
            return row

    _apply(row, record)
    db.commit()
    db.refresh(row)
    return row


class SQLRecordStore:
    def __init__(self, session_factory: sessionmaker[Session], *, collection: str, name: str = "database") -> None:
        self.session_factory = session_factory
        self.collection = collection
        self.name = name

    def store(self, record: AgencyMonthlyInfo) -> None:
        with self.session_factory() as db:
            row = upsert_record(db, collection=self.collection, record=record)
            logger.info(
                "agency monthly info stored",
                extra={"store": self.name, "collection": self.collection, "record_id": row.id},
            )
