from collections.abc import Callable
from datetime import datetime
import logging
from typing import BinaryIO

from storer.artifacts import classify_artifacts
from storer.backends import RecordStore, build_backends
from storer.config import Settings
from storer.dispatcher import dispatch
from storer.object_store import ObjectStore
from storer.report_reader import read_execution_report
from storer.schemas import AgencyMonthlyInfo
from storer.step_logic import reduce_status, select_collection, utc_now


logger = logging.getLogger(__name__)
BackendFactory = Callable[[Settings, str], tuple[ObjectStore, list[RecordStore]]]


class StorePipeline:
    def __init__(self, settings: Settings, backend_factory: BackendFactory = build_backends) -> None:
        self.settings = settings
        self.backend_factory = backend_factory

    def run(self, stream: BinaryIO, *, fmt: str = "json", now: datetime | None = None) -> AgencyMonthlyInfo:
        now = now or utc_now()
        report = read_execution_report(stream, fmt)
        summary = reduce_status(report, started_at=self.settings.start_time, now=now)
        collection = self._collection_for(summary.status_code)

        # Some stores bind to a collection when built, so route first.
        object_store, record_stores = self.backend_factory(self.settings, collection)

        package, backups = classify_artifacts(report, object_store, self.settings.agency_id)
        record = AgencyMonthlyInfo(
            agency_id=self.settings.agency_id,
            month=self.settings.month,
            year=self.settings.year,
            crawling_timestamp=report.crawling_timestamp or now,
            proc_info=summary.proc_info,
            exec_time=summary.exec_time,
            package=package,
            backups=backups,
        )

        dispatch(record, record_stores, policy=self.settings.dispatch_policy)
        logger.info(
            "agency monthly info dispatched",
            extra={
                "agency_id": record.agency_id,
                "month": record.month,
                "year": record.year,
                "collection": collection,
                "status_code": summary.status_code,
            },
        )
        return record

    def _collection_for(self, status_code: int | None) -> str:
        if self.settings.success_codes is None:
            return self.settings.collection
        return select_collection(
            status_code,
            self.settings.success_codes,
            success_collection=self.settings.success_collection,
            error_collection=self.settings.error_collection,
        )
