import logging
from typing import Sequence

from storer.backends import RecordStore
from storer.errors import StoreError
from storer.schemas import AgencyMonthlyInfo


logger = logging.getLogger(__name__)


def dispatch(record: AgencyMonthlyInfo, stores: Sequence[RecordStore], *, policy: str = "fail_fast") -> None:
    failures: list[tuple[str, Exception]] = []
    for store in stores:
        try:
            store.store(record)
        except Exception as exc:
            logger.info("store failed", extra={"store": store.name, "agency_id": record.agency_id})
            # fail_fast leaves the remaining stores untouched.
            if policy == "fail_fast":
                raise StoreError(f"error trying to store agmi in {store.name}: {exc}", [(store.name, exc)]) from exc
            failures.append((store.name, exc))

    if failures:
        details = "; ".join(f"{name}: {exc}" for name, exc in failures)
        raise StoreError(
            f"error trying to store agmi in {len(failures)} of {len(stores)} stores: {details}",
            failures,
        ) from failures[0][1]
