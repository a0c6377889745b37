import logging

from storer.errors import BackupError, UploadError
from storer.object_store import ObjectStore
from storer.schemas import BackupDescriptor, ExecutionReport


logger = logging.getLogger(__name__)


def classify_artifacts(
    report: ExecutionReport,
    object_store: ObjectStore,
    agency_id: str,
) -> tuple[BackupDescriptor | None, list[BackupDescriptor]]:
    package: BackupDescriptor | None = None
    backups: list[BackupDescriptor] = []

    if report.package:
        try:
            package = object_store.upload_file(report.package, agency_id)
        except Exception as exc:
            raise UploadError(f"error trying to backup package file {report.package}: {exc}") from exc

    if report.files:
        paths = list(report.files)
        try:
            backups = object_store.backup(paths, agency_id)
        except Exception as exc:
            raise BackupError(f"error trying to backup files {paths}: {exc}") from exc
        if len(backups) != len(paths):
            raise BackupError(f"backup returned {len(backups)} descriptors for {len(paths)} files")

    logger.info(
        "artifacts classified",
        extra={"agency_id": agency_id, "package": package is not None, "backups": len(backups)},
    )
    return package, backups
