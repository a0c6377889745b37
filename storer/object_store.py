import hashlib
import logging
from pathlib import Path
import shutil
from typing import Any, Protocol

from storer.schemas import BackupDescriptor


logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    def upload_file(self, path: str, agency_id: str) -> BackupDescriptor: ...

    def backup(self, paths: list[str], agency_id: str) -> list[BackupDescriptor]: ...


def sha256_for_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as infile:
        for chunk in iter(lambda: infile.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def object_key(path: Path, agency_id: str, prefix: str = "") -> str:
    key = f"{agency_id}/{path.name}"
    if prefix:
        key = f"{prefix.strip('/')}/{key}"
    return key


def ensure_unique_names(paths: list[str]) -> None:
    # Objects are keyed by basename, so two files with one name would collide.
    seen: dict[str, str] = {}
    for path in paths:
        name = Path(path).name
        if name in seen:
            raise ValueError(f"backup files share the object name {name!r}: {seen[name]}, {path}")
        seen[name] = path


class LocalObjectStore:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def upload_file(self, path: str, agency_id: str) -> BackupDescriptor:
        source = Path(path)
        if not source.is_file():
            raise FileNotFoundError(f"artifact not found: {source}")

        target = self.root / object_key(source, agency_id)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
        logger.info("artifact copied", extra={"source": str(source), "target": str(target)})
        return BackupDescriptor(url=target.resolve().as_uri(), size=source.stat().st_size, hash=sha256_for_file(source))

    def backup(self, paths: list[str], agency_id: str) -> list[BackupDescriptor]:
        ensure_unique_names(paths)
        return [self.upload_file(path, agency_id) for path in paths]


class S3ObjectStore:
    def __init__(self, s3_client: Any, *, bucket: str, prefix: str = "") -> None:
        self.s3_client = s3_client
        self.bucket = bucket
        self.prefix = prefix

    def upload_file(self, path: str, agency_id: str) -> BackupDescriptor:
        source = Path(path)
        if not source.is_file():
            raise FileNotFoundError(f"artifact not found: {source}")

        key = object_key(source, agency_id, self.prefix)
        self.s3_client.upload_file(str(source), self.bucket, key)
        logger.info("artifact uploaded", extra={"bucket": self.bucket, "key": key})
        return BackupDescriptor(
            url=f"s3://{self.bucket}/{key}",
            size=source.stat().st_size,
            hash=sha256_for_file(source),
        )

    def backup(self, paths: list[str], agency_id: str) -> list[BackupDescriptor]:
        ensure_unique_names(paths)
        return [self.upload_file(path, agency_id) for path in paths]
