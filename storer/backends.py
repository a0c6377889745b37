import logging
from typing import Protocol

import boto3
from botocore.exceptions import BotoCoreError

from storer.config import Settings
from storer.database import build_session_factory
from storer.errors import ClientConstructionError
from storer.object_store import LocalObjectStore, ObjectStore, S3ObjectStore
from storer.record_store import SQLRecordStore
from storer.schemas import AgencyMonthlyInfo


logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    name: str

    def store(self, record: AgencyMonthlyInfo) -> None: ...


def build_object_store(settings: Settings) -> ObjectStore:
    if settings.object_store == "local":
        return LocalObjectStore(settings.object_store_dir)

    try:
        client = boto3.client(
            "s3",
            region_name=settings.aws_region,
            endpoint_url=settings.s3_endpoint_url,
        )
    except (BotoCoreError, ValueError) as exc:
        raise ClientConstructionError(f"error creating S3 client: {exc}") from exc
    return S3ObjectStore(client, bucket=settings.s3_bucket or "", prefix=settings.s3_prefix)


def build_record_stores(settings: Settings, collection: str) -> list[RecordStore]:
    urls = [("database", settings.database_url)]
    if settings.mirror_database_url:
        urls.append(("mirror", settings.mirror_database_url))

    stores: list[RecordStore] = []
    for name, url in urls:
        session_factory = build_session_factory(url, name=name)
        stores.append(SQLRecordStore(session_factory, collection=collection, name=name))

    logger.info("record stores ready", extra={"stores": [store.name for store in stores], "collection": collection})
    return stores


def build_backends(settings: Settings, collection: str) -> tuple[ObjectStore, list[RecordStore]]:
    return build_object_store(settings), build_record_stores(settings, collection)
