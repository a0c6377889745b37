from dataclasses import dataclass
from datetime import datetime
import os

from dotenv import load_dotenv

from storer.errors import ConfigurationError


load_dotenv()

DISPATCH_POLICIES = ("fail_fast", "attempt_all")
OBJECT_STORES = ("local", "s3")


@dataclass(frozen=True)
class Settings:
    agency_id: str
    month: int
    year: int
    database_url: str
    mirror_database_url: str | None = None
    collection: str = "agency_monthly_info"
    success_collection: str = "agency_monthly_info"
    error_collection: str = "agency_monthly_info_errors"
    success_codes: tuple[int, ...] | None = None
    object_store: str = "local"
    object_store_dir: str = "./objects"
    s3_bucket: str | None = None
    s3_prefix: str = ""
    s3_endpoint_url: str | None = None
    aws_region: str | None = None
    start_time: datetime | None = None
    dispatch_policy: str = "fail_fast"
    log_level: str = "WARNING"


def _required(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigurationError(f"required environment variable {name} is not set")
    return value


def _int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    value = os.getenv(name, default).strip().lower()
    if value not in choices:
        raise ConfigurationError(f"{name} must be one of {', '.join(choices)}, got {value!r}")
    return value


def parse_success_codes(raw: str | None) -> tuple[int, ...] | None:
    if raw is None or not raw.strip():
        return None
    return tuple(_int("SUCC_CODES", part.strip()) for part in raw.strip("[] ").split(",") if part.strip())


def parse_start_time(raw: str | None) -> datetime | None:
    if raw is None or not raw.strip():
        return None
    try:
        return datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise ConfigurationError(f"START_TIME must be an RFC 3339 timestamp, got {raw!r}") from exc


def get_settings() -> Settings:
    month = _int("MONTH", _required("MONTH"))
    if not 1 <= month <= 12:
        raise ConfigurationError(f"MONTH must be between 1 and 12, got {month}")
    year = _int("YEAR", _required("YEAR"))
    if year <= 0:
        raise ConfigurationError(f"YEAR must be positive, got {year}")

    collection = os.getenv("DB_COLLECTION", "agency_monthly_info")
    object_store = _choice("OBJECT_STORE", "local", OBJECT_STORES)
    s3_bucket = os.getenv("S3_BUCKET") or None
    if object_store == "s3" and not s3_bucket:
        raise ConfigurationError("S3_BUCKET is required when OBJECT_STORE=s3")

    return Settings(
        agency_id=_required("AID").lower(),
        month=month,
        year=year,
        database_url=_required("DATABASE_URL"),
        mirror_database_url=os.getenv("MIRROR_DATABASE_URL") or None,
        collection=collection,
        success_collection=os.getenv("DB_SUCCESS_COLLECTION", collection),
        error_collection=os.getenv("DB_ERROR_COLLECTION", f"{collection}_errors"),
        success_codes=parse_success_codes(os.getenv("SUCC_CODES")),
        object_store=object_store,
        object_store_dir=os.getenv("OBJECT_STORE_DIR", "./objects"),
        s3_bucket=s3_bucket,
        s3_prefix=os.getenv("S3_PREFIX", ""),
        s3_endpoint_url=os.getenv("S3_ENDPOINT_URL") or None,
        aws_region=os.getenv("AWS_REGION") or None,
        start_time=parse_start_time(os.getenv("START_TIME")),
        dispatch_policy=_choice("DISPATCH_POLICY", "fail_fast", DISPATCH_POLICIES),
        log_level=os.getenv("LOG_LEVEL", "WARNING"),
    )
