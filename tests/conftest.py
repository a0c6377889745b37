from collections.abc import Callable
import io
import json
from pathlib import Path

import pytest

from storer.config import Settings
from storer.schemas import AgencyMonthlyInfo, BackupDescriptor


class FakeObjectStore:
    def __init__(self, *, fail_upload: bool = False, fail_backup: bool = False) -> None:
        self.fail_upload = fail_upload
        self.fail_backup = fail_backup
        self.calls: list[tuple[str, object, str]] = []

    def upload_file(self, path: str, agency_id: str) -> BackupDescriptor:
        self.calls.append(("upload_file", path, agency_id))
        if self.fail_upload:
            raise RuntimeError("object store unavailable")
        return BackupDescriptor(url=f"fake://{agency_id}/{Path(path).name}", size=1, hash="h")

    def backup(self, paths: list[str], agency_id: str) -> list[BackupDescriptor]:
        self.calls.append(("backup", list(paths), agency_id))
        if self.fail_backup:
            raise RuntimeError("object store unavailable")
        return [BackupDescriptor(url=f"fake://{agency_id}/{Path(p).name}", size=1, hash="h") for p in paths]


class FakeRecordStore:
    def __init__(self, name: str = "fake", *, fail: bool = False) -> None:
        self.name = name
        self.fail = fail
        self.store_calls = 0
        self.records: dict[tuple[str, int, int], AgencyMonthlyInfo] = {}

    def store(self, record: AgencyMonthlyInfo) -> None:
        self.store_calls += 1
        if self.fail:
            raise RuntimeError(f"{self.name} is down")
        self.records[record.key] = record


@pytest.fixture()
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    def _make(**overrides) -> Settings:
        values = {
            "agency_id": "trt13",
            "month": 3,
            "year": 2020,
            "database_url": f"sqlite:///{tmp_path / 'storer.db'}",
            "object_store_dir": str(tmp_path / "objects"),
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture()
def stage() -> Callable[..., dict[str, object]]:
    def _stage(status: str = "OK", /, **execution) -> dict[str, object]:
        payload = {
            "cmd": "run.sh",
            "cmd_dir": "/src",
            "stdout": "",
            "stderr": "",
            "status": 0,
            "env": ["MONTH=3"],
            "start_time": "2020-04-01T10:00:00Z",
            "finish_time": "2020-04-01T10:00:01.500000Z",
        }
        payload.update(execution)
        return {"status": status, "execution": payload}

    return _stage


def as_stream(payload: object) -> io.BytesIO:
    return io.BytesIO(json.dumps(payload).encode("utf-8"))
