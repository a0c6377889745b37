from pathlib import Path

import pytest

from storer.object_store import LocalObjectStore, S3ObjectStore, sha256_for_file


class RecordingS3Client:
    def __init__(self) -> None:
        self.uploads: list[tuple[str, str, str]] = []

    def upload_file(self, filename: str, bucket: str, key: str) -> None:
        self.uploads.append((filename, bucket, key))


def _artifact(tmp_path: Path, name: str, body: bytes = b"<html></html>") -> Path:
    path = tmp_path / "out" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(body)
    return path


def test_local_store_copies_under_agency(tmp_path: Path) -> None:
    source = _artifact(tmp_path, "01.html")
    store = LocalObjectStore(tmp_path / "objects")

    descriptor = store.upload_file(str(source), "trt13")

    target = tmp_path / "objects" / "trt13" / "01.html"
    assert target.read_bytes() == source.read_bytes()
    assert descriptor.url == target.resolve().as_uri()
    assert descriptor.size == len(b"<html></html>")
    assert descriptor.hash == sha256_for_file(source)


def test_local_backup_preserves_order(tmp_path: Path) -> None:
    paths = [str(_artifact(tmp_path, name)) for name in ("02.html", "01.html")]

    descriptors = LocalObjectStore(tmp_path / "objects").backup(paths, "trt13")

    assert [Path(d.url).name for d in descriptors] == ["02.html", "01.html"]


def test_missing_artifact_fails(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        LocalObjectStore(tmp_path / "objects").upload_file(str(tmp_path / "nope.zip"), "trt13")


def test_s3_store_keys_by_prefix_and_agency(tmp_path: Path) -> None:
    source = _artifact(tmp_path, "pkg.zip", b"zip")
    client = RecordingS3Client()
    store = S3ObjectStore(client, bucket="dadosjus", prefix="/raw/")

    descriptor = store.upload_file(str(source), "trt13")

    assert client.uploads == [(str(source), "dadosjus", "raw/trt13/pkg.zip")]
    assert descriptor.url == "s3://dadosjus/raw/trt13/pkg.zip"
    assert descriptor.size == 3


@pytest.mark.parametrize("store_kind", ["local", "s3"])
def test_backup_rejects_files_with_the_same_name(tmp_path: Path, store_kind: str) -> None:
    first = _artifact(tmp_path / "a", "01.html")
    second = _artifact(tmp_path / "b", "01.html")
    client = RecordingS3Client()
    store = LocalObjectStore(tmp_path / "objects") if store_kind == "local" else S3ObjectStore(client, bucket="b")

    with pytest.raises(ValueError):
        store.backup([str(first), str(second)], "trt13")

    assert not (tmp_path / "objects").exists()
    assert client.uploads == []
