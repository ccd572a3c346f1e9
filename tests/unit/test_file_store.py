import pytest

from portfolio.domain.errors import FileIOError
from portfolio.domain.models import Bucket
from portfolio.services.files import FileStore


def test_save_returns_bucket_path(tmp_path):
    fs = FileStore(tmp_path)
    path = fs.save(b"png-bytes", "Cover Image.png", Bucket.thumbnails)
    assert path.startswith("/thumbnails/")
    assert path.endswith("-Cover_Image.png")
    assert fs.resolve(path).read_bytes() == b"png-bytes"
    assert fs.exists(path)


def test_same_name_saved_twice_gets_distinct_paths(tmp_path):
    fs = FileStore(tmp_path)
    first = fs.save(b"1", "a.png", Bucket.photos)
    second = fs.save(b"2", "a.png", Bucket.photos)
    assert first != second
    assert fs.resolve(first).read_bytes() == b"1"
    assert fs.resolve(second).read_bytes() == b"2"


def test_browser_paths_are_reduced_to_a_basename(tmp_path):
    fs = FileStore(tmp_path)
    path = fs.save(b"x", "..\\..\\windows\\evil.png", Bucket.photos)
    assert path.startswith("/photos/") and path.endswith("-evil.png")


@pytest.mark.parametrize("bucket,name", [("videos", "a.mp4"), (Bucket.photos, ""), (Bucket.photos, "...")])
def test_bad_saves_raise(tmp_path, bucket, name):
    fs = FileStore(tmp_path)
    with pytest.raises(FileIOError):
        fs.save(b"x", name, bucket)


def test_delete_is_idempotent(tmp_path):
    fs = FileStore(tmp_path)
    path = fs.save(b"x", "a.png", Bucket.photos)
    fs.delete(path)
    assert not fs.exists(path)
    fs.delete(path)
    fs.delete("")
    fs.delete("/photos/never-existed.png")


def test_delete_refuses_paths_outside_buckets(tmp_path):
    outside = tmp_path / "secret.txt"
    outside.write_text("keep me")
    fs = FileStore(tmp_path / "uploads")
    fs.delete("/photos/../../secret.txt")
    fs.delete("/etc/passwd")
    assert outside.exists()
    assert fs.resolve_path("/photos/../x") is None


def test_iter_blobs_lists_every_bucket(tmp_path):
    fs = FileStore(tmp_path)
    a = fs.save(b"a", "a.png", Bucket.photos)
    b = fs.save(b"b", "b.png", Bucket.profile)
    assert sorted(p for p, _ in fs.iter_blobs()) == sorted([a, b])
    assert fs.stats()["blob_count"] == 2
