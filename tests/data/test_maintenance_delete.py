import shutil

from fscleaner.data import maintenance
from fscleaner.data.maintenance import delete_expired


def _day(root, rel):
    p = root / rel
    (p / "10").mkdir(parents=True)
    (p / "10" / "00.bin").write_bytes(b"\0" * 16)
    return p


def test_delete_removes_whole_subtrees(tmp_path):
    a = _day(tmp_path, "acme/dev1/2020/1/1")
    b = _day(tmp_path, "acme/dev1/2020/1/2")
    keep = _day(tmp_path, "acme/dev1/2024/1/1")
    stats = delete_expired([a, str(b)])
    assert not a.exists() and not b.exists()
    assert keep.exists()
    assert (stats["expired"], stats["deleted"], stats["failed"]) == (2, 2, 0)
    assert stats["failures"] == {}


def test_one_failure_does_not_stop_the_batch(tmp_path, monkeypatch):
    bad = _day(tmp_path, "acme/dev1/2020/1/1")
    good = _day(tmp_path, "acme/dev1/2020/1/2")
    real_rmtree = shutil.rmtree

    def flaky_rmtree(path, *a, **k):
        if str(path) == str(bad):
            raise PermissionError(13, "Permission denied", str(path))
        return real_rmtree(path, *a, **k)

    monkeypatch.setattr(maintenance.shutil, "rmtree", flaky_rmtree)
    stats = delete_expired(iter([bad, good]))
    assert bad.exists()
    assert not good.exists()
    assert stats["failed"] == 1 and stats["deleted"] == 1
    assert "Permission denied" in stats["failures"][str(bad)]


def test_already_removed_path_counts_as_deleted(tmp_path):
    stats = delete_expired([tmp_path / "gone"])
    assert stats["deleted"] == 1 and stats["failed"] == 0


def test_file_at_day_position_is_unlinked(tmp_path):
    f = tmp_path / "acme" / "dev1" / "2020" / "1" / "1"
    f.parent.mkdir(parents=True)
    f.write_text("stray")
    stats = delete_expired([f])
    assert not f.exists()
    assert stats["deleted"] == 1


def test_dry_run_touches_nothing(tmp_path):
    a = _day(tmp_path, "acme/dev1/2020/1/1")
    stats = delete_expired([a], dry_run=True)
    assert a.exists()
    assert stats["expired"] == 1 and stats["skipped"] == 1 and stats["deleted"] == 0
