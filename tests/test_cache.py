"""Tests for the node-id keyed image cache."""

import shutil
from pathlib import Path

import pytest

from parity.cache import ImageCache
from parity.errors import ImageDownloadError
from parity.utils import cache_key_for

from conftest import FakeResponse, FakeSession


@pytest.fixture
def image_session():
    return FakeSession(
        {
            "https://img/a.png": FakeResponse(content=b"first"),
            "https://img/b.png": FakeResponse(content=b"second"),
            "https://img/gone.png": FakeResponse(403, reason="Forbidden"),
        }
    )


class TestCacheKey:
    def test_replaces_unsafe_characters(self):
        assert cache_key_for("12:34") == "12_34"
        assert cache_key_for("I1:2;3/4") == "I1_2_3_4"

    def test_rejects_empty_key(self):
        with pytest.raises(ValueError):
            cache_key_for("")


class TestImageCache:
    @pytest.mark.asyncio
    async def test_miss_downloads_and_persists(self, tmp_path, image_session):
        cache = ImageCache(tmp_path / "nested" / "cache", session=image_session)

        path = await cache.resolve("1:2", "https://img/a.png")

        assert path == tmp_path / "nested" / "cache" / "1_2.png"
        assert path.read_bytes() == b"first"
        assert len(image_session.calls) == 1
        assert image_session.calls[0]["headers"] == {}

    @pytest.mark.asyncio
    async def test_hit_skips_network_even_if_url_changes(self, tmp_path, image_session):
        cache = ImageCache(tmp_path, session=image_session)
        await cache.resolve("1:2", "https://img/a.png")

        path = await cache.resolve("1:2", "https://img/b.png")

        assert len(image_session.calls) == 1
        # Stale by design: the key, not the URL, names the file.
        assert path.read_bytes() == b"first"

    @pytest.mark.asyncio
    async def test_failed_download_raises_and_writes_nothing(self, tmp_path, image_session):
        cache = ImageCache(tmp_path / "cache", session=image_session)

        with pytest.raises(ImageDownloadError) as excinfo:
            await cache.resolve("9:9", "https://img/gone.png")

        assert excinfo.value.status_code == 403
        assert not cache.path_for("9:9").exists()

    def test_extension_follows_configuration(self, tmp_path):
        cache = ImageCache(tmp_path, extension=".svg", session=FakeSession())

        assert cache.path_for("1:1").name == "1_1.svg"

    @pytest.mark.asyncio
    async def test_clear_removes_directory_and_is_idempotent(self, tmp_path, image_session):
        cache = ImageCache(tmp_path / "cache", session=image_session)
        await cache.resolve("1:2", "https://img/a.png")

        cache.clear()
        assert not (tmp_path / "cache").exists()
        cache.clear()

    def test_close_leaves_injected_session_open(self, tmp_path, image_session):
        ImageCache(tmp_path, session=image_session).close()

        assert not image_session.closed


class TestInterruptedWrites:
    @pytest.mark.asyncio
    async def test_short_write_is_not_served_as_a_hit(self, tmp_path, monkeypatch):
        session = FakeSession({"https://img/a.png": FakeResponse(content=b"0123456789")})
        cache = ImageCache(tmp_path, session=session)
        real_write_bytes = Path.write_bytes

        def disk_full(self, data):
            real_write_bytes(self, data[:4])
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(Path, "write_bytes", disk_full)
        with pytest.raises(OSError):
            await cache.resolve("1:2", "https://img/a.png")
        monkeypatch.setattr(Path, "write_bytes", real_write_bytes)

        assert list(tmp_path.iterdir()) == []
        path = await cache.resolve("1:2", "https://img/a.png")

        assert path.read_bytes() == b"0123456789"
        assert len(session.calls) == 2

    def test_clear_tolerates_directory_vanishing(self, tmp_path, monkeypatch):
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir()

        def already_gone(path):
            raise FileNotFoundError(path)

        monkeypatch.setattr(shutil, "rmtree", already_gone)

        ImageCache(cache_dir, session=FakeSession()).clear()
