"""Tests for catalog operations."""

import json

import pytest

from photoshelf.core.archive import PhotoArchive
from photoshelf.core.config import Config
from photoshelf.core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from photoshelf.models.photo import DatePrecision
from photoshelf.services.metadata_extractor import MetadataExtractor


@pytest.fixture
def config(tmp_path):
    config = Config(data_dir=tmp_path / "data")
    config.ensure_dirs()
    return config


@pytest.fixture
def archive(config):
    return PhotoArchive(config)


class TestConfig:
    """Tests for Config."""

    def test_defaults(self, tmp_path):
        config = Config(data_dir=tmp_path)
        assert config.images_dir == tmp_path / "images"
        assert config.data_file == tmp_path / "photos.json"
        assert config.max_page_limit == 1000

    def test_explicit_images_dir(self, tmp_path):
        config = Config(data_dir=str(tmp_path), images_dir=str(tmp_path / "pics"))
        assert config.images_dir == tmp_path / "pics"


class TestCrud:
    """Tests for create/read/update/delete."""

    def test_create_stamps_timestamps(self, archive):
        photo = archive.create_photo({"id": "p1", "filename": "a.jpg", "dateAdded": "1999-01-01T00:00:00.000Z"})
        assert photo.date_added != "1999-01-01T00:00:00.000Z"
        assert photo.date_added == photo.date_modified
        assert archive.get_photo("p1") == photo

    def test_create_without_date(self, archive):
        photo = archive.create_photo({"id": "p1", "filename": "a.jpg"})
        assert photo.date_taken
        assert photo.date_taken_precision is DatePrecision.UNKNOWN

    def test_create_requires_id_and_filename(self, archive):
        with pytest.raises(ValidationError):
            archive.create_photo({"filename": "a.jpg"})
        with pytest.raises(ValidationError):
            archive.create_photo({"id": "p1"})
        assert archive.all_photos() == []

    def test_create_duplicate_id(self, archive):
        archive.create_photo({"id": "p1", "filename": "a.jpg"})
        with pytest.raises(ConflictError):
            archive.create_photo({"id": "p1", "filename": "b.jpg"})
        assert len(archive.all_photos()) == 1

    def test_get_missing(self, archive):
        with pytest.raises(NotFoundError, match="photo not found"):
            archive.get_photo("nope")

    def test_update_shallow_merge(self, archive):
        created = archive.create_photo({"id": "p1", "filename": "a.jpg", "tags": ["x"], "people": ["Anna"]})

        updated = archive.update_photo(
            "p1",
            {"id": "hijack", "dateAdded": "1999-01-01T00:00:00.000Z", "tags": ["y", "z"]},
        )

        assert updated.id == "p1"
        assert updated.date_added == created.date_added
        assert updated.tags == ["y", "z"]
        assert updated.people == ["Anna"]
        assert updated.date_modified >= created.date_modified
        assert archive.get_photo("p1") == updated

    def test_update_keeps_unknown_keys(self, archive, config):
        archive.create_photo({"id": "p1", "filename": "a.jpg", "description": "beach"})
        archive.create_photo({"id": "p2", "filename": "b.jpg", "description": "harbour"})

        archive.update_photo("p1", {"tags": ["sea"]})

        written = {record["id"]: record for record in json.loads(config.data_file.read_text(encoding="utf-8"))}
        assert written["p1"]["description"] == "beach"
        assert written["p1"]["tags"] == ["sea"]
        assert written["p2"]["description"] == "harbour"

    def test_update_invalid_value(self, archive):
        archive.create_photo({"id": "p1", "filename": "a.jpg"})
        with pytest.raises(ValidationError):
            archive.update_photo("p1", {"width": "wide"})

    def test_update_missing(self, archive):
        with pytest.raises(NotFoundError):
            archive.update_photo("nope", {"tags": []})

    def test_set_date(self, archive):
        archive.create_photo({"id": "p1", "filename": "a.jpg"})
        photo = archive.set_date("p1", "1985-06-15T12:00:00.000Z", DatePrecision.DECADE)
        assert photo.date_taken == "1985-06-15T12:00:00.000Z"
        assert photo.date_taken_precision is DatePrecision.DECADE

    def test_delete(self, archive):
        archive.create_photo({"id": "p1", "filename": "a.jpg"})
        archive.create_photo({"id": "p2", "filename": "b.jpg"})

        archive.delete_photo("p1")

        assert [p.id for p in archive.all_photos()] == ["p2"]
        with pytest.raises(NotFoundError):
            archive.delete_photo("p1")

    def test_replace_all(self, archive):
        archive.create_photo({"id": "p1", "filename": "a.jpg"})
        assert archive.replace_all([{"id": "p9", "filename": "z.jpg"}]) == 1
        assert [p.id for p in archive.all_photos()] == ["p9"]

    def test_replace_all_drops_unreadable_records(self, archive, config):
        config.data_file.write_text(json.dumps([{"id": "broken"}]), encoding="utf-8")
        archive.all_photos()

        archive.replace_all([{"id": "p9", "filename": "z.jpg"}])

        assert [record["id"] for record in json.loads(config.data_file.read_text(encoding="utf-8"))] == ["p9"]

    def test_replace_all_invalid(self, archive):
        with pytest.raises(ValidationError, match="expected array"):
            archive.replace_all({"id": "p9"})


class TestListing:
    """Tests for list_photos paging defaults."""

    def test_limit_clamped(self, tmp_path):
        archive = PhotoArchive(Config(data_dir=tmp_path, max_page_limit=2))
        for i in range(3):
            archive.create_photo({"id": f"p{i}", "filename": f"{i}.jpg"})

        page = archive.list_photos(limit=50)

        assert page.limit == 2
        assert len(page.items) == 2
        assert page.total == 3

    def test_default_limit(self, archive):
        assert archive.list_photos().limit == 100


class TestImagePath:
    """Tests for image_path."""

    def test_resolves_inside_images_dir(self, archive, config):
        (config.images_dir / "a.jpg").write_bytes(b"x")
        assert archive.image_path("a.jpg") == (config.images_dir / "a.jpg").resolve()

    @pytest.mark.parametrize("name", ["", "   ", "../photos.json", "/etc/passwd"])
    def test_rejects_bad_names(self, archive, name):
        with pytest.raises(ValidationError):
            archive.image_path(name)

    def test_missing_file(self, archive):
        with pytest.raises(NotFoundError, match="image file not found"):
            archive.image_path("missing.jpg")


class TestExtraction:
    """Tests for extract_one and extract_all."""

    def test_extract_one_creates_then_updates(self, archive, config, camera_jpeg):
        camera_jpeg(config.images_dir / "IMG_1.jpg")

        photo, created = archive.extract_one("IMG_1.jpg")
        assert created
        assert photo.date_taken_precision is DatePrecision.EXACT

        archive.update_photo(photo.id, {"people": ["Anna"], "tags": ["Canon", "trip"]})
        again, created = archive.extract_one("IMG_1.jpg")

        assert not created
        assert again.id == photo.id
        assert again.people == ["Anna"]
        assert again.tags == ["trip"]
        assert len(archive.all_photos()) == 1

    def test_extract_all_continues_past_bad_file(self, archive, config, camera_jpeg):
        camera_jpeg(config.images_dir / "good.jpg")
        (config.images_dir / "broken.jpg").write_bytes(b"not an image")
        (config.images_dir / "notes.txt").write_text("ignored")

        seen = []
        result = archive.extract_all(progress_callback=lambda current, total, name: seen.append(name))

        assert result.total_images == 2
        assert result.processed == ["good.jpg"]
        assert [e["filename"] for e in result.errors] == ["broken.jpg"]
        assert seen == ["broken.jpg", "good.jpg"]
        # Unreadable files still get a record
        assert sorted(p.filename for p in archive.all_photos()) == ["broken.jpg", "good.jpg"]

        data = result.to_dict()
        assert data["success"] is True
        assert data["totalImages"] == 2
        assert data["message"] == "Processed 1 of 2 images, 1 failed"

    def test_extract_all_survives_extractor_crash(self, config, camera_jpeg):
        camera_jpeg(config.images_dir / "a.jpg")
        camera_jpeg(config.images_dir / "b.jpg")

        class CrashingExtractor(MetadataExtractor):
            def extract(self, image_path, filename=None):
                if image_path.name == "a.jpg":
                    raise RuntimeError("decoder exploded")
                return super().extract(image_path, filename)

        result = PhotoArchive(config, extractor=CrashingExtractor()).extract_all()

        assert result.processed == ["b.jpg"]
        assert result.errors == [{"filename": "a.jpg", "error": "decoder exploded"}]

    def test_extract_all_empty_directory(self, archive):
        result = archive.extract_all()
        assert result.total_images == 0
        assert "errors" not in result.to_dict()

    def test_extract_all_missing_directory(self, tmp_path):
        archive = PhotoArchive(Config(data_dir=tmp_path, images_dir=tmp_path / "nowhere"))
        with pytest.raises(StorageError):
            archive.extract_all()
