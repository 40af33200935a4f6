"""Tests for the command line interface."""

import pytest
from typer.testing import CliRunner

from photoshelf import __version__
from photoshelf.cli.main import app
from photoshelf.core.archive import PhotoArchive
from photoshelf.core.config import Config

runner = CliRunner()


@pytest.fixture
def archive(tmp_path):
    archive = PhotoArchive(Config(data_dir=tmp_path))
    archive.create_photo({
        "id": "p1",
        "filename": "beach.jpg",
        "tags": ["beach"],
        "dateTaken": "2019-07-01T10:00:00.000Z",
        "dateTakenPrecision": "exact",
    })
    archive.create_photo({"id": "p2", "filename": "scan.jpg"})
    return archive


class TestCli:
    """Tests for the CLI commands."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_list(self, tmp_path, archive):
        result = runner.invoke(app, ["list", "--data-dir", str(tmp_path), "--tags", "beach"])
        assert result.exit_code == 0, result.output
        assert "beach.jpg" in result.output
        assert "scan.jpg" not in result.output

    def test_list_invalid_precision(self, tmp_path, archive):
        result = runner.invoke(app, ["list", "--data-dir", str(tmp_path), "--precision", "century"])
        assert result.exit_code == 1

    def test_stats(self, tmp_path, archive):
        result = runner.invoke(app, ["stats", "--data-dir", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "2 photos" in result.output

    @pytest.mark.parametrize(
        "args, date_taken, precision",
        [
            (["--decade", "1980"], "1985-06-15T12:00:00.000Z", "decade"),
            (["--year", "1995"], "1995-06-15T12:00:00.000Z", "year"),
            (["--year", "1995", "--month", "3"], "1995-03-15T12:00:00.000Z", "month"),
            (["--year", "1995", "--month", "3", "--day", "2"], "1995-03-02T12:00:00.000Z", "day"),
        ],
    )
    def test_set_date(self, tmp_path, archive, args, date_taken, precision):
        result = runner.invoke(app, ["set-date", "p2", "--data-dir", str(tmp_path), *args])

        assert result.exit_code == 0, result.output
        photo = archive.get_photo("p2")
        assert photo.date_taken == date_taken
        assert photo.date_taken_precision.value == precision

    def test_set_date_requires_year(self, tmp_path, archive):
        result = runner.invoke(app, ["set-date", "p2", "--data-dir", str(tmp_path), "--month", "3"])
        assert result.exit_code != 0

    def test_set_date_missing_photo(self, tmp_path, archive):
        result = runner.invoke(app, ["set-date", "nope", "--data-dir", str(tmp_path), "--year", "2000"])
        assert result.exit_code == 1

    def test_extract(self, tmp_path, camera_jpeg):
        images = tmp_path / "images"
        images.mkdir()
        camera_jpeg(images / "IMG_1.jpg")

        result = runner.invoke(app, ["extract", "--data-dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "Processed 1 of 1 images" in result.output
        assert PhotoArchive(Config(data_dir=tmp_path)).all_photos()[0].filename == "IMG_1.jpg"
