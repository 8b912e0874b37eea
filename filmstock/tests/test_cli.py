"""Smoke tests for the images CLI."""
from __future__ import annotations

from pathlib import Path

from PIL import Image
from typer.testing import CliRunner

from filmstock.cli.images import app

runner = CliRunner()


def _photo(path: Path, size=(40, 80)) -> Path:
    Image.new("RGB", size, (30, 60, 90)).save(path, format="JPEG")
    return path


def _last_line(result) -> str:
    return result.stdout.strip().splitlines()[-1]


def test_save_list_delete(tmp_path):
    photo = _photo(tmp_path / "capture.jpg")
    data_root = tmp_path / "data"
    shared = tmp_path / "shared"
    common = ["--data-root", str(data_root), "--log-level", "WARNING"]

    saved = runner.invoke(app, ["save", str(photo), "Kodak", "Gold 200", *common, "--shared-container", str(shared)])
    assert saved.exit_code == 0, saved.output
    identifier = _last_line(saved)
    assert identifier.startswith("gold200_")
    assert (shared / "UserImages" / "Kodak" / f"{identifier}.jpg").is_file()

    listed = runner.invoke(app, ["list", *common])
    assert listed.exit_code == 0, listed.output
    assert f"Kodak\t{identifier}\t40x80" in listed.stdout

    deleted = runner.invoke(app, ["delete", "Kodak", identifier, *common, "--shared-container", str(shared)])
    assert _last_line(deleted) == "Deleted"
    assert not (shared / "UserImages" / "Kodak").exists()


def test_resolve_placeholder_exit_code(tmp_path):
    result = runner.invoke(
        app,
        [
            "resolve", "Rollei", "RPX 25",
            "--data-root", str(tmp_path / "data"),
            "--bundle-dir", str(tmp_path / "images"),
            "--log-level", "WARNING",
        ],
    )
    assert result.exit_code == 1
    assert "No image (placeholder)" in result.stdout


def test_crop_writes_jpeg(tmp_path):
    photo = _photo(tmp_path / "capture.jpg", size=(200, 400))
    output = tmp_path / "out" / "cropped.jpg"
    result = runner.invoke(
        app,
        [
            "crop", str(photo), str(output),
            "--viewport", "100x100",
            "--selection", "25,25,50,50",
            "--log-level", "WARNING",
        ],
    )
    assert result.exit_code == 0, result.output
    with Image.open(output) as img:
        assert img.format == "JPEG"
        assert img.size == (100, 100)


def test_crop_rejects_bad_viewport(tmp_path):
    photo = _photo(tmp_path / "capture.jpg")
    result = runner.invoke(
        app,
        ["crop", str(photo), str(tmp_path / "o.jpg"), "--viewport", "100", "--selection", "0,0,1,1"],
    )
    assert result.exit_code != 0
