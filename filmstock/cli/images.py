"""CLI for resolving, storing and cropping film photos."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from filmstock.film_lib import config as config_mod, log as log_mod
from filmstock.film_lib.bootstrap import copy_default_images_to_shared
from filmstock.film_lib.crop import Rect, Size, crop_capture, render_square
from filmstock.film_lib.errors import StorageWriteFailed
from filmstock.film_lib.image_source import ImageSource
from filmstock.film_lib.imaging import encode_jpeg, open_image
from filmstock.film_lib.resolver import app_resolver, shared_container_resolver
from filmstock.film_lib.store import ImageStore
from filmstock.film_lib.stores import FlagStore

app = typer.Typer(help="Film photo resolution, storage and cropping.")

LOG_LEVEL_OPTION = typer.Option("INFO", "--log-level", help="Logging level")
DATA_ROOT_OPTION = typer.Option(None, "--data-root", help="Directory holding UserImages/ and state.json")
BUNDLE_OPTION = typer.Option(None, "--bundle-dir", help="Flat directory of bundled <manufacturer>_<film>.png")
SHARED_OPTION = typer.Option(None, "--shared-container", help="Shared container mirrored for the widget")


def _setup(
    log_level: str,
    data_root: Optional[Path],
    bundle_dir: Optional[Path],
    shared_container: Optional[Path],
) -> config_mod.AppConfig:
    log_mod.setup_logging(log_level)
    return config_mod.load_config(
        data_root=data_root,
        bundle_dir=bundle_dir,
        shared_container=shared_container,
    )


def _store(cfg: config_mod.AppConfig, logger: logging.Logger) -> ImageStore:
    return ImageStore(cfg.user_images_dir, cfg.shared_user_images_dir, logger=logger)


def _parse_source(value: str) -> ImageSource:
    try:
        return ImageSource(value.strip().lower())
    except ValueError as exc:
        valid = ", ".join(source.value for source in ImageSource)
        raise typer.BadParameter(f"Unknown image source {value!r} (expected one of: {valid})") from exc


@app.command()
def resolve(
    manufacturer: str = typer.Argument(..., help="Manufacturer as typed by the user"),
    film_name: str = typer.Argument(..., help="Film name as typed by the user"),
    source: str = typer.Option("auto", "--source", help="custom | catalog | auto | none"),
    image_name: Optional[str] = typer.Option(None, "--image-name", help="Stored identifier or bundled stem"),
    widget: bool = typer.Option(False, "--widget", help="Resolve against the shared-container copies"),
    log_level: str = LOG_LEVEL_OPTION,
    data_root: Optional[Path] = DATA_ROOT_OPTION,
    bundle_dir: Optional[Path] = BUNDLE_OPTION,
    shared_container: Optional[Path] = SHARED_OPTION,
) -> None:
    """Print the asset a film's picture resolves to."""
    cfg = _setup(log_level, data_root, bundle_dir, shared_container)
    logger = logging.getLogger("cli.resolve")
    if widget:
        try:
            resolver = shared_container_resolver(cfg, logger=logger)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    else:
        resolver = app_resolver(cfg, _store(cfg, logger), logger=logger)
    reference = resolver.resolve(manufacturer, film_name, _parse_source(source), image_name)
    if reference is None:
        typer.echo("No image (placeholder)")
        raise typer.Exit(code=1)
    typer.echo(f"{reference.origin.value}\t{reference.namespace}\t{reference.identifier}\t{reference.path}")


@app.command()
def save(
    image_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Photo to store"),
    manufacturer: str = typer.Argument(...),
    film_name: str = typer.Argument(...),
    log_level: str = LOG_LEVEL_OPTION,
    data_root: Optional[Path] = DATA_ROOT_OPTION,
    shared_container: Optional[Path] = SHARED_OPTION,
) -> None:
    """Store a photo for a film and print its identifier."""
    cfg = _setup(log_level, data_root, None, shared_container)
    logger = logging.getLogger("cli.save")
    image = open_image(image_path)
    if image is None:
        raise typer.BadParameter(f"{image_path} is not a readable image")
    try:
        identifier = _store(cfg, logger).save(image, manufacturer, film_name)
    except StorageWriteFailed as exc:
        typer.echo(f"Couldn't save photo: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(identifier)


@app.command()
def crop(
    image_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Captured photo"),
    output: Path = typer.Argument(..., dir_okay=False, help="Where to write the cropped JPEG"),
    viewport: str = typer.Option(..., "--viewport", help="Preview size as WxH"),
    selection: str = typer.Option(..., "--selection", help="Selection in preview points as X,Y,W,H"),
    square: Optional[int] = typer.Option(None, "--square", min=1, help="Resample to an NxN square"),
    log_level: str = LOG_LEVEL_OPTION,
) -> None:
    """Crop a captured photo to a selection drawn over its aspect-fill preview."""
    log_mod.setup_logging(log_level)
    logger = logging.getLogger("cli.crop")
    viewport_size = Size(*_parse_numbers(viewport, "x", 2, "--viewport"))
    selection_rect = Rect(*_parse_numbers(selection, ",", 4, "--selection"))
    image = open_image(image_path)
    if image is None:
        raise typer.BadParameter(f"{image_path} is not a readable image")
    outcome = crop_capture(image, viewport_size, selection_rect)
    result = outcome.image
    if square:
        result = render_square(result, square)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(encode_jpeg(result))
    if outcome.cropped:
        rect = outcome.rect
        logger.info("Cropped to x=%.1f y=%.1f w=%.1f h=%.1f", rect.x, rect.y, rect.width, rect.height)
    else:
        logger.warning("Selection produced an empty crop; wrote the uncropped photo")
    typer.echo(str(output))


@app.command("list")
def list_images(
    log_level: str = LOG_LEVEL_OPTION,
    data_root: Optional[Path] = DATA_ROOT_OPTION,
) -> None:
    """List stored photos by manufacturer, then identifier."""
    cfg = _setup(log_level, data_root, None, None)
    store = _store(cfg, logging.getLogger("cli.list"))
    count = 0
    for stored in store.list_all():
        image = stored.open()
        size = f"{image.width}x{image.height}" if image is not None else "unreadable"
        typer.echo(f"{stored.manufacturer}\t{stored.identifier}\t{size}")
        count += 1
    if not count:
        typer.echo("No stored photos.")


@app.command()
def delete(
    manufacturer: str = typer.Argument(...),
    identifier: str = typer.Argument(...),
    log_level: str = LOG_LEVEL_OPTION,
    data_root: Optional[Path] = DATA_ROOT_OPTION,
    shared_container: Optional[Path] = SHARED_OPTION,
) -> None:
    """Delete a stored photo and its widget mirror."""
    cfg = _setup(log_level, data_root, None, shared_container)
    removed = _store(cfg, logging.getLogger("cli.delete")).delete(identifier, manufacturer)
    typer.echo("Deleted" if removed else "Not found")


@app.command()
def bootstrap(
    force: bool = typer.Option(False, "--force", help="Copy even if the one-time flag is set"),
    log_level: str = LOG_LEVEL_OPTION,
    data_root: Optional[Path] = DATA_ROOT_OPTION,
    bundle_dir: Optional[Path] = BUNDLE_OPTION,
    shared_container: Optional[Path] = SHARED_OPTION,
) -> None:
    """Copy bundled artwork and the catalog into the shared container once."""
    cfg = _setup(log_level, data_root, bundle_dir, shared_container)
    summary = copy_default_images_to_shared(
        cfg,
        FlagStore(cfg.state_path),
        logger=logging.getLogger("cli.bootstrap"),
        force=force,
    )
    if not summary.ran:
        typer.echo(f"Skipped ({summary.skipped_reason})")
        return
    typer.echo(
        f"Copied {summary.copied} image(s) for {len(summary.manufacturers)} manufacturer(s); "
        f"catalog={'yes' if summary.catalog_copied else 'no'}"
    )


def _parse_numbers(value: str, separator: str, count: int, option: str) -> list[float]:
    parts = [p.strip() for p in value.lower().split(separator)]
    if len(parts) != count:
        raise typer.BadParameter(f"{option} expects {count} values separated by {separator!r}")
    try:
        return [float(p) for p in parts]
    except ValueError as exc:
        raise typer.BadParameter(f"{option} has a non-numeric value: {value}") from exc


def run() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    run()
