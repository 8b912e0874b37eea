"""Configuration helpers for locating image roots and the catalog."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

CATALOG_FILENAME = "manufacturers.json"
USER_IMAGES_DIRNAME = "UserImages"
DEFAULT_IMAGES_DIRNAME = "DefaultImages"
STATE_FILENAME = "state.json"


@dataclass(frozen=True)
class AppConfig:
    data_root: Path
    bundle_dir: Path
    catalog_path: Path
    user_images_dir: Path
    state_path: Path
    shared_container: Optional[Path] = None

    @property
    def shared_user_images_dir(self) -> Optional[Path]:
        if self.shared_container is None:
            return None
        return self.shared_container / USER_IMAGES_DIRNAME

    @property
    def shared_default_images_dir(self) -> Optional[Path]:
        if self.shared_container is None:
            return None
        return self.shared_container / DEFAULT_IMAGES_DIRNAME

    @property
    def shared_catalog_path(self) -> Optional[Path]:
        if self.shared_container is None:
            return None
        return self.shared_container / CATALOG_FILENAME


def detect_repo_root() -> Path:
    """Return the root of the filmstock package."""
    return Path(__file__).resolve().parents[1]


def default_data_root(repo_root: Path) -> Path:
    return repo_root.parent / "filmstock_data"


def default_bundle_dir(repo_root: Path) -> Path:
    """Bundled artwork ships next to the package as a flat directory."""
    return repo_root / "resources" / "images"


def _env_path(name: str) -> Optional[Path]:
    value = os.environ.get(name)
    if not value:
        return None
    return Path(value).expanduser()


def load_config(
    data_root: Optional[Path] = None,
    bundle_dir: Optional[Path] = None,
    catalog_path: Optional[Path] = None,
    shared_container: Optional[Path] = None,
) -> AppConfig:
    repo_root = detect_repo_root()
    resolved_data_root = Path(data_root) if data_root else (
        _env_path("FILMSTOCK_DATA_ROOT") or default_data_root(repo_root)
    )
    resolved_bundle_dir = Path(bundle_dir) if bundle_dir else (
        _env_path("FILMSTOCK_BUNDLE_DIR") or default_bundle_dir(repo_root)
    )
    resolved_catalog = Path(catalog_path) if catalog_path else resolved_bundle_dir.parent / CATALOG_FILENAME
    resolved_shared = Path(shared_container) if shared_container else _env_path("FILMSTOCK_SHARED_CONTAINER")

    user_images_dir = resolved_data_root / USER_IMAGES_DIRNAME
    user_images_dir.mkdir(parents=True, exist_ok=True)
    if resolved_shared is not None:
        resolved_shared.mkdir(parents=True, exist_ok=True)
    return AppConfig(
        data_root=resolved_data_root,
        bundle_dir=resolved_bundle_dir,
        catalog_path=resolved_catalog,
        user_images_dir=user_images_dir,
        state_path=resolved_data_root / STATE_FILENAME,
        shared_container=resolved_shared,
    )
