"""One-time copy of bundled artwork and the catalog into the shared container."""
from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .bundle import BundleLibrary
from .config import AppConfig
from .stores.flag_store import FlagStore

# Bump the suffix whenever the copy logic changes; the old name moves to
# RETIRED_BOOTSTRAP_FLAGS so existing installs run the copy again.
BOOTSTRAP_FLAG = "hasCopiedDefaultImagesToAppGroup_v2"
RETIRED_BOOTSTRAP_FLAGS: Sequence[str] = ("hasCopiedDefaultImagesToAppGroup",)


@dataclass
class BootstrapSummary:
    ran: bool
    copied: int = 0
    manufacturers: List[str] = field(default_factory=list)
    catalog_copied: bool = False
    skipped_reason: Optional[str] = None


def copy_default_images_to_shared(
    cfg: AppConfig,
    flags: FlagStore,
    *,
    logger: Optional[logging.Logger] = None,
    force: bool = False,
) -> BootstrapSummary:
    """Copy bundled PNGs to ``<shared>/DefaultImages/<manufacturer>/``.

    Runs at most once per install (``BOOTSTRAP_FLAG``). Copies overwrite, so an
    interrupted run is finished by the next one; the flag is only set after
    everything has been copied.
    """
    logger = logger or logging.getLogger(__name__)
    retired = flags.clear(RETIRED_BOOTSTRAP_FLAGS)
    if retired:
        logger.info("Cleared %d retired bootstrap flag(s)", retired)
    if flags.is_set(BOOTSTRAP_FLAG) and not force:
        return BootstrapSummary(ran=False, skipped_reason="already_done")
    if cfg.shared_container is None:
        logger.debug("No shared container configured; skipping default image copy")
        return BootstrapSummary(ran=False, skipped_reason="no_shared_container")

    destination_root = cfg.shared_default_images_dir
    destination_root.mkdir(parents=True, exist_ok=True)
    summary = BootstrapSummary(ran=True)
    seen = set()
    for asset in BundleLibrary(cfg.bundle_dir).iter_assets():
        target = destination_root / asset.manufacturer / asset.path.name
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(asset.path, target)
        summary.copied += 1
        if asset.manufacturer not in seen:
            seen.add(asset.manufacturer)
            summary.manufacturers.append(asset.manufacturer)

    if cfg.catalog_path.is_file():
        shutil.copy2(cfg.catalog_path, cfg.shared_catalog_path)
        summary.catalog_copied = True
    else:
        logger.warning("Catalog %s missing; widget will fall back to filename guessing", cfg.catalog_path)

    flags.set(BOOTSTRAP_FLAG)
    logger.info(
        "Copied %d default image(s) for %d manufacturer(s) into %s",
        summary.copied,
        len(summary.manufacturers),
        destination_root,
    )
    return summary
