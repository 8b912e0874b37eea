"""Map a film's (manufacturer, name, image source, image name) to an image asset.

Three tiers are consulted depending on the film's ``ImageSource``:

* ``CUSTOM``: a user photo in the ``ImageStore``.
* ``CATALOG``: a bundled artwork stem the user picked explicitly.
* ``AUTO_DETECTED``: bundled artwork found through the alias catalog, or by
  guessing the bundled filename when the catalog has no entry.

Resolution never raises; a missing asset is ``None`` and callers draw a
placeholder.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from PIL import Image

from .bundle import BundleLibrary
from .catalog import AliasCatalog, LazyCatalog
from .config import AppConfig
from .image_source import FilmImageRecord, ImageSource
from .names import casing_permutations, split_bundled_stem
from .store import ImageStore

NAMESPACE_SEPARATOR = "/"


class AssetOrigin(Enum):
    BUNDLE_DEFAULT = "bundle_default"
    USER_CAPTURED = "user_captured"
    USER_SELECTED_FROM_CATALOG = "user_selected_from_catalog"


@dataclass(frozen=True)
class AssetReference:
    namespace: str
    identifier: str
    origin: AssetOrigin
    path: Path


class AssetResolver:
    def __init__(
        self,
        catalog: Union[AliasCatalog, LazyCatalog],
        bundle: BundleLibrary,
        store: ImageStore,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._catalog = catalog
        self.bundle = bundle
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    @property
    def catalog(self) -> AliasCatalog:
        if isinstance(self._catalog, LazyCatalog):
            return self._catalog.get()
        return self._catalog

    def resolve(
        self,
        manufacturer: str,
        film_name: str,
        image_source: ImageSource,
        image_name: Optional[str] = None,
    ) -> Optional[AssetReference]:
        if image_source is ImageSource.NONE:
            return None
        if image_source is ImageSource.CUSTOM:
            return self._resolve_custom(manufacturer, image_name)
        if image_source is ImageSource.CATALOG:
            return self._resolve_catalog(image_name)
        return self._resolve_auto(manufacturer, film_name)

    def resolve_record(self, record: FilmImageRecord) -> Optional[AssetReference]:
        return self.resolve(record.manufacturer, record.name, record.image_source, record.image_name)

    def open(self, reference: Optional[AssetReference]) -> Optional[Image.Image]:
        if reference is None:
            return None
        if reference.origin is AssetOrigin.USER_CAPTURED:
            return self.store.load(reference.identifier, reference.namespace)
        return self.bundle.load(reference.identifier)

    def _resolve_custom(self, manufacturer: str, image_name: Optional[str]) -> Optional[AssetReference]:
        if not image_name:
            return None
        namespace, identifier = split_custom_image_name(image_name, manufacturer)
        if not self.store.exists(identifier, namespace):
            self.logger.debug("User photo %s/%s not found", namespace, identifier)
            return None
        return AssetReference(
            namespace=namespace,
            identifier=identifier,
            origin=AssetOrigin.USER_CAPTURED,
            path=self.store.path_for(identifier, namespace),
        )

    def _resolve_catalog(self, stem: Optional[str]) -> Optional[AssetReference]:
        if not stem:
            return None
        return self._bundled(stem, AssetOrigin.USER_SELECTED_FROM_CATALOG)

    def _resolve_auto(self, manufacturer: str, film_name: str) -> Optional[AssetReference]:
        match = self.catalog.find(manufacturer, film_name)
        if match is not None:
            catalog_name = match.manufacturer.name
            for prefix in (catalog_name, catalog_name.lower()):
                reference = self._bundled(f"{prefix}_{match.film.filename}", AssetOrigin.BUNDLE_DEFAULT)
                if reference is not None:
                    return reference
            self.logger.debug(
                "Catalog matched %s/%s but no bundled asset exists; guessing filenames",
                manufacturer,
                film_name,
            )
        # TODO: drop the casing probe once bundled filenames are normalized to lower_lower.
        for stem in casing_permutations(manufacturer, film_name):
            reference = self._bundled(stem, AssetOrigin.BUNDLE_DEFAULT)
            if reference is not None:
                return reference
        return None

    def _bundled(self, stem: str, origin: AssetOrigin) -> Optional[AssetReference]:
        if not self.bundle.exists(stem):
            return None
        parts = split_bundled_stem(stem)
        return AssetReference(
            namespace=parts[0] if parts else "",
            identifier=stem,
            origin=origin,
            path=self.bundle.path_for(stem),
        )


def split_custom_image_name(image_name: str, default_manufacturer: str) -> tuple[str, str]:
    """Split ``"<manufacturer>/<identifier>"``; plain names use the default."""
    namespace, sep, identifier = image_name.partition(NAMESPACE_SEPARATOR)
    if sep and namespace and identifier:
        return namespace, identifier
    return default_manufacturer, image_name


def app_resolver(cfg: AppConfig, store: ImageStore, *, logger: Optional[logging.Logger] = None) -> AssetResolver:
    """Resolver over the app bundle and the primary user-photo tree."""
    return AssetResolver(
        LazyCatalog(cfg.catalog_path, logger=logger),
        BundleLibrary(cfg.bundle_dir),
        store,
        logger=logger,
    )


def shared_container_resolver(cfg: AppConfig, *, logger: Optional[logging.Logger] = None) -> AssetResolver:
    """Resolver over the shared-container copies, as the widget process sees them."""
    if cfg.shared_container is None:
        raise ValueError("shared_container is not configured")
    return AssetResolver(
        LazyCatalog(cfg.shared_catalog_path, logger=logger),
        BundleLibrary(cfg.shared_default_images_dir, grouped=True),
        ImageStore(cfg.shared_user_images_dir, logger=logger),
        logger=logger,
    )
