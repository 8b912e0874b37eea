"""Name canonicalization shared by catalog lookups and filename guessing.

Manufacturer names, film names and aliases are all compared through
``normalize`` so that ``"Kodak Tri-X 400"``, ``"kodaktrix400"`` and
``"KODAK_TRIX_400"`` collapse to the same key.
"""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

# ============================================================================
# Regex Patterns
# ============================================================================

# Anything outside ASCII letters and digits. Non-ASCII letters are dropped too;
# no Unicode folding is attempted.
NON_ALPHANUMERIC_RE = re.compile(r"[^a-zA-Z0-9]")

# Bundled artwork stems look like "<manufacturer>_<filmname>"; the film part may
# contain further underscores.
BUNDLED_STEM_SEPARATOR = "_"


# ============================================================================
# Normalization
# ============================================================================


def strip_non_alphanumeric(value: Optional[str]) -> str:
    """Drop every character that is not an ASCII letter or digit.

    Examples:
        >>> strip_non_alphanumeric('Tri-X 400')
        'TriX400'
    """
    if not value:
        return ""
    return NON_ALPHANUMERIC_RE.sub("", value)


def normalize(value: Optional[str]) -> str:
    """Canonical comparison key: ASCII alphanumerics only, lowercased.

    Examples:
        >>> normalize('Kodak Tri-X 400')
        'kodaktrix400'
        >>> normalize('KODAK_TRIX_400')
        'kodaktrix400'
    """
    return strip_non_alphanumeric(value).lower()


def slugify_film_name(film_name: Optional[str]) -> str:
    """Identifier prefix used for stored user photos."""
    return normalize(film_name)


def capitalize_first(value: str) -> str:
    """First letter upper, the rest lower (``"pro400H"`` -> ``"Pro400h"``)."""
    if not value:
        return value
    return value[:1].upper() + value[1:].lower()


# ============================================================================
# Bundled filename helpers
# ============================================================================


def casing_permutations(manufacturer: str, film_name: str) -> List[str]:
    """Ordered bundled-stem guesses for a (manufacturer, film) pair.

    Bundled artwork was authored with inconsistent casing, so resolution probes
    these in a fixed order and takes the first that exists. The order must not
    change without re-checking every bundled asset.

    Examples:
        >>> casing_permutations('Kodak', 'Tri-X 400')[:3]
        ['kodak_trix400', 'kodak_Trix400', 'kodak_TRIX400']
    """
    mfr = strip_non_alphanumeric(manufacturer)
    film = strip_non_alphanumeric(film_name)
    mfr_lower = mfr.lower()
    mfr_cap = capitalize_first(mfr)
    ordered = [
        (mfr_lower, film.lower()),
        (mfr_lower, capitalize_first(film)),
        (mfr_lower, film.upper()),
        (mfr_lower, film),
        (mfr_cap, film.lower()),
        (mfr_cap, capitalize_first(film)),
        (mfr_cap, film.upper()),
    ]
    stems: List[str] = []
    for mfr_part, film_part in ordered:
        stem = f"{mfr_part}{BUNDLED_STEM_SEPARATOR}{film_part}"
        if stem not in stems:
            stems.append(stem)
    return stems


def split_bundled_stem(stem: str) -> Optional[Tuple[str, str]]:
    """Split ``"<manufacturer>_<film>"`` at the first underscore only.

    Examples:
        >>> split_bundled_stem('kodak_portra_400')
        ('kodak', 'portra_400')
        >>> split_bundled_stem('nounderscore') is None
        True
    """
    manufacturer, sep, film = stem.partition(BUNDLED_STEM_SEPARATOR)
    if not sep or not manufacturer or not film:
        return None
    return manufacturer, film
