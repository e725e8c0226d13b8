from __future__ import annotations

import pandas as pd

from .models import BrowseItem, SortOption, VenueCatalogEntry, VenueFilter
from .scoring import WaitLookup, catalog_frame

# Venues with no current estimate sort after every venue that has one.
_NO_WAIT_SENTINEL = float("inf")


def _filter_mask(df: pd.DataFrame, venue_filter: VenueFilter) -> pd.Series:
    mask = pd.Series(True, index=df.index)

    if venue_filter.cuisines:
        wanted = {c.strip().lower() for c in venue_filter.cuisines}
        mask = mask & df["cuisines_list"].apply(lambda cl: bool(wanted & set(cl)))

    if venue_filter.price_tiers:
        mask = mask & df["price_tier"].isin(venue_filter.price_tiers)

    if venue_filter.open_only:
        mask = mask & df["is_open"].astype(bool)

    if venue_filter.min_rating > 0:
        mask = mask & (df["rating"] >= venue_filter.min_rating)

    if venue_filter.max_wait_minutes is not None:
        limit = venue_filter.max_wait_minutes
        mask = mask & df["current_wait"].apply(lambda w: w is None or pd.isna(w) or w <= limit)

    return mask


def _sorted(df: pd.DataFrame, option: SortOption) -> pd.DataFrame:
    if option is SortOption.rating:
        return df.sort_values("rating", ascending=False, kind="mergesort")
    if option is SortOption.review_count:
        return df.sort_values("review_count", ascending=False, kind="mergesort")
    if option is SortOption.wait_time:
        keyed = df.assign(
            _wait_key=df["current_wait"].apply(
                lambda w: _NO_WAIT_SENTINEL if w is None or pd.isna(w) else float(w)
            )
        )
        return keyed.sort_values("_wait_key", ascending=True, kind="mergesort")
    if option is SortOption.price_level:
        return df.sort_values("price_tier", ascending=True, kind="mergesort")
    if option is SortOption.alphabetical:
        return df.sort_values("name", ascending=True, kind="mergesort", key=lambda s: s.str.lower())
    raise ValueError(f"Unsupported sort option: {option!r}")


def browse_venues(
    catalog: list[VenueCatalogEntry],
    venue_filter: VenueFilter,
    option: SortOption,
    wait_lookup: WaitLookup,
) -> list[BrowseItem]:
    """Filter then sort *catalog*. Sorting is stable, so equal keys keep catalog order."""
    if not catalog:
        return []

    df = catalog_frame(catalog, wait_lookup)
    df = _sorted(df.loc[_filter_mask(df, venue_filter)], option)

    items: list[BrowseItem] = []
    for pos in df.index:
        wait = df.at[pos, "current_wait"]
        items.append(BrowseItem(
            venue=catalog[pos],
            current_wait=int(wait) if wait is not None and pd.notna(wait) else None,
        ))
    return items


def filter_venues(
    catalog: list[VenueCatalogEntry],
    venue_filter: VenueFilter,
    wait_lookup: WaitLookup,
) -> list[VenueCatalogEntry]:
    if not catalog:
        return []
    df = catalog_frame(catalog, wait_lookup)
    return [catalog[pos] for pos in df.index[_filter_mask(df, venue_filter).to_numpy()]]


def sort_venues(
    catalog: list[VenueCatalogEntry],
    option: SortOption,
    wait_lookup: WaitLookup,
) -> list[VenueCatalogEntry]:
    if not catalog:
        return []
    df = catalog_frame(catalog, wait_lookup)
    return [catalog[pos] for pos in _sorted(df, option).index]
