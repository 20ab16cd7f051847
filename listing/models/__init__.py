from listing.models.listing_spec import FilterSpec, ListingSpec, RowAction, SortColumn

__all__ = ["FilterSpec", "ListingSpec", "RowAction", "SortColumn"]
