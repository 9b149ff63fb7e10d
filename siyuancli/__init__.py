"""Operations for a SiYuan note server: notebooks, documents, blocks, search, tags, assets, sync, history, favourites, export and import."""

__version__ = "0.1.0"

__all__ = [
    "assets",
    "blocks",
    "docops",
    "documents",
    "exporting",
    "favorites",
    "importing",
    "models",
    "notebooks",
    "output",
    "query",
    "search",
    "syncing",
    "tags",
]