"""Catalog persistence on ibis backends."""

from docmirror.core.catalog import CatalogStore

__all__ = ["CatalogStore"]
