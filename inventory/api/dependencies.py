"""Dependency injection for the API routers."""

from fastapi import Depends, Request

from inventory.services.catalog_service import CatalogService
from inventory.services.provider import InventoryProvider


def get_provider(request: Request) -> InventoryProvider:
    """Get the provider built at application startup."""
    return request.app.state.provider


def get_catalog_service(
    provider: InventoryProvider = Depends(get_provider)
) -> CatalogService:
    """Get a catalog service bound to the shared provider."""
    return CatalogService(provider)
