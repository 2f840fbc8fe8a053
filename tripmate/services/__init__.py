"""
Application services for business logic.

This module contains the ingestion pipeline, asset uploads, item/trip
deletion with asset cleanup and the download proxy.
"""

from tripmate.services.asset_uploads import StoredAsset, store_asset, validate_upload
from tripmate.services.download_proxy import (
    AssetCache,
    DownloadProxy,
    FetchedAsset,
    fetch_asset,
)
from tripmate.services.ingestion import (
    BatchOutcome,
    BatchSummary,
    IngestionError,
    IngestionStage,
    ItemIngestionPipeline,
    SelectedFile,
)
from tripmate.services.item_lifecycle import (
    TripDeleteResult,
    delete_item_with_assets,
    delete_trip_cascade,
    find_orphaned_assets,
    sweep_orphaned_assets,
)

__all__ = [
    # Uploads
    "StoredAsset",
    "store_asset",
    "validate_upload",
    # Download proxy
    "AssetCache",
    "DownloadProxy",
    "FetchedAsset",
    "fetch_asset",
    # Ingestion
    "BatchOutcome",
    "BatchSummary",
    "IngestionError",
    "IngestionStage",
    "ItemIngestionPipeline",
    "SelectedFile",
    # Lifecycle
    "TripDeleteResult",
    "delete_item_with_assets",
    "delete_trip_cascade",
    "find_orphaned_assets",
    "sweep_orphaned_assets",
]
