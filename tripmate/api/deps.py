"""
FastAPI dependencies for dependency injection.

Provides database sessions and the ingestion pipeline.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from tripmate.database import get_db
from tripmate.services.ingestion import ItemIngestionPipeline


# ─────────────────────────────────────────────────────────────────────────────
# Database Session
# ─────────────────────────────────────────────────────────────────────────────

# Type alias for cleaner dependency injection
DbSession = Annotated[Session, Depends(get_db)]


# ─────────────────────────────────────────────────────────────────────────────
# Ingestion Pipeline
# ─────────────────────────────────────────────────────────────────────────────

def get_ingestion_pipeline(db: DbSession) -> ItemIngestionPipeline:
    """
    Dependency to get an ingestion pipeline bound to the request session.

    Returns:
        ItemIngestionPipeline with the default classifier and asset store
    """
    return ItemIngestionPipeline(db)


IngestionPipeline = Annotated[ItemIngestionPipeline, Depends(get_ingestion_pipeline)]
