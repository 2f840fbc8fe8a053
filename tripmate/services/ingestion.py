"""
Item ingestion pipeline.

Turns selected files into persisted trip items, one file at a time:

    SELECTED -> SIZE_VALIDATED -> COMPRESSED -> CLASSIFIED
             -> ASSET_UPLOADED -> DOCUMENT_PERSISTED -> DONE

Videos skip COMPRESSED and CLASSIFIED. A failure at any stage aborts that
file only; the batch moves on to the next one.
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from sqlalchemy.orm import Session

from tripmate.errors import TripMateError
from tripmate.gallery.messages import batch_message
from tripmate.logging_config import get_logger
from tripmate.models import TripItem
from tripmate.schemas.analysis import AIAnalysisResult
from tripmate.schemas.item import TripItemCreate
from tripmate.services.asset_uploads import (
    StoredAsset,
    is_video,
    store_asset,
    validate_upload,
)
from tripmate.storage import item_store
from tripmate.tools.extraction.image_analyzer import analyze_image
from tripmate.tools.image_processing import compress_image

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]

# Matches trip_item.name
MAX_ITEM_NAME_LENGTH = 255


class IngestionStage(str, Enum):
    SELECTED = "selected"
    SIZE_VALIDATED = "size_validated"
    COMPRESSED = "compressed"
    CLASSIFIED = "classified"
    ASSET_UPLOADED = "asset_uploaded"
    DOCUMENT_PERSISTED = "document_persisted"
    DONE = "done"


class BatchOutcome(str, Enum):
    ALL_SUCCEEDED = "all_succeeded"
    MIXED = "mixed"
    ALL_FAILED = "all_failed"


class IngestionError(TripMateError):
    """A single file failed; `stage` is the stage that was being entered."""

    def __init__(self, message: str, stage: IngestionStage, filename: str, status_code: int = 500):
        super().__init__(message, stage=stage.value, filename=filename)
        self.stage = stage
        self.filename = filename
        self.status_code = status_code


@dataclass
class SelectedFile:
    """A file picked by the user, fully read into memory."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class IngestionResult:
    item: TripItem
    asset: StoredAsset
    analysis: AIAnalysisResult | None = None
    stages: list[IngestionStage] = field(default_factory=list)


@dataclass
class FileFailure:
    filename: str
    stage: str
    error: str


@dataclass
class BatchSummary:
    """End-of-batch report. Partial failure is an outcome, not an exception."""
    total: int
    succeeded: int
    failed: int
    outcome: BatchOutcome
    message: str
    item_ids: list[str] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "outcome": self.outcome.value,
            "message": self.message,
            "itemIds": self.item_ids,
            "failures": [
                {"filename": f.filename, "stage": f.stage, "error": f.error}
                for f in self.failures
            ],
        }


def summarize_outcome(succeeded: int, failed: int) -> BatchOutcome:
    if failed == 0:
        return BatchOutcome.ALL_SUCCEEDED
    if succeeded == 0:
        return BatchOutcome.ALL_FAILED
    return BatchOutcome.MIXED


class ItemIngestionPipeline:
    """
    Sequential ingestion of selected files into one trip.

    The classifier, asset store and compressor are injectable so the
    pipeline can run against fakes.
    """

    def __init__(
        self,
        db: Session,
        analyze: Callable[[str, str], AIAnalysisResult] = analyze_image,
        store: Callable[[str, str, str, bytes], StoredAsset] = store_asset,
        compress: Callable[[bytes, str], tuple[bytes, str]] = compress_image,
    ):
        self.db = db
        self.analyze = analyze
        self.store = store
        self.compress = compress

    def _run_stage(self, stage: IngestionStage, selected: SelectedFile, step: Callable[[], Any]) -> Any:
        try:
            return step()
        except Exception as e:
            status_code = getattr(e, "status_code", 500)
            logger.warning(
                "ingestion_stage_failed",
                stage=stage.value,
                filename=selected.filename,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise IngestionError(
                getattr(e, "message", None) or str(e) or type(e).__name__,
                stage=stage,
                filename=selected.filename,
                status_code=status_code,
            ) from e

    def ingest_file(self, trip_id: str, selected: SelectedFile, created_by: str) -> IngestionResult:
        """
        Run one file through every stage and persist the resulting item.

        Raises:
            IngestionError: On failure at any stage, with `stage` set
        """
        stages = [IngestionStage.SELECTED]
        data, content_type = selected.data, selected.content_type
        video = is_video(content_type)

        self._run_stage(
            IngestionStage.SIZE_VALIDATED,
            selected,
            lambda: validate_upload(content_type, selected.size),
        )
        stages.append(IngestionStage.SIZE_VALIDATED)

        analysis = None
        if not video:
            data, content_type = self._run_stage(
                IngestionStage.COMPRESSED,
                selected,
                lambda: self.compress(selected.data, selected.content_type),
            )
            stages.append(IngestionStage.COMPRESSED)

            encoded = base64.b64encode(data).decode("ascii")
            analysis = self._run_stage(
                IngestionStage.CLASSIFIED,
                selected,
                lambda: self.analyze(encoded, content_type),
            )
            stages.append(IngestionStage.CLASSIFIED)

        asset = self._run_stage(
            IngestionStage.ASSET_UPLOADED,
            selected,
            lambda: self.store(trip_id, selected.filename, content_type, data),
        )
        stages.append(IngestionStage.ASSET_UPLOADED)

        try:
            item = self._run_stage(
                IngestionStage.DOCUMENT_PERSISTED,
                selected,
                lambda: item_store.create_item(
                    self.db,
                    trip_id,
                    self._build_item(selected, asset, analysis, created_by),
                ),
            )
        except IngestionError:
            logger.error(
                "ingestion_assets_orphaned",
                trip_id=trip_id,
                paths=sorted({asset.path, asset.thumbnail_path}),
            )
            raise
        stages.append(IngestionStage.DOCUMENT_PERSISTED)
        stages.append(IngestionStage.DONE)

        logger.info(
            "file_ingested",
            trip_id=trip_id,
            item_id=item.id,
            filename=selected.filename,
            type=item.type,
            category=item.category,
        )

        return IngestionResult(item=item, asset=asset, analysis=analysis, stages=stages)

    def _build_item(
        self,
        selected: SelectedFile,
        asset: StoredAsset,
        analysis: AIAnalysisResult | None,
        created_by: str,
    ) -> TripItemCreate:
        if asset.is_video or analysis is None:
            return TripItemCreate(
                name=selected.filename[:MAX_ITEM_NAME_LENGTH],
                category="video",
                type="memory",
                amount=0,
                description="",
                video_url=asset.url,
                storage_path=asset.path,
                created_by=created_by,
            )

        return TripItemCreate(
            name=(analysis.name or selected.filename)[:MAX_ITEM_NAME_LENGTH],
            category=analysis.category,
            type=analysis.type,
            amount=analysis.amount if analysis.type == "expense" else 0,
            description=analysis.description,
            image_url=asset.url,
            thumbnail_url=asset.thumbnail_url,
            blur_data_url=asset.blur_data_url or None,
            storage_path=asset.path,
            thumbnail_path=asset.thumbnail_path,
            created_by=created_by,
        )

    def ingest_batch(
        self,
        trip_id: str,
        files: list[SelectedFile],
        created_by: str,
        on_progress: ProgressCallback | None = None,
    ) -> BatchSummary:
        """
        Ingest files sequentially, tolerating per-file failure.

        Args:
            trip_id: Target trip
            files: Selected files in user order
            created_by: Uploading user
            on_progress: Called with (current, total) after each file

        Returns:
            BatchSummary with counts, outcome and a casual message
        """
        total = len(files)
        succeeded = 0
        item_ids: list[str] = []
        failures: list[FileFailure] = []

        logger.info("ingestion_batch_started", trip_id=trip_id, total=total)

        for index, selected in enumerate(files, start=1):
            try:
                result = self.ingest_file(trip_id, selected, created_by)
            except IngestionError as e:
                failures.append(FileFailure(selected.filename, e.stage.value, e.message))
            else:
                succeeded += 1
                item_ids.append(result.item.id)

            if on_progress is not None:
                on_progress(index, total)

        failed = len(failures)
        outcome = summarize_outcome(succeeded, failed)

        logger.info(
            "ingestion_batch_completed",
            trip_id=trip_id,
            total=total,
            succeeded=succeeded,
            failed=failed,
            outcome=outcome.value,
        )

        return BatchSummary(
            total=total,
            succeeded=succeeded,
            failed=failed,
            outcome=outcome,
            message=batch_message(outcome.value, succeeded, failed, total),
            item_ids=item_ids,
            failures=failures,
        )
