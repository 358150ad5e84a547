"""
Artifact publishing: processed + original upload as a two-phase operation.

Phase 1 stores the processed JPEG, phase 2 the untouched original. Both are
required for success. There is no rollback: if phase 2 fails the processed
file stays in storage and is reported in PartialPublishError so an operator
can reconcile it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from core.exceptions import PartialPublishError, PrintPrepError
from models.artifacts import Artifact, ArtifactPair
from modules.format_normalizer import extension_for
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class ArtifactPublisher:
    """Stores request artifacts in the pending folder."""

    def __init__(self, storage, pending_folder_id: str):
        """
        Args:
            storage: Object with ``create_file(data, name, mime_type, parent_id) -> Artifact``
            pending_folder_id: Folder for not-yet-paid orders
        """
        self._storage = storage
        self._pending_folder_id = pending_folder_id

    @staticmethod
    def artifact_names(order_id: str, original_media_type: str,
                       now: Optional[datetime] = None) -> tuple:
        """Names carry the order id so confirmation can find them later."""
        stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d%H%M%S%f")
        processed = f"{order_id}_processed_{stamp}.jpg"
        original = f"{order_id}_original_{stamp}.{extension_for(original_media_type)}"
        return processed, original

    def publish_pair(
        self,
        processed_data: bytes,
        original_data: bytes,
        original_media_type: str,
        order_id: str,
        log: Optional[logging.Logger] = None,
    ) -> ArtifactPair:
        """
        Upload processed then original.

        Raises:
            PublishError: Processed upload failed (nothing stored)
            PartialPublishError: Original upload failed after processed was stored
            UpstreamTimeoutError: Processed upload timed out (nothing known stored)
        """
        log = log or logger
        processed_name, original_name = self.artifact_names(order_id, original_media_type)

        processed = self._storage.create_file(
            processed_data, processed_name, "image/jpeg", self._pending_folder_id
        )
        log.info(f"Published processed artifact {processed.id}")

        try:
            original = self._storage.create_file(
                original_data, original_name, original_media_type, self._pending_folder_id
            )
        except PrintPrepError as exc:
            log.error(
                f"Original upload failed after processed artifact {processed.id} was stored: {exc}"
            )
            raise PartialPublishError(
                f"Processed image stored but original upload failed: {exc.message}",
                published=_describe(processed),
            )

        log.info(f"Published original artifact {original.id}")
        return ArtifactPair(processed=processed, original=original)


def _describe(artifact: Artifact) -> dict:
    return {"fileId": artifact.id, "name": artifact.name, "viewLink": artifact.link}
