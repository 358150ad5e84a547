"""
Print-preparation pipeline service.

One call to ``process()`` handles one validated PrintRequest, strictly in
order:

    1. Decode the tagged payload
    2. Normalize (PDF/HEIC/raster -> canonical raster)
    3. Resolve the target canvas (paper size + orientation)
    4. Convert the border to pixels
    5. Resize and compose
    6. Publish processed, then original

Steps 1-5 run before any external call, so a bad payload or an impossible
geometry never causes an upload.

Thread Safety:
    The service holds only immutable settings and stateless helpers; every
    image buffer lives in the local scope of process().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from config import PipelineSettings
from models.artifacts import ArtifactPair
from models.image import CompositeResult, PaperDimensions
from models.print_request import PrintRequest
from modules.compositor import Compositor
from modules.format_normalizer import FormatNormalizer, decode_payload
from modules.paper_sizes import border_to_pixels, resolve_target
from .artifact_publisher import ArtifactPublisher
from logging_config import get_logger, get_order_logger


# Module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class PrintJobResult:
    """What process() hands back to the route."""

    request: PrintRequest
    target: PaperDimensions
    border_px: int
    composite: CompositeResult
    artifacts: ArtifactPair

    def to_response(self) -> Dict[str, Any]:
        """Body of a successful /add-border response."""
        body: Dict[str, Any] = {
            "status": "success",
            "border_size": self.request.border_size,
        }
        body.update(self.artifacts.to_response())
        body["output"] = {
            "width": self.composite.width,
            "height": self.composite.height,
            "bordered": self.composite.bordered,
            "border_px": self.border_px if self.composite.bordered else 0,
        }
        return body


class PrintService:
    """Runs the print-preparation pipeline for one request at a time."""

    def __init__(self, settings: PipelineSettings, publisher: ArtifactPublisher):
        self.settings = settings
        self.normalizer = FormatNormalizer(settings)
        self.compositor = Compositor()
        self.publisher = publisher
        logger.info(
            f"PrintService initialized ({settings.dpi} DPI, border unit {settings.border_unit})"
        )

    def prepare(self, request: PrintRequest):
        """
        Steps 1-5 only (no upload).

        Returns:
            (original media type, original bytes, target, border_px, CompositeResult)

        Raises:
            DecodeError, InvalidPdfError, HeicDecodeError, GeometryError
        """
        order_logger = get_order_logger(request.order_id)

        media_type, original = decode_payload(request.payload)
        order_logger.info(f"Received {media_type} payload ({len(original)} bytes)")

        canonical = self.normalizer.normalize(original, media_type, logger=order_logger)

        target = resolve_target(request.paper, request.orientation, self.settings)
        border_px = border_to_pixels(request.border_size, self.settings)
        order_logger.info(
            f"Target {request.paper.describe()} {request.orientation.value}: "
            f"{target.width}x{target.height}, border {border_px}px"
        )

        composite = self.compositor.compose(
            canonical,
            target,
            request.resize,
            border_px=border_px if request.wants_border else 0,
            border_color=request.border_color if request.wants_border else None,
            logger=order_logger,
        )
        return media_type, original, target, border_px, composite

    def process(self, request: PrintRequest) -> PrintJobResult:
        """
        Run the full pipeline, including both uploads.

        Raises:
            Anything prepare() raises, plus PublishError, PartialPublishError
            and UpstreamTimeoutError from the upload phase
        """
        media_type, original, target, border_px, composite = self.prepare(request)

        artifacts = self.publisher.publish_pair(
            composite.data,
            original,
            media_type,
            request.order_id,
            log=get_order_logger(request.order_id),
        )
        return PrintJobResult(
            request=request,
            target=target,
            border_px=border_px,
            composite=composite,
            artifacts=artifacts,
        )
