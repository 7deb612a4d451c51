"""Upload preconditions, checked before any pipeline stage is entered."""

from typing import Any, Dict, Optional, Union

from loguru import logger
from pydantic import ValidationError

from ..config.settings import PipelineConfig
from ..exceptions import ValidationException
from ..video_pipeline.core.models import MediaFile, UploadMetadata, VideoType


def parse_metadata(metadata: Union[UploadMetadata, Dict[str, Any], None]) -> UploadMetadata:
    """Coerce caller metadata into UploadMetadata, naming the first invalid field."""
    if isinstance(metadata, UploadMetadata):
        return metadata
    if metadata is None:
        raise ValidationException("Upload metadata is required", field="metadata")
    try:
        return UploadMetadata.model_validate(metadata)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "metadata"
        raise ValidationException(f"Invalid value for '{field}': {first.get('msg')}", field=field) from e


def validate_upload(
    media: Optional[MediaFile],
    metadata: Union[UploadMetadata, Dict[str, Any], None],
    config: Optional[PipelineConfig] = None,
) -> UploadMetadata:
    """
    Check every upload precondition and return the parsed metadata.

    Raises:
        ValidationException: naming the missing or invalid field
    """
    config = config or PipelineConfig()

    if media is None or not media.data:
        raise ValidationException("A video file is required", field="file")
    if not (media.content_type or "").lower().startswith("video/"):
        raise ValidationException(
            f"Unsupported media type '{media.content_type}', expected a video",
            field="file.content_type",
        )
    if media.size > config.max_file_size_bytes:
        raise ValidationException(
            f"File is {media.size / (1024 * 1024):.1f} MB, the limit is {config.max_file_size_mb} MB",
            field="file.size",
            details={"size": media.size, "limit": config.max_file_size_bytes},
        )

    parsed = parse_metadata(metadata)

    if not parsed.title.strip():
        raise ValidationException("Title is required", field="title")

    if parsed.video_type == VideoType.MATCH:
        details = parsed.match_details
        if details is None or not (details.opposing_team or "").strip():
            raise ValidationException("Opposing team is required for match videos", field="match_details.opposing_team")
        if not (details.venue or "").strip():
            raise ValidationException("Venue is required for match videos", field="match_details.venue")

    if len(parsed.description) > config.max_description_length:
        raise ValidationException(
            f"Description exceeds {config.max_description_length} characters",
            field="description",
        )

    logger.debug(f"Upload of '{parsed.title}' ({parsed.video_type}) passed validation")
    return parsed
