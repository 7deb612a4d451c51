import json
from functools import lru_cache
from fastapi import UploadFile
from loguru import logger
from sportsreels.exceptions import ValidationException
from sportsreels.video_pipeline.core.models import MediaFile
from sportsreels.video_pipeline.service import VideoAnalysisService


@lru_cache(maxsize=1)
def get_video_service() -> VideoAnalysisService:
    """Process-wide service built from configuration."""
    logger.info("Creating video analysis service")
    return VideoAnalysisService()


async def read_upload(file: UploadFile) -> MediaFile:
    data = await file.read()
    return MediaFile(
        filename=file.filename or "upload.mp4",
        content_type=file.content_type or "application/octet-stream",
        data=data,
    )


def parse_metadata_form(metadata: str) -> dict:
    try:
        parsed = json.loads(metadata)
    except json.JSONDecodeError as e:
        raise ValidationException(f"Metadata is not valid JSON: {e}", field="metadata") from e
    if not isinstance(parsed, dict):
        raise ValidationException("Metadata must be a JSON object", field="metadata")
    return parsed
