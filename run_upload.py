"""
Upload one video through the SportsReels pipeline and print the resulting record.

Example:
    python run_upload.py match.mp4 --team-id T1 --uploader-id U1 \
        --title "Derby Match" --type match --opposing-team "Rivals FC" --venue "Home Ground"
"""

import argparse
import asyncio
import json
import mimetypes
from pathlib import Path

import aiofiles
from loguru import logger

from sportsreels.config.settings import SportsReelsConfig
from sportsreels.exceptions import SportsReelsException
from sportsreels.utils.logging_config import log_manager
from sportsreels.video_pipeline.core.models import MediaFile, PipelineStage, UploaderContext
from sportsreels.video_pipeline.service import VideoAnalysisService


def parse_args():
    parser = argparse.ArgumentParser(description="Upload and analyze a sports video.")
    parser.add_argument("video_path", type=str, help="Path to the video file")
    parser.add_argument("--team-id", required=True, help="Owning team id")
    parser.add_argument("--uploader-id", required=True, help="Uploading user id")
    parser.add_argument("--title", required=True, help="Video title")
    parser.add_argument("--type", dest="video_type", default="match",
                        choices=["match", "training", "interview", "highlight"], help="Video type (default: match)")
    parser.add_argument("--description", default="", help="Free-form description")
    parser.add_argument("--tag", dest="tags", action="append", default=[], help="Tag, may be repeated")
    parser.add_argument("--opposing-team", help="Opposing team (required for match videos)")
    parser.add_argument("--venue", help="Venue (required for match videos)")
    parser.add_argument("--duration", type=float, help="Duration in seconds, when known")
    parser.add_argument("--upload-key", help="Idempotency key; re-running with the same key returns the same record")
    parser.add_argument("--quiet", action="store_true", default=False, help="Disable console logging")
    return parser.parse_args()


def print_progress(stage: PipelineStage, percent: float):
    print(f"\r{stage.value:<12} {percent:5.1f}%", end="" if percent < 100 else "\n", flush=True)


async def main():
    args = parse_args()
    config = SportsReelsConfig()
    log_manager.configure(config.logging)
    if not args.quiet:
        log_manager.enable_console()

    path = Path(args.video_path)
    async with aiofiles.open(path, "rb") as f:
        data = await f.read()
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"

    metadata = {
        "title": args.title,
        "video_type": args.video_type,
        "description": args.description,
        "tags": args.tags,
        "duration": args.duration,
        "upload_key": args.upload_key,
    }
    if args.opposing_team or args.venue:
        metadata["match_details"] = {"opposing_team": args.opposing_team, "venue": args.venue}

    service = VideoAnalysisService(config=config)
    try:
        record = await service.start_upload(
            MediaFile(filename=path.name, content_type=content_type, data=data, duration=args.duration),
            metadata,
            UploaderContext(team_id=args.team_id, uploader_id=args.uploader_id),
            on_progress=print_progress,
        )
        print(json.dumps(record.model_dump(mode="json", by_alias=True), indent=2))
    except SportsReelsException as e:
        logger.error(f"Upload failed ({e.error_code}): {e}")
        raise SystemExit(1)
    finally:
        await service.close()


if __name__ == "__main__":
    asyncio.run(main())
