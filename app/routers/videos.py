from typing import List
from fastapi import APIRouter, Depends, File, Form, Header, HTTPException, UploadFile
from sportsreels.video_pipeline.core.filters import FilterSpec
from sportsreels.video_pipeline.core.models import UploaderContext
from sportsreels.video_pipeline.service import VideoAnalysisService
from schemas.videos import DeduplicateRequest, ErrorResponse
from services.video_services import get_video_service, parse_metadata_form, read_upload

router = APIRouter(prefix="/videos", tags=["videos"])


@router.post("", responses={422: {"model": ErrorResponse}, 502: {"model": ErrorResponse}})
async def upload_video(
    file: UploadFile = File(...),
    metadata: str = Form(..., description="UploadMetadata as a JSON object"),
    x_team_id: str = Header(...),
    x_uploader_id: str = Header(...),
    service: VideoAnalysisService = Depends(get_video_service),
):
    media = await read_upload(file)
    context = UploaderContext(team_id=x_team_id, uploader_id=x_uploader_id)
    record = await service.start_upload(media, parse_metadata_form(metadata), context)
    return record.model_dump(mode="json", by_alias=True)


@router.post("/deduplicate")
async def deduplicate(body: DeduplicateRequest, service: VideoAnalysisService = Depends(get_video_service)):
    record = await service.resolve_duplicates(body.title, body.team_id)
    return record.model_dump(mode="json", by_alias=True)


@router.get("/{video_id}", responses={404: {"model": ErrorResponse}})
async def get_video(video_id: str, service: VideoAnalysisService = Depends(get_video_service)):
    record = await service.get_video(video_id)
    return record.model_dump(mode="json", by_alias=True)


@router.get("/{video_id}/analysis")
async def get_analysis(video_id: str, service: VideoAnalysisService = Depends(get_video_service)):
    data = await service.get_analysis(video_id)
    if data is None:
        raise HTTPException(404, f"Video {video_id} has no analysis yet")
    return data.model_dump(mode="json", by_alias=True)


@router.post("/{video_id}/actions/search")
async def search_actions(
    video_id: str,
    spec: FilterSpec,
    service: VideoAnalysisService = Depends(get_video_service),
) -> List[dict]:
    record = await service.get_video(video_id)
    if record.analysis_data is None:
        return []
    actions = service.filter_actions(record.analysis_data, spec, service.roster(record))
    return [a.model_dump(mode="json", by_alias=True) for a in actions]


@router.post("/{video_id}/moments/search")
async def search_moments(
    video_id: str,
    spec: FilterSpec,
    service: VideoAnalysisService = Depends(get_video_service),
) -> List[dict]:
    record = await service.get_video(video_id)
    if record.analysis_data is None:
        return []
    moments = service.filter_moments(record.analysis_data, spec, service.roster(record))
    return [m.model_dump(mode="json", by_alias=True) for m in moments]


@router.post("/{video_id}/reanalyze")
async def reanalyze(video_id: str, service: VideoAnalysisService = Depends(get_video_service)):
    record = await service.retry_analysis(video_id)
    return record.model_dump(mode="json", by_alias=True)
