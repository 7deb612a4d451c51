import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from loguru import logger

from sportsreels.config.settings import PipelineConfig
from sportsreels.exceptions import (
    AnalysisException,
    CompressionException,
    PersistException,
    UploadCancelledException,
    UploadException,
)
from sportsreels.providers.base import AnalysisProvider, CompressionProvider, MetadataStore, StorageProvider
from sportsreels.utils.validation import validate_upload
from sportsreels.video_pipeline.core.models import (
    AnalysisDiagnostic,
    AnalysisStatus,
    MediaFile,
    PipelineStage,
    PipelineState,
    UploaderContext,
    UploadMetadata,
    VideoRecord,
    ensure_status_transition,
)
from sportsreels.video_pipeline.core.normalizer import AnalysisNormalizer
from sportsreels.video_pipeline.core.sport_classifier import resolve_sport
from sportsreels.video_pipeline.ingestion.cancellation import CancellationToken

VIDEOS_TABLE = "videos"
TEAMS_TABLE = "teams"

ProgressListener = Callable[[PipelineStage, float], None]


def build_storage_path(folder: str, team_id: str, extension: str) -> str:
    """Owner id + millisecond timestamp + random suffix. Unique per call, not content-addressed."""
    suffix = uuid.uuid4().hex[:8]
    return f"{folder.strip('/')}/{team_id}/{int(time.time() * 1000)}-{suffix}{extension or '.mp4'}"


class UploadPipeline:
    """
    Drives one upload through compress -> upload -> persist metadata -> analyze.

    Stages run strictly in sequence. Each stage reports its own 0-100 progress
    through ``on_progress(stage, percent)``; there is no global percentage.
    Compression, upload and persist failures abort the run with a stage-tagged
    exception. An analysis failure is a partial success: the record is kept,
    marked ``failed`` and returned with a diagnostic.

    Example Usage:
    ---------------
    >>> pipeline = UploadPipeline(
    >>>     context=UploaderContext(team_id="T1", uploader_id="U1"),
    >>>     storage=storage, metadata_store=store,
    >>>     compressor=compressor, analyzer=analyzer,
    >>> )
    >>> record = await pipeline.run(media, {"title": "Derby Match", "videoType": "match", ...})
    """

    def __init__(
        self,
        context: UploaderContext,
        storage: StorageProvider,
        metadata_store: MetadataStore,
        compressor: CompressionProvider,
        analyzer: AnalysisProvider,
        config: Optional[PipelineConfig] = None,
        normalizer: Optional[AnalysisNormalizer] = None,
        team_lookup: Optional[Callable[[], Awaitable[Optional[str]]]] = None,
        on_progress: Optional[ProgressListener] = None,
    ):
        self.context = context
        self.storage = storage
        self.metadata_store = metadata_store
        self.compressor = compressor
        self.analyzer = analyzer
        self.config = config or PipelineConfig()
        self.normalizer = normalizer or AnalysisNormalizer(self.config.training_moment_interval_seconds)
        self.team_lookup = team_lookup or self._team_sport
        self.on_progress = on_progress
        self.state = PipelineState()

    # ------------------------------------------------------------------
    # Progress and state
    # ------------------------------------------------------------------
    def _enter(self, stage: PipelineStage):
        self.state.enter(stage)
        logger.info(f"[{self.context.team_id}] Entering stage: {stage.value}")
        self._report(stage, 0.0)

    def _report(self, stage: PipelineStage, percent: float):
        self.state.report(stage, percent)
        if self.on_progress:
            self.on_progress(stage, self.state.progress[stage.value])

    def _reporter(self, stage: PipelineStage) -> Callable[[float], None]:
        return lambda percent: self._report(stage, percent)

    async def _team_sport(self) -> Optional[str]:
        team = await self.metadata_store.get(TEAMS_TABLE, self.context.team_id)
        return team.get("sport") if team else None

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    async def run(
        self,
        media: MediaFile,
        metadata: Union[UploadMetadata, Dict[str, Any]],
        cancellation: Optional[CancellationToken] = None,
    ) -> VideoRecord:
        """
        Run the full pipeline for one file.

        Returns:
            The persisted VideoRecord with status ``completed`` or ``failed``.

        Raises:
            ValidationException: a precondition failed; no stage was entered
            CompressionException, UploadException, PersistException: the run was aborted
            UploadCancelledException: the cancellation token fired
        """
        parsed = validate_upload(media, metadata, self.config)
        token = cancellation or CancellationToken()
        upload_key = parsed.upload_key or uuid.uuid4().hex

        self.state = PipelineState()
        try:
            existing = await self._find_by_upload_key(upload_key)
            if existing is not None:
                logger.info(f"Upload key {upload_key} already used by video {existing.id}, returning existing record")
                return existing

            sport = await resolve_sport(self.team_lookup, parsed.title, parsed.description, parsed.tags)
            logger.info(f"Classified '{parsed.title}' as {sport.value}")

            compressed = await self._compress(media, token)
            path, url = await self._upload(compressed, token)
            record = await self._persist(media, compressed, parsed, path, url, sport, upload_key, token)
            record = await self.run_analysis(record, token)
            self.state.reset(self.state.error)
            return record
        except Exception as e:
            self.state.reset(e)
            raise

    async def _find_by_upload_key(self, upload_key: str) -> Optional[VideoRecord]:
        try:
            rows = await self.metadata_store.select(
                VIDEOS_TABLE,
                {"team_id": self.context.team_id, "upload_key": upload_key},
                order_by="created_at",
                descending=True,
            )
        except Exception as e:
            logger.error(f"Looking up upload key {upload_key} failed: {e}")
            raise PersistException(f"Looking up upload key failed: {e}", cause=e) from e
        return VideoRecord.from_row(rows[0]) if rows else None

    async def _compress(self, media: MediaFile, token: CancellationToken) -> MediaFile:
        stage = PipelineStage.COMPRESSING
        self._enter(stage)
        try:
            compressed = await token.run(self.compressor.compress(media, on_progress=self._reporter(stage)), stage.value)
        except UploadCancelledException:
            raise
        except Exception as e:
            logger.error(f"Compression failed for {media.filename}: {e}")
            raise CompressionException(f"Compression failed: {e}", cause=e) from e
        self._report(stage, 100.0)
        logger.info(f"Compression finished: {media.size} -> {compressed.size} bytes")
        return compressed

    async def _upload(self, media: MediaFile, token: CancellationToken):
        stage = PipelineStage.UPLOADING
        self._enter(stage)
        path = build_storage_path(self.config.video_folder, self.context.team_id, media.extension)
        try:
            url = await token.run(
                self.storage.put(path, media.data, media.content_type, on_progress=self._reporter(stage)),
                stage.value,
            )
        except UploadCancelledException:
            await self._discard_binary(path)
            raise
        except Exception as e:
            logger.error(f"Upload of {path} failed: {e}")
            await self._discard_binary(path)
            raise UploadException(f"Upload failed: {e}", cause=e) from e
        self._report(stage, 100.0)
        logger.info(f"Uploaded binary to {path}")
        return path, url

    async def _persist(
        self,
        original: MediaFile,
        compressed: MediaFile,
        metadata: UploadMetadata,
        path: str,
        url: str,
        sport,
        upload_key: str,
        token: CancellationToken,
    ) -> VideoRecord:
        stage = PipelineStage.PERSISTING
        self._enter(stage)
        try:
            token.raise_if_cancelled(stage.value)
        except UploadCancelledException:
            await self._discard_binary(path)
            raise

        record = VideoRecord(
            id=str(uuid.uuid4()),
            team_id=self.context.team_id,
            uploader_id=self.context.uploader_id,
            title=metadata.title.strip(),
            url=url,
            storage_path=path,
            compressed_url=url if compressed is not original else None,
            thumbnail_url=metadata.thumbnail_url,
            duration=compressed.duration or original.duration or metadata.duration or 0.0,
            file_size=compressed.size,
            video_type=metadata.video_type,
            match_details=metadata.match_details,
            tagged_players=metadata.tagged_players,
            description=metadata.description,
            tags=metadata.tags,
            status=AnalysisStatus.PENDING,
            sport=sport,
            upload_key=upload_key,
        )
        try:
            row = await token.run(self.metadata_store.insert(VIDEOS_TABLE, record.to_row()), stage.value)
        except UploadCancelledException:
            await self._discard_record(record.id)
            await self._discard_binary(path)
            raise
        except Exception as e:
            logger.error(f"Persisting metadata failed, binary {path} is orphaned: {e}")
            raise PersistException(
                f"Persisting video metadata failed: {e}",
                cause=e,
                details={"orphaned_path": path, "orphaned_url": url},
            ) from e
        self._report(stage, 100.0)
        logger.info(f"Persisted video record {record.id} with status {record.status.value}")
        return VideoRecord.from_row(row)

    async def run_analysis(
        self,
        record: VideoRecord,
        cancellation: Optional[CancellationToken] = None,
        reanalysis: bool = False,
    ) -> VideoRecord:
        """
        Stage 4 on its own: analyze, normalize and attach a new AnalysisData.

        Also used to retry analysis of an existing record (``reanalysis=True``).
        Analysis failures are recorded on the record and do not raise.
        """
        token = cancellation or CancellationToken()
        stage = PipelineStage.ANALYZING
        self._enter(stage)

        ensure_status_transition(record.status, AnalysisStatus.ANALYZING, reanalysis=reanalysis)
        record = await self._update(record, {"status": AnalysisStatus.ANALYZING.value})

        try:
            raw = await token.run(
                self.analyzer.analyze(
                    record.url,
                    record.video_type.value,
                    (record.sport.value if record.sport else "football"),
                    self._analysis_metadata(record),
                    on_progress=self._reporter(stage),
                ),
                stage.value,
            )
            data = self.normalizer.normalize(record.video_type, raw, sport=record.sport or "football", duration=record.duration)
        except UploadCancelledException as e:
            await self._mark_failed(record, e)
            raise
        except Exception as e:
            logger.exception(f"Analysis of video {record.id} failed: {e}")
            error = AnalysisException(f"Analysis failed: {e}", cause=e)
            self.state.error = error
            return await self._mark_failed(record, error)

        ensure_status_transition(AnalysisStatus.ANALYZING, AnalysisStatus.COMPLETED)
        record = await self._update(record, {
            "status": AnalysisStatus.COMPLETED.value,
            "analysis_data": data.model_dump(mode="json"),
            "analysis_error": None,
        })
        self._report(stage, 100.0)
        logger.info(
            f"Analysis of video {record.id} completed: {len(data.player_actions)} actions, "
            f"{len(data.key_moments)} key moments"
        )
        return record

    @staticmethod
    def _analysis_metadata(record: VideoRecord) -> Dict[str, Any]:
        return {
            "title": record.title,
            "description": record.description,
            "duration": record.duration,
            "tags": list(record.tags),
            "match_details": record.match_details.model_dump() if record.match_details else None,
            "tagged_players": [p.model_dump() for p in record.tagged_players],
        }

    async def _mark_failed(self, record: VideoRecord, error: Exception) -> VideoRecord:
        ensure_status_transition(AnalysisStatus.ANALYZING, AnalysisStatus.FAILED)
        diagnostic = AnalysisDiagnostic(
            message=str(error),
            error_code=getattr(error, "error_code", None),
        )
        return await self._update(record, {
            "status": AnalysisStatus.FAILED.value,
            "analysis_data": None,
            "analysis_error": diagnostic.model_dump(mode="json"),
        })

    async def _update(self, record: VideoRecord, changes: Dict[str, Any]) -> VideoRecord:
        try:
            row = await self.metadata_store.update(VIDEOS_TABLE, record.id, changes)
        except Exception as e:
            logger.error(f"Updating video {record.id} failed: {e}")
            raise AnalysisException(f"Updating video {record.id} failed: {e}", cause=e) from e
        return VideoRecord.from_row(row)

    async def _discard_binary(self, path: str):
        try:
            await self.storage.delete(path)
        except Exception as e:
            logger.warning(f"Could not remove uploaded binary {path}, it is now orphaned: {e}")

    async def _discard_record(self, record_id: str):
        try:
            await self.metadata_store.delete(VIDEOS_TABLE, record_id)
        except Exception as e:
            logger.warning(f"Could not remove video record {record_id}: {e}")
