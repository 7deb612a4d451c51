"""
Facade over the upload pipeline and the analysis read path.

This is the surface the HTTP app and the CLI call into.
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from sportsreels.config.settings import SportsReelsConfig
from sportsreels.exceptions import MultipleRecordsException, ResourceNotFoundException
from sportsreels.providers.base import (
    AnalysisProvider,
    CompressionProvider,
    MetadataStore,
    StorageProvider,
    StoredObject,
)
from sportsreels.providers.factory import ProviderFactory
from sportsreels.video_pipeline.core.aggregator import aggregate_key_moments, aggregate_player_actions
from sportsreels.video_pipeline.core.filters import FilterSpec, filter_actions, filter_moments
from sportsreels.video_pipeline.core.models import (
    AnalysisData,
    KeyMoment,
    MediaFile,
    PlayerAction,
    UploaderContext,
    UploadMetadata,
    VideoRecord,
)
from sportsreels.video_pipeline.ingestion.cancellation import CancellationToken
from sportsreels.video_pipeline.ingestion.duplicate_resolver import DuplicateRecordResolver
from sportsreels.video_pipeline.ingestion.orphan_sweeper import sweep_orphaned_objects
from sportsreels.video_pipeline.ingestion.upload_pipeline import VIDEOS_TABLE, ProgressListener, UploadPipeline


class VideoAnalysisService:
    """
    Collaborators default to the providers named in configuration; pass them
    explicitly to swap implementations (tests do this with in-memory fakes).
    """

    def __init__(
        self,
        storage: Optional[StorageProvider] = None,
        metadata_store: Optional[MetadataStore] = None,
        compressor: Optional[CompressionProvider] = None,
        analyzer: Optional[AnalysisProvider] = None,
        config: Optional[SportsReelsConfig] = None,
    ):
        self.config = config or SportsReelsConfig()
        self.storage = storage or ProviderFactory.create_storage_provider(config=self.config)
        self.metadata_store = metadata_store or ProviderFactory.create_metadata_provider(config=self.config)
        self.compressor = compressor or ProviderFactory.create_compression_provider(config=self.config)
        self._analyzer = analyzer

    @property
    def analyzer(self) -> AnalysisProvider:
        # Created on first use so read-only callers need no API key
        if self._analyzer is None:
            self._analyzer = ProviderFactory.create_analysis_provider(config=self.config)
        return self._analyzer

    def pipeline(self, context: UploaderContext, on_progress: Optional[ProgressListener] = None) -> UploadPipeline:
        """A fresh pipeline, so concurrent uploads never share state."""
        return UploadPipeline(
            context=context,
            storage=self.storage,
            metadata_store=self.metadata_store,
            compressor=self.compressor,
            analyzer=self.analyzer,
            config=self.config.pipeline,
            on_progress=on_progress,
        )

    async def start_upload(
        self,
        media: MediaFile,
        metadata: Union[UploadMetadata, Dict[str, Any]],
        context: UploaderContext,
        on_progress: Optional[ProgressListener] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> VideoRecord:
        return await self.pipeline(context, on_progress).run(media, metadata, cancellation)

    async def get_video(self, video_id: str) -> VideoRecord:
        row = await self.metadata_store.get(VIDEOS_TABLE, video_id)
        if row is None:
            raise ResourceNotFoundException(f"Video {video_id} not found", details={"video_id": video_id})
        return VideoRecord.from_row(row)

    async def get_analysis(self, video_id: str) -> Optional[AnalysisData]:
        """The canonical analysis of a video, or None while it has none."""
        record = await self.get_video(video_id)
        return record.analysis_data

    @staticmethod
    def roster(record: VideoRecord) -> Dict[str, str]:
        return {p.player_id: p.name for p in record.tagged_players}

    def filter_actions(
        self,
        data: AnalysisData,
        spec: Optional[FilterSpec] = None,
        roster: Optional[Dict[str, str]] = None,
    ) -> List[PlayerAction]:
        return filter_actions(aggregate_player_actions(data), spec, roster)

    def filter_moments(
        self,
        data: AnalysisData,
        spec: Optional[FilterSpec] = None,
        roster: Optional[Dict[str, str]] = None,
    ) -> List[KeyMoment]:
        return filter_moments(aggregate_key_moments(data), spec, roster)

    async def resolve_duplicates(self, title: str, team_id: str) -> VideoRecord:
        """Keep the newest (title, team) record and delete the rest."""
        return await DuplicateRecordResolver(self.metadata_store, self.storage).resolve(title, team_id)

    async def find_video(self, title: str, team_id: str) -> VideoRecord:
        """Look a video up by its natural key, cleaning up duplicates when several match."""
        try:
            row = await self.metadata_store.select_one(VIDEOS_TABLE, {"team_id": team_id, "title": title.strip()})
        except MultipleRecordsException as e:
            logger.warning(f"Lookup of '{title}' for team {team_id} matched {e.count} records, resolving duplicates")
            return await self.resolve_duplicates(title, team_id)
        if row is None:
            raise ResourceNotFoundException(f"No video titled '{title}' for team {team_id}")
        return VideoRecord.from_row(row)

    async def retry_analysis(
        self,
        video_id: str,
        on_progress: Optional[ProgressListener] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> VideoRecord:
        """Re-run the analysis stage only, producing a brand-new AnalysisData."""
        record = await self.get_video(video_id)
        context = UploaderContext(team_id=record.team_id, uploader_id=record.uploader_id or "")
        logger.info(f"Re-analysing video {video_id} (status {record.status.value})")
        return await self.pipeline(context, on_progress).run_analysis(record, cancellation, reanalysis=True)

    async def sweep_orphans(self, delete: bool = False) -> List[StoredObject]:
        return await sweep_orphaned_objects(
            self.storage,
            self.metadata_store,
            folder=self.config.pipeline.video_folder,
            grace_period=timedelta(minutes=self.config.pipeline.orphan_grace_period_minutes),
            delete=delete,
        )

    async def close(self):
        await self.storage.close()
        await self.metadata_store.close()
        if self._analyzer is not None:
            await self._analyzer.close()
