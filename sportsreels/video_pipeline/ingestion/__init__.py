from .cancellation import CancellationToken
from .upload_pipeline import UploadPipeline, build_storage_path
from .duplicate_resolver import DuplicateRecordResolver
from .orphan_sweeper import find_orphaned_objects, sweep_orphaned_objects

__all__ = [
    "CancellationToken",
    "UploadPipeline",
    "build_storage_path",
    "DuplicateRecordResolver",
    "find_orphaned_objects",
    "sweep_orphaned_objects",
]
