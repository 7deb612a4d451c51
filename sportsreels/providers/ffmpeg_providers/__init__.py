from .compression_provider import FFmpegCompressionProvider

__all__ = [
    'FFmpegCompressionProvider',
]
