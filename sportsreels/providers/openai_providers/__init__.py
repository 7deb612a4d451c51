from .analysis_provider import OpenAIAnalysisProvider

__all__ = [
    'OpenAIAnalysisProvider',
]
