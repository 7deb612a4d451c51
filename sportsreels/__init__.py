"""SportsReels: sports video upload, AI analysis and normalization pipeline."""

__version__ = "1.0.0"
