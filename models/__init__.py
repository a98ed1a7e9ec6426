from .base import Base, async_session_factory, init_db, dispose_engine
from .segment_models import RoadSurveySegment

__all__ = [
    "Base",
    "async_session_factory",
    "init_db",
    "dispose_engine",
    "RoadSurveySegment",
]
