"""
seed_segments.py - Seed road_survey_segments from the static road network dataset
Run from the project root: python -m scripts.seed_segments [path/to/road_network.json]
"""
import sys
from pathlib import Path

# Add project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import create_engine, delete
from sqlalchemy.orm import sessionmaker
from config import DATABASE_URL_SYNC, SEGMENTS_JSON_PATH, SEGMENT_LENGTH_M, SURVEY_YEAR


def run_sync(path: Path = SEGMENTS_JSON_PATH, database_url: str = DATABASE_URL_SYNC) -> int:
    from models.base import Base
    from models.segment_models import RoadSurveySegment
    from maintenance.ingestion import load_segments

    if not path.exists():
        print(f"Dataset not found: {path}")
        return 0

    engine = create_engine(database_url)
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)

    segments = load_segments(path)
    with Session() as session:
        # the dataset is the whole network; reseeding replaces it
        session.execute(delete(RoadSurveySegment))
        session.add_all(
            RoadSurveySegment.from_segment(s, SURVEY_YEAR, default_length_m=SEGMENT_LENGTH_M)
            for s in segments
        )
        session.commit()

    print(f"Seeded {len(segments)} segments from {path}")
    return len(segments)


if __name__ == "__main__":
    run_sync(Path(sys.argv[1]) if len(sys.argv) > 1 else SEGMENTS_JSON_PATH)
