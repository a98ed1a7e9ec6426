"""
segment_models.py - road_survey_segments table

Column names follow the external road survey feature layer (LA, AIRI_2018, ...)
so generated WHERE clauses run unchanged against this table.
"""
from sqlalchemy import Float, Integer, String, inspect
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

SURVEY_YEARS = (2011, 2018)

# layer column prefix -> RoadSegment attribute
MEASUREMENT_COLUMNS = {
    "airi": "iri",
    "lrut": "rut",
    "psci_class": "psci",
    "csc_class": "csc",
    "mpd": "mpd",
}


class RoadSurveySegment(Base):
    __tablename__ = "road_survey_segments"

    object_id: Mapped[int] = mapped_column("OBJECTID", Integer, primary_key=True, autoincrement=True)
    route: Mapped[str | None] = mapped_column("Route", String(32), nullable=True, index=True)
    local_authority: Mapped[str] = mapped_column("LA", String(128), nullable=False, index=True)
    shape_length: Mapped[float | None] = mapped_column("Shape_Length", Float, nullable=True)

    # 2018 survey
    airi_2018: Mapped[float | None] = mapped_column("AIRI_2018", Float, nullable=True)
    lrut_2018: Mapped[float | None] = mapped_column("LRUT_2018", Float, nullable=True)
    psci_class_2018: Mapped[float | None] = mapped_column("PSCI_Class_2018", Float, nullable=True)
    csc_class_2018: Mapped[float | None] = mapped_column("CSC_Class_2018", Float, nullable=True)
    mpd_2018: Mapped[float | None] = mapped_column("MPD_2018", Float, nullable=True)

    # 2011 survey (historical comparison)
    airi_2011: Mapped[float | None] = mapped_column("AIRI_2011", Float, nullable=True)
    lrut_2011: Mapped[float | None] = mapped_column("LRUT_2011", Float, nullable=True)
    psci_class_2011: Mapped[float | None] = mapped_column("PSCI_Class_2011", Float, nullable=True)
    csc_class_2011: Mapped[float | None] = mapped_column("CSC_Class_2011", Float, nullable=True)
    mpd_2011: Mapped[float | None] = mapped_column("MPD_2011", Float, nullable=True)

    @classmethod
    def from_segment(cls, segment, survey_year: int = 2018, default_length_m: float | None = None) -> "RoadSurveySegment":
        if survey_year not in SURVEY_YEARS:
            raise ValueError(f"No survey columns for year {survey_year}; expected one of {SURVEY_YEARS}")
        measurements = {
            f"{prefix}_{survey_year}": getattr(segment, attr)
            for prefix, attr in MEASUREMENT_COLUMNS.items()
        }
        return cls(
            object_id=segment.id if isinstance(segment.id, int) else None,
            route=segment.road_number,
            local_authority=segment.region,
            shape_length=segment.length_m if segment.length_m is not None else default_length_m,
            **measurements,
        )

    def to_attributes(self) -> dict:
        """Row as a feature-layer attribute dict keyed by column name."""
        return {
            attr.columns[0].name: getattr(self, attr.key)
            for attr in inspect(self).mapper.column_attrs
        }
