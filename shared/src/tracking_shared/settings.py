from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )

    # Cameras (one tracker per camera)
    camera_ids: str = Field(default="cam-01")

    # Tracker
    tracker_max_age: int = Field(
        default=30,
        ge=1,
        description="Update cycles a track survives unmatched before removal",
    )
    tracker_match_distance: float = Field(
        default=100.0,
        gt=0,
        description="Centroid distance (pixels) below which a detection continues a track",
    )
    tracker_association: str = Field(
        default="first_fit",
        description="'first_fit' | 'nearest_fit'",
    )
    tracker_min_score: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Detections scoring below this are dropped before tracking",
    )

    # Logging
    log_format: str = Field(default="console")
    log_level: str = Field(default="INFO")

    @property
    def camera_id_list(self) -> list[str]:
        return [c.strip() for c in self.camera_ids.split(",") if c.strip()]


# Module-level singleton: import and use directly
settings = Settings()
