import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

repo_root = Path(__file__).resolve().parent.parent


def _optional_path(name: str) -> Optional[str]:
    val = os.getenv(name, "")
    return val or None


@dataclass(frozen=True)
class Settings:
    app_name: str = "Wildfire Explorer API"
    data_path: str = os.getenv("FIRECORE_DATA_PATH", str((repo_root / "data/wildfires.csv").resolve()))
    # Optional location_code,region CSV replacing the built-in region table.
    region_mapping_path: Optional[str] = _optional_path("FIRECORE_REGION_MAPPING_PATH")
    debounce_ms: int = int(os.getenv("FIRECORE_DEBOUNCE_MS", "300"))
    histogram_bins: int = int(os.getenv("FIRECORE_HISTOGRAM_BINS", "30"))
    log_level: str = os.getenv("FIRECORE_LOG_LEVEL", "INFO")
    cors_origins: str = os.getenv("FIRECORE_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")

    @property
    def debounce_seconds(self) -> float:
        return max(0, self.debounce_ms) / 1000.0

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
