"""Configuration management for the ID document scanner.

Loads and validates YAML configuration with defaults for recognition,
region plans, classification keywords, field extraction, pipeline
progress weights, result caching, and export.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


class RegionSpec(BaseModel):
    """A rectangular image region in fractional coordinates.

    ``scale`` is a linear resize factor and ``contrast`` a percentage of
    the baseline contrast (100 leaves the crop unchanged).
    """

    label: str
    stage: str = ""
    x: float = Field(0.0, ge=0.0, le=1.0)
    y: float = Field(0.0, ge=0.0, le=1.0)
    width: float = Field(1.0, gt=0.0, le=1.0)
    height: float = Field(1.0, gt=0.0, le=1.0)
    scale: float = Field(1.0, ge=1.0, le=4.0)
    contrast: int = Field(100, gt=0, le=400)
    lang: str | None = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "RegionSpec":
        if self.x + self.width > 1.0 + _EPSILON:
            raise ValueError(f"region '{self.label}' exceeds the image width")
        if self.y + self.height > 1.0 + _EPSILON:
            raise ValueError(f"region '{self.label}' exceeds the image height")
        return self

    @property
    def is_enhanced(self) -> bool:
        return self.scale != 1.0 or self.contrast != 100


def _default_aadhaar_regions() -> list[RegionSpec]:
    return [
        RegionSpec(
            label="aadhaar-r1",
            stage="Scanning name & DOB area...",
            x=0.33,
            y=0.10,
            width=0.67,
            height=0.62,
        ),
        RegionSpec(
            label="aadhaar-r2",
            stage="Scanning Aadhaar number...",
            x=0.05,
            y=0.72,
            width=0.90,
            height=0.12,
        ),
    ]


def _default_voter_regions() -> list[RegionSpec]:
    return [
        RegionSpec(label="voter-orig", stage="Scanning Voter ID (standard)..."),
        RegionSpec(
            label="voter-2x",
            stage="Scanning Voter ID (enhanced)...",
            scale=2.0,
            contrast=180,
        ),
    ]


class OCRConfig(BaseModel):
    """Configuration for the Tesseract recognition capability."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng+tam"
    psm: int = 3
    timeout_s: float = 0.0
    max_retries: int = Field(1, ge=0)
    retry_delay_s: float = Field(0.5, ge=0.0)


class RegionsConfig(BaseModel):
    """Region plans per document type, tuned empirically on real cards."""

    detect: RegionSpec = Field(
        default_factory=lambda: RegionSpec(
            label="detect",
            stage="Detecting document type...",
            height=0.22,
        )
    )
    aadhaar: list[RegionSpec] = Field(
        default_factory=_default_aadhaar_regions, min_length=1
    )
    voter: list[RegionSpec] = Field(
        default_factory=_default_voter_regions, min_length=1
    )


class ClassifierConfig(BaseModel):
    """Keyword lists used by the document classifier, checked in order."""

    voter_keywords: list[str] = Field(
        default_factory=lambda: ["election", "elector", "voter"]
    )
    aadhaar_keywords: list[str] = Field(
        default_factory=lambda: ["aadhaar", "aadhar", "uidai", "government of india"]
    )


# Administrative vocabulary and recurring OCR noise that never forms a name.
# fmt: off
_DEFAULT_BLACKLIST = [
    "government", "govt", "aadhaar", "aadhar", "आधार", "uidai",
    "unique identification", "india", "இந்திய", "அரசாங்கம்",
    "issue date", "issue", "enrolment", "enrollment", "address",
    "mobile", "phone", "dob", "date of birth", "பிறந்த",
    "male", "female", "ஆண்", "பெண்", "help", "1800", "www", "http",
    "time", "belated", "epsom", "solited", "huet", "ipe", "tan", "bbm",
    "sei", "sam", "icici", "ligpibg", "sotlingd", "siren", "ipibg", "agsimuned",
    "proof", "identity", "citizenship", "authentication", "election", "commission",
    "elector", "photo", "birth", "date", "age", "father",
]
# fmt: on


class ExtractionConfig(BaseModel):
    """Configuration for the field extraction heuristics."""

    name_blacklist: list[str] = Field(default_factory=lambda: list(_DEFAULT_BLACKLIST))
    min_name_length: int = 4
    max_name_length: int = 50
    min_birth_year: int = 1900
    max_birth_year: int = 2020


class PipelineConfig(BaseModel):
    """Progress weights, reset timing, and quality thresholds for a run."""

    detect_weight: float = Field(10.0, gt=0.0)
    region_weight: float = Field(40.0, gt=0.0)
    extract_weight: float = Field(10.0, gt=0.0)
    reset_delay_s: float = Field(1.0, ge=0.0)
    success_ratio: float = Field(0.8, gt=0.0, le=1.0)
    partial_ratio: float = Field(0.4, gt=0.0, le=1.0)


class CacheConfig(BaseModel):
    """Configuration for the last-result cache."""

    enabled: bool = True
    directory: str = ".idscan_cache"
    key: str = "idscan_last"
    ttl_hours: float = Field(24.0, gt=0.0)


class ExportConfig(BaseModel):
    """Configuration for on-demand record export."""

    output_dir: str = "exports"


class ServerConfig(BaseModel):
    """Bind address for the HTTP API server."""

    host: str = "127.0.0.1"
    port: int = Field(8000, gt=0, lt=65536)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    ocr: OCRConfig = Field(default_factory=OCRConfig)
    regions: RegionsConfig = Field(default_factory=RegionsConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
