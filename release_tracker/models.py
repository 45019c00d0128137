"""Data model for tracked model releases and the derived dataset."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ModelType(str, Enum):
    """Coarse model taxonomy shown in the type filter."""

    LLM = "LLM"
    IMAGE_GEN = "Image Gen"
    MULTIMODAL = "Multimodal"
    AUDIO = "Audio"
    EMBEDDINGS = "Embeddings"


class ModelRelease(BaseModel):
    """One tracked model release, normalized from a Hub listing entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    hf_id: str
    name: str
    company: str
    company_id: str
    date: str = Field("Unknown", description="Creation date as YYYY-MM-DD")
    created_at: datetime | None = None
    last_modified: datetime | None = None
    parameters: str = Field("Unknown", description="Formatted parameter count, e.g. 7.6B")
    type: ModelType = ModelType.LLM
    open_source: bool = True
    downloads: int = Field(0, ge=0)
    downloads_formatted: str = "0"
    likes: int = Field(0, ge=0)
    tags: list[str] = Field(default_factory=list)
    pipeline_tag: str = ""
    description: str = ""
    highlight: str | None = None


class Company(BaseModel):
    """Aggregate footprint of one tracked organization."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    hq: str
    lat: float
    lng: float
    color: str
    models_count: int = 0
    founded: int | None = None
    total_downloads: int = 0
    total_likes: int = 0


class ResearchCenter(BaseModel):
    """Fixed geographic reference point used as a connection endpoint."""

    model_config = ConfigDict(frozen=True)

    name: str
    lat: float
    lng: float


class Connection(BaseModel):
    """Arc between a company HQ and a research center."""

    model_config = ConfigDict(frozen=True)

    start_lat: float
    start_lng: float
    end_lat: float
    end_lng: float
    color: str
    company: str
    center: str


class LiveUpdateEntry(BaseModel):
    """One line of the live release feed."""

    model_config = ConfigDict(frozen=True)

    time: str
    text: str
    company: str


class Dataset(BaseModel):
    """Everything built by one fetch cycle. Replaced wholesale on reload."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    companies: list[Company] = Field(default_factory=list)
    model_releases: list[ModelRelease] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)
    live_updates: list[LiveUpdateEntry] = Field(default_factory=list)
    models_by_org: dict[str, list[ModelRelease]] = Field(default_factory=dict)
    fetched_at: datetime | None = None
