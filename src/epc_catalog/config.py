"""Configuration for the catalog engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class ServiceConfig:
    """
    Connection to the catalogue REST service.

    Can be set via:
    - Constructor arguments
    - Environment variables (EPC_*)
    - Config file
    """
    base_url: str = field(
        default_factory=lambda: os.environ.get("EPC_SERVICE_URL", "http://localhost:3000/api")
    )

    # Bearer token sent with every request
    api_token: str | None = field(
        default_factory=lambda: os.environ.get("EPC_API_TOKEN")
    )

    # Request timeout (seconds)
    timeout: float = field(
        default_factory=lambda: float(os.environ.get("EPC_TIMEOUT", "30"))
    )


@dataclass
class SelectorConfig:
    """Remote option selector behaviour."""
    page_size: int = 10
    # Delay after the last keystroke before a search fires
    debounce_seconds: float = 0.3


@dataclass
class VinConfig:
    """VIN linkage rows and VIN list search."""
    page_size: int = 5
    search_debounce_seconds: float = 0.5


@dataclass
class CsvConfig:
    """CSV import settings."""
    # utf-8-sig strips the BOM spreadsheet tools like to write
    encoding: str = "utf-8-sig"
    default_quantity: int = 1


@dataclass
class Config:
    """Main configuration container."""
    service: ServiceConfig = field(default_factory=ServiceConfig)
    selectors: SelectorConfig = field(default_factory=SelectorConfig)
    vins: VinConfig = field(default_factory=VinConfig)
    csv: CsvConfig = field(default_factory=CsvConfig)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Create config from dictionary."""
        return cls(
            service=ServiceConfig(**data.get("service", {})),
            selectors=SelectorConfig(**data.get("selectors", {})),
            vins=VinConfig(**data.get("vins", {})),
            csv=CsvConfig(**data.get("csv", {})),
        )

    @classmethod
    def from_yaml(cls, path: str) -> Config:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})
