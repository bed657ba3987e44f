#!/usr/bin/env python3
"""
Configuration Management for the HTML to PDF Pipeline

This module provides centralized configuration management for the report
rendering pipeline. It supports:

- Environment variable configuration
- Configuration file loading (JSON)
- Default values with override capability
- Validation of configuration values

Example Usage:
    from HTMLtoPDFUsingChromium.config import get_config, PipelineConfig

    # Get current configuration
    config = get_config()
    print(config.rendering.page_format)  # A4

    # Override specific values
    config = PipelineConfig()
    config.rendering.render_timeout_s = 60
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .report_core.adapters.chromium import CHROME_PARAMETERS, DEFAULT_USER_AGENT
from .report_core.dom.projection import DomContract

ENV_PREFIX = "HTMLTOPDF_"


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


# ============================================================================
# CONFIGURATION DATACLASSES
# ============================================================================

@dataclass
class BrowserConfig:
    """Configuration for the headless Chromium process."""
    executable_path: Optional[str] = None  # None = Playwright's bundled Chromium
    headless: bool = True
    args: List[str] = field(default_factory=lambda: list(CHROME_PARAMETERS))
    user_agent: str = DEFAULT_USER_AGENT
    launch_timeout_s: float = 30.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RenderingConfig:
    """Configuration for PDF rendering."""
    page_format: str = "A4"
    cover_margin_top: str = "20mm"
    body_margin_top: str = "35mm"  # Leaves room for the standard header
    margin_bottom: str = "25mm"
    print_background: bool = True
    prefer_css_page_size: bool = False
    render_timeout_s: float = 120.0  # Per navigation/print call
    wait_until: str = "domcontentloaded"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LayoutConfig(DomContract):
    """Element ids and class names of the report HTML template."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class OutputConfig:
    """Configuration for CLI input/output files."""
    report_html: str = "rapport.html"  # Source file read by the `html` action
    debug_html_path: Optional[Path] = None  # Dump of the body projection, if set

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["debug_html_path"] = str(self.debug_html_path) if self.debug_html_path else None
        return d


@dataclass
class APIConfig:
    """Configuration for the HTTP front end."""
    host: str = "0.0.0.0"
    port: int = 8080
    max_concurrent_jobs: int = 3  # Concurrent pipeline runs sharing the browser
    max_body_bytes: int = 100 * 1024 * 1024  # 100MB
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PipelineConfig:
    """
    Complete configuration for the HTML to PDF pipeline.

    This is the main configuration class that aggregates all sub-configurations.
    """
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    api: APIConfig = field(default_factory=APIConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert entire configuration to dictionary."""
        return {
            "browser": self.browser.to_dict(),
            "rendering": self.rendering.to_dict(),
            "layout": self.layout.to_dict(),
            "output": self.output.to_dict(),
            "api": self.api.to_dict(),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        """Create configuration from dictionary."""
        config = cls()

        if "browser" in data:
            config.browser = BrowserConfig(**data["browser"])
        if "rendering" in data:
            config.rendering = RenderingConfig(**data["rendering"])
        if "layout" in data:
            config.layout = LayoutConfig(**data["layout"])
        if "output" in data:
            out_data = data["output"].copy()
            if out_data.get("debug_html_path"):
                out_data["debug_html_path"] = Path(out_data["debug_html_path"])
            config.output = OutputConfig(**out_data)
        if "api" in data:
            config.api = APIConfig(**data["api"])

        return config

    @classmethod
    def from_json(cls, json_str: str) -> "PipelineConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PipelineConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            return cls.from_json(f.read())

    def save(self, path: Union[str, Path]):
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json())

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """
        Create configuration from environment variables.

        Environment variable naming:
        - CHROMIUM_PATH (browser executable)
        - HTMLTOPDF_HEADLESS
        - HTMLTOPDF_PAGE_FORMAT
        - HTMLTOPDF_RENDER_TIMEOUT
        - HTMLTOPDF_REPORT_HTML
        - HTMLTOPDF_DEBUG_HTML
        - HTMLTOPDF_API_HOST / HTMLTOPDF_API_PORT
        - HTMLTOPDF_MAX_CONCURRENT
        - etc.
        """
        config = cls()
        env = os.environ

        # Browser settings
        if env_chromium := env.get("CHROMIUM_PATH"):
            config.browser.executable_path = env_chromium
        if env_headless := env.get(f"{ENV_PREFIX}HEADLESS"):
            config.browser.headless = _env_flag(env_headless)
        if env_launch := env.get(f"{ENV_PREFIX}LAUNCH_TIMEOUT"):
            config.browser.launch_timeout_s = float(env_launch)

        # Rendering settings
        if env_format := env.get(f"{ENV_PREFIX}PAGE_FORMAT"):
            config.rendering.page_format = env_format
        if env_timeout := env.get(f"{ENV_PREFIX}RENDER_TIMEOUT"):
            config.rendering.render_timeout_s = float(env_timeout)

        # Output settings
        if env_report := env.get(f"{ENV_PREFIX}REPORT_HTML"):
            config.output.report_html = env_report
        if env_debug := env.get(f"{ENV_PREFIX}DEBUG_HTML"):
            config.output.debug_html_path = Path(env_debug)

        # API settings
        if env_api_host := env.get(f"{ENV_PREFIX}API_HOST"):
            config.api.host = env_api_host
        if env_api_port := env.get(f"{ENV_PREFIX}API_PORT"):
            config.api.port = int(env_api_port)
        if env_concurrent := env.get(f"{ENV_PREFIX}MAX_CONCURRENT"):
            config.api.max_concurrent_jobs = int(env_concurrent)
        if env_body := env.get(f"{ENV_PREFIX}MAX_BODY_BYTES"):
            config.api.max_body_bytes = int(env_body)

        return config


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

_global_config: Optional[PipelineConfig] = None


def get_config() -> PipelineConfig:
    """
    Get the global configuration instance.

    Returns the cached configuration or creates a new one from environment.
    """
    global _global_config
    if _global_config is None:
        _global_config = PipelineConfig.from_env()
    return _global_config


def set_config(config: PipelineConfig):
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def reset_config():
    """Reset the global configuration to default."""
    global _global_config
    _global_config = None


def load_config(path: Union[str, Path]) -> PipelineConfig:
    """
    Load configuration from a file and set as global.

    Args:
        path: Path to configuration JSON file

    Returns:
        The loaded configuration
    """
    config = PipelineConfig.from_file(path)
    set_config(config)
    return config


# ============================================================================
# CONFIGURATION VALIDATION
# ============================================================================

def validate_config(config: PipelineConfig) -> List[str]:
    """
    Validate configuration and return list of errors.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    # Browser settings
    if config.browser.executable_path and not Path(config.browser.executable_path).exists():
        errors.append(f"Chromium executable not found: {config.browser.executable_path}")
    if config.browser.launch_timeout_s <= 0:
        errors.append("Launch timeout must be positive")

    # Rendering settings
    if config.rendering.render_timeout_s <= 0:
        errors.append("Render timeout must be positive")
    if config.rendering.wait_until not in ("load", "domcontentloaded", "networkidle", "commit"):
        errors.append(f"Unknown wait_until state: {config.rendering.wait_until}")

    # Layout settings
    for name, value in config.layout.to_dict().items():
        if not value:
            errors.append(f"Layout setting '{name}' must not be empty")

    # API settings
    if config.api.port < 1 or config.api.port > 65535:
        errors.append("API port must be between 1 and 65535")
    if config.api.max_concurrent_jobs < 1:
        errors.append("Max concurrent jobs must be at least 1")
    if config.api.max_body_bytes < 1:
        errors.append("Max body size must be positive")

    return errors


# ============================================================================
# EXAMPLE CONFIGURATION FILE
# ============================================================================

EXAMPLE_CONFIG = """{
    "browser": {
        "executable_path": null,
        "headless": true,
        "launch_timeout_s": 30.0
    },
    "rendering": {
        "page_format": "A4",
        "cover_margin_top": "20mm",
        "body_margin_top": "35mm",
        "margin_bottom": "25mm",
        "print_background": true,
        "render_timeout_s": 120.0
    },
    "layout": {
        "cover_section_id": "presentation",
        "toc_container_id": "table-of-content",
        "total_pages_class": "totalPages"
    },
    "output": {
        "report_html": "rapport.html",
        "debug_html_path": null
    },
    "api": {
        "host": "0.0.0.0",
        "port": 8080,
        "max_concurrent_jobs": 3,
        "max_body_bytes": 104857600
    }
}"""


if __name__ == "__main__":
    # Print example configuration
    print("Example configuration file:")
    print(EXAMPLE_CONFIG)

    # Test loading from environment
    print("\nConfiguration from environment:")
    config = get_config()
    print(config.to_json())
