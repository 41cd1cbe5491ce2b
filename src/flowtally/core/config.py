"""Configuration classes for FlowTally."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .lookup import DEFAULT_TAG

DEFAULT_INPUT_DIR = Path("attachments/input")
DEFAULT_OUTPUT_DIR = Path("attachments/output")


@dataclass
class Config:
    """Configuration for a flow-log aggregation run.

    Attributes:
        flow_log_path: Flow-log file, one record per line.
        lookup_path: Lookup table file (header, then port,protocol,tag).
        output_dir: Directory the reports are written to.
        tag_counts_filename: File name of the tag count report.
        port_protocol_counts_filename: File name of the port/protocol report.
        num_workers: Number of parallel workers. None uses the CPU count.
        default_tag: Tag for port/protocol keys missing from the lookup table.
        encoding: Text encoding of input and output files.
    """

    flow_log_path: str = str(DEFAULT_INPUT_DIR / "flow_logs.txt")
    lookup_path: str = str(DEFAULT_INPUT_DIR / "lookup_table.csv")
    output_dir: str = str(DEFAULT_OUTPUT_DIR)
    tag_counts_filename: str = "tag_counts.csv"
    port_protocol_counts_filename: str = "port_protocol_counts.csv"
    num_workers: int | None = None
    default_tag: str = DEFAULT_TAG
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.num_workers is not None and self.num_workers < 1:
            raise ValueError("num_workers must be at least 1")
        if not self.tag_counts_filename or not self.port_protocol_counts_filename:
            raise ValueError("output filenames must not be empty")
        if not self.default_tag:
            raise ValueError("default_tag must not be empty")

    @property
    def worker_count(self) -> int:
        """Resolved number of workers."""
        if self.num_workers is not None:
            return self.num_workers
        return os.cpu_count() or 1

    @property
    def tag_counts_path(self) -> Path:
        """Full path of the tag count report."""
        return Path(self.output_dir) / self.tag_counts_filename

    @property
    def port_protocol_counts_path(self) -> Path:
        """Full path of the port/protocol count report."""
        return Path(self.output_dir) / self.port_protocol_counts_filename

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return {
            "flow_log_path": self.flow_log_path,
            "lookup_path": self.lookup_path,
            "output_dir": self.output_dir,
            "tag_counts_filename": self.tag_counts_filename,
            "port_protocol_counts_filename": self.port_protocol_counts_filename,
            "num_workers": self.num_workers,
            "default_tag": self.default_tag,
            "encoding": self.encoding,
        }

    def to_json(self, path: str | Path) -> None:
        """Save configuration to JSON file.

        Args:
            path: Path to output JSON file.
        """
        path = Path(path)
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path to output YAML file.
        """
        path = Path(path)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create configuration from dictionary.

        Args:
            data: Dictionary with configuration values.

        Returns:
            Config instance.
        """
        defaults = cls()
        return cls(
            flow_log_path=str(data.get("flow_log_path", defaults.flow_log_path)),
            lookup_path=str(data.get("lookup_path", defaults.lookup_path)),
            output_dir=str(data.get("output_dir", defaults.output_dir)),
            tag_counts_filename=data.get("tag_counts_filename", defaults.tag_counts_filename),
            port_protocol_counts_filename=data.get(
                "port_protocol_counts_filename", defaults.port_protocol_counts_filename
            ),
            num_workers=data.get("num_workers"),
            default_tag=data.get("default_tag", defaults.default_tag),
            encoding=data.get("encoding", defaults.encoding),
        )

    @classmethod
    def from_json(cls, path: str | Path) -> Config:
        """Load configuration from JSON file.

        Args:
            path: Path to JSON configuration file.

        Returns:
            Config instance.

        Raises:
            FileNotFoundError: If file does not exist.
            json.JSONDecodeError: If file is not valid JSON.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Config:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Config instance.

        Raises:
            FileNotFoundError: If file does not exist.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Load configuration from file (auto-detect format).

        Supports JSON (.json) and YAML (.yaml, .yml) files.

        Args:
            path: Path to configuration file.

        Returns:
            Config instance.

        Raises:
            ValueError: If file extension is not recognized.
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix == ".json":
            return cls.from_json(path)
        elif suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        else:
            raise ValueError(f"Unsupported config file format: {suffix}. Use .json or .yaml/.yml")
