from dataclasses import dataclass, field
from typing import List, Optional

from .constants import (
    DEFAULT_OUTPUT_DIRECTORY,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_WORKERS,
    ERROR_MESSAGES,
    SUPPORTED_OUTPUT_FORMATS,
)


@dataclass
class BaseConfig:
    """Base configuration for a collection run."""
    output_directory: str = DEFAULT_OUTPUT_DIRECTORY
    output_format: str = DEFAULT_OUTPUT_FORMAT  # csv, json, txt
    regions: List[str] = field(default_factory=list)
    max_workers: int = DEFAULT_WORKERS
    categories: List[str] = field(default_factory=list)
    timeout: Optional[float] = None

    def __post_init__(self):
        if self.output_format not in SUPPORTED_OUTPUT_FORMATS:
            raise ValueError(
                ERROR_MESSAGES["invalid_output_format"].format(
                    format=self.output_format, supported=", ".join(SUPPORTED_OUTPUT_FORMATS)
                )
            )
        if self.max_workers < 1:
            raise ValueError(ERROR_MESSAGES["invalid_workers"].format(workers=self.max_workers))

    def validate(self) -> bool:
        if not self.output_directory:
            print(f"Error: {ERROR_MESSAGES['missing_output_directory']}")
            return False
        if self.output_format not in SUPPORTED_OUTPUT_FORMATS:
            print(f"Error: Invalid output format '{self.output_format}'")
            return False
        return True
