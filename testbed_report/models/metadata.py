"""Static kernel metadata that does not come from test reports."""

import json
from collections.abc import Mapping
from pathlib import Path

from pydantic import Field, ValidationError

from testbed_report.models.base import Model


class KernelMetadata(Model):
    """Descriptive information about one kernel."""

    implementation: str = Field(..., description="Implementation display name")
    repository: str = Field(..., description="URL of the source repository")
    description: str | None = Field(default=None, description="Short description")
    documentation: str | None = Field(default=None, description="Documentation URL")


class KernelMetadataMap(Model):
    """Metadata keyed by kernel name, as stored in kernels.json."""

    kernels: Mapping[str, KernelMetadata] = Field(default_factory=dict)

    def get(self, kernel_name: str) -> KernelMetadata | None:
        """Return metadata for a kernel, or None when it is not listed."""
        return self.kernels.get(kernel_name)


def load_kernel_metadata(path: Path) -> KernelMetadataMap:
    """Load kernel metadata from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid metadata JSON

    """
    if not path.exists():
        raise FileNotFoundError(f"Kernel metadata not found: {path}")

    try:
        return KernelMetadataMap.model_validate(json.loads(path.read_text()))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e
    except ValidationError as e:
        raise ValueError(f"Invalid kernel metadata schema in {path}: {e}") from e
