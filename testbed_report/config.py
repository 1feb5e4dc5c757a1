"""Configuration for text exports."""

from pydantic import BaseModel


class ExportSettings(BaseModel):
    """Titles and links written into markdown and plain-text exports."""

    title: str = "Jupyter Kernel Protocol Conformance"
    protocol_name: str = "Jupyter Messaging Protocol"
    site_url: str = "https://runtimed.github.io/kernel-testbed/"
    base_path: str = "/kernel-testbed"
