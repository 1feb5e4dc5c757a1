"""Base model configuration for all data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with standard configuration.

    Extra fields are kept so documents from newer producers still load.
    """

    model_config = ConfigDict(frozen=True, extra="allow")
