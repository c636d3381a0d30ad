"""Configuration model for the Prow results provider."""

from pydantic import BaseModel, Field


class ProwGCSConfig(BaseModel):
    """Configuration for fetching Prow job results from GCS."""

    bucket: str = Field(default="origin-ci-test", description="GCS bucket name")
    api_url: str = Field(
        default="https://storage.googleapis.com/storage/v1",
        description="GCS JSON API base URL, used for listing builds",
    )
    download_url: str = Field(
        default="https://storage.googleapis.com",
        description="Base URL serving the bucket objects",
    )
    max_builds_listed: int = Field(
        default=1000, description="Maximum number of objects listed per request"
    )
