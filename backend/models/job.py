"""
Job domain models and schemas.

Wire format of the file processing job payload.

Dependencies: pydantic
System role: Queue message contract between producer and worker
"""

from pydantic import BaseModel, ConfigDict, Field


class FileJobPayload(BaseModel):
    """Payload of a file processing job: only the record ID, never bytes."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    file_id: int = Field(alias="fileId", gt=0, description="File record ID")

    def to_message(self) -> dict:
        return self.model_dump(by_alias=True)
