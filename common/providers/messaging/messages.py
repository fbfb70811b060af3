from typing import List

from pydantic import BaseModel, Field


class QueuedRecord(BaseModel):
    """One raw record of a transport batch.

    The body is opaque until the consumer parses it; message_id is assigned by
    the transport and repeats when the same record is redelivered.
    """

    message_id: str = Field(alias="messageId")
    body: str

    model_config = {"populate_by_name": True}


class UsageBatchMessage(BaseModel):
    """Message model for a batch of usage records."""

    records: List[QueuedRecord] = Field(alias="Records")

    model_config = {"populate_by_name": True}
