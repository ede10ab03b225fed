from pydantic import BaseModel, ConfigDict, Field


class SubmitAccepted(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_id: str = Field(..., alias="requestId", min_length=1)
