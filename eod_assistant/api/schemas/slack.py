from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class SlackPostRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    webhook_url: str | None = Field(default=None, alias="webhookUrl")
    message: str = ""


class SlackPostResponse(BaseModel):
    success: bool
