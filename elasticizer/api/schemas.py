from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class HealthResponse(BaseModel):
    status: str = Field(..., description="Overall API health status")


class DocumentResponse(BaseModel):
    """
    A stored item as returned by the API: engine metadata merged with the
    stored fields. Extra fields are the document's own.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    index: Optional[str] = Field(
        default=None, alias="_index", description="Physical index holding the item"
    )
    id: Optional[str] = Field(default=None, alias="_id", description="Item id")


class InvalidRequest(BaseModel):
    type: str = Field(..., description='"invalid" or "missing"', examples=["invalid"])


class EngineErrorBody(BaseModel):
    type: Optional[str] = Field(
        default=None, description="Engine error class", examples=["NotFoundError"]
    )
    message: Optional[str] = Field(default=None, description="Engine error message")


class ShardErrorBody(BaseModel):
    type: Optional[str] = Field(
        default=None, examples=["mapper_parsing_exception"]
    )
    message: Optional[str] = Field(default=None, description="Engine-reported reason")
    index: Optional[str] = Field(default=None, description="Physical index")
    uuid: Optional[str] = Field(default=None, description="Index UUID, when reported")
