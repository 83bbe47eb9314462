from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from resolver.domain.entities.result import Attempt


class DownloadIn(BaseModel):
    # optional so a missing url maps to 400 like the rest of the envelope, not 422
    url: Optional[str] = None


class DownloadOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    download_url: str = Field(alias="downloadUrl")
    strategy: str


class ErrorOut(BaseModel):
    success: bool = False
    message: str
    attempts: Optional[List[Attempt]] = None
