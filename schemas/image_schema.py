from pydantic import BaseModel, Field


class NormalizedImageResponse(BaseModel):
    dataUri: str = Field(..., description="Imagen JPEG codificada como data-URI")
    width: int
    height: int
    sizeKb: int
