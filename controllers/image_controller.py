from fastapi import APIRouter, Depends, File, UploadFile

from dependencies.pipeline import get_normalizer
from schemas.base_schemas import ResponseBase
from schemas.image_schema import NormalizedImageResponse
from utils.image_normalizer import ImageNormalizer

# Create router for this controller
router = APIRouter(
    prefix="/images",
    tags=["Imagenes"],
    responses={
        400: {"description": "Archivo no es una imagen"},
        413: {"description": "Imagen demasiado grande"}
    },
)

@router.post("/normalize", response_model=ResponseBase[NormalizedImageResponse])
async def normalize_image(
    file: UploadFile = File(..., description="Imagen elegida para un color"),
    normalizer: ImageNormalizer = Depends(get_normalizer)
):
    """
    Normalizar una imagen subida desde la consola.

    - Redimensiona para que el lado mayor no supere 800 px (sin ampliar)
    - Re-codifica como JPEG con calidad 0.7
    - Rechaza el resultado si supera 900.000 caracteres

    Returns:
        NormalizedImageResponse: data-URI y dimensiones finales
    """
    try:
        image = await normalizer.normalize(file)
    finally:
        await file.close()
    return ResponseBase[NormalizedImageResponse](
        message="Imagen normalizada exitosamente",
        data=NormalizedImageResponse(
            dataUri=image.data_uri,
            width=image.width,
            height=image.height,
            sizeKb=image.size_kb
        )
    )
