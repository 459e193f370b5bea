import logging
import time
from typing import Optional

import jwt as PyJWT

logger = logging.getLogger("jwt_utils")


def read_claims(token: str) -> dict:
    """
    Lee los claims de un token JWT emitido por el backend.

    La firma no se verifica aquí: el backend es quien valida el token en cada
    llamada; este servicio solo lo reenvía y usa los claims para registro.
    """
    if not token:
        logger.error("Se intentó leer un token vacío")
        raise ValueError("Token vacío")

    try:
        return PyJWT.decode(token, options={"verify_signature": False, "verify_exp": False})
    except PyJWT.PyJWTError as e:
        logger.error(f"Error leyendo token: {str(e)}")
        raise ValueError(f"Invalid token: {str(e)}")


def is_expired(claims: dict, now: Optional[float] = None) -> bool:
    exp = claims.get("exp")
    if exp is None:
        return False
    return float(exp) <= (now if now is not None else time.time())
