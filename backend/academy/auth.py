"""
Identification de l'acteur à partir du jeton JWT émis par le service d'authentification.

Le jeton porte l'identifiant (`id`) et le rôle (`admin` ou `assistant`) de l'acteur.
Les services métier reçoivent seulement l'identifiant et ne vérifient aucun secret.
"""

import uuid
from typing import Literal

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from academy.config import settings

bearer_scheme = HTTPBearer(auto_error=False)


class Actor(BaseModel):
    id: uuid.UUID
    role: Literal["admin", "assistant"]


def decode_actor(token: str) -> Actor:
    """Décode et valide le jeton. Lève JWTError ou ValidationError s'il est invalide."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    return Actor(id=payload.get("id"), role=payload.get("role"))


def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Actor:
    """Dépendance FastAPI : acteur authentifié de la requête, 401 sinon."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentification requise.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_actor(credentials.credentials)
    except (JWTError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Jeton invalide ou expiré.",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_roles(*roles: str):
    """Fabrique de dépendance : 403 si le rôle de l'acteur n'est pas autorisé sur la route."""

    def checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Le rôle {actor.role} n'est pas autorisé sur cette route.",
            )
        return actor

    return checker
