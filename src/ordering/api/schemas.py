"""Pydantic request schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands. Field names follow the storefront's French wire
format.
"""

import re
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class OrderLineRequest(BaseModel):
    id: UUID
    nom: str
    prix: float = Field(gt=0)  # Display only; the server price is authoritative
    quantite: int = Field(gt=0)
    image_url: str | None = None
    taille: str | None = None
    couleur: str | None = None


class PlaceOrderRequest(BaseModel):
    nom_client: str = Field(min_length=1)
    telephone: str = Field(min_length=1)
    email: str | None = None
    adresse: str = Field(min_length=1)
    ville: str = Field(min_length=1)
    produits: list[OrderLineRequest] = Field(min_length=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "nom_client": "Amina Benali",
                    "telephone": "0612345678",
                    "email": "amina@example.com",
                    "adresse": "12 rue des Orangers",
                    "ville": "Casablanca",
                    "produits": [
                        {
                            "id": "0b6f7b8e-3c1a-4f7e-9a55-2f1c9d3e4a10",
                            "nom": "Mocassin cuir",
                            "prix": 450.0,
                            "quantite": 1,
                            "couleur": "Noir",
                            "taille": "42",
                        }
                    ],
                }
            ]
        }
    }

    @field_validator("email")
    @classmethod
    def email_is_blank_or_valid(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return value
        if not _EMAIL_PATTERN.match(value):
            raise ValueError("Email invalide")
        return value


class ChangeStatusRequest(BaseModel):
    nouveau_statut: Literal["En attente", "Expédiée", "Livrée", "Annulée"]
