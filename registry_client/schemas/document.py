"""Pydantic models for the registry's JSON payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """One product line of a goods-introduction document."""

    certificate_document: str | None = None
    certificate_document_date: str | None = None
    certificate_document_number: str | None = None
    uit: str | None = Field(None, description="Unique product identification code")


class Document(BaseModel):
    """Document introducing goods produced locally into circulation."""

    participant_inn: str = Field(..., description="Taxpayer number of the participant")
    production_date: str = Field(..., description="Production date, YYYY-MM-DD")
    production_type: str = "LOCAL"
    products: list[Product] = Field(default_factory=list)


class AuthKeyResponse(BaseModel):
    """Response of the key request: identifier plus challenge to sign."""

    model_config = ConfigDict(extra="ignore")

    uuid: str
    data: str | None = None


class AuthTokenRequest(BaseModel):
    uuid: str
    data: str


class AuthTokenResponse(BaseModel):
    """Response of the token exchange.

    The registry answers with ``token`` on success and with ``code``,
    ``error_message`` and ``description`` otherwise.
    """

    model_config = ConfigDict(extra="ignore")

    token: str | None = None
    code: str | None = None
    error_message: str | None = None
    description: str | None = None


def serialize_document(document: Document) -> str:
    """Render a document as the JSON body expected by the create endpoint."""

    return document.model_dump_json()
