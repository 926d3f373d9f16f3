"""Catalog domain schemas - Pydantic models for responses"""

from typing import Optional

from pydantic import BaseModel


class DocumentInfo(BaseModel):
    id: str
    name: str
    category: str
    description: Optional[str] = None
    hasExpiration: bool = False


class ConditionalDocument(BaseModel):
    document: DocumentInfo
    condition: Optional[str] = None
    requiredIf: Optional[bool] = None


class CategoryDocuments(BaseModel):
    required: list[DocumentInfo] = []
    optional: list[DocumentInfo] = []
    conditional: list[ConditionalDocument] = []


class SubcategoryResponse(BaseModel):
    id: str
    name: str
    requiresRegistration: bool = False
    additionalDocuments: list[DocumentInfo] = []


class CategoryResponse(BaseModel):
    """Schema for a catalog category with grouped documents"""

    id: str
    name: str
    requiresQualification: bool
    documents: CategoryDocuments
    subcategories: list[SubcategoryResponse] = []
