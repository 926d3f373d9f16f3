"""Catalog repository - Database operations for the service/document catalog"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from ...models import (
    Category,
    CategoryDocument,
    Document,
    Subcategory,
    SubcategoryDocument,
)


class CatalogRepository:
    """Repository for catalog database operations"""

    @staticmethod
    def clear_catalog(db: Session) -> None:
        """Delete every catalog row (reverse dependency order)"""
        db.query(SubcategoryDocument).delete()
        db.query(CategoryDocument).delete()
        db.query(Subcategory).delete()
        db.query(Category).delete()
        db.query(Document).delete()
        db.flush()

    @staticmethod
    def list_categories(db: Session) -> list[Category]:
        """All categories with documents and subcategories eagerly loaded"""
        return (
            db.query(Category)
            .options(
                selectinload(Category.documents).selectinload(CategoryDocument.document),
                selectinload(Category.subcategories)
                .selectinload(Subcategory.additional_documents)
                .selectinload(SubcategoryDocument.document),
            )
            .all()
        )

    @staticmethod
    def find_categories(db: Session, ids: set[str], names: set[str]) -> list[Category]:
        """Categories matching any of the ids or names"""
        if not ids and not names:
            return []
        return (
            db.query(Category)
            .options(selectinload(Category.documents).selectinload(CategoryDocument.document))
            .filter(or_(Category.id.in_(ids), Category.name.in_(names)))
            .all()
        )

    @staticmethod
    def find_subcategory_documents(db: Session, subcategory_ids: set[str]) -> list[SubcategoryDocument]:
        if not subcategory_ids:
            return []
        return (
            db.query(SubcategoryDocument)
            .options(selectinload(SubcategoryDocument.document))
            .filter(SubcategoryDocument.subcategory_id.in_(subcategory_ids))
            .all()
        )

    @staticmethod
    def get_category(db: Session, category_id: str) -> Optional[Category]:
        return db.query(Category).filter(Category.id == category_id).first()

    @staticmethod
    def get_subcategory(db: Session, category_id: str, subcategory_id: str) -> Optional[Subcategory]:
        return (
            db.query(Subcategory)
            .filter(Subcategory.id == subcategory_id, Subcategory.category_id == category_id)
            .first()
        )

    @staticmethod
    def list_documents(db: Session, exclude_ids: Optional[list[str]] = None) -> list[Document]:
        """Catalog documents ordered by name"""
        query = db.query(Document)
        if exclude_ids:
            query = query.filter(Document.id.notin_(exclude_ids))
        return query.order_by(Document.name.asc()).all()
