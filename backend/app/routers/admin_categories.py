"""Admin category management."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.auth import require_admin
from app.schemas.category import CategoryResponse, CategoryTreeNode, CategoryCreate, CategoryUpdate
from app.schemas.common import ApiResponse, ok
from app.services import categories as category_service

router = APIRouter(
    prefix="/admin/categories",
    tags=["admin-categories"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=ApiResponse[list[CategoryResponse]])
def list_categories(db: Session = Depends(get_db)):
    return ok(category_service.list_all(db))


@router.get("/tree", response_model=ApiResponse[list[CategoryTreeNode]])
def category_tree(db: Session = Depends(get_db)):
    return ok(category_service.get_tree(db))


@router.get("/{category_id}", response_model=ApiResponse[CategoryResponse])
def get_category(category_id: int, db: Session = Depends(get_db)):
    return ok(category_service.get_by_id(db, category_id))


@router.post("", status_code=201, response_model=ApiResponse[CategoryResponse])
def create_category(data: CategoryCreate, db: Session = Depends(get_db)):
    """
    Create a category.

    The slug is derived from the name when omitted and suffixed (-1, -2 ...)
    when taken; the position defaults to the end of the sibling list.
    """
    return ok(category_service.create(db, data), "Category created")


@router.put("/{category_id}", response_model=ApiResponse[CategoryResponse])
def update_category(category_id: int, data: CategoryUpdate, db: Session = Depends(get_db)):
    """Partial update; send ``parentId: null`` to move a category to the root."""
    return ok(category_service.update(db, category_id, data), "Category updated")


@router.delete("/{category_id}", response_model=ApiResponse[None])
def delete_category(category_id: int, db: Session = Depends(get_db)):
    """Delete a category without subcategories or products (409 otherwise)."""
    category_service.delete(db, category_id)
    return ok(message="Category deleted")
