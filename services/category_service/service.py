from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from shared.errors import ConflictError, FieldValidationError, NotFoundError
from .models import Category, slugify
from .repository import CategoryRepository
from .schemas import CategoryCreate, CategoryUpdate, CategoryWithCount

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = frozenset(CategoryUpdate.model_fields)


class CategoryService:

    @staticmethod
    async def list_categories(db: AsyncSession):
        return await CategoryRepository.list_active(db)

    @staticmethod
    async def list_with_counts(db: AsyncSession):
        rows = await CategoryRepository.list_with_product_counts(db)
        return [CategoryService._with_count(category, count) for category, count in rows]

    @staticmethod
    def _with_count(category: Category, count: int) -> CategoryWithCount:
        return CategoryWithCount(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            image=category.image,
            parent_id=category.parent_id,
            order=category.order,
            is_active=category.is_active,
            children=[{"id": c.id, "name": c.name, "slug": c.slug} for c in category.children],
            product_count=count,
        )

    @staticmethod
    async def get_category(db: AsyncSession, category_id: int) -> Category:
        category = await CategoryRepository.get_category(db, category_id)
        if not category:
            raise NotFoundError("category", category_id)
        return category

    @staticmethod
    async def _check_unique(db: AsyncSession, name: str, exclude_id: int | None = None) -> str:
        slug = slugify(name)
        if not slug:
            raise FieldValidationError("name", "must contain letters or digits")
        existing = await CategoryRepository.get_by_name_or_slug(db, name, slug)
        if existing and existing.id != exclude_id:
            raise ConflictError(f"Category {name} already exists")
        return slug

    @staticmethod
    async def _check_parent(db: AsyncSession, parent_id: int | None, category_id: int | None = None):
        if parent_id is None:
            return
        if parent_id == category_id:
            raise FieldValidationError("parent_id", "a category cannot be its own parent")
        if not await CategoryRepository.get_category(db, parent_id):
            raise FieldValidationError("parent_id", f"category {parent_id} does not exist")
        if category_id is None:
            return

        # Walk up from the new parent; meeting ourselves means a cycle.
        ancestor = await CategoryRepository.parent_id_of(db, parent_id)
        seen = {parent_id}
        while ancestor is not None and ancestor not in seen:
            if ancestor == category_id:
                raise FieldValidationError("parent_id", "a category cannot be nested under its own descendant")
            seen.add(ancestor)
            ancestor = await CategoryRepository.parent_id_of(db, ancestor)

    @staticmethod
    async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
        slug = await CategoryService._check_unique(db, data.name)
        await CategoryService._check_parent(db, data.parent_id)
        category = Category(slug=slug, **data.model_dump())
        category = await CategoryRepository.create_category(db, category)
        logger.info("category.created", category_id=category.id, slug=slug)
        return category

    @staticmethod
    async def update_category(db: AsyncSession, category_id: int, data: CategoryUpdate) -> Category:
        category = await CategoryService.get_category(db, category_id)
        changes = data.model_dump(exclude_unset=True)

        for field in ("name", "order", "is_active"):
            if field in changes and changes[field] is None:
                raise FieldValidationError(field, "may not be null")
        if "name" in changes:
            category.slug = await CategoryService._check_unique(db, changes["name"], exclude_id=category.id)
        if "parent_id" in changes:
            await CategoryService._check_parent(db, changes["parent_id"], category.id)

        for field, value in changes.items():
            if field in UPDATABLE_FIELDS:
                setattr(category, field, value)
        return await CategoryRepository.save(db, category)

    @staticmethod
    async def delete_category(db: AsyncSession, category_id: int) -> None:
        category = await CategoryService.get_category(db, category_id)
        products, children = await CategoryRepository.count_dependents(db, category_id)
        if products or children:
            raise ConflictError(
                f"Category {category.name} is still in use",
                products=products,
                children=children,
            )
        await CategoryRepository.delete(db, category)
        logger.info("category.deleted", category_id=category_id)
