from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from shared.errors import FieldValidationError, NotFoundError
from services.category_service.repository import CategoryRepository
from .models import Product
from .repository import ProductRepository
from .schemas import ProductCreate, ProductUpdate

logger = structlog.get_logger(__name__)

# Fields an admin may change through ProductUpdate. Anything else (ratings,
# review counts, timestamps, id) is owned by the system.
UPDATABLE_FIELDS = frozenset(ProductUpdate.model_fields)


class ProductService:

    @staticmethod
    async def _check_category(db: AsyncSession, category_id: int | None):
        if category_id is None:
            return
        if not await CategoryRepository.get_category(db, category_id):
            raise FieldValidationError("category_id", f"category {category_id} does not exist")

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate):
        await ProductService._check_category(db, data.category_id)
        product = Product(**data.model_dump())
        product = await ProductRepository.create_product(db, product)
        logger.info("product.created", product_id=product.id, stock=product.stock)
        return product

    @staticmethod
    async def list_products(db: AsyncSession, **filters):
        return await ProductRepository.list_products(db, **filters)

    @staticmethod
    async def list_featured(db: AsyncSession, limit: int):
        return await ProductRepository.list_featured(db, limit)

    @staticmethod
    async def get_product(db: AsyncSession, product_id: int) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFoundError("product", product_id)
        return product

    @staticmethod
    async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate):
        product = await ProductService.get_product(db, product_id)
        changes = data.model_dump(exclude_unset=True)

        if "category_id" in changes:
            await ProductService._check_category(db, changes["category_id"])
        for field in ("name", "description", "price", "stock", "images", "specifications", "tags", "is_active", "is_featured"):
            if field in changes and changes[field] is None:
                raise FieldValidationError(field, "may not be null")

        for field, value in changes.items():
            if field in UPDATABLE_FIELDS:
                setattr(product, field, value)

        product = await ProductRepository.update_product(db, product)
        logger.info("product.updated", product_id=product.id, fields=sorted(changes))
        return product

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int) -> None:
        product = await ProductService.get_product(db, product_id)
        await ProductRepository.delete_product(db, product)
        logger.info("product.deleted", product_id=product_id)
