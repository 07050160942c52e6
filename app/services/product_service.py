from sqlalchemy.orm import Session
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional, List
import logging

from app.models.product import Product
from app.schemas.product import ProductCreate, ProductReplace, ProductUpdate

logger = logging.getLogger(__name__)


class ProductNotFoundError(Exception):
    """Exception raised when the requested product doesn't exist."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found")


class ProductService:
    """
    Service class for Product CRUD operations.

    Every operation touches exactly one row. Persistence errors roll the
    session back and are re-raised for the API error handlers.
    """

    DEFAULT_PER_PAGE = 30

    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: str) -> Product:
        """
        Get a product by ID.

        Raises:
            ProductNotFoundError: If no product has this ID
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if not product:
            raise ProductNotFoundError(product_id)

        return product

    def list(
        self,
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
        name: Optional[str] = None,
        price: Optional[float] = None,
    ) -> List[Product]:
        """
        Get a page of products, newest first.

        Args:
            page: Page number (1-indexed)
            per_page: Number of items per page
            name: Only return products with exactly this name
            price: Only return products with exactly this price
        """
        query = self.db.query(Product)

        if name is not None:
            query = query.filter(Product.name == name)
        if price is not None:
            query = query.filter(Product.price == price)

        offset = (page - 1) * per_page
        return (
            query.order_by(Product.created_at.desc(), Product.id.desc())
            .offset(offset)
            .limit(per_page)
            .all()
        )

    def create(self, product_data: ProductCreate) -> Product:
        """Create a new product; the datastore assigns its ID."""
        product = Product(**self._settable(product_data.model_dump()))
        self.db.add(product)
        self._commit("creating product")
        self.db.refresh(product)

        logger.info(f"Product #{product.id} created")
        return product

    def replace(self, product: Product, product_data: ProductReplace) -> Product:
        """
        Overwrite every settable field of a loaded product.

        Fields missing from the body are cleared. If the row was deleted after
        it was loaded, a new row is inserted at the same ID.
        """
        product_id = product.id
        values = self._settable(product_data.model_dump())

        try:
            result = self.db.execute(
                update(Product)
                .where(Product.id == product_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                # The loaded instance is stale, insert a fresh row in its place
                if product in self.db:
                    self.db.expunge(product)
                self.db.add(Product(id=product_id, **values))
                logger.info(f"Product #{product_id} vanished before replace, recreating it")
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error replacing product #{product_id}: {e}")
            raise

        logger.info(f"Product #{product_id} replaced")
        return self.get(product_id)

    def update(self, product: Product, product_data: ProductUpdate) -> Product:
        """Merge the fields present in the body into a loaded product."""
        update_data = self._settable(product_data.model_dump(exclude_unset=True))
        for field, value in update_data.items():
            setattr(product, field, value)

        self._commit(f"updating product #{product.id}")
        self.db.refresh(product)

        logger.info(f"Product #{product.id} updated ({', '.join(update_data) or 'no fields'})")
        return product

    def remove(self, product: Product) -> None:
        """Delete a loaded product."""
        product_id = product.id
        self.db.delete(product)
        self._commit(f"deleting product #{product_id}")

        logger.info(f"Product #{product_id} deleted")

    @staticmethod
    def _settable(data: dict) -> dict:
        return {field: value for field, value in data.items() if field in Product.SETTABLE_FIELDS}

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error {action}: {e}")
            raise
