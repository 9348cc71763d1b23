import logging
from typing import Awaitable, Callable, Iterable, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.exceptions import CatalogError, ConflictError, NotFoundError, PersistenceError
from marketplace.crud.catalog import CatalogRepository
from marketplace.schemas.entities import ChangeSet, ProductSnapshot

logger = logging.getLogger(__name__)

# Called with (operation, product_id) once a mutation is committed
PostCommitListener = Callable[[str, str], Awaitable[None]]


class CatalogService:
    """Transaction handling shared by the services that mutate a product.

    A mutation loads the product with its row locked, builds a change set in
    memory and applies it in the same transaction. Any error rolls the whole
    transaction back.
    """

    def __init__(self, db: AsyncSession, listeners: Optional[Iterable[PostCommitListener]] = None):
        self.db = db
        self.repository = CatalogRepository(db)
        self.listeners: List[PostCommitListener] = list(listeners or [])

    async def _mutate(self, operation: str, product_id: str, build):
        """Run ``build(product)`` -> (change_set, response) and commit the change set"""
        logger.info("%s started for product %s", operation, product_id)
        try:
            product = await self.repository.load_for_update(product_id)
            if product is None:
                raise NotFoundError(f"Product {product_id} not found")
            change_set, response = await build(product)
            await self._save(change_set)
        except PersistenceError:
            await self.repository.rollback()
            raise
        except CatalogError as e:
            await self.repository.rollback()
            logger.warning("%s rejected for product %s: %s %s", operation, product_id, e.message, e.errors)
            raise
        except Exception:
            await self.repository.rollback()
            raise

        logger.info("%s finished for product %s", operation, product_id)
        await self._notify(operation, product_id)
        return response

    async def _save(self, change_set: ChangeSet) -> None:
        try:
            await self.repository.apply(change_set)
        except SQLAlchemyError as e:
            logger.error("Applying changes to product %s failed: %s", change_set.product_id, e)
            raise PersistenceError("Failed to save product changes.") from e
        await self.repository.commit()

    async def _notify(self, operation: str, product_id: str) -> None:
        for listener in self.listeners:
            try:
                await listener(operation, product_id)
            except Exception:
                logger.exception("Post-commit listener failed after %s on product %s", operation, product_id)

    async def _resolve_ids(
        self,
        product: ProductSnapshot,
        ids: Iterable[str],
        known: Set[str],
        locate: Callable[[List[str]], Awaitable[dict]],
        label: str
    ) -> None:
        """Raise NotFoundError for unknown ids, ConflictError for ids owned by another product"""
        missing = [id_ for id_ in dict.fromkeys(ids) if id_ not in known]
        if not missing:
            return
        owners = await locate(missing)
        unknown = [id_ for id_ in missing if id_ not in owners]
        if unknown:
            raise NotFoundError(f"{label} not found: {', '.join(unknown)}")
        raise ConflictError(
            f"{label} belong to another product than {product.id}: {', '.join(missing)}"
        )
