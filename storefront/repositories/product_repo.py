# storefront/repositories/product_repo.py
import uuid

from sqlmodel import Session, select

from storefront.models.product import Color, Product, ProductImage, Size, Variant


class ProductRepository:
    """
    Read-only access to the catalog (products, variants, images).

    - Pure DB operations.
    - No FastAPI, no business logic.
    - Stock changes go through InventoryRepository, not here.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_many(
        self,
        session: Session,
        product_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, Product]:
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        return {p.id: p for p in session.exec(stmt).all()}

    # ----- Variants -----

    def get_variant(self, session: Session, variant_id: uuid.UUID) -> Variant | None:
        return session.get(Variant, variant_id)

    def find_variant(
        self,
        session: Session,
        product_id: uuid.UUID,
        color: str,
        size: str,
    ) -> Variant | None:
        """Look up a variant by its human-facing color and size values."""
        stmt = (
            select(Variant)
            .join(Color, Color.id == Variant.color_id)
            .join(Size, Size.id == Variant.size_id)
            .where(
                Variant.product_id == product_id,
                Color.value == color,
                Size.value == size,
            )
        )
        return session.exec(stmt).first()

    def variant_labels(
        self,
        session: Session,
        variant: Variant,
    ) -> tuple[str | None, str | None]:
        """(color, size) display values for a variant."""
        color = session.get(Color, variant.color_id)
        size = session.get(Size, variant.size_id)
        return (color.value if color else None, size.value if size else None)

    # ----- Product images -----

    def main_image_url(
        self,
        session: Session,
        product_id: uuid.UUID,
        color_id: uuid.UUID | None = None,
    ) -> str | None:
        """
        First image by priority, preferring one tagged with `color_id`
        over color-agnostic images.
        """
        stmt = (
            select(ProductImage)
            .where(ProductImage.product_id == product_id)
            .order_by(ProductImage.priority.asc())
        )
        images = session.exec(stmt).all()
        if not images:
            return None
        if color_id is not None:
            for img in images:
                if img.color_id == color_id:
                    return img.image_url
        return images[0].image_url
