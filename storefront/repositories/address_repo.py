# storefront/repositories/address_repo.py
import uuid

from sqlmodel import Session

from storefront.models.address import Address


class AddressRepository:
    """Lookup of saved addresses and insert of guest checkout addresses."""

    def get_by_id(self, session: Session, address_id: uuid.UUID) -> Address | None:
        return session.get(Address, address_id)

    def create(self, session: Session, address: Address) -> Address:
        # No commit: guest addresses are part of the checkout transaction.
        session.add(address)
        session.flush()
        return address
