from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from hotel_backoffice.models.customers import Customer
from hotel_backoffice.schemas.customers import CustomerInfo


def get_customer_lookup(
    conn: Connection, customer_ids: Optional[Iterable[str]] = None
) -> dict[str, CustomerInfo]:
    """
    Build the customer projection keyed by customer id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        customer_ids (Optional[Iterable[str]]): Restrict to these ids (all customers if None).

    Returns:
        dict[str, CustomerInfo]: Customer name and phone by id.
    """
    stmt = select(Customer.id, Customer.full_name, Customer.phone_number)
    if customer_ids is not None:
        ids = list(customer_ids)
        if not ids:
            return {}
        stmt = stmt.where(Customer.id.in_(ids))

    return {
        row.id: CustomerInfo(id=row.id, name=row.full_name, phone=row.phone_number)
        for row in conn.execute(stmt)
    }


def find_customer_id_by_phone(conn: Connection, phone_number: str) -> Optional[str]:
    """
    Look up a customer by phone number.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        phone_number (str): Normalized phone number.

    Returns:
        Optional[str]: Customer id, or None if no customer uses this number.
    """
    row = conn.execute(
        select(Customer.id).where(Customer.phone_number == phone_number)
    ).fetchone()
    return row[0] if row else None
