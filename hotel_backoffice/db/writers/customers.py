import uuid

import structlog
from sqlalchemy import insert
from sqlalchemy.engine import Connection

from hotel_backoffice.db.readers.customers import find_customer_id_by_phone
from hotel_backoffice.models.customers import Customer

logger = structlog.get_logger(__name__)


def find_or_create_customer(conn: Connection, full_name: str, phone_number: str) -> str:
    """
    Return the id of the customer using this phone number, creating one if needed.

    Args:
        conn (Connection): Active database connection (within transaction).
        full_name (str): Guest name, used only when creating the customer.
        phone_number (str): Normalized phone number.

    Returns:
        str: Customer id.
    """
    existing = find_customer_id_by_phone(conn, phone_number)
    if existing:
        return existing

    customer_id = str(uuid.uuid4())
    conn.execute(
        insert(Customer).values(
            id=customer_id,
            full_name=full_name,
            phone_number=phone_number,
            is_email_confirmed=False,
        )
    )
    logger.info("customer_created", customer_id=customer_id)
    return customer_id
