
"""Create a small SQLite database to chat with.

    python -m sqlchat.scripts.seed_demo_db demo.db

then connect with {"backend": "sqlite", "database": "demo.db"}.
"""

import asyncio
import sys
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlchat.core.logging import get_logger

logger = get_logger(__name__)


CREATE_CUSTOMERS_TABLE = """
CREATE TABLE IF NOT EXISTS customers (
    id INTEGER PRIMARY KEY,
    name VARCHAR(255) NOT NULL,
    email VARCHAR(255) UNIQUE NOT NULL,
    country VARCHAR(100),
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""

CREATE_PRODUCTS_TABLE = """
CREATE TABLE IF NOT EXISTS products (
    id INTEGER PRIMARY KEY,
    name VARCHAR(255) NOT NULL,
    category VARCHAR(100),
    price NUMERIC(10, 2) NOT NULL
);
"""

CREATE_ORDERS_TABLE = """
CREATE TABLE IF NOT EXISTS orders (
    id INTEGER PRIMARY KEY,
    customer_id INTEGER NOT NULL REFERENCES customers(id),
    product_id INTEGER NOT NULL REFERENCES products(id),
    quantity INTEGER NOT NULL,
    ordered_at DATE NOT NULL
);
"""

SEED_ROWS = [
    """INSERT OR IGNORE INTO customers (id, name, email, country) VALUES
        (1, 'Ada Lovelace', 'ada@example.com', 'UK'),
        (2, 'Grace Hopper', 'grace@example.com', 'US'),
        (3, 'Alan Turing', 'alan@example.com', 'UK')""",
    """INSERT OR IGNORE INTO products (id, name, category, price) VALUES
        (1, 'Keyboard', 'Hardware', 49.90),
        (2, 'Monitor', 'Hardware', 189.00),
        (3, 'IDE License', 'Software', 99.00)""",
    """INSERT OR IGNORE INTO orders (id, customer_id, product_id, quantity, ordered_at) VALUES
        (1, 1, 1, 2, '2024-01-15'),
        (2, 2, 2, 1, '2024-02-03'),
        (3, 3, 3, 5, '2024-02-20'),
        (4, 1, 3, 1, '2024-03-11')""",
]


async def seed_database(path: str):
    """Create and fill the demo tables in the SQLite file at `path`"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{path}")
    try:
        async with engine.begin() as conn:
            logger.info("🧩 Creating tables...")

            table_statements = [
                ("customers", CREATE_CUSTOMERS_TABLE),
                ("products", CREATE_PRODUCTS_TABLE),
                ("orders", CREATE_ORDERS_TABLE),
            ]

            for name, statement in table_statements:
                await conn.execute(text(statement))
                logger.info(f"✓ {name} table ready")

            for statement in SEED_ROWS:
                await conn.execute(text(statement))

            logger.info(f"✅ Demo database ready at {path}")

    except Exception as e:
        logger.error(f"❌ Demo database creation failed: {e}")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_database(sys.argv[1] if len(sys.argv) > 1 else "demo.db"))
