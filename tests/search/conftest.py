from __future__ import annotations

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    with eng.begin() as conn:
        conn.execute(
            text(
                """
                CREATE TABLE customers (
                    id INTEGER PRIMARY KEY,
                    name TEXT,
                    email TEXT,
                    lifetime_value INTEGER NOT NULL DEFAULT 0,
                    email_subscriber BOOLEAN NOT NULL DEFAULT 0,
                    kind TEXT NOT NULL DEFAULT 'standard'
                )
                """
            )
        )
    yield eng
    eng.dispose()


@pytest.fixture
def seed_customers(engine):
    def _seed(*rows: dict) -> None:
        with engine.begin() as conn:
            for row in rows:
                conn.execute(
                    text(
                        """
                        INSERT INTO customers (name, email, lifetime_value, email_subscriber, kind)
                        VALUES (:name, :email, :lifetime_value, :email_subscriber, :kind)
                        """
                    ),
                    {
                        "name": row.get("name"),
                        "email": row.get("email"),
                        "lifetime_value": row.get("lifetime_value", 0),
                        "email_subscriber": row.get("email_subscriber", False),
                        "kind": row.get("kind", "standard"),
                    },
                )

    return _seed
