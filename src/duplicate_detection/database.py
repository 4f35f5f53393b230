"""
Relational schema for the customers table.

Only what the duplicate lookup reads; customer CRUD lives elsewhere.
"""
from __future__ import annotations

from typing import Iterable

from sqlalchemy import Boolean, Column, String, create_engine, event, false
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base
from sqlalchemy.pool import StaticPool

from .errors import CustomerStoreError
from .model import Customer

Base = declarative_base()


class CustomerRow(Base):
    """Customer record as stored."""

    __tablename__ = "customers"

    id = Column(String, primary_key=True)
    company_name = Column(String, nullable=False, default="")
    telephone = Column(String, nullable=False, default="")
    afm = Column(String, nullable=False, default="", index=True)
    doy = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(String, nullable=True)
    town = Column(String, nullable=True)
    postal_code = Column(String, nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, server_default=false())

    def to_customer(self) -> Customer:
        return Customer(
            id=str(self.id),
            company_name=self.company_name or "",
            telephone=self.telephone or "",
            afm=self.afm or "",
            doy=self.doy,
            email=self.email,
            address=self.address,
            town=self.town,
            postal_code=self.postal_code,
            deleted=bool(self.deleted),
        )

    @classmethod
    def from_customer(cls, customer: Customer) -> "CustomerRow":
        return cls(
            id=customer.id,
            company_name=customer.company_name,
            telephone=customer.telephone,
            afm=customer.afm,
            doy=customer.doy,
            email=customer.email,
            address=customer.address,
            town=customer.town,
            postal_code=customer.postal_code,
            deleted=customer.deleted,
        )


def init_database(url: str) -> Engine:
    """
    Create an engine for `url` and make sure the schema exists.

    In-memory SQLite shares one connection so every session sees the same data.
    Raises CustomerStoreError when the database cannot be opened.
    """
    try:
        if url in ("sqlite://", "sqlite:///:memory:"):
            engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(url)
        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", _unicode_lower)
        Base.metadata.create_all(engine)
    except SQLAlchemyError as exc:
        raise CustomerStoreError(f"cannot open database {url!r}: {exc}") from exc
    return engine


def _unicode_lower(dbapi_conn, connection_record) -> None:
    # sqlite's own lower() folds ASCII only; ILIKE compiles to lower(x) LIKE lower(y)
    dbapi_conn.create_function("lower", 1, _lower, deterministic=True)


def _lower(value):
    return value.lower() if isinstance(value, str) else value


def save_customers(engine: Engine, customers: Iterable[Customer]) -> int:
    """Insert or replace customers by id; returns how many were written."""
    count = 0
    with Session(engine) as session, session.begin():
        for customer in customers:
            session.merge(CustomerRow.from_customer(customer))
            count += 1
    return count
