#!/usr/bin/env python3
"""
Demo script showing convertx on a small shop/order/item schema.

This script:
1. Creates a temporary SQLite database with Shop, Order and Item tables
2. Saves an order with two items
3. Loads the order back with only its items eagerly loaded
4. Prints the normalized order as JSON (the unloaded 'shop' and 'order'
   associations are absent)
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON
from sqlalchemy.orm import selectinload
from sqlmodel import Column, Field, Relationship, Session, SQLModel, create_engine, select

from convertx import GraphNormalizer, load_config, setup_logging


class Shop(SQLModel, table=True):
    __tablename__ = "shop"

    shop_id: int | None = Field(default=None, primary_key=True)
    name: str


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    order_id: int | None = Field(default=None, primary_key=True)
    code: str
    total_price: Decimal = Field(default=Decimal(0), max_digits=10, decimal_places=2)
    delivery_date: datetime | None = None
    details: dict | None = Field(default=None, sa_column=Column(JSON))
    shop_id: int | None = Field(default=None, foreign_key="shop.shop_id")

    shop: Shop | None = Relationship()
    items: list["Item"] = Relationship(back_populates="order")


class Item(SQLModel, table=True):
    __tablename__ = "item"

    item_id: int | None = Field(default=None, primary_key=True)
    name: str
    price: Decimal = Field(default=Decimal(0), max_digits=10, decimal_places=2)
    quantity: int = 1
    order_id: int | None = Field(default=None, foreign_key="orders.order_id")

    order: Order | None = Relationship(back_populates="items")


def main():
    """Main demo function."""
    config = load_config()
    setup_logging(config["logging"])
    normalizer = GraphNormalizer.from_config(config)

    temp_db = tempfile.NamedTemporaryFile(suffix='.db', delete=False)
    temp_db.close()
    engine = create_engine(f"sqlite:///{temp_db.name}")
    SQLModel.metadata.create_all(engine)

    try:
        with Session(engine) as session:
            order = Order(
                code="CODE1",
                total_price=Decimal(100),
                delivery_date=datetime.now(timezone.utc),
                details={"guest_name": "Hoang Nguyen", "is_member": True},
                shop=Shop(name="Manga Corner"),
                items=[
                    Item(name="Doraemon", price=Decimal(20), quantity=2),
                    Item(name="One Piece", price=Decimal(15), quantity=6),
                ]
            )
            session.add(order)
            session.commit()
            order_id = order.order_id

        with Session(engine) as session:
            statement = select(Order).where(Order.order_id == order_id).options(selectinload(Order.items))
            loaded = session.exec(statement).one()
            result = normalizer.normalize(loaded)

        logging.info(f"Normalized order {order_id} with {len(result['items'])} item(s)")
        print(json.dumps(result, indent=2, default=str))

    finally:
        engine.dispose()
        os.unlink(temp_db.name)


if __name__ == "__main__":
    main()
