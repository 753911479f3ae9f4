import threading
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from storefront.data.database import init_db
from storefront.data.models.product import ProductModel
from storefront.domain.errors import InsufficientStock, NotFoundError, ValidationError
from storefront.repos.product_repo import ProductRepo
from storefront.services.stock_ledger import StockLedger


def test_reserve_decrements(db, make_product):
    laptop = make_product(stock=5)
    ledger = StockLedger(db)

    ledger.reserve(laptop.id, 3)

    assert ledger.read_stock(laptop.id) == 2


def test_reserve_never_goes_negative(db, make_product):
    laptop = make_product(stock=2)
    ledger = StockLedger(db)

    with pytest.raises(InsufficientStock):
        ledger.reserve(laptop.id, 3)

    assert ledger.read_stock(laptop.id) == 2


def test_reserve_exact_stock(db, make_product):
    laptop = make_product(stock=3)
    ledger = StockLedger(db)

    ledger.reserve(laptop.id, 3)
    assert ledger.read_stock(laptop.id) == 0


def test_reserve_unknown_product(db):
    with pytest.raises(NotFoundError):
        StockLedger(db).reserve(999, 1)


def test_release_restores(db, make_product):
    laptop = make_product(stock=5)
    ledger = StockLedger(db)
    ledger.reserve(laptop.id, 4)
    ledger.release(laptop.id, 4)
    assert ledger.read_stock(laptop.id) == 5


def test_write_stock(db, make_product):
    laptop = make_product(stock=5)
    ledger = StockLedger(db)

    assert ledger.write_stock(laptop.id, 12) == 12
    assert ledger.read_stock(laptop.id) == 12
    # the loaded row is refreshed as well
    assert laptop.stock_quantity == 12

    with pytest.raises(ValidationError):
        ledger.write_stock(laptop.id, -1)
    with pytest.raises(NotFoundError):
        ledger.write_stock(999, 1)


def test_read_then_write_loses_an_update_but_reserve_does_not(db, make_product):
    """Two buyers of 3 units with stock 5: overwriting from stale reads sells 6."""
    laptop = make_product(stock=5)
    ledger = StockLedger(db)

    first_seen = ledger.read_stock(laptop.id)
    second_seen = ledger.read_stock(laptop.id)
    ledger.write_stock(laptop.id, first_seen - 3)
    ledger.write_stock(laptop.id, second_seen - 3)
    assert ledger.read_stock(laptop.id) == 2  # six sold, only three counted

    ledger.write_stock(laptop.id, 5)
    ledger.reserve(laptop.id, 3)
    with pytest.raises(InsufficientStock):
        ledger.reserve(laptop.id, 3)
    assert ledger.read_stock(laptop.id) == 2


def test_simultaneous_reservations_sell_each_unit_once(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'stock.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    init_db(bind=engine)
    Session = sessionmaker(bind=engine, expire_on_commit=False)

    with Session() as setup:
        laptop = ProductRepo(setup).create_product(
            ProductModel(name="Laptop Pro 14", price=Decimal("999.99"), stock_quantity=5)
        )

    start = threading.Barrier(2)
    outcomes = []

    def buy():
        with Session() as session:
            ledger = StockLedger(session)
            start.wait()
            try:
                ledger.reserve(laptop.id, 3)
                outcomes.append("sold")
            except InsufficientStock:
                outcomes.append("refused")

    threads = [threading.Thread(target=buy) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    with Session() as check:
        assert StockLedger(check).read_stock(laptop.id) == 2
    assert sorted(outcomes) == ["refused", "sold"]
    engine.dispose()
