import threading

import pytest

from resto_pos.database import Database, transaction
from resto_pos.models import Outlet
from resto_pos.services.counters import next_order_number, next_receipt_number


def test_order_numbers_are_unique_and_sequential(db, seed, make_order):
    numbers = [make_order(order_type="Take Away", items=[]).order_number for _ in range(12)]

    assert len(set(numbers)) == 12
    assert numbers[0] == "00001"
    assert numbers[-1] == "00012"


def test_counters_are_per_outlet_and_per_kind(db, seed):
    with transaction(db) as tx:
        first = next_order_number(tx, seed.outlet_id)
        second = next_order_number(tx, seed.outlet_id)
        other_outlet = next_order_number(tx, seed.other_outlet_id)
        receipt = next_receipt_number(tx, seed.outlet_id)

    assert (first, second) == ("00001", "00002")
    assert other_outlet == "00001"
    assert receipt == "00001"


def test_rolled_back_allocation_is_released(db, seed):
    with transaction(db) as tx:
        next_order_number(tx, seed.outlet_id)

    with pytest.raises(RuntimeError):
        with transaction(db) as tx:
            next_order_number(tx, seed.outlet_id)
            raise RuntimeError("abort")

    with transaction(db) as tx:
        assert next_order_number(tx, seed.outlet_id) == "00002"


def test_concurrent_allocations_never_repeat(tmp_path):
    database = Database(
        f"sqlite:///{tmp_path / 'counters.db'}",
        connect_args={"timeout": 30, "check_same_thread": False},
    )
    database.create_all()

    setup = database.session()
    outlet = Outlet(name="Nagoya")
    setup.add(outlet)
    setup.commit()
    outlet_id = outlet.id
    with transaction(setup) as tx:
        first = next_order_number(tx, outlet_id)
    setup.close()

    numbers, errors = [], []
    lock = threading.Lock()

    def worker():
        session = database.session()
        try:
            for _ in range(10):
                with transaction(session) as tx:
                    number = next_order_number(tx, outlet_id)
                with lock:
                    numbers.append(number)
        except Exception as exc:
            errors.append(exc)
        finally:
            session.close()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    database.dispose()

    assert errors == []
    assert first == "00001"
    assert len(numbers) == 40
    assert sorted(numbers) == [str(n).zfill(5) for n in range(2, 42)]
