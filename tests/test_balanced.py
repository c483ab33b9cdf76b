import pytest

from rings.balanced import (
    DEFAULT_CONCURRENT_TIMEOUT,
    Balanced,
    Concurrent,
    InvokedLink,
    Job,
    Weighted,
    vector_gcd,
)
from rings.erx import Erx


class AI:
    pass


def weights_factory(factory, weight, size=8):
    return Weighted(factory, weight, Concurrent.make_concurrents(size, 0), lambda job: job.id >= 0, AI)


def test_balanced_round_robin_follows_weights():
    bd = Balanced()
    bd.add_weights([weights_factory(0, 40), weights_factory(1, 60), weights_factory(2, 20)])
    job = Job(1, "test job", 1_000_000)

    seen = []
    for _ in range(10):
        ai, link = bd.balance(job)
        bd.unlock(link)
        assert isinstance(ai, AI)
        assert link.concurrent_id == 0
        seen.append(link.weight_id)

    assert seen == [0, 1, 2, 0, 1, 1, 0, 1, 2, 0]


def test_pool_counts_proportional_to_reduced_weights():
    bd = Balanced().add_weights([weights_factory(0, 40), weights_factory(1, 60), weights_factory(2, 20)])
    pool = bd.pool
    assert len(pool) == 6
    assert pool.count(0) == 2 and pool.count(1) == 3 and pool.count(2) == 1


def test_zero_weight_is_skipped():
    bd = Balanced().add_weights([weights_factory(0, 0), weights_factory(1, 3)])
    job = Job(1, "j", 1000)
    for _ in range(4):
        _, link = bd.balance(job)
        bd.unlock(link)
        assert link.weight_id == 1


def test_no_weights_raises():
    with pytest.raises(Erx, match="no weights available"):
        Balanced().balance(Job(1, "j", 10))


def test_all_zero_weights_raises():
    bd = Balanced().add_weight(weights_factory(0, 0))
    with pytest.raises(Erx, match="all weights have zero priority"):
        bd.balance(Job(1, "j", 10))


def test_exhausted_resources_raise_and_unlock_frees():
    bd = Balanced().add_weight(weights_factory(7, 1, size=1))
    job = Job(1, "j", 1_000_000)
    _, link = bd.balance(job)
    with pytest.raises(Erx, match="no available resources"):
        bd.balance(job)
    bd.unlock(link)
    _, second = bd.balance(job)
    assert second.version == link.version + 1


def test_condition_rejects_job():
    bd = Balanced().add_weight(weights_factory(0, 1))
    with pytest.raises(Erx, match="no available resources"):
        bd.balance(Job(-1, "negative", 10))


def test_set_weight_val_rebuilds_pool():
    bd = Balanced().add_weights([weights_factory(0, 1), weights_factory(1, 1)])
    bd.set_weight_val(0, 0)
    assert bd.pool == (1,)
    assert bd.weights[0].weight == 0


def test_vector_gcd():
    assert vector_gcd([]) is None
    assert vector_gcd([9]) == 9
    assert vector_gcd([40, 60, 20]) == 20
    assert vector_gcd([3, 5]) == 1


def test_concurrent_reset_and_busy():
    c = Concurrent(1)
    assert c.is_idle(1000)
    c.reset(100, 1000)
    assert (c.version, c.start, c.end) == (1, 1000, 1100)
    assert c.is_busy(1050)
    assert not c.is_busy(1100)
    assert c.is_idle(1200)


def test_unlock_versioned_ignores_stale_version():
    c = Concurrent(1).reset(100, 1000)
    c.unlock_versioned(0)
    assert c.is_busy(1050)
    c.unlock_versioned(1)
    assert (c.start, c.end) == (0, 0)


def test_make_concurrents_ids():
    items = Concurrent.make_concurrents(3, 5)
    assert [c.id for c in items] == [5, 6, 7]
    assert all(c.version == 0 for c in items)


def test_weighted_concurrent_management():
    w = weights_factory(0, 1)
    assert w.get_new_concurrents_id_start() == 8
    with pytest.raises(Erx, match="concurrent id already exists"):
        w.add_concurrent(Concurrent(3))
    w.add_concurrent(Concurrent(8))
    assert w.concurrents_count() == 9
    w.remove_concurrent(8)
    assert w.concurrents_count() == 8
    w.clear_concurrent()
    assert w.concurrents_count() == 0


def test_try_using_default_timeout_and_busy():
    w = weights_factory(0, 1, size=1)
    assert w.try_using(0, 500) == (0, 1)
    assert w.concurrents[0].end == 500 + DEFAULT_CONCURRENT_TIMEOUT
    with pytest.raises(Erx, match="all concurrents are busy"):
        w.try_using(10, 600)


def test_unlock_by_link():
    bd = Balanced().add_weight(weights_factory(4, 1, size=1))
    _, link = bd.balance(Job(1, "j", 1_000_000))
    assert link == InvokedLink(4, 0, 1)
    bd.unlock(link)
    assert bd.weights[0].concurrents[0].end == 0


def test_weight_out_of_range():
    with pytest.raises(ValueError):
        weights_factory(0, 256)