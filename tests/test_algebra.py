import operator

import pytest

from rate_path.algebra import (
    MAX_PRODUCT,
    MIN_SUM,
    PathAlgebra,
    check_contract,
    get_algebra,
)
from rate_path.errors import AlgebraContractViolation


def test_builtin_algebras():
    assert MAX_PRODUCT.compose(2.0, 3.0) == 6.0
    assert MAX_PRODUCT.is_better(6.0, 5.0)
    assert not MAX_PRODUCT.is_better(5.0, 5.0)
    assert MIN_SUM.compose(1, 1) == 2
    assert MIN_SUM.is_better(2, 3)
    assert not MIN_SUM.is_better(3, 3)
    assert MAX_PRODUCT.identity == 1.0 and MIN_SUM.identity == 0.0
    assert MAX_PRODUCT.vectorizable and MIN_SUM.vectorizable


def test_best_keeps_first_on_ties():
    a, b = float("5.0"), float("5")
    assert MAX_PRODUCT.best(a, b) is a
    assert MAX_PRODUCT.best(5.0, 6.0) == 6.0


def test_get_algebra_by_name():
    assert get_algebra("max_product") is MAX_PRODUCT
    assert get_algebra("min_sum") is MIN_SUM
    with pytest.raises(ValueError):
        get_algebra("max_sum")


def test_custom_algebra_passes_contract():
    # widest path: bottleneck capacity
    widest = PathAlgebra("widest", compose=min, is_better=operator.gt)
    check_contract(widest, [1.0, 5.0, 3.0, 7.5])
    assert not widest.has_identity
    assert not widest.vectorizable


def test_reflexive_better_is_rejected():
    bad = PathAlgebra("bad", compose=operator.mul, is_better=operator.ge)
    with pytest.raises(AlgebraContractViolation, match="irreflexive"):
        check_contract(bad, [2.0])


def test_non_associative_compose_is_rejected():
    bad = PathAlgebra("bad", compose=operator.sub, is_better=operator.lt)
    with pytest.raises(AlgebraContractViolation, match="associative"):
        check_contract(bad, [1.0, 2.0, 4.0])


def test_contract_tolerates_float_rounding():
    check_contract(MAX_PRODUCT, [0.1, 0.7, 1000.0, 0.0009, 3.3])
    check_contract(MIN_SUM, [0.1, 0.2, 0.3])
