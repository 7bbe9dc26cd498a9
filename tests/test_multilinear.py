"""Tests for multilinear polynomials and the equality table."""

import numpy as np
import pytest

from whir_spec.primitives.multilinear import (
    CoefficientList,
    EvaluationsList,
    MultilinearPoint,
    eq_table,
    eval_eq,
    inner_product,
)


class TestCoefficientList:
    """Test coefficient form."""

    def test_to_evaluations_two_variables(self, gf) -> None:
        """Test f = 1 + 2*X2 + 3*X1 + 4*X1*X2 over the hypercube."""
        evals = CoefficientList(gf([1, 2, 3, 4])).to_evaluations()
        assert np.array_equal(evals.evals, gf([1, 3, 4, 10]))

    def test_to_evaluations_three_variables(self, gf) -> None:
        """Test that entry j sums the coefficients of every subset of j."""
        evals = CoefficientList(gf([1, 2, 3, 4, 5, 6, 7, 8])).to_evaluations()
        assert np.array_equal(evals.evals, gf([1, 3, 4, 10, 6, 14, 16, 36]))

    def test_to_evaluations_does_not_mutate(self, gf) -> None:
        """Test that the coefficients survive the transform."""
        poly = CoefficientList(gf([1, 2, 3, 4]))
        poly.to_evaluations()
        assert np.array_equal(poly.coeffs, gf([1, 2, 3, 4]))

    def test_shape(self, gf) -> None:
        """Test num_variables and num_coeffs."""
        poly = CoefficientList(gf([1, 2, 3, 4, 5, 6, 7, 8]))
        assert poly.num_variables == 3
        assert poly.num_coeffs == 8
        assert poly.field is gf

    @pytest.mark.parametrize("length", [0, 3, 6])
    def test_not_power_of_two(self, gf, length: int) -> None:
        """Test that only power-of-two lengths are accepted."""
        with pytest.raises(ValueError):
            CoefficientList(gf.Zeros(length))

    def test_evaluate_on_hypercube(self, gf) -> None:
        """Test evaluation at boolean points against the wavelet transform."""
        poly = CoefficientList(gf([1, 2, 3, 4]))
        evals = poly.to_evaluations().evals
        for i, (x1, x2) in enumerate([(0, 0), (0, 1), (1, 0), (1, 1)]):
            assert poly.evaluate(MultilinearPoint([gf(x1), gf(x2)])) == evals[i]

    def test_evaluate_matches_evaluation_form(self, gf) -> None:
        """Test that both forms agree off the hypercube."""
        poly = CoefficientList(gf.Random(16))
        point = MultilinearPoint(list(gf.Random(4)))
        assert poly.evaluate(point) == poly.to_evaluations().evaluate(point)

    def test_evaluate_arity(self, gf) -> None:
        """Test that the point must match the variable count."""
        poly = CoefficientList(gf([1, 2, 3, 4]))
        with pytest.raises(ValueError):
            poly.evaluate(MultilinearPoint([gf(1)]))


class TestMultilinearPoint:
    """Test points and the equality polynomial."""

    def test_expand_from_univariate(self, gf) -> None:
        """Test (x^4, x^2, x) for three variables."""
        point = MultilinearPoint.expand_from_univariate(gf(3), 3)
        assert point == MultilinearPoint([gf(81), gf(9), gf(3)])

    def test_expand_from_univariate_evaluates_univariate(self, gf) -> None:
        """Test that the multilinear evaluation equals sum c_i x^i."""
        coeffs = gf.Random(8)
        x = gf.Random()
        point = MultilinearPoint.expand_from_univariate(x, 3)

        expected = gf(0)
        for i, c in enumerate(coeffs):
            expected = expected + c * x ** i
        assert CoefficientList(coeffs).evaluate(point) == expected

    def test_eq_poly_outside_boolean(self, gf) -> None:
        """Test eq is the indicator on boolean points."""
        a = MultilinearPoint([gf(1), gf(0), gf(1)])
        b = MultilinearPoint([gf(1), gf(1), gf(1)])
        assert a.eq_poly_outside(a) == 1
        assert a.eq_poly_outside(b) == 0

    def test_eq_poly_outside_symmetric(self, gf) -> None:
        """Test eq(x, y) == eq(y, x)."""
        a = MultilinearPoint(list(gf.Random(3)))
        b = MultilinearPoint(list(gf.Random(3)))
        assert a.eq_poly_outside(b) == b.eq_poly_outside(a)

    def test_eq_poly_outside_mismatch(self, gf) -> None:
        """Test that arities must agree."""
        with pytest.raises(ValueError):
            MultilinearPoint([gf(1)]).eq_poly_outside(MultilinearPoint([gf(1), gf(0)]))


class TestEqTable:
    """Test accumulation of scaled equality tables."""

    def test_indicator(self, gf) -> None:
        """Test that a boolean point gives a one-hot table."""
        table = eq_table([gf(1), gf(0)], gf(1))
        assert np.array_equal(table, gf([0, 0, 1, 0]))

    def test_matches_eq_poly(self, gf) -> None:
        """Test that entry b equals scalar * eq(z, b)."""
        z = MultilinearPoint(list(gf.Random(3)))
        scalar = gf(7)
        table = eq_table(z.coords, scalar)
        for b in range(8):
            bits = MultilinearPoint([gf((b >> (2 - i)) & 1) for i in range(3)])
            assert table[b] == scalar * z.eq_poly_outside(bits)

    def test_eval_eq_accumulates(self, gf) -> None:
        """Test that repeated calls add up in place."""
        out = gf.Zeros(4)
        eval_eq([gf(1), gf(0)], out, gf(5))
        eval_eq([gf(1), gf(0)], out, gf(5))
        eval_eq([gf(0), gf(1)], out, gf(2))
        assert np.array_equal(out, gf([0, 2, 10, 0]))

    def test_eval_eq_size_mismatch(self, gf) -> None:
        """Test that the table must cover the point's hypercube."""
        with pytest.raises(ValueError):
            eval_eq([gf(1), gf(0)], gf.Zeros(8), gf(1))


class TestEvaluationsList:
    """Test evaluation form."""

    def test_evaluate_on_hypercube(self, gf) -> None:
        """Test that boolean points read the table."""
        evals = EvaluationsList(gf([5, 6, 7, 8]))
        assert evals.evaluate(MultilinearPoint([gf(1), gf(0)])) == 7
        assert evals.evaluate(MultilinearPoint([gf(0), gf(1)])) == 6

    def test_evaluate_is_eq_weighted_sum(self, gf) -> None:
        """Test f(z) = sum_b f(b) * eq(z, b)."""
        evals = EvaluationsList(gf.Random(8))
        z = MultilinearPoint(list(gf.Random(3)))
        assert evals.evaluate(z) == inner_product(evals.evals, eq_table(z.coords, gf(1)))

    def test_zeros(self, gf) -> None:
        """Test the all-zero table."""
        evals = EvaluationsList.zeros(gf, 3)
        assert evals.num_evals == 8
        assert evals.num_variables == 3
        assert np.array_equal(evals.evals, gf.Zeros(8))

    def test_from_coefficients(self, gf) -> None:
        """Test the wavelet transform entry point."""
        evals = EvaluationsList.from_coefficients(CoefficientList(gf([1, 2, 3, 4])))
        assert np.array_equal(evals.evals, gf([1, 3, 4, 10]))

    def test_inner_product_mismatch(self, gf) -> None:
        """Test that lengths must agree."""
        with pytest.raises(ValueError):
            inner_product(gf([1, 2]), gf([1, 2, 3]))
