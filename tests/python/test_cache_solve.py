import unittest
import warnings

import numpy as np

import cachematrix
from cachematrix import CachedMatrix, InversionError, cache_solve


class TestCacheSolve(unittest.TestCase):
    def setUp(self):
        cachematrix.reset_settings()
        cachematrix.clear_cache_traces()

    def tearDown(self):
        cachematrix.reset_settings()
        cachematrix.clear_cache_traces()

    def test_two_by_two_computed_then_cached(self):
        m = [[1.0, 8.0], [3.0, -2.0]]
        cm = CachedMatrix(m)

        first = cache_solve(cm)
        self.assertEqual(cachematrix.last_cache_trace()["event"], "miss")

        second = cache_solve(cm)
        self.assertEqual(cachematrix.last_cache_trace()["event"], "hit")

        self.assertIs(first, second)
        expected = np.array([[-2.0, -8.0], [-3.0, 1.0]]) / -26.0
        self.assertTrue(np.allclose(first, expected))
        np.testing.assert_array_equal(first, cachematrix.invert(m))
        self.assertTrue(np.allclose(np.array(m) @ first, np.eye(2)))

    def test_default_matrix_raises_inversion_error(self):
        cm = cachematrix.make_cache_matrix()
        with self.assertRaises(InversionError) as ctx:
            cache_solve(cm)
        self.assertEqual(ctx.exception.reason, "empty")
        self.assertIsNone(cm.get_cached_inverse())

    def test_set_invalidates_cached_inverse(self):
        m1 = np.array([[4.0, 7.0], [2.0, 6.0]])
        m2 = np.array([[3.0, 0.0, 2.0], [2.0, 0.0, -2.0], [0.0, 1.0, 1.0]])
        cm = CachedMatrix(m1)

        inv1 = cache_solve(cm)
        cm.set(m2)
        self.assertIsNone(cm.get_cached_inverse())

        inv2 = cache_solve(cm)
        self.assertEqual(cachematrix.last_cache_trace()["event"], "miss")
        self.assertEqual(inv2.shape, (3, 3))
        self.assertTrue(np.allclose(inv2, np.linalg.inv(m2)))
        self.assertFalse(inv1.shape == inv2.shape and np.allclose(inv1, inv2))
        self.assertEqual(cachematrix.cache_stats()["miss"], 2)

    def test_set_same_content_still_recomputes(self):
        m = [[2.0, 1.0], [1.0, 3.0]]
        cm = CachedMatrix(m)
        first = cache_solve(cm)
        cm.set(m)
        second = cache_solve(cm)
        self.assertIsNot(first, second)
        np.testing.assert_array_equal(first, second)
        self.assertEqual(cachematrix.cache_stats(), {"hit": 0, "miss": 2, "error": 0, "stale": 0})

    def test_failure_leaves_cache_absent(self):
        cm = CachedMatrix([[1.0, 2.0], [2.0, 4.0]])
        with self.assertRaises(InversionError):
            cache_solve(cm)
        self.assertIsNone(cm.get_cached_inverse())
        trace = cachematrix.last_cache_trace("error")
        self.assertEqual(trace["error"], "InversionError")

        # Fixing the input through set lets the next call succeed.
        cm.set([[1.0, 2.0], [3.0, 4.0]])
        inv = cache_solve(cm)
        self.assertTrue(np.allclose(inv, [[-2.0, 1.0], [1.5, -0.5]]))
        self.assertIs(cm.get_cached_inverse(), inv)

    def test_non_square_raises(self):
        cm = CachedMatrix([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        with self.assertRaises(InversionError) as ctx:
            cache_solve(cm)
        self.assertEqual(ctx.exception.reason, "not_square")
        self.assertFalse(cm.has_cached_inverse)

    def test_options_pass_through_to_inverter(self):
        seen = []

        def fake_invert(matrix, **options):
            seen.append(options)
            return np.linalg.inv(matrix)

        cm = CachedMatrix([[2.0, 0.0], [0.0, 5.0]])
        cache_solve(cm, inverter=fake_invert, method="qr", rtol=1e-6)
        cache_solve(cm, inverter=fake_invert, method="qr", rtol=1e-6)

        self.assertEqual(seen, [{"method": "qr", "rtol": 1e-6}])
        self.assertEqual(cachematrix.last_cache_trace()["method"], "fake_invert")

    def test_inverter_error_is_propagated_unchanged(self):
        class Boom(RuntimeError):
            pass

        err = Boom("inverter failed")

        def failing(matrix, **options):
            raise err

        cm = CachedMatrix([[1.0]])
        with self.assertRaises(Boom) as ctx:
            cache_solve(cm, inverter=failing)
        self.assertIs(ctx.exception, err)
        self.assertIsNone(cm.get_cached_inverse())

    def test_builtin_method_option(self):
        m = [[4.0, 7.0], [2.0, 6.0]]
        for method in ("lu", "numpy", "qr", "gauss", "auto"):
            cm = CachedMatrix(m)
            inv = cache_solve(cm, method=method)
            self.assertTrue(np.allclose(inv, [[0.6, -0.7], [-0.2, 0.4]]), method)
            self.assertEqual(cachematrix.last_cache_trace()["method"], method)

    def test_unknown_method_raises_value_error_and_does_not_cache(self):
        cm = CachedMatrix([[1.0]])
        with self.assertRaises(ValueError):
            cache_solve(cm, method="cholesky")
        self.assertIsNone(cm.get_cached_inverse())

    def test_inverse_method_on_container(self):
        cm = CachedMatrix([[2.0]])
        inv = cm.inverse()
        self.assertIs(cm.inverse(), inv)
        self.assertEqual(inv[0, 0], 0.5)

    def test_cached_result_is_read_only(self):
        cm = CachedMatrix([[2.0, 0.0], [0.0, 2.0]])
        inv = cache_solve(cm)
        with self.assertRaises(ValueError):
            inv[0, 0] = 1.0

    def test_method_label_is_normalized(self):
        cm = CachedMatrix([[4.0, 7.0], [2.0, 6.0]])
        cache_solve(cm, method=" QR ")
        self.assertEqual(cachematrix.last_cache_trace()["method"], "qr")

    def test_unknown_method_label_kept_verbatim(self):
        cm = CachedMatrix([[1.0]])
        with self.assertRaises(ValueError):
            cache_solve(cm, method="Cholesky")
        self.assertEqual(cachematrix.last_cache_trace("error")["method"], "Cholesky")


class _TaggedArray(np.ndarray):
    pass


class TestInverterResultIsReturned(unittest.TestCase):
    def setUp(self):
        cachematrix.clear_cache_traces()

    def test_owned_array_is_returned_and_cached_as_is(self):
        produced = []

        def fresh_invert(matrix, **options):
            produced.append(np.linalg.inv(matrix).copy())
            return produced[-1]

        cm = CachedMatrix([[2.0, 0.0], [0.0, 4.0]])
        first = cache_solve(cm, inverter=fresh_invert)

        self.assertIs(first, produced[0])
        self.assertIs(cm.get_cached_inverse(), produced[0])
        self.assertFalse(first.flags.writeable)
        self.assertIs(cache_solve(cm, inverter=fresh_invert), first)
        self.assertEqual(len(produced), 1)

    def test_subclass_view_keeps_type_but_not_storage(self):
        produced = []

        def tagged_invert(matrix, **options):
            produced.append(np.linalg.inv(matrix).view(_TaggedArray))
            return produced[-1]

        cm = CachedMatrix([[1.0, 8.0], [3.0, -2.0]])
        first = cache_solve(cm, inverter=tagged_invert)
        self.assertIs(first, produced[0])

        cached = cm.get_cached_inverse()
        self.assertIsInstance(cached, _TaggedArray)
        self.assertFalse(np.shares_memory(cached, first))
        np.testing.assert_array_equal(cached, first)

        second = cache_solve(cm, inverter=tagged_invert)
        self.assertIs(second, cached)
        self.assertIsInstance(second, _TaggedArray)

    def test_non_array_result_is_returned_unchanged(self):
        marker = object()
        cm = CachedMatrix([[1.0]])
        self.assertIs(cache_solve(cm, inverter=lambda matrix, **options: marker), marker)
        self.assertIs(cm.get_cached_inverse(), marker)
        self.assertIs(cache_solve(cm), marker)
        self.assertEqual(cachematrix.last_cache_trace()["event"], "hit")


class TestCacheHitWarning(unittest.TestCase):
    def setUp(self):
        cachematrix.reset_settings()

    def tearDown(self):
        cachematrix.reset_settings()

    def _hits(self, records):
        return [r for r in records if issubclass(r.category, cachematrix.CacheMatrixCacheHitWarning)]

    def test_verbose_warns_on_hit_only(self):
        cachematrix.set_verbose(True)
        cm = CachedMatrix([[1.0, 8.0], [3.0, -2.0]])

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            cache_solve(cm)
            self.assertEqual(self._hits(w), [])
            cache_solve(cm)

        hits = self._hits(w)
        self.assertEqual(len(hits), 1)
        self.assertEqual(str(hits[0].message), "getting cached data")

    def test_quiet_by_default(self):
        cachematrix.set_verbose(False)
        cm = CachedMatrix([[1.0, 8.0], [3.0, -2.0]])
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            cache_solve(cm)
            cache_solve(cm)
        self.assertEqual(self._hits(w), [])


class TestStaleInverse(unittest.TestCase):
    def setUp(self):
        cachematrix.clear_cache_traces()

    def test_inverter_replacing_matrix_is_not_cached(self):
        cm = CachedMatrix([[2.0]])

        def meddling(matrix, **options):
            cm.set([[4.0]])
            return np.linalg.inv(matrix)

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            result = cache_solve(cm, inverter=meddling)

        self.assertEqual(result[0, 0], 0.5)
        self.assertIsNone(cm.get_cached_inverse())
        self.assertTrue(any(issubclass(x.category, cachematrix.CacheMatrixStaleInverseWarning) for x in w))
        self.assertEqual(cachematrix.last_cache_trace()["event"], "stale")

        self.assertEqual(cache_solve(cm)[0, 0], 0.25)


if __name__ == "__main__":
    unittest.main()
