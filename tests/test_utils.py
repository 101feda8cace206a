import unittest

from maxplanes.utils import *

class TestUtils(unittest.TestCase):
    class Tracked(object):
        def __init__(self) -> None:
            self.stats = dict()

        @runtime_tracker
        def work(self, x : int) -> int:
            return 2 * x

    class Untracked(object):
        @runtime_tracker
        def work(self) -> None:
            return

    def test_distance(self):
        self.assertAlmostEqual(distance([0.0, 0.0], [3.0, 4.0]), 5.0)
        self.assertEqual(distance([1.0, 1.0], [1.0, 1.0]), 0.0)

    def test_step_towards(self):
        self.assertEqual(step_towards([0.0, 0.0], [3.0, 4.0], 10.0), ([3.0, 4.0], 5.0))

        pos, travelled = step_towards([0.0, 0.0], [3.0, 4.0], 2.5)
        self.assertAlmostEqual(pos[0], 1.5)
        self.assertAlmostEqual(pos[1], 2.0)
        self.assertEqual(travelled, 2.5)

    def test_runtime_tracker(self):
        tracked = TestUtils.Tracked()
        for x in range(1000):
            self.assertEqual(tracked.work(x), 2 * x)

        # only aggregates are kept, however many calls were made
        stats = tracked.stats['work']
        self.assertEqual(set(stats.keys()), {'calls', 'total', 'max'})
        self.assertEqual(stats['calls'], 1000)
        self.assertGreaterEqual(stats['total'], stats['max'])
        self.assertGreaterEqual(stats['max'], 0.0)

        with self.assertRaises(AttributeError):
            TestUtils.Untracked().work()

if __name__ == '__main__':
    unittest.main()
