import itertools
import unittest

from maxplanes.domain import Domain
from maxplanes.tasks import Task

class TestDomain(unittest.TestCase):
    class DummyPlane(object):
        def __init__(self, id : int) -> None:
            self.id = id

    def test_sorted(self):
        a = TestDomain.DummyPlane(1)
        domain = Domain()
        for task_id in [5, 1, 3, 4, 2]:
            domain.put(Task(task_id, [0.0, 0.0]), a)

        self.assertEqual(domain.task_ids(), [1, 2, 3, 4, 5])
        self.assertEqual([task.id for task in domain], [1, 2, 3, 4, 5])
        self.assertEqual(len(domain), 5)

    def test_first_writer_wins(self):
        a = TestDomain.DummyPlane(1)
        b = TestDomain.DummyPlane(2)
        task = Task(7, [0.0, 0.0])

        domain = Domain()
        self.assertTrue(domain.put(task, a))
        self.assertFalse(domain.put(task, a))
        self.assertFalse(domain.put(task, b))
        self.assertIs(domain.owner(task), a)
        self.assertEqual(domain.claimants(task), {1, 2})
        self.assertEqual(len(domain), 1)

    def test_lowest_id_wins(self):
        a = TestDomain.DummyPlane(1)
        b = TestDomain.DummyPlane(2)
        task = Task(7, [0.0, 0.0])

        domain = Domain()
        domain.put(task, b)
        self.assertTrue(domain.put(task, a))
        self.assertEqual(domain.to_dict(), {7 : 1})

    def test_order_independence(self):
        planes = [TestDomain.DummyPlane(plane_id) for plane_id in [3, 1, 2]]
        tasks = [Task(task_id, [0.0, 0.0]) for task_id in range(4)]
        claims = [(tasks[0], planes[0]), (tasks[0], planes[1]), (tasks[1], planes[2]),
                  (tasks[2], planes[0]), (tasks[3], planes[2]), (tasks[3], planes[0])]

        results = []
        for permutation in itertools.permutations(claims):
            domain = Domain()
            for task, plane in permutation:
                domain.put(task, plane)
            results.append(domain.to_dict())

        self.assertEqual(results[0], {0 : 1, 1 : 2, 2 : 3, 3 : 2})
        for result in results:
            self.assertEqual(result, results[0])

    def test_lookups(self):
        a = TestDomain.DummyPlane(1)
        task = Task(7, [0.0, 0.0])
        domain = Domain()
        domain.put(task, a)

        self.assertIn(task, domain)
        self.assertNotIn(Task(8, [0.0, 0.0]), domain)
        self.assertIs(domain.get_task(7), task)
        self.assertIsNone(domain.get_task(8))
        self.assertIsNone(domain.owner_id(8))
        self.assertEqual(domain.owned_by(1), [task])
        self.assertEqual(domain.owned_by(2), [])

if __name__ == '__main__':
    unittest.main()
