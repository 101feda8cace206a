import logging

import numpy as np
import unittest

from maxplanes.behaviors import BehaviorTypes
from maxplanes.config import SimulationConfig
from maxplanes.maxsum import *
from maxplanes.planes import PlaneStates
from maxplanes.tasks import Task
from maxplanes.world import World

class TestUpdateGraph(unittest.TestCase):
    def setUp(self) -> None:
        self.world = World(SimulationConfig(10.0, level=logging.WARNING))
        self.a = self.world.create_plane(1, [0.0, 0.0])
        self.b = self.world.create_plane(2, [5.0, 0.0])
        self.c = self.world.create_plane(3, [100.0, 0.0])

    def test_behavior_order(self):
        self.world.initialize()
        self.assertEqual(self.a.get_behavior_order(), [BehaviorTypes.NEIGHBOR_TRACKING,
                                                       BehaviorTypes.UPDATE_GRAPH,
                                                       BehaviorTypes.MAX_SUM_VARIABLE,
                                                       BehaviorTypes.MAX_SUM_FUNCTION,
                                                       BehaviorTypes.ASSIGNMENT])

    def test_domain(self):
        self.world.submit_task(Task(1, [1.0, 0.0]), 1)
        self.world.exchange()

        self.assertEqual(self.a.get_domain().to_dict(), {1 : 1})
        self.assertEqual(self.b.get_domain().to_dict(), {1 : 1})
        self.assertEqual(self.c.get_domain().to_dict(), {})

    def test_contradictory_claims(self):
        task = Task(7, [2.0, 0.0])
        self.a.add_task(task)
        self.b.add_task(task)
        self.world.exchange()

        self.assertEqual(self.a.get_domain().to_dict(), {7 : 1})
        self.assertEqual(self.b.get_domain().to_dict(), {7 : 1})
        self.assertEqual(self.a.get_domain().claimants(task), {1, 2})

        # a contested task is never selected before its function has spoken
        self.assertIsNone(self.a.next_task)
        self.assertIsNone(self.b.next_task)

    def test_non_operational_neighbor(self):
        d = self.world.create_plane(4, [0.0, 5.0])
        d.set_state(PlaneStates.CHARGING.value)
        d.add_task(Task(9, [0.0, 6.0]))
        self.world.exchange()

        self.assertEqual(self.a.get_domain().to_dict(), {})
        self.assertEqual(d.get_domain().to_dict(), {})

        d.set_state(PlaneStates.NORMAL.value)
        self.world.exchange()

        self.assertEqual(self.a.get_domain().to_dict(), {9 : 4})
        self.assertEqual(d.get_domain().to_dict(), {9 : 4})

    def test_completed_tasks(self):
        task = Task(1, [1.0, 0.0])
        self.world.submit_task(task, 1)
        task.complete(0)
        self.world.exchange()

        self.assertEqual(self.a.get_domain().to_dict(), {})

class TestMaxSumFunction(unittest.TestCase):
    def setUp(self) -> None:
        self.plane = MaxSumPlane(1, [0.0, 0.0], 100, level=logging.WARNING)
        self.function = MaxSumFunction(self.plane, unassigned_penalty=100)

    def test_compute_costs(self):
        costs, winner = self.function.compute_costs(5, {1 : {5 : 2.0, 6 : 10.0}, 2 : {5 : 7.0}})
        self.assertEqual(winner, 1)
        self.assertEqual(costs, {1 : -7.0, 2 : -2.0})

    def test_alternatives(self):
        # plane 1 has a cheaper alternative, so its marginal cost of doing task 5 is 2 - (-4) = 6
        costs, winner = self.function.compute_costs(5, {1 : {5 : 2.0, 6 : -4.0}, 2 : {5 : 3.0}})
        self.assertEqual(winner, 2)
        self.assertEqual(costs, {1 : -3.0, 2 : -6.0})

    def test_ties(self):
        costs, winner = self.function.compute_costs(5, {3 : {5 : 1.0}, 2 : {5 : 1.0}})
        self.assertEqual(winner, 2)
        self.assertEqual(costs, {2 : -1.0, 3 : -1.0})

    def test_single_participant(self):
        costs, winner = self.function.compute_costs(5, {1 : {5 : 3.0}})
        self.assertEqual(winner, 1)
        self.assertEqual(costs, {1 : -100.0})

    def test_candidates(self):
        # plane 1 is the best participant but cannot be granted the task
        costs, winner = self.function.compute_costs(5, {1 : {5 : 2.0, 6 : 10.0}, 2 : {5 : 7.0}}, {2})
        self.assertEqual(winner, 2)
        self.assertEqual(costs, {1 : -7.0, 2 : -2.0})

        costs, winner = self.function.compute_costs(5, {1 : {5 : 2.0}}, set())
        self.assertIsNone(winner)
        self.assertEqual(costs, {1 : -100.0})

    def test_no_participants(self):
        self.assertEqual(self.function.compute_costs(5, dict()), (dict(), None))
        self.assertEqual(self.function.compute_costs(5, {1 : {6 : 3.0}}), (dict(), None))

class SolverTestCase(unittest.TestCase):
    def assertExclusive(self, world : World):
        """
        No two planes work on the same task, every task is listed by at most one plane
        and every submitted task is either completed or listed by exactly one plane
        """
        selected = [task_id for task_id in world.assignments().values() if task_id is not None]
        self.assertEqual(len(selected), len(set(selected)), f't={world.t}: {world.assignments()}')

        listed = dict()
        for plane in world.planes.values():
            if plane.next_task is not None:
                self.assertIn(plane.next_task, plane.get_tasks())
            for task in plane.get_tasks():
                listed.setdefault(task.id, []).append(plane.id)

        for task_id, task in world.tasks.items():
            if task.is_completed():
                self.assertNotIn(task_id, listed, f't={world.t}: completed task {task_id} still listed')
            else:
                self.assertEqual(len(listed.get(task_id, [])), 1, f't={world.t}: task {task_id} listed by {listed.get(task_id, [])}')

class TestMaxSumSolver(SolverTestCase):
    def setUp(self) -> None:
        """
        Every plane starts out owning the task closest to another plane
        """
        self.world = World(SimulationConfig(1000.0, level=logging.WARNING))
        self.a = self.world.create_plane(1, [0.0, 0.0])
        self.b = self.world.create_plane(2, [100.0, 0.0])
        self.c = self.world.create_plane(3, [0.0, 100.0])

        self.t1 = Task(1, [1.0, 0.0])
        self.t2 = Task(2, [99.0, 0.0])
        self.t3 = Task(3, [0.0, 99.0])
        self.world.submit_task(self.t1, 2)
        self.world.submit_task(self.t2, 3)
        self.world.submit_task(self.t3, 1)

    def test_exclusivity(self):
        for _ in range(25):
            self.world.exchange()
            self.assertExclusive(self.world)

    def test_stability(self):
        for _ in range(15):
            self.world.exchange()
        expected = {1 : 1, 2 : 2, 3 : 3}
        self.assertEqual(self.world.assignments(), expected)

        for _ in range(10):
            self.world.exchange()
            self.assertEqual(self.world.assignments(), expected)

    def test_hand_off(self):
        for _ in range(15):
            self.world.exchange()

        self.assertEqual(self.a.get_tasks(), [self.t1])
        self.assertEqual(self.b.get_tasks(), [self.t2])
        self.assertEqual(self.c.get_tasks(), [self.t3])
        for plane in [self.a, self.b, self.c]:
            self.assertEqual(plane.get_domain().to_dict(), {1 : 1, 2 : 2, 3 : 3})

    def test_non_operational(self):
        self.a.set_state(PlaneStates.CHARGING.value)
        for _ in range(10):
            self.world.exchange()

        self.assertIsNone(self.a.next_task)
        self.assertIsNone(self.a.get_variable().get_selection())
        self.assertEqual(self.a.get_domain().to_dict(), {})
        self.assertEqual(self.a.get_tasks(), [self.t3])
        self.assertExclusive(self.world)

    def test_unreachable(self):
        self.world.create_plane(4, [5000.0, 0.0])
        for _ in range(15):
            self.world.exchange()

        # plane 4 is out of range of everybody else
        self.assertEqual(self.world.planes[4].get_domain().to_dict(), {})
        self.assertIsNone(self.world.planes[4].next_task)
        self.assertEqual(self.world.assignments(), {1 : 1, 2 : 2, 3 : 3, 4 : None})

class TestHandOver(SolverTestCase):
    def setUp(self) -> None:
        """
        Task 1 is submitted to plane 1 although plane 2 is much closer to it
        """
        self.world = World(SimulationConfig(10.0, level=logging.WARNING))
        self.a = self.world.create_plane(1, [0.0, 0.0])
        self.b = self.world.create_plane(2, [5.0, 0.0])
        self.task = Task(1, [6.0, 0.0])
        self.world.submit_task(self.task, 1)

    def test_hand_over(self):
        # the host works on its task until its function node has heard from both planes
        for _ in range(2):
            self.world.exchange()
            self.assertEqual(self.world.assignments(), {1 : 1, 2 : None})

        # the task changes hands within a single exchange
        self.world.exchange()
        self.assertEqual(self.a.get_tasks(), [])
        self.assertEqual(self.b.get_tasks(), [self.task])
        self.assertEqual(self.world.assignments(), {1 : None, 2 : 1})
        self.assertEqual(self.a.get_function().get_releases(), [self.task])
        self.assertEqual(self.b.get_variable().get_transfers(), [self.task])

        for _ in range(5):
            self.world.exchange()
            self.assertExclusive(self.world)
        self.assertEqual(self.world.assignments(), {1 : None, 2 : 1})
        self.assertEqual(self.b.get_domain().to_dict(), {1 : 2})

    def test_out_of_range(self):
        for _ in range(2):
            self.world.exchange()

        # the best participant flies out of range before the task is granted to it
        self.b.pos = [50.0, 0.0]
        self.world.exchange()
        self.assertEqual(self.a.get_tasks(), [self.task])
        self.assertEqual(self.b.get_tasks(), [])
        self.assertEqual(self.a.get_function().get_releases(), [])

        self.world.exchange()
        self.assertEqual(self.world.assignments(), {1 : 1, 2 : None})
        self.assertEqual(self.world.substrate.stats['dropped'], 0)

class TestRandomFleets(SolverTestCase):
    N_PLANES = 8
    N_TASKS = 12

    def build(self, seed : int, comms_range : float = 40.0) -> World:
        """
        Scatters planes and tasks over a 100x100 area and hands every task to a random plane
        """
        rng = np.random.default_rng(seed)
        world = World(SimulationConfig(comms_range, level=logging.WARNING))
        for plane_id in range(1, self.N_PLANES + 1):
            world.create_plane(plane_id, rng.uniform(0.0, 100.0, 2).tolist())
        for task_id in range(1, self.N_TASKS + 1):
            task = Task(task_id, rng.uniform(0.0, 100.0, 2).tolist())
            world.submit_task(task, int(rng.integers(1, self.N_PLANES + 1)))
        return world

    def test_ticks(self):
        for seed in range(20):
            world = self.build(seed)
            for _ in range(60):
                world.tick()
                self.assertExclusive(world)

    def test_exchanges(self):
        for seed in range(20):
            world = self.build(seed)
            for _ in range(30):
                world.exchange()
                self.assertExclusive(world)

    def test_progress(self):
        world = self.build(0, comms_range=1000.0)
        world.run(200)
        self.assertGreater(world.get_statistics()['tasks_completed'], 0)
        self.assertExclusive(world)

if __name__ == '__main__':
    unittest.main()
