import concurrent.futures
import logging

import pandas as pd
from tqdm import tqdm

from maxplanes.behaviors import ConfigurationError
from maxplanes.config import SimulationConfig
from maxplanes.elements import SimulationElement
from maxplanes.maxsum import MaxSumPlane
from maxplanes.neighbors import NeighborTracker
from maxplanes.network import MessagingSubstrate
from maxplanes.planes import Plane
from maxplanes.tasks import Task
from maxplanes.utils import distance, runtime_tracker

class World(SimulationElement):
    """
    ## Simulation World

    Runs a fleet of planes as a discrete-tick simulation. Every tick consists of:
        1. refreshing the communication graph and publishing every plane's task list
        2. running every plane's outgoing phase
        3. delivering all messages sent during the outgoing phase
        4. running every plane's incoming phase
        5. moving the planes towards their next task and completing the tasks they reach

    Planes only read shared snapshots and write their own state during phases 2 and 4, so
    running them in a thread pool gives the same results as running them sequentially.
    """
    def __init__(self, config : SimulationConfig, level : int = None, logger : logging.Logger = None) -> None:
        if not isinstance(config, SimulationConfig):
            raise TypeError(f'`config` must be of type `SimulationConfig`. is of type {type(config)}')

        super().__init__('WORLD', config.level if level is None else level, logger)
        self.config = config
        self.t = 0
        self.planes = dict()
        self.tasks = dict()
        self.history = []
        self.stats = dict()

        self.tracker = NeighborTracker(config.comms_range, logger=self.get_logger())
        self.substrate = MessagingSubstrate(self.tracker, self.planes, logger=self.get_logger())

        self._initialized = False
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=config.workers) if config.workers > 1 else None

    """
    SETUP
    """
    def add_plane(self, plane : Plane) -> Plane:
        if not isinstance(plane, Plane):
            raise TypeError(f'`plane` must be of type `Plane`. is of type {type(plane)}')
        if plane.id in self.planes:
            raise ConfigurationError(f'a plane with id {plane.id} already exists.')
        if self._initialized:
            raise ConfigurationError(f'cannot add plane {plane.id} after the world has been initialized.')

        self.planes[plane.id] = plane
        if isinstance(plane, MaxSumPlane):
            plane.connect(self.substrate, self.tracker, self.planes, self.config)
        else:
            plane.connect(self.substrate)
        return plane

    def create_plane(self, id : int, pos : list, **kwargs) -> MaxSumPlane:
        """
        Creates a Max-Sum plane using the configuration's defaults and adds it to the world
        """
        kwargs.setdefault('battery_capacity', self.config.battery_capacity)
        kwargs.setdefault('speed', self.config.speed)
        kwargs.setdefault('logger', self.get_logger())
        return self.add_plane(MaxSumPlane(id, pos, **kwargs))

    def submit_task(self, task : Task, plane_id : int = None) -> Plane:
        """
        Hands a new task to `plane_id`, or to the closest operational plane if none is given.

        ### Returns:
            - the plane that received the task, or `None` if no plane is operational
        """
        if task.id in self.tasks:
            raise ValueError(f'a task with id {task.id} was already submitted.')

        if plane_id is not None:
            plane = self.planes[plane_id]
        else:
            candidates = [plane for plane in self.planes.values() if plane.is_operational()]
            if not candidates:
                self.log(f'no operational plane can receive task {task.id}.', level=logging.WARNING)
                return None
            plane = min(candidates, key=lambda plane : (distance(plane.pos, task.pos), plane.id))

        task.t_submitted = self.t
        self.tasks[task.id] = task
        plane.add_task(task)
        self.log(f'task {task.id} submitted to {plane.name}.', level=logging.INFO)
        return plane

    def initialize(self) -> None:
        """
        Resolves the behavior order of every plane. Fails with a `ConfigurationError` before any tick runs
        if a plane's behaviors have missing or cyclic dependencies.
        """
        if self._initialized:
            return
        for plane_id in sorted(self.planes.keys()):
            self.planes[plane_id].initialize()
        self._initialized = True
        self.log(f'initialized {len(self.planes)} planes.', level=logging.INFO)

    """
    EXECUTION
    """
    def _run_phase(self, phase) -> None:
        planes = [self.planes[plane_id] for plane_id in sorted(self.planes.keys())]
        if self._executor is None:
            for plane in planes:
                phase(plane)
        else:
            # consume the results so that exceptions raised by any plane propagate
            list(self._executor.map(phase, planes))

    @runtime_tracker
    def exchange(self) -> None:
        """
        Performs one Max-Sum exchange round without moving the planes
        """
        if not self._initialized:
            self.initialize()

        self.tracker.refresh({plane_id : plane.pos for plane_id, plane in self.planes.items()})
        for plane in self.planes.values():
            plane.publish()

        self._run_phase(lambda plane : plane.before_messages())
        self.substrate.deliver_all()
        self._run_phase(lambda plane : plane.after_messages())

    def advance(self) -> None:
        """
        Moves every operational plane towards its next task, or lets it idle if it has none
        """
        for plane_id in sorted(self.planes.keys()):
            plane : Plane = self.planes[plane_id]
            if not plane.is_operational():
                continue

            task = plane.next_task
            if task is not None:
                plane.set_destination(task.pos)
                if plane.move():
                    plane.complete_task(task, self.t)
            else:
                plane.idle()
                plane.move()

    def tick(self) -> None:
        self.exchange()
        self.advance()
        self.record()
        self.t += 1

    def run(self, n_ticks : int, progress : bool = False) -> pd.DataFrame:
        """
        Runs the simulation for `n_ticks` ticks and returns the resulting history
        """
        try:
            for _ in tqdm(range(n_ticks), desc='simulating', disable=not progress):
                self.tick()
        except Exception as e:
            self.log(f'`run()` interrupted at t={self.t}. {e}', level=logging.ERROR)
            raise e

        self.log(f'simulation ran until t={self.t}. {self.get_statistics()}', level=logging.INFO)
        return self.get_history()

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    """
    RESULTS
    """
    def assignments(self) -> dict:
        """
        Maps every plane id to the id of the task it is working on, or `None`
        """
        return {plane_id : (plane.next_task.id if plane.next_task is not None else None)
                for plane_id, plane in sorted(self.planes.items())}

    def record(self) -> None:
        for plane_id in sorted(self.planes.keys()):
            row = {'t' : self.t}
            row.update(self.planes[plane_id].to_dict())
            self.history.append(row)

    def get_history(self) -> pd.DataFrame:
        columns = ['t', 'id', 'pos', 'battery', 'battery_capacity', 'state',
                   'next_task', 'tasks', 'total_distance', 'completed', 'heard']
        return pd.DataFrame(self.history, columns=columns)

    def get_statistics(self) -> dict:
        completed = [task for task in self.tasks.values() if task.is_completed()]
        return {
            't' : self.t,
            'tasks_submitted' : len(self.tasks),
            'tasks_completed' : len(completed),
            'total_distance' : sum(plane.total_distance for plane in self.planes.values()),
            'messages_sent' : self.substrate.stats['sent'],
            'messages_delivered' : self.substrate.stats['delivered'],
            'messages_dropped' : self.substrate.stats['dropped']
        }
