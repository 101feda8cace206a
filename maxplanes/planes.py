import logging
from enum import Enum
from typing import Union

from maxplanes.behaviors import Behavior, BehaviorScheduler, BehaviorTypes
from maxplanes.elements import SimulationElement
from maxplanes.messages import SimulationMessage
from maxplanes.strategies import DoNothingIdleStrategy, EvaluationStrategy, IdleStrategy, TravelTimeEvaluationStrategy
from maxplanes.tasks import Task
from maxplanes.utils import distance, step_towards

class PlaneStates(Enum):
    NORMAL = 'NORMAL'
    TO_CHARGE = 'TO_CHARGE'
    CHARGING = 'CHARGING'

class Plane(SimulationElement):
    """
    ## Plane

    Mobile agent owning an ordered list of tasks. Its per-tick logic is carried out by the
    behaviors registered in its scheduler; everything else (movement, battery depletion)
    is driven from outside by the world.

    ### Attributes:
        - id (`int`): unique identifier of this plane
        - pos (`list`): current cartesian position
        - init_pos (`list`): position at the beginning of the simulation
        - battery (`float`): remaining flight time in ticks
        - battery_capacity (`float`): maximum flight time in ticks
        - speed (`float`): distance flown per tick
        - state (`str`): one of `PlaneStates`
        - next_task (:obj:`Task`): task currently being worked on, if any
        - destination (`list`): position the plane is currently flying towards, if any
        - total_distance (`float`): accumulated flight distance
        - completed_tasks (`list`): tasks completed by this plane
    """
    NUM_COMPLETED_LOCATIONS = 20

    def __init__(self,
                id : int,
                pos : list,
                battery_capacity : Union[float, int],
                battery : Union[float, int] = None,
                speed : Union[float, int] = 1.0,
                evaluation_strategy : EvaluationStrategy = None,
                idle_strategy : IdleStrategy = None,
                level : int = logging.INFO,
                logger : logging.Logger = None
                ) -> None:
        super().__init__(f'PLANE_{id}', level, logger)

        # type and value checks
        if not isinstance(id, int) or isinstance(id, bool):
            raise TypeError(f'`id` must be of type `int`. is of type {type(id)}.')
        if not isinstance(pos, list) or len(pos) != 2:
            raise ValueError(f'`pos` must be a list of 2 cartesian coordinates. is {pos}.')
        if battery_capacity <= 0:
            raise ValueError(f'`battery_capacity` must be a value higher than 0. is of value {battery_capacity}.')
        battery = battery_capacity if battery is None else battery
        if not 0 <= battery <= battery_capacity:
            raise ValueError(f'`battery` must be between 0 and `battery_capacity` ({battery_capacity}). is of value {battery}.')
        if speed < 0:
            raise ValueError(f'`speed` must be non-negative. is of value {speed}.')

        self.id = id
        self.pos = [float(x) for x in pos]
        self.init_pos = list(self.pos)
        self.battery = battery
        self.battery_capacity = battery_capacity
        self.speed = speed
        self.state = PlaneStates.NORMAL.value if battery > 0 else PlaneStates.TO_CHARGE.value

        self.evaluation_strategy = evaluation_strategy if evaluation_strategy is not None else TravelTimeEvaluationStrategy()
        self.idle_strategy = idle_strategy if idle_strategy is not None else DoNothingIdleStrategy()

        self.next_task = None
        self.destination = None
        self.total_distance = 0.0
        self.completed_tasks = []
        self.completed_locations = []

        self._tasks = []
        self._published_tasks = tuple()
        self._published_state = self.state
        self._substrate = None
        self._scheduler = BehaviorScheduler(f'{self.name}/SCHEDULER', logger=self.get_logger())

    """
    BEHAVIORS
    """
    def add_behavior(self, behavior : Behavior) -> None:
        self._scheduler.register(behavior)

    def get_behavior(self, behavior_type : BehaviorTypes) -> Behavior:
        return self._scheduler.get_behavior(behavior_type)

    def get_behavior_order(self) -> list:
        return self._scheduler.get_order()

    def initialize(self) -> None:
        self._scheduler.initialize()

    def connect(self, substrate) -> None:
        self._substrate = substrate

    def send(self, msg : SimulationMessage) -> None:
        if self._substrate is None:
            raise RuntimeError(f'{self.name} is not connected to a messaging substrate.')
        self._substrate.send(msg)

    def receive(self, msg : SimulationMessage) -> None:
        self._scheduler.dispatch(msg)

    def publish(self) -> None:
        """
        Takes the snapshot of this plane's task list and state that its neighbors may inspect during the next tick
        """
        self._published_tasks = tuple(self._tasks)
        self._published_state = self.state

    def before_messages(self) -> None:
        self._scheduler.before_messages()

    def after_messages(self) -> None:
        self._scheduler.after_messages()

    """
    TASKS
    """
    def add_task(self, task : Task, front : bool = False) -> None:
        """
        Adds a task to the list of tasks owned by this plane. Completed tasks are ignored.
        """
        if task.is_completed():
            self.log(f'ignoring completed task {task.id}.', level=logging.WARNING)
            return

        if task in self._tasks:
            if not front:
                return
            self._tasks.remove(task)

        if front:
            self._tasks.insert(0, task)
        else:
            self._tasks.append(task)
        task.claim()
        self.log(f'added task {task.id}. tasks: {[t.id for t in self._tasks]}')

    def remove_task(self, task : Task) -> Task:
        """
        Removes a task from the list of tasks owned by this plane.

        ### Returns:
            - the removed task, or `None` if this plane did not own it
        """
        if task not in self._tasks:
            return None

        self._tasks.remove(task)
        if self.next_task == task:
            self.next_task = None
        self.log(f'removed task {task.id}. tasks: {[t.id for t in self._tasks]}')
        return task

    def get_tasks(self) -> list:
        return self._tasks

    def peek_tasks(self) -> tuple:
        """
        Read-only view of the task list this plane published at the start of the current tick
        """
        return self._published_tasks

    def is_operational(self) -> bool:
        return self.state == PlaneStates.NORMAL.value

    def is_published_operational(self) -> bool:
        return self._published_state == PlaneStates.NORMAL.value

    def set_next_task(self, task : Task) -> None:
        self.next_task = task

    def get_cost(self, task : Task) -> float:
        return self.evaluation_strategy.get_cost(self, task)

    def can_reach(self, task : Task) -> bool:
        """
        Checks if the plane has enough battery left to fly to `task`
        """
        dist = distance(self.pos, task.pos)
        if dist == 0.0:
            return True
        if self.speed <= 0:
            return False
        return dist / self.speed <= self.battery

    def complete_task(self, task : Task, t : int) -> None:
        task.complete(t)
        self.remove_task(task)
        self.completed_tasks.append(task)
        self.completed_locations.append(list(task.pos))
        if len(self.completed_locations) > self.NUM_COMPLETED_LOCATIONS:
            self.completed_locations.pop(0)
        self.log(f'completed task {task.id} at t={t}.', level=logging.INFO)

    """
    MOVEMENT
    """
    def set_destination(self, destination : list) -> None:
        self.destination = list(destination) if destination is not None else None

    def set_state(self, state : str) -> None:
        if state not in [s.value for s in PlaneStates]:
            raise ValueError(f'`state` must be one of {[s.value for s in PlaneStates]}. is {state}.')
        if state != self.state:
            self.log(f'state changed from {self.state} to {state}.', level=logging.INFO)
        self.state = state

    def move(self) -> bool:
        """
        Moves the plane one tick towards its current destination, consuming one unit of battery.

        ### Returns:
            - `True` if the destination has been reached, or `False` otherwise
        """
        if self.destination is None:
            return False
        if self.pos == self.destination:
            return True
        if not self.is_operational():
            return False

        self.pos, travelled = step_towards(self.pos, self.destination, self.speed)
        self.total_distance += travelled
        self.battery = max(self.battery - 1, 0)

        if self.battery <= 0:
            self.set_state(PlaneStates.TO_CHARGE.value)

        return self.pos == self.destination

    def idle(self) -> None:
        self.idle_strategy.idle(self)

    def to_dict(self) -> dict:
        return {
            'id' : self.id,
            'pos' : list(self.pos),
            'battery' : self.battery,
            'battery_capacity' : self.battery_capacity,
            'state' : self.state,
            'next_task' : self.next_task.id if self.next_task is not None else None,
            'tasks' : [task.id for task in self._tasks],
            'total_distance' : self.total_distance,
            'completed' : len(self.completed_tasks)
        }

    def __repr__(self) -> str:
        return self.name
