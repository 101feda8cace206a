from abc import ABC, abstractmethod

from maxplanes.tasks import Task
from maxplanes.utils import distance

"""
------------------
EVALUATION STRATEGIES
------------------
"""
class EvaluationStrategy(ABC):
    """
    ## Evaluation Strategy

    Estimates the cost for a plane of performing a given task.
    Must be a pure function of the plane's state and the task: no side effects.
    """
    @abstractmethod
    def get_cost(self, plane, task : Task) -> float:
        """
        Returns the non-negative cost of `plane` performing `task`
        """
        pass

class DistanceEvaluationStrategy(EvaluationStrategy):
    """ Cost is the straight-line distance between the plane and the task """
    def get_cost(self, plane, task : Task) -> float:
        return distance(plane.pos, task.pos)

class TravelTimeEvaluationStrategy(EvaluationStrategy):
    """
    Cost is the number of ticks the plane needs to reach the task.
    Comparable with the plane's remaining battery, which is also measured in ticks.
    """
    def get_cost(self, plane, task : Task) -> float:
        dist = distance(plane.pos, task.pos)
        if dist == 0.0:
            return 0.0
        return dist / plane.speed if plane.speed > 0 else float('inf')

"""
------------------
IDLE STRATEGIES
------------------
"""
class IdleStrategy(ABC):
    """
    ## Idle Strategy

    Defines what a plane does whenever it has no task to work on.
    """
    @abstractmethod
    def idle(self, plane) -> None:
        pass

class DoNothingIdleStrategy(IdleStrategy):
    def idle(self, plane) -> None:
        plane.set_destination(None)

class ReturnToStartIdleStrategy(IdleStrategy):
    """ Flies the plane back to the position it started the simulation at """
    def idle(self, plane) -> None:
        plane.set_destination(plane.init_pos)
