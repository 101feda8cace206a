import json
import logging
from typing import Union

class SimulationConfig(object):
    """
    ## Simulation Configuration

    Communication and solver parameters shared by every plane in a simulation.

    ### Attributes:
        - comms_range (`float`): communication range of the planes in distance units
        - hop_limit (`int`): number of hops within which a plane can see its neighbors' tasks
        - speed (`float`): default distance flown by a plane every tick
        - battery_capacity (`float`): default flight time of a fully charged plane, in ticks
        - unassigned_penalty (`float`): cost charged by a task's function node when nobody performs the task
        - workers (`int`): number of threads used to run the planes' phases. `1` runs them sequentially
        - level (`int`): logging level
    """
    def __init__(self,
                comms_range : Union[float, int],
                hop_limit : int = 2,
                speed : Union[float, int] = 1.0,
                battery_capacity : Union[float, int] = 1000,
                unassigned_penalty : Union[float, int] = 1e6,
                workers : int = 1,
                level : int = logging.INFO,
                **_
                ) -> None:
        # check types
        for name, value in [('comms_range', comms_range), ('speed', speed),
                            ('battery_capacity', battery_capacity), ('unassigned_penalty', unassigned_penalty)]:
            if not isinstance(value, (float, int)) or isinstance(value, bool):
                raise TypeError(f'Attribute `{name}` must be of type `float` or `int`. Is of type {type(value)}')
        for name, value in [('hop_limit', hop_limit), ('workers', workers), ('level', level)]:
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f'Attribute `{name}` must be of type `int`. Is of type {type(value)}')

        # check values
        if comms_range < 0:
            raise ValueError(f'Attribute `comms_range` must be non-negative. Is of value {comms_range}')
        if hop_limit < 1:
            raise ValueError(f'Attribute `hop_limit` must be at least 1. Is of value {hop_limit}')
        if speed < 0:
            raise ValueError(f'Attribute `speed` must be non-negative. Is of value {speed}')
        if battery_capacity <= 0:
            raise ValueError(f'Attribute `battery_capacity` must be higher than 0. Is of value {battery_capacity}')
        if unassigned_penalty <= 0:
            raise ValueError(f'Attribute `unassigned_penalty` must be higher than 0. Is of value {unassigned_penalty}')
        if workers < 1:
            raise ValueError(f'Attribute `workers` must be at least 1. Is of value {workers}')

        # load attributes from arguments
        self.comms_range = comms_range
        self.hop_limit = hop_limit
        self.speed = speed
        self.battery_capacity = battery_capacity
        self.unassigned_penalty = unassigned_penalty
        self.workers = workers
        self.level = level

    def __eq__(self, other) -> bool:
        """
        Compares two instances of a simulation configuration. Returns True if they represent the same configuration
        """
        return isinstance(other, SimulationConfig) and self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        """
        Creates an instance of a dictionary containing information about this object
        """
        return dict(self.__dict__)

    def to_json(self) -> str:
        """
        Creates an instance of a json object containing information about this object
        """
        return json.dumps(self.to_dict())
