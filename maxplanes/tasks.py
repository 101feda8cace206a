from enum import Enum
from typing import Union

class TaskStatus(Enum):
    PENDING = 'PENDING'
    CLAIMED = 'CLAIMED'
    COMPLETED = 'COMPLETED'

class Task(object):
    """
    ## Task

    Describes a geographically located task to be completed by one of the planes in the simulation.
    Tasks are ordered and compared by id, which is the comparator every plane uses when
    building its domain and breaking ties.

    ### Attributes:
        - id (`int`): unique identifier of this task
        - pos (`list`): cartesian coordinates of the location of this task
        - status (`str`): lifecycle status of the task
        - t_submitted (`int`): tick at which the task was submitted to the fleet
        - t_completed (`int`): tick at which the task was completed, if it has been completed
    """
    def __init__(self,
                id : int,
                pos : list,
                status : str = TaskStatus.PENDING.value,
                t_submitted : int = 0,
                t_completed : Union[int, None] = None,
                **_
                ) -> None:
        if not isinstance(id, int) or isinstance(id, bool):
            raise TypeError(f'`id` must be of type `int`. is of type {type(id)}.')
        if not isinstance(pos, list):
            raise TypeError(f'`pos` must be of type `list`. is of type {type(pos)}.')
        if len(pos) != 2:
            raise ValueError(f'`pos` must be a list of 2 cartesian coordinates. is of length {len(pos)}.')
        if status not in [s.value for s in TaskStatus]:
            raise ValueError(f'`status` must be one of {[s.value for s in TaskStatus]}. is {status}.')

        self.id = id
        self.pos = [float(x) for x in pos]
        self.status = status
        self.t_submitted = t_submitted
        self.t_completed = t_completed

    def claim(self) -> None:
        if self.status != TaskStatus.COMPLETED.value:
            self.status = TaskStatus.CLAIMED.value

    def complete(self, t : int) -> None:
        self.status = TaskStatus.COMPLETED.value
        self.t_completed = t

    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED.value

    def __eq__(self, other) -> bool:
        return isinstance(other, Task) and self.id == other.id

    def __lt__(self, other) -> bool:
        return self.id < other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def to_dict(self) -> dict:
        return dict(self.__dict__)

    def __repr__(self) -> str:
        return f'Task({self.id})'
