import json
import uuid
from enum import Enum

class MessageTypes(Enum):
    """
    Types of messages exchanged between planes.
        - variable_belief: cost vector sent by a plane's variable node to the function node of a task
        - function_cost: cost adjustment sent by a task's function node back to a participating variable
    """
    VARIABLE_BELIEF = 'VARIABLE_BELIEF'
    FUNCTION_COST = 'FUNCTION_COST'

class SimulationMessage(object):
    """
    ## Abstract Simulation Message

    Describes a message to be sent between planes

    ### Attributes:
        - src (`int`): id of the plane sending this message
        - dst (`int`): id of the intended plane to receive this message
        - msg_type (`str`): type of message being sent
        - id (`str`) : Universally Unique IDentifier for this message
    """
    def __init__(self, src : int, dst : int, msg_type : str, id : str = None, **_):
        """
        Initiates an instance of a simulation message.

        ### Args:
            - src (`int`): id of the plane sending this message
            - dst (`int`): id of the intended plane to receive this message
            - msg_type (`str`): type of message being sent
            - id (`str`) : Universally Unique IDentifier for this message
        """
        super().__init__()

        # check types
        if not isinstance(src, int) or isinstance(src, bool):
            raise TypeError(f'Message sender `src` must be of type `int`. Is of type {type(src)}')
        if not isinstance(dst, int) or isinstance(dst, bool):
            raise TypeError(f'Message receiver `dst` must be of type `int`. Is of type {type(dst)}')
        if not isinstance(msg_type, str):
            raise TypeError(f'Message type `msg_type` must be of type `str`. Is of type {type(msg_type)}')
        if id is not None and not isinstance(id, str):
            raise TypeError(f'Message id `id` must be of type `str`. Is of type {type(id)}')

        # load attributes from arguments
        self.src = src
        self.dst = dst
        self.msg_type = msg_type
        self.id = str(uuid.UUID(id)) if id is not None else str(uuid.uuid1())

    def __eq__(self, other) -> bool:
        """
        Compares two instances of a simulation message. Returns True if they represent the same message.
        """
        if not isinstance(other, SimulationMessage):
            return False
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        """
        Crates a dictionary containing all information contained in this message object
        """
        return dict(self.__dict__)

    def to_json(self) -> str:
        """
        Creates a json file from this message
        """
        return json.dumps(self.to_dict())

    def __str__(self) -> str:
        return str(self.to_dict())

def _load_payload(payload : dict) -> dict:
    # json turns integer task ids into strings
    return {int(task_id) : float(cost) for task_id, cost in payload.items()}

class VariableBeliefMessage(SimulationMessage):
    """
    ## Variable Belief Message

    Sent by a plane's variable node to the plane hosting the function node of task `task_id`.

    ### Attributes:
        - task_id (`int`): id of the task whose function node this message is addressed to
        - payload (`dict`): cost vector of the sending variable, mapping task ids to costs.
            The distinguished "no task" value is implicit and always costs zero.
    """
    __doc__ += SimulationMessage.__doc__
    def __init__(self, src : int, dst : int, task_id : int, payload : dict, id : str = None, **_):
        super().__init__(src, dst, MessageTypes.VARIABLE_BELIEF.value, id)
        self.task_id = int(task_id)
        self.payload = _load_payload(payload)

class FunctionCostMessage(SimulationMessage):
    """
    ## Function Cost Message

    Sent by the function node of task `task_id` to one of its participating variables.

    ### Attributes:
        - task_id (`int`): id of the task represented by the sending function node
        - payload (`dict`): cost adjustment for the receiving variable, mapping task ids to costs
        - assigned (`bool`): whether the function currently grants the task to the receiving variable
    """
    __doc__ += SimulationMessage.__doc__
    def __init__(self, src : int, dst : int, task_id : int, payload : dict, assigned : bool = False, id : str = None, **_):
        super().__init__(src, dst, MessageTypes.FUNCTION_COST.value, id)
        self.task_id = int(task_id)
        self.payload = _load_payload(payload)
        self.assigned = bool(assigned)

def message_from_dict(msg_type : str, **kwargs) -> SimulationMessage:
    if msg_type == MessageTypes.VARIABLE_BELIEF.value:
        return VariableBeliefMessage(**kwargs)
    elif msg_type == MessageTypes.FUNCTION_COST.value:
        return FunctionCostMessage(**kwargs)
    else:
        raise NotImplementedError(f'Message of type {msg_type} not yet implemented.')
