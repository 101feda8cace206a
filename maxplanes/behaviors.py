import logging
from abc import abstractmethod
from enum import Enum

from maxplanes.elements import SimulationElement
from maxplanes.messages import SimulationMessage

class ConfigurationError(Exception):
    pass

class BehaviorTypes(Enum):
    NEIGHBOR_TRACKING = 'NEIGHBOR_TRACKING'
    UPDATE_GRAPH = 'UPDATE_GRAPH'
    MAX_SUM_VARIABLE = 'MAX_SUM_VARIABLE'
    MAX_SUM_FUNCTION = 'MAX_SUM_FUNCTION'
    ASSIGNMENT = 'ASSIGNMENT'

class Behavior(SimulationElement):
    """
    ## Abstract Plane Behavior

    Unit of per-tick logic run by a plane's behavior scheduler. Every tick is split in two phases:
        1. `before_messages()`: compute and send outgoing messages
        2. `after_messages()`: consume the messages delivered this tick and update local state

    ### Attributes:
        - plane (:obj:`Plane`): plane running this behavior
        - behavior_type (:obj:`BehaviorTypes`): kind of this behavior. A plane runs at most one behavior of each kind.
    """
    def __init__(self, plane, behavior_type : BehaviorTypes) -> None:
        if not isinstance(behavior_type, BehaviorTypes):
            raise TypeError(f'`behavior_type` must be of type `BehaviorTypes`. is of type {type(behavior_type)}')

        super().__init__(f'{plane.name}/{behavior_type.value}', logger=plane.get_logger())
        self.plane = plane
        self.behavior_type = behavior_type

    def get_type(self) -> BehaviorTypes:
        return self.behavior_type

    def get_dependencies(self) -> list:
        """
        Returns the list of behavior kinds that must be initialized before this behavior
        """
        return []

    def is_promiscuous(self) -> bool:
        """
        Returns True if this behavior must observe every message received by its plane,
        or False if it only receives the message types listed in `get_message_types()`
        """
        return False

    def get_message_types(self) -> list:
        """
        Returns the list of message types (`str`) handled by this behavior
        """
        return []

    def initialize(self) -> None:
        """
        Resolves dependency handles. Called once, in dependency order, before the first tick.
        """
        return

    def on_message(self, msg : SimulationMessage) -> None:
        """
        Receives a message delivered to this behavior's plane
        """
        return

    @abstractmethod
    def before_messages(self) -> None:
        pass

    @abstractmethod
    def after_messages(self) -> None:
        pass

class BehaviorScheduler(SimulationElement):
    """
    ## Behavior Scheduler

    Per-plane registry of behaviors. Resolves their execution order once, at setup,
    and then runs every behavior's two-phase tick in that order.
    """
    def __init__(self, element_name : str, level : int = logging.INFO, logger : logging.Logger = None) -> None:
        super().__init__(element_name, level, logger)
        self._behaviors = dict()
        self._order = None

    def register(self, behavior : Behavior) -> None:
        if not isinstance(behavior, Behavior):
            raise TypeError(f'`behavior` must be of type `Behavior`. is of type {type(behavior)}')
        if self._order is not None:
            raise ConfigurationError(f'{self.name}: cannot register `{behavior.get_type().value}` after initialization.')
        if behavior.get_type() in self._behaviors:
            raise ConfigurationError(f'{self.name}: a behavior of type `{behavior.get_type().value}` is already registered.')

        self._behaviors[behavior.get_type()] = behavior

    def get_behavior(self, behavior_type : BehaviorTypes) -> Behavior:
        """
        Returns the registered behavior of kind `behavior_type`, or `None` if none was registered
        """
        return self._behaviors.get(behavior_type, None)

    def is_initialized(self) -> bool:
        return self._order is not None

    def get_order(self) -> list:
        if self._order is None:
            raise ConfigurationError(f'{self.name}: behavior order requested before initialization.')
        return [behavior.get_type() for behavior in self._order]

    def _resolve_order(self) -> list:
        """
        Topologically sorts the registered behaviors using Kahn's algorithm.
        Ties are broken by registration order.
        """
        registered = list(self._behaviors.keys())

        # check that every dependency is registered
        for behavior_type in registered:
            for dependency in self._behaviors[behavior_type].get_dependencies():
                if dependency not in self._behaviors:
                    msg = f'behavior `{behavior_type.value}` depends on `{dependency.value}`, which was never registered.'
                    self.log(msg, level=logging.ERROR)
                    raise ConfigurationError(f'{self.name}: {msg}')

        pending = {behavior_type : set(self._behaviors[behavior_type].get_dependencies())
                    for behavior_type in registered}
        order = []
        while pending:
            ready = [behavior_type for behavior_type in registered
                        if behavior_type in pending and not pending[behavior_type]]

            if not ready:
                cycle = [behavior_type.value for behavior_type in registered if behavior_type in pending]
                msg = f'cyclic behavior dependencies between {cycle}.'
                self.log(msg, level=logging.ERROR)
                raise ConfigurationError(f'{self.name}: {msg}')

            for behavior_type in ready:
                order.append(self._behaviors[behavior_type])
                pending.pop(behavior_type)
                for dependencies in pending.values():
                    dependencies.discard(behavior_type)

        return order

    def initialize(self) -> None:
        """
        Resolves the execution order and initializes every behavior in it.
        Fails fast with a `ConfigurationError` on missing or cyclic dependencies.
        """
        if self._order is not None:
            return

        order = self._resolve_order()
        for behavior in order:
            behavior.initialize()
        self._order = order

        self.log(f'behavior order: {[behavior.get_type().value for behavior in order]}')

    def _check_initialized(self) -> None:
        if self._order is None:
            raise ConfigurationError(f'{self.name}: behaviors were not initialized before running a tick.')

    def before_messages(self) -> None:
        self._check_initialized()
        for behavior in self._order:
            behavior.before_messages()

    def dispatch(self, msg : SimulationMessage) -> None:
        """
        Hands a delivered message to every promiscuous behavior and to every behavior handling its type
        """
        self._check_initialized()
        for behavior in self._order:
            if behavior.is_promiscuous() or msg.msg_type in behavior.get_message_types():
                behavior.on_message(msg)

    def after_messages(self) -> None:
        self._check_initialized()
        for behavior in self._order:
            behavior.after_messages()
