import logging

from maxplanes.assignment import AssignmentBehavior
from maxplanes.behaviors import Behavior, BehaviorTypes
from maxplanes.config import SimulationConfig
from maxplanes.domain import Domain
from maxplanes.messages import FunctionCostMessage, MessageTypes, VariableBeliefMessage
from maxplanes.neighbors import NeighborTracker, NeighborTrackingBehavior
from maxplanes.planes import Plane

"""
*********************************************************************************
    __  ___                _____
   /  |/  /___ __  __     / ___/__  ______ ___
  / /|_/ / __ `/ |/_/_____\__ \/ / / / __ `__ \
 / /  / / /_/ />  </_____/__/ / /_/ / / / / / /
/_/  /_/\__,_/_/|_|     /____/\__,_/_/ /_/ /_/

*********************************************************************************

Every plane runs one variable node, whose value is the task it works on next, and hosts the
function nodes of the tasks in its task list. Every task is listed by exactly one plane: a
function node that grants its task to another plane hands the task over to it. One exchange
round is performed every tick:
    - before messages: variables send their beliefs to the function nodes of the tasks in their
      domain that are in range; functions send their costs, computed from the beliefs received
      last tick, and release the tasks they grant to other planes
    - after messages: functions store the beliefs; variables store the costs, take over the
      tasks granted to them and pick a task
"""

class UpdateGraphBehavior(Behavior):
    """
    Rebuilds the plane's domain every tick from its own tasks and the tasks owned by its
    neighbors within `hops` hops.

    Neighbors' task lists are read directly, through the snapshot every plane publishes at the
    start of the tick, instead of being negotiated through messages.
    """
    def __init__(self, plane : Plane, hops : int = 2) -> None:
        super().__init__(plane, BehaviorTypes.UPDATE_GRAPH)
        self.hops = hops
        self.domain = Domain()
        self.tracking : NeighborTrackingBehavior = None

    def get_dependencies(self) -> list:
        return [BehaviorTypes.NEIGHBOR_TRACKING]

    def initialize(self) -> None:
        self.tracking = self.plane.get_behavior(BehaviorTypes.NEIGHBOR_TRACKING)

    def get_domain(self) -> Domain:
        return self.domain

    def build_domain(self) -> Domain:
        domain = Domain()

        # planes that are charging or on their way to charge do not take part in the allocation
        if not self.plane.is_published_operational():
            return domain

        for task in self.plane.peek_tasks():
            if not task.is_completed():
                domain.put(task, self.plane)

        for neighbor in self.tracking.get_neighbors(self.hops):
            if not neighbor.is_published_operational():
                continue
            for task in neighbor.peek_tasks():
                if not task.is_completed():
                    domain.put(task, neighbor)

        return domain

    def before_messages(self) -> None:
        return

    def after_messages(self) -> None:
        self.domain = self.build_domain()
        self.log(f'domain: {self.domain}')

class MaxSumVariable(Behavior):
    """
    ## Max-Sum Variable Node

    Holds the plane's belief about the cost of working on each task of its domain and selects the
    task it will work on next. The distinguished "no task" value always costs zero.

    A plane only ever selects a task from its own task list. Tasks enter that list when the
    function node hosting them hands them over to this plane, which happens by sending it a
    `FunctionCostMessage` with the `assigned` flag set. The host drops the task from its own list
    in the same tick, so no task is ever listed by two planes.

    ### Attributes:
        - costs (`dict`): local cost estimate of every feasible task in the domain, by task id
        - beliefs (`dict`): aggregated belief of every candidate task, by task id
        - selection (:obj:`Task`): currently selected task, or `None`
        - transfers (`list`): tasks handed over to this plane during the current tick
    """
    def __init__(self, plane : Plane) -> None:
        super().__init__(plane, BehaviorTypes.MAX_SUM_VARIABLE)
        self.graph : UpdateGraphBehavior = None
        self.tracking : NeighborTrackingBehavior = None
        self.costs = dict()
        self.beliefs = dict()
        self.selection = None
        self.transfers = []

        self._incoming = []
        self._received = dict()

    def get_dependencies(self) -> list:
        return [BehaviorTypes.NEIGHBOR_TRACKING, BehaviorTypes.UPDATE_GRAPH]

    def get_message_types(self) -> list:
        return [MessageTypes.FUNCTION_COST.value]

    def initialize(self) -> None:
        self.tracking = self.plane.get_behavior(BehaviorTypes.NEIGHBOR_TRACKING)
        self.graph = self.plane.get_behavior(BehaviorTypes.UPDATE_GRAPH)

    def get_selection(self):
        return self.selection

    def get_transfers(self) -> list:
        return list(self.transfers)

    def on_message(self, msg : FunctionCostMessage) -> None:
        self._incoming.append(msg)

    def _function_cost(self, task_id : int) -> float:
        msg : FunctionCostMessage = self._received.get(task_id, None)
        return msg.payload.get(task_id, 0.0) if msg is not None else 0.0

    def _evaluate(self, domain : Domain) -> dict:
        return {task.id : self.plane.get_cost(task)
                for task in domain
                if self.plane.can_reach(task)}

    def before_messages(self) -> None:
        self._incoming = []
        domain = self.graph.get_domain()

        if not self.plane.is_operational() or len(domain) == 0:
            self.costs = dict()
            return

        self.costs = self._evaluate(domain)
        adjusted = {task_id : cost + self._function_cost(task_id) for task_id, cost in self.costs.items()}

        for task_id, cost in self.costs.items():
            # hosts two hops away are visible but cannot be reached
            owner_id = domain.owner_id(task_id)
            if not self.tracking.in_range(owner_id):
                continue

            # the belief sent to a function excludes that function's own last message
            payload = dict(adjusted)
            payload[task_id] = cost
            self.plane.send(VariableBeliefMessage(self.plane.id, owner_id, task_id, payload))

    def after_messages(self) -> None:
        domain = self.graph.get_domain()

        # every task has a single host, so there is at most one message per task
        self._received = {msg.task_id : msg for msg in self._incoming}
        self._incoming = []

        # hosts only hand over tasks they listed in the snapshot published at the start of the tick
        self.transfers = []
        for msg in self._received.values():
            if msg.assigned and msg.src != self.plane.id:
                host : Plane = self.tracking.directory[msg.src]
                self.transfers.append(next(task for task in host.peek_tasks() if task.id == msg.task_id))

        self.selection = self.decide(domain)
        self.log(f'beliefs: {self.beliefs}, selection: {self.selection}')

    def decide(self, domain : Domain):
        """
        Selects the granted task with the lowest belief, ties broken by lowest task id.
        Returns `None` unless the best belief is strictly lower than zero.

        Candidates are the plane's own tasks and the tasks handed over to it this tick. A task
        is granted if its function's latest message says so, or if its function has not spoken
        yet and nobody else claims it.
        """
        self.beliefs = dict()

        if not self.plane.is_operational():
            return None

        candidates = list(self.transfers)
        candidates.extend([task for task in self.plane.get_tasks() if task not in candidates])

        for task in candidates:
            if task.is_completed() or not self.plane.can_reach(task):
                continue

            msg : FunctionCostMessage = self._received.get(task.id, None)
            if msg is not None:
                if msg.assigned:
                    self.beliefs[task.id] = self.plane.get_cost(task) + msg.payload.get(task.id, 0.0)

            elif len(domain.claimants(task)) <= 1:
                self.beliefs[task.id] = self.plane.get_cost(task) - self.penalty()

        if not self.beliefs:
            return None

        task_id = min(self.beliefs, key=lambda task_id : (self.beliefs[task_id], task_id))
        if self.beliefs[task_id] >= 0.0:
            return None
        return next(task for task in candidates if task.id == task_id)

    def penalty(self) -> float:
        function : MaxSumFunction = self.plane.get_behavior(BehaviorTypes.MAX_SUM_FUNCTION)
        return function.unassigned_penalty if function is not None else 0.0

class MaxSumFunction(Behavior):
    """
    ## Max-Sum Function Nodes

    Function nodes of the tasks in this plane's task list. Each one represents the constraint that
    at most one plane performs its task, and that leaving the task unperformed costs
    `unassigned_penalty`.

    For a participant `i` with cost vector `Q_i`, let `q_i = Q_i(t) - min(0, min_{u != t} Q_i(u))`
    be its marginal cost of doing task `t`. The function answers every participant `i` with
    `R_i(t) = -min(P, min_{j != i} q_j)` and grants the task to the participant with the lowest
    marginal cost, ties broken by lowest plane id. Only participants that are in range and
    operational can be granted a task. Granting a task to another plane hands it over: the task
    is released from this plane's list in the same tick.
    """
    def __init__(self, plane : Plane, unassigned_penalty : float = 1e6) -> None:
        super().__init__(plane, BehaviorTypes.MAX_SUM_FUNCTION)
        self.unassigned_penalty = float(unassigned_penalty)
        self.tracking : NeighborTrackingBehavior = None
        self.grants = dict()

        self._incoming = dict()
        self._beliefs = dict()
        self._releases = []

    def get_dependencies(self) -> list:
        return [BehaviorTypes.NEIGHBOR_TRACKING, BehaviorTypes.UPDATE_GRAPH]

    def get_message_types(self) -> list:
        return [MessageTypes.VARIABLE_BELIEF.value]

    def initialize(self) -> None:
        self.tracking = self.plane.get_behavior(BehaviorTypes.NEIGHBOR_TRACKING)

    def get_releases(self) -> list:
        return list(self._releases)

    def on_message(self, msg : VariableBeliefMessage) -> None:
        self._incoming.setdefault(msg.task_id, dict())[msg.src] = msg.payload

    def compute_costs(self, task_id : int, beliefs : dict, candidates : set = None) -> tuple:
        """
        ### Arguments:
            - task_id (`int`): task represented by the function
            - beliefs (`dict`): cost vectors received from the participating variables, by plane id
            - candidates (`set`): ids of the participants that may be granted the task. All of them if `None`

        ### Returns:
            - costs (`dict`): cost adjustment `R_i(t)` for every participant, by plane id
            - winner (`int`): id of the participant the task is granted to, or `None`
        """
        marginals = dict()
        for plane_id, payload in beliefs.items():
            if task_id not in payload:
                continue
            alternatives = [cost for other_id, cost in payload.items() if other_id != task_id]
            marginals[plane_id] = payload[task_id] - min([0.0] + alternatives)

        if not marginals:
            return dict(), None

        eligible = [plane_id for plane_id in marginals if candidates is None or plane_id in candidates]
        winner = min(eligible, key=lambda plane_id : (marginals[plane_id], plane_id)) if eligible else None

        costs = dict()
        for plane_id in marginals:
            others = [marginals[other_id] for other_id in marginals if other_id != plane_id]
            costs[plane_id] = -min([self.unassigned_penalty] + others)

        return costs, winner

    def before_messages(self) -> None:
        self._incoming = dict()
        self._releases = []
        self.grants = dict()

        # planes that are not operational are invisible to their neighbors and host nothing
        if not self.plane.is_published_operational():
            self._beliefs = dict()
            return

        tasks = {task.id : task for task in self.plane.get_tasks()}
        for task_id in sorted(self._beliefs.keys()):
            task = tasks.get(task_id, None)
            if task is None or task.is_completed():
                continue

            participants = self._beliefs[task_id]
            candidates = {plane_id for plane_id in participants
                            if plane_id == self.plane.id or self.tracking.is_available(plane_id)}
            costs, winner = self.compute_costs(task_id, participants, candidates)

            self.grants[task_id] = winner
            for plane_id in sorted(costs.keys()):
                if not self.tracking.in_range(plane_id):
                    continue
                msg = FunctionCostMessage(self.plane.id, plane_id, task_id, {task_id : costs[plane_id]}, plane_id == winner)
                self.plane.send(msg)

            if winner is not None and winner != self.plane.id:
                self._releases.append(task)

        if self._releases:
            self.log(f'handing over tasks {[(task.id, self.grants[task.id]) for task in self._releases]}.', level=logging.DEBUG)

    def after_messages(self) -> None:
        owned = {task.id for task in self.plane.get_tasks()} - {task.id for task in self._releases}
        self._beliefs = {task_id : beliefs for task_id, beliefs in self._incoming.items()
                            if task_id in owned}
        self._incoming = dict()

class MaxSumPlane(Plane):
    """
    ## Max-Sum Plane

    Plane whose tasks are allocated through the Max-Sum solver.
    """
    def connect(self, substrate, tracker : NeighborTracker = None, directory : dict = None, config : SimulationConfig = None) -> None:
        super().connect(substrate)

        tracker = tracker if tracker is not None else substrate.tracker
        directory = directory if directory is not None else substrate.directory
        hops = config.hop_limit if config is not None else 2
        penalty = config.unassigned_penalty if config is not None else 1e6

        self.add_behavior(NeighborTrackingBehavior(self, tracker, directory))
        self.add_behavior(UpdateGraphBehavior(self, hops))
        self.add_behavior(MaxSumVariable(self))
        self.add_behavior(MaxSumFunction(self, penalty))
        self.add_behavior(AssignmentBehavior(self))

    def get_domain(self) -> Domain:
        return self.get_behavior(BehaviorTypes.UPDATE_GRAPH).get_domain()

    def get_variable(self) -> MaxSumVariable:
        return self.get_behavior(BehaviorTypes.MAX_SUM_VARIABLE)

    def get_function(self) -> MaxSumFunction:
        return self.get_behavior(BehaviorTypes.MAX_SUM_FUNCTION)

    def to_dict(self) -> dict:
        state = super().to_dict()
        tracking : NeighborTrackingBehavior = self.get_behavior(BehaviorTypes.NEIGHBOR_TRACKING)
        state['heard'] = tracking.get_heard() if tracking is not None else []
        return state
