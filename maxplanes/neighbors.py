import logging
from collections import deque
from typing import Union

import numpy as np

from maxplanes.behaviors import Behavior, BehaviorTypes
from maxplanes.elements import SimulationElement
from maxplanes.messages import SimulationMessage

class NeighborTracker(SimulationElement):
    """
    ## Neighbor Tracker

    Keeps a snapshot of the communication graph between planes. Two planes are 1-hop
    neighbors iff the distance between them is lower or equal to the communication range.

    The graph is a pure function of the positions given to the last `refresh()`:
    nothing is carried over from previous ticks.

    ### Attributes:
        - comms_range (`float`): communication range of every plane in distance units
    """
    def __init__(self, comms_range : Union[float, int], level : int = logging.INFO, logger : logging.Logger = None) -> None:
        super().__init__('NEIGHBOR_TRACKER', level, logger)

        if not isinstance(comms_range, (float, int)) or isinstance(comms_range, bool):
            raise TypeError(f'`comms_range` must be of type `float` or `int`. is of type {type(comms_range)}')
        if comms_range < 0:
            raise ValueError(f'`comms_range` must be non-negative. is of value {comms_range}')

        self.comms_range = comms_range
        self._neighbors = dict()

    def refresh(self, positions : dict) -> None:
        """
        Recomputes the 1-hop neighbor set of every plane

        ### Arguments:
            - positions (`dict`): maps plane ids to their current cartesian position
        """
        ids = sorted(positions.keys())
        neighbors = {plane_id : set() for plane_id in ids}

        if len(ids) > 1:
            pos = np.array([positions[plane_id] for plane_id in ids], dtype=float)
            dists = np.linalg.norm(pos[:, np.newaxis, :] - pos[np.newaxis, :, :], axis=-1)
            connected = dists <= self.comms_range

            for i, j in zip(*np.nonzero(connected)):
                if i != j:
                    neighbors[ids[i]].add(ids[j])

        self._neighbors = neighbors
        self.log(f'communication graph refreshed: {sum(len(n) for n in neighbors.values()) // 2} edges.')

    def neighbors(self, plane_id : int) -> set:
        """
        Returns the ids of the 1-hop neighbors of `plane_id`
        """
        return set(self._neighbors.get(plane_id, set()))

    def in_range(self, src : int, dst : int) -> bool:
        return src == dst or dst in self._neighbors.get(src, set())

    def neighbors_within_hops(self, plane_id : int, hops : int) -> set:
        """
        Returns the ids of every plane reachable from `plane_id` in at most `hops` hops,
        excluding `plane_id` itself.
        """
        if plane_id not in self._neighbors or hops < 1:
            return set()

        visited = {plane_id}
        frontier = deque([(plane_id, 0)])
        while frontier:
            current, depth = frontier.popleft()
            if depth == hops:
                continue

            for neighbor in sorted(self._neighbors[current]):
                if neighbor not in visited:
                    visited.add(neighbor)
                    frontier.append((neighbor, depth + 1))

        visited.discard(plane_id)
        return visited

class NeighborTrackingBehavior(Behavior):
    """
    Gives a plane's behaviors access to its current neighbors.
    Also observes every message delivered to the plane and keeps track of who it heard from this tick.
    """
    def __init__(self, plane, tracker : NeighborTracker, directory : dict) -> None:
        super().__init__(plane, BehaviorTypes.NEIGHBOR_TRACKING)
        self.tracker = tracker
        self.directory = directory
        self.heard = set()

    def is_promiscuous(self) -> bool:
        return True

    def on_message(self, msg : SimulationMessage) -> None:
        if msg.src != self.plane.id:
            self.heard.add(msg.src)

    def get_neighbors(self, hops : int = 1) -> list:
        """
        Returns the planes within `hops` hops of this plane, sorted by id
        """
        neighbor_ids = self.tracker.neighbors_within_hops(self.plane.id, hops)
        return [self.directory[plane_id] for plane_id in sorted(neighbor_ids) if plane_id in self.directory]

    def in_range(self, plane_id : int) -> bool:
        return self.tracker.in_range(self.plane.id, plane_id)

    def is_available(self, plane_id : int) -> bool:
        """
        Checks if `plane_id` can be reached this tick and was operational when the tick started
        """
        plane = self.directory.get(plane_id, None)
        return plane is not None and self.in_range(plane_id) and plane.is_published_operational()

    def get_heard(self) -> list:
        """
        Returns the ids of the other planes that delivered messages to this plane during the current tick
        """
        return sorted(self.heard)

    def before_messages(self) -> None:
        self.heard = set()

    def after_messages(self) -> None:
        return
