import logging
import threading

from maxplanes.elements import SimulationElement
from maxplanes.messages import SimulationMessage
from maxplanes.neighbors import NeighborTracker

class MessagingSubstrate(SimulationElement):
    """
    ## Messaging Substrate

    Point-to-point delivery of messages between planes that are within communication range.

    Messages sent during a tick's outgoing phase are queued and only handed to their receivers
    when `deliver_all()` is called at the tick barrier. Messages addressed to planes out of range
    are dropped, counted and logged as warnings.

    ### Attributes:
        - tracker (:obj:`NeighborTracker`): snapshot of the communication graph for the current tick
        - directory (`dict`): maps plane ids to the planes receiving delivered messages
        - stats (`dict`): counters of sent, delivered and dropped messages
    """
    def __init__(self, tracker : NeighborTracker, directory : dict, level : int = logging.INFO, logger : logging.Logger = None) -> None:
        super().__init__('MESSAGING', level, logger)
        self.tracker = tracker
        self.directory = directory
        self.stats = {'sent' : 0, 'delivered' : 0, 'dropped' : 0}

        self._queue = dict()
        self._lock = threading.Lock()

    def send(self, msg : SimulationMessage) -> None:
        """
        Queues a message for delivery at the next tick barrier. Safe to call from several threads.
        """
        if not isinstance(msg, SimulationMessage):
            raise TypeError(f'`msg` must be of type `SimulationMessage`. is of type {type(msg)}')

        with self._lock:
            self._queue.setdefault(msg.src, []).append(msg)
            self.stats['sent'] += 1

    def pending(self) -> int:
        with self._lock:
            return sum(len(msgs) for msgs in self._queue.values())

    def deliver_all(self) -> int:
        """
        Drains the message queue, delivering every message whose receiver is in range of its sender.
        Messages are delivered ordered by sender id and then by sending order.

        ### Returns:
            - number of messages delivered
        """
        with self._lock:
            queue = self._queue
            self._queue = dict()

        delivered = 0
        for src in sorted(queue.keys()):
            for msg in queue[src]:
                receiver = self.directory.get(msg.dst, None)

                if receiver is None or not self.tracker.in_range(msg.src, msg.dst):
                    self.stats['dropped'] += 1
                    self.log(f'dropped {msg.msg_type} message from {msg.src} to {msg.dst}: receiver out of range.', level=logging.WARNING)
                    continue

                receiver.receive(msg)
                delivered += 1

        self.stats['delivered'] += delivered
        return delivered
