import logging

from maxplanes.behaviors import Behavior, BehaviorTypes
from maxplanes.domain import Domain
from maxplanes.tasks import Task

class AssignmentApplier(object):
    """
    ## Assignment Applier

    Reconciles the task selected by the solver with the plane's task list.
    Applying the same selection more than once is a no-op.
    """
    def __init__(self, plane) -> None:
        self.plane = plane

    def apply(self, selection : Task, domain : Domain) -> bool:
        """
        Makes `selection` the plane's next task, placing it at the front of its task list.
        The previous next task stays in the list, behind the new one.

        Selections of completed tasks, or of tasks that are neither in `domain` nor owned by the
        plane, are treated as already resolved and replaced by "no task".

        ### Returns:
            - `True` if the plane's next task changed
        """
        if selection is not None and (selection.is_completed()
                                      or (selection not in domain and selection not in self.plane.get_tasks())):
            self.plane.log(f'task {selection.id} was resolved since it was selected. dropping selection.')
            selection = None

        if selection == self.plane.next_task:
            return False

        previous = self.plane.next_task
        if selection is not None:
            self.plane.add_task(selection, front=True)
        self.plane.set_next_task(selection)

        self.plane.log(f'next task changed from {previous} to {selection}.')
        return True

    def acquire(self, task : Task) -> None:
        """
        Takes over a task handed over by another plane, at the back of the task list
        """
        self.plane.add_task(task)

    def release(self, task : Task) -> None:
        """
        Drops a task that has been handed over to another plane
        """
        if self.plane.remove_task(task) is not None:
            self.plane.log(f'released task {task.id}.')

    def prune(self) -> list:
        """
        Removes every completed task from the plane's task list
        """
        completed = [task for task in self.plane.get_tasks() if task.is_completed()]
        for task in completed:
            self.plane.remove_task(task)
        return completed

class AssignmentBehavior(Behavior):
    """
    Releases the tasks this plane's function nodes hand over to other planes as soon as they are
    granted, then takes over the tasks handed over to this plane and commits the Max-Sum
    variable's selection once messages have been exchanged.
    """
    def __init__(self, plane) -> None:
        super().__init__(plane, BehaviorTypes.ASSIGNMENT)
        self.applier = AssignmentApplier(plane)
        self.graph = None
        self.variable = None
        self.function = None

    def get_dependencies(self) -> list:
        return [BehaviorTypes.MAX_SUM_VARIABLE, BehaviorTypes.MAX_SUM_FUNCTION]

    def initialize(self) -> None:
        self.graph = self.plane.get_behavior(BehaviorTypes.UPDATE_GRAPH)
        self.variable = self.plane.get_behavior(BehaviorTypes.MAX_SUM_VARIABLE)
        self.function = self.plane.get_behavior(BehaviorTypes.MAX_SUM_FUNCTION)

    def before_messages(self) -> None:
        for task in self.function.get_releases():
            self.applier.release(task)

    def after_messages(self) -> None:
        self.applier.prune()

        for task in self.variable.get_transfers():
            self.applier.acquire(task)

        if self.applier.apply(self.variable.get_selection(), self.graph.get_domain()):
            self.log(f'now working on {self.plane.next_task}.', level=logging.DEBUG)
