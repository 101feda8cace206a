from bisect import bisect_left

from maxplanes.tasks import Task

class Domain(object):
    """
    ## Plane Domain

    Association from the tasks visible to a plane to the plane currently believed to own them,
    kept sorted by task id so that any two planes seeing the same tasks iterate them identically.

    Insertion is first-writer-wins: a task already present keeps its owner. Contradictory claims
    (two different planes listing the same task) are the only exception and always resolve to the
    plane with the lowest id, so the result does not depend on the order planes were visited in.
    Every claimant seen for a task is still recorded in `claimants`.
    """
    def __init__(self) -> None:
        self._ids = []
        self._tasks = dict()
        self._owners = dict()
        self._claimants = dict()

    def put(self, task : Task, owner) -> bool:
        """
        Inserts `task` owned by `owner`.

        ### Returns:
            - `True` if the task's owner changed as a result of this insertion
        """
        self._claimants.setdefault(task.id, set()).add(owner.id)

        if task.id not in self._owners:
            self._ids.insert(bisect_left(self._ids, task.id), task.id)
            self._tasks[task.id] = task
            self._owners[task.id] = owner
            return True

        if owner.id < self._owners[task.id].id:
            self._owners[task.id] = owner
            return True

        return False

    def owner(self, task : Task):
        return self._owners.get(task.id, None)

    def owner_id(self, task_id : int) -> int:
        owner = self._owners.get(task_id, None)
        return owner.id if owner is not None else None

    def claimants(self, task : Task) -> set:
        return set(self._claimants.get(task.id, set()))

    def get_task(self, task_id : int) -> Task:
        return self._tasks.get(task_id, None)

    def tasks(self) -> list:
        return [self._tasks[task_id] for task_id in self._ids]

    def task_ids(self) -> list:
        return list(self._ids)

    def owned_by(self, plane_id : int) -> list:
        return [self._tasks[task_id] for task_id in self._ids if self._owners[task_id].id == plane_id]

    def __contains__(self, task : Task) -> bool:
        return task.id in self._owners

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self):
        return iter(self.tasks())

    def to_dict(self) -> dict:
        """ Maps task ids to owner ids """
        return {task_id : self._owners[task_id].id for task_id in self._ids}

    def __str__(self) -> str:
        return str(self.to_dict())
