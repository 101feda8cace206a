import functools
import time
from typing import Union

import numpy as np

def distance(pos_a : list, pos_b : list) -> float:
    """ Euclidean distance between two cartesian positions """
    return float(np.linalg.norm(np.asarray(pos_a, dtype=float) - np.asarray(pos_b, dtype=float)))

def step_towards(pos : list, target : list, max_step : Union[float, int]) -> tuple:
    """
    Advances `pos` in a straight line towards `target` by at most `max_step`.

    ### Returns:
        - new position (`list`) and distance travelled (`float`)
    """
    start = np.asarray(pos, dtype=float)
    end = np.asarray(target, dtype=float)
    delta = end - start
    dist = float(np.linalg.norm(delta))

    if dist <= max_step:
        return [float(x) for x in end], dist

    new_pos = start + delta * (max_step / dist)
    return [float(x) for x in new_pos], float(max_step)

def runtime_tracker( f ):
    """
    Registers the run-time of every call to `f` under `self.stats[f.__name__]` as a running
    count, total and maximum
    """
    @functools.wraps(f)
    def tracker(self, *args, **kwargs):
        t_0 = time.perf_counter()
        result = f(self, *args, **kwargs)
        dt = time.perf_counter() - t_0

        if getattr(self, 'stats', None) is None or not isinstance(self.stats, dict):
            raise AttributeError(f"class of type `{type(self)}` must contain `stats` attribute of type `dict`.")

        stats = self.stats.setdefault(f.__name__, {'calls' : 0, 'total' : 0.0, 'max' : 0.0})
        stats['calls'] += 1
        stats['total'] += dt
        stats['max'] = max(stats['max'], dt)
        return result

    return tracker
