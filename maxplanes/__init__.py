""" 
Max-Sum Planes (MAXPLANES) Documentation
===================================

MAXPLANES is a simulation platform for fleets of mobile agents ("planes") that divide a stream of 
geographically distributed tasks among themselves using only local, range-limited communication.
Task allocation is performed by a decentralized Max-Sum solver running over a factor graph that 
every plane rebuilds each tick from its own tasks and the tasks of its neighbors.
 
"""

__version__ = "0.1.0"
