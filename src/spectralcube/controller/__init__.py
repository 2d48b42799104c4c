"""
The CONTROLLER layer owns cubes on behalf of a host application and drives
the engine once per simulation tick.
"""
