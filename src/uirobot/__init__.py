"""uirobot -- Remote command session for the UIRobot agent.

This package drives a UIRobot agent (a small keyboard/mouse/process-control
program running on a networked computer) over its line-oriented TCP
protocol. The session keeps a handful of properties (power, mouse buttons,
running program, pressed keys) and turns every property write into the
command lines the agent understands.
"""

__version__ = "0.1.0"
