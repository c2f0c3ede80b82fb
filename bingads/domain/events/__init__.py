"""Domain Event definitions.

Represents significant occurrences during a service call that other parts
of the system (logging, metrics hooks) might react to.
"""
