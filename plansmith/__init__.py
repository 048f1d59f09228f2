"""plansmith - visual test plan builder core.

Task-tree editing, diagram layout and YAML serialization for test plans
made of tasks and control-flow containers.
"""

__version__ = "0.1.0"
