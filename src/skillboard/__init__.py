"""
skillboard - Curate Claude skills and slash commands into categories.

Units live under a project's .claude directory and are enabled or disabled
by moving them between sibling roots (skills/ <-> disabled-skills/).
"""

__version__ = "0.4.0"
