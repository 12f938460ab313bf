"""Prerequisite graph layout and progress tracking."""

from loguru import logger

# Library modules log at DEBUG; the CLI turns output on and picks the level.
logger.disable("skilltree")

__version__ = "0.1.0"
