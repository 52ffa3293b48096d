"""
Core components of the Autopilot framework.
"""

from .exceptions import *
from .interfaces import *
