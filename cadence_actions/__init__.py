"""
cadence_actions - Small callback targets for conditions and zones

  - SceneLoadAction: delayed, bracketed scene transition request
  - MessageAction: emit a configured message
"""

from .scene import SceneLoader, SceneLoadAction
from .message import MessageAction

__all__ = [
    "SceneLoader",
    "SceneLoadAction",
    "MessageAction",
]
