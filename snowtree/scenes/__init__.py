from .base import Scene
from .manager import SceneManager
from .tree_scene import TreeScene

__all__ = ["Scene", "SceneManager", "TreeScene"]
