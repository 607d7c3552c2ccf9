from __future__ import annotations


class Scene:
    """
    Base for scenes driven by the SceneManager live loop.

    The manager calls handle_event for every pygame event, then update once
    per display refresh, then render.
    """

    def enter(self, manager: "SceneManager") -> None:  # type: ignore[name-defined]
        """Called once when the scene becomes active."""
        return None

    def exit(self, manager: "SceneManager") -> None:  # type: ignore[name-defined]
        """Called once when the scene is removed; stop animations here."""
        return None

    def handle_event(self, event, manager: "SceneManager") -> None:  # type: ignore[name-defined]
        return None

    def handle_resize(self, width: int, height: int, manager: "SceneManager") -> None:  # type: ignore[name-defined]
        return None

    def update(self, dt_ms: int, manager: "SceneManager") -> None:  # type: ignore[name-defined]
        return None

    def render(self, renderer, manager: "SceneManager") -> None:  # type: ignore[name-defined]
        return None
