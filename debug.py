# debug.py
from __future__ import annotations
import logging
from typing import Dict

LOGGER_NAME = "ENIGMA"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"

COMPONENTS = (
    "keyboard",
    "plugboard",
    "rotor",
    "reflector",
    "stepping",
    "machine",
    "engine",
    "loader",
    "snapshot",
)


class Debug:
    _root_configured: bool = False          # class-level guard

    # one switch map for every module-level Debug()
    _components: Dict[str, bool] = {c: False for c in COMPONENTS}
    _enabled: bool = True

    def __init__(self) -> None:
        self.logger = logging.getLogger(LOGGER_NAME)

    @classmethod
    def configure(cls, *, log_to: str | None = None, level: int = logging.DEBUG) -> None:
        """
        Install the root handler once. If `log_to` is given, messages also
        stream to that file. Importing a module never calls this.
        """
        if cls._root_configured:
            return

        handlers: list[logging.Handler] = [logging.StreamHandler()]
        if log_to:
            handlers.append(logging.FileHandler(log_to, encoding="utf-8"))

        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=handlers,
        )
        cls._root_configured = True

    # ── logging API ──────────────────────────────────────────────
    def log(self, component: str, message: str, *args: object) -> None:
        if Debug._enabled and Debug._components.get(component, False):
            self.logger.debug("[%s] " + message, component.upper(), *args)

    # ── component toggles ────────────────────────────────────────
    def enable(self, *components: str) -> None:
        for c in components:
            self._require(c)
            Debug._components[c] = True

    def disable(self, *components: str) -> None:
        for c in components:
            self._require(c)
            Debug._components[c] = False

    def toggle(self, component: str) -> None:
        self._require(component)
        Debug._components[component] = not Debug._components[component]

    def toggle_global(self, state: bool) -> None:
        """Switch every component on/off at once."""
        Debug._enabled = state

    def status(self) -> Dict[str, bool]:
        """Return a *copy* of the current component map."""
        return Debug._components.copy()

    # ── helpers ──────────────────────────────────────────────────
    def _require(self, component: str) -> None:
        if component not in Debug._components:
            raise ValueError(
                f"No such component: {component!r} (expected one of {', '.join(COMPONENTS)})"
            )

    # nicety for `print(dbg)`
    def __repr__(self) -> str:
        active = [k for k, v in Debug._components.items() if v]
        return f"<Debug enabled={Debug._enabled} active={active}>"
