# backend/streamspawn/engine/systems/router.py
"""
AdminCommandRouter: Decorator-based routing for operator chat commands.

Provides:
- @register() decorator for handler registration
- Dispatch with alias support
- The built-in commands ``twitchtest <event>`` and ``twitchreload``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from ...config import ConfigError
from ..commands import GREEN, RED, YELLOW
from ..payloads import SAMPLE_PAYLOADS, resolve_kind_name
from ..world import Event

if TYPE_CHECKING:
    from ..world import ActorRef

logger = logging.getLogger(__name__)

CommandHandler = Callable[[Any, "ActorRef | None", str], List[str]]  # (engine, sender, args)

AVAILABLE_EVENTS = "Available events: subscribe, gift, cheer, raid, follow"


@dataclass
class CommandMeta:
    """Metadata for a registered command."""
    name: str  # Primary command name
    aliases: List[str]
    handler: CommandHandler
    description: str
    usage: str


class AdminCommandRouter:
    """
    Routes operator commands to handlers.

    Usage:
        router = AdminCommandRouter(engine)
        replies = router.dispatch(sender, "twitchtest cheer")
    """

    def __init__(self, engine: Any) -> None:
        self.engine = engine
        self.commands: Dict[str, CommandMeta] = {}
        self._register_builtins()

    def register(
        self,
        name: str,
        aliases: Optional[List[str]] = None,
        description: str = "",
        usage: str = "",
    ) -> Callable[[CommandHandler], CommandHandler]:
        """
        Decorator to register a command handler.

            @router.register("twitchreload", description="Reload config")
            def reload(engine, sender, args):
                ...
        """
        def decorator(handler: CommandHandler) -> CommandHandler:
            meta = CommandMeta(
                name=name,
                aliases=list(aliases or []),
                handler=handler,
                description=description,
                usage=usage,
            )
            for key in [name, *meta.aliases]:
                self.commands[key.lower()] = meta
            return handler

        return decorator

    def dispatch(self, sender: "ActorRef | None", raw_command: str) -> List[str]:
        """
        Parse and run a command.

        Returns:
            Reply lines for the sender
        """
        raw = raw_command.strip().lstrip("/")
        if not raw:
            return []

        parts = raw.split(maxsplit=1)
        cmd_name = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ""

        meta = self.commands.get(cmd_name)
        if meta is None:
            return [f"{RED}Unknown command: {cmd_name}"]

        try:
            return meta.handler(self.engine, sender, args)
        except Exception:
            logger.exception("Command %s failed", cmd_name)
            return [f"{RED}Something went wrong executing that command."]

    def get_help(self) -> str:
        lines = []
        seen = set()
        for meta in self.commands.values():
            if meta.name in seen:
                continue
            seen.add(meta.name)
            usage = f"/{meta.name} {meta.usage}".rstrip()
            lines.append(f"{usage} - {meta.description}" if meta.description else usage)
        return "\n".join(lines)

    # ---------- Built-in commands ----------

    def _register_builtins(self) -> None:

        @self.register("twitchtest", description="Trigger a test stream event", usage="<event_type>")
        def twitch_test(engine: Any, sender: "ActorRef | None", args: str) -> List[str]:
            if not args.strip():
                return [f"{RED}Usage: /twitchtest <event_type>", f"{YELLOW}{AVAILABLE_EVENTS}"]

            name = args.split()[0].lower()
            kind = resolve_kind_name(name)
            if kind is None:
                return [f"{RED}Unknown event type: {name}", f"{YELLOW}{AVAILABLE_EVENTS}"]

            engine.handle_event(Event.create(kind.value, SAMPLE_PAYLOADS[kind]))
            label = kind.value.replace("_", " ")
            return [f"{GREEN}Triggered test {label} event!"]

        @self.register("twitchreload", description="Reload the configuration file")
        def twitch_reload(engine: Any, sender: "ActorRef | None", args: str) -> List[str]:
            try:
                engine.store.reload()
            except ConfigError as e:
                logger.error("Reload failed: %s", e)
                return [f"{RED}Reload failed: {e}"]
            return [f"{GREEN}StreamSpawn configuration reloaded!"]
