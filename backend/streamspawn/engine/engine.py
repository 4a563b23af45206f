# backend/streamspawn/engine/engine.py
import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from ..config import ConfigSnapshot, ConfigStore
from .commands import DirectMessage, WorldCommand
from .payloads import SAMPLE_PAYLOADS, EventParseError, validate_fields
from .systems import (
    AdminCommandRouter,
    CombatTagRule,
    CommandEmitter,
    CommandExecutor,
    Damager,
    EmitterConfig,
    EventPolicyEngine,
    ExecutionReport,
    GameAdapter,
    TargetResolver,
)
from .world import ActionKind, ActorRef, DerivedAction, Event, EventKind, Skip, TargetPolicy

logger = logging.getLogger(__name__)


@dataclass
class EventOutcome:
    """What handling one event produced. Not persisted."""
    event: Event
    result: DerivedAction | Skip
    target: Optional[ActorRef] = None
    commands: List[WorldCommand] = field(default_factory=list)
    report: Optional[ExecutionReport] = None

    @property
    def skipped(self) -> bool:
        return isinstance(self.result, Skip)


class StreamEngine:
    """
    Core stream-event engine.

    - Accepts parsed events from any task via submit() (non-blocking).
    - Applies them one at a time from game_loop(), the only place world
      commands are executed.
    - Takes one config snapshot per event; a reload mid-event does not
      change that event's numbers.

    Uses modular systems for each step:
    - EventPolicyEngine: event + config -> DerivedAction
    - TargetResolver: policy + online players -> target
    - CommandEmitter: action + target -> WorldCommands
    - CommandExecutor: WorldCommands -> adapter calls
    """

    def __init__(
        self,
        store: ConfigStore,
        adapter: GameAdapter,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.adapter = adapter

        # Queue of parsed events waiting for the game loop
        self._event_queue: asyncio.Queue[Event] = asyncio.Queue()

        self.policy = EventPolicyEngine()
        self.targets = TargetResolver(rng=rng, lookup=adapter)
        self.executor = CommandExecutor(adapter)
        self.combat_rule = CombatTagRule()
        self.command_router = AdminCommandRouter(self)

    # ---------- Ingress side ----------

    def submit(self, event: Event) -> None:
        """Hand an event to the game loop. Ordering between producers is best-effort."""
        self._event_queue.put_nowait(event)

    def submit_sample(self, kind: EventKind) -> Event:
        event = Event.create(kind.value, SAMPLE_PAYLOADS[kind])
        self.submit(event)
        return event

    @property
    def pending(self) -> int:
        return self._event_queue.qsize()

    # ---------- Game loop ----------

    async def game_loop(self) -> None:
        """Consume queued events forever, one at a time."""
        while True:
            event = await self._event_queue.get()
            try:
                self.handle_event(event)
            except Exception:
                logger.exception("Error processing %s event", event.event_type)
            finally:
                self._event_queue.task_done()

    def process_pending(self) -> List[EventOutcome]:
        """Synchronously handle everything queued so far."""
        outcomes = []
        while True:
            try:
                event = self._event_queue.get_nowait()
            except asyncio.QueueEmpty:
                return outcomes
            try:
                outcomes.append(self.handle_event(event))
            finally:
                self._event_queue.task_done()

    # ---------- Event handling ----------

    def emitter_for(self, config: ConfigSnapshot) -> CommandEmitter:
        return CommandEmitter(
            self.adapter,
            EmitterConfig(
                mines_world_prefix=config.get_str("spawn.world_prefix", "mines/"),
                spawn_distance=config.get_float("spawn.distance", 3.0),
            ),
        )

    def handle_event(self, event: Event) -> EventOutcome:
        """Run one event through policy, targeting, emission and execution."""
        config = self.store.snapshot()

        if event.kind is None:
            logger.warning("Unknown event type: %s", event.event_type)
            return EventOutcome(event, Skip("unknown event type"))

        payload = event.payload
        if payload is None:
            try:
                payload = validate_fields(event.kind, dict(event.fields))
            except EventParseError as e:
                logger.warning("Dropping %s event: %s", event.event_type, e)
                return EventOutcome(event, Skip("invalid payload"))

        result = self.policy.resolve(event.kind, payload, config)
        if isinstance(result, Skip):
            return EventOutcome(event, result)

        logger.info("Processing event: %s", event.event_type)

        policy = TargetPolicy.from_config(config)
        target = self.targets.select(policy, self.adapter.list_online_actors())
        if target is None:
            logger.warning("No target for %s event; nothing emitted", event.event_type)
            return EventOutcome(event, result)

        if result.kind is ActionKind.SPAWN_HOSTILES:
            logger.info("Attempting to spawn %d %s(s) for %s", result.count, result.subject_kind, target.name)
        else:
            logger.info("Granting %d %s to %s", result.count, result.subject_kind, target.name)
        commands = self.emitter_for(config).build(result, target)
        report = self.executor.execute(commands)
        return EventOutcome(event, result, target, commands, report)

    def handle_damage(self, victim: Optional[ActorRef], damager: Optional[Damager]) -> List[WorldCommand]:
        """Game callback for a player taking damage from an entity."""
        effect = self.combat_rule.on_actor_damaged(victim, damager, self.store.snapshot())
        if effect is None:
            return []
        commands: List[WorldCommand] = [effect, self.combat_rule.feedback(victim, damager)]
        self.executor.execute(commands)
        return commands

    def handle_command(self, sender: Optional[ActorRef], raw_command: str) -> List[str]:
        """Run an operator chat command and message the replies back to the sender."""
        replies = self.command_router.dispatch(sender, raw_command)
        if sender is not None and replies:
            self.executor.execute([DirectMessage(sender, line) for line in replies])
        return replies
