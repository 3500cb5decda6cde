"""Alarm state machine.

The numeric level lives on the PlayerSession; the machine only guards the
transitions: while calm an escalation either stays calm or, when the next
level hits the ceiling, moves to the final caught state. Stand-down (reset
to zero) is only possible while calm.
"""

from statemachine import State, StateMachine

from progression.config import settings
from progression.models.player import PlayerSession


class AlarmMachine(StateMachine):
    calm = State("calm", value="calm", initial=True)
    caught = State("caught", value="caught", final=True)

    escalate = calm.to(caught, cond="reaches_ceiling") | calm.to.itself()
    stand_down = calm.to.itself()

    def __init__(self, player: PlayerSession, max_level: int | None = None):
        self.player = player
        self.max_level = settings.MAX_ALARM_LEVEL if max_level is None else max_level
        start = "caught" if (player.alarm_level or 0) >= self.max_level else "calm"
        super().__init__(start_value=start)

    def reaches_ceiling(self) -> bool:
        return (self.player.alarm_level or 0) + 1 >= self.max_level

    @property
    def is_caught(self) -> bool:
        return self.caught.is_active
