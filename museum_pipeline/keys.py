from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Command(Enum):
    QUIT = "quit"
    SCREENSHOT = "screenshot"
    CYCLE_LEFT = "cycle_left"
    CYCLE_RIGHT = "cycle_right"


@dataclass(frozen=True)
class KeyBindings:
    quit: str = "q"
    screenshot: str = "s"
    cycle_left: str = "a"
    cycle_right: str = "d"

    def command_for(self, key: Optional[int]) -> Optional[Command]:
        """Map a polled key code (None or -1 when nothing was pressed) to a command."""
        if key is None or key < 0:
            return None
        ch = chr(key & 0xFF)
        table = {
            self.quit: Command.QUIT,
            self.screenshot: Command.SCREENSHOT,
            self.cycle_left: Command.CYCLE_LEFT,
            self.cycle_right: Command.CYCLE_RIGHT,
        }
        return table.get(ch)
