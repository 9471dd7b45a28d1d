"""Classify network log records into pull counter events."""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .logger import get_logger
from .timestamp_formatter import TimestampFormatter

logger = get_logger(__name__)

GAME_LOG = 0
CHANGE_ZONE = 1
CHANGED_PLAYER = 2
PARTY_LIST = 11
ABILITY = 21
NETWORK_AOE_ABILITY = 22
ACTOR_CONTROL = 33
IN_COMBAT = 260

# Actor control command sent when the screen fades out after a wipe.
WIPE_COMMAND = '40000010'


@dataclass
class LogLinesEvent:
    """Converted text lines, in log order."""
    lines: List[str] = field(default_factory=list)


@dataclass
class ZoneChangeEvent:
    zone_id: int
    zone_name: str


@dataclass
class PrimaryPlayerEvent:
    player_id: str
    name: str


@dataclass
class PartyChangeEvent:
    party: List[str]


@dataclass
class CombatChangeEvent:
    in_combat: bool


@dataclass
class PartyWipeEvent:
    pass


class NetworkLogParser:
    """Parse pipe-delimited network log records ("type|timestamp|...|hash")."""

    def __init__(self, timestamp_formatter: Optional[TimestampFormatter] = None):
        self.timestamp_formatter = timestamp_formatter or TimestampFormatter()

    def parse_line(self, line: str) -> list:
        """
        Parse one network log record.

        Args:
            line: A line from the network log file

        Returns:
            Events for the record (empty for blank or unparseable lines)
        """
        parts = line.rstrip('\r\n').split('|')
        if len(parts) < 3:
            if line.strip():
                logger.debug(f"Skipping line without network log fields: {line[:100]}")
            return []
        try:
            line_type = int(parts[0])
        except ValueError:
            logger.debug(f"Skipping line with non-numeric type: {line[:100]}")
            return []

        # The trailing field is the record hash.
        fields = parts[2:-1]
        prefix = f"[{self.timestamp_formatter.format_line_time(parts[1])}] {line_type:02X}:"

        if line_type == GAME_LOG:
            return [LogLinesEvent([prefix + ':'.join(fields[:3])])]

        if line_type == CHANGE_ZONE:
            if len(fields) < 2:
                return []
            try:
                zone_id = int(fields[0], 16)
            except ValueError:
                logger.debug(f"Bad zone id in ChangeZone record: {line[:100]}")
                return []
            zone_name = fields[1]
            return [ZoneChangeEvent(zone_id, zone_name),
                    LogLinesEvent([f"{prefix}Changed Zone to {zone_name}."])]

        if line_type == CHANGED_PLAYER:
            if len(fields) < 2:
                return []
            player_id = fields[0].upper()
            name = fields[1]
            return [PrimaryPlayerEvent(player_id, name),
                    LogLinesEvent([f"{prefix}Changed primary player to {name}."])]

        if line_type == PARTY_LIST:
            if not fields:
                return []
            try:
                count = int(fields[0])
            except ValueError:
                logger.debug(f"Bad party count in PartyList record: {line[:100]}")
                return []
            return [PartyChangeEvent([member for member in fields[1:1 + count] if member])]

        if line_type in (ABILITY, NETWORK_AOE_ABILITY):
            return [LogLinesEvent([prefix + ':'.join(fields[:6])])]

        if line_type == ACTOR_CONTROL:
            if len(fields) >= 2 and fields[1].upper() == WIPE_COMMAND:
                return [PartyWipeEvent()]
            return []

        if line_type == IN_COMBAT:
            if len(fields) < 4:
                return []
            # inACTCombat|inGameCombat|isACTChanged|isGameChanged
            if fields[3] != '1':
                return []
            return [CombatChangeEvent(fields[1] == '1')]

        return [LogLinesEvent([prefix + ':'.join(fields)])]

    def parse_batch(self, lines: Sequence[str]) -> list:
        """
        Parse a batch of records, merging consecutive text lines into one
        LogLinesEvent so other events keep their place in the stream.
        """
        events = []
        for line in lines:
            for event in self.parse_line(line):
                if isinstance(event, LogLinesEvent) and events and isinstance(events[-1], LogLinesEvent):
                    events[-1].lines.extend(event.lines)
                else:
                    events.append(event)
        return events


def dispatch(event, counter) -> None:
    """Deliver one parsed event to a PullCounter."""
    if isinstance(event, LogLinesEvent):
        counter.on_log_event(event.lines)
    elif isinstance(event, ZoneChangeEvent):
        counter.on_change_zone(event.zone_id, event.zone_name)
    elif isinstance(event, CombatChangeEvent):
        counter.on_in_combat_change(event.in_combat)
    elif isinstance(event, PartyChangeEvent):
        counter.on_party_change(event.party)
    elif isinstance(event, PartyWipeEvent):
        counter.on_party_wipe()
    elif isinstance(event, PrimaryPlayerEvent):
        logger.info(f"Primary player: {event.name} ({event.player_id})")
