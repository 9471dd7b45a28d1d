"""Detect boss pulls from log lines and combat events and keep the counts."""
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .boss_catalog import BOSS_FIGHT_TRIGGERS, BossDefinition
from .locale_regex import DEFAULT_LANGUAGE, RESET_REGEX, countdown_engage_regex
from .logger import get_logger
from .pull_counts import PullCounterStore
from .trigger_activator import activate

logger = get_logger(__name__)

# Implicit pulls are only counted for a full raid party.
AUTO_START_PARTY_SIZE = 8


def normalize_zone_name(zone_name: str) -> str:
    """
    Proper-case a zone name ("the Jade Stoa" -> "The Jade Stoa").

    Network log zone names that start with "the" are lowercase; saved pull
    counts for uncatalogued zones are keyed by the proper-cased name.
    """
    words = []
    for word in zone_name.split(' '):
        if not word:
            words.append('')
            continue
        words.append(word[0].upper() + word[1:])
    return ' '.join(words)


@dataclass
class SessionState:
    """Mutable state of the running counter."""
    zone_id: Optional[int] = None
    zone_name: str = '(unknown)'
    bosses: List[BossDefinition] = field(default_factory=list)
    countdown_boss: Optional[BossDefinition] = None
    party: List[str] = field(default_factory=list)
    boss_started: bool = False

    @property
    def party_size(self) -> int:
        return len(self.party)


class PullCounter:
    """
    Counts pulls per boss.

    A pull starts when a boss start line, the countdown engage line or (for
    full parties in simple zones) entering combat is seen, and lasts until
    combat ends. Every change is saved through the store and shown through
    the display callbacks.
    """

    def __init__(self, store: Optional[PullCounterStore] = None,
                 language: str = DEFAULT_LANGUAGE,
                 catalog: Sequence[BossDefinition] = BOSS_FIGHT_TRIGGERS,
                 on_show_count: Optional[Callable[[str, int], None]] = None,
                 on_clear: Optional[Callable[[], None]] = None,
                 on_wipe: Optional[Callable[[], None]] = None):
        """
        Initialize the pull counter.

        Args:
            store: Count store (a new unsaved store if omitted)
            language: Parser language selecting the countdown engage pattern
            catalog: Boss definitions to activate per zone
            on_show_count: Called with (boss id, count) after every change
            on_clear: Called when the displayed count should be blanked
            on_wipe: Called when the party wipes
        """
        self.store = store if store is not None else PullCounterStore()
        self.catalog = catalog
        self.state = SessionState()
        self.reset_regex = RESET_REGEX
        self.countdown_engage_regex = countdown_engage_regex(language)
        self.on_show_count = on_show_count
        self.on_clear = on_clear
        self.on_wipe = on_wipe
        self.reload_triggers()

    def on_fight_start(self, boss: BossDefinition) -> None:
        count = self.store.increment(boss.id)
        self.state.boss_started = True
        logger.info(f"Pull started: {boss.id} (pull #{count})")

        self.show_count_for(boss.id)
        self.store.save()

    def show_count_for(self, boss_id: str) -> None:
        if self.on_show_count:
            self.on_show_count(boss_id, self.store.get(boss_id))

    def on_log_event(self, lines: Sequence[str]) -> None:
        """
        Scan a batch of log lines.

        Nothing is counted while a pull is already in progress. The first
        line that starts a pull ends the scan of the batch; reset lines do not.
        """
        if self.state.boss_started:
            return
        for line in lines:
            if self.reset_regex.search(line):
                self.reset_pull_counter()
            if self.countdown_engage_regex.search(line):
                if self.state.countdown_boss:
                    self.on_fight_start(self.state.countdown_boss)
                else:
                    self.auto_start_boss_if_needed()
                return
            for boss in self.state.bosses:
                if boss.start_regex and boss.start_regex.search(line):
                    self.on_fight_start(boss)
                    return

    def on_change_zone(self, zone_id: Optional[int], zone_name: str) -> None:
        if self.on_clear:
            self.on_clear()
        self.state.zone_id = zone_id
        # TODO: map saved zone-name keys onto zone ids once a zone with a
        # name-keyed count is entered.
        self.state.zone_name = normalize_zone_name(zone_name)
        logger.info(f"Zone changed: {self.state.zone_name} ({zone_id})")

        self.reload_triggers()

    def reset_pull_counter(self) -> None:
        if self.state.bosses:
            boss_ids = [boss.id for boss in self.state.bosses]
        else:
            boss_ids = [self.state.zone_name]
        self.store.reset(boss_ids)
        for boss_id in boss_ids:
            self.show_count_for(boss_id)

        self.store.save()

    def reload_triggers(self) -> None:
        self.state.bosses, self.state.countdown_boss = activate(self.state.zone_id, self.catalog)

    def on_in_combat_change(self, in_combat: bool) -> None:
        if not in_combat:
            if self.state.boss_started:
                logger.debug("Combat ended, pull finished")
            self.state.boss_started = False
            return
        self.auto_start_boss_if_needed()

    def auto_start_boss_if_needed(self) -> None:
        """
        Start an implicit boss fight for this zone in parties of 8 people
        unless there's a door fight that specifies otherwise.
        """
        if len(self.state.bosses) > 1:
            return
        if self.state.boss_started:
            return
        if self.state.party_size != AUTO_START_PARTY_SIZE:
            return

        if self.state.bosses:
            first_boss = self.state.bosses[0]
            if first_boss.prevent_auto_start:
                return
            self.on_fight_start(first_boss)
            return

        self.on_fight_start(BossDefinition(id=self.state.zone_name, countdown_starts=True))

    def on_party_wipe(self) -> None:
        logger.info(f"Party wipe in {self.state.zone_name}")
        if self.on_wipe:
            self.on_wipe()

    def on_party_change(self, party: Sequence[str]) -> None:
        self.state.party = list(party)
        logger.debug(f"Party changed: {self.state.party_size} member(s)")

    def set_save_data(self, raw) -> bool:
        """Apply the payload of the startup load. Returns False if it was discarded."""
        applied = self.store.load(raw)
        self.reload_triggers()
        return applied
