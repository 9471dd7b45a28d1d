"""Static catalog of the boss fights the pull counter knows how to start."""
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence

from .zone_id import ZoneId


@dataclass(frozen=True)
class BossDefinition:
    """A boss fight scoped to one zone."""
    id: str
    zone_id: Optional[int] = None
    start_regex: Optional[Pattern] = None
    countdown_starts: bool = False
    prevent_auto_start: bool = False


# NOTE: do not add more fights to this table.
# These exist for testing the counter and for backwards compatibility with
# previously saved pull count keys. Zones without an entry are counted under
# their zone name instead.
BOSS_FIGHT_TRIGGERS = (
    BossDefinition(
        id='test',
        zone_id=ZoneId.MiddleLaNoscea,
        start_regex=re.compile(r':You bow courteously to the striking dummy'),
        countdown_starts=True,
        prevent_auto_start=True,
    ),
    BossDefinition(id='o1s', zone_id=ZoneId.DeltascapeV10Savage),
    BossDefinition(id='o2s', zone_id=ZoneId.DeltascapeV20Savage),
    BossDefinition(id='o3s', zone_id=ZoneId.DeltascapeV30Savage),
    BossDefinition(
        id='o4s-exdeath',
        zone_id=ZoneId.DeltascapeV40Savage,
        start_regex=re.compile(r':Exdeath uses Dualcast'),
        prevent_auto_start=True,
    ),
    BossDefinition(
        id='o4s-neo',
        zone_id=ZoneId.DeltascapeV40Savage,
        start_regex=re.compile(r':Neo Exdeath uses Almagest'),
        prevent_auto_start=True,
    ),
    BossDefinition(id='Unending Coil', zone_id=ZoneId.TheUnendingCoilOfBahamutUltimate),
    BossDefinition(id='Shinryu Ex', zone_id=ZoneId.TheMinstrelsBalladShinryusDomain),
    BossDefinition(id='o5s', zone_id=ZoneId.SigmascapeV10Savage),
    BossDefinition(id='o6s', zone_id=ZoneId.SigmascapeV20Savage),
    BossDefinition(id='o7s', zone_id=ZoneId.SigmascapeV30Savage),
    BossDefinition(
        id='o8s-kefka',
        zone_id=ZoneId.SigmascapeV40Savage,
        start_regex=re.compile(r' 15:........:Kefka:28C2:'),
        prevent_auto_start=True,
    ),
    BossDefinition(
        id='o8s-god kefka',
        zone_id=ZoneId.SigmascapeV40Savage,
        start_regex=re.compile(r' 15:........:Kefka:28EC:'),
        prevent_auto_start=True,
    ),
    BossDefinition(id='Byakko Ex', zone_id=ZoneId.TheJadeStoaExtreme),
    BossDefinition(id='Tsukuyomi Ex', zone_id=ZoneId.TheMinstrelsBalladTsukuyomisPain),
    BossDefinition(id='UwU', zone_id=ZoneId.TheWeaponsRefrainUltimate),
    BossDefinition(id='Suzaku Ex', zone_id=ZoneId.HellsKierExtreme),
    BossDefinition(id='Seiryu Ex', zone_id=ZoneId.TheWreathOfSnakesExtreme),
    BossDefinition(id='o9s', zone_id=ZoneId.AlphascapeV10Savage),
    BossDefinition(id='o10s', zone_id=ZoneId.AlphascapeV20Savage),
    BossDefinition(id='o11s', zone_id=ZoneId.AlphascapeV30Savage),
    BossDefinition(
        id='o12s-door',
        zone_id=ZoneId.AlphascapeV40Savage,
        start_regex=re.compile(r':Omega-M:337D:'),
        prevent_auto_start=True,
    ),
    BossDefinition(
        id='o12s-final',
        zone_id=ZoneId.AlphascapeV40Savage,
        start_regex=re.compile(r':Omega:336C:'),
        prevent_auto_start=True,
    ),
    BossDefinition(
        id='The Southern Bozja Front',
        zone_id=ZoneId.TheBozjanSouthernFront,
        countdown_starts=False,
        prevent_auto_start=True,
    ),
    BossDefinition(
        id='Zadnor',
        zone_id=ZoneId.Zadnor,
        countdown_starts=False,
        prevent_auto_start=True,
    ),
)


def definitions_for_zone(zone_id: Optional[int],
                         catalog: Sequence[BossDefinition] = BOSS_FIGHT_TRIGGERS) -> List[BossDefinition]:
    """Return the catalog entries for a zone, in declaration order."""
    if zone_id is None:
        return []
    return [boss for boss in catalog if boss.zone_id == zone_id]
