"""Select the boss triggers that apply to the current zone."""
from typing import List, Optional, Sequence, Tuple

from .boss_catalog import BOSS_FIGHT_TRIGGERS, BossDefinition, definitions_for_zone
from .logger import get_logger

logger = get_logger(__name__)


def activate(zone_id: Optional[int],
             catalog: Sequence[BossDefinition] = BOSS_FIGHT_TRIGGERS
             ) -> Tuple[List[BossDefinition], Optional[BossDefinition]]:
    """
    Activate the triggers for a zone.
    
    Args:
        zone_id: Current zone id (None or 0 before the first zone change)
        catalog: Boss definitions to select from
        
    Returns:
        (active bosses in catalog order, countdown boss or None)
    """
    if not zone_id:
        return [], None
    
    bosses = definitions_for_zone(zone_id, catalog)
    countdown_boss = None
    for boss in bosses:
        if not boss.countdown_starts:
            continue
        # Only one boss can be started with countdown in a zone.
        if countdown_boss:
            logger.error(f"Countdown boss conflict: {boss.id}, {countdown_boss.id}")
            logger.warning(f"Ignoring countdown start for '{boss.id}' in zone {zone_id}, keeping '{countdown_boss.id}'")
            continue
        countdown_boss = boss
    
    logger.debug(f"Activated {len(bosses)} boss trigger(s) for zone {zone_id}"
                 f" (countdown boss: {countdown_boss.id if countdown_boss else None})")
    return bosses, countdown_boss
