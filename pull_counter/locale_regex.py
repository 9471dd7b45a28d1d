"""Locale dependent log patterns used by the pull counter."""
import re
from typing import Pattern

DEFAULT_LANGUAGE = 'en'

# Echo (/echo) chat lines have chat code 0038; the speaker field may be empty.
RESET_REGEX = re.compile(r'00:0038:(?:[^:]*:)?.*pullcounter reset.*?')

# Message printed when a countdown reaches zero.
COUNTDOWN_ENGAGE = {
    'en': re.compile(r'Engage!'),
    'de': re.compile(r'Start!'),
    'fr': re.compile(r"À l'attaque[ ]?!"),
    'ja': re.compile(r'戦闘開始！'),
    'cn': re.compile(r'战斗开始！'),
    'ko': re.compile(r'전투 시작!'),
}


def countdown_engage_regex(language: str) -> Pattern:
    """Countdown engage pattern for a parser language, falling back to English."""
    return COUNTDOWN_ENGAGE.get(language) or COUNTDOWN_ENGAGE[DEFAULT_LANGUAGE]
