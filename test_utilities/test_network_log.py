"""Test network log parsing and event dispatch."""
import sys
from pathlib import Path
from datetime import datetime, timezone

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(Path(__file__).parent))

from pull_counter.counter import PullCounter
from pull_counter.network_log import (
    NetworkLogParser, LogLinesEvent, ZoneChangeEvent, PrimaryPlayerEvent,
    PartyChangeEvent, CombatChangeEvent, PartyWipeEvent, dispatch,
)
from pull_counter.pull_counts import PullCounterStore
from pull_counter.timestamp_formatter import TimestampFormatter
from pull_counter.zone_id import ZoneId
from test_log_generator import generate_pull_session, generate_network_line

TS = "2021-04-26T14:11:35.1234567-04:00"


def test_network_log_parser():
    """Test record classification."""
    print("Testing Network Log Parser...")
    print("=" * 60)

    parser = NetworkLogParser()

    events = parser.parse_line(f"01|{TS}|2B6|Deltascape V4.0 (Savage)|0123456789abcdef")
    assert events[0] == ZoneChangeEvent(ZoneId.DeltascapeV40Savage, "Deltascape V4.0 (Savage)")
    assert events[1].lines == ["[14:11:35.123] 01:Changed Zone to Deltascape V4.0 (Savage)."]
    print("[OK] ChangeZone parsed (hex zone id)")

    events = parser.parse_line(f"02|{TS}|10ff0001|Tini Poutini|0123456789abcdef")
    assert events[0] == PrimaryPlayerEvent("10FF0001", "Tini Poutini")
    assert events[1].lines == ["[14:11:35.123] 02:Changed primary player to Tini Poutini."]
    print("[OK] ChangedPlayer converted")

    events = parser.parse_line(f"00|{TS}|0038||pullcounter reset|0123456789abcdef")
    assert events == [LogLinesEvent(["[14:11:35.123] 00:0038::pullcounter reset"])]
    print("[OK] GameLog converted")

    events = parser.parse_line(
        f"21|{TS}|40001234|Kefka|28C2|Ultima Upsurge|E0000000||0|0|0123456789abcdef")
    assert events == [LogLinesEvent(["[14:11:35.123] 15:40001234:Kefka:28C2:Ultima Upsurge:E0000000:"])]
    events = parser.parse_line(
        f"22|{TS}|40001234|Kefka|28EC|Hyperdrive|10FF0001|Tini Poutini|0|0123456789abcdef")
    assert events[0].lines[0].startswith("[14:11:35.123] 16:40001234:Kefka:28EC:")
    print("[OK] Ability records use hex line type")

    events = parser.parse_line(f"11|{TS}|3|10FF0001|10FF0002|10FF0003|0123456789abcdef")
    assert events == [PartyChangeEvent(["10FF0001", "10FF0002", "10FF0003"])]
    events = parser.parse_line(f"11|{TS}|0|0123456789abcdef")
    assert events == [PartyChangeEvent([])]
    print("[OK] PartyList parsed")

    assert parser.parse_line(f"260|{TS}|1|1|0|1|0123456789abcdef") == [CombatChangeEvent(True)]
    assert parser.parse_line(f"260|{TS}|0|0|1|1|0123456789abcdef") == [CombatChangeEvent(False)]
    assert parser.parse_line(f"260|{TS}|1|1|1|0|0123456789abcdef") == [], "ACT-only change ignored"
    print("[OK] InCombat changes parsed")

    assert parser.parse_line(f"33|{TS}|80037569|40000010|00|00|00|00|0123456789abcdef") == [PartyWipeEvent()]
    assert parser.parse_line(f"33|{TS}|80037569|40000001|00|00|00|00|0123456789abcdef") == []
    print("[OK] Wipe detected")

    events = parser.parse_line(f"20|{TS}|40001234|Kefka|28C2|Ultima|E0000000||2.70|0123456789abcdef")
    assert events[0].lines == ["[14:11:35.123] 14:40001234:Kefka:28C2:Ultima:E0000000::2.70"]
    print("[OK] Other records converted generically")

    assert parser.parse_line("") == []
    assert parser.parse_line("not a network log line") == []
    assert parser.parse_line(f"XX|{TS}|a|b|hash") == []
    assert parser.parse_line(f"01|{TS}|zzz|Nowhere|hash") == []
    print("[OK] Bad records skipped")

    print("\n" + "=" * 60)
    print("All tests passed!")


def test_timestamp_formatter():
    """Test network log timestamps."""
    formatter = TimestampFormatter()
    dt = formatter.parse_log_timestamp(TS)
    assert dt is not None, "Should parse timestamp"
    assert dt.utcoffset().total_seconds() == -4 * 3600
    assert dt.microsecond == 123456
    assert formatter.format_line_time(TS) == "14:11:35.123"
    print("[OK] Parsed timestamp keeps its offset")

    formatter.set_timezone("UTC")
    assert formatter.format_line_time(TS) == "18:11:35.123"
    formatter.set_timezone("Asia/Tokyo")
    assert formatter.format_line_time(TS) == "03:11:35.123"
    print("[OK] Timezone conversion")

    formatter.set_timezone("Not/AZone")
    assert formatter.format_line_time(TS) == "03:11:35.123", "Unknown zone keeps previous setting"
    formatter.set_timezone("")
    assert formatter.format_line_time(TS) == "14:11:35.123"
    print("[OK] Timezone reset")

    assert formatter.parse_log_timestamp("2021-04-26T14:11:35Z").utcoffset().total_seconds() == 0
    assert formatter.parse_log_timestamp("2021-04-26T14:11:35").utcoffset().total_seconds() == 0
    assert formatter.parse_log_timestamp("yesterday") is None
    assert formatter.format_line_time("yesterday") == "yesterday"
    print("[OK] Timestamp edge cases")


def test_parse_batch_ordering():
    """Consecutive text lines are merged; other events keep their position."""
    parser = NetworkLogParser()
    lines = [
        f"00|{TS}|0839||one|hash",
        f"00|{TS}|0839||two|hash",
        f"260|{TS}|1|1|1|1|hash",
        f"00|{TS}|0839||three|hash",
    ]
    events = parser.parse_batch(lines)
    assert [type(e) for e in events] == [LogLinesEvent, CombatChangeEvent, LogLinesEvent]
    assert len(events[0].lines) == 2 and events[2].lines[0].endswith("three")
    print("[OK] Batch ordering preserved")


def test_session_dispatch():
    """A generated raid session counts one pull per countdown."""
    parser = NetworkLogParser(TimestampFormatter("UTC"))
    counter = PullCounter(store=PullCounterStore())
    start = datetime(2026, 1, 31, 20, 0, 0, tzinfo=timezone.utc)

    lines = generate_pull_session(start, ZoneId.SigmascapeV20Savage, "Sigmascape V2.0 (Savage)", pulls=3)
    for event in parser.parse_batch(lines):
        dispatch(event, counter)
    assert counter.store.as_dict() == {'o6s': 3}, f"Unexpected counts: {counter.store.as_dict()}"
    assert not counter.state.boss_started
    print("[OK] Countdown pulls counted from network log")

    # Kefka phases in O8S start from ability records only
    lines = generate_pull_session(start, ZoneId.SigmascapeV40Savage, "Sigmascape V4.0 (Savage)", pulls=1)
    lines.insert(6, generate_network_line(21, start, "40001234", "Kefka", "28C2", "Ultima Upsurge",
                                          "E0000000", "", "0"))
    for event in parser.parse_batch(lines):
        dispatch(event, counter)
    assert counter.store.get('o8s-kefka') == 1
    assert counter.store.get('o8s-god kefka') == 0
    print("[OK] Ability start line counted in O8S")


if __name__ == "__main__":
    test_network_log_parser()
    test_timestamp_formatter()
    test_parse_batch_ordering()
    test_session_dispatch()
