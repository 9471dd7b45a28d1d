"""Test pull count file storage."""
import sys
import json
import threading
from pathlib import Path
import tempfile
import shutil

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pull_counter.counter import PullCounter
from pull_counter.counter_storage import CounterStorage
from pull_counter.pull_counts import PullCounterStore
from pull_counter.zone_id import ZoneId


def test_counter_storage():
    """Test saving and loading pull counts."""
    print("Testing Counter Storage...")
    print("=" * 60)
    
    temp_dir = Path(tempfile.mkdtemp())
    db_path = temp_dir / "pullcounts.json"
    
    try:
        storage = CounterStorage(str(db_path))
        assert storage.load_data() is None, "New storage should have no data"
        print("[OK] Missing file loads as no data")
        
        storage.save_data('{"o1s": 1}')
        storage.save_data('{"o1s": 3, "o2s": 1}')
        storage.stop()
        
        with open(db_path, 'r', encoding='utf-8') as f:
            on_disk = json.load(f)
        assert on_disk == {'pullcounter': '{"o1s": 3, "o2s": 1}'}, f"Unexpected file content: {on_disk}"
        print("[OK] Saves written in order")
        
        # Other overlays' data in the same file is kept
        other = CounterStorage(str(db_path), overlay='raidboss')
        other.save_data('{"volume": 1}')
        other.stop()
        storage2 = CounterStorage(str(db_path))
        assert storage2.load_data() == '{"o1s": 3, "o2s": 1}'
        print("[OK] Persistence works")
        
        loaded = []
        done = threading.Event()
        
        def on_loaded(data):
            loaded.append(data)
            done.set()
        
        storage2.load_async(on_loaded)
        assert done.wait(timeout=5), "Async load should finish"
        assert loaded == ['{"o1s": 3, "o2s": 1}']
        print("[OK] Async load delivers payload")
        
        with open(db_path, 'w', encoding='utf-8') as f:
            f.write("{ this is not json")
        assert storage2.load_data() is None, "Corrupt file should load as no data"
        storage2.save_data('{"o3s": 2}')
        storage2.stop()
        assert storage2.load_data() == '{"o3s": 2}', "Save should replace a corrupt file"
        print("[OK] Corrupt file recovered")
        
        print("\n" + "=" * 60)
        print("All tests passed!")
        
    finally:
        shutil.rmtree(temp_dir)
        print(f"\nCleaned up temporary files: {temp_dir}")


def test_counts_survive_restart():
    """Counts saved by one session are loaded by the next."""
    temp_dir = Path(tempfile.mkdtemp())
    db_path = temp_dir / "pullcounts.json"
    party = [f"1000000{i}" for i in range(8)]
    
    try:
        storage = CounterStorage(str(db_path))
        counter = PullCounter(store=PullCounterStore(save_data=storage.save_data))
        counter.set_save_data(storage.load_data())
        counter.on_change_zone(ZoneId.DeltascapeV10Savage, "Deltascape V1.0 (Savage)")
        counter.on_party_change(party)
        for _ in range(3):
            counter.on_in_combat_change(True)
            counter.on_in_combat_change(False)
        counter.on_change_zone(ZoneId.DeltascapeV20Savage, "Deltascape V2.0 (Savage)")
        counter.on_in_combat_change(True)
        storage.stop()
        
        storage = CounterStorage(str(db_path))
        counter = PullCounter(store=PullCounterStore(save_data=storage.save_data))
        assert counter.set_save_data(storage.load_data()) is True
        assert counter.store.as_dict() == {'o1s': 3, 'o2s': 1}, f"Unexpected counts: {counter.store.as_dict()}"
        storage.stop()
        print("[OK] Counts survive restart")
    finally:
        shutil.rmtree(temp_dir)


if __name__ == "__main__":
    test_counter_storage()
    test_counts_survive_restart()
