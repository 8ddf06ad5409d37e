# caffeine_tracker/demo/seed_demo_data.py

from datetime import datetime, timedelta
from caffeine_tracker.storage.gateway import SqliteGateway
from caffeine_tracker.storage.repository import IntakeLedger

now = datetime.now()
ledger = IntakeLedger(SqliteGateway())

doses = [
    (95, now - timedelta(days=2, hours=3)),
    (150, now - timedelta(days=1, hours=5)),
    (200, now - timedelta(days=1, hours=1)),
    (95, now - timedelta(hours=6)),
    (80, now - timedelta(hours=2)),  # afternoon cola
]

for amount, at in doses:
    ledger.record(amount, at=at)

print("Demo intake data inserted")
