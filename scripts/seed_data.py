"""
Data Seeder for TaskFlow.
Populates a task list with realistic data for testing and demo purposes.
"""

import sys
import random
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskflow.domain import Category, Priority, Status
from taskflow.infra.config import get_settings
from taskflow.infra.repository import create_persistence
from taskflow.services import TaskStore

SEED_TASKS = [
    ("Quarterly planning", Category.WORK, Priority.HIGH),
    ("Code review backlog", Category.WORK, Priority.MEDIUM),
    ("Read chapter 4", Category.STUDY, Priority.MEDIUM),
    ("Flashcards", Category.STUDY, Priority.LOW),
    ("Morning run", Category.HEALTH, Priority.MEDIUM),
    ("Book dentist appointment", Category.HEALTH, Priority.HIGH),
    ("Renew passport", Category.PERSONAL, Priority.HIGH),
    ("Sort photos", Category.PERSONAL, Priority.LOW),
]


def seed():
    settings = get_settings()
    now = datetime.now()
    created_at = now

    # The clock reads created_at late, so each task below gets its own creation time
    store = TaskStore(create_persistence(settings), namespace=settings.namespace,
                      clock=lambda: created_at)
    existing_titles = {t.title for t in store.list()}

    print(f"Seeding task list '{settings.namespace}'...")
    for title, category, priority in SEED_TASKS:
        if title in existing_titles:
            print(f"Task exists: {title}")
            continue

        # Spread creation over the last five weeks, so weekly/monthly counts differ
        created_at = now - timedelta(days=random.randint(0, 35))
        status = random.choice(list(Status))
        time_spent = 0 if status == Status.TODO else random.randint(5, 240)

        task = store.create({
            "title": title,
            "description": f"Seeded {category.value} task",
            "category": category,
            "priority": priority,
            "status": status,
            "time_spent": time_spent,
            "due_date": now + timedelta(days=random.randint(1, 30)),
        })
        print(f"Created task: {task.title} ({status.value}, {time_spent} min)")

    print("Seeding complete.")


if __name__ == "__main__":
    seed()
