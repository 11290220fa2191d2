import logging

from django.core.management.base import BaseCommand

from tasks.repository import TaskRepository

logger = logging.getLogger(__name__)

CATEGORIES = [
    {"name": "Inventory", "color": "#3b82f6", "icon": "package"},
    {"name": "Restocking", "color": "#10b981", "icon": "refresh-cw"},
    {"name": "Display", "color": "#f59e0b", "icon": "layout"},
    {"name": "Seasonal", "color": "#8b5cf6", "icon": "calendar"},
    {"name": "Operations", "color": "#ef4444", "icon": "settings"},
    {"name": "Customer Service", "color": "#ec4899", "icon": "users"},
]


class Command(BaseCommand):
    help = "Delete every task and category, then create the default store categories."

    def handle(self, *args, **options):
        repository = TaskRepository()
        logger.info("Seeding database...")

        deleted = repository.delete_all()
        logger.info("Removed %(tasks)d tasks and %(categories)d categories", deleted)

        for category in CATEGORIES:
            repository.create_category(**category)
            self.stdout.write(f"Created category: {category['name']}")

        self.stdout.write(self.style.SUCCESS("Seed completed successfully!"))
