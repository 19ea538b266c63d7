"""
Seeds the default members and categories.

Usage:
    python manage.py seed_defaults

Idempotent: members are matched by e-mail, categories by name. The admin
receives a welcome notification the first time it is created.
"""

import uuid

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction

from src.adapters.django_app.complaints.models import CategoryModel, MemberModel, RoleChoices
from src.core.notifications.entities import NotificationType

DEFAULT_MEMBERS = [
    {
        'email': 'staff@haramaya.edu.et',
        'name': 'Dr. Abebe Kebede',
        'role': RoleChoices.STAFF,
        'department': 'Computer Science',
    },
    {
        'email': 'student@haramaya.edu.et',
        'name': 'Kenenisa Bekele',
        'role': RoleChoices.STUDENT,
        'department': 'Software Engineering',
        'student_id': 'UGR/25634/14',
    },
]

DEFAULT_CATEGORIES = [
    {
        'name': 'Academic Issues',
        'description': 'Complaints related to courses, grading, academic policies, and curriculum.',
        'icon': '📚',
        'color': '#6366f1',
    },
    {
        'name': 'Faculty & Teaching',
        'description': 'Complaints about teaching quality, faculty behavior, and class management.',
        'icon': '👨‍🏫',
        'color': '#8b5cf6',
    },
    {
        'name': 'Infrastructure & Facilities',
        'description': 'Issues with classrooms, labs, equipment, internet, and campus facilities.',
        'icon': '🏗️',
        'color': '#ec4899',
    },
    {
        'name': 'Library Services',
        'description': 'Complaints about library resources, access, and services.',
        'icon': '📖',
        'color': '#14b8a6',
    },
    {
        'name': 'IT Services',
        'description': 'Technical issues with university IT systems, WiFi, and software.',
        'icon': '💻',
        'color': '#f59e0b',
    },
    {
        'name': 'Administrative Services',
        'description': 'Issues with registration, documentation, and administrative processes.',
        'icon': '🏛️',
        'color': '#ef4444',
    },
    {
        'name': 'Student Services',
        'description': 'Complaints about dining, dormitory, health services, and student support.',
        'icon': '🎓',
        'color': '#10b981',
    },
    {
        'name': 'Safety & Security',
        'description': 'Safety concerns, harassment, and security-related issues.',
        'icon': '🛡️',
        'color': '#f97316',
    },
    {
        'name': 'Other',
        'description': 'General complaints and suggestions that do not fit other categories.',
        'icon': '📝',
        'color': '#64748b',
    },
]

WELCOME_TITLE = 'Welcome to VoiceHU'
WELCOME_MESSAGE = 'Your administrator account is ready. New complaints will show up here.'


class Command(BaseCommand):
    help = 'Creates the default admin, staff and student members and the default categories.'

    def handle(self, *args, **options):
        with transaction.atomic():
            admin, admin_created = self._ensure_member({
                'email': settings.ADMIN_EMAIL,
                'name': settings.ADMIN_NAME,
                'role': RoleChoices.ADMIN,
                'department': 'Computer Science',
            })
            for member in DEFAULT_MEMBERS:
                self._ensure_member(member)

            for category in DEFAULT_CATEGORIES:
                self._ensure_category(category)

        if admin_created:
            self._welcome(admin)

        self.stdout.write(self.style.SUCCESS('Seeding complete.'))

    def _ensure_member(self, data: dict):
        defaults = {k: v for k, v in data.items() if k != 'email'}
        defaults['id'] = str(uuid.uuid4())
        member, created = MemberModel.objects.get_or_create(email=data['email'], defaults=defaults)

        label = f"{member.role} {member.email}"
        self.stdout.write(f"{'Created' if created else 'Exists'}: {label}")
        return member, created

    def _ensure_category(self, data: dict):
        defaults = {k: v for k, v in data.items() if k != 'name'}
        defaults['id'] = str(uuid.uuid4())
        category, created = CategoryModel.objects.get_or_create(name=data['name'], defaults=defaults)

        self.stdout.write(f"{'Created' if created else 'Exists'}: category \"{category.name}\"")
        return category, created

    def _welcome(self, admin: MemberModel) -> None:
        from src.config.container import get_container

        get_container().notification_dispatcher().notify(
            recipient_id=admin.id,
            title=WELCOME_TITLE,
            message=WELCOME_MESSAGE,
            type=NotificationType.SYSTEM,
        )
