#!/usr/bin/env python
"""
Quick local setup.

This script:
1. Configures Django settings
2. Creates the SQLite database
3. Runs migrations
4. Seeds the default members and categories
5. Optionally files a few sample complaints through the use cases

Usage:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data
"""

import os
import sys
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def setup_django():
    """Configures Django for standalone use (SQLite)."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')
    os.environ.pop('DATABASE_URL', None)

    import django
    django.setup()


def check_connection():
    from django.db import connection

    print("Checking database connection...")

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        print("Connection OK")
        return True
    except Exception as e:
        print(f"Connection error: {e}")
        return False


def run_migrations_and_seed():
    from django.core.management import call_command

    print("Running migrations...")
    call_command('migrate', verbosity=1)

    print("Seeding defaults...")
    call_command('seed_defaults')


def create_sample_data():
    """Files sample complaints as the seeded student and routes one of them."""
    from src.adapters.django_app.complaints.models import CategoryModel, MemberModel
    from src.config.container import get_container
    from src.core.complaints.dtos import AssignComplaintInputDTO, CreateComplaintInputDTO
    from src.core.shared.identity import Caller

    container = get_container()
    student = MemberModel.objects.get(email='student@haramaya.edu.et')
    staff = MemberModel.objects.get(email='staff@haramaya.edu.et')
    admin = MemberModel.objects.filter(role='admin').first()
    categories = {c.name: c.id for c in CategoryModel.objects.all()}

    samples = [
        ('WiFi down in Block 4 dormitory', 'No internet connection for three days in Block 4.', 'IT Services', 'high'),
        ('Grade not published for CS301', 'The final grade for CS301 is still missing on the portal.', 'Academic Issues', 'medium'),
        ('Broken projector in Lab 2', 'The projector in Lab 2 has not worked since last week.', 'Infrastructure & Facilities', 'low'),
    ]

    student_caller = Caller.of(student.id, 'student')
    created = []
    for title, description, category, priority in samples:
        output = container.create_complaint_service().execute(
            CreateComplaintInputDTO(
                caller=student_caller,
                title=title,
                description=description,
                category_id=categories[category],
                priority=priority,
            )
        )
        created.append(output)
        print(f"   {output.ticket_id} {title}")

    if admin and created:
        container.assign_complaint_service().execute(
            AssignComplaintInputDTO(
                complaint_id=created[0].id,
                caller=Caller.of(admin.id, 'admin'),
                assignee_id=staff.id,
            )
        )
        print(f"   {created[0].ticket_id} assigned to {staff.name}")


def show_info():
    from django.conf import settings

    print("\n" + "=" * 60)
    print("Setup information")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Event publisher: {settings.EVENT_PUBLISHER_MODE}")
    print("=" * 60)
    print("\nNext steps:")
    print("   1. python manage.py runserver")
    print("   2. curl -H 'X-User-Id: <id>' -H 'X-User-Role: admin' http://localhost:8000/api/complaints/")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Quick local setup')
    parser.add_argument(
        '--with-sample-data',
        action='store_true',
        help='File sample complaints'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Only check the database connection'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("VoiceHU - Quick Setup")
    print("=" * 60 + "\n")

    setup_django()

    if args.check_only:
        check_connection()
        return

    if not check_connection():
        return

    run_migrations_and_seed()

    if args.with_sample_data:
        create_sample_data()

    show_info()


if __name__ == '__main__':
    main()
