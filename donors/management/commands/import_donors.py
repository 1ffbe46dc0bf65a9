# donors/management/commands/import_donors.py
"""
Django management command to seed the donor pool from a spreadsheet
Usage: python manage.py import_donors path/to/donors.csv
       python manage.py import_donors path/to/donors.xlsx
"""
from pathlib import Path

import pandas as pd
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from algorithms.blood_compatibility import BLOOD_TYPES
from algorithms.eligibility import clean_conditions
from donors.models import DonorProfile

User = get_user_model()

REQUIRED_COLUMNS = ['full_name', 'email', 'blood_type']


def _optional(value, cast=None):
    if pd.isna(value):
        return None
    return cast(value) if cast else value


def _parse_date(value):
    if pd.isna(value):
        return None
    return pd.to_datetime(value).date()


class Command(BaseCommand):
    help = 'Import donors from a CSV or Excel file'

    def add_arguments(self, parser):
        parser.add_argument('path', type=str, help='Path to the .csv or .xlsx file')
        parser.add_argument(
            '--unavailable', action='store_true',
            help='Import donors with availability switched off',
        )

    def read_frame(self, path):
        if path.suffix.lower() == '.csv':
            return pd.read_csv(path)
        return pd.read_excel(path)

    def handle(self, *args, **options):
        path = Path(options['path'])
        if not path.exists():
            raise CommandError(f'File not found: {path}')

        df = self.read_frame(path)
        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise CommandError(f'Missing columns: {", ".join(missing)}')

        df = df.dropna(subset=REQUIRED_COLUMNS)
        self.stdout.write(f'Found {len(df)} usable rows in {path.name}')

        created_count = updated_count = skipped_count = 0

        with transaction.atomic():
            for index, row in df.iterrows():
                line = index + 2  # header row + 1-based
                blood_type = str(row['blood_type']).strip().upper()
                if blood_type not in BLOOD_TYPES:
                    self.stdout.write(self.style.WARNING(f'Skipping row {line}: invalid blood type {blood_type}'))
                    skipped_count += 1
                    continue

                try:
                    last_donation = _parse_date(row.get('last_donation_date'))
                    date_of_birth = _parse_date(row.get('date_of_birth'))
                except (ValueError, TypeError) as e:
                    self.stdout.write(self.style.WARNING(f'Skipping row {line}: bad date ({e})'))
                    skipped_count += 1
                    continue

                email = str(row['email']).strip().lower()
                user, user_created = User.objects.get_or_create(
                    email=email,
                    defaults={
                        'username': email.split('@')[0][:150],
                        'role': row.get('role') if row.get('role') in ('donor', 'both') else 'donor',
                    }
                )
                if user_created:
                    # Imported donors set their own password through the reset flow
                    user.set_unusable_password()
                    user.save()

                conditions = row.get('health_conditions')
                _, created = DonorProfile.objects.update_or_create(
                    user=user,
                    defaults={
                        'full_name': row['full_name'],
                        'blood_type': blood_type,
                        'address': _optional(row.get('address'), str) or '',
                        'city': _optional(row.get('city'), str) or '',
                        'latitude': _optional(row.get('latitude'), float),
                        'longitude': _optional(row.get('longitude'), float),
                        'weight_kg': _optional(row.get('weight_kg'), float),
                        'date_of_birth': date_of_birth,
                        'last_donation_date': last_donation,
                        'health_conditions': clean_conditions(None if pd.isna(conditions) else str(conditions)),
                        'is_available': not options['unavailable'],
                    }
                )
                if created:
                    created_count += 1
                else:
                    updated_count += 1

        self.stdout.write(self.style.SUCCESS(
            f'Import complete: {created_count} created, {updated_count} updated, {skipped_count} skipped'
        ))
