from django.core.management.base import BaseCommand
from django.contrib.auth.models import Group, Permission

from gearops.core.permissions import ROLE_GROUPS, ADMIN, MANAGER, STAFF


class Command(BaseCommand):
    help = 'Create the role groups used for access control: Admin, Manager, Staff'

    def handle(self, *args, **options):
        groups_config = [
            {
                'role': ADMIN,
                'description': 'Owners - full access including webhook review, user management and reopening locked inspections',
            },
            {
                'role': MANAGER,
                'description': 'Managers - catalog, calendar and consignment changes on top of staff access',
            },
            {
                'role': STAFF,
                'description': 'Floor staff - intake, inspections, repairs and incoming gear',
            },
        ]

        created_count = 0
        updated_count = 0

        for group_config in groups_config:
            name = ROLE_GROUPS[group_config['role']]
            group, created = Group.objects.get_or_create(name=name)

            if created:
                self.stdout.write(self.style.SUCCESS(f'Created group: {name}'))
                created_count += 1
            else:
                self.stdout.write(f'  Group already exists: {name}')
                updated_count += 1

            if group_config['role'] == ADMIN:
                group.permissions.set(Permission.objects.all())
                self.stdout.write('  Added all permissions to Admin group')
            elif group_config['role'] == MANAGER:
                group.permissions.set(
                    Permission.objects.exclude(content_type__app_label__in=['admin', 'auth'])
                )
                self.stdout.write('  Added module permissions to Manager group')
            else:
                self.stdout.write(f'  {group_config["description"]}')

        self.stdout.write(self.style.SUCCESS(
            f'\nCompleted: {created_count} groups created, {updated_count} groups already existed'
        ))
