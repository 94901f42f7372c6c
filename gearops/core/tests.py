"""
Test suite for the core module
Tests: authentication, roles, users, settings, activity log, validators
"""
from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from rest_framework import status
from gearops.core.models import ActivityLog, Setting
from gearops.core.permissions import (
    ADMIN, MANAGER, STAFF, get_user_role, has_permission, is_admin_user,
)
from gearops.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gearops.core.tokens import generate_token
from gearops.core.utils import check_admin_credentials, create_activity_log
from gearops.core.validators import (
    extract_dob_from_sa_id, format_sa_phone, validate_client_identity, validate_phone_number,
    validate_sa_id,
)


class AuthenticationTests(TestCase):
    """Test JWT login and the current-user endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='floor', password='testpass123', role=STAFF)
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'floor', 'password': 'testpass123'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'floor')

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'floor', 'password': 'nope'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_reports_role_flags(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], STAFF)
        self.assertFalse(response.data['is_admin'])
        self.assertFalse(response.data['can_manage_calendar'])


class RoleTests(TestCase):
    """Test the role hierarchy"""

    def test_superuser_is_admin(self):
        user = TestDataFactory.create_user(is_superuser=True)
        self.assertEqual(get_user_role(user), ADMIN)
        self.assertTrue(is_admin_user(user))

    def test_user_without_group_is_staff(self):
        self.assertEqual(get_user_role(TestDataFactory.create_user()), STAFF)

    def test_highest_group_wins(self):
        user = TestDataFactory.create_user(role=STAFF)
        user.groups.add(TestDataFactory.create_user(role=MANAGER).groups.first())
        self.assertEqual(get_user_role(user), MANAGER)

    def test_anonymous_has_no_role(self):
        self.assertIsNone(get_user_role(AnonymousUser()))

    def test_hierarchy(self):
        self.assertTrue(has_permission(ADMIN, MANAGER))
        self.assertTrue(has_permission(MANAGER, MANAGER))
        self.assertFalse(has_permission(STAFF, MANAGER))
        self.assertFalse(has_permission(None, STAFF))


class UserManagementTests(TestCase):
    """Test admin-only user and setting endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(role=ADMIN)
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.client = AuthenticatedAPIClient()

    def test_staff_cannot_list_users(self):
        self.client.authenticate_user(self.staff)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_manager(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/users/', {
            'username': 'newmanager',
            'email': 'newmanager@test.com',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
            'role': MANAGER,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], MANAGER)

    def test_filter_users_by_role(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/?role=STAFF')
        self.assertEqual([user['id'] for user in response.data], [self.staff.id])
        response = self.client.get('/api/v1/users/?role=OWNER')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_promote_staff_to_manager(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/users/{self.staff.id}/', {'role': MANAGER}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], MANAGER)
        self.assertEqual(list(self.staff.groups.values_list('name', flat=True)), ['Manager'])

    def test_admin_cannot_demote_self(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/users/{self.admin.id}/', {'role': STAFF}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(get_user_role(self.admin), ADMIN)

    def test_admin_cannot_delete_self(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_setting_crud(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/settings/', {'key': 'store_name', 'value': 'GearOps'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        setting_id = response.data['id']
        response = self.client.patch(f'/api/v1/settings/{setting_id}/', {'value': 'GearOps CPT'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Setting.objects.get(pk=setting_id).value, 'GearOps CPT')


class ActivityLogTests(TestCase):
    """Test activity logging and the paginated log endpoint"""

    def setUp(self):
        self.manager = TestDataFactory.create_user(role=MANAGER)
        self.client = AuthenticatedAPIClient()

    def test_create_activity_log_with_user(self):
        log = create_activity_log(action='CREATED_EQUIPMENT', entity_type='EQUIPMENT', entity_id=5,
                                  details={'sku': 'CAN-1'}, user=self.manager)
        self.assertIsNotNone(log)
        self.assertEqual(log.entity_id, '5')
        self.assertEqual(log.user, self.manager)

    def test_create_activity_log_skips_missing_fields(self):
        self.assertIsNone(create_activity_log(action='CREATED_EQUIPMENT', entity_type=None, entity_id=1))
        self.assertEqual(ActivityLog.objects.count(), 0)

    def test_anonymous_user_is_stored_as_null(self):
        log = create_activity_log(action='QUOTE_ACCEPTED', entity_type='PENDING_PURCHASE', entity_id=1,
                                  user=AnonymousUser())
        self.assertIsNone(log.user)

    def test_log_list_is_paginated(self):
        for i in range(3):
            create_activity_log(action='CREATED_EQUIPMENT', entity_type='EQUIPMENT', entity_id=i)
        self.client.authenticate_user(self.manager)
        response = self.client.get('/api/v1/activity-logs/?limit=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['total_pages'], 2)

    def test_staff_cannot_read_log(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=STAFF))
        response = self.client.get('/api/v1/activity-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AdminCredentialTests(TestCase):

    def test_valid_admin(self):
        admin = TestDataFactory.create_user(role=ADMIN, password='adminpass1')
        self.assertEqual(check_admin_credentials(admin.id, 'adminpass1'), admin)

    def test_wrong_password_or_not_admin(self):
        admin = TestDataFactory.create_user(role=ADMIN, password='adminpass1')
        manager = TestDataFactory.create_user(role=MANAGER, password='managerpass1')
        self.assertIsNone(check_admin_credentials(admin.id, 'wrong'))
        self.assertIsNone(check_admin_credentials(manager.id, 'managerpass1'))
        self.assertIsNone(check_admin_credentials(None, 'x'))


class ValidatorTests(TestCase):

    def test_sa_id(self):
        self.assertTrue(validate_sa_id('8001015009087'))
        self.assertTrue(validate_sa_id('800101 5009 087'))
        self.assertFalse(validate_sa_id('8001015009088'))
        self.assertFalse(validate_sa_id('8013015009087'))
        self.assertFalse(validate_sa_id('12345'))

    def test_dob_from_id(self):
        dob = extract_dob_from_sa_id('8001015009087')
        self.assertEqual((dob.year, dob.month, dob.day), (1980, 1, 1))
        self.assertIsNone(extract_dob_from_sa_id('not-an-id'))

    def test_identity_requires_id_or_passport(self):
        self.assertFalse(validate_client_identity()[0])
        self.assertTrue(validate_client_identity(passport_number='A1234567')[0])
        self.assertEqual(validate_client_identity(id_number='123')[1], 'Invalid South African ID number')

    def test_phone_numbers(self):
        self.assertTrue(validate_phone_number('082 123 4567')[0])
        self.assertTrue(validate_phone_number('+27821234567')[0])
        self.assertTrue(validate_phone_number('+447911123456')[0])
        self.assertFalse(validate_phone_number('12')[0])
        self.assertEqual(format_sa_phone('0821234567'), '+27 82 123 4567')

    def test_token_shape(self):
        token = generate_token()
        self.assertEqual(len(token), 64)
        self.assertNotEqual(token, generate_token())
