#!/usr/bin/env python
"""
Test runner script for comprehensive test execution and coverage
Usage (from the repo root): python Doc/run_tests.py  or  python manage.py test
"""
import os
import sys

import django
from django.conf import settings
from django.test.utils import get_runner

if __name__ == "__main__":
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gearops.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests([
        'gearops.core',
        'gearops.parties',
        'gearops.catalog',
        'gearops.inventory',
        'gearops.inspections',
        'gearops.purchasing',
        'gearops.consignment',
        'gearops.logistics',
        'gearops.webhooks',
        'gearops.reports',
    ])
    sys.exit(bool(failures))
