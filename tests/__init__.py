"""
Test package for the Dose Tracker application.

This package contains tests for the various components of the application:
- test_recurrence.py: Tests for expanding schedules into dose instants
- test_dose_id.py: Tests for the opaque dose id codec
- test_dose_service.py: Tests for dose listing and mark-taken with mocked collaborators
- test_repositories.py: Tests for the SQLAlchemy collaborators
- test_routes.py: Tests for the JSON dose routes
- test_schedule_validation.py: Tests for schedule field validation
- test_timezone_manager.py: Tests for wall-clock conversion and DST handling
- test_models.py: Tests for model lifecycle helpers
"""
