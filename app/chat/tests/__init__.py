"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Constraints on conversations, pairs, participants, messages
- test_services.py: Resolver, provisioner and ledger services
- test_views.py: REST API endpoint tests
- test_consumers.py: WebSocket gateway tests
- test_frames.py / test_directory.py: Frame parsing, connection directory
- test_tasks.py / test_middleware.py: Celery provisioning, socket JWT auth

Usage:
    pytest chat/tests/
    pytest chat/tests/test_consumers.py
"""
