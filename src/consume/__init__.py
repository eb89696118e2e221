"""Queue consumer.

This package applies queued rows to the users table per environment
and deletes each message once its upsert succeeded.
"""
