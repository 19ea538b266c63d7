"""Complaints app: complaints, categories, members and the event store."""
