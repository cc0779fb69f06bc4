"""Derived views: read-only views for console UI consumption.

The UI must ONLY read from these views, never from the raw session payload
(the raw record is passed through separately for the raw-data panel).
Views are pure functions of the latest fetched record and are rebuilt on
every request.
"""
