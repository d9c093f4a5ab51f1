"""Attendance exception requests.

Feature modules (workflows, schedules, requests, approvals, ...) each hold a
model, a repository Protocol with its MySQL implementation, a service with
the business rules and, where exposed over HTTP, a thin Flask controller.
"""
