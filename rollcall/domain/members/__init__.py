"""
Members Domain

Read-side collaborator used by schedules and attendance: resolves member
groups to their current member IDs and looks up members within a tenant.
Member and group management endpoints live outside this service.
"""
