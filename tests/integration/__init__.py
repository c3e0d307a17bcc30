"""
Integration test package for the taskboard client.

Tests here cross an HTTP boundary, either a monkeypatched
``requests.request`` standing in for the task API or the Flask test
client, and demonstrate:
- Bearer-token and 401 handling in the gateway
- Wire-format contracts of the remote repository and auth backend
- Login, dashboard and task-action flows in both modes
"""
