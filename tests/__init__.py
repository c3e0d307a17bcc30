"""
Test suite for the taskboard client.

This package contains:
- unit/: data model tests (models, validation, view helpers, in-memory
  repository, session store) with no HTTP involved
- integration/: gateway, remote repository and remote auth against a fake
  task API, plus Flask view flows in demo and remote mode
- security/: output encoding and session-cookie hardening checks
"""
