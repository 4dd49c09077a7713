"""Staff Provisioning Package — admin-only staff account provisioning endpoint.

Invariants:
    - Package root holds no executable code beyond the version constant
"""

__version__ = "1.0.0"
