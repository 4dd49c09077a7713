"""Root conftest — shared test configuration."""

import os

# Ensure tests never talk to a real backend
os.environ.setdefault("SUPABASE_URL", "https://backend.test")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-test-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-test-key")
os.environ.setdefault("LOG_FORMAT", "text")
