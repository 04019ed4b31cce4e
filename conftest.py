import os

from hypothesis import HealthCheck, settings

# Default profile: balanced speed and coverage
settings.register_profile("default", max_examples=200, deadline=None)

# CI profile: more examples, reproducible
settings.register_profile(
    "ci",
    max_examples=1000,
    deadline=None,
    derandomize=True,
    suppress_health_check=[HealthCheck.too_slow],
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))
