"""Learning engine (normalizer, matcher, scheduler, composer) and services."""
