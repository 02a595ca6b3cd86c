"""Command-line sampler for tempmon."""
