"""HTTP API for BrewQC."""
